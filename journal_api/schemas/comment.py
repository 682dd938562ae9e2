"""
Thread and Comment Schemas

Pydantic models for threads, thread comments and post comments.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from journal_api.models import LanguageLevel
from journal_api.schemas.user import UserSummary
from journal_api.schemas.notification import DeliveryReport


# ============================================================
# REQUEST SCHEMAS
# ============================================================

class ThreadCreate(BaseModel):
    """
    Request to open a thread on a highlighted span of a post.
    """
    post_id: UUID
    start_index: int = Field(..., ge=0)
    end_index: int = Field(..., ge=0)
    highlighted_content: str = Field(..., min_length=1, max_length=5000)

    @model_validator(mode="after")
    def validate_range(self):
        if self.end_index < self.start_index:
            raise ValueError("end_index must not be before start_index")
        return self


class CommentBody(BaseModel):
    """Body of a new or edited comment."""
    body: str = Field(
        ...,
        min_length=1,
        max_length=10000,
        description="Comment text (markdown)"
    )

    @field_validator("body")
    @classmethod
    def validate_body(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Comment cannot be empty")
        return v


# ============================================================
# RESPONSE SCHEMAS
# ============================================================

class ThreadResponse(BaseModel):
    id: UUID
    post_id: UUID
    start_index: int
    end_index: int
    highlighted_content: str
    archived: bool
    created_at: datetime

    class Config:
        from_attributes = True


class CommentResponse(BaseModel):
    id: UUID
    thread_id: UUID
    body: str
    author: UserSummary
    author_language_level: LanguageLevel
    created_at: datetime

    # Only set on creation
    delivery: Optional[DeliveryReport] = None

    class Config:
        from_attributes = True


class PostCommentResponse(BaseModel):
    id: UUID
    post_id: UUID
    body: str
    author: UserSummary
    author_language_level: LanguageLevel
    created_at: datetime

    delivery: Optional[DeliveryReport] = None

    class Config:
        from_attributes = True
