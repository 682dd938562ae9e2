"""
Social Schemas

Posts, claps, thanks and follows: the remaining events that feed the
notification system.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from journal_api.schemas.notification import DeliveryReport
from journal_api.schemas.user import UserSummary


class PostCreate(BaseModel):
    language_id: UUID
    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(default="", max_length=100000)
    headline_image_url: Optional[str] = Field(None, max_length=500)


class PostResponse(BaseModel):
    id: UUID
    author_id: UUID
    language_id: UUID
    title: str
    body: str
    headline_image_url: Optional[str] = None
    created_at: datetime

    delivery: Optional[DeliveryReport] = None

    class Config:
        from_attributes = True


class ThanksResponse(BaseModel):
    id: UUID
    comment_id: UUID
    author_id: UUID
    created_at: datetime

    delivery: Optional[DeliveryReport] = None

    class Config:
        from_attributes = True


class ClapResponse(BaseModel):
    id: UUID
    post_id: UUID
    author_id: UUID
    created_at: datetime

    delivery: Optional[DeliveryReport] = None

    class Config:
        from_attributes = True


class FollowResponse(BaseModel):
    follower_id: UUID
    following_id: UUID

    delivery: Optional[DeliveryReport] = None


class ProfileResponse(BaseModel):
    """A user's public page: who they are and what they have written."""

    user: UserSummary
    posts: List[PostResponse]
    is_logged_in_user: bool  # the caller is looking at their own profile
