"""
Notification Schemas

Pydantic models for the notification feed and for delivery reporting.

Feed Levels:
-----------
1. LEVEL ONE: one summary entry per parent notification (count, actors,
   post thumbnail, translation key for the front end)
2. LEVEL TWO: the expanded detail shown after opening a level one entry
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field

from journal_api.models import NotificationType, NotificationReadStatus
from journal_api.schemas.user import UserSummary


# ============================================================
# DELIVERY REPORTING
# ============================================================

class DeliveryChannel(str, Enum):
    """Channel a notification went out on."""
    IN_APP = "in_app"
    EMAIL = "email"


class DeliveryOutcome(BaseModel):
    """Result of delivering one notification to one recipient on one channel."""
    recipient_id: UUID
    channel: DeliveryChannel
    delivered: bool
    error: Optional[str] = None


class DeliveryReport(BaseModel):
    """
    Per-recipient results of a fan-out.

    A failed email never fails the mutation that triggered it; it shows
    up here instead.
    """
    outcomes: List[DeliveryOutcome] = Field(default_factory=list)

    @property
    def recipient_ids(self) -> List[UUID]:
        seen = []
        for outcome in self.outcomes:
            if outcome.recipient_id not in seen:
                seen.append(outcome.recipient_id)
        return seen

    @property
    def failed(self) -> List[DeliveryOutcome]:
        return [o for o in self.outcomes if not o.delivered]

    @property
    def delivered_count(self) -> int:
        return len(self.outcomes) - len(self.failed)


# ============================================================
# SHARED PIECES
# ============================================================

class PostSummary(BaseModel):
    id: UUID
    title: str
    headline_image_url: Optional[str] = None
    author: Optional[UserSummary] = None


class ThreadSummary(BaseModel):
    id: UUID
    highlighted_content: str


class CommentItem(BaseModel):
    id: UUID
    body: str
    author: UserSummary
    link: str


class ThanksItem(BaseModel):
    id: UUID
    comment_id: UUID
    comment_body: str


class ThreadGroup(BaseModel):
    """Events of one thread, in arrival order."""
    thread: ThreadSummary
    comments: List[CommentItem] = Field(default_factory=list)
    thanks: List[ThanksItem] = Field(default_factory=list)


# ============================================================
# FEED ENTRIES
# ============================================================

class LevelOneNotification(BaseModel):
    """One row of the notification feed."""
    id: UUID
    type: NotificationType
    read_status: NotificationReadStatus
    count: int
    translation_key: str
    occurred_at: datetime
    is_post_author: bool = False
    post: Optional[PostSummary] = None
    actors: List[UserSummary] = Field(
        default_factory=list,
        description="Distinct users behind the events, in arrival order"
    )


class LevelTwoNotification(BaseModel):
    """Expanded view of one notification."""
    id: UUID
    type: NotificationType
    read_status: NotificationReadStatus
    count: int
    translation_key: str
    post: Optional[PostSummary] = None
    triggering_user: Optional[UserSummary] = None
    thread_groups: List[ThreadGroup] = Field(default_factory=list)
    comments: List[CommentItem] = Field(default_factory=list)
    users: List[UserSummary] = Field(default_factory=list)
    posts: List[PostSummary] = Field(default_factory=list)


class NotificationStateResponse(BaseModel):
    """Response after a mark-read."""
    id: UUID
    read_status: NotificationReadStatus
    read_at: Optional[datetime] = None
    changed: bool


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkAllReadResponse(BaseModel):
    marked: int
