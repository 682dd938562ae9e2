"""
Subscription Models

A subscription enrolls a user to hear about new activity:
- ThreadSubscription: new comments in a thread
- PostCommentSubscription: new post-level comments on a post

Both are unique per natural key and are only ever upserted.
"""

from sqlalchemy import Column, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from journal_api.models.base import BaseModel


class ThreadSubscription(BaseModel):
    __tablename__ = "thread_subscriptions"
    __table_args__ = (
        UniqueConstraint("user_id", "thread_id", name="uq_thread_subscription_user_thread"),
    )

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    thread_id = Column(Uuid(as_uuid=True), ForeignKey("threads.id", ondelete="CASCADE"), nullable=False, index=True)

    user = relationship("User")
    thread = relationship("Thread", back_populates="subscriptions")


class PostCommentSubscription(BaseModel):
    __tablename__ = "post_comment_subscriptions"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_post_comment_subscription_user_post"),
    )

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    post_id = Column(Uuid(as_uuid=True), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)

    user = relationship("User")
    post = relationship("Post", back_populates="post_comment_subscriptions")
