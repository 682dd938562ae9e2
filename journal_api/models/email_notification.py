import enum

from sqlalchemy import Column, ForeignKey, Enum, Text, Uuid
from sqlalchemy.orm import relationship
from .base import BaseModel, UTCDateTime


class EmailNotificationType(enum.Enum):
    THREAD_COMMENT = "thread_comment"
    POST_COMMENT = "post_comment"
    NEW_POST = "new_post"


class EmailDeliveryStatus(enum.Enum):
    PENDING = "pending"  # written, waiting for the worker
    SENT = "sent"
    FAILED = "failed"


class EmailNotification(BaseModel):
    """An email queued for one recipient; the worker renders and sends it."""
    __tablename__ = "email_notifications"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(
        Enum(EmailNotificationType, name="email_notification_type", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    status = Column(
        Enum(EmailDeliveryStatus, name="email_delivery_status", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=EmailDeliveryStatus.PENDING,
        index=True,
    )
    comment_id = Column(Uuid(as_uuid=True), ForeignKey("comments.id", ondelete="SET NULL"), nullable=True)
    post_comment_id = Column(Uuid(as_uuid=True), ForeignKey("post_comments.id", ondelete="SET NULL"), nullable=True)
    post_id = Column(Uuid(as_uuid=True), ForeignKey("posts.id", ondelete="SET NULL"), nullable=True)
    error = Column(Text, nullable=True)
    sent_at = Column(UTCDateTime(), nullable=True)

    user = relationship("User")
    comment = relationship("Comment")
    post_comment = relationship("PostComment")
    post = relationship("Post")
