"""
Notification Models

In-app notifications are stored as one parent row per
(recipient, type, context key) plus one sub-notification row per event
folded into it:

    InAppNotification (THREAD_COMMENT, post=P)
        ├── ThreadCommentNotification (comment=C1)
        └── ThreadCommentNotification (comment=C2)

Sub-notification references use SET NULL so deleting the underlying
record never retracts a notification that was already delivered.
"""

import enum

from sqlalchemy import Column, ForeignKey, Enum, Uuid
from sqlalchemy.orm import relationship

from journal_api.models.base import BaseModel, UTCDateTime, utcnow


class NotificationType(enum.Enum):
    THREAD_COMMENT = "thread_comment"
    POST_COMMENT = "post_comment"
    POST_CLAP = "post_clap"
    THREAD_COMMENT_THANKS = "thread_comment_thanks"
    NEW_POST = "new_post"
    NEW_FOLLOWER = "new_follower"


class NotificationReadStatus(enum.Enum):
    UNREAD = "unread"
    READ = "read"


class InAppNotification(BaseModel):
    """
    Parent notification shown as one entry in the feed.

    Attributes:
        user_id: Recipient
        type: NotificationType
        read_status: UNREAD until the recipient marks it read
        post_id: Context key for post scoped types
        triggering_user_id: Context key for thanks (the thanking user)
        bumped_at: Time of the latest event folded into this row
        read_at: When it was marked read
    """
    __tablename__ = "in_app_notifications"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(
        Enum(NotificationType, name="notification_type", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        index=True,
    )
    read_status = Column(
        Enum(NotificationReadStatus, name="notification_read_status", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=NotificationReadStatus.UNREAD,
        index=True,
    )
    post_id = Column(Uuid(as_uuid=True), ForeignKey("posts.id", ondelete="SET NULL"), nullable=True, index=True)
    triggering_user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    bumped_at = Column(UTCDateTime(), default=utcnow, nullable=False, index=True)
    read_at = Column(UTCDateTime(), nullable=True)

    user = relationship("User", foreign_keys=[user_id])
    post = relationship("Post")
    triggering_user = relationship("User", foreign_keys=[triggering_user_id])

    thread_comment_notifications = relationship(
        "ThreadCommentNotification",
        order_by="ThreadCommentNotification.created_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    post_comment_notifications = relationship(
        "PostCommentNotification",
        order_by="PostCommentNotification.created_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    post_clap_notifications = relationship(
        "PostClapNotification",
        order_by="PostClapNotification.created_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    thread_comment_thanks_notifications = relationship(
        "ThreadCommentThanksNotification",
        order_by="ThreadCommentThanksNotification.created_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    new_post_notifications = relationship(
        "NewPostNotification",
        order_by="NewPostNotification.created_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    new_follower_notifications = relationship(
        "NewFollowerNotification",
        order_by="NewFollowerNotification.created_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_read(self) -> bool:
        return self.read_status == NotificationReadStatus.READ


def _parent_fk():
    return Column(
        Uuid(as_uuid=True),
        ForeignKey("in_app_notifications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


class ThreadCommentNotification(BaseModel):
    __tablename__ = "thread_comment_notifications"

    notification_id = _parent_fk()
    comment_id = Column(Uuid(as_uuid=True), ForeignKey("comments.id", ondelete="SET NULL"), nullable=True)

    comment = relationship("Comment")


class PostCommentNotification(BaseModel):
    __tablename__ = "post_comment_notifications"

    notification_id = _parent_fk()
    post_comment_id = Column(Uuid(as_uuid=True), ForeignKey("post_comments.id", ondelete="SET NULL"), nullable=True)

    post_comment = relationship("PostComment")


class PostClapNotification(BaseModel):
    __tablename__ = "post_clap_notifications"

    notification_id = _parent_fk()
    post_clap_id = Column(Uuid(as_uuid=True), ForeignKey("post_claps.id", ondelete="SET NULL"), nullable=True)

    post_clap = relationship("PostClap")


class ThreadCommentThanksNotification(BaseModel):
    __tablename__ = "thread_comment_thanks_notifications"

    notification_id = _parent_fk()
    thanks_id = Column(Uuid(as_uuid=True), ForeignKey("comment_thanks.id", ondelete="SET NULL"), nullable=True)

    thanks = relationship("CommentThanks")


class NewPostNotification(BaseModel):
    __tablename__ = "new_post_notifications"

    notification_id = _parent_fk()
    post_id = Column(Uuid(as_uuid=True), ForeignKey("posts.id", ondelete="SET NULL"), nullable=True)

    post = relationship("Post")


class NewFollowerNotification(BaseModel):
    __tablename__ = "new_follower_notifications"

    notification_id = _parent_fk()
    follower_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    follower = relationship("User")


# Which sub-notification table and reference column each type uses
SUB_NOTIFICATION_MODELS = {
    NotificationType.THREAD_COMMENT: (ThreadCommentNotification, "comment_id"),
    NotificationType.POST_COMMENT: (PostCommentNotification, "post_comment_id"),
    NotificationType.POST_CLAP: (PostClapNotification, "post_clap_id"),
    NotificationType.THREAD_COMMENT_THANKS: (ThreadCommentThanksNotification, "thanks_id"),
    NotificationType.NEW_POST: (NewPostNotification, "post_id"),
    NotificationType.NEW_FOLLOWER: (NewFollowerNotification, "follower_id"),
}
