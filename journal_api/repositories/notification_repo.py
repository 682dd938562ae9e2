"""
Notification Repository

Data access layer for in-app and email notifications.

In-app events are folded into the recipient's open (UNREAD) parent
notification for the same type and context key. READ parents are never
reopened; a new event after mark-read starts a fresh parent.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, func, update, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from journal_api.repositories.base import BaseRepository
from journal_api.models import (
    Comment,
    CommentThanks,
    EmailDeliveryStatus,
    EmailNotification,
    EmailNotificationType,
    InAppNotification,
    NewFollowerNotification,
    NewPostNotification,
    NotificationReadStatus,
    NotificationType,
    Post,
    PostClap,
    PostComment,
    PostClapNotification,
    PostCommentNotification,
    Thread,
    ThreadCommentNotification,
    ThreadCommentThanksNotification,
)
from journal_api.models.base import utcnow
from journal_api.models.notification import SUB_NOTIFICATION_MODELS


def _feed_load_options():
    """Everything the feed aggregator reads, loaded up front."""
    return (
        selectinload(InAppNotification.post).selectinload(Post.author),
        selectinload(InAppNotification.triggering_user),
        selectinload(InAppNotification.thread_comment_notifications)
        .selectinload(ThreadCommentNotification.comment)
        .options(selectinload(Comment.author), selectinload(Comment.thread)),
        selectinload(InAppNotification.post_comment_notifications)
        .selectinload(PostCommentNotification.post_comment)
        .selectinload(PostComment.author),
        selectinload(InAppNotification.post_clap_notifications)
        .selectinload(PostClapNotification.post_clap)
        .selectinload(PostClap.author),
        selectinload(InAppNotification.thread_comment_thanks_notifications)
        .selectinload(ThreadCommentThanksNotification.thanks)
        .options(
            selectinload(CommentThanks.author),
            selectinload(CommentThanks.comment).selectinload(Comment.thread),
        ),
        selectinload(InAppNotification.new_post_notifications)
        .selectinload(NewPostNotification.post)
        .selectinload(Post.author),
        selectinload(InAppNotification.new_follower_notifications)
        .selectinload(NewFollowerNotification.follower),
    )


class InAppNotificationRepository(BaseRepository[InAppNotification]):
    """Repository for in-app (feed) notifications."""

    def __init__(self, db: AsyncSession):
        super().__init__(InAppNotification, db)

    # ============================================================
    # WRITE SIDE
    # ============================================================

    async def find_open(
        self,
        user_id: UUID,
        notification_type: NotificationType,
        post_id: Optional[UUID] = None,
        triggering_user_id: Optional[UUID] = None,
    ) -> Optional[InAppNotification]:
        """Find the recipient's UNREAD parent for this type and context key."""
        stmt = select(InAppNotification).where(
            InAppNotification.user_id == user_id,
            InAppNotification.type == notification_type,
            InAppNotification.read_status == NotificationReadStatus.UNREAD,
        )
        if post_id is None:
            stmt = stmt.where(InAppNotification.post_id.is_(None))
        else:
            stmt = stmt.where(InAppNotification.post_id == post_id)
        if triggering_user_id is None:
            stmt = stmt.where(InAppNotification.triggering_user_id.is_(None))
        else:
            stmt = stmt.where(InAppNotification.triggering_user_id == triggering_user_id)

        stmt = stmt.order_by(InAppNotification.bumped_at.desc()).limit(1)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def add_event(
        self,
        user_id: UUID,
        notification_type: NotificationType,
        reference_id: UUID,
        post_id: Optional[UUID] = None,
        triggering_user_id: Optional[UUID] = None,
    ) -> InAppNotification:
        """
        Record one event for a recipient.

        Args:
            user_id: Recipient
            notification_type: Type of the event
            reference_id: Id of the comment / clap / thanks / post / follower
            post_id: Context key for post scoped types
            triggering_user_id: Context key for thanks

        Returns:
            The parent notification the event was folded into
        """
        now = utcnow()
        parent = await self.find_open(user_id, notification_type, post_id, triggering_user_id)

        if parent is None:
            parent = InAppNotification(
                user_id=user_id,
                type=notification_type,
                read_status=NotificationReadStatus.UNREAD,
                post_id=post_id,
                triggering_user_id=triggering_user_id,
                bumped_at=now,
            )
            self.db.add(parent)
            await self.db.flush()
        else:
            parent.bumped_at = now

        sub_model, reference_column = SUB_NOTIFICATION_MODELS[notification_type]
        self.db.add(sub_model(notification_id=parent.id, **{reference_column: reference_id}))
        await self.db.flush()
        return parent

    # ============================================================
    # READ SIDE
    # ============================================================

    async def get_feed(self, user_id: UUID, limit: int = 50) -> List[InAppNotification]:
        """Latest parents for a user with all sub-notifications loaded."""
        result = await self.db.execute(
            select(InAppNotification)
            .where(InAppNotification.user_id == user_id)
            .options(*_feed_load_options())
            .order_by(InAppNotification.bumped_at.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_with_events(self, notification_id: UUID) -> Optional[InAppNotification]:
        result = await self.db.execute(
            select(InAppNotification)
            .where(InAppNotification.id == notification_id)
            .options(*_feed_load_options())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def unread_count(self, user_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(InAppNotification.id)).where(
                InAppNotification.user_id == user_id,
                InAppNotification.read_status == NotificationReadStatus.UNREAD,
            )
        )
        return result.scalar() or 0

    # ============================================================
    # STATE TRANSITIONS
    # ============================================================

    async def mark_read(self, notification: InAppNotification, read_at: datetime) -> bool:
        """UNREAD -> READ. Returns False (and changes nothing) if already READ."""
        if notification.read_status == NotificationReadStatus.READ:
            return False
        notification.read_status = NotificationReadStatus.READ
        notification.read_at = read_at
        await self.db.flush()
        return True

    async def mark_all_read(self, user_id: UUID, read_at: datetime) -> int:
        result = await self.db.execute(
            update(InAppNotification)
            .where(
                InAppNotification.user_id == user_id,
                InAppNotification.read_status == NotificationReadStatus.UNREAD,
            )
            .values(read_status=NotificationReadStatus.READ, read_at=read_at)
        )
        return result.rowcount

    async def delete_with_events(self, notification_id: UUID) -> None:
        """Delete a parent and every sub-notification folded into it."""
        for sub_model, _ in SUB_NOTIFICATION_MODELS.values():
            await self.db.execute(
                delete(sub_model).where(sub_model.notification_id == notification_id)
            )
        await self.db.execute(
            delete(InAppNotification).where(InAppNotification.id == notification_id)
        )


class EmailNotificationRepository(BaseRepository[EmailNotification]):
    """Repository for queued notification emails."""

    def __init__(self, db: AsyncSession):
        super().__init__(EmailNotification, db)

    async def create_pending(
        self,
        user_id: UUID,
        email_type: EmailNotificationType,
        comment_id: Optional[UUID] = None,
        post_comment_id: Optional[UUID] = None,
        post_id: Optional[UUID] = None,
    ) -> EmailNotification:
        return await self.create(
            user_id=user_id,
            type=email_type,
            status=EmailDeliveryStatus.PENDING,
            comment_id=comment_id,
            post_comment_id=post_comment_id,
            post_id=post_id,
        )

    async def get_for_delivery(self, email_notification_id: UUID) -> Optional[EmailNotification]:
        """Load an email with everything needed to render it."""
        result = await self.db.execute(
            select(EmailNotification)
            .where(EmailNotification.id == email_notification_id)
            .options(
                selectinload(EmailNotification.user),
                selectinload(EmailNotification.comment).options(
                    selectinload(Comment.author),
                    selectinload(Comment.thread).selectinload(Thread.post),
                ),
                selectinload(EmailNotification.post_comment).options(
                    selectinload(PostComment.author),
                    selectinload(PostComment.post),
                ),
                selectinload(EmailNotification.post).selectinload(Post.author),
            )
        )
        return result.scalar_one_or_none()

    async def mark_sent(self, email: EmailNotification) -> None:
        email.status = EmailDeliveryStatus.SENT
        email.sent_at = utcnow()
        email.error = None
        await self.db.flush()

    async def mark_failed(self, email: EmailNotification, error: str) -> None:
        email.status = EmailDeliveryStatus.FAILED
        email.error = error[:2000]
        await self.db.flush()
