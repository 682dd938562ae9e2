"""
Notification Service

Two halves:

1. NotificationDispatcher: used by the mutation services. Stages in-app
   notifications and email rows inside the mutation's transaction, then,
   after commit, hands every email to the email backend concurrently and
   reports the outcome per recipient.
2. NotificationService: the recipient's side. Feed, detail, unread count
   and the read/delete state machine:

       UNREAD --mark_read--> READ
          \                    |
           +------delete-------+--> (gone)

   There is no way back from READ to UNREAD.
"""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from journal_api.core.config import settings
from journal_api.models import (
    EmailNotification,
    EmailNotificationType,
    InAppNotification,
    NotificationType,
    User,
)
from journal_api.models.base import as_utc, utcnow
from journal_api.repositories.notification_repo import (
    InAppNotificationRepository,
    EmailNotificationRepository,
)
from journal_api.schemas.notification import (
    DeliveryChannel,
    DeliveryOutcome,
    DeliveryReport,
    LevelOneNotification,
    LevelTwoNotification,
    NotificationStateResponse,
)
from journal_api.services.email_backend import EmailBackend, get_email_backend
from journal_api.services.errors import NotFoundError, PermissionDeniedError, require_user
from journal_api.services.notification_feed import (
    build_level_one,
    build_level_two,
    flatten_notifications,
)

logger = logging.getLogger(__name__)


# ============================================================
# FAN-OUT
# ============================================================

class NotificationDispatcher:
    """
    Fan-out of one domain event to its recipients.

    Usage (inside a service method):
        recipients = dispatcher.select_recipients(subscriber_ids, actor.id)
        await dispatcher.notify(recipients, NotificationType.THREAD_COMMENT, ...)
        await db.commit()
        report = await dispatcher.deliver()
    """

    def __init__(self, db: AsyncSession, email_backend: Optional[EmailBackend] = None):
        self.db = db
        self.in_app_repo = InAppNotificationRepository(db)
        self.email_repo = EmailNotificationRepository(db)
        self._email_backend = email_backend
        self._outcomes: List[DeliveryOutcome] = []
        self._emails: List[EmailNotification] = []

    @property
    def email_backend(self) -> EmailBackend:
        if self._email_backend is None:
            self._email_backend = get_email_backend()
        return self._email_backend

    @staticmethod
    def select_recipients(user_ids: Iterable[UUID], actor_id: UUID) -> List[UUID]:
        """De-duplicate recipients and drop the user who acted."""
        recipients = []
        for user_id in user_ids:
            if user_id == actor_id or user_id in recipients:
                continue
            recipients.append(user_id)
        return recipients

    async def notify(
        self,
        recipient_ids: Iterable[UUID],
        notification_type: NotificationType,
        reference_id: UUID,
        post_id: Optional[UUID] = None,
        triggering_user_id: Optional[UUID] = None,
        email_type: Optional[EmailNotificationType] = None,
        email_refs: Optional[Dict[str, UUID]] = None,
    ) -> None:
        """
        Stage notifications for each recipient in the current transaction.

        Args:
            recipient_ids: Already filtered with select_recipients
            notification_type: In-app notification type
            reference_id: Record the event points at (comment, clap, ...)
            post_id / triggering_user_id: Context key of the parent
            email_type: Also write an email row when set
            email_refs: comment_id / post_comment_id / post_id for the email
        """
        send_email = email_type is not None and settings.EMAIL_NOTIFICATIONS_ENABLED

        for recipient_id in recipient_ids:
            await self.in_app_repo.add_event(
                user_id=recipient_id,
                notification_type=notification_type,
                reference_id=reference_id,
                post_id=post_id,
                triggering_user_id=triggering_user_id,
            )
            self._outcomes.append(DeliveryOutcome(
                recipient_id=recipient_id,
                channel=DeliveryChannel.IN_APP,
                delivered=True,
            ))

            if send_email:
                email = await self.email_repo.create_pending(recipient_id, email_type, **(email_refs or {}))
                self._emails.append(email)

    async def _enqueue(self, email: EmailNotification) -> None:
        await self.email_backend.enqueue(email.id)

    async def deliver(self) -> DeliveryReport:
        """
        Queue all staged emails. Call after the mutation has committed.

        Each email is queued as its own task; one failure never affects
        the others. Failures are logged, stored on the email row and
        returned in the report.
        """
        emails, self._emails = self._emails, []
        outcomes, self._outcomes = self._outcomes, []

        if emails:
            results = await asyncio.gather(
                *(self._enqueue(email) for email in emails),
                return_exceptions=True,
            )

            failed = False
            for email, result in zip(emails, results):
                if isinstance(result, Exception):
                    error = str(result) or result.__class__.__name__
                    logger.warning(
                        f"Failed to queue email {email.id} for user {email.user_id}: {error}"
                    )
                    await self.email_repo.mark_failed(email, error)
                    failed = True
                    outcomes.append(DeliveryOutcome(
                        recipient_id=email.user_id,
                        channel=DeliveryChannel.EMAIL,
                        delivered=False,
                        error=error,
                    ))
                else:
                    outcomes.append(DeliveryOutcome(
                        recipient_id=email.user_id,
                        channel=DeliveryChannel.EMAIL,
                        delivered=True,
                    ))

            if failed:
                await self.db.commit()

        # Group by recipient, keeping the order recipients were notified in
        by_recipient: Dict[UUID, List[DeliveryOutcome]] = {}
        for outcome in outcomes:
            by_recipient.setdefault(outcome.recipient_id, []).append(outcome)

        report = DeliveryReport(outcomes=[o for group in by_recipient.values() for o in group])
        if report.outcomes:
            logger.info(
                f"Delivered {report.delivered_count}/{len(report.outcomes)} notifications "
                f"to {len(by_recipient)} recipients"
            )
        return report


# ============================================================
# RECIPIENT SIDE
# ============================================================

class NotificationService:
    """Feed and read/delete operations for the signed-in user."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notification_repo = InAppNotificationRepository(db)

    async def _get_owned(
        self,
        user: User,
        notification_id: UUID,
        with_events: bool = False,
    ) -> InAppNotification:
        if with_events:
            notification = await self.notification_repo.get_with_events(notification_id)
        else:
            notification = await self.notification_repo.get_by_id(notification_id)

        if notification is None:
            raise NotFoundError("Notification not found")
        if notification.user_id != user.id:
            raise PermissionDeniedError("Not your notification")
        return notification

    # ============================================================
    # READ
    # ============================================================

    async def get_feed(
        self,
        user: Optional[User],
        limit: Optional[int] = None,
    ) -> List[LevelOneNotification]:
        """Level one entries, most recent activity first."""
        user = require_user(user)
        notifications = await self.notification_repo.get_feed(
            user.id, limit or settings.NOTIFICATION_FEED_LIMIT
        )
        return build_level_one(flatten_notifications(notifications))

    async def get_detail(self, user: Optional[User], notification_id: UUID) -> LevelTwoNotification:
        user = require_user(user)
        notification = await self._get_owned(user, notification_id, with_events=True)
        return build_level_two(notification)

    async def unread_count(self, user: Optional[User]) -> int:
        user = require_user(user)
        return await self.notification_repo.unread_count(user.id)

    # ============================================================
    # STATE TRANSITIONS
    # ============================================================

    async def mark_read(self, user: Optional[User], notification_id: UUID) -> NotificationStateResponse:
        """
        UNREAD -> READ. Marking a READ notification again changes nothing
        and keeps the original read_at.
        """
        user = require_user(user)
        notification = await self._get_owned(user, notification_id)

        changed = await self.notification_repo.mark_read(notification, utcnow())
        if changed:
            await self.db.commit()
            logger.info(f"User {user.id} read notification {notification_id}")

        return NotificationStateResponse(
            id=notification.id,
            read_status=notification.read_status,
            read_at=as_utc(notification.read_at) if notification.read_at else None,
            changed=changed,
        )

    async def mark_all_read(self, user: Optional[User]) -> int:
        user = require_user(user)
        marked = await self.notification_repo.mark_all_read(user.id, utcnow())
        await self.db.commit()
        logger.info(f"User {user.id} marked {marked} notifications read")
        return marked

    async def delete(self, user: Optional[User], notification_id: UUID) -> None:
        """Remove a notification (READ or UNREAD) with all its events."""
        user = require_user(user)
        notification = await self._get_owned(user, notification_id)

        await self.notification_repo.delete_with_events(notification.id)
        await self.db.commit()
        logger.info(f"User {user.id} deleted notification {notification_id}")
