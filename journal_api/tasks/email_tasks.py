"""
Email Notification Tasks

Background task that sends one queued notification email.
"""

import asyncio
import logging
from typing import Any, Dict
from uuid import UUID

from journal_api.db.database import AsyncSessionLocal
from journal_api.models import EmailDeliveryStatus
from journal_api.repositories.notification_repo import EmailNotificationRepository
from journal_api.utils.email import render_notification_email, send_email

logger = logging.getLogger(__name__)


async def send_email_notification(
    ctx: Dict[str, Any],
    email_notification_id: str
) -> Dict[str, Any]:
    """
    Render and send a queued EmailNotification.

    Steps:
    1. Load the email row with everything it references
    2. Skip it if it was already sent
    3. Render it; if the referenced record is gone, mark it FAILED
    4. Send over SMTP in a thread (smtplib blocks)
    5. Mark the row SENT or FAILED

    Args:
        ctx: ARQ context (job_id, redis, etc.). Tests may put a
            `session_factory` here.
        email_notification_id: UUID of the EmailNotification

    Returns:
        Dict with the result
    """
    job_id = ctx.get('job_id', 'unknown')
    job_try = ctx.get('job_try', 1)

    logger.info(
        f"Sending email notification {email_notification_id} "
        f"(job: {job_id}, attempt: {job_try})"
    )

    try:
        email_uuid = UUID(email_notification_id)
    except ValueError:
        logger.error(f"Invalid email notification ID: {email_notification_id}")
        return {"success": False, "error": "Invalid email notification ID"}

    session_factory = ctx.get("session_factory", AsyncSessionLocal)

    async with session_factory() as session:
        repo = EmailNotificationRepository(session)

        email = await repo.get_for_delivery(email_uuid)
        if not email:
            logger.error(f"Email notification not found: {email_notification_id}")
            return {"success": False, "error": "Email notification not found"}

        if email.status == EmailDeliveryStatus.SENT:
            return {"success": True, "email_notification_id": email_notification_id, "skipped": True}

        rendered = render_notification_email(email)
        if rendered is None:
            await repo.mark_failed(email, "Referenced record no longer exists")
            await session.commit()
            logger.info(f"Email {email_notification_id}: nothing to send, source deleted")
            return {"success": False, "email_notification_id": email_notification_id, "error": "Source deleted"}

        recipients = [email.user.email]
        sent = await asyncio.to_thread(
            send_email, recipients, rendered.subject, rendered.html, "html", rendered.plain
        )

        if sent:
            await repo.mark_sent(email)
        else:
            await repo.mark_failed(email, "SMTP delivery failed")
        await session.commit()

        logger.info(f"Email {email_notification_id}: status → {email.status.value}")
        return {"success": sent, "email_notification_id": email_notification_id}
