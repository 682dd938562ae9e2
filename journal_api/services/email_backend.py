"""
Email Backends

A notification email is written to the database as a PENDING row inside
the mutation's transaction. After commit the row id is handed to an
EmailBackend, which queues it for the worker that renders and sends it.

Backends:
--------
- ArqEmailBackend: enqueues `send_email_notification` on the ARQ queue

The active backend is chosen by settings.EMAIL_BACKEND. Tests install
their own backend on the dispatcher instead.
"""

import logging
from abc import ABC, abstractmethod
from uuid import UUID

from journal_api.core.config import settings
from journal_api.db.redis import get_arq_pool

logger = logging.getLogger(__name__)


class EmailBackend(ABC):
    """Hands a stored EmailNotification over for sending."""

    @abstractmethod
    async def enqueue(self, email_notification_id: UUID) -> None:
        """
        Queue one email.

        Raises:
            Any exception if the email could not be queued; the caller
            records it as a failed delivery.
        """
        pass


class ArqEmailBackend(EmailBackend):
    """Queue emails on Redis for the ARQ worker."""

    task_name = "send_email_notification"

    async def enqueue(self, email_notification_id: UUID) -> None:
        pool = await get_arq_pool()
        job = await pool.enqueue_job(self.task_name, str(email_notification_id))
        if job is None:
            raise RuntimeError(f"Email {email_notification_id} was already queued")
        logger.debug(f"Queued email {email_notification_id} as job {job.job_id}")


_backend_instance: EmailBackend | None = None


def get_email_backend() -> EmailBackend:
    """Return the configured email backend (created once)."""
    global _backend_instance

    if _backend_instance is None:
        backend = settings.EMAIL_BACKEND.lower()
        if backend == "arq":
            _backend_instance = ArqEmailBackend()
        else:
            raise ValueError(
                f"Unknown email backend: {backend}. Valid options: arq"
            )

    return _backend_instance


def reset_email_backend() -> None:
    """Forget the cached backend so the next call re-reads settings."""
    global _backend_instance
    _backend_instance = None
