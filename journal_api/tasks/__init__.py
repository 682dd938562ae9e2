"""
Background Tasks Module

This module contains all background task definitions for ARQ workers.

Task Organization:
-----------------
- email_tasks.py: Notification emails (render + SMTP send)

How Tasks Work:
--------------
1. A mutation commits an EmailNotification row (status PENDING)
2. The API enqueues a job: await pool.enqueue_job('send_email_notification', id)
3. ARQ worker polls Redis and picks up the job
4. Worker renders and sends the email, then marks the row SENT or FAILED

Running Workers:
---------------
    # Start a worker (from project root)
    arq journal_api.worker.WorkerSettings
"""

from journal_api.tasks.email_tasks import send_email_notification

# Names used when enqueueing: enqueue_job('send_email_notification', ...)
__all__ = [
    "send_email_notification",
]
