"""
ARQ Worker Configuration

This module configures the ARQ background worker that sends
notification emails.

Running the Worker:
------------------
    # From project root directory
    arq journal_api.worker.WorkerSettings

    # With verbose logging
    arq journal_api.worker.WorkerSettings --verbose

Worker Lifecycle:
----------------
1. Worker starts and connects to Redis
2. Worker calls startup() function
3. Worker polls Redis for jobs
4. For each job, worker calls the corresponding function
5. On shutdown, worker calls shutdown() function

Several workers can run against the same queue; jobs are distributed
across them automatically.
"""

import logging
from typing import Any, Dict

from journal_api.core.config import settings
from journal_api.db.database import check_db_connection, engine
from journal_api.db.redis import get_arq_redis_settings
from journal_api.tasks.email_tasks import send_email_notification

# ============================================================
# Logging Configuration
# ============================================================

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# ============================================================
# Startup and Shutdown Hooks
# ============================================================

async def startup(ctx: Dict[str, Any]) -> None:
    """
    Called when worker starts.

    Checks the database up front so a misconfigured worker fails loudly
    instead of failing every job.
    """
    logger.info("ARQ Worker starting up...")

    if not await check_db_connection():
        raise RuntimeError("Database is not reachable")

    if not settings.SMTP_SERVER:
        logger.warning("SMTP_SERVER not set; notification emails will be marked failed")

    logger.info("ARQ Worker ready to process jobs")


async def shutdown(ctx: Dict[str, Any]) -> None:
    """
    Called when worker shuts down.

    Clean up resources.
    """
    logger.info("ARQ Worker shutting down...")
    await engine.dispose()
    logger.info("ARQ Worker shutdown complete")


# ============================================================
# Worker Configuration Class
# ============================================================

class WorkerSettings:
    """
    ARQ Worker settings.

    This class is discovered by ARQ when you run:
        arq journal_api.worker.WorkerSettings
    """

    # ========================================
    # Task Functions
    # ========================================
    functions = [
        send_email_notification,
    ]

    # ========================================
    # Redis Connection
    # ========================================
    redis_settings = get_arq_redis_settings()

    # ========================================
    # Lifecycle Hooks
    # ========================================
    on_startup = startup
    on_shutdown = shutdown

    # ========================================
    # Job Settings
    # ========================================
    job_timeout = 60       # one SMTP round trip
    keep_result = 3600     # 1 hour
    max_tries = 3
    retry_delay = 30

    # ========================================
    # Concurrency Settings
    # ========================================
    max_jobs = 10
    poll_delay = 0.5

    # ========================================
    # Queue Settings
    # ========================================
    queue_name = "arq:queue"
    health_check_interval = 10
