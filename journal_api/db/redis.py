"""
Redis Connection Module

Async Redis connection management for:
1. The ARQ queue that carries notification emails to the worker
2. The /health endpoint

A mutation writes its EmailNotification rows and commits, then pushes one
job per email to Redis. The response does not wait for SMTP; the worker
process pulls the jobs and sends the emails.
"""

import logging
from typing import Optional

from redis.asyncio import Redis, ConnectionPool
from arq.connections import RedisSettings, ArqRedis, create_pool

from journal_api.core.config import settings

logger = logging.getLogger(__name__)

# ============================================================
# Redis Connection Pool (for general Redis operations)
# ============================================================

_redis_pool: Optional[ConnectionPool] = None


def get_redis_pool() -> ConnectionPool:
    """Get or create the shared Redis connection pool."""
    global _redis_pool

    if _redis_pool is None:
        _redis_pool = ConnectionPool.from_url(
            settings.REDIS_URL,
            max_connections=10,
            decode_responses=False,
        )
        logger.info(f"Redis connection pool created: {settings.REDIS_URL}")

    return _redis_pool


async def get_redis() -> Redis:
    """Redis client on the shared pool."""
    return Redis(connection_pool=get_redis_pool())


async def close_redis_pool():
    """Close Redis connection pool during app shutdown."""
    global _redis_pool

    if _redis_pool is not None:
        await _redis_pool.disconnect()
        _redis_pool = None
        logger.info("Redis connection pool closed")


# ============================================================
# ARQ Redis Settings (for the email queue)
# ============================================================

def get_arq_redis_settings() -> RedisSettings:
    """
    Redis settings for ARQ, parsed from REDIS_URL.

    Format: redis://[[username]:[password]@]host[:port][/db-number]
    """
    redis_settings = RedisSettings.from_dsn(settings.REDIS_URL)
    redis_settings.conn_timeout = 10   # seconds for the initial connection
    redis_settings.conn_retries = 5
    redis_settings.conn_retry_delay = 1
    return redis_settings


# ============================================================
# ARQ Connection Pool (for enqueueing emails)
# ============================================================

_arq_pool: Optional[ArqRedis] = None


async def get_arq_pool() -> ArqRedis:
    """
    Get or create the ARQ Redis pool for enqueueing tasks.

    Usage:
        pool = await get_arq_pool()
        await pool.enqueue_job('send_email_notification', str(email_id))
    """
    global _arq_pool

    if _arq_pool is None:
        _arq_pool = await create_pool(get_arq_redis_settings())
        logger.info("ARQ Redis pool created")

    return _arq_pool


async def close_arq_pool():
    """Close ARQ Redis pool during shutdown."""
    global _arq_pool

    if _arq_pool is not None:
        await _arq_pool.close()
        _arq_pool = None
        logger.info("ARQ Redis pool closed")


# ============================================================
# Health Check
# ============================================================

async def check_redis_connection() -> bool:
    """True if Redis answers PING."""
    try:
        redis = await get_redis()
        return await redis.ping()
    except Exception as e:
        logger.error(f"Redis health check failed: {e}")
        return False
