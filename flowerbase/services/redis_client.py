"""Redis client for the shared AI content cache."""

import os
import redis
import logging

logger = logging.getLogger(__name__)

# Redis connection (lazy initialization)
_redis_client = None


def get_redis():
    """Get or create Redis connection.

    Returns None when REDIS_URL is not set or the server is unreachable;
    callers fall back to the in-process cache backend.
    """
    global _redis_client

    if _redis_client is not None:
        return _redis_client

    redis_url = os.environ.get('REDIS_URL')

    if not redis_url:
        logger.warning("REDIS_URL not set - AI cache will be kept in process memory")
        return None

    try:
        _redis_client = redis.from_url(redis_url, decode_responses=True)
        # Test connection
        _redis_client.ping()
        logger.info("Redis connected successfully")
        return _redis_client
    except Exception as e:
        logger.error(f"Redis connection failed: {e}")
        _redis_client = None
        return None
