import os
import redis.asyncio as redis
from tourneyhub.core.config import settings

REDIS_URL = os.environ.get("REDIS_URL", settings.redis_url)


def create_redis_client():
    """Create the Redis client used by the rate limiter, or None when disabled"""
    if not settings.rate_limit_enabled:
        return None
    return redis.from_url(REDIS_URL, decode_responses=True)
