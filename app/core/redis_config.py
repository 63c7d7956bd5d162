import redis

from app.core.config import settings


def get_redis_url() -> str:
    return settings.REDIS_URL


def get_redis_client() -> redis.Redis:
    """Get Redis client for per-event locking."""
    return redis.from_url(get_redis_url(), decode_responses=True)
