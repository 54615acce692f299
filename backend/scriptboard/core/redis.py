from typing import Optional

from redis import Redis

from scriptboard.core.config import settings

REDIS_URL = settings.REDIS_URL

_redis_client: Optional[Redis] = None


def get_redis_client() -> Optional[Redis]:
    """Shared client, or None when REDIS_URL is not configured."""
    global _redis_client

    if not REDIS_URL:
        return None

    if _redis_client is None:
        _redis_client = Redis.from_url(REDIS_URL)

    return _redis_client
