import json
import logging
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from .config import settings

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "notifications:"

_redis_client: Optional[redis.Redis] = None


def get_redis() -> Optional[redis.Redis]:
    """Shared redis client, or None when REDIS_URL is not configured."""
    global _redis_client
    if _redis_client is None and settings.REDIS_URL:
        _redis_client = redis.from_url(
            settings.REDIS_URL, encoding="utf-8", decode_responses=True
        )
    return _redis_client


def user_channel(user_id: int) -> str:
    return f"{CHANNEL_PREFIX}{user_id}"


async def publish_user_event(user_id: int, event: str, payload: Any) -> bool:
    """Push an event to a user's channel. Delivery is best effort."""
    client = get_redis()
    if client is None:
        return False
    message = json.dumps({"event": event, "data": payload}, default=str)
    try:
        await client.publish(user_channel(user_id), message)
    except (RedisError, OSError):
        logger.exception("Failed to publish %s for user %s", event, user_id)
        return False
    return True
