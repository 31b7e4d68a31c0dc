from __future__ import annotations

import redis

from flavor_quest.config import get_redis_url


def create_redis(url: str | None = None) -> redis.Redis:
    """Client for the progress store and mailbox; falls back to REDIS_URL."""

    # Store and stream code expects str values, not bytes.
    return redis.Redis.from_url(url or get_redis_url(), decode_responses=True)
