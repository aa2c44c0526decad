"""Redis cache for dashboard and leaderboard aggregates."""

import json
import logging
from typing import Optional, Any
import redis

from ideaportal.core.config import settings

logger = logging.getLogger("idea_portal.cache")

STATS_KEY_PREFIX = "stats:"


class CacheService:
    """Redis-backed caching service; every failure degrades to a cache miss."""

    def __init__(self):
        self._client: Optional[redis.Redis] = None

    @property
    def enabled(self) -> bool:
        return settings.CACHE_ENABLED

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(
                settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=1,
                socket_timeout=1,
            )
        return self._client

    def get(self, key: str) -> Optional[str]:
        """Get a cached value by key."""
        if not self.enabled:
            return None
        try:
            return self.client.get(key)
        except redis.RedisError as e:
            logger.debug("Cache get failed for %s: %s", key, e)
            return None

    def set(self, key: str, value: str, ttl_seconds: int = 60) -> None:
        """Set a cached value with TTL."""
        if not self.enabled:
            return
        try:
            self.client.setex(key, ttl_seconds, value)
        except redis.RedisError as e:
            logger.debug("Cache set failed for %s: %s", key, e)

    def get_json(self, key: str) -> Optional[Any]:
        """Get and parse a JSON cached value."""
        raw = self.get(key)
        if raw:
            return json.loads(raw)
        return None

    def set_json(self, key: str, value: Any, ttl_seconds: int = 60) -> None:
        """Serialize and cache a JSON value."""
        self.set(key, json.dumps(value, default=str), ttl_seconds)

    def invalidate_stats(self) -> None:
        """Drop every cached aggregate after a write to ideas or votes."""
        if not self.enabled:
            return
        try:
            keys = list(self.client.scan_iter(f"{STATS_KEY_PREFIX}*"))
            if keys:
                self.client.delete(*keys)
        except redis.RedisError as e:
            logger.debug("Cache invalidation failed: %s", e)

    def health_check(self) -> bool:
        """Check if Redis is reachable."""
        if not self.enabled:
            return False
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False


cache_service = CacheService()
