# app/services/search/redis_cache.py
import json
import logging
from typing import Any, Optional

from redis import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class RedisCache:
    """
    Shared cache tier backed by Redis.

    Values are stored as JSON with a TTL. Redis being unreachable is never
    fatal to a read: errors are logged and reported as a miss.
    """

    def __init__(self, redis_client: Redis, prefix: str = "search:"):
        self.redis = redis_client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self.redis.get(self._key(key))
        except RedisError as e:
            logger.warning(f"Redis get failed for {key}: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Discarding undecodable cache entry {key}")
            return None

    def set(self, key: str, value: Any, ttl: int) -> bool:
        try:
            self.redis.setex(self._key(key), ttl, json.dumps(value))
            return True
        except RedisError as e:
            logger.warning(f"Redis set failed for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        try:
            self.redis.delete(self._key(key))
            return True
        except RedisError as e:
            logger.error(f"Redis delete failed for {key}: {e}")
            return False
