# coachmate/core/cache.py
"""Redis caching for weekly schedule grids."""
import json
import logging
from typing import Any, Optional, Union
from datetime import timedelta
from uuid import UUID
import redis.asyncio as redis
from .config import settings

logger = logging.getLogger(__name__)


class CacheManager:
    def __init__(self, redis_url: Optional[str] = None):
        self.redis_url = redis_url
        self.redis: Optional[redis.Redis] = None

    @property
    def enabled(self) -> bool:
        return bool(self.redis_url)

    async def initialize(self):
        """Initialize Redis connection."""
        if self.enabled and not self.redis:
            self.redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True
            )

    async def close(self):
        """Close Redis connection."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None

    @staticmethod
    def make_key(*parts: Any) -> str:
        return ":".join(str(part) for part in parts)

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        if not self.enabled:
            return None
        await self.initialize()

        try:
            value = await self.redis.get(key)
            if value:
                return json.loads(value)
        except Exception as e:
            logger.warning(f"Cache get error for {key}: {e}")
        return None

    async def set(
        self,
        key: str,
        value: Any,
        expire: Optional[Union[int, timedelta]] = None
    ) -> bool:
        """Set value in cache."""
        if not self.enabled:
            return False
        await self.initialize()

        try:
            serialized = json.dumps(value)
            if expire:
                if isinstance(expire, timedelta):
                    expire = int(expire.total_seconds())
                return bool(await self.redis.setex(key, expire, serialized))
            return bool(await self.redis.set(key, serialized))
        except Exception as e:
            logger.warning(f"Cache set error for {key}: {e}")
            return False

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern."""
        if not self.enabled:
            return 0
        await self.initialize()

        deleted = 0
        try:
            async for key in self.redis.scan_iter(match=pattern):
                deleted += await self.redis.delete(key)
        except Exception as e:
            logger.warning(f"Cache invalidation error for {pattern}: {e}")
        return deleted


def class_schedule_key(tenant_id: UUID, class_id: UUID) -> str:
    return CacheManager.make_key("schedule", tenant_id, "class", class_id)


def teacher_schedule_key(tenant_id: UUID, teacher_id: UUID, day: Optional[str] = None) -> str:
    return CacheManager.make_key("schedule", tenant_id, "teacher", teacher_id, day or "all")


async def invalidate_schedule_cache(tenant_id: UUID, class_ids=(), teacher_ids=(), all_teachers: bool = False):
    """Drop cached grids for every class and teacher touched by a mutation.

    A primary change can demote slots of other teachers, so it clears every
    teacher grid of the tenant.
    """
    if all_teachers:
        await cache_manager.delete_pattern(CacheManager.make_key("schedule", tenant_id, "teacher", "*"))
        teacher_ids = ()
    for class_id in {c for c in class_ids if c}:
        await cache_manager.delete_pattern(class_schedule_key(tenant_id, class_id))
    for teacher_id in {t for t in teacher_ids if t}:
        await cache_manager.delete_pattern(
            CacheManager.make_key("schedule", tenant_id, "teacher", teacher_id, "*")
        )


# Global cache instance
cache_manager = CacheManager(settings.redis_url)
