"""
Redis cache for resolved roles.

Keyed by user id. Only successful resolutions are written; any Redis
failure is logged and treated as a miss so the caller falls back to the
database.
"""

from typing import Optional
import redis.asyncio as redis

from caselab.config.settings import settings
from caselab.utils.logger import get_logger
from caselab.utils.metrics import role_cache_lookups

logger = get_logger(__name__)

# Cached marker for "resolved, and the user has no role".
NO_ROLE = "__none__"


class RoleCache:
    """
    Resolved-role cache.

    The cache must be invalidated on every change to a user's role
    assignments or profile role, otherwise a revoked role keeps working
    until the TTL runs out.
    """

    def __init__(self, url: str, ttl: int = 60):
        """
        Args:
            url: Redis connection URL (e.g. redis://localhost:6379)
            ttl: Seconds a resolved role stays valid
        """
        self.redis = redis.from_url(
            url,
            decode_responses=True,
            max_connections=50,
            socket_keepalive=True,
            socket_timeout=2.0,
            retry_on_timeout=False,
        )
        self.ttl = ttl
        logger.info(f"Initialized RoleCache: {url}, ttl={ttl}s")

    @staticmethod
    def get_key(user_id: str) -> str:
        return f"access:role:{user_id}"

    async def get(self, user_id: str) -> Optional[str]:
        """
        Cached raw role for the user.

        Returns:
            The role string, NO_ROLE, or None on miss or error.
        """
        key = self.get_key(user_id)
        try:
            value = await self.redis.get(key)
        except Exception as e:
            logger.error(f"Role cache get failed: {e}")
            role_cache_lookups.labels(result="error").inc()
            return None
        if value is None:
            logger.debug(f"Cache MISS: {key}")
            role_cache_lookups.labels(result="miss").inc()
            return None
        logger.debug(f"Cache HIT: {key}")
        role_cache_lookups.labels(result="hit").inc()
        return value

    async def set(self, user_id: str, role: Optional[str]) -> None:
        try:
            await self.redis.setex(self.get_key(user_id), self.ttl, role or NO_ROLE)
        except Exception as e:
            logger.error(f"Role cache set failed: {e}")

    async def invalidate(self, user_id: str) -> None:
        try:
            await self.redis.delete(self.get_key(user_id))
            logger.debug(f"Invalidated cached role for user {user_id}")
        except Exception as e:
            logger.error(f"Role cache invalidate failed: {e}")

    async def ping(self) -> bool:
        return bool(await self.redis.ping())
