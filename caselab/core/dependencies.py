"""
Dependency injection for FastAPI.

Provides singleton instances of services.
"""

from functools import lru_cache

from caselab.config.settings import settings
from caselab.core.cache import RoleCache


@lru_cache()
def get_role_cache() -> RoleCache:
    """Get resolved-role cache singleton."""
    return RoleCache(url=settings.REDIS_URL, ttl=settings.ROLE_CACHE_TTL_SECONDS)
