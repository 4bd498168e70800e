"""
Role resolution.

A user's effective role comes from an ordered list of sources:

    1. earliest role assignment   (authoritative)
    2. profile role field         (fallback)

The resolver asks each source in turn and stops at the first one that has a
value. A source that errors is logged and skipped. The whole walk is bounded
by a timeout; on timeout the result is None and every sensitive operation is
denied (fail closed).

Errors never reach the caller. Cancellation does.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence

from caselab.apps.access.permissions import Role
from caselab.apps.access.store import RoleStore
from caselab.config.settings import settings
from caselab.core.cache import NO_ROLE, RoleCache
from caselab.utils.logger import get_logger
from caselab.utils.metrics import role_resolution_failures, role_resolution_latency

logger = get_logger(__name__)


@dataclass(frozen=True)
class RoleSource:
    """One place a role can come from. `fetch` returns the raw role string or None."""

    name: str
    fetch: Callable[[str], Awaitable[Optional[str]]]


@dataclass(frozen=True)
class Resolution:
    role: Optional[Role]
    source: Optional[str]
    degraded: bool = False


def default_sources(store: RoleStore) -> list[RoleSource]:
    return [
        RoleSource("role_assignment", store.earliest_assignment_role),
        RoleSource("profile", store.profile_role),
    ]


class RoleResolver:
    def __init__(
        self,
        sources: Sequence[RoleSource],
        timeout: Optional[float] = None,
        cache: Optional[RoleCache] = None,
    ):
        self.sources = list(sources)
        self.timeout = settings.ROLE_RESOLUTION_TIMEOUT_SECONDS if timeout is None else timeout
        self.cache = cache

    async def resolve(self, user_id: Optional[str]) -> Optional[Role]:
        """Effective role for `user_id`, or None."""
        if not user_id:
            return None

        start = time.perf_counter()
        outcome = "ok"
        try:
            resolution = await asyncio.wait_for(self._resolve(user_id), timeout=self.timeout)
        except asyncio.TimeoutError:
            outcome = "timeout"
            role_resolution_failures.labels(source="all", reason="timeout").inc()
            logger.error(
                f"Role resolution timed out after {self.timeout}s for user {user_id}; denying all sensitive operations",
                extra={"user_id": user_id},
            )
            return None
        except asyncio.CancelledError:
            outcome = "cancelled"
            raise
        finally:
            role_resolution_latency.labels(outcome=outcome).observe(time.perf_counter() - start)

        if self.cache is not None and not resolution.degraded and resolution.source != "cache":
            await self.cache.set(user_id, resolution.role.value if resolution.role else None)
        return resolution.role

    async def _resolve(self, user_id: str) -> Resolution:
        if self.cache is not None:
            cached = await self.cache.get(user_id)
            if cached is not None:
                return Resolution(None if cached == NO_ROLE else Role.coerce(cached), "cache")
        return await self.walk(user_id)

    async def walk(self, user_id: str) -> Resolution:
        """Consult each source in priority order, without timeout or cache."""
        degraded = False
        for source in self.sources:
            try:
                raw = await source.fetch(user_id)
            except Exception as e:
                degraded = True
                role_resolution_failures.labels(source=source.name, reason="error").inc()
                logger.error(
                    f"Role source '{source.name}' failed for user {user_id}: {e}",
                    extra={"user_id": user_id, "source": source.name},
                )
                continue

            if raw is None or not str(raw).strip():
                continue

            role = Role.coerce(raw)
            if role is None:
                logger.warning(
                    f"User {user_id} has unrecognized role '{raw}' from {source.name}; no permissions granted",
                    extra={"user_id": user_id, "source": source.name},
                )
            else:
                logger.debug(f"Resolved role {role.value} for user {user_id} from {source.name}")
            return Resolution(role, source.name, degraded)

        return Resolution(None, None, degraded)


async def resolve_role(
    user_id: Optional[str],
    store: RoleStore,
    timeout: Optional[float] = None,
    cache: Optional[RoleCache] = None,
) -> Optional[Role]:
    """Resolve a role using the standard source order."""
    resolver = RoleResolver(default_sources(store), timeout=timeout, cache=cache)
    return await resolver.resolve(user_id)
