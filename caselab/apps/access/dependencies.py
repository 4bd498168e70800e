"""
FastAPI wiring for access decisions.

`get_access_context` resolves the caller's role once per request and hands
routes an explicit AccessContext. `require_operation`, `require_any` and
`require_all` build dependencies that deny with a generic 403, log the
attempt, and leave an `access.denied` audit row.
"""

from typing import Callable, Iterable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from caselab.apps.access.context import AccessContext
from caselab.apps.access.permissions import SensitiveOperation
from caselab.apps.access.resolver import resolve_role
from caselab.apps.access.store import RoleStore, SqlRoleStore
from caselab.apps.audit.services import AuditService
from caselab.apps.auth.services import get_current_user
from caselab.core.cache import RoleCache
from caselab.core.dependencies import get_role_cache
from caselab.db.session import get_session
from caselab.utils.exceptions import PermissionDeniedException
from caselab.utils.logger import get_logger
from caselab.utils.metrics import authorization_decisions

logger = get_logger(__name__)


async def get_role_store(session: AsyncSession = Depends(get_session)) -> RoleStore:
    return SqlRoleStore(session)


async def get_access_context(
    user: dict = Depends(get_current_user),
    store: RoleStore = Depends(get_role_store),
    cache: RoleCache = Depends(get_role_cache),
) -> AccessContext:
    """Resolve the caller's role for this request."""
    role = await resolve_role(user["id"], store, cache=cache)
    return AccessContext.for_role(user["id"], role)


async def deny(
    request: Request,
    session: AsyncSession,
    access: AccessContext,
    operations: Iterable[SensitiveOperation],
) -> None:
    """Log and audit a denied attempt, then raise the generic 403."""
    names = [op.value for op in operations]
    role = access.role.value if access.role else None
    logger.warning(
        f"Access denied: user={access.user_id} role={role} operations={names} "
        f"path={request.url.path}",
        extra={"user_id": access.user_id, "role": role, "operations": names},
    )
    try:
        await AuditService.record_from_request(
            db=session,
            request=request,
            user_id=access.user_id,
            action="access.denied",
            table_name="role_permissions",
            new_values={"role": role, "operations": names, "path": request.url.path},
        )
    except Exception as e:
        logger.error(f"Could not audit denied access for user {access.user_id}: {e}")
        await session.rollback()
    raise PermissionDeniedException()


def _record(access: AccessContext, operations: Iterable[SensitiveOperation], allowed: bool) -> None:
    role = access.role.value if access.role else "none"
    outcome = "allowed" if allowed else "denied"
    for op in operations:
        authorization_decisions.labels(role=role, operation=op.value, outcome=outcome).inc()


def require_operation(operation: SensitiveOperation) -> Callable:
    """Dependency: caller must be authorized for `operation`."""

    async def dependency(
        request: Request,
        access: AccessContext = Depends(get_access_context),
        session: AsyncSession = Depends(get_session),
    ) -> AccessContext:
        allowed = access.can(operation)
        _record(access, [operation], allowed)
        if not allowed:
            await deny(request, session, access, [operation])
        return access

    return dependency


def require_any(*operations: SensitiveOperation) -> Callable:
    """Dependency: caller must be authorized for at least one of `operations`."""

    async def dependency(
        request: Request,
        access: AccessContext = Depends(get_access_context),
        session: AsyncSession = Depends(get_session),
    ) -> AccessContext:
        allowed = access.can_any(operations)
        _record(access, operations, allowed)
        if not allowed:
            await deny(request, session, access, operations)
        return access

    return dependency


def require_all(*operations: SensitiveOperation) -> Callable:
    """Dependency: caller must be authorized for every one of `operations`."""

    async def dependency(
        request: Request,
        access: AccessContext = Depends(get_access_context),
        session: AsyncSession = Depends(get_session),
    ) -> AccessContext:
        allowed = access.can_all(operations)
        _record(access, operations, allowed)
        if not allowed:
            await deny(request, session, access, operations)
        return access

    return dependency
