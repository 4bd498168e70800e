"""
User management router.

Every route requires manage_all_users.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from caselab.apps.access.context import AccessContext
from caselab.apps.access.dependencies import require_operation
from caselab.apps.access.permissions import SensitiveOperation
from caselab.apps.users.schemas import AssignRoleRequest, CreateUserRequest, UpdateProfileRequest
from caselab.apps.users.services import (
    assign_role,
    create_user,
    list_role_assignments,
    list_users,
    revoke_role,
    update_profile,
)
from caselab.core.cache import RoleCache
from caselab.core.dependencies import get_role_cache
from caselab.db.session import get_session
from caselab.utils.responses import success_response

router = APIRouter(prefix="/api/v1/users", tags=["Users"])

manage_users = require_operation(SensitiveOperation.MANAGE_ALL_USERS)


@router.get("")
async def list_users_endpoint(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    department: Optional[str] = None,
    is_active: Optional[bool] = None,
    access: AccessContext = Depends(manage_users),
    session: AsyncSession = Depends(get_session),
):
    result = await list_users(
        session, page=page, per_page=per_page, department=department, is_active=is_active
    )
    return success_response(message="Users", data=result)


@router.post("", status_code=201)
async def create_user_endpoint(
    data: CreateUserRequest,
    request: Request,
    access: AccessContext = Depends(manage_users),
    session: AsyncSession = Depends(get_session),
):
    user = await create_user(session, request, access.user_id, data)
    return success_response(status_code=201, message="User created", data=user.model_dump())


@router.patch("/{user_id}")
async def update_user_endpoint(
    user_id: uuid.UUID,
    data: UpdateProfileRequest,
    request: Request,
    access: AccessContext = Depends(manage_users),
    session: AsyncSession = Depends(get_session),
    cache: RoleCache = Depends(get_role_cache),
):
    user = await update_profile(session, cache, request, access.user_id, user_id, data)
    return success_response(message="User updated", data=user.model_dump())


@router.get("/{user_id}/roles")
async def list_roles_endpoint(
    user_id: uuid.UUID,
    access: AccessContext = Depends(manage_users),
    session: AsyncSession = Depends(get_session),
):
    rows = await list_role_assignments(session, user_id)
    return success_response(message="Role assignments", data=[r.model_dump() for r in rows])


@router.post("/{user_id}/roles", status_code=201)
async def assign_role_endpoint(
    user_id: uuid.UUID,
    data: AssignRoleRequest,
    request: Request,
    access: AccessContext = Depends(manage_users),
    session: AsyncSession = Depends(get_session),
    cache: RoleCache = Depends(get_role_cache),
):
    assignment = await assign_role(session, cache, request, access.user_id, user_id, data)
    return success_response(status_code=201, message="Role assigned", data=assignment.model_dump())


@router.delete("/{user_id}/roles/{assignment_id}")
async def revoke_role_endpoint(
    user_id: uuid.UUID,
    assignment_id: uuid.UUID,
    request: Request,
    access: AccessContext = Depends(manage_users),
    session: AsyncSession = Depends(get_session),
    cache: RoleCache = Depends(get_role_cache),
):
    await revoke_role(session, cache, request, access.user_id, user_id, assignment_id)
    return success_response(message="Role revoked")
