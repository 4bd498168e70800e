"""
User management business logic.

Every change to a user's role data invalidates their cached role so the
next request re-resolves it.
"""

import uuid
from typing import Any, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from caselab.apps.audit.services import AuditService
from caselab.apps.auth.models import Profile, RoleAssignment
from caselab.apps.auth.schemas import ProfileResponse
from caselab.apps.users.schemas import (
    AssignRoleRequest,
    CreateUserRequest,
    RoleAssignmentResponse,
    UpdateProfileRequest,
)
from caselab.core.cache import RoleCache
from caselab.utils.exceptions import ResourceNotFoundException, UserAlreadyExistsException
from caselab.utils.logger import get_logger
from caselab.utils.security import hash_password

logger = get_logger(__name__)


async def _get_profile(session: AsyncSession, user_id: uuid.UUID) -> Profile:
    profile = await Profile.get_by_id(session, user_id)
    if not profile:
        raise ResourceNotFoundException(detail="User not found.")
    return profile


async def list_users(
    session: AsyncSession,
    page: int = 1,
    per_page: int = 20,
    department: Optional[str] = None,
    is_active: Optional[bool] = None,
) -> dict[str, Any]:
    filters: dict[str, Any] = {}
    if department:
        filters["department"] = department
    if is_active is not None:
        filters["is_active"] = is_active

    result = await Profile.paginate(
        session, page=page, per_page=per_page, filters=filters, order_by="full_name"
    )
    result["items"] = [ProfileResponse.model_validate(p).model_dump() for p in result["items"]]
    return result


async def create_user(
    session: AsyncSession,
    request: Request,
    actor_id: str,
    data: CreateUserRequest,
) -> ProfileResponse:
    """Provision an account with a role; the role is also the first assignment."""
    if await Profile.exists(db=session, filters={"email": data.email}):
        raise UserAlreadyExistsException()
    if data.badge_number and await Profile.exists(db=session, filters={"badge_number": data.badge_number}):
        raise UserAlreadyExistsException()

    profile = await Profile.create(
        db=session,
        commit=False,
        email=data.email,
        full_name=data.full_name,
        hashed_password=hash_password(data.password),
        badge_number=data.badge_number,
        department=data.department,
        phone=data.phone,
        role=data.role,
        is_active=True,
    )
    await RoleAssignment.create(
        db=session,
        commit=False,
        user_id=profile.id,
        role=data.role,
        assigned_by=uuid.UUID(actor_id),
    )
    await AuditService.record_from_request(
        db=session,
        request=request,
        user_id=actor_id,
        action="user.created",
        table_name="profiles",
        record_id=profile.id,
        new_values={"email": data.email, "role": data.role, "department": data.department},
        commit=False,
    )
    await session.commit()
    await session.refresh(profile)

    logger.info(f"User {profile.email} created with role {data.role} by {actor_id}")
    return ProfileResponse.model_validate(profile)


async def assign_role(
    session: AsyncSession,
    cache: RoleCache,
    request: Request,
    actor_id: str,
    user_id: uuid.UUID,
    data: AssignRoleRequest,
) -> RoleAssignmentResponse:
    """
    Add a role assignment.

    Only the earliest assignment is authoritative, so adding a row to a user
    who already has one does not change their effective role.
    """
    await _get_profile(session, user_id)

    assignment = await RoleAssignment.create(
        db=session,
        commit=False,
        user_id=user_id,
        role=data.role,
        assigned_by=uuid.UUID(actor_id),
    )
    await AuditService.record_from_request(
        db=session,
        request=request,
        user_id=actor_id,
        action="user.role_assigned",
        table_name="user_roles",
        record_id=assignment.id,
        new_values={"user_id": str(user_id), "role": data.role},
        commit=False,
    )
    await session.commit()
    await session.refresh(assignment)
    await cache.invalidate(str(user_id))

    logger.info(f"Role {data.role} assigned to user {user_id} by {actor_id}")
    return RoleAssignmentResponse.model_validate(assignment)


async def revoke_role(
    session: AsyncSession,
    cache: RoleCache,
    request: Request,
    actor_id: str,
    user_id: uuid.UUID,
    assignment_id: uuid.UUID,
) -> None:
    """Soft-delete an assignment; the next-earliest one becomes authoritative."""
    assignment = await RoleAssignment.get_by_id(session, assignment_id)
    if not assignment or assignment.user_id != user_id:
        raise ResourceNotFoundException(detail="Role assignment not found.")

    await AuditService.record_from_request(
        db=session,
        request=request,
        user_id=actor_id,
        action="user.role_revoked",
        table_name="user_roles",
        record_id=assignment.id,
        old_values={"user_id": str(user_id), "role": assignment.role},
        commit=False,
    )
    await assignment.soft_delete(session)
    await cache.invalidate(str(user_id))
    logger.info(f"Role assignment {assignment_id} revoked for user {user_id} by {actor_id}")


async def list_role_assignments(session: AsyncSession, user_id: uuid.UUID) -> list[RoleAssignmentResponse]:
    await _get_profile(session, user_id)
    rows = await RoleAssignment.find_many(
        db=session, filters={"user_id": user_id}, order_by="created_at"
    )
    return [RoleAssignmentResponse.model_validate(r) for r in rows]


async def update_profile(
    session: AsyncSession,
    cache: RoleCache,
    request: Request,
    actor_id: str,
    user_id: uuid.UUID,
    data: UpdateProfileRequest,
) -> ProfileResponse:
    profile = await _get_profile(session, user_id)
    changes = data.model_dump(exclude_unset=True)
    old_values = {key: getattr(profile, key) for key in changes}

    for key, value in changes.items():
        setattr(profile, key, value)

    await AuditService.record_from_request(
        db=session,
        request=request,
        user_id=actor_id,
        action="user.updated",
        table_name="profiles",
        record_id=profile.id,
        old_values=old_values,
        new_values=changes,
        commit=False,
    )
    await profile.save(session)

    if "role" in changes or "is_active" in changes:
        await cache.invalidate(str(user_id))

    logger.info(f"Profile {user_id} updated by {actor_id}: {sorted(changes)}")
    return ProfileResponse.model_validate(profile)
