"""
Data-access contract for role resolution, and its SQLAlchemy implementation.
"""

import uuid
from typing import Optional, Protocol

from sqlalchemy import asc, select
from sqlalchemy.ext.asyncio import AsyncSession

from caselab.apps.auth.models import Profile, RoleAssignment


class RoleStore(Protocol):
    async def earliest_assignment_role(self, user_id: str) -> Optional[str]:
        ...

    async def profile_role(self, user_id: str) -> Optional[str]:
        ...


class SqlRoleStore:
    """
    Reads role data through the request's AsyncSession.

    Each query runs in its own savepoint, so a failed lookup leaves the
    outer transaction usable for the next source and the audit write.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def earliest_assignment_role(self, user_id: str) -> Optional[str]:
        """
        Role of the first assignment ever made to the user.

        Complexity: O(log n) on idx_user_roles_user_created.
        """
        query = (
            select(RoleAssignment.role)
            .where(
                RoleAssignment.user_id == uuid.UUID(str(user_id)),
                RoleAssignment.is_deleted == False,  # noqa: E712
            )
            .order_by(asc(RoleAssignment.created_at), asc(RoleAssignment.sequence))
            .limit(1)
        )
        async with self.session.begin_nested():
            result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def profile_role(self, user_id: str) -> Optional[str]:
        query = select(Profile.role).where(Profile.id == uuid.UUID(str(user_id)))
        async with self.session.begin_nested():
            result = await self.session.execute(query)
        return result.scalar_one_or_none()
