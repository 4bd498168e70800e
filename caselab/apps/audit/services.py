"""
Audit service. Append-only audit trail.
"""

import uuid
from typing import Any, Optional

from fastapi import Request
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from caselab.apps.audit.models import AuditLog
from caselab.utils.logger import get_logger
from caselab.utils.security import get_device_info

logger = get_logger(__name__)


def _as_uuid(value: Any) -> Optional[uuid.UUID]:
    if value is None or isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


class AuditService:
    """Records immutable audit entries."""

    @staticmethod
    async def record(
        db: AsyncSession,
        user_id: Optional[Any],
        action: str,
        table_name: str,
        record_id: Optional[Any] = None,
        old_values: Optional[dict] = None,
        new_values: Optional[dict] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        commit: bool = True,
    ) -> AuditLog:
        """Write a single audit row.

        Args:
            action: e.g. "case.created", "user.role_assigned", "access.denied"
            table_name: table the action touched (cases, exhibits, profiles...)

        With commit=False the row joins the caller's transaction.
        """
        entry = await AuditLog.create(
            db=db,
            commit=commit,
            user_id=_as_uuid(user_id),
            action=action,
            table_name=table_name,
            record_id=str(record_id) if record_id is not None else None,
            old_values=old_values,
            new_values=new_values,
            ip_address=ip_address,
            user_agent=user_agent[:500] if user_agent else None,
            device=get_device_info(user_agent) if user_agent else None,
        )
        logger.debug(f"Audit: {action} on {table_name}/{record_id} by {user_id}")
        return entry

    @staticmethod
    async def record_from_request(
        db: AsyncSession,
        request: Request,
        user_id: Optional[Any],
        action: str,
        table_name: str,
        record_id: Optional[Any] = None,
        old_values: Optional[dict] = None,
        new_values: Optional[dict] = None,
        commit: bool = True,
    ) -> AuditLog:
        """Write an audit row taking IP and user agent from the request."""
        return await AuditService.record(
            db=db,
            user_id=user_id,
            action=action,
            table_name=table_name,
            record_id=record_id,
            old_values=old_values,
            new_values=new_values,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent", ""),
            commit=commit,
        )

    @staticmethod
    async def query_logs(
        db: AsyncSession,
        user_id: Optional[uuid.UUID] = None,
        action: Optional[str] = None,
        table_name: Optional[str] = None,
        page: int = 1,
        per_page: int = 50,
    ) -> dict[str, Any]:
        """Filtered, newest-first page of audit rows."""
        per_page = min(per_page, 100)
        page = max(page, 1)

        conditions = []
        if user_id:
            conditions.append(AuditLog.user_id == _as_uuid(user_id))
        if action:
            conditions.append(AuditLog.action.ilike(f"%{action}%"))
        if table_name:
            conditions.append(AuditLog.table_name == table_name)

        total = (
            await db.execute(select(func.count()).select_from(AuditLog).where(*conditions))
        ).scalar_one()
        rows = await db.execute(
            select(AuditLog)
            .where(*conditions)
            .order_by(desc(AuditLog.created_at))
            .offset((page - 1) * per_page)
            .limit(per_page)
        )

        return {
            "items": list(rows.scalars().all()),
            "total": total,
            "page": page,
            "per_page": per_page,
            "pages": (total + per_page - 1) // per_page,
        }

