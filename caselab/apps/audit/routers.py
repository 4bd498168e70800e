"""
Audit router. Read-only; requires view_audit_logs.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from caselab.apps.access.context import AccessContext
from caselab.apps.access.dependencies import require_operation
from caselab.apps.access.permissions import SensitiveOperation
from caselab.apps.audit.schemas import AuditLogResponse
from caselab.apps.audit.services import AuditService
from caselab.db.session import get_session
from caselab.utils.responses import success_response

router = APIRouter(prefix="/api/v1/audit", tags=["Audit"])


@router.get("/logs")
async def list_audit_logs(
    user_id: Optional[uuid.UUID] = None,
    action: Optional[str] = None,
    table_name: Optional[str] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    access: AccessContext = Depends(require_operation(SensitiveOperation.VIEW_AUDIT_LOGS)),
    session: AsyncSession = Depends(get_session),
):
    result = await AuditService.query_logs(
        session,
        user_id=user_id,
        action=action,
        table_name=table_name,
        page=page,
        per_page=per_page,
    )
    result["items"] = [AuditLogResponse.model_validate(row).model_dump() for row in result["items"]]
    return success_response(message="Audit logs", data=result)
