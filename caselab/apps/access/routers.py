"""
Access router.

Lets the client ask what the caller may see and do. Decisions are computed
server-side from the resolved role; the client only renders them.
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from caselab.apps.access.context import AccessContext
from caselab.apps.access.dashboards import select_dashboard
from caselab.apps.access.dependencies import get_access_context
from caselab.apps.access.permissions import SensitiveOperation
from caselab.apps.access.schemas import (
    AccessResponse,
    CheckMode,
    CheckResponse,
    DashboardResponse,
)
from caselab.apps.auth.services import get_current_user
from caselab.utils.responses import success_response

router = APIRouter(prefix="/api/v1/access", tags=["Access"])


@router.get("/me")
async def my_access(access: AccessContext = Depends(get_access_context)):
    """Role, permissions and dashboard for the caller."""
    payload = AccessResponse(**access.as_dict())
    return success_response(message="Access resolved", data=payload.model_dump(mode="json"))


@router.get("/check")
async def check_access(
    operation: List[SensitiveOperation] = Query(..., description="One or more operations"),
    mode: CheckMode = Query(CheckMode.ALL),
    access: AccessContext = Depends(get_access_context),
):
    """Allow/deny for one or more operations. Never 403s; the answer is in the body."""
    allowed = access.can_any(operation) if mode is CheckMode.ANY else access.can_all(operation)
    payload = CheckResponse(
        role=access.role.value if access.role else None,
        operations=operation,
        mode=mode,
        allowed=allowed,
    )
    return success_response(message="Access checked", data=payload.model_dump(mode="json"))


@router.get("/dashboards/{role}")
async def dashboard_for_role(role: str, user: dict = Depends(get_current_user)):
    """Dashboard variant for any role name; unknown names get the default."""
    payload = DashboardResponse(role=role, dashboard=select_dashboard(role))
    return success_response(message="Dashboard selected", data=payload.model_dump(mode="json"))
