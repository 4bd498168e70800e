"""
Cases router.

Entry/exit only. Case work is open to every authenticated officer; unit
statistics need view_system_analytics and sign-off statuses need
approve_final_reports (checked in the service).
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from caselab.apps.access.context import AccessContext
from caselab.apps.access.dependencies import get_access_context, require_operation
from caselab.apps.access.permissions import SensitiveOperation
from caselab.apps.cases.schemas import (
    AssignAnalystRequest,
    CaseActivityResponse,
    CaseCreate,
    CaseStatus,
    CaseStatusUpdate,
    CustodyTransferRequest,
    ExhibitCreate,
)
from caselab.apps.cases.services import (
    add_exhibit,
    assign_analyst,
    case_statistics,
    create_case,
    custody_history,
    get_case,
    list_activities,
    list_cases,
    list_exhibits,
    transfer_custody,
    update_case_status,
)
from caselab.db.session import get_session
from caselab.utils.responses import success_response

router = APIRouter(prefix="/api/v1/cases", tags=["Cases"])


@router.post("", status_code=201)
async def create_case_endpoint(
    data: CaseCreate,
    request: Request,
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    case = await create_case(session, request, access.user_id, data)
    return success_response(status_code=201, message="Case created", data=case.model_dump())


@router.get("")
async def list_cases_endpoint(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    status: Optional[CaseStatus] = None,
    analyst_id: Optional[uuid.UUID] = None,
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    result = await list_cases(session, page=page, per_page=per_page, status=status, analyst_id=analyst_id)
    return success_response(message="Cases", data=result)


@router.get("/stats")
async def case_stats_endpoint(
    access: AccessContext = Depends(require_operation(SensitiveOperation.VIEW_SYSTEM_ANALYTICS)),
    session: AsyncSession = Depends(get_session),
):
    """Unit-wide case and exhibit counts."""
    return success_response(message="Case statistics", data=await case_statistics(session))


@router.get("/{case_id}")
async def get_case_endpoint(
    case_id: uuid.UUID,
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    case = await get_case(session, case_id)
    return success_response(message="Case", data=case.model_dump())


@router.post("/{case_id}/assign")
async def assign_analyst_endpoint(
    case_id: uuid.UUID,
    data: AssignAnalystRequest,
    request: Request,
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    case = await assign_analyst(session, request, access.user_id, case_id, data)
    return success_response(message="Analyst assigned", data=case.model_dump())


@router.patch("/{case_id}/status")
async def update_status_endpoint(
    case_id: uuid.UUID,
    data: CaseStatusUpdate,
    request: Request,
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    case = await update_case_status(session, request, access, case_id, data)
    return success_response(message="Case status updated", data=case.model_dump())


@router.get("/{case_id}/activities")
async def list_activities_endpoint(
    case_id: uuid.UUID,
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    rows = await list_activities(session, case_id)
    return success_response(
        message="Case activity",
        data=[CaseActivityResponse.model_validate(r).model_dump() for r in rows],
    )


@router.post("/{case_id}/exhibits", status_code=201)
async def add_exhibit_endpoint(
    case_id: uuid.UUID,
    data: ExhibitCreate,
    request: Request,
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    exhibit = await add_exhibit(session, request, access.user_id, case_id, data)
    return success_response(status_code=201, message="Exhibit logged", data=exhibit.model_dump())


@router.get("/{case_id}/exhibits")
async def list_exhibits_endpoint(
    case_id: uuid.UUID,
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    rows = await list_exhibits(session, case_id)
    return success_response(message="Exhibits", data=[e.model_dump() for e in rows])


@router.post("/exhibits/{exhibit_id}/custody")
async def transfer_custody_endpoint(
    exhibit_id: uuid.UUID,
    data: CustodyTransferRequest,
    request: Request,
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    exhibit = await transfer_custody(session, request, access.user_id, exhibit_id, data)
    return success_response(message="Custody recorded", data=exhibit.model_dump())


@router.get("/exhibits/{exhibit_id}/custody")
async def custody_history_endpoint(
    exhibit_id: uuid.UUID,
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    rows = await custody_history(session, exhibit_id)
    return success_response(message="Chain of custody", data=[e.model_dump() for e in rows])
