"""
Reports router.

Entry/exit only. Reviewing needs approve_final_reports.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from caselab.apps.access.context import AccessContext
from caselab.apps.access.dependencies import get_access_context, require_operation
from caselab.apps.access.permissions import SensitiveOperation
from caselab.apps.reports.schemas import ReportReviewRequest, ReportStatus, ReportSubmitRequest
from caselab.apps.reports.services import list_reports, review_report, submit_report
from caselab.db.session import get_session
from caselab.utils.responses import success_response

router = APIRouter(prefix="/api/v1/reports", tags=["Reports"])


@router.post("", status_code=201)
async def submit_report_endpoint(
    data: ReportSubmitRequest,
    request: Request,
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    report = await submit_report(session, request, access.user_id, data)
    return success_response(status_code=201, message="Report submitted", data=report.model_dump())


@router.get("")
async def list_reports_endpoint(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    case_id: Optional[uuid.UUID] = None,
    status: Optional[ReportStatus] = None,
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    result = await list_reports(session, page=page, per_page=per_page, case_id=case_id, status=status)
    return success_response(message="Report submissions", data=result)


@router.post("/{report_id}/review")
async def review_report_endpoint(
    report_id: uuid.UUID,
    data: ReportReviewRequest,
    request: Request,
    access: AccessContext = Depends(require_operation(SensitiveOperation.APPROVE_FINAL_REPORTS)),
    session: AsyncSession = Depends(get_session),
):
    report = await review_report(session, request, access, report_id, data)
    return success_response(message=f"Report {data.decision.replace('_', ' ')}", data=report.model_dump())
