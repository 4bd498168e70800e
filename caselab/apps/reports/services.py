"""
Report review services.

Submission is open to any officer; the review decision is gated at the
router by approve_final_reports. A submission is reviewed exactly once:
only pending rows accept a decision. An analyst answering a revision
request submits a new report.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from caselab.apps.access.context import AccessContext
from caselab.apps.audit.services import AuditService
from caselab.apps.cases.models import Case
from caselab.apps.cases.services import log_activity
from caselab.apps.reports.models import ReportSubmission
from caselab.apps.reports.schemas import ReportResponse, ReportReviewRequest, ReportSubmitRequest
from caselab.utils.exceptions import InvalidStatusTransitionException, ResourceNotFoundException
from caselab.utils.logger import get_logger

logger = get_logger(__name__)

# Case statuses a new submission may move to pending_review.
_REVIEWABLE_CASE_STATUSES = frozenset({"open", "under_investigation"})
# Case statuses an approval may move to report_approved.
_OPEN_CASE_STATUSES = _REVIEWABLE_CASE_STATUSES | {"pending_review"}
_FINAL_CASE_STATUSES = frozenset({"closed", "archived"})


async def _get_case(session: AsyncSession, case_id: uuid.UUID) -> Case:
    case = await Case.get_by_id(session, case_id)
    if not case:
        raise ResourceNotFoundException(detail="Case not found.")
    return case


async def submit_report(
    session: AsyncSession,
    request: Request,
    user_id: str,
    data: ReportSubmitRequest,
) -> ReportResponse:
    case = await _get_case(session, data.case_id)
    if case.status in _FINAL_CASE_STATUSES:
        raise InvalidStatusTransitionException(detail=f"Case {case.case_number} is {case.status}.")

    report = await ReportSubmission.create(
        db=session,
        commit=False,
        case_id=case.id,
        analyst_id=uuid.UUID(user_id),
        report_title=data.report_title,
        file_name=data.file_name,
        file_path=data.file_path,
        status="pending",
    )
    if case.status in _REVIEWABLE_CASE_STATUSES:
        case.status = "pending_review"

    await log_activity(
        session,
        case.id,
        user_id,
        "report_submitted",
        f"Report submitted: {data.report_title}",
        {"report_id": str(report.id)},
    )
    await AuditService.record_from_request(
        db=session,
        request=request,
        user_id=user_id,
        action="report.submitted",
        table_name="report_submissions",
        record_id=report.id,
        new_values={"case_id": str(case.id), "report_title": data.report_title},
        commit=False,
    )
    await session.commit()
    await session.refresh(report)

    logger.info(f"Report {report.id} submitted for case {case.case_number} by {user_id}")
    return ReportResponse.model_validate(report)


async def list_reports(
    session: AsyncSession,
    page: int = 1,
    per_page: int = 20,
    case_id: Optional[uuid.UUID] = None,
    status: Optional[str] = None,
) -> dict[str, Any]:
    filters: dict[str, Any] = {}
    if case_id:
        filters["case_id"] = case_id
    if status:
        filters["status"] = status

    result = await ReportSubmission.paginate(
        session, page=page, per_page=per_page, filters=filters, order_by="created_at", order_desc=True
    )
    result["items"] = [ReportResponse.model_validate(r).model_dump() for r in result["items"]]
    return result


async def review_report(
    session: AsyncSession,
    request: Request,
    access: AccessContext,
    report_id: uuid.UUID,
    data: ReportReviewRequest,
) -> ReportResponse:
    """
    Record a review decision.

    Raises:
        ResourceNotFoundException: unknown report (404)
        InvalidStatusTransitionException: report already reviewed, or case closed or archived (409)
    """
    report = await ReportSubmission.get_by_id(session, report_id)
    if not report:
        raise ResourceNotFoundException(detail="Report not found.")
    if report.status != "pending":
        raise InvalidStatusTransitionException(detail=f"Report has already been {report.status}.")

    case = await _get_case(session, report.case_id)
    if case.status in _FINAL_CASE_STATUSES:
        raise InvalidStatusTransitionException(
            detail=f"Case {case.case_number} is {case.status}; its reports can no longer be reviewed."
        )

    report.status = data.decision
    report.reviewed_by = uuid.UUID(access.user_id)
    report.review_comments = data.comments
    report.review_date = datetime.now(timezone.utc)

    previous_case_status = case.status
    if data.decision == "approved" and case.status in _OPEN_CASE_STATUSES:
        case.status = "report_approved"
    elif data.decision != "approved" and case.status == "pending_review":
        case.status = "under_investigation"

    await log_activity(
        session,
        case.id,
        access.user_id,
        f"report_{data.decision}",
        f"Report '{report.report_title}' {data.decision.replace('_', ' ')}",
        {"report_id": str(report.id), "comments": data.comments},
    )
    await AuditService.record_from_request(
        db=session,
        request=request,
        user_id=access.user_id,
        action=f"report.{data.decision}",
        table_name="report_submissions",
        record_id=report.id,
        old_values={"status": "pending", "case_status": previous_case_status},
        new_values={"status": data.decision, "case_status": case.status},
        commit=False,
    )
    await report.save(session)

    logger.info(
        f"Report {report.id} {data.decision} by {access.user_id}",
        extra={"case_id": str(case.id), "role": access.role.value if access.role else None},
    )
    return ReportResponse.model_validate(report)
