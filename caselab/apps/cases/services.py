"""
Cases services.

Business logic for cases, exhibits and chain of custody.

Flow of an exhibit:
    received -> in_analysis -> analysis_complete -> released | destroyed | archived

Every exhibit status change or hand-over writes a CustodyEvent; every case
change writes a CaseActivity. Both are append-only.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from caselab.apps.access.context import AccessContext
from caselab.apps.access.permissions import SensitiveOperation
from caselab.apps.audit.services import AuditService
from caselab.apps.auth.models import Profile
from caselab.apps.cases.models import LAB_NUMBER_SEQ, Case, CaseActivity, CustodyEvent, Exhibit
from caselab.apps.cases.numbering import format_exhibit_number, lab_number
from caselab.apps.cases.schemas import (
    AssignAnalystRequest,
    CaseCreate,
    CaseResponse,
    CaseStatusUpdate,
    CustodyEventResponse,
    CustodyTransferRequest,
    ExhibitCreate,
    ExhibitResponse,
)
from caselab.utils.exceptions import (
    DuplicateRecordException,
    InvalidStatusTransitionException,
    PermissionDeniedException,
    ResourceNotFoundException,
)
from caselab.utils.logger import get_logger

logger = get_logger(__name__)

EXHIBIT_TRANSITIONS: dict[str, frozenset[str]] = {
    "received": frozenset({"in_analysis", "released", "destroyed", "archived"}),
    "in_analysis": frozenset({"analysis_complete", "received"}),
    "analysis_complete": frozenset({"in_analysis", "released", "destroyed", "archived"}),
    "released": frozenset({"archived"}),
    "destroyed": frozenset(),
    "archived": frozenset(),
}

# Case statuses that sign off on the forensic work.
SIGN_OFF_STATUSES = frozenset({"report_approved", "evidence_returned", "closed", "archived"})


async def _get_case(session: AsyncSession, case_id: uuid.UUID) -> Case:
    case = await Case.get_by_id(session, case_id)
    if not case:
        raise ResourceNotFoundException(detail="Case not found.")
    return case


async def _get_exhibit(session: AsyncSession, exhibit_id: uuid.UUID) -> Exhibit:
    exhibit = await Exhibit.get_by_id(session, exhibit_id)
    if not exhibit:
        raise ResourceNotFoundException(detail="Exhibit not found.")
    return exhibit


async def _require_profile(session: AsyncSession, user_id: uuid.UUID, label: str) -> Profile:
    profile = await Profile.get_by_id(session, user_id)
    if not profile or not profile.is_active:
        raise ResourceNotFoundException(detail=f"{label} not found or inactive.")
    return profile


async def log_activity(
    session: AsyncSession,
    case_id: uuid.UUID,
    user_id: Optional[str],
    activity_type: str,
    description: str,
    details: Optional[dict] = None,
) -> CaseActivity:
    """Append a case activity inside the caller's transaction."""
    return await CaseActivity.create(
        db=session,
        commit=False,
        case_id=case_id,
        user_id=uuid.UUID(user_id) if user_id else None,
        activity_type=activity_type,
        description=description,
        details=details,
    )


async def _next_lab_number(session: AsyncSession) -> str:
    """Next CYB/LAB/#### number, drawn from the lab number sequence."""
    value = (await session.execute(select(LAB_NUMBER_SEQ.next_value()))).scalar_one()
    return lab_number(value)


# ── Cases ─────────────────────────────────────────────────────────────────────

async def create_case(
    session: AsyncSession,
    request: Request,
    user_id: str,
    data: CaseCreate,
) -> CaseResponse:
    """
    Open a case and allocate its lab number.

    Raises:
        DuplicateRecordException: case number already registered (409)
    """
    if await Case.exists(db=session, filters={"case_number": data.case_number}):
        raise DuplicateRecordException(detail=f"Case {data.case_number} already exists.")
    if data.exhibit_officer_id:
        await _require_profile(session, data.exhibit_officer_id, "Exhibit officer")

    case = await Case.create(
        db=session,
        commit=False,
        case_number=data.case_number,
        lab_number=await _next_lab_number(session),
        title=data.title,
        description=data.description,
        location=data.location,
        incident_date=data.incident_date,
        priority=data.priority,
        status="open",
        created_by=uuid.UUID(user_id),
        exhibit_officer_id=data.exhibit_officer_id,
    )
    await log_activity(
        session, case.id, user_id, "case_created", f"Case {case.case_number} opened as {case.lab_number}"
    )
    await AuditService.record_from_request(
        db=session,
        request=request,
        user_id=user_id,
        action="case.created",
        table_name="cases",
        record_id=case.id,
        new_values={"case_number": case.case_number, "lab_number": case.lab_number},
        commit=False,
    )
    await session.commit()
    await session.refresh(case)

    logger.info(f"Case {case.case_number} created as {case.lab_number} by {user_id}")
    return CaseResponse.model_validate(case)


async def list_cases(
    session: AsyncSession,
    page: int = 1,
    per_page: int = 20,
    status: Optional[str] = None,
    analyst_id: Optional[uuid.UUID] = None,
) -> dict[str, Any]:
    filters: dict[str, Any] = {}
    if status:
        filters["status"] = status
    if analyst_id:
        filters["analyst_id"] = analyst_id

    result = await Case.paginate(
        session, page=page, per_page=per_page, filters=filters, order_by="created_at", order_desc=True
    )
    result["items"] = [CaseResponse.model_validate(c).model_dump() for c in result["items"]]
    return result


async def get_case(session: AsyncSession, case_id: uuid.UUID) -> CaseResponse:
    return CaseResponse.model_validate(await _get_case(session, case_id))


async def assign_analyst(
    session: AsyncSession,
    request: Request,
    user_id: str,
    case_id: uuid.UUID,
    data: AssignAnalystRequest,
) -> CaseResponse:
    """Assign an analyst. An open case moves to under_investigation."""
    case = await _get_case(session, case_id)
    analyst = await _require_profile(session, data.analyst_id, "Analyst")

    previous = case.analyst_id
    case.analyst_id = analyst.id
    if case.status == "open":
        case.status = "under_investigation"

    await log_activity(
        session,
        case.id,
        user_id,
        "analyst_assigned",
        f"Assigned to {analyst.full_name}",
        {"analyst_id": str(analyst.id), "notes": data.notes},
    )
    await AuditService.record_from_request(
        db=session,
        request=request,
        user_id=user_id,
        action="case.analyst_assigned",
        table_name="cases",
        record_id=case.id,
        old_values={"analyst_id": str(previous) if previous else None},
        new_values={"analyst_id": str(analyst.id)},
        commit=False,
    )
    await case.save(session)

    logger.info(f"Case {case.case_number} assigned to analyst {analyst.id} by {user_id}")
    return CaseResponse.model_validate(case)


async def update_case_status(
    session: AsyncSession,
    request: Request,
    access: AccessContext,
    case_id: uuid.UUID,
    data: CaseStatusUpdate,
) -> CaseResponse:
    """
    Move a case to a new status.

    Moving into or out of a sign-off status needs approve_final_reports.
    Archived is terminal and closed can only be archived.
    """
    case = await _get_case(session, case_id)

    touches_sign_off = data.status in SIGN_OFF_STATUSES or case.status in SIGN_OFF_STATUSES
    if touches_sign_off and not access.can(SensitiveOperation.APPROVE_FINAL_REPORTS):
        logger.warning(
            f"User {access.user_id} tried to move case {case.case_number} from {case.status} "
            f"to {data.status} without sign-off rights"
        )
        raise PermissionDeniedException()
    if case.status == "archived" or (case.status == "closed" and data.status != "archived"):
        raise InvalidStatusTransitionException(
            detail=f"Case cannot move from {case.status} to {data.status}."
        )

    previous = case.status
    case.status = data.status
    if data.status == "closed":
        case.closed_date = datetime.now(timezone.utc)

    await log_activity(
        session,
        case.id,
        access.user_id,
        "status_changed",
        f"Status changed from {previous} to {data.status}",
        {"notes": data.notes},
    )
    await AuditService.record_from_request(
        db=session,
        request=request,
        user_id=access.user_id,
        action="case.status_changed",
        table_name="cases",
        record_id=case.id,
        old_values={"status": previous},
        new_values={"status": data.status},
        commit=False,
    )
    await case.save(session)
    return CaseResponse.model_validate(case)


async def list_activities(session: AsyncSession, case_id: uuid.UUID) -> list[CaseActivity]:
    await _get_case(session, case_id)
    return await CaseActivity.find_many(
        db=session, filters={"case_id": case_id}, order_by="created_at", limit=500
    )


async def case_statistics(session: AsyncSession) -> dict[str, Any]:
    """Counts of cases by status and priority, and exhibits by status."""
    by_status = await session.execute(
        select(Case.status, func.count()).where(Case.is_deleted == False).group_by(Case.status)  # noqa: E712
    )
    by_priority = await session.execute(
        select(Case.priority, func.count()).where(Case.is_deleted == False).group_by(Case.priority)  # noqa: E712
    )
    exhibits = await session.execute(
        select(Exhibit.status, func.count()).where(Exhibit.is_deleted == False).group_by(Exhibit.status)  # noqa: E712
    )
    cases_by_status = {status: count for status, count in by_status.all()}
    return {
        "total_cases": sum(cases_by_status.values()),
        "cases_by_status": cases_by_status,
        "cases_by_priority": {priority: count for priority, count in by_priority.all()},
        "exhibits_by_status": {status: count for status, count in exhibits.all()},
    }


# ── Exhibits ──────────────────────────────────────────────────────────────────

async def add_exhibit(
    session: AsyncSession,
    request: Request,
    user_id: str,
    case_id: uuid.UUID,
    data: ExhibitCreate,
) -> ExhibitResponse:
    """
    Log an exhibit against a case.

    The receiving officer becomes the first custodian. All exhibits of the
    case are renumbered so a lone exhibit is /A and several are /A1../An.
    """
    case = await _get_case(session, case_id)
    if case.status in ("closed", "archived"):
        raise InvalidStatusTransitionException(detail="Cannot log exhibits against a closed case.")

    receiver = uuid.UUID(user_id)
    exhibit = await Exhibit.create(
        db=session,
        commit=False,
        case_id=case.id,
        exhibit_number=format_exhibit_number(case.lab_number, 0, 1),
        received_by=receiver,
        custodian_id=receiver,
        status="received",
        **data.model_dump(),
    )
    await _renumber_exhibits(session, case)

    await CustodyEvent.create(
        db=session,
        commit=False,
        exhibit_id=exhibit.id,
        action="received",
        to_user_id=receiver,
        to_status="received",
        recorded_by=receiver,
    )
    await log_activity(
        session, case.id, user_id, "exhibit_logged", f"Exhibit {data.device_name} logged",
        {"exhibit_id": str(exhibit.id)},
    )
    await AuditService.record_from_request(
        db=session,
        request=request,
        user_id=user_id,
        action="exhibit.created",
        table_name="exhibits",
        record_id=exhibit.id,
        new_values={"case_id": str(case.id), "device_name": data.device_name},
        commit=False,
    )
    await session.commit()
    await session.refresh(exhibit)

    logger.info(f"Exhibit {exhibit.exhibit_number} logged on case {case.case_number} by {user_id}")
    return ExhibitResponse.model_validate(exhibit)


async def _renumber_exhibits(session: AsyncSession, case: Case) -> None:
    exhibits = await Exhibit.find_many(
        db=session, filters={"case_id": case.id}, order_by="created_at", limit=1000
    )
    total = len(exhibits)
    for index, exhibit in enumerate(exhibits):
        exhibit.exhibit_number = format_exhibit_number(case.lab_number, index, total)
    await session.flush()


async def list_exhibits(session: AsyncSession, case_id: uuid.UUID) -> list[ExhibitResponse]:
    await _get_case(session, case_id)
    rows = await Exhibit.find_many(
        db=session, filters={"case_id": case_id}, order_by="created_at", limit=1000
    )
    return [ExhibitResponse.model_validate(e) for e in rows]


async def transfer_custody(
    session: AsyncSession,
    request: Request,
    user_id: str,
    exhibit_id: uuid.UUID,
    data: CustodyTransferRequest,
) -> ExhibitResponse:
    """
    Record a hand-over and/or status change of an exhibit.

    Raises:
        InvalidStatusTransitionException: status not reachable from the current one
    """
    exhibit = await _get_exhibit(session, exhibit_id)

    if data.to_user_id is None and data.status is None:
        raise InvalidStatusTransitionException(detail="A custody event needs a new custodian or a new status.")
    if data.status and data.status != exhibit.status and data.status not in EXHIBIT_TRANSITIONS[exhibit.status]:
        raise InvalidStatusTransitionException(
            detail=f"Exhibit cannot move from {exhibit.status} to {data.status}."
        )
    if data.to_user_id:
        await _require_profile(session, data.to_user_id, "Receiving officer")

    previous_custodian = exhibit.custodian_id
    previous_status = exhibit.status
    if data.to_user_id:
        exhibit.custodian_id = data.to_user_id
    if data.status:
        exhibit.status = data.status
        if data.status == "in_analysis" and data.to_user_id:
            exhibit.assigned_analyst = data.to_user_id

    await CustodyEvent.create(
        db=session,
        commit=False,
        exhibit_id=exhibit.id,
        action=data.action,
        from_user_id=previous_custodian,
        to_user_id=exhibit.custodian_id,
        from_status=previous_status,
        to_status=exhibit.status,
        notes=data.notes,
        recorded_by=uuid.UUID(user_id),
    )
    await AuditService.record_from_request(
        db=session,
        request=request,
        user_id=user_id,
        action=f"exhibit.{data.action}",
        table_name="exhibits",
        record_id=exhibit.id,
        old_values={"custodian_id": str(previous_custodian) if previous_custodian else None, "status": previous_status},
        new_values={"custodian_id": str(exhibit.custodian_id) if exhibit.custodian_id else None, "status": exhibit.status},
        commit=False,
    )
    await exhibit.save(session)

    logger.info(f"Custody event '{data.action}' on exhibit {exhibit.exhibit_number} by {user_id}")
    return ExhibitResponse.model_validate(exhibit)


async def custody_history(session: AsyncSession, exhibit_id: uuid.UUID) -> list[CustodyEventResponse]:
    await _get_exhibit(session, exhibit_id)
    rows = await CustodyEvent.find_many(
        db=session, filters={"exhibit_id": exhibit_id}, order_by="created_at", limit=1000
    )
    return [CustodyEventResponse.model_validate(e) for e in rows]
