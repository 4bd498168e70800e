"""
Cases Pydantic schemas.
"""

from datetime import datetime
from typing import Literal, Optional
import uuid
from pydantic import BaseModel, Field

CaseStatus = Literal[
    "open",
    "under_investigation",
    "pending_review",
    "report_approved",
    "evidence_returned",
    "closed",
    "archived",
]
CasePriority = Literal["low", "medium", "high", "critical"]
ExhibitType = Literal["mobile_device", "computer", "storage_media", "network_device", "other"]
ExhibitStatus = Literal["received", "in_analysis", "analysis_complete", "released", "destroyed", "archived"]


# ── Request Schemas ───────────────────────────────────────────────────────────

class CaseCreate(BaseModel):
    case_number: str = Field(..., max_length=100, description="Police / occurrence book reference")
    title: str = Field(..., max_length=500)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    incident_date: Optional[datetime] = None
    priority: CasePriority = "medium"
    exhibit_officer_id: Optional[uuid.UUID] = None


class AssignAnalystRequest(BaseModel):
    analyst_id: uuid.UUID
    notes: Optional[str] = None


class CaseStatusUpdate(BaseModel):
    status: CaseStatus
    notes: Optional[str] = None


class ExhibitCreate(BaseModel):
    device_name: str = Field(..., max_length=255)
    exhibit_type: ExhibitType
    description: Optional[str] = None
    brand: Optional[str] = Field(None, max_length=255)
    model: Optional[str] = Field(None, max_length=255)
    serial_number: Optional[str] = Field(None, max_length=255)
    imei: Optional[str] = Field(None, max_length=50)
    mac_address: Optional[str] = Field(None, max_length=50)
    storage_location: Optional[str] = Field(None, max_length=255)


class CustodyTransferRequest(BaseModel):
    """Hand an exhibit to someone and/or move it to a new status."""
    action: str = Field(..., max_length=50, description="e.g. transfer, check_out, check_in, release")
    to_user_id: Optional[uuid.UUID] = None
    status: Optional[ExhibitStatus] = None
    notes: Optional[str] = None


# ── Response Schemas ──────────────────────────────────────────────────────────

class CaseResponse(BaseModel):
    id: uuid.UUID
    case_number: str
    lab_number: str
    title: str
    description: Optional[str]
    location: Optional[str]
    incident_date: Optional[datetime]
    status: str
    priority: str
    created_by: uuid.UUID
    exhibit_officer_id: Optional[uuid.UUID]
    analyst_id: Optional[uuid.UUID]
    closed_date: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}


class ExhibitResponse(BaseModel):
    id: uuid.UUID
    case_id: uuid.UUID
    exhibit_number: str
    device_name: str
    exhibit_type: str
    description: Optional[str]
    brand: Optional[str]
    model: Optional[str]
    serial_number: Optional[str]
    imei: Optional[str]
    status: str
    storage_location: Optional[str]
    received_by: Optional[uuid.UUID]
    custodian_id: Optional[uuid.UUID]
    created_at: datetime

    model_config = {"from_attributes": True}


class CustodyEventResponse(BaseModel):
    id: uuid.UUID
    exhibit_id: uuid.UUID
    action: str
    from_user_id: Optional[uuid.UUID]
    to_user_id: Optional[uuid.UUID]
    from_status: Optional[str]
    to_status: Optional[str]
    notes: Optional[str]
    recorded_by: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class CaseActivityResponse(BaseModel):
    id: uuid.UUID
    case_id: uuid.UUID
    user_id: Optional[uuid.UUID]
    activity_type: str
    description: str
    details: Optional[dict]
    created_at: datetime

    model_config = {"from_attributes": True}
