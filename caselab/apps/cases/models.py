"""
Cases ORM models.

Cases own exhibits; exhibits carry an append-only custody history; cases
carry an append-only activity log.
"""

import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Index, Sequence, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from caselab.db.base_model import BaseModel

CASE_STATUSES = (
    "open",
    "under_investigation",
    "pending_review",
    "report_approved",
    "evidence_returned",
    "closed",
    "archived",
)
CASE_PRIORITIES = ("low", "medium", "high", "critical")
EXHIBIT_TYPES = ("mobile_device", "computer", "storage_media", "network_device", "other")
EXHIBIT_STATUSES = (
    "received",
    "in_analysis",
    "analysis_complete",
    "released",
    "destroyed",
    "archived",
)

# Lab number allocator. Values are never handed out twice, even after a rollback.
LAB_NUMBER_SEQ = Sequence("case_lab_number_seq", metadata=BaseModel.metadata)


class Case(BaseModel):
    __tablename__ = "cases"

    case_number: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    lab_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    incident_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(
        SAEnum(*CASE_STATUSES, name="case_status"), nullable=False, default="open", index=True
    )
    priority: Mapped[str] = mapped_column(
        SAEnum(*CASE_PRIORITIES, name="case_priority"), nullable=False, default="medium"
    )
    created_by: Mapped[uuid.UUID] = mapped_column(ForeignKey("profiles.id"), nullable=False)
    exhibit_officer_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("profiles.id"), nullable=True)
    analyst_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("profiles.id"), nullable=True, index=True)
    closed_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    exhibits: Mapped[list["Exhibit"]] = relationship(
        "Exhibit", back_populates="case", order_by="Exhibit.created_at"
    )


class Exhibit(BaseModel):
    __tablename__ = "exhibits"

    case_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("cases.id"), nullable=False, index=True)
    exhibit_number: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    device_name: Mapped[str] = mapped_column(String(255), nullable=False)
    exhibit_type: Mapped[str] = mapped_column(
        SAEnum(*EXHIBIT_TYPES, name="exhibit_type"), nullable=False
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    brand: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    serial_number: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    imei: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    mac_address: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    storage_location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        SAEnum(*EXHIBIT_STATUSES, name="exhibit_status"), nullable=False, default="received", index=True
    )
    received_by: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("profiles.id"), nullable=True)
    assigned_analyst: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("profiles.id"), nullable=True)
    custodian_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("profiles.id"), nullable=True)

    case: Mapped["Case"] = relationship("Case", back_populates="exhibits")

    __table_args__ = (
        Index("idx_exhibit_case_status", "case_id", "status"),
    )


class CustodyEvent(BaseModel):
    """One hand-over or status change of an exhibit. Never updated."""

    __tablename__ = "custody_events"

    exhibit_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("exhibits.id"), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    from_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("profiles.id"), nullable=True)
    to_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("profiles.id"), nullable=True)
    from_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    to_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    recorded_by: Mapped[uuid.UUID] = mapped_column(ForeignKey("profiles.id"), nullable=False)


class CaseActivity(BaseModel):
    __tablename__ = "case_activities"

    case_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("cases.id"), nullable=False, index=True)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("profiles.id"), nullable=True)
    activity_type: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    details: Mapped[Optional[dict]] = mapped_column("metadata", JSONB, nullable=True)
