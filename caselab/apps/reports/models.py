"""
Report submission ORM model.

An analyst submits a forensic report for a case; a reviewer with sign-off
rights approves, rejects or sends it back for revision.
"""

import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from caselab.db.base_model import BaseModel

REPORT_STATUSES = ("pending", "approved", "rejected", "revision_requested")


class ReportSubmission(BaseModel):
    __tablename__ = "report_submissions"

    case_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True)
    analyst_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("profiles.id"), nullable=False, index=True)
    report_title: Mapped[str] = mapped_column(String(500), nullable=False)
    file_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    file_path: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        SAEnum(*REPORT_STATUSES, name="report_status"), nullable=False, default="pending", index=True
    )
    reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("profiles.id"), nullable=True)
    review_comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    review_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
