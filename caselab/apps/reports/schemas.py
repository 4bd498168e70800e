from datetime import datetime
from typing import Literal, Optional
import uuid
from pydantic import BaseModel, Field

ReportStatus = Literal["pending", "approved", "rejected", "revision_requested"]
ReviewDecision = Literal["approved", "rejected", "revision_requested"]


class ReportSubmitRequest(BaseModel):
    case_id: uuid.UUID
    report_title: str = Field(..., min_length=1, max_length=500)
    file_name: Optional[str] = Field(None, max_length=255)
    file_path: Optional[str] = None


class ReportReviewRequest(BaseModel):
    decision: ReviewDecision
    comments: Optional[str] = None


class ReportResponse(BaseModel):
    id: uuid.UUID
    case_id: uuid.UUID
    analyst_id: uuid.UUID
    report_title: str
    file_name: Optional[str]
    file_path: Optional[str]
    status: str
    reviewed_by: Optional[uuid.UUID]
    review_comments: Optional[str]
    review_date: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}
