"""
Audit Pydantic schemas.
"""

from datetime import datetime
from typing import Any, Optional
import uuid
from pydantic import BaseModel


class AuditLogResponse(BaseModel):
    id: uuid.UUID
    user_id: Optional[uuid.UUID]
    action: str
    table_name: str
    record_id: Optional[str]
    old_values: Optional[dict[str, Any]]
    new_values: Optional[dict[str, Any]]
    ip_address: Optional[str]
    user_agent: Optional[str]
    device: Optional[dict[str, Any]]
    created_at: datetime

    model_config = {"from_attributes": True}
