"""
Access Pydantic schemas.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel

from caselab.apps.access.dashboards import DashboardVariant
from caselab.apps.access.permissions import SensitiveOperation


class CheckMode(str, Enum):
    ANY = "any"
    ALL = "all"


class AccessResponse(BaseModel):
    """What the client needs to gate its panels."""
    user_id: Optional[str]
    role: Optional[str]
    permissions: List[SensitiveOperation]
    dashboard: DashboardVariant
    is_chief_of_cyber: bool = False
    executive: bool = False


class CheckResponse(BaseModel):
    role: Optional[str]
    operations: List[SensitiveOperation]
    mode: CheckMode
    allowed: bool


class DashboardResponse(BaseModel):
    role: str
    dashboard: DashboardVariant
