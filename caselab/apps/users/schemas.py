"""
User management schemas.
"""

from datetime import datetime
from typing import Optional
import uuid
from pydantic import BaseModel, EmailStr, Field, field_validator

from caselab.apps.access.permissions import Role


def _validate_role(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    role = Role.coerce(v)
    if role is None:
        raise ValueError(f"Role must be one of: {[r.value for r in Role]}")
    return role.value


class CreateUserRequest(BaseModel):
    """Administrator-provisioned account with an explicit role."""
    email: EmailStr
    full_name: str = Field(..., min_length=2, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    role: str
    badge_number: Optional[str] = Field(None, max_length=50)
    department: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str) -> str:
        return _validate_role(v)


class AssignRoleRequest(BaseModel):
    role: str

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str) -> str:
        return _validate_role(v)


class UpdateProfileRequest(BaseModel):
    """Partial update. Changing `role` here only touches the fallback field."""
    full_name: Optional[str] = Field(None, min_length=2, max_length=255)
    department: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    role: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: Optional[str]) -> Optional[str]:
        return _validate_role(v)


class RoleAssignmentResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    role: str
    assigned_by: Optional[uuid.UUID]
    created_at: datetime

    model_config = {"from_attributes": True}
