"""
Auth Pydantic schemas.

Input validation and output serialization for auth routes.
"""

from datetime import datetime
from typing import Optional
import uuid
from pydantic import BaseModel, EmailStr, Field


# ── Request Schemas ───────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    """Login with email + password."""
    email: EmailStr
    password: str = Field(..., min_length=8)


class RegisterRequest(BaseModel):
    """
    Self-registration.

    No role field: new accounts get the default profile role and wait for
    an administrator to assign anything else.
    """
    email: EmailStr
    full_name: str = Field(..., min_length=2, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    badge_number: Optional[str] = Field(None, max_length=50)
    department: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=8)
    new_password: str = Field(..., min_length=8, max_length=128)


class RefreshRequest(BaseModel):
    """Refresh access token using refresh token."""
    refresh_token: str


# ── Response Schemas ──────────────────────────────────────────────────────────

class ProfileResponse(BaseModel):
    """Public profile data (no credential fields)."""
    id: uuid.UUID
    email: str
    full_name: str
    badge_number: Optional[str]
    department: Optional[str]
    phone: Optional[str]
    role: Optional[str]
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class TokenPair(BaseModel):
    """Access + refresh token pair."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(BaseModel):
    """Login response with tokens and profile data."""
    user: ProfileResponse
    tokens: TokenPair
