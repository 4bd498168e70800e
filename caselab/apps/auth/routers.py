"""
Auth router.

Entry/exit only, no logic here. Calls auth services.
"""

import uuid

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from caselab.apps.auth.models import Profile
from caselab.apps.auth.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    ProfileResponse,
    RefreshRequest,
    RegisterRequest,
)
from caselab.apps.auth.services import (
    change_password,
    get_current_user,
    login_user,
    refresh_tokens,
    register_user,
)
from caselab.config.settings import settings
from caselab.core.rate_limit import limiter
from caselab.db.session import get_session
from caselab.utils.responses import auth_response, success_response

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


@router.post("/register", status_code=201)
async def register(
    data: RegisterRequest,
    session: AsyncSession = Depends(get_session),
):
    """Register a new officer account. Returns the profile."""
    user = await register_user(session=session, data=data)
    return success_response(
        status_code=201,
        message="Account created successfully",
        data=user.model_dump(),
    )


@router.post("/login")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    data: LoginRequest,
    session: AsyncSession = Depends(get_session),
):
    """Authenticate and receive JWT tokens."""
    result = await login_user(session=session, data=data)
    return auth_response(
        status_code=200,
        message="Login successful",
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
        data=result.user.model_dump(),
    )


@router.post("/refresh")
async def refresh(
    data: RefreshRequest,
    session: AsyncSession = Depends(get_session),
):
    tokens = await refresh_tokens(session=session, refresh_token=data.refresh_token)
    return auth_response(
        status_code=200,
        message="Token refreshed",
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.get("/me")
async def me(
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Return the currently authenticated user's profile."""
    profile = await Profile.get_by_id(session, uuid.UUID(user["id"]))
    return success_response(
        status_code=200,
        message="User profile",
        data=ProfileResponse.model_validate(profile).model_dump(),
    )


@router.post("/change-password")
async def change_password_endpoint(
    data: ChangePasswordRequest,
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await change_password(session=session, user_id=user["id"], data=data)
    return success_response(status_code=200, message="Password changed")
