"""
Auth business logic.

Handles login, registration, and JWT-based user verification.
`get_current_user` is the FastAPI dependency behind every secured route; it
answers "who is this" and nothing else. What they may do is decided by
the access app.
"""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from caselab.apps.auth.models import Profile, RoleAssignment
from caselab.apps.auth.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    ProfileResponse,
    RegisterRequest,
    TokenPair,
)
from caselab.config.settings import settings
from caselab.db.session import get_session
from caselab.utils.exceptions import (
    AccountDeactivatedException,
    InvalidCredentialsException,
    UserAlreadyExistsException,
)
from caselab.utils.logger import get_logger
from caselab.utils.security import (
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
    verify_token_type,
)

logger = get_logger(__name__)

_bearer = HTTPBearer()


# ── FastAPI Auth Dependency ───────────────────────────────────────────────────

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """
    FastAPI dependency: validates Bearer token and returns the active user dict.

    Raises HTTP 401 if token is invalid or expired, 403 for deactivated accounts.

    Returns:
        dict with: id, email, full_name, badge_number, department
    """
    payload = verify_token_type(credentials.credentials, expected_type="access")
    user_id: str = payload.get("sub", "")

    user = await Profile.get_by_id(session, _parse_id(user_id))

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    if not user.is_active:
        raise AccountDeactivatedException()

    logger.debug(f"Authenticated user: {user.email}")
    return {
        "id": str(user.id),
        "email": user.email,
        "full_name": user.full_name,
        "badge_number": user.badge_number,
        "department": user.department,
    }


def _parse_id(user_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )


# ── Auth Services ─────────────────────────────────────────────────────────────

async def register_user(
    session: AsyncSession,
    data: RegisterRequest,
) -> ProfileResponse:
    """
    Create a profile with the default role.

    Guard: Reject duplicate emails and badge numbers.
    The default role is written both to the profile and as the first role
    assignment, so it is authoritative from day one.
    """
    if await Profile.exists(db=session, filters={"email": data.email}):
        raise UserAlreadyExistsException()
    if data.badge_number and await Profile.exists(db=session, filters={"badge_number": data.badge_number}):
        raise UserAlreadyExistsException()

    profile = await Profile.create(
        db=session,
        commit=False,
        email=data.email,
        full_name=data.full_name,
        hashed_password=hash_password(data.password),
        badge_number=data.badge_number,
        department=data.department or settings.DEFAULT_DEPARTMENT,
        phone=data.phone,
        role=settings.DEFAULT_PROFILE_ROLE,
        is_active=True,
    )
    await RoleAssignment.create(
        db=session,
        commit=False,
        user_id=profile.id,
        role=settings.DEFAULT_PROFILE_ROLE,
    )
    await session.commit()
    await session.refresh(profile)

    logger.info(f"Registered new user: {profile.email}, role={profile.role}")
    return ProfileResponse.model_validate(profile)


async def login_user(
    session: AsyncSession,
    data: LoginRequest,
) -> LoginResponse:
    """
    Authenticate user and return JWT token pair.

    Guard: Reject bad credentials with generic error (no oracle attack).
    Guard: Reject inactive accounts.
    """
    user = await Profile.find_one(db=session, filters={"email": data.email})

    if not user or not verify_password(data.password, user.hashed_password):
        logger.warning(f"Failed login for {data.email}")
        raise InvalidCredentialsException()

    if not user.is_active:
        raise AccountDeactivatedException()

    user_id = str(user.id)
    tokens = TokenPair(
        access_token=create_access_token(user_id=user_id),
        refresh_token=create_refresh_token(user_id=user_id),
    )

    logger.info(f"User logged in: {user.email}")
    return LoginResponse(user=ProfileResponse.model_validate(user), tokens=tokens)


async def refresh_tokens(session: AsyncSession, refresh_token: str) -> TokenPair:
    payload = verify_token_type(refresh_token, expected_type="refresh")
    user = await Profile.get_by_id(session, _parse_id(payload.get("sub", "")))
    if not user:
        raise InvalidCredentialsException()
    if not user.is_active:
        raise AccountDeactivatedException()

    user_id = str(user.id)
    return TokenPair(
        access_token=create_access_token(user_id=user_id),
        refresh_token=create_refresh_token(user_id=user_id),
    )


async def change_password(
    session: AsyncSession,
    user_id: str,
    data: ChangePasswordRequest,
) -> None:
    user = await Profile.get_by_id(session, _parse_id(user_id))
    if not user or not verify_password(data.current_password, user.hashed_password):
        raise InvalidCredentialsException(detail="Current password is incorrect.")

    user.hashed_password = hash_password(data.new_password)
    await user.save(session)
    logger.info(f"Password changed for user {user.email}")
