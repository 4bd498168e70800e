from datetime import datetime, timedelta, timezone
from typing import Any, Optional
import jwt
from jwt.exceptions import InvalidTokenError as JWTError
from fastapi import HTTPException, status

from pwdlib import PasswordHash
from user_agents import parse

from caselab.config.settings import settings

password_hasher = PasswordHash.recommended()


def hash_password(password: str) -> str:
    """Hash a password using Argon2."""
    return password_hasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hashed password."""
    try:
        return password_hasher.verify(plain_password, hashed_password)
    except Exception:
        return False


def create_access_token(
    user_id: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token.

    The token carries identity only. Role is resolved server-side on every
    request so a role change takes effect without re-issuing tokens.
    """
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    payload = {
        "sub": user_id,
        "type": "access",
        "exp": expire,
    }
    return jwt.encode(
        payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM
    )


def create_refresh_token(user_id: str) -> str:
    """Create a JWT refresh token."""
    expire = datetime.now(timezone.utc) + timedelta(
        days=settings.REFRESH_TOKEN_EXPIRE_DAYS_WEB
    )

    payload = {
        "sub": user_id,
        "type": "refresh",
        "iat": datetime.now(timezone.utc),
        "exp": expire,
    }
    return jwt.encode(
        payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM
    )


def verify_token_type(token: str, expected_type: str) -> dict[str, Any]:
    """Universal token decoder and type verifier."""
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    if payload.get("type") != expected_type:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token type. Expected {expected_type}",
        )
    return payload


def get_device_info(user_agent_str: str) -> dict[str, Any]:
    """
    Parse user agent for the audit trail.
    """
    user_agent = parse(user_agent_str or "")
    return {
        "os": user_agent.os.family,
        "browser": user_agent.browser.family,
        "device": user_agent.device.family,
        "is_mobile": user_agent.is_mobile,
        "is_pc": user_agent.is_pc,
    }
