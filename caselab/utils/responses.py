"""
Response envelopes.

Every successful route returns the same shape the exception handlers use
for failures: status, status_code, message, data.
"""

from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success_response(
    status_code: int = 200,
    message: str = "OK",
    data: Optional[Any] = None,
) -> JSONResponse:
    """Wrap a payload in the success envelope."""
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "success",
            "status_code": status_code,
            "message": message,
            "data": jsonable_encoder(data) if data is not None else {},
        },
    )


def auth_response(
    status_code: int,
    message: str,
    access_token: str,
    refresh_token: str,
    data: Optional[Any] = None,
) -> JSONResponse:
    """Success envelope that also carries a token pair."""
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "success",
            "status_code": status_code,
            "message": message,
            "data": jsonable_encoder(data) if data is not None else {},
            "tokens": {
                "access_token": access_token,
                "refresh_token": refresh_token,
                "token_type": "bearer",
            },
        },
    )
