from fastapi import HTTPException, status


class BaseAPIException(HTTPException):
    """Base exception for API errors.
    Message is what the officer sees; keep it short and non-technical."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred. Please try again.",
    ):
        super().__init__(status_code=status_code, detail=detail)


# ============== Authentication ==============


class InvalidCredentialsException(BaseAPIException):
    """Triggered when login fails. Never says which half was wrong."""

    def __init__(self, detail: str = "Invalid email or password."):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
        )


class AccountDeactivatedException(BaseAPIException):
    def __init__(self, detail: str = "Account is deactivated. Contact an administrator."):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


# ============== User Lifecycle ==============


class UserAlreadyExistsException(BaseAPIException):
    """Prevents duplicate registration by email or badge number."""

    def __init__(
        self, detail: str = "An account with this email or badge number already exists."
    ):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )


class InvalidRoleException(BaseAPIException):
    """Raised on writes only. Unknown roles read from storage are never an error."""

    def __init__(self, detail: str = "Unknown role."):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


# ============== Staff & Permissions ==============


class PermissionDeniedException(BaseAPIException):
    """Generic access denied. Details go to the logs and the audit trail, not the client."""

    def __init__(
        self, detail: str = "Access denied. You do not have permission to perform this operation."
    ):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


# ============== Cases & Evidence ==============


class ResourceNotFoundException(BaseAPIException):
    """Generic fallback for missing resources."""

    def __init__(self, detail: str = "The requested record could not be found."):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )


class InvalidStatusTransitionException(BaseAPIException):
    """Triggered when a case, exhibit or report is moved to a status it cannot reach."""

    def __init__(self, detail: str = "This record cannot be moved to the requested status."):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )


class DuplicateRecordException(BaseAPIException):
    def __init__(self, detail: str = "A record with this reference already exists."):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )
