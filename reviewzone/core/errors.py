"""
Structured error handling with stable error codes.

No stack traces are exposed to clients. All errors are mapped to
stable, documented error codes for reliable client handling.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes for API responses."""

    # General errors (1xxx)
    INTERNAL_ERROR = "E1000"
    VALIDATION_ERROR = "E1001"
    NOT_FOUND = "E1002"
    METHOD_NOT_ALLOWED = "E1003"
    RATE_LIMITED = "E1005"

    # Authentication errors (2xxx)
    UNAUTHORIZED = "E2000"
    INVALID_CREDENTIALS = "E2001"
    LOGIN_IN_PROGRESS = "E2011"

    # Authorization errors (3xxx)
    FORBIDDEN = "E3000"

    # Auth service errors (4xxx)
    AUTH_SERVICE_UNAVAILABLE = "E4000"
    AUTH_SERVICE_ERROR = "E4001"


@dataclass(frozen=True)
class ErrorResponse:
    """Structured error response for API.

    Format: {error: {code, message, request_id, details?}}
    """

    code: ErrorCode
    message: str
    request_id: str | None = None
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        error: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.request_id:
            error["request_id"] = self.request_id
        if self.details:
            error["details"] = self.details
        return {"error": error}


class AppError(Exception):
    """Base application error with structured error detail."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_response(self, request_id: str | None = None) -> ErrorResponse:
        """Create error response with request ID."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            request_id=request_id,
            details=self.details,
        )


class RateLimitError(AppError):
    """Rate limit exceeded (429)."""

    def __init__(self, message: str = "Rate limit exceeded", details: dict[str, Any] | None = None):
        super().__init__(ErrorCode.RATE_LIMITED, message, 429, details)


class InvalidCredentialsError(AppError):
    """Invalid credentials (401)."""

    def __init__(
        self,
        message: str = "Invalid email or password",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(ErrorCode.INVALID_CREDENTIALS, message, 401, details)


class LoginInProgressError(AppError):
    """A sign-in request is already outstanding for this form (409)."""

    def __init__(self, message: str = "A login request is already in progress"):
        super().__init__(ErrorCode.LOGIN_IN_PROGRESS, message, 409)


class AuthServiceError(AppError):
    """Auth service returned an unusable response (502)."""

    def __init__(
        self, message: str = "Authentication service error", details: dict[str, Any] | None = None
    ):
        super().__init__(ErrorCode.AUTH_SERVICE_ERROR, message, 502, details)


class AuthServiceUnavailableError(AppError):
    """Auth service unreachable (503)."""

    def __init__(
        self,
        message: str = "Authentication service unavailable",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(ErrorCode.AUTH_SERVICE_UNAVAILABLE, message, 503, details)
