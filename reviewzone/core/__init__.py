"""Core module with logging, errors, middleware, and time helpers."""

from reviewzone.core.errors import (
    AppError,
    AuthServiceError,
    AuthServiceUnavailableError,
    ErrorCode,
    ErrorResponse,
    InvalidCredentialsError,
    LoginInProgressError,
    RateLimitError,
)
from reviewzone.core.logging import (
    client_id_ctx,
    get_logger,
    request_id_ctx,
    setup_logging,
)
from reviewzone.core.time import Clock, utcnow

__all__ = [
    # Errors
    "AppError",
    "AuthServiceError",
    "AuthServiceUnavailableError",
    "ErrorCode",
    "ErrorResponse",
    "InvalidCredentialsError",
    "LoginInProgressError",
    "RateLimitError",
    # Logging
    "client_id_ctx",
    "get_logger",
    "request_id_ctx",
    "setup_logging",
    # Time
    "Clock",
    "utcnow",
]
