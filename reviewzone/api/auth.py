"""
Authentication API endpoints.

Serves the login form: the throttle status it polls and the sign-in call
guarded by the caller's attempt limiter.
"""

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, EmailStr, Field

from reviewzone.auth.dependencies import RequireLimiter, RequireLoginForm
from reviewzone.auth.limiter import LimiterStatus
from reviewzone.config import get_settings
from reviewzone.core import InvalidCredentialsError, RateLimitError

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    """Login request body."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class RateLimitStatusResponse(BaseModel):
    """Throttle status rendered by the login form."""

    is_blocked: bool
    remaining_attempts: int
    block_time_remaining: float
    block_seconds_remaining: int
    poll_interval_seconds: float


def _status_payload(status: LimiterStatus) -> dict[str, Any]:
    return {
        **status.to_dict(),
        "poll_interval_seconds": get_settings().status_poll_interval_seconds,
    }


@router.get("/rate-limit", response_model=RateLimitStatusResponse)
async def rate_limit_status(limiter: RequireLimiter) -> dict[str, Any]:
    """Current throttle status for this client."""
    return _status_payload(limiter.get_status())


@router.post("/login")
async def login(body: LoginRequest, form: RequireLoginForm) -> dict[str, Any]:
    """
    Sign in with email and password.

    Refused with 429 while the client is locked out; rejected credentials
    count against the client's remaining attempts.
    """
    result = await form.submit(body.email, body.password)
    details = {"rate_limit": _status_payload(result.status)}

    if result.service_error is not None:
        raise result.service_error
    if result.refused:
        raise RateLimitError(result.error or "Too many login attempts", details=details)
    if not result.ok:
        raise InvalidCredentialsError(result.error or "Failed to login", details=details)

    session = result.session
    return {
        "user": {"id": session.user_id, "email": session.email},
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_in": session.expires_in,
        "rate_limit": _status_payload(result.status),
    }
