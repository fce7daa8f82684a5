"""
Password sign-in against a Supabase (GoTrue) auth endpoint.

Rejected credentials come back as a failed ``AuthResult``; transport and
server problems are raised as AppError subclasses so callers can tell a
wrong password apart from an outage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from reviewzone.core import (
    AuthServiceError,
    AuthServiceUnavailableError,
    RateLimitError,
    get_logger,
    request_id_ctx,
)

logger = get_logger(__name__)

TOKEN_PATH = "/auth/v1/token"
REJECTED_STATUSES = {400, 401, 403, 422}


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None
    user_id: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class AuthResult:
    """Outcome of one sign-in call."""

    ok: bool
    reason: str | None = None
    session: AuthSession | None = None


class Authenticator(Protocol):
    async def sign_in(self, email: str, password: str) -> AuthResult: ...


def create_http_client(
    base_url: str,
    timeout_seconds: int,
    headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Build an AsyncClient with consistent timeout settings.

    Args:
        base_url: Base URL for the auth service.
        timeout_seconds: Total timeout for requests.
        headers: Default headers to include.
        transport: Optional transport (used by tests with MockTransport).
    """
    timeout = httpx.Timeout(timeout_seconds)
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        timeout=timeout,
        headers=headers or {},
        transport=transport,
    )


def _error_reason(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    for key in ("error_description", "msg", "message", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _parse_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise AuthServiceError(
            "Authentication service returned invalid response",
            details={"status": response.status_code, "body": response.text[:300]},
        ) from exc


class SupabaseAuthenticator:
    """``Authenticator`` implementation for Supabase email/password sign-in."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout_seconds: int = 15,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not base_url:
            raise ValueError("Supabase URL is not configured")
        self._client = create_http_client(
            base_url,
            timeout_seconds,
            headers={"apikey": api_key, "Authorization": f"Bearer {api_key}"},
            transport=transport,
        )

    async def sign_in(self, email: str, password: str) -> AuthResult:
        headers = {}
        request_id = request_id_ctx.get()
        if request_id:
            headers["X-Request-ID"] = request_id

        try:
            response = await self._client.post(
                TOKEN_PATH,
                params={"grant_type": "password"},
                json={"email": email, "password": password},
                headers=headers,
            )
        except httpx.HTTPError as exc:
            logger.warning("Auth service request failed", data={"error": str(exc)})
            raise AuthServiceUnavailableError(details={"reason": str(exc)}) from exc

        status = response.status_code
        if status in REJECTED_STATUSES:
            reason = _error_reason(_parse_json(response)) or "Failed to login"
            return AuthResult(ok=False, reason=reason)
        if status == 429:
            raise RateLimitError(
                "Too many login attempts. Please try again later.",
                details={"source": "auth_service"},
            )
        if status >= 500:
            raise AuthServiceUnavailableError(details={"status": status})
        if status >= 300:
            raise AuthServiceError(details={"status": status})

        data = _parse_json(response)
        if not isinstance(data, dict) or not data.get("access_token"):
            raise AuthServiceError(
                "Authentication service returned invalid response",
                details={"status": status},
            )
        user = data.get("user")
        if not isinstance(user, dict):
            user = {}
        return AuthResult(
            ok=True,
            session=AuthSession(
                access_token=data["access_token"],
                refresh_token=data.get("refresh_token"),
                expires_in=data.get("expires_in"),
                user_id=user.get("id"),
                email=user.get("email", email),
            ),
        )

    async def aclose(self) -> None:
        await self._client.aclose()
