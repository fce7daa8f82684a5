"""Tests for the Supabase password authenticator using httpx.MockTransport."""

import json

import httpx
import pytest

from reviewzone.auth import SupabaseAuthenticator
from reviewzone.core import AuthServiceError, AuthServiceUnavailableError, RateLimitError


def _authenticator(handler):
    return SupabaseAuthenticator(
        "https://project.supabase.co/",
        "anon-key",
        timeout_seconds=5,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_successful_sign_in():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["apikey"] = request.headers.get("apikey")
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "access_token": "jwt",
                "refresh_token": "refresh",
                "expires_in": 3600,
                "user": {"id": "uid-1", "email": "owner@reviewzone.io"},
            },
        )

    auth = _authenticator(handler)
    result = await auth.sign_in("owner@reviewzone.io", "secret")
    await auth.aclose()

    assert result.ok is True
    assert result.session.access_token == "jwt"
    assert result.session.user_id == "uid-1"
    assert captured["url"] == "https://project.supabase.co/auth/v1/token?grant_type=password"
    assert captured["apikey"] == "anon-key"
    assert captured["body"] == {"email": "owner@reviewzone.io", "password": "secret"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status,payload,reason",
    [
        (400, {"error": "invalid_grant", "error_description": "Invalid login credentials"},
         "Invalid login credentials"),
        (400, {"code": 400, "msg": "Email not confirmed"}, "Email not confirmed"),
        (422, {}, "Failed to login"),
    ],
)
async def test_rejected_credentials(status, payload, reason):
    auth = _authenticator(lambda request: httpx.Response(status, json=payload))
    result = await auth.sign_in("owner@reviewzone.io", "wrong")
    assert result.ok is False
    assert result.reason == reason
    assert result.session is None


@pytest.mark.asyncio
async def test_server_error_is_unavailable():
    auth = _authenticator(lambda request: httpx.Response(503, text="down"))
    with pytest.raises(AuthServiceUnavailableError):
        await auth.sign_in("owner@reviewzone.io", "secret")


@pytest.mark.asyncio
async def test_network_error_is_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    auth = _authenticator(handler)
    with pytest.raises(AuthServiceUnavailableError) as exc_info:
        await auth.sign_in("owner@reviewzone.io", "secret")
    assert "connection refused" in exc_info.value.details["reason"]


@pytest.mark.asyncio
async def test_upstream_throttle_maps_to_rate_limit():
    auth = _authenticator(lambda request: httpx.Response(429, json={"msg": "slow down"}))
    with pytest.raises(RateLimitError):
        await auth.sign_in("owner@reviewzone.io", "secret")


@pytest.mark.asyncio
async def test_malformed_body_is_service_error():
    auth = _authenticator(lambda request: httpx.Response(400, text="<html>oops</html>"))
    with pytest.raises(AuthServiceError):
        await auth.sign_in("owner@reviewzone.io", "secret")


@pytest.mark.asyncio
async def test_undecodable_body_is_service_error():
    auth = _authenticator(lambda request: httpx.Response(400, content=b"\x80\x81oops"))
    with pytest.raises(AuthServiceError):
        await auth.sign_in("owner@reviewzone.io", "secret")


@pytest.mark.asyncio
async def test_non_object_user_is_ignored():
    auth = _authenticator(
        lambda request: httpx.Response(200, json={"access_token": "jwt", "user": "uid-1"})
    )
    result = await auth.sign_in("owner@reviewzone.io", "secret")
    await auth.aclose()

    assert result.ok is True
    assert result.session.user_id is None
    assert result.session.email == "owner@reviewzone.io"


@pytest.mark.asyncio
async def test_success_without_token_is_service_error():
    auth = _authenticator(lambda request: httpx.Response(200, json={"user": {}}))
    with pytest.raises(AuthServiceError):
        await auth.sign_in("owner@reviewzone.io", "secret")


def test_requires_base_url():
    with pytest.raises(ValueError):
        SupabaseAuthenticator("", "anon-key")
