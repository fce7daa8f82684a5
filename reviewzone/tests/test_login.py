"""
Tests for the login form controller and status poller.
"""

import asyncio

import pytest

from reviewzone.auth import AuthResult, LoginForm, StatusPoller
from reviewzone.auth.login import BLOCKED_MESSAGE
from reviewzone.core import AuthServiceUnavailableError, LoginInProgressError


@pytest.fixture
def form(limiter, authenticator):
    return LoginForm(limiter, authenticator)


class TestSubmit:
    @pytest.mark.asyncio
    async def test_success_returns_session(self, form):
        result = await form.submit("owner@reviewzone.io", "correct-horse")
        assert result.ok is True
        assert result.session.access_token == "access-token"
        assert result.status.remaining_attempts == 5

    @pytest.mark.asyncio
    async def test_rejection_counts_one_attempt(self, form):
        result = await form.submit("owner@reviewzone.io", "wrong")
        assert result.ok is False
        assert result.error == "Invalid login credentials"
        assert result.refused is False
        assert result.status.remaining_attempts == 4
        assert form.status.remaining_attempts == 4

    @pytest.mark.asyncio
    async def test_success_resets_previous_failures(self, form):
        await form.submit("owner@reviewzone.io", "wrong")
        await form.submit("owner@reviewzone.io", "wrong")
        result = await form.submit("owner@reviewzone.io", "correct-horse")
        assert result.ok is True
        assert form.limiter.get_status().remaining_attempts == 5

    @pytest.mark.asyncio
    async def test_fifth_rejection_locks_form(self, form):
        for _ in range(5):
            result = await form.submit("owner@reviewzone.io", "wrong")
        assert result.error == "Invalid login credentials"
        assert result.status.is_blocked is True
        assert form.is_disabled is True

    @pytest.mark.asyncio
    async def test_blocked_form_does_not_call_auth(self, form, authenticator):
        for _ in range(5):
            await form.submit("owner@reviewzone.io", "wrong")
        calls = authenticator.calls

        result = await form.submit("owner@reviewzone.io", "correct-horse")
        assert result.ok is False
        assert result.refused is True
        assert result.error == BLOCKED_MESSAGE
        assert authenticator.calls == calls

    @pytest.mark.asyncio
    async def test_lockout_expires(self, form, clock):
        for _ in range(5):
            await form.submit("owner@reviewzone.io", "wrong")
        clock.advance(minutes=15)
        form.refresh_status()
        assert form.is_disabled is False
        result = await form.submit("owner@reviewzone.io", "correct-horse")
        assert result.ok is True

    @pytest.mark.asyncio
    async def test_service_outage_is_not_counted(self, form, authenticator):
        authenticator.error = AuthServiceUnavailableError()
        result = await form.submit("owner@reviewzone.io", "correct-horse")
        assert result.ok is False
        assert result.error == "Authentication service unavailable"
        assert isinstance(result.service_error, AuthServiceUnavailableError)
        assert result.status.remaining_attempts == 5
        assert form.is_loading is False

    @pytest.mark.asyncio
    async def test_concurrent_submit_rejected(self, limiter):
        release = asyncio.Event()

        class SlowAuthenticator:
            async def sign_in(self, email, password):
                await release.wait()
                return AuthResult(ok=False, reason="nope")

        form = LoginForm(limiter, SlowAuthenticator())
        pending = asyncio.create_task(form.submit("owner@reviewzone.io", "wrong"))
        await asyncio.sleep(0)
        assert form.is_loading is True
        assert form.is_disabled is True

        with pytest.raises(LoginInProgressError):
            await form.submit("owner@reviewzone.io", "wrong")

        release.set()
        result = await pending
        assert result.status.remaining_attempts == 4
        assert form.is_loading is False


class TestStatusPoller:
    def test_interval_must_be_positive(self, form):
        with pytest.raises(ValueError):
            StatusPoller(form, interval=0)

    @pytest.mark.asyncio
    async def test_poller_refreshes_until_stopped(self, form, clock):
        for _ in range(5):
            form.limiter.record_attempt()
        seen = []

        poller = StatusPoller(form, interval=0.01, on_update=seen.append)
        poller.start()
        await asyncio.sleep(0.05)
        clock.advance(minutes=15)
        await asyncio.sleep(0.05)
        await poller.stop()

        assert poller.running is False
        assert seen[0].is_blocked is True
        assert seen[-1].is_blocked is False
        assert form.status.remaining_attempts == 5

        count = len(seen)
        await asyncio.sleep(0.03)
        assert len(seen) == count

    @pytest.mark.asyncio
    async def test_poller_as_context_manager(self, form):
        async with StatusPoller(form, interval=0.01) as poller:
            assert poller.running is True
            await asyncio.sleep(0.02)
        assert poller.running is False
        await poller.stop()
