"""
Login form controller.

Wraps the sign-in call with the attempt limiter: refuse while locked out,
count each rejected sign-in once, reset after a successful one. The
status poller keeps the rendered status (disabled inputs, countdown)
fresh while the form is shown.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from dataclasses import dataclass

from reviewzone.auth.limiter import AttemptLimiter, LimiterStatus
from reviewzone.auth.supabase import Authenticator, AuthSession
from reviewzone.core import AppError, LoginInProgressError, get_logger

logger = get_logger(__name__)

BLOCKED_MESSAGE = "Too many login attempts. Please try again later."
DEFAULT_FAILURE_MESSAGE = "Failed to login"


@dataclass(frozen=True)
class LoginResult:
    ok: bool
    status: LimiterStatus
    error: str | None = None
    session: AuthSession | None = None
    #: Not attempted because the client is locked out.
    refused: bool = False
    #: Set when the auth service itself failed; nothing was counted.
    service_error: AppError | None = None


class LoginForm:
    """State behind one displayed login form."""

    def __init__(self, limiter: AttemptLimiter, authenticator: Authenticator):
        self.limiter = limiter
        self.authenticator = authenticator
        self.is_loading = False
        self.status = limiter.get_status()

    @property
    def is_disabled(self) -> bool:
        """Inputs and the submit control are disabled while True."""
        return self.is_loading or self.status.is_blocked

    def refresh_status(self) -> LimiterStatus:
        self.status = self.limiter.get_status()
        return self.status

    async def submit(self, email: str, password: str) -> LoginResult:
        """
        Run one sign-in attempt.

        Raises:
            LoginInProgressError: a previous submission has not settled.
        """
        if self.is_loading:
            raise LoginInProgressError()

        status = self.refresh_status()
        if status.is_blocked:
            return LoginResult(ok=False, status=status, error=BLOCKED_MESSAGE, refused=True)

        self.is_loading = True
        try:
            try:
                result = await self.authenticator.sign_in(email, password)
            except AppError as exc:
                # Outages are not the user's fault and are not counted.
                logger.warning(
                    "Sign-in could not be completed",
                    data={"code": exc.code.value},
                )
                return LoginResult(
                    ok=False,
                    status=self.refresh_status(),
                    error=exc.message,
                    service_error=exc,
                )

            if not result.ok:
                self.limiter.record_attempt()
                status = self.refresh_status()
                logger.info(
                    "Sign-in rejected",
                    data={"remaining_attempts": status.remaining_attempts},
                )
                return LoginResult(
                    ok=False,
                    status=status,
                    error=result.reason or DEFAULT_FAILURE_MESSAGE,
                )

            self.limiter.reset()
            return LoginResult(ok=True, status=self.refresh_status(), session=result.session)
        finally:
            self.is_loading = False


class StatusPoller:
    """Periodically refreshes a form's status until stopped."""

    def __init__(
        self,
        form: LoginForm,
        interval: float = 1.0,
        on_update: Callable[[LimiterStatus], None] | None = None,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.form = form
        self.interval = interval
        self.on_update = on_update
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            status = self.form.refresh_status()
            if self.on_update is not None:
                self.on_update(status)

    async def __aenter__(self) -> StatusPoller:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()
