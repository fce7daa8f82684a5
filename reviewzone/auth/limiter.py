"""Login attempt throttling.

Tracks failed sign-in attempts for one client in a persisted counting
window.  After ``max_attempts`` failures inside ``window_duration`` the
client is locked out for ``block_duration``.  A successful sign-in resets
the window.

This is a best-effort deterrent that complements the auth service's own
throttling: clearing the client's state clears the lockout.  Unreadable
state always fails open to an unblocked window.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from reviewzone.auth.storage import AttemptStore, AttemptStoreError
from reviewzone.core import Clock, get_logger, utcnow

logger = get_logger(__name__)

#: Failures tolerated inside one window before the client is locked out.
MAX_ATTEMPTS = 5
#: Span over which failures accumulate before the counter starts over.
WINDOW_DURATION = timedelta(minutes=15)
#: Length of a lockout once triggered.
BLOCK_DURATION = timedelta(minutes=15)


@dataclass(frozen=True)
class LimiterPolicy:
    max_attempts: int = MAX_ATTEMPTS
    window_duration: timedelta = WINDOW_DURATION
    block_duration: timedelta = BLOCK_DURATION

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.window_duration <= timedelta(0) or self.block_duration <= timedelta(0):
            raise ValueError("window_duration and block_duration must be positive")


DEFAULT_POLICY = LimiterPolicy()


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"expected ISO timestamp, got {type(value).__name__}")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        except OverflowError as exc:
            raise ValueError(f"timestamp out of range: {value}") from exc
    return parsed


@dataclass
class AttemptWindow:
    """Persisted failure counter for one client."""

    attempt_count: int = 0
    window_start: datetime | None = None
    blocked_until: datetime | None = None

    @property
    def is_clear(self) -> bool:
        return (
            self.attempt_count == 0
            and self.window_start is None
            and self.blocked_until is None
        )

    def is_blocked_at(self, now: datetime) -> bool:
        return self.blocked_until is not None and now < self.blocked_until

    def to_json(self) -> str:
        return json.dumps(
            {
                "attempt_count": self.attempt_count,
                "window_start": self.window_start.isoformat() if self.window_start else None,
                "blocked_until": self.blocked_until.isoformat() if self.blocked_until else None,
            }
        )

    @classmethod
    def from_json(cls, payload: str) -> AttemptWindow:
        """Decode a stored window. Raises ValueError on any malformed input."""
        data = json.loads(payload)
        if not isinstance(data, dict):
            raise ValueError("attempt window must be a JSON object")
        count = data.get("attempt_count", 0)
        if isinstance(count, bool) or not isinstance(count, int):
            raise ValueError("attempt_count must be an integer")
        return cls(
            attempt_count=count,
            window_start=_parse_timestamp(data.get("window_start")),
            blocked_until=_parse_timestamp(data.get("blocked_until")),
        )


@dataclass(frozen=True)
class LimiterStatus:
    """Read-only snapshot rendered by the login form."""

    is_blocked: bool
    remaining_attempts: int
    block_time_remaining: timedelta

    @property
    def block_seconds_remaining(self) -> int:
        """Countdown in whole seconds, rounded up."""
        return math.ceil(self.block_time_remaining.total_seconds())

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_blocked": self.is_blocked,
            "remaining_attempts": self.remaining_attempts,
            "block_time_remaining": self.block_time_remaining.total_seconds(),
            "block_seconds_remaining": self.block_seconds_remaining,
        }


class AttemptLimiter:
    """Persisted attempt limiter for a single client identifier."""

    def __init__(
        self,
        store: AttemptStore,
        client_id: str,
        policy: LimiterPolicy = DEFAULT_POLICY,
        clock: Clock = utcnow,
    ):
        if not client_id:
            raise ValueError("client_id is required")
        self.store = store
        self.client_id = client_id
        self.policy = policy
        self._clock = clock

    def get_status(self) -> LimiterStatus:
        """Return the current status, clearing an expired window on the way."""
        now = self._clock()
        window = self._current_window(now)

        if window.is_blocked_at(now):
            return LimiterStatus(
                is_blocked=True,
                remaining_attempts=0,
                block_time_remaining=window.blocked_until - now,
            )
        return LimiterStatus(
            is_blocked=False,
            remaining_attempts=max(0, self.policy.max_attempts - window.attempt_count),
            block_time_remaining=timedelta(0),
        )

    def record_attempt(self) -> None:
        """Record one failed sign-in. Not idempotent."""
        now = self._clock()
        window = self._current_window(now)

        # Frozen while locked out; the lockout is never shortened.
        if window.is_blocked_at(now):
            logger.debug(
                "Ignoring failed attempt while locked out",
                data={"client_id": self.client_id},
            )
            return

        if window.window_start is None:
            window.window_start = now
        window.attempt_count = min(window.attempt_count + 1, self.policy.max_attempts)

        if window.attempt_count >= self.policy.max_attempts:
            window.blocked_until = now + self.policy.block_duration
            logger.warning(
                "Login attempts exhausted, client locked out",
                data={
                    "client_id": self.client_id,
                    "attempts": window.attempt_count,
                    "blocked_until": window.blocked_until.isoformat(),
                },
            )

        self._write(window)

    def reset(self) -> None:
        """Clear all recorded attempts. Idempotent."""
        self._clear()
        logger.debug("Login attempt window reset", data={"client_id": self.client_id})

    def _current_window(self, now: datetime) -> AttemptWindow:
        stored = self._read(now)

        if stored.blocked_until is not None:
            expired = now >= stored.blocked_until
        else:
            expired = (
                stored.window_start is not None
                and now >= stored.window_start + self.policy.window_duration
            )

        if expired:
            self._clear()
            return AttemptWindow()
        return stored

    def _read(self, now: datetime) -> AttemptWindow:
        try:
            payload = self.store.load(self.client_id)
        except AttemptStoreError:
            logger.error(
                "Attempt store unreadable, failing open",
                exc_info=True,
                data={"client_id": self.client_id},
            )
            return AttemptWindow()

        if payload is None:
            return AttemptWindow()

        try:
            window = AttemptWindow.from_json(payload)
            self._validate(window, now)
        except ValueError as exc:
            logger.warning(
                "Discarding corrupt attempt window",
                data={"client_id": self.client_id, "reason": str(exc)},
            )
            self._clear()
            return AttemptWindow()
        return window

    def _validate(self, window: AttemptWindow, now: datetime) -> None:
        if not 0 <= window.attempt_count <= self.policy.max_attempts:
            raise ValueError(f"attempt_count out of range: {window.attempt_count}")
        if window.attempt_count and window.window_start is None:
            raise ValueError("attempt_count without window_start")
        if window.window_start is not None and window.window_start > now:
            raise ValueError("window_start is in the future")
        if (
            window.blocked_until is not None
            and window.blocked_until > now + self.policy.block_duration
        ):
            raise ValueError("blocked_until exceeds block duration")

    def _write(self, window: AttemptWindow) -> None:
        try:
            self.store.save(self.client_id, window.to_json())
        except AttemptStoreError:
            logger.error(
                "Failed to persist attempt window",
                exc_info=True,
                data={"client_id": self.client_id},
            )

    def _clear(self) -> None:
        try:
            self.store.delete(self.client_id)
        except AttemptStoreError:
            logger.error(
                "Failed to clear attempt window",
                exc_info=True,
                data={"client_id": self.client_id},
            )
