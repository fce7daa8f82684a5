from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from reviewzone.auth import (
    AttemptLimiter,
    AuthResult,
    AuthSession,
    LimiterPolicy,
    MemoryAttemptStore,
    SqlAttemptStore,
)
from reviewzone.db import Base


class FakeClock:
    """Naive-UTC clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 3, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class FakeAuthenticator:
    """Accepts a single password and counts calls."""

    def __init__(self, password: str = "correct-horse", error: Exception | None = None):
        self.password = password
        self.error = error
        self.calls = 0

    async def sign_in(self, email: str, password: str) -> AuthResult:
        self.calls += 1
        if self.error is not None:
            raise self.error
        if password != self.password:
            return AuthResult(ok=False, reason="Invalid login credentials")
        return AuthResult(
            ok=True,
            session=AuthSession(
                access_token="access-token",
                refresh_token="refresh-token",
                expires_in=3600,
                user_id="user-1",
                email=email,
            ),
        )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def policy():
    return LimiterPolicy(
        max_attempts=5,
        window_duration=timedelta(minutes=15),
        block_duration=timedelta(minutes=15),
    )


@pytest.fixture
def memory_store():
    return MemoryAttemptStore()


@pytest.fixture
def limiter(memory_store, policy, clock):
    return AttemptLimiter(memory_store, "client-a", policy=policy, clock=clock)


@pytest.fixture
def authenticator():
    return FakeAuthenticator()


@pytest.fixture
def tmp_db_path(tmp_path):
    return tmp_path / "state.db"


@pytest.fixture
def engine(tmp_db_path):
    engine = create_engine(
        f"sqlite:///{tmp_db_path}",
        poolclass=NullPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(engine):
    return SqlAttemptStore(sessionmaker(bind=engine, expire_on_commit=False))
