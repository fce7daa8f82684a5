"""
Database session management.

Provides the session factory shared by the persisted stores.
"""

from sqlalchemy.orm import Session, sessionmaker

from reviewzone.db.engine import get_engine

_session_factory: sessionmaker[Session] | None = None


def get_session_factory() -> sessionmaker[Session]:
    """
    Get or create the session factory.

    Returns cached factory instance, creating it on first call.
    """
    global _session_factory

    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    return _session_factory


def reset_session_factory() -> None:
    """Forget the cached factory (after the engine is disposed)."""
    global _session_factory
    _session_factory = None
