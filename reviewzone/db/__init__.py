"""Database models, engine, and session management."""

from reviewzone.db.base import Base, TimestampMixin
from reviewzone.db.engine import (
    dispose_engine,
    get_engine,
    init_db,
    verify_database_connection,
)
from reviewzone.db.models import ClientState
from reviewzone.db.session import get_session_factory, reset_session_factory

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Engine
    "get_engine",
    "init_db",
    "verify_database_connection",
    "dispose_engine",
    # Session
    "get_session_factory",
    "reset_session_factory",
    # Models
    "ClientState",
]
