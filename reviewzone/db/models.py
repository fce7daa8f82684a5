"""
SQLAlchemy ORM models.

Defines the tables backing client-scoped persisted state.
"""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from reviewzone.db.base import Base, TimestampMixin


class ClientState(Base, TimestampMixin):
    """Opaque key-value entry scoped to one client identifier."""

    __tablename__ = "client_state"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
