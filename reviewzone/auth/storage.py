"""
Client-scoped key-value stores for persisted login attempt windows.

Stores only move opaque strings; encoding and validation belong to the
limiter so that a corrupt entry can be treated as absent.
"""

from __future__ import annotations

from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from reviewzone.db.models import ClientState


class AttemptStoreError(Exception):
    """Raised when the backing store cannot be read or written."""


class AttemptStore(Protocol):
    """Persistence boundary for serialized attempt windows."""

    def load(self, key: str) -> str | None: ...

    def save(self, key: str, payload: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryAttemptStore:
    """Dict-backed store. State lives as long as the instance."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def load(self, key: str) -> str | None:
        return self._data.get(key)

    def save(self, key: str, payload: str) -> None:
        self._data[key] = payload

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __len__(self) -> int:
        return len(self._data)


class SqlAttemptStore:
    """
    Store backed by the ``client_state`` table.

    Concurrent writers for the same key resolve as last-write-wins.
    Database errors surface as ``AttemptStoreError``.
    """

    def __init__(self, session_factory: sessionmaker[Session], namespace: str = "login"):
        self._session_factory = session_factory
        self._namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def load(self, key: str) -> str | None:
        try:
            with self._session_factory() as session:
                row = session.get(ClientState, self._key(key))
                return row.value if row is not None else None
        except SQLAlchemyError as exc:
            raise AttemptStoreError(f"Failed to load state for {key!r}") from exc

    def save(self, key: str, payload: str) -> None:
        try:
            with self._session_factory() as session, session.begin():
                row = session.get(ClientState, self._key(key))
                if row is None:
                    session.add(ClientState(key=self._key(key), value=payload))
                else:
                    row.value = payload
        except SQLAlchemyError as exc:
            raise AttemptStoreError(f"Failed to save state for {key!r}") from exc

    def delete(self, key: str) -> None:
        try:
            with self._session_factory() as session, session.begin():
                row = session.get(ClientState, self._key(key))
                if row is not None:
                    session.delete(row)
        except SQLAlchemyError as exc:
            raise AttemptStoreError(f"Failed to delete state for {key!r}") from exc
