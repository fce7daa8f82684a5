"""Tests for the persisted attempt stores."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from reviewzone.auth import AttemptLimiter, AttemptStoreError, SqlAttemptStore
from reviewzone.db import ClientState


class TestMemoryStore:
    def test_roundtrip_and_delete(self, memory_store):
        assert memory_store.load("k") is None
        memory_store.save("k", "v1")
        memory_store.save("k", "v2")
        assert memory_store.load("k") == "v2"
        assert len(memory_store) == 1
        memory_store.delete("k")
        memory_store.delete("k")
        assert memory_store.load("k") is None


class TestSqlStore:
    def test_last_write_wins(self, sql_store):
        sql_store.save("client-a", '{"attempt_count": 1}')
        sql_store.save("client-a", '{"attempt_count": 2}')
        assert sql_store.load("client-a") == '{"attempt_count": 2}'

    def test_delete_missing_key_is_noop(self, sql_store):
        sql_store.delete("never-saved")
        assert sql_store.load("never-saved") is None

    def test_keys_are_namespaced(self, engine, sql_store):
        sql_store.save("client-a", "payload")
        factory = sessionmaker(bind=engine)
        with factory() as session:
            row = session.get(ClientState, "login:client-a")
            assert row is not None
            assert row.value == "payload"
            assert row.created_at is not None

        other = SqlAttemptStore(factory, namespace="other")
        assert other.load("client-a") is None

    def test_missing_table_raises_store_error(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}", poolclass=NullPool)
        store = SqlAttemptStore(sessionmaker(bind=engine))
        with pytest.raises(AttemptStoreError):
            store.load("client-a")
        with pytest.raises(AttemptStoreError):
            store.save("client-a", "{}")
        engine.dispose()


class TestPersistenceAcrossReloads:
    def test_lockout_survives_new_limiter_and_store(self, engine, policy, clock):
        first = AttemptLimiter(
            SqlAttemptStore(sessionmaker(bind=engine)), "client-a", policy=policy, clock=clock
        )
        for _ in range(5):
            first.record_attempt()

        # A fresh store and limiter over the same database behave like a reload.
        reloaded = AttemptLimiter(
            SqlAttemptStore(sessionmaker(bind=engine)), "client-a", policy=policy, clock=clock
        )
        status = reloaded.get_status()
        assert status.is_blocked is True
        assert status.remaining_attempts == 0

        reloaded.reset()
        assert first.get_status().remaining_attempts == 5

    def test_limiter_over_unusable_database_fails_open(self, tmp_path, policy, clock):
        engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}", poolclass=NullPool)
        limiter = AttemptLimiter(
            SqlAttemptStore(sessionmaker(bind=engine)), "client-a", policy=policy, clock=clock
        )
        limiter.record_attempt()
        assert limiter.get_status().remaining_attempts == 5
        engine.dispose()
