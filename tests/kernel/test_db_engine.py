"""
Tests for workforce_kernel.db.engine and the UTC/UUID column types.

Timeout translation, transactional scope and the unique-conflict retry in
``run_transaction``.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from workforce_kernel.db.base import UTCDateTime
from workforce_kernel.db.engine import (
    get_engine,
    is_postgres,
    reset_engine,
    run_transaction,
    session_scope,
    translate_timeout,
)
from workforce_kernel.exceptions import OperationTimeoutError


def _operational(message: str) -> OperationalError:
    return OperationalError("UPDATE payroll_records ...", {}, Exception(message))


def _integrity() -> IntegrityError:
    return IntegrityError("INSERT INTO attendance_records ...", {}, Exception("UNIQUE constraint failed"))


class TestTranslateTimeout:

    def test_sqlite_busy(self):
        exc = translate_timeout(_operational("database is locked"), "mark_paid")
        assert isinstance(exc, OperationTimeoutError)
        assert exc.operation == "mark_paid"
        assert exc.detail == "database is locked"

    def test_postgres_lock_timeout(self):
        exc = translate_timeout(
            _operational("canceling statement due to lock timeout"), "leave_approve",
        )
        assert isinstance(exc, OperationTimeoutError)

    def test_pool_exhausted(self):
        exc = translate_timeout(PoolTimeoutError("QueuePool limit reached"), "employee_lookup")
        assert exc.detail == "connection pool exhausted"

    def test_other_errors_not_translated(self):
        assert translate_timeout(_operational("no such table: employees"), "x") is None
        assert translate_timeout(ValueError("boom"), "x") is None


class TestSessionScope:

    def test_commits_on_success(self, session_factory):
        from sqlalchemy import text

        with session_scope(session_factory) as s:
            s.execute(text("CREATE TABLE scratch (v INTEGER)"))
            s.execute(text("INSERT INTO scratch (v) VALUES (1)"))
        with session_scope(session_factory) as s:
            assert s.execute(text("SELECT count(*) FROM scratch")).scalar_one() == 1

    def test_timeout_translated(self, session_factory):
        with pytest.raises(OperationTimeoutError) as exc_info:
            with session_scope(session_factory, operation="leave_approve"):
                raise _operational("database is locked")
        assert exc_info.value.operation == "leave_approve"

    def test_other_errors_propagate_unchanged(self, session_factory):
        with pytest.raises(KeyError):
            with session_scope(session_factory):
                raise KeyError("x")


class TestRunTransaction:

    def test_retries_once_on_integrity_error(self, session_factory, captured_logs):
        attempts = []

        def work(session):
            attempts.append(1)
            if len(attempts) == 1:
                raise _integrity()
            return "ok"

        assert run_transaction(session_factory, work, operation="upsert") == "ok"
        assert len(attempts) == 2
        assert any(r["message"] == "transaction_conflict_retry" for r in captured_logs())

    def test_gives_up_after_retries(self, session_factory):
        def work(session):
            raise _integrity()

        with pytest.raises(IntegrityError):
            run_transaction(session_factory, work, operation="upsert", conflict_retries=1)

    def test_no_retry_when_disabled(self, session_factory):
        attempts = []

        def work(session):
            attempts.append(1)
            raise _integrity()

        with pytest.raises(IntegrityError):
            run_transaction(session_factory, work, operation="upsert", conflict_retries=0)
        assert len(attempts) == 1

    def test_domain_errors_not_retried(self, session_factory):
        attempts = []

        def work(session):
            attempts.append(1)
            raise OperationTimeoutError("x", "y")

        with pytest.raises(OperationTimeoutError):
            run_transaction(session_factory, work, operation="x")
        assert len(attempts) == 1


class TestEngineLifecycle:

    def test_get_engine_before_init_raises(self):
        reset_engine()
        with pytest.raises(RuntimeError, match="not initialized"):
            get_engine()
        assert is_postgres() is False


class TestUTCDateTime:

    def test_naive_values_read_back_as_utc(self, db_engine):
        col = UTCDateTime()
        loaded = col.process_result_value(datetime(2024, 3, 1, 9, 0), db_engine.dialect)
        assert loaded == datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

    def test_offset_values_normalized_to_utc(self, db_engine):
        col = UTCDateTime()
        ist = timezone(timedelta(hours=5, minutes=30))
        bound = col.process_bind_param(datetime(2024, 3, 1, 14, 30, tzinfo=ist), db_engine.dialect)
        assert bound.replace(tzinfo=timezone.utc) == datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
