"""Tests for the structured logging system (workforce_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from workforce_kernel.exceptions import AlreadyPaidError
from workforce_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests and restore the suite's config after."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter
# ---------------------------------------------------------------------------


class TestStructuredFormatter:

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "workforce.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("payroll_marked_paid", extra={"revision": 2, "status": "PAID"})

        record = _parse_log(stream)
        assert record["revision"] == 2
        assert record["status"] == "PAID"

    def test_decimal_and_uuid_serialized_as_strings(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        run_id = uuid4()
        get_logger("test").info("x", extra={"net_pay": Decimal("31500.00"), "run_id": run_id})

        record = _parse_log(stream)
        assert record["net_pay"] == "31500.00"
        assert record["run_id"] == str(run_id)

    def test_workforce_error_fields_flattened(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise AlreadyPaidError("p-1", "e-1")
        except AlreadyPaidError:
            get_logger("test").error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "AlreadyPaidError"
        assert record["exc_code"] == "ALREADY_PAID"
        assert record["exc_payroll_id"] == "p-1"
        assert record["exc_employee_id"] == "e-1"
        assert "traceback" in record


# ---------------------------------------------------------------------------
# LogContext
# ---------------------------------------------------------------------------


class TestLogContext:

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(correlation_id="req-1", actor_id="actor-1")
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["correlation_id"] == "req-1"
        assert record["actor_id"] == "actor-1"

    def test_bind_restores_previous_values(self):
        LogContext.set(operation="outer")
        with LogContext.bind(operation="inner", employee_id="emp-1"):
            assert LogContext.get_all()["operation"] == "inner"
            assert LogContext.get_all()["employee_id"] == "emp-1"
        ctx = LogContext.get_all()
        assert ctx["operation"] == "outer"
        assert "employee_id" not in ctx

    def test_bind_ignores_none_and_unknown_keys(self):
        with LogContext.bind(batch_id=None, not_a_field="x"):
            assert LogContext.get_all() == {}

    def test_context_wins_over_same_named_extra(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        with LogContext.bind(employee_id="from-context"):
            get_logger("test").info("x", extra={"employee_id": "from-extra"})

        assert _parse_log(stream)["employee_id"] == "from-context"

    def test_clear(self):
        LogContext.set(actor_id="a", batch_id="b")
        LogContext.clear()
        assert LogContext.get_all() == {}


# ---------------------------------------------------------------------------
# configure_logging
# ---------------------------------------------------------------------------


class TestConfigureLogging:

    def test_idempotent(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        configure_logging(handler=logging.StreamHandler(StringIO()))

        assert logging.getLogger("workforce").handlers == [handler]

    def test_level_filters(self):
        handler, stream = _make_handler()
        configure_logging(level=logging.WARNING, handler=handler)
        logger = get_logger("test")
        logger.info("dropped")
        logger.warning("kept")

        messages = [r["message"] for r in _parse_all_logs(stream)]
        assert messages == ["kept"]

    def test_does_not_propagate_to_root(self):
        configure_logging(handler=logging.StreamHandler(StringIO()))
        assert logging.getLogger("workforce").propagate is False
