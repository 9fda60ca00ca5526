"""Tests for the structured logging system (payroll_kernel/logging_config.py)."""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from payroll_kernel.domain.dtos import AdvanceStatus
from payroll_kernel.exceptions import ImportParseError
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)

log = get_logger("test")


@pytest.fixture(autouse=True)
def _clean_logging():
    """Start unconfigured; afterwards put back the suite-wide configuration."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())


@pytest.fixture
def lines():
    """
    Configure logging onto a buffer; returns a callable giving the parsed
    lines written so far.
    """
    buffer = StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setFormatter(StructuredFormatter())
    configure_logging(handler=handler)
    return lambda: [json.loads(raw) for raw in buffer.getvalue().splitlines() if raw]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:

    def test_envelope(self, lines):
        log.info("hello")
        (record,) = lines()
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "payroll_kernel.test"
        assert datetime_like(record["ts"])

    def test_extra_fields_included(self, lines):
        log.info("employee_created", extra={"matricule": "EMP00001", "count": 3})
        record = lines()[0]
        assert (record["matricule"], record["count"]) == ("EMP00001", 3)

    def test_payroll_values_serialized(self, lines):
        log.info(
            "values",
            extra={
                "amount": Decimal("1250.50"),
                "hire_date": date(2022, 1, 10),
                "to_status": AdvanceStatus.APPROVED,
            },
        )
        record = lines()[0]
        assert record["amount"] == "1250.50"
        assert record["hire_date"] == "2022-01-10"
        assert record["to_status"] == "approved"

    def test_non_ascii_kept(self, lines):
        log.info("department_added", extra={"department": "Comptabilité"})
        assert lines()[0]["department"] == "Comptabilité"

    def test_context_fields_included(self, lines):
        LogContext.set(correlation_id="abc-123", collection="employees")
        log.info("with_context")
        record = lines()[0]
        assert record["correlation_id"] == "abc-123"
        assert record["collection"] == "employees"

    def test_no_context_fields_when_empty(self, lines):
        log.info("bare_message")
        assert not {"correlation_id", "period"} & set(lines()[0])

    def test_plain_exception(self, lines):
        try:
            raise ValueError("boom")
        except ValueError:
            log.error("failed", exc_info=True)

        record = lines()[0]
        assert (record["exc_type"], record["exc_message"]) == ("ValueError", "boom")
        assert "exc_code" not in record
        assert "Traceback" in record["traceback"]

    def test_kernel_exception_fields_extracted(self, lines):
        try:
            raise ImportParseError("csv", "Champs requis manquants: Nom", line=1)
        except ImportParseError:
            log.exception("import_failed")

        record = lines()[0]
        assert record["level"] == "ERROR"
        assert record["exc_code"] == "IMPORT_PARSE_ERROR"
        assert record["exc_source"] == "csv"
        assert record["exc_line"] == 1

    def test_default_level_filters_debug(self, lines):
        log.info("first")
        log.warning("second", extra={"k": "v"})
        log.debug("third")
        assert [r["message"] for r in lines()] == ["first", "second"]


def datetime_like(value: str) -> bool:
    return value[:4].isdigit() and "T" in value and value.endswith("+00:00")


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:

    def test_set_is_additive(self):
        LogContext.set(correlation_id="x")
        LogContext.set(record_id="y", period=None)
        assert LogContext.get_all() == {"correlation_id": "x", "record_id": "y"}

    def test_clear(self):
        LogContext.set(actor_id="u1")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_restores_previous_value(self):
        LogContext.set(period="2024-02")
        with LogContext.bind(period="2024-03"):
            assert LogContext.get_all()["period"] == "2024-03"
        assert LogContext.get_all()["period"] == "2024-02"

    def test_bind_restores_absence(self):
        with LogContext.bind(collection="advances"):
            assert LogContext.get_all() == {"collection": "advances"}
        assert LogContext.get_all() == {}

    def test_bind_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(record_id="r1"):
                raise RuntimeError
        assert LogContext.get_all() == {}

    def test_unknown_fields_ignored(self):
        LogContext.set(tenant="acme")
        with LogContext.bind(tenant="acme", actor_id="u1"):
            assert LogContext.get_all() == {"actor_id": "u1"}


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:

    def test_idempotent(self, lines):
        configure_logging(handler=logging.StreamHandler(StringIO()))
        structured = [
            h for h in logging.getLogger("payroll_kernel").handlers
            if isinstance(h.formatter, StructuredFormatter)
        ]
        assert len(structured) == 1

    def test_get_logger_returns_child(self):
        assert get_logger("services.salary").name == "payroll_kernel.services.salary"

    def test_explicit_level_reaches_children(self):
        buffer = StringIO()
        configure_logging(level=logging.DEBUG, stream=buffer)
        get_logger("backup.scheduler").debug("hierarchy_test")

        record = json.loads(buffer.getvalue())
        assert record["logger"] == "payroll_kernel.backup.scheduler"

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("PAYROLL_LOG_LEVEL", "debug")
        configure_logging(stream=StringIO())
        assert logging.getLogger("payroll_kernel").level == logging.DEBUG

    def test_unknown_environment_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv("PAYROLL_LOG_LEVEL", "chatty")
        configure_logging(stream=StringIO())
        assert logging.getLogger("payroll_kernel").level == logging.INFO
