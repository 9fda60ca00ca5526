"""
Pytest fixtures for the payroll kernel test suite.

Provides:
- An in-memory SQLite engine per test (tables created fresh)
- A session bound to it, rolled back and closed after the test
- A deterministic clock and ready-made services
- Employee/advance factories
- Captured structured logs

File-backed databases (``file_session_factory``) are used where more than
one connection is needed at once, e.g. the backup scheduler.
"""

import json
import logging
import random
from datetime import UTC, date, datetime
from decimal import Decimal
from io import StringIO

import pytest
from sqlalchemy.orm import sessionmaker

from payroll_kernel.db.engine import build_engine, create_tables
from payroll_kernel.domain.clock import DeterministicClock
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from payroll_kernel.selectors.dashboard_selector import DashboardSelector
from payroll_kernel.services.advance_service import AdvanceService
from payroll_kernel.services.employee_service import EmployeeService
from payroll_kernel.services.receipt_service import ReceiptService
from payroll_kernel.services.record_store import RecordStore
from payroll_kernel.services.reference_data_service import ReferenceDataService
from payroll_kernel.services.salary_service import SalaryService

FIXED_NOW = datetime(2024, 3, 15, 9, 0, 0, tzinfo=UTC)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture payroll_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, employee_service):
            employee_service.create(...)
            logs = captured_logs()
            assert any(r["message"] == "employee_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("payroll_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    eng = build_engine("sqlite://")
    create_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    factory = sessionmaker(bind=engine, expire_on_commit=False)
    sess = factory()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def file_session_factory(tmp_path):
    eng = build_engine(f"sqlite:///{tmp_path / 'payroll.db'}")
    create_tables(eng)
    yield sessionmaker(bind=eng, expire_on_commit=False)
    eng.dispose()


@pytest.fixture
def clock():
    return DeterministicClock(FIXED_NOW)


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def store(session, clock):
    return RecordStore(session, clock)


@pytest.fixture
def employee_service(session, clock):
    return EmployeeService(session, clock, rng=random.Random(1234))


@pytest.fixture
def advance_service(session, clock):
    return AdvanceService(session, clock)


@pytest.fixture
def salary_service(session, clock):
    return SalaryService(session, clock)


@pytest.fixture
def receipt_service(session, clock):
    return ReceiptService(session, clock)


@pytest.fixture
def reference_service(session, clock):
    return ReferenceDataService(session, clock)


@pytest.fixture
def dashboard(session):
    return DashboardSelector(session)


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def make_employee(employee_service):
    """Create an employee that passes the full form rules."""
    counter = iter(range(1, 10_000))

    def _make(**overrides):
        n = next(counter)
        values = dict(
            first_name="Jean",
            last_name=f"Rakoto{n}",
            base_salary=Decimal("250000"),
            bonus=Decimal("50000"),
            deductions=Decimal("25000"),
            email=f"jean{n}@example.mg",
            phone="+261 34 12 345 67",
            address="Lot II A 45, Antananarivo",
            date_of_birth=date(1990, 5, 15),
            hire_date=date(2022, 1, 10),
            position="Technicien",
            department="Informatique",
        )
        values.update(overrides)
        return employee_service.create(**values)

    return _make


@pytest.fixture
def make_advance(advance_service):
    def _make(employee_id, amount=Decimal("50000"), month=3, year=2024, approve=False, **overrides):
        advance = advance_service.create(
            employee_id=employee_id,
            amount=amount,
            reason=overrides.pop("reason", "Frais médicaux"),
            month=month,
            year=year,
            **overrides,
        )
        if approve:
            advance = advance_service.approve(advance.id)
        return advance

    return _make
