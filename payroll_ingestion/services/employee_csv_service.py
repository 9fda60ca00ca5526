"""
Employee CSV import/export.

Import is best-effort: each row is created in its own SAVEPOINT, a row
that fails (duplicate matricule, invalid email, ...) is rolled back and
reported, and the remaining rows still land.  Rows go through
``EmployeeService.create(strict=False)`` so only the stored-record rules
apply; a blank hire date becomes today.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from payroll_ingestion.adapters.csv_adapter import CsvSourceAdapter
from payroll_ingestion.domain.employee_csv import (
    csv_header,
    employee_csv_rows,
    parse_employee_rows,
    sample_csv_rows,
)
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.exceptions import PayrollKernelError
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_kernel.services.employee_service import EmployeeService

logger = get_logger("ingestion.employee_csv")


@dataclass(frozen=True)
class ImportReport:
    """What a CSV import created and what it could not."""
    created_ids: tuple[str, ...] = ()
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def created_count(self) -> int:
        return len(self.created_ids)

    @property
    def success(self) -> bool:
        return self.created_count > 0


class EmployeeCsvService:

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._employees = EmployeeService(session, self._clock, rng)
        self._adapter = CsvSourceAdapter()

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def export_text(self) -> str:
        return self._render()[0]

    def export_file(self, path: Path | str) -> int:
        """Write every employee to ``path`` (utf-8 with BOM); returns the count."""
        text, count = self._render()
        self._adapter.write(Path(path), text)
        return count

    def _render(self) -> tuple[str, int]:
        employees = self._employees.list_employees()
        text = self._adapter.write_text(csv_header(), employee_csv_rows(employees))
        logger.info("employees_exported", extra={"record_count": len(employees)})
        return text, len(employees)

    def sample_text(self) -> str:
        return self._adapter.write_text(csv_header(), sample_csv_rows())

    # -------------------------------------------------------------------------
    # Import
    # -------------------------------------------------------------------------

    def import_text(self, text: str) -> ImportReport:
        """
        Create one employee per usable row.

        Raises:
            ImportParseError: If the header or the file as a whole is unusable.
        """
        parsed = parse_employee_rows(self._adapter.read_text(text, {}))
        warnings = list(parsed.errors)
        created: list[str] = []
        today = self._clock.today()

        with LogContext.bind(collection="employees"):
            logger.info("employee_import_started", extra={"row_count": len(parsed.rows)})
            for row in parsed.rows:
                kwargs = row.create_kwargs()
                kwargs["hire_date"] = kwargs["hire_date"] or today
                try:
                    with self._session.begin_nested():
                        employee = self._employees.create(**kwargs, strict=False)
                except (PayrollKernelError, SQLAlchemyError) as exc:
                    warnings.append(f"Ligne {row.line}: {exc}")
                    logger.warning(
                        "employee_import_row_failed",
                        extra={"line": row.line, "error": str(exc)},
                    )
                    continue
                created.append(employee.id)

            report = ImportReport(created_ids=tuple(created), warnings=tuple(warnings))
            logger.info(
                "employee_import_completed",
                extra={"created_count": report.created_count, "warning_count": len(warnings)},
            )
        return report

    def import_file(self, path: Path | str) -> ImportReport:
        with Path(path).open("r", encoding="utf-8-sig", newline="") as f:
            return self.import_text(f.read())
