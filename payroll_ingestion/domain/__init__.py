"""Pure parsing and encoding for payroll files (no DB, no file I/O)."""

from payroll_ingestion.domain.backup_bundle import (
    BACKUP_COLLECTION_KEYS,
    bundle_from_document,
    bundle_to_document,
    record_from_document,
    record_to_document,
)
from payroll_ingestion.domain.employee_csv import (
    EMPLOYEE_CSV_COLUMNS,
    EmployeeCsvParseResult,
    EmployeeRow,
    csv_header,
    employee_csv_rows,
    parse_employee_rows,
    parse_lenient_amount,
    parse_status,
    sample_csv_rows,
)

__all__ = [
    "BACKUP_COLLECTION_KEYS",
    "EMPLOYEE_CSV_COLUMNS",
    "EmployeeCsvParseResult",
    "EmployeeRow",
    "bundle_from_document",
    "bundle_to_document",
    "csv_header",
    "employee_csv_rows",
    "parse_employee_rows",
    "parse_lenient_amount",
    "parse_status",
    "record_from_document",
    "record_to_document",
    "sample_csv_rows",
]
