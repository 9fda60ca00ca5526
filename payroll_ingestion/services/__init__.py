"""Services that move payroll records between files and the store."""

from payroll_ingestion.services.backup_file_service import (
    BackupFileService,
    decode_bundle,
    encode_bundle,
)
from payroll_ingestion.services.employee_csv_service import (
    EmployeeCsvService,
    ImportReport,
)

__all__ = [
    "BackupFileService",
    "EmployeeCsvService",
    "ImportReport",
    "decode_bundle",
    "encode_bundle",
]
