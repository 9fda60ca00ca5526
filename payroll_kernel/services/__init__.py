"""Payroll services.  Every service flushes; the caller commits."""

from payroll_kernel.services.advance_service import AdvanceService
from payroll_kernel.services.employee_service import EmployeeDeletion, EmployeeService
from payroll_kernel.services.receipt_service import ReceiptService
from payroll_kernel.services.record_store import COLLECTION_SPECS, RecordStore
from payroll_kernel.services.reference_data_service import ReferenceDataService
from payroll_kernel.services.salary_service import SalaryGenerationResult, SalaryService

__all__ = [
    "AdvanceService",
    "COLLECTION_SPECS",
    "EmployeeDeletion",
    "EmployeeService",
    "ReceiptService",
    "RecordStore",
    "ReferenceDataService",
    "SalaryGenerationResult",
    "SalaryService",
]
