"""
Typed Exception Hierarchy for the Payroll Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (the CLI, the import service, the backup scheduler) must react to
failures precisely.  Parsing message strings is fragile, so every failure
raised by the kernel:
  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable)
  3. Carries structured DATA as attributes (not just a message string)

Example:
    try:
        advances.approve(advance_id)
    except InvalidAdvanceTransitionError as e:
        print(f"Advance {e.advance_id} is already {e.current_status}")
    except AdvanceNotFoundError as e:
        print(e.code, e.record_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollKernelError (base)
    |
    +-- RecordNotFoundError
    |   +-- EmployeeNotFoundError
    |   +-- AdvanceNotFoundError
    |   +-- SalaryPaymentNotFoundError
    |   +-- ReceiptNotFoundError
    |   +-- DepartmentNotFoundError
    |   +-- PositionNotFoundError
    |   +-- BackupSlotNotFoundError
    |
    +-- DuplicateKeyError
    |   +-- DuplicateMatriculeError
    |   +-- DuplicateDepartmentError
    |
    +-- FormValidationError
    |   +-- NegativePaymentAmountError
    |
    +-- ImportParseError
    |
    +-- StorageError
    |
    +-- InvalidStateError
        +-- InvalidAdvanceTransitionError
        +-- AdvanceNotEditableError
        +-- ReceiptNotAvailableError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Lookup          | NOT_FOUND                   | Referenced id absent
                | EMPLOYEE_NOT_FOUND          | Employee id absent
                | ADVANCE_NOT_FOUND           | Advance id absent
                | SALARY_PAYMENT_NOT_FOUND    | Salary payment id absent
----------------|-----------------------------|-----------------------------------------
Uniqueness      | DUPLICATE_KEY               | Id or unique key already stored
                | DUPLICATE_MATRICULE         | Matricule already used
                | DUPLICATE_DEPARTMENT        | Department name already used
----------------|-----------------------------|-----------------------------------------
Validation      | VALIDATION_ERROR            | Form-level field errors
                | NEGATIVE_PAYMENT_AMOUNT     | Payment amount below zero
----------------|-----------------------------|-----------------------------------------
Import          | IMPORT_PARSE_ERROR          | Malformed CSV / JSON structure
----------------|-----------------------------|-----------------------------------------
Storage         | STORAGE_ERROR               | Underlying persistence failure
----------------|-----------------------------|-----------------------------------------
State           | INVALID_STATE               | Operation not allowed in current state
                | INVALID_ADVANCE_TRANSITION  | approve/reject/repay from wrong status
                | ADVANCE_NOT_EDITABLE        | Editing a non-pending advance
                | RECEIPT_NOT_AVAILABLE       | Receipt for an unapproved advance

===============================================================================
HANDLING PATTERNS
===============================================================================

Single-record operations raise and leave the store untouched (the caller's
``session_scope`` rolls back).  Bulk operations (CSV import, monthly salary
generation) catch ``PayrollKernelError`` per record and report it as a
warning instead of raising.
"""

from typing import Any


class PayrollKernelError(Exception):
    """
    Base exception for all payroll kernel errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_KERNEL_ERROR"


# Lookup errors


class RecordNotFoundError(PayrollKernelError):
    """A record with the given id does not exist in its collection."""

    code: str = "NOT_FOUND"
    collection: str = "records"

    def __init__(self, record_id: str, collection: str | None = None):
        self.collection = collection or type(self).collection
        self.record_id = record_id
        super().__init__(f"Record not found in {self.collection}: {record_id}")


class EmployeeNotFoundError(RecordNotFoundError):
    code: str = "EMPLOYEE_NOT_FOUND"
    collection: str = "employees"


class AdvanceNotFoundError(RecordNotFoundError):
    code: str = "ADVANCE_NOT_FOUND"
    collection: str = "advances"


class SalaryPaymentNotFoundError(RecordNotFoundError):
    code: str = "SALARY_PAYMENT_NOT_FOUND"
    collection: str = "salaryPayments"


class ReceiptNotFoundError(RecordNotFoundError):
    code: str = "RECEIPT_NOT_FOUND"
    collection: str = "receipts"


class DepartmentNotFoundError(RecordNotFoundError):
    code: str = "DEPARTMENT_NOT_FOUND"
    collection: str = "departments"


class PositionNotFoundError(RecordNotFoundError):
    code: str = "POSITION_NOT_FOUND"
    collection: str = "positions"


class BackupSlotNotFoundError(RecordNotFoundError):
    code: str = "BACKUP_SLOT_NOT_FOUND"
    collection: str = "backup_slots"


# Uniqueness errors


class DuplicateKeyError(PayrollKernelError):
    """An add would violate the primary key or a unique secondary key."""

    code: str = "DUPLICATE_KEY"

    def __init__(self, collection: str, key: str, value: Any):
        self.collection = collection
        self.key = key
        self.value = value
        super().__init__(f"Duplicate {key} in {collection}: {value}")


class DuplicateMatriculeError(DuplicateKeyError):
    code: str = "DUPLICATE_MATRICULE"

    def __init__(self, matricule: str):
        super().__init__("employees", "matricule", matricule)


class DuplicateDepartmentError(DuplicateKeyError):
    code: str = "DUPLICATE_DEPARTMENT"

    def __init__(self, name: str):
        super().__init__("departments", "name", name)


# Validation errors


class FormValidationError(PayrollKernelError):
    """
    One or more form fields failed validation.

    ``errors`` holds ``ValidationError`` DTOs (code, message, field) so the
    caller can surface them field by field.
    """

    code: str = "VALIDATION_ERROR"

    def __init__(self, errors: tuple | list):
        self.errors = tuple(errors)
        fields = ", ".join(e.field or "?" for e in self.errors)
        super().__init__(
            f"Validation failed: {len(self.errors)} error(s) on {fields}"
        )

    @property
    def field_errors(self) -> dict[str, str]:
        """First message per field."""
        result: dict[str, str] = {}
        for error in self.errors:
            result.setdefault(error.field or "", error.message)
        return result


class NegativePaymentAmountError(FormValidationError):
    code: str = "NEGATIVE_PAYMENT_AMOUNT"

    def __init__(self, payment_id: str, amount: Any):
        from payroll_kernel.domain.dtos import ValidationError

        self.payment_id = payment_id
        self.amount = amount
        super().__init__([
            ValidationError(
                code="NEGATIVE_AMOUNT",
                message=f"Payment amount must be >= 0, got {amount}",
                field="amount",
            )
        ])


# Import errors


class ImportParseError(PayrollKernelError):
    """A CSV or JSON source could not be parsed into records."""

    code: str = "IMPORT_PARSE_ERROR"

    def __init__(self, source: str, reason: str, line: int | None = None):
        self.source = source
        self.reason = reason
        self.line = line
        where = f"{source}:{line}" if line is not None else source
        super().__init__(f"Cannot parse {where}: {reason}")


# Storage errors


class StorageError(PayrollKernelError):
    """The underlying store failed (disk full, locked database, ...)."""

    code: str = "STORAGE_ERROR"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Storage failure during {operation}: {reason}")


# State errors


class InvalidStateError(PayrollKernelError):
    """The record is not in a state that allows the requested operation."""

    code: str = "INVALID_STATE"


class InvalidAdvanceTransitionError(InvalidStateError):
    code: str = "INVALID_ADVANCE_TRANSITION"

    def __init__(self, advance_id: str, current_status: str, action: str):
        self.advance_id = advance_id
        self.current_status = current_status
        self.action = action
        super().__init__(
            f"Cannot {action} advance {advance_id} in status {current_status}"
        )


class AdvanceNotEditableError(InvalidStateError):
    code: str = "ADVANCE_NOT_EDITABLE"

    def __init__(self, advance_id: str, current_status: str):
        self.advance_id = advance_id
        self.current_status = current_status
        super().__init__(
            f"Advance {advance_id} can only be edited while pending "
            f"(status: {current_status})"
        )


class ReceiptNotAvailableError(InvalidStateError):
    code: str = "RECEIPT_NOT_AVAILABLE"

    def __init__(self, source_id: str, reason: str):
        self.source_id = source_id
        self.reason = reason
        super().__init__(f"No receipt for {source_id}: {reason}")
