"""
Service layer for receipts.

A receipt is derived from a salary payment or an approved advance.  The
``build_*`` methods return an unsaved Receipt for previewing or printing;
``issue_*`` persists it, optionally with a signature.
"""

from __future__ import annotations

from dataclasses import replace

from payroll_kernel.db.base import new_id
from payroll_kernel.domain.advance_lifecycle import RECEIPTABLE_STATUSES
from payroll_kernel.domain.dtos import Receipt, ReceiptType
from payroll_kernel.domain.identifiers import (
    advance_receipt_number,
    salary_receipt_number,
)
from payroll_kernel.domain.salary import period_label
from payroll_kernel.exceptions import ReceiptNotAvailableError
from payroll_kernel.logging_config import get_logger
from payroll_kernel.services.base import BaseService
from payroll_kernel.services.record_store import RecordStore

logger = get_logger("services.receipt")


class ReceiptService(BaseService):

    def __init__(self, session, clock=None):
        super().__init__(session, clock)
        self.store = RecordStore(session, self.clock)

    def get(self, receipt_id: str) -> Receipt:
        return self.store.require("receipts", receipt_id)

    def list_receipts(
        self,
        employee_id: str | None = None,
        receipt_type: ReceiptType | None = None,
    ) -> list[Receipt]:
        if employee_id is not None:
            receipts = self.store.get_all_by_index("receipts", "by-employee", employee_id)
        elif receipt_type is not None:
            receipts = self.store.get_all_by_index("receipts", "by-type", receipt_type)
        else:
            receipts = self.store.get_all("receipts")
        if receipt_type is not None:
            receipts = [r for r in receipts if r.type == receipt_type]
        return receipts

    def build_salary_receipt(self, payment_id: str) -> Receipt:
        """
        Receipt for what has been paid so far on a salary payment.

        Raises:
            SalaryPaymentNotFoundError, EmployeeNotFoundError
        """
        payment = self.store.require("salaryPayments", payment_id)
        employee = self.store.require("employees", payment.employee_id)
        return Receipt(
            id=new_id(),
            receipt_number=salary_receipt_number(payment.year, payment.month, employee.matricule),
            type=ReceiptType.SALARY,
            employee_id=employee.id,
            employee_name=employee.full_name,
            employee_matricule=employee.matricule,
            amount=payment.amount_paid,
            description=f"Salaire {period_label(payment.month, payment.year)}",
            month=payment.month,
            year=payment.year,
            payment_id=payment.id,
            created_at=self.clock.now(),
        )

    def build_advance_receipt(self, advance_id: str) -> Receipt:
        """
        Receipt for an approved (or repaid) advance.

        Raises:
            AdvanceNotFoundError, EmployeeNotFoundError
            ReceiptNotAvailableError: If the advance is pending or rejected.
        """
        advance = self.store.require("advances", advance_id)
        if advance.status not in RECEIPTABLE_STATUSES:
            raise ReceiptNotAvailableError(
                advance_id, f"advance is {advance.status.value}"
            )
        employee = self.store.require("employees", advance.employee_id)
        return Receipt(
            id=new_id(),
            receipt_number=advance_receipt_number(advance.year, advance.month, advance.id),
            type=ReceiptType.ADVANCE,
            employee_id=employee.id,
            employee_name=employee.full_name,
            employee_matricule=employee.matricule,
            amount=advance.amount,
            description=(
                f"Avance sur salaire {period_label(advance.month, advance.year)}: "
                f"{advance.reason}"
            ),
            month=advance.month,
            year=advance.year,
            advance_id=advance.id,
            created_at=self.clock.now(),
        )

    def issue_salary_receipt(self, payment_id: str, signature: str | None = None) -> Receipt:
        return self._issue(self.build_salary_receipt(payment_id), signature)

    def issue_advance_receipt(self, advance_id: str, signature: str | None = None) -> Receipt:
        return self._issue(self.build_advance_receipt(advance_id), signature)

    def delete(self, receipt_id: str) -> bool:
        return self.store.delete("receipts", receipt_id)

    def _issue(self, receipt: Receipt, signature: str | None) -> Receipt:
        if signature:
            receipt = replace(receipt, signature=signature, signature_date=self.clock.now())
        self.store.add("receipts", receipt)
        logger.info(
            "receipt_issued",
            extra={
                "receipt_id": receipt.id,
                "receipt_number": receipt.receipt_number,
                "receipt_type": receipt.type.value,
                "employee_id": receipt.employee_id,
                "amount": receipt.amount,
                "signed": receipt.signature is not None,
            },
        )
        return receipt
