"""ORM models for the payroll kernel."""

from payroll_kernel.models.advance import AdvanceModel
from payroll_kernel.models.employee import EmployeeModel
from payroll_kernel.models.local_storage import BackupSlotModel, LocalSettingModel
from payroll_kernel.models.receipt import ReceiptModel
from payroll_kernel.models.reference import DepartmentModel, PositionModel
from payroll_kernel.models.salary_payment import SalaryPaymentModel

__all__ = [
    "AdvanceModel",
    "BackupSlotModel",
    "DepartmentModel",
    "EmployeeModel",
    "LocalSettingModel",
    "PositionModel",
    "ReceiptModel",
    "SalaryPaymentModel",
    "import_all_models",
]


def import_all_models() -> tuple[type, ...]:
    """Return every ORM class; importing this package registers the tables."""
    return (
        EmployeeModel,
        AdvanceModel,
        SalaryPaymentModel,
        ReceiptModel,
        DepartmentModel,
        PositionModel,
        LocalSettingModel,
        BackupSlotModel,
    )
