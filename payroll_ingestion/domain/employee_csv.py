"""
Employee CSV mapping.

Columns are written with their French labels and read back by label or
by field name, case-insensitively.  Parsing is lenient the way a
spreadsheet user expects: amounts may carry spaces or a currency
symbol, status may be written in French, blank matricules are filled in
later.  Rows that cannot be used are reported as ``Ligne N: ...``; the
file as a whole is rejected only when the header is unusable.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Sequence

from payroll_kernel.db.types import ZERO
from payroll_kernel.domain.dtos import Employee, EmployeeStatus
from payroll_kernel.exceptions import ImportParseError

# (field name, external key, label), in column order
EMPLOYEE_CSV_COLUMNS: tuple[tuple[str, str, str], ...] = (
    ("matricule", "matricule", "Matricule"),
    ("first_name", "firstName", "Prénom"),
    ("last_name", "lastName", "Nom"),
    ("email", "email", "Email"),
    ("phone", "phone", "Téléphone"),
    ("address", "address", "Adresse"),
    ("date_of_birth", "dateOfBirth", "Date de naissance"),
    ("hire_date", "hireDate", "Date d'embauche"),
    ("position", "position", "Poste"),
    ("department", "department", "Département"),
    ("base_salary", "baseSalary", "Salaire de base"),
    ("bonus", "bonus", "Prime"),
    ("deductions", "deductions", "Déductions"),
    ("status", "status", "Statut"),
)

REQUIRED_COLUMNS = ("first_name", "last_name", "base_salary")
_MONEY_COLUMNS = frozenset({"base_salary", "bonus", "deductions"})
_DATE_COLUMNS = frozenset({"date_of_birth", "hire_date"})
_LABELS = {name: label for name, _, label in EMPLOYEE_CSV_COLUMNS}

_HEADER_ALIASES: dict[str, str] = {}
for _name, _key, _label in EMPLOYEE_CSV_COLUMNS:
    _HEADER_ALIASES[_label.lower()] = _name
    _HEADER_ALIASES[_key.lower()] = _name
    _HEADER_ALIASES[_name] = _name

_STATUS_WORDS = {
    "active": EmployeeStatus.ACTIVE,
    "actif": EmployeeStatus.ACTIVE,
    "inactive": EmployeeStatus.INACTIVE,
    "inactif": EmployeeStatus.INACTIVE,
    "suspended": EmployeeStatus.SUSPENDED,
    "suspendu": EmployeeStatus.SUSPENDED,
}

_NOT_NUMERIC = re.compile(r"[^\d.-]")
# Longest leading number; trailing characters are ignored
_LEADING_NUMBER = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")


@dataclass(frozen=True)
class EmployeeRow:
    """One usable CSV row, ready for ``EmployeeService.create``."""

    line: int
    first_name: str
    last_name: str
    base_salary: Decimal
    matricule: str = ""
    bonus: Decimal = ZERO
    deductions: Decimal = ZERO
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    email: str = ""
    phone: str = ""
    address: str = ""
    date_of_birth: date | None = None
    hire_date: date | None = None
    position: str = ""
    department: str = ""

    def create_kwargs(self) -> dict[str, Any]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "base_salary": self.base_salary,
            "matricule": self.matricule or None,
            "bonus": self.bonus,
            "deductions": self.deductions,
            "status": self.status,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "date_of_birth": self.date_of_birth,
            "hire_date": self.hire_date,
            "position": self.position,
            "department": self.department,
        }


@dataclass(frozen=True)
class EmployeeCsvParseResult:
    rows: tuple[EmployeeRow, ...] = ()
    errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def success(self) -> bool:
        return bool(self.rows)


def parse_lenient_amount(value: str) -> Decimal:
    """
    Strip everything but digits, ``.`` and ``-``, then read the leading
    number; no leading number gives 0.

    >>> parse_lenient_amount("350 000 Ar")
    Decimal('350000')
    >>> parse_lenient_amount("1.234.567")
    Decimal('1.234')
    """
    match = _LEADING_NUMBER.match(_NOT_NUMERIC.sub("", value))
    if match is None:
        return ZERO
    return Decimal(match.group())


def parse_status(value: str) -> EmployeeStatus | None:
    """English or French status word; None when unrecognised."""
    return _STATUS_WORDS.get(value.strip().lower())


def _parse_date(value: str) -> date:
    value = value.strip()
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(value[:10], fmt).date()
        except ValueError:
            continue
    raise ValueError(f"date invalide '{value}'")


def _map_header(header: Sequence[str]) -> list[str | None]:
    return [_HEADER_ALIASES.get(h.strip().lower()) for h in header]


def parse_employee_rows(rows: Iterable[tuple[int, list[str]]]) -> EmployeeCsvParseResult:
    """
    Parse ``(line_number, cells)`` pairs whose first item is the header.

    Unknown columns are ignored.  Status words that are not recognised
    leave the status active.

    Raises:
        ImportParseError: If there is no data row or a required column
            is missing from the header.
    """
    iterator = iter(rows)
    first = next(iterator, None)
    if first is None:
        raise ImportParseError(
            "csv",
            "Le fichier CSV doit contenir au moins un en-tête et une ligne de données.",
        )
    _, header = first
    columns = _map_header(header)

    missing = [name for name in REQUIRED_COLUMNS if name not in columns]
    if missing:
        raise ImportParseError(
            "csv",
            f"Champs requis manquants: {', '.join(_LABELS[m] for m in missing)}",
            line=1,
        )

    parsed: list[EmployeeRow] = []
    errors: list[str] = []
    seen_data = False

    for line, cells in iterator:
        seen_data = True
        values: dict[str, Any] = {}
        try:
            for column, cell in zip(columns, cells):
                if column is None:
                    continue
                cell = cell.strip()
                if column in _MONEY_COLUMNS:
                    values[column] = parse_lenient_amount(cell)
                elif column in _DATE_COLUMNS:
                    values[column] = _parse_date(cell) if cell else None
                elif column == "status":
                    status = parse_status(cell)
                    if status is not None:
                        values[column] = status
                else:
                    values[column] = cell
        except ValueError as exc:
            errors.append(f"Ligne {line}: Erreur de parsing - {exc}")
            continue

        if not values.get("first_name") or not values.get("last_name"):
            errors.append(f"Ligne {line}: Prénom et Nom sont requis")
            continue
        if values.get("base_salary", ZERO) <= 0:
            errors.append(f"Ligne {line}: Le salaire de base doit être positif")
            continue

        parsed.append(EmployeeRow(line=line, **values))

    if not seen_data:
        raise ImportParseError(
            "csv",
            "Le fichier CSV doit contenir au moins un en-tête et une ligne de données.",
        )
    if not parsed and not errors:
        errors.append("Aucun employé valide trouvé dans le fichier.")
    return EmployeeCsvParseResult(rows=tuple(parsed), errors=tuple(errors))


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Decimal):
        return str(value.quantize(Decimal("1")) if value == value.to_integral_value() else value.normalize())
    if isinstance(value, EmployeeStatus):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def csv_header() -> list[str]:
    return [label for _, _, label in EMPLOYEE_CSV_COLUMNS]


def employee_csv_rows(employees: Iterable[Employee]) -> list[list[str]]:
    """One row of cell strings per employee, in column order."""
    return [
        [_cell(getattr(employee, name)) for name, _, _ in EMPLOYEE_CSV_COLUMNS]
        for employee in employees
    ]


def sample_csv_rows() -> list[list[str]]:
    """A single example row for users preparing an import file."""
    return [[
        "EMP00001",
        "Jean",
        "Dupont",
        "jean.dupont@email.com",
        "+261 34 00 000 00",
        "Antananarivo, Analakely",
        "1990-05-15",
        "2023-01-15",
        "Technicien",
        "Informatique",
        "350000",
        "50000",
        "25000",
        "Actif",
    ]]
