"""
Backup document mapping.

A backup document is a JSON object with one list per collection::

    {"employees": [...], "advances": [...], "salaryPayments": [...],
     "receipts": [...], "departments": [...], "positions": [...]}

Record keys are camelCase (``firstName``, ``baseSalary``, ...).  Amounts
are JSON numbers, dates ISO strings, enums their string value.  Missing
collections read as empty, so backups that predate departments and
positions still load.  Unknown top-level keys and unknown record keys
are ignored.
"""

from __future__ import annotations

import types
import typing
from dataclasses import MISSING, fields, is_dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from functools import cache
from typing import Any

from payroll_kernel.db.types import to_money
from payroll_kernel.domain.dtos import (
    COLLECTIONS,
    Advance,
    BackupBundle,
    Department,
    Employee,
    Position,
    Receipt,
    SalaryPayment,
)
from payroll_kernel.exceptions import ImportParseError

BACKUP_COLLECTION_KEYS: dict[str, type] = {
    "employees": Employee,
    "advances": Advance,
    "salaryPayments": SalaryPayment,
    "receipts": Receipt,
    "departments": Department,
    "positions": Position,
}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@cache
def _field_plan(cls: type) -> tuple[tuple[str, str, Any, bool], ...]:
    """(attribute, key, resolved type, required) per dataclass field."""
    hints = typing.get_type_hints(cls)
    return tuple(
        (
            f.name,
            _camel(f.name),
            hints[f.name],
            f.default is MISSING and f.default_factory is MISSING,
        )
        for f in fields(cls)
    )


def _optional_inner(tp: Any) -> tuple[Any, bool]:
    if isinstance(tp, types.UnionType) or typing.get_origin(tp) is typing.Union:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        return args[0], True
    return tp, False


def _decode_value(tp: Any, value: Any) -> Any:
    inner, optional = _optional_inner(tp)
    if value is None or (optional and value == ""):
        if optional:
            return None
        raise ValueError("value is required")

    if inner is Decimal:
        if isinstance(value, bool):
            raise ValueError(f"not an amount: {value!r}")
        return to_money(value)
    if inner is datetime:
        parsed = datetime.fromisoformat(str(value))
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    if inner is date:
        return date.fromisoformat(str(value)[:10])
    if inner is int:
        if isinstance(value, bool) or not isinstance(value, (int, Decimal, str)):
            raise ValueError(f"not an integer: {value!r}")
        if isinstance(value, Decimal) and not (
            value.is_finite() and value == value.to_integral_value()
        ):
            raise ValueError(f"not an integer: {value!r}")
        return int(value)
    if isinstance(inner, type) and issubclass(inner, Enum):
        return inner(value)
    if inner is str:
        return str(value)
    return value


def _encode_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def record_to_document(record: Any) -> dict[str, Any]:
    """camelCase dict of a record DTO; None fields are omitted."""
    return {
        key: _encode_value(getattr(record, attribute))
        for attribute, key, _, _ in _field_plan(type(record))
        if getattr(record, attribute) is not None
    }


def record_from_document(cls: type, data: dict[str, Any], where: str = "") -> Any:
    """
    Raises:
        ImportParseError: On a missing required key or a bad value.
    """
    if not isinstance(data, dict):
        raise ImportParseError("backup", f"{where}: expected an object")
    values: dict[str, Any] = {}
    for attribute, key, tp, required in _field_plan(cls):
        raw = data.get(key, data.get(attribute))
        if raw is None and not required:
            continue
        if raw is None:
            raise ImportParseError("backup", f"{where}: missing field '{key}'")
        try:
            values[attribute] = _decode_value(tp, raw)
        except ValueError as exc:
            raise ImportParseError("backup", f"{where}.{key}: {exc}") from exc
    return cls(**values)


def bundle_to_document(bundle: BackupBundle) -> dict[str, list[dict[str, Any]]]:
    return {
        name: [record_to_document(r) for r in bundle.records(name)]
        for name in COLLECTIONS
    }


def bundle_from_document(document: Any) -> BackupBundle:
    """
    Raises:
        ImportParseError: If the document is not an object of lists, or a
            record cannot be read.
    """
    if not isinstance(document, dict):
        raise ImportParseError("backup", "expected a JSON object at top level")
    if not any(key in document for key in BACKUP_COLLECTION_KEYS):
        raise ImportParseError("backup", "no known collection in document")

    collections: dict[str, tuple[Any, ...]] = {}
    for key, cls in BACKUP_COLLECTION_KEYS.items():
        items = document.get(key) or []
        if not isinstance(items, list):
            raise ImportParseError("backup", f"'{key}' must be a list")
        collections[key] = tuple(
            record_from_document(cls, item, f"{key}[{index}]")
            for index, item in enumerate(items)
        )

    return BackupBundle(
        employees=collections["employees"],
        advances=collections["advances"],
        salary_payments=collections["salaryPayments"],
        receipts=collections["receipts"],
        departments=collections["departments"],
        positions=collections["positions"],
    )
