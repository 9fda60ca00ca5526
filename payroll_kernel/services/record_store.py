"""
RecordStore -- keyed collections over the local database.

Responsibility:
    Generic add / update / delete / get / get-all-by-index for every record
    collection (employees, advances, salaryPayments, receipts, departments,
    positions), plus whole-store export, import and wipe.  Domain services
    build on it; the backup ring and the JSON backup file go through
    ``export_all`` / ``import_all``.

Contract per operation:
    add              DuplicateKeyError if the id or a unique key is taken.
    update           RecordNotFoundError if the id is absent; full-record
                     replace (callers merge fields first).
    delete           no-op when the id is absent.
    get              None when absent; ``require`` raises instead.
    get_all_by_index empty list when nothing matches.
    import_all       upsert per record, all-or-nothing for the bundle;
                     re-importing the same bundle is idempotent.
    clear_all        empties every collection.

Failure modes:
    - Any SQLAlchemy failure surfaces as StorageError.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError

from payroll_kernel.domain.dtos import COLLECTIONS, BackupBundle
from payroll_kernel.exceptions import (
    AdvanceNotFoundError,
    DepartmentNotFoundError,
    DuplicateDepartmentError,
    DuplicateKeyError,
    DuplicateMatriculeError,
    EmployeeNotFoundError,
    PositionNotFoundError,
    ReceiptNotFoundError,
    RecordNotFoundError,
    SalaryPaymentNotFoundError,
    StorageError,
)
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models import (
    AdvanceModel,
    DepartmentModel,
    EmployeeModel,
    PositionModel,
    ReceiptModel,
    SalaryPaymentModel,
)
from payroll_kernel.services.base import BaseService

logger = get_logger("services.record_store")


@dataclass(frozen=True)
class UniqueKey:
    """A unique secondary key and the error raised when it is violated."""
    fields: tuple[str, ...]
    error: Callable[[tuple[Any, ...]], DuplicateKeyError] | None = None


@dataclass(frozen=True)
class CollectionSpec:
    """How one external collection maps onto its ORM model."""
    name: str
    model: type
    not_found: type[RecordNotFoundError]
    indexes: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    unique: tuple[UniqueKey, ...] = ()


COLLECTION_SPECS: dict[str, CollectionSpec] = {
    spec.name: spec
    for spec in (
        CollectionSpec(
            name="employees",
            model=EmployeeModel,
            not_found=EmployeeNotFoundError,
            indexes={
                "by-matricule": ("matricule",),
                "by-department": ("department",),
                "by-status": ("status",),
            },
            unique=(UniqueKey(("matricule",), lambda v: DuplicateMatriculeError(v[0])),),
        ),
        CollectionSpec(
            name="advances",
            model=AdvanceModel,
            not_found=AdvanceNotFoundError,
            indexes={
                "by-employee": ("employee_id",),
                "by-status": ("status",),
                "by-month-year": ("month", "year"),
            },
        ),
        CollectionSpec(
            name="salaryPayments",
            model=SalaryPaymentModel,
            not_found=SalaryPaymentNotFoundError,
            indexes={
                "by-employee": ("employee_id",),
                "by-month-year": ("month", "year"),
                "by-status": ("status",),
                "by-employee-period": ("employee_id", "month", "year"),
            },
            unique=(UniqueKey(("employee_id", "month", "year")),),
        ),
        CollectionSpec(
            name="receipts",
            model=ReceiptModel,
            not_found=ReceiptNotFoundError,
            indexes={
                "by-employee": ("employee_id",),
                "by-type": ("type",),
            },
        ),
        CollectionSpec(
            name="departments",
            model=DepartmentModel,
            not_found=DepartmentNotFoundError,
            indexes={"by-name": ("name",)},
            unique=(UniqueKey(("name",), lambda v: DuplicateDepartmentError(v[0])),),
        ),
        CollectionSpec(
            name="positions",
            model=PositionModel,
            not_found=PositionNotFoundError,
            indexes={"by-department": ("department",)},
        ),
    )
}


def _column_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class RecordStore(BaseService):
    """
    Keyed record collections with secondary indexes.

    Records go in and come out as the frozen DTOs of
    ``payroll_kernel.domain.dtos``; ORM instances never leave this class.
    """

    # -------------------------------------------------------------------------
    # Single-record operations
    # -------------------------------------------------------------------------

    def add(self, collection: str, record: Any) -> Any:
        spec = self._spec(collection)
        with self._storage(f"add:{collection}"):
            if self.session.get(spec.model, record.id) is not None:
                raise DuplicateKeyError(collection, "id", record.id)
            self._check_unique(spec, record)
            self.session.add(spec.model.from_dto(record))
            self.session.flush()

        logger.debug("record_added", extra={"collection": collection, "record_id": record.id})
        return record

    def update(self, collection: str, record: Any) -> Any:
        spec = self._spec(collection)
        with self._storage(f"update:{collection}"):
            if self.session.get(spec.model, record.id) is None:
                raise spec.not_found(record.id)
            self._check_unique(spec, record)
            self.session.merge(spec.model.from_dto(record))
            self.session.flush()

        logger.debug("record_updated", extra={"collection": collection, "record_id": record.id})
        return record

    def delete(self, collection: str, record_id: str) -> bool:
        """Delete by id.  Returns False (no error) when the id is absent."""
        spec = self._spec(collection)
        with self._storage(f"delete:{collection}"):
            orm = self.session.get(spec.model, record_id)
            if orm is None:
                return False
            self.session.delete(orm)
            self.session.flush()

        logger.debug("record_deleted", extra={"collection": collection, "record_id": record_id})
        return True

    def get(self, collection: str, record_id: str) -> Any | None:
        spec = self._spec(collection)
        with self._storage(f"get:{collection}"):
            orm = self.session.get(spec.model, record_id)
        return orm.to_dto() if orm is not None else None

    def require(self, collection: str, record_id: str) -> Any:
        """Like ``get`` but raises the collection's NotFound error."""
        record = self.get(collection, record_id)
        if record is None:
            raise self._spec(collection).not_found(record_id)
        return record

    # -------------------------------------------------------------------------
    # Collection queries
    # -------------------------------------------------------------------------

    def get_all(self, collection: str) -> list[Any]:
        spec = self._spec(collection)
        stmt = select(spec.model).order_by(spec.model.created_at, spec.model.id)
        with self._storage(f"get_all:{collection}"):
            rows = self.session.execute(stmt).scalars().all()
        return [row.to_dto() for row in rows]

    def get_all_by_index(self, collection: str, index: str, value: Any) -> list[Any]:
        """
        Records whose index columns equal ``value``.

        Compound indexes (``by-month-year``) take a tuple in column order.
        """
        spec = self._spec(collection)
        try:
            columns = spec.indexes[index]
        except KeyError:
            raise ValueError(f"Unknown index {index!r} on {collection}") from None

        values = tuple(value) if isinstance(value, (tuple, list)) else (value,)
        if len(values) != len(columns):
            raise ValueError(
                f"Index {index!r} on {collection} takes {len(columns)} value(s)"
            )

        stmt = select(spec.model).where(
            *(getattr(spec.model, c) == _column_value(v) for c, v in zip(columns, values))
        ).order_by(spec.model.created_at, spec.model.id)
        with self._storage(f"get_all_by_index:{collection}"):
            rows = self.session.execute(stmt).scalars().all()
        return [row.to_dto() for row in rows]

    def count(self, collection: str) -> int:
        spec = self._spec(collection)
        with self._storage(f"count:{collection}"):
            return self.session.execute(
                select(func.count()).select_from(spec.model)
            ).scalar_one()

    # -------------------------------------------------------------------------
    # Whole-store operations
    # -------------------------------------------------------------------------

    def export_all(self) -> BackupBundle:
        bundle = BackupBundle(
            employees=tuple(self.get_all("employees")),
            advances=tuple(self.get_all("advances")),
            salary_payments=tuple(self.get_all("salaryPayments")),
            receipts=tuple(self.get_all("receipts")),
            departments=tuple(self.get_all("departments")),
            positions=tuple(self.get_all("positions")),
        )
        logger.info("store_exported", extra={"record_counts": bundle.record_counts})
        return bundle

    def import_all(self, bundle: BackupBundle) -> dict[str, int]:
        """
        Upsert every record of ``bundle``.

        Runs inside a SAVEPOINT: either the whole bundle lands or nothing
        changes.  Records are matched by id; existing ids are replaced.
        """
        with self._storage("import_all"):
            with self.session.begin_nested():
                for name in COLLECTIONS:
                    spec = COLLECTION_SPECS[name]
                    for record in bundle.records(name):
                        self._check_unique(spec, record)
                        self.session.merge(spec.model.from_dto(record))
                    self.session.flush()

        counts = bundle.record_counts
        logger.info("store_imported", extra={"record_counts": counts})
        return counts

    def clear_all(self) -> dict[str, int]:
        """Delete every record of every collection.  Irreversible."""
        counts: dict[str, int] = {}
        with self._storage("clear_all"):
            self.session.flush()
            for name in reversed(COLLECTIONS):
                result = self.session.execute(delete(COLLECTION_SPECS[name].model))
                counts[name] = result.rowcount or 0

        logger.warning("store_cleared", extra={"record_counts": counts})
        return counts

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _spec(self, collection: str) -> CollectionSpec:
        try:
            return COLLECTION_SPECS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection!r}") from None

    def _check_unique(self, spec: CollectionSpec, record: Any) -> None:
        """Raise when another record already holds one of the unique keys."""
        for key in spec.unique:
            values = tuple(getattr(record, f) for f in key.fields)
            stmt = select(spec.model.id).where(
                *(getattr(spec.model, f) == _column_value(v) for f, v in zip(key.fields, values)),
                spec.model.id != record.id,
            )
            if self.session.execute(stmt).first() is not None:
                if key.error is not None:
                    raise key.error(values)
                raise DuplicateKeyError(spec.name, "+".join(key.fields), values)

    @contextmanager
    def _storage(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error(
                "storage_failure",
                extra={"operation": operation, "error": str(exc)},
            )
            raise StorageError(operation, str(exc)) from exc
