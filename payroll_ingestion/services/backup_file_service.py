"""
Manual backup files.

``export_text`` serializes every collection into a pretty-printed JSON
backup; ``import_text`` reads one back.  Import merges by id (existing
records are replaced, others kept) unless ``replace=True``, which empties
the store first.  Both happen in the caller's transaction.
"""

from __future__ import annotations

import json
from pathlib import Path

from sqlalchemy.orm import Session

from payroll_ingestion.adapters.json_adapter import JsonSourceAdapter
from payroll_ingestion.domain.backup_bundle import (
    bundle_from_document,
    bundle_to_document,
)
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.dtos import BackupBundle
from payroll_kernel.exceptions import ImportParseError
from payroll_kernel.logging_config import get_logger
from payroll_kernel.services.record_store import RecordStore

logger = get_logger("ingestion.backup_file")


def encode_bundle(bundle: BackupBundle, pretty: bool = True) -> str:
    return JsonSourceAdapter().write_text(bundle_to_document(bundle), pretty=pretty)


def decode_bundle(text: str, source: str = "backup") -> BackupBundle:
    """
    Raises:
        ImportParseError: On malformed JSON or an unreadable record.
    """
    try:
        document = JsonSourceAdapter().read_text(text, {})
    except json.JSONDecodeError as exc:
        raise ImportParseError(source, exc.msg, line=exc.lineno) from exc
    return bundle_from_document(document)


class BackupFileService:

    def __init__(self, session: Session, clock: Clock | None = None):
        self._clock = clock or SystemClock()
        self._store = RecordStore(session, self._clock)

    def default_filename(self) -> str:
        return f"backup_paie_{self._clock.today().isoformat()}.json"

    def export_text(self, pretty: bool = True) -> str:
        bundle = self._store.export_all()
        logger.info("backup_exported", extra={"record_counts": bundle.record_counts})
        return encode_bundle(bundle, pretty=pretty)

    def export_file(self, path: Path | str) -> BackupBundle:
        bundle = self._store.export_all()
        Path(path).write_text(encode_bundle(bundle), encoding="utf-8")
        logger.info(
            "backup_file_written",
            extra={"path": str(path), "record_counts": bundle.record_counts},
        )
        return bundle

    def import_text(self, text: str, replace: bool = False) -> dict[str, int]:
        """
        Load a backup into the store; returns per-collection record counts.

        The text is fully parsed before anything is written.

        Raises:
            ImportParseError: If the backup cannot be read.
            DuplicateKeyError: If a record clashes with a unique key held by
                a different record.
        """
        bundle = decode_bundle(text)
        if replace:
            self._store.clear_all()
        return self._store.import_all(bundle)

    def import_file(self, path: Path | str, replace: bool = False) -> dict[str, int]:
        text = Path(path).read_text(encoding="utf-8-sig")
        logger.info("backup_file_read", extra={"path": str(path)})
        return self.import_text(text, replace=replace)
