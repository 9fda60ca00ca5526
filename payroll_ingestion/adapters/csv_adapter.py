"""
CSV source adapter.

Uses csv.reader with RFC-4180 quoting (quoted fields may hold commas,
doubled quotes and newlines).  Reads utf-8 files through utf-8-sig so a
leading BOM is stripped; writes utf-8 with a BOM so spreadsheet tools
detect the encoding.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Any, Iterable, Iterator, Sequence

from payroll_ingestion.adapters.base import SourceProbe


def _get_encoding(options: dict[str, Any]) -> str:
    enc = options.get("encoding", "utf-8")
    if enc.lower() == "utf-8":
        return "utf-8-sig"  # Strip BOM if present
    return enc


class CsvSourceAdapter:
    """Read CSV as ``(line_number, cells)`` pairs; write rows back out."""

    def read_text(self, text: str, options: dict[str, Any]) -> Iterator[tuple[int, list[str]]]:
        """
        Yield each non-blank row with the 1-based line it starts on.

        A leading BOM left in ``text`` is dropped.
        """
        delimiter = options.get("delimiter", ",")
        reader = csv.reader(io.StringIO(text.lstrip("\ufeff"), newline=""), delimiter=delimiter)
        line = 1
        for row in reader:
            start = line
            line = reader.line_num + 1
            if not any(cell.strip() for cell in row):
                continue
            yield start, row

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[tuple[int, list[str]]]:
        with source_path.open("r", encoding=_get_encoding(options), newline="") as f:
            text = f.read()
        yield from self.read_text(text, options)

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        rows = list(self.read(source_path, options))
        columns = tuple(rows[0][1]) if rows else ()
        return SourceProbe(
            row_count=max(len(rows) - 1, 0),
            columns=columns,
            encoding=_get_encoding(options),
        )

    def write_text(self, header: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
        """Render rows with minimal quoting and ``\\n`` line endings."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
        writer.writerow(header)
        writer.writerows(rows)
        return buffer.getvalue()

    def write(self, target_path: Path, text: str) -> None:
        """Write ``text`` as utf-8 with a BOM."""
        with target_path.open("w", encoding="utf-8-sig", newline="") as f:
            f.write(text)
