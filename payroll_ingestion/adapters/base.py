"""
Source adapter protocol and probe DTO.

Contract:
    SourceAdapter.read_text() parses already-decoded text.
    SourceAdapter.read() decodes a file and delegates to read_text().
    SourceAdapter.probe() returns a quick snapshot of a file.

File I/O only, no DB or kernel imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for reading structured source files."""

    def read_text(self, text: str, options: dict[str, Any]) -> Any:
        ...

    def read(self, source_path: Path, options: dict[str, Any]) -> Any:
        ...

    def probe(self, source_path: Path, options: dict[str, Any]) -> "SourceProbe":
        ...


@dataclass(frozen=True)
class SourceProbe:
    """Result of probing a source file."""

    row_count: int
    columns: tuple[str, ...]
    encoding: str | None = None
