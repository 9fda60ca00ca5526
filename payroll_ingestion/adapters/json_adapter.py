"""
JSON source adapter.

Numbers with a fractional part are parsed as Decimal so amounts survive
exactly.  Decimals are written back as JSON numbers.
"""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Any

from payroll_ingestion.adapters.base import SourceProbe


def _default(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        # Integral amounts as ints; otherwise the float whose shortest
        # repr is the decimal string.
        if obj == obj.to_integral_value():
            return int(obj)
        return float(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class JsonSourceAdapter:

    def read_text(self, text: str, options: dict[str, Any]) -> Any:
        """
        Raises:
            json.JSONDecodeError: On malformed JSON.
        """
        return json.loads(text.lstrip("\ufeff"), parse_float=Decimal)

    def read(self, source_path: Path, options: dict[str, Any]) -> Any:
        encoding = options.get("encoding", "utf-8")
        return self.read_text(source_path.read_text(encoding=encoding), options)

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        data = self.read(source_path, options)
        if not isinstance(data, dict):
            return SourceProbe(row_count=0, columns=(), encoding=options.get("encoding", "utf-8"))
        lists = {k: v for k, v in data.items() if isinstance(v, list)}
        return SourceProbe(
            row_count=sum(len(v) for v in lists.values()),
            columns=tuple(sorted(lists)),
            encoding=options.get("encoding", "utf-8"),
        )

    def write_text(self, data: Any, pretty: bool = True) -> str:
        if pretty:
            return json.dumps(data, default=_default, ensure_ascii=False, indent=2)
        return json.dumps(data, default=_default, ensure_ascii=False, separators=(",", ":"))
