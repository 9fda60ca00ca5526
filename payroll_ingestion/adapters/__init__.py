"""Source adapters for payroll ingestion (file I/O only, no DB)."""

from payroll_ingestion.adapters.base import SourceAdapter, SourceProbe
from payroll_ingestion.adapters.csv_adapter import CsvSourceAdapter
from payroll_ingestion.adapters.json_adapter import JsonSourceAdapter

__all__ = [
    "SourceAdapter",
    "SourceProbe",
    "CsvSourceAdapter",
    "JsonSourceAdapter",
]
