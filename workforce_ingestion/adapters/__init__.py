"""Source adapters for attendance import (file I/O only, no DB)."""

from workforce_ingestion.adapters.base import SourceAdapter, SourceProbe, UnreadableRecord
from workforce_ingestion.adapters.csv_adapter import CsvSourceAdapter
from workforce_ingestion.adapters.json_adapter import JsonSourceAdapter
from workforce_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter

__all__ = [
    "SourceAdapter",
    "SourceProbe",
    "UnreadableRecord",
    "CsvSourceAdapter",
    "JsonSourceAdapter",
    "XlsxSourceAdapter",
]
