"""
Attendance import service: file -> rows -> ``AttendanceIngestor.bulk_ingest``.

Chooses a source adapter by explicit format or file suffix, reads every
row, and hands the rows to the ingestor unchanged.  Column aliases,
employee resolution and validation all happen in the attendance module,
so a file import and an API bulk upload behave identically.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from uuid import UUID

from workforce_batch.tasks.base import CancellationToken
from workforce_kernel.exceptions import ValidationError
from workforce_kernel.logging_config import LogContext, get_logger
from workforce_kernel.utils.hashing import hash_file
from workforce_modules.attendance.ingestor import AttendanceIngestor
from workforce_modules.attendance.models import BulkIngestSummary

from workforce_ingestion.adapters.base import SourceAdapter, SourceProbe
from workforce_ingestion.adapters.csv_adapter import CsvSourceAdapter
from workforce_ingestion.adapters.json_adapter import JsonSourceAdapter
from workforce_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter

logger = get_logger("ingestion.attendance_import")

_SUFFIX_FORMATS = {
    ".csv": "csv",
    ".json": "json",
    ".jsonl": "jsonl",
    ".xlsx": "xlsx",
}


def _default_adapters() -> dict[str, SourceAdapter]:
    return {
        "csv": CsvSourceAdapter(),
        "json": JsonSourceAdapter(),
        "xlsx": XlsxSourceAdapter(),
    }


class AttendanceImportService:
    """Reads attendance files and bulk-ingests their rows."""

    def __init__(
        self,
        ingestor: AttendanceIngestor,
        adapters: dict[str, SourceAdapter] | None = None,
    ):
        self._ingestor = ingestor
        self._adapters = adapters if adapters is not None else _default_adapters()

    def _resolve(
        self,
        source_path: Path,
        source_format: str | None,
        options: dict[str, Any] | None,
    ) -> tuple[SourceAdapter, dict[str, Any]]:
        if not source_path.is_file():
            raise ValidationError("source_path", f"file not found: {source_path}")
        fmt = (source_format or _SUFFIX_FORMATS.get(source_path.suffix.lower(), "")).lower()
        opts = dict(options or {})
        if fmt == "jsonl":
            fmt = "json"
            opts.setdefault("format", "jsonl")
        adapter = self._adapters.get(fmt)
        if adapter is None:
            raise ValidationError(
                "source_format",
                f"unsupported format {fmt or source_path.suffix!r}; expected one of {sorted(self._adapters)}",
            )
        return adapter, opts

    def probe(
        self,
        source_path: Path | str,
        source_format: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> SourceProbe:
        """Preview a file: row count, columns, sample rows.  Nothing is written."""
        path = Path(source_path)
        adapter, opts = self._resolve(path, source_format, options)
        return adapter.probe(path, opts)

    def import_file(
        self,
        source_path: Path | str,
        actor_id: UUID,
        source_format: str | None = None,
        options: dict[str, Any] | None = None,
        cancel_token: CancellationToken | None = None,
        deadline_seconds: float | None = None,
    ) -> BulkIngestSummary:
        path = Path(source_path)
        adapter, opts = self._resolve(path, source_format, options)

        with LogContext.bind(actor_id=str(actor_id), operation="attendance_import"):
            file_hash = hash_file(path)
            rows = list(adapter.read(path, opts))
            logger.info(
                "attendance_import_started",
                extra={
                    "file_name": path.name,
                    "file_hash": file_hash,
                    "adapter": type(adapter).__name__,
                    "row_count": len(rows),
                },
            )
            summary = self._ingestor.bulk_ingest(
                rows, actor_id, cancel_token=cancel_token, deadline_seconds=deadline_seconds,
            )
            logger.info(
                "attendance_import_completed",
                extra={
                    "file_name": path.name,
                    "file_hash": file_hash,
                    "status": summary.status.value,
                    "uploaded_count": summary.uploaded_count,
                    "error_count": len(summary.errors),
                },
            )
        return summary
