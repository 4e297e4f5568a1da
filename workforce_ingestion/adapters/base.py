"""
Source adapter protocol and probe DTO.

Contract:
    SourceAdapter.read() yields one item per attendance record (streaming),
    in file order.  Records that cannot be decoded are yielded as
    UnreadableRecord rather than dropped.
    SourceAdapter.probe() returns a quick snapshot: row count, columns, sample rows.

Architecture: workforce_ingestion/adapters. File I/O only, no DB or kernel imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Protocol, runtime_checkable


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for reading attendance files into row dicts."""

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[Any]:
        """Yield one item per record, normally a dict. Streams where the format allows."""
        ...

    def probe(self, source_path: Path, options: dict[str, Any]) -> "SourceProbe":
        """Quick probe: row count, detected columns, sample rows."""
        ...


@dataclass(frozen=True)
class SourceProbe:
    """Result of probing a source file (row count, columns, first N rows)."""

    row_count: int
    columns: tuple[str, ...]
    sample_rows: tuple[dict[str, Any], ...]  # First 5 rows; do not mutate
    encoding: str | None = None
    detected_delimiter: str | None = None


@dataclass(frozen=True)
class UnreadableRecord:
    """
    Placeholder for a record the reader could not decode.

    Yielded in place of the row so later rows keep their numbers; the
    ingestor reports it as a failed row using ``reason``.
    """

    line: int
    reason: str
