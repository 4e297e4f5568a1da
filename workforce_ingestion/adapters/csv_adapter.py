"""
CSV source adapter.

Uses csv.DictReader.  Configurable: delimiter, encoding, skip_rows.
Handles a BOM via utf-8-sig when encoding is utf-8 (spreadsheet exports
often carry one).  Blank lines are skipped.  Streams rows.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Iterator

from workforce_ingestion.adapters.base import SourceProbe

SAMPLE_SIZE = 5


def _get_encoding(options: dict[str, Any]) -> str:
    enc = options.get("encoding", "utf-8")
    if enc.lower() == "utf-8":
        return "utf-8-sig"  # Strip BOM if present
    return enc


def _is_blank(row: dict[str, Any]) -> bool:
    return all(v is None or not str(v).strip() for v in row.values())


def _clean(row: dict[str | None, Any]) -> dict[str, Any]:
    # DictReader files cells beyond the header under the None key.
    return {k: v for k, v in row.items() if k is not None}


class CsvSourceAdapter:
    """Read an attendance CSV as one dict per data row, keyed by header."""

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        encoding = _get_encoding(options)
        delimiter = options.get("delimiter", ",")
        skip_rows = int(options.get("skip_rows", 0))

        with source_path.open("r", encoding=encoding, newline="") as f:
            for _ in range(skip_rows):
                next(f, None)
            for row in csv.DictReader(f, delimiter=delimiter):
                row = _clean(row)
                if not _is_blank(row):
                    yield row

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        encoding = _get_encoding(options)
        delimiter = options.get("delimiter", ",")
        skip_rows = int(options.get("skip_rows", 0))

        with source_path.open("r", encoding=encoding, newline="") as f:
            for _ in range(skip_rows):
                next(f, None)
            reader = csv.DictReader(f, delimiter=delimiter)
            columns = tuple(reader.fieldnames or ())
            sample: list[dict[str, Any]] = []
            count = 0
            for row in reader:
                row = _clean(row)
                if _is_blank(row):
                    continue
                if len(sample) < SAMPLE_SIZE:
                    sample.append(row)
                count += 1

        return SourceProbe(
            row_count=count,
            columns=columns,
            sample_rows=tuple(sample),
            encoding=encoding,
            detected_delimiter=delimiter,
        )
