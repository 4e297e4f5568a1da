"""
XLSX source adapter for attendance sheets.

Supports flexible layout:
  - sheet by index (0-based) or name
  - header row by index or auto-detect (scans the first rows for
    attendance-like column names)
  - skip_rows before header

Auto-detect picks the first row containing at least 2 of: employee code,
email, date, status, check in, check out, project, job, remarks.

Cell values keep their native types: dates, datetimes and times from
openpyxl pass through unchanged so the validation layer can combine
time-of-day cells with the row date.  Whole floats become ints; strings
are stripped; empty cells become "".
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Iterator

import openpyxl

from workforce_ingestion.adapters.base import SourceProbe

SAMPLE_SIZE = 5
MAX_HEADER_SEARCH = 15

# Normalized (lowercase, single-spaced, "-"/"_" as space) header keywords
_HEADER_KEYWORDS = frozenset({
    "employee code", "emp code", "code", "employee id", "email", "employee email",
    "date", "attendance date", "status",
    "check in", "checkin", "in time", "time in",
    "check out", "checkout", "out time", "time out",
    "project", "project id", "job", "job id", "remarks", "notes",
})


def _normalize_header_cell(value: Any) -> str:
    if value is None:
        return ""
    return re.sub(r"\s+", " ", str(value)).strip()


def _cell_value(cell: Any) -> Any:
    v = getattr(cell, "value", None)
    if v is None:
        return ""
    if isinstance(v, float) and v == int(v):
        return int(v)
    if isinstance(v, str):
        return v.strip()
    return v


def _header_score(row: tuple) -> int:
    found = set()
    for cell in row:
        v = _cell_value(cell)
        if not isinstance(v, str) or not v:
            continue
        key = re.sub(r"[\s_\-]+", " ", v.lower()).strip()
        if key in _HEADER_KEYWORDS:
            found.add(key)
    return len(found)


def _detect_header_row(rows: list[tuple], min_keywords: int = 2) -> int:
    for i, row in enumerate(rows[:MAX_HEADER_SEARCH]):
        if _header_score(row) >= min_keywords:
            return i
    return 0


def _headers(row: tuple) -> list[str]:
    last = 0
    for c, cell in enumerate(row):
        if _cell_value(cell) != "":
            last = c + 1
    headers: list[str] = []
    for c in range(max(last, 1)):
        key = _normalize_header_cell(_cell_value(row[c])) or f"Column_{c + 1}"
        base, n = key, 0
        while key in headers:
            n += 1
            key = f"{base}_{n}"
        headers.append(key)
    return headers


class XlsxSourceAdapter:
    """
    Read .xlsx files as one dict per row, keyed by the header row.

    options:
      sheet: 0-based sheet index (int) or sheet name (str). Default: active sheet.
      skip_rows: rows to skip at the top of the sheet. Default: 0.
      header_row: 0-based row index (after skip_rows) to use as header;
        disables auto-detect.
    """

    def _get_sheet(self, wb: Any, options: dict[str, Any]) -> Any:
        sheet_ref = options.get("sheet")
        if sheet_ref is None:
            return wb.active
        if isinstance(sheet_ref, int):
            return wb.worksheets[sheet_ref]
        return wb[sheet_ref]

    def _table(self, source_path: Path, options: dict[str, Any]) -> tuple[list[str], list[dict[str, Any]]]:
        wb = openpyxl.load_workbook(source_path, read_only=True, data_only=True)
        try:
            sheet = self._get_sheet(wb, options)
            skip_rows = int(options.get("skip_rows", 0))
            rows = list(sheet.iter_rows(min_row=1 + skip_rows))
            if not rows:
                return [], []

            header_row = options.get("header_row")
            hi = int(header_row) if header_row is not None else _detect_header_row(rows)
            headers = _headers(rows[hi])

            records = []
            for row in rows[hi + 1:]:
                vals = [_cell_value(row[c]) if c < len(row) else "" for c in range(len(headers))]
                if all(v == "" for v in vals):
                    continue
                records.append(dict(zip(headers, vals)))
            return headers, records
        finally:
            wb.close()

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        _, records = self._table(source_path, options)
        yield from records

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        headers, records = self._table(source_path, options)
        return SourceProbe(
            row_count=len(records),
            columns=tuple(headers),
            sample_rows=tuple(records[:SAMPLE_SIZE]),
            encoding=None,
            detected_delimiter=None,
        )
