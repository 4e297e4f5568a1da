"""
JSON source adapter.

Handles a JSON array (file is [{...}, {...}, ...]) and JSON Lines (one
object per line).  ``json_path`` selects a nested array, e.g.
"data.attendance".  Keys are kept as written; column aliases are resolved
later by the attendance validation layer.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator

from workforce_ingestion.adapters.base import SourceProbe, UnreadableRecord

SAMPLE_SIZE = 5


def _get_nested(data: Any, path: str) -> Any:
    """Follow dot-separated path into dict/list. Returns None if key missing."""
    if not path.strip():
        return data
    for key in path.split("."):
        key = key.strip()
        if not key:
            continue
        if isinstance(data, list):
            try:
                data = data[int(key)]
            except (ValueError, IndexError):
                return None
        elif isinstance(data, dict) and key in data:
            data = data[key]
        else:
            return None
    return data


def _all_keys(rows: list[Any]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for row in rows:
        if not isinstance(row, dict):
            continue
        for key in row:
            seen.setdefault(str(key), None)
    return tuple(seen)


class JsonSourceAdapter:
    """
    Read JSON array or JSON Lines attendance files, one item per element.

    Elements are yielded as parsed, objects or not, so row numbers match the
    file.  A JSON Lines line that does not parse becomes an UnreadableRecord.
    """

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[Any]:
        encoding = options.get("encoding", "utf-8")

        if options.get("format", "array") == "jsonl":
            with source_path.open("r", encoding=encoding) as f:
                for line_number, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        item = json.loads(line)
                    except json.JSONDecodeError as exc:
                        item = UnreadableRecord(
                            line_number, f"line {line_number} is not valid JSON: {exc.msg}",
                        )
                    yield item
            return

        with source_path.open("r", encoding=encoding) as f:
            data = json.load(f)
        json_path = options.get("json_path")
        root = _get_nested(data, json_path) if json_path else data
        if not isinstance(root, list):
            raise ValueError(
                f"Expected a JSON array at {json_path or 'document root'} in {source_path.name}"
            )
        yield from root

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        sample: list[Any] = []
        count = 0
        for row in self.read(source_path, options):
            if len(sample) < SAMPLE_SIZE:
                sample.append(row)
            count += 1
        return SourceProbe(
            row_count=count,
            columns=_all_keys(sample),
            sample_rows=tuple(sample),
            encoding=options.get("encoding", "utf-8"),
            detected_delimiter=None,
        )
