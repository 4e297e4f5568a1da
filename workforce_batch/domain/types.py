"""
workforce_batch.domain.types -- Pure frozen dataclasses for the fan-out.

ZERO I/O.  Frozen dataclasses with enum status fields and tuples for
immutable collections.

Invariants enforced:
    - Every input item yields exactly one BatchItemResult.
    - BatchRunResult.item_results is ordered by item_index regardless of
      completion order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID


class BatchJobStatus(str, Enum):
    """Run-level outcome."""

    COMPLETED = "completed"  # All items succeeded
    PARTIALLY_COMPLETED = "partially_completed"  # Some items failed or were skipped
    FAILED = "failed"  # No item succeeded
    CANCELLED = "cancelled"  # Stopped early; unstarted items skipped


class BatchItemStatus(str, Enum):
    """Per-item outcome."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"  # Never started (cancellation or deadline)


@dataclass(frozen=True)
class BatchItemInput:
    """One unit of work handed to the fan-out."""

    item_index: int  # 0-indexed position in the batch
    item_key: str  # Business identifier (row number, employee id)
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BatchItemResult:
    """Immutable result of processing a single item."""

    item_index: int
    item_key: str
    status: BatchItemStatus
    error_code: str | None = None
    error_message: str | None = None
    result_data: dict[str, Any] | None = None
    duration_ms: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None


@dataclass(frozen=True)
class BatchRunResult:
    """Immutable result of a complete fan-out run."""

    run_id: UUID
    job_name: str
    status: BatchJobStatus
    total_items: int
    succeeded: int
    failed: int
    skipped: int
    item_results: tuple[BatchItemResult, ...] = ()
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0

    @property
    def failures(self) -> tuple[BatchItemResult, ...]:
        return tuple(r for r in self.item_results if r.status == BatchItemStatus.FAILED)

    @property
    def successes(self) -> tuple[BatchItemResult, ...]:
        return tuple(r for r in self.item_results if r.status == BatchItemStatus.SUCCEEDED)
