"""
Workforce Batch -- one generic fan-out primitive.

Bulk attendance ingestion and payroll generation both run their items
through ``FanOutExecutor``: bounded concurrency, per-item isolation,
cooperative cancellation and an ordered structured result.
"""

from workforce_batch.domain.types import (
    BatchItemInput,
    BatchItemResult,
    BatchItemStatus,
    BatchJobStatus,
    BatchRunResult,
)
from workforce_batch.services.executor import FanOutExecutor
from workforce_batch.tasks.base import BatchItemHandler, CancellationToken

__all__ = [
    "BatchItemHandler",
    "BatchItemInput",
    "BatchItemResult",
    "BatchItemStatus",
    "BatchJobStatus",
    "BatchRunResult",
    "CancellationToken",
    "FanOutExecutor",
]
