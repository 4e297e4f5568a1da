"""
FanOutExecutor -- bounded-concurrency, per-item-isolated batch execution.

Contract:
    ``run()`` applies a handler to every item with at most ``max_workers``
    items in flight, and returns one BatchItemResult per item, ordered by
    item_index.  Bulk attendance ingestion and payroll generation both run
    through this primitive.

Architecture: workforce_batch/services.  Imports from workforce_batch.domain,
    workforce_batch.tasks and the kernel (clock, exceptions, logging).

Invariants enforced:
    - One item's failure never affects another item (each handler owns its
      transaction; the executor only records the outcome).
    - Cancellation or an elapsed deadline stops issuing new items.  Items
      already applied stay applied and are reported; unstarted items are
      reported SKIPPED.
    - Log context (correlation id, actor, batch id) is carried into worker
      threads.
"""

from __future__ import annotations

import contextvars
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Sequence
from uuid import uuid4

from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.exceptions import WorkforceError
from workforce_kernel.logging_config import LogContext, get_logger

from workforce_batch.domain.types import (
    BatchItemInput,
    BatchItemResult,
    BatchItemStatus,
    BatchJobStatus,
    BatchRunResult,
)
from workforce_batch.tasks.base import BatchItemHandler, CancellationToken

logger = get_logger("batch.executor")

CANCELLED = "CANCELLED"
DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
UNHANDLED_EXCEPTION = "UNHANDLED_EXCEPTION"


class FanOutExecutor:
    """Runs a handler over items on a bounded thread pool.

    Non-goals:
        - Does NOT retry failed items; the caller sees every failure.
        - Does NOT open transactions; handlers do.
    """

    def __init__(self, max_workers: int = 4, clock: Clock | None = None):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._max_workers = max_workers
        self._clock = clock or SystemClock()

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def run(
        self,
        job_name: str,
        items: Sequence[BatchItemInput],
        handler: BatchItemHandler,
        cancel_token: CancellationToken | None = None,
        deadline_seconds: float | None = None,
    ) -> BatchRunResult:
        run_id = uuid4()
        start = time.monotonic()
        started_at = self._clock.now()
        results: dict[int, BatchItemResult] = {}
        stop_reason: str | None = None

        with LogContext.bind(batch_id=str(run_id)):
            logger.info(
                "batch_run_started",
                extra={
                    "job_name": job_name,
                    "total_items": len(items),
                    "max_workers": self._max_workers,
                },
            )

            pending: set[Future] = set()
            queue = list(items)
            next_pos = 0

            with ThreadPoolExecutor(
                max_workers=self._max_workers,
                thread_name_prefix=f"fanout-{job_name}",
            ) as pool:
                while next_pos < len(queue) or pending:
                    while next_pos < len(queue) and len(pending) < self._max_workers:
                        stop_reason = self._stop_reason(start, cancel_token, deadline_seconds)
                        if stop_reason is not None:
                            break
                        ctx = contextvars.copy_context()
                        pending.add(
                            pool.submit(ctx.run, self._run_item, queue[next_pos], handler)
                        )
                        next_pos += 1

                    if stop_reason is not None and not pending:
                        break
                    if not pending:
                        continue

                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        result = future.result()
                        results[result.item_index] = result

            for item in queue[next_pos:]:
                results[item.item_index] = BatchItemResult(
                    item_index=item.item_index,
                    item_key=item.item_key,
                    status=BatchItemStatus.SKIPPED,
                    error_code=stop_reason,
                    error_message="not started",
                )

            ordered = tuple(results[i.item_index] for i in items)
            succeeded = sum(1 for r in ordered if r.status == BatchItemStatus.SUCCEEDED)
            failed = sum(1 for r in ordered if r.status == BatchItemStatus.FAILED)
            skipped = sum(1 for r in ordered if r.status == BatchItemStatus.SKIPPED)

            if stop_reason is not None and skipped:
                status = BatchJobStatus.CANCELLED
            elif failed == 0 and skipped == 0:
                status = BatchJobStatus.COMPLETED
            elif succeeded == 0:
                status = BatchJobStatus.FAILED
            else:
                status = BatchJobStatus.PARTIALLY_COMPLETED

            duration_ms = int((time.monotonic() - start) * 1000)
            logger.info(
                "batch_run_completed",
                extra={
                    "job_name": job_name,
                    "status": status.value,
                    "succeeded": succeeded,
                    "failed": failed,
                    "skipped": skipped,
                    "stop_reason": stop_reason,
                    "duration_ms": duration_ms,
                },
            )

        return BatchRunResult(
            run_id=run_id,
            job_name=job_name,
            status=status,
            total_items=len(items),
            succeeded=succeeded,
            failed=failed,
            skipped=skipped,
            item_results=ordered,
            started_at=started_at,
            completed_at=self._clock.now(),
            duration_ms=duration_ms,
        )

    @staticmethod
    def _stop_reason(
        start: float,
        cancel_token: CancellationToken | None,
        deadline_seconds: float | None,
    ) -> str | None:
        if cancel_token is not None and cancel_token.cancelled:
            return CANCELLED
        if deadline_seconds is not None and time.monotonic() - start >= deadline_seconds:
            return DEADLINE_EXCEEDED
        return None

    def _run_item(self, item: BatchItemInput, handler: BatchItemHandler) -> BatchItemResult:
        item_start = time.monotonic()
        started_at = self._clock.now()
        try:
            data = handler(item)
        except WorkforceError as exc:
            logger.warning(
                "batch_item_failed",
                extra={
                    "item_index": item.item_index,
                    "item_key": item.item_key,
                    "error_code": exc.code,
                    "error_message": str(exc),
                },
            )
            return BatchItemResult(
                item_index=item.item_index,
                item_key=item.item_key,
                status=BatchItemStatus.FAILED,
                error_code=exc.code,
                error_message=str(exc),
                duration_ms=int((time.monotonic() - item_start) * 1000),
                started_at=started_at,
                completed_at=self._clock.now(),
            )
        except Exception as exc:
            logger.error(
                "batch_item_unhandled_exception",
                extra={"item_index": item.item_index, "item_key": item.item_key},
                exc_info=True,
            )
            return BatchItemResult(
                item_index=item.item_index,
                item_key=item.item_key,
                status=BatchItemStatus.FAILED,
                error_code=UNHANDLED_EXCEPTION,
                error_message=str(exc),
                duration_ms=int((time.monotonic() - item_start) * 1000),
                started_at=started_at,
                completed_at=self._clock.now(),
            )

        return BatchItemResult(
            item_index=item.item_index,
            item_key=item.item_key,
            status=BatchItemStatus.SUCCEEDED,
            result_data=data,
            duration_ms=int((time.monotonic() - item_start) * 1000),
            started_at=started_at,
            completed_at=self._clock.now(),
        )
