"""
Batch item handler protocol and cancellation token.

Contract:
    A handler receives one BatchItemInput, performs its work in its own
    transaction, and returns result data (or None).  Raising a
    WorkforceError marks the item FAILED with that error's code; any other
    exception is reported as UNHANDLED_EXCEPTION.
"""

from __future__ import annotations

import threading
from typing import Any, Protocol

from workforce_batch.domain.types import BatchItemInput


class BatchItemHandler(Protocol):
    """Callable that processes one item."""

    def __call__(self, item: BatchItemInput) -> dict[str, Any] | None:
        ...


class CancellationToken:
    """Cooperative cancellation flag shared between caller and fan-out."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
