"""
AuditorService -- append-only audit trail.

Responsibility:
    Creates immutable audit events for every state change in the engine
    and answers trace queries for forensic review.

Architecture position:
    Kernel > Services -- session-bound, called by the attendance ingestor,
    the leave workflow, the payroll generator and the payroll ledger inside
    the same transaction as the change being audited.

Invariants enforced:
    - Append-only: audit events are never modified or deleted (ORM
      listener on the AuditEvent model).
    - Each event stores the SHA-256 of its canonical payload; ``verify()``
      recomputes it.

Failure modes:
    - Any flush error propagates and rolls back the audited change with it.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.logging_config import get_logger
from workforce_kernel.models.audit_event import AuditAction, AuditEvent
from workforce_kernel.services.base import BaseService
from workforce_kernel.utils.hashing import hash_payload, to_json_payload

logger = get_logger("services.auditor")


@dataclass(frozen=True)
class AuditTraceEntry:
    """A single entry in an audit trace."""

    action: AuditAction
    occurred_at: datetime
    actor_id: UUID
    payload: dict[str, Any]
    payload_hash: str


@dataclass(frozen=True)
class AuditTrace:
    """All audit events for one entity, oldest first."""

    entity_type: str
    entity_id: UUID
    entries: tuple[AuditTraceEntry, ...]

    @property
    def is_empty(self) -> bool:
        return len(self.entries) == 0

    @property
    def actions(self) -> tuple[AuditAction, ...]:
        return tuple(e.action for e in self.entries)


class AuditorService(BaseService):
    """
    Records and reads audit events.

    Contract:
        ``record()`` adds one AuditEvent to the caller's session and flushes.
        It never commits.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def record(
        self,
        entity_type: str,
        entity_id: UUID,
        action: AuditAction,
        actor_id: UUID,
        payload: dict[str, Any] | None = None,
    ) -> AuditEvent:
        stored = to_json_payload(payload or {})
        event = AuditEvent(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action.value,
            actor_id=actor_id,
            occurred_at=self._clock.now_utc(),
            payload=stored,
            payload_hash=hash_payload(stored),
        )
        self.session.add(event)
        self.session.flush()

        logger.info(
            "audit_event_recorded",
            extra={
                "entity_type": entity_type,
                "entity_id": str(entity_id),
                "action": action.value,
            },
        )
        return event

    def trace(self, entity_type: str, entity_id: UUID) -> AuditTrace:
        rows = self.session.execute(
            select(AuditEvent)
            .where(
                AuditEvent.entity_type == entity_type,
                AuditEvent.entity_id == entity_id,
            )
            .order_by(AuditEvent.occurred_at, AuditEvent.id)
        ).scalars().all()

        return AuditTrace(
            entity_type=entity_type,
            entity_id=entity_id,
            entries=tuple(
                AuditTraceEntry(
                    action=AuditAction(row.action),
                    occurred_at=row.occurred_at,
                    actor_id=row.actor_id,
                    payload=row.payload or {},
                    payload_hash=row.payload_hash,
                )
                for row in rows
            ),
        )

    def verify(self, event: AuditEvent) -> bool:
        """True when the stored payload still matches its recorded hash."""
        return hash_payload(event.payload or {}) == event.payload_hash
