"""
Module: workforce_kernel.models.audit_event
Responsibility: ORM persistence for the append-only audit trail.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Audit records are append-only; no UPDATE or DELETE (ORM listener in
      db/immutability.py).
    - payload_hash = SHA-256 of the canonical JSON payload, so any later
      edit of the stored payload is detectable.

Audit relevance:
    AuditEvent IS the audit trail.  Every state change -- attendance
    recorded, bulk upload, leave applied/decided, payroll generated,
    regenerated or paid -- produces an AuditEvent.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import JSON, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from workforce_kernel.db.base import Base, UTCDateTime, UUIDString


class AuditAction(str, Enum):
    """Types of auditable actions."""

    # Attendance
    ATTENDANCE_RECORDED = "attendance_recorded"
    ATTENDANCE_BULK_UPLOADED = "attendance_bulk_uploaded"

    # Leave lifecycle
    LEAVE_APPLIED = "leave_applied"
    LEAVE_APPROVED = "leave_approved"
    LEAVE_REJECTED = "leave_rejected"

    # Payroll lifecycle
    PAYROLL_GENERATED = "payroll_generated"
    PAYROLL_REGENERATED = "payroll_regenerated"
    PAYROLL_PAID = "payroll_paid"
    PAYROLL_RUN_COMPLETED = "payroll_run_completed"


class AuditEvent(Base):
    """
    Audit event with payload hash for tamper evidence.

    Contract:
        AuditEvent rows are append-only, never updated or deleted.
    """

    __tablename__ = "audit_events"

    __table_args__ = (
        Index("idx_audit_entity", "entity_type", "entity_id"),
        Index("idx_audit_action", "action"),
        Index("idx_audit_occurred", "occurred_at"),
    )

    # e.g. "AttendanceRecord", "LeaveRequest", "PayrollRecord", "PayrollRun"
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)

    entity_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    action: Mapped[str] = mapped_column(String(50), nullable=False)

    actor_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    occurred_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    payload: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    payload_hash: Mapped[str] = mapped_column(String(64), nullable=False)

    def __repr__(self) -> str:
        return f"<AuditEvent {self.action} on {self.entity_type}:{self.entity_id}>"
