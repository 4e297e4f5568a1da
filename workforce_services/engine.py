"""
WorkforceEngine -- the public surface of the attendance/payroll engine.

Responsibility:
    Wires the module orchestrators (AttendanceIngestor, LeaveWorkflow,
    PayrollGenerator, PayrollLedger, LabourCostAllocator) over one session
    factory, one clock, one employee directory and one fan-out executor,
    and exposes the external contracts as plain methods.

Architecture position:
    Services -- composition root.  Holds no state of its own beyond the
    wired collaborators; every call is a fresh transaction in the module
    that owns the data.

Failure modes:
    Single-record calls raise the typed ``WorkforceError`` subclasses of
    the module they delegate to.  Bulk ingestion and payroll generation
    return structured partial results instead of raising per item.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session, sessionmaker

from workforce_batch.services.executor import FanOutExecutor
from workforce_batch.tasks.base import CancellationToken
from workforce_config import EngineConfig, get_active_config
from workforce_ingestion.adapters.base import SourceProbe
from workforce_ingestion.services.attendance_import_service import AttendanceImportService
from workforce_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
    session_scope,
)
from workforce_kernel.db.immutability import register_immutability_listeners
from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.logging_config import configure_logging, get_logger
from workforce_kernel.services.auditor_service import AuditorService, AuditTrace
from workforce_modules.attendance import (
    AttendanceConfig,
    AttendanceIngestor,
    AttendanceInput,
    AttendanceQuery,
    AttendanceRecord,
    AttendanceReport,
    AttendanceStore,
    BulkIngestSummary,
)
from workforce_modules.employees import EmployeeDirectory, SqlEmployeeDirectory
from workforce_modules.leave import LeaveApplication, LeaveQuery, LeaveRequest, LeaveWorkflow
from workforce_modules.payroll import (
    LabourCostAllocator,
    LabourCostReport,
    PayrollConfig,
    PayrollGenerationResult,
    PayrollGenerator,
    PayrollLedger,
    PayrollQuery,
    PayrollRecord,
)

logger = get_logger("services.engine")


class WorkforceEngine:
    """Attendance, leave and payroll operations over one database."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        directory: EmployeeDirectory | None = None,
        clock: Clock | None = None,
        attendance_config: AttendanceConfig | None = None,
        payroll_config: PayrollConfig | None = None,
        max_workers: int = 4,
        bulk_deadline_seconds: float | None = None,
        generation_deadline_seconds: float | None = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._directory = directory or SqlEmployeeDirectory(session_factory)
        self._bulk_deadline = bulk_deadline_seconds
        self._generation_deadline = generation_deadline_seconds
        executor = FanOutExecutor(max_workers=max_workers, clock=self._clock)

        self.ingestor = AttendanceIngestor(
            session_factory, self._directory, self._clock, attendance_config, executor,
        )
        self.leave = LeaveWorkflow(session_factory, self._directory, self._clock)
        self.generator = PayrollGenerator(
            session_factory, self._directory, self._clock,
            payroll_config, attendance_config, executor,
        )
        self.ledger = PayrollLedger(session_factory, self._clock)
        self.labour_costs = LabourCostAllocator(session_factory, self._directory, payroll_config)
        self.importer = AttendanceImportService(self.ingestor)

        logger.info(
            "workforce_engine_ready",
            extra={"max_workers": max_workers, "directory": type(self._directory).__name__},
        )

    @classmethod
    def from_config(
        cls,
        config: EngineConfig | None = None,
        clock: Clock | None = None,
        directory: EmployeeDirectory | None = None,
        create_schema: bool = False,
    ) -> WorkforceEngine:
        """
        Build an engine from ``EngineConfig`` (default: ``get_active_config()``).

        Initializes logging, the database engine and the immutability
        listeners.  ``create_schema`` creates missing tables.
        """
        config = config or get_active_config()
        configure_logging(level=getattr(logging, config.logging.level.upper()))

        db = config.database
        init_engine_from_url(
            db.url,
            echo=db.echo,
            pool_size=db.pool_size,
            max_overflow=db.max_overflow,
            pool_timeout=db.pool_timeout,
            pool_recycle=db.pool_recycle,
            lock_timeout_ms=db.lock_timeout_ms,
            statement_timeout_ms=db.statement_timeout_ms,
            sqlite_busy_timeout=db.sqlite_busy_timeout,
        )
        if create_schema:
            create_tables()
        register_immutability_listeners()

        return cls(
            get_session_factory(),
            directory=directory,
            clock=clock,
            attendance_config=config.attendance,
            payroll_config=config.payroll,
            max_workers=config.batch.max_workers,
            bulk_deadline_seconds=config.batch.bulk_deadline_seconds,
            generation_deadline_seconds=config.batch.generation_deadline_seconds,
        )

    # -------------------------------------------------------------------------
    # Attendance
    # -------------------------------------------------------------------------

    def record_attendance(self, attendance: AttendanceInput, actor_id: UUID) -> AttendanceRecord:
        return self.ingestor.record_attendance(attendance, actor_id)

    def bulk_attendance(
        self,
        rows: Sequence[Mapping[str, Any]],
        actor_id: UUID,
        cancel_token: CancellationToken | None = None,
    ) -> BulkIngestSummary:
        return self.ingestor.bulk_ingest(
            rows, actor_id, cancel_token=cancel_token, deadline_seconds=self._bulk_deadline,
        )

    def import_attendance_file(
        self,
        source_path: Path | str,
        actor_id: UUID,
        source_format: str | None = None,
        options: dict[str, Any] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> BulkIngestSummary:
        return self.importer.import_file(
            source_path, actor_id, source_format, options, cancel_token,
            deadline_seconds=self._bulk_deadline,
        )

    def probe_attendance_file(
        self,
        source_path: Path | str,
        source_format: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> SourceProbe:
        return self.importer.probe(source_path, source_format, options)

    def query_attendance(self, query: AttendanceQuery) -> AttendanceReport:
        with session_scope(self._session_factory, operation="query_attendance") as session:
            return AttendanceStore(session).query(query)

    # -------------------------------------------------------------------------
    # Leave
    # -------------------------------------------------------------------------

    def apply_leave(self, application: LeaveApplication, actor_id: UUID) -> LeaveRequest:
        return self.leave.apply(application, actor_id)

    def approve_leave(self, leave_id: UUID, actor_id: UUID) -> LeaveRequest:
        return self.leave.approve(leave_id, actor_id)

    def reject_leave(self, leave_id: UUID, actor_id: UUID) -> LeaveRequest:
        return self.leave.reject(leave_id, actor_id)

    def get_leave(self, leave_id: UUID) -> LeaveRequest:
        return self.leave.get(leave_id)

    def list_leave(self, query: LeaveQuery | None = None) -> list[LeaveRequest]:
        return self.leave.list(query)

    # -------------------------------------------------------------------------
    # Payroll
    # -------------------------------------------------------------------------

    def generate_payroll(
        self,
        month: int,
        year: int,
        actor_id: UUID,
        employee_ids: Sequence[UUID] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> PayrollGenerationResult:
        return self.generator.generate(
            month, year, actor_id,
            employee_ids=employee_ids,
            cancel_token=cancel_token,
            deadline_seconds=self._generation_deadline,
        )

    def mark_paid(
        self,
        payroll_id: UUID,
        actor_id: UUID,
        paid_at: datetime | None = None,
        payment_ref: str | None = None,
    ) -> PayrollRecord:
        return self.ledger.mark_paid(payroll_id, actor_id, paid_at, payment_ref)

    def get_payroll(self, payroll_id: UUID) -> PayrollRecord:
        return self.ledger.get(payroll_id)

    def list_payroll(self, query: PayrollQuery | None = None) -> list[PayrollRecord]:
        return self.ledger.list(query)

    def allocate_labour_costs(self, month: int, year: int) -> LabourCostReport:
        return self.labour_costs.allocate(month, year)

    # -------------------------------------------------------------------------
    # Audit
    # -------------------------------------------------------------------------

    def audit_trail(self, entity_type: str, entity_id: UUID) -> AuditTrace:
        with session_scope(self._session_factory, operation="audit_trail") as session:
            return AuditorService(session, self._clock).trace(entity_type, entity_id)
