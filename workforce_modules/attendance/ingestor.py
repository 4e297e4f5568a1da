"""
AttendanceIngestor -- validated single writes and partial-failure bulk upload.

Responsibility
--------------
Entry point for attendance data.  ``record_attendance`` validates and
upserts one record; ``bulk_ingest`` does the same for every row of an
uploaded sheet, isolating each row so one malformed row never blocks the
rest.

Architecture position
---------------------
**Modules layer** -- orchestrator.  Resolves employees through the
``EmployeeDirectory`` contract, writes through ``AttendanceStore``, and
fans rows out through ``FanOutExecutor`` with one transaction per row.

Invariants enforced
-------------------
* Every stored record passed ``validate_attendance``.
* Upserts are idempotent on (employee_id, date); re-submitting a whole file
  converges to the same rows.
* Bulk results: ``uploaded_count + len(errors) + skipped_count ==
  total_records`` and errors are ordered by 1-based row number.

Failure modes
-------------
* Single write: ``UnknownEmployeeError``, ``InactiveEmployeeError``,
  ``ValidationError``, ``OperationTimeoutError`` propagate to the caller.
* Bulk: the same errors are reported per row.

Audit relevance
---------------
ATTENDANCE_RECORDED per single write; one ATTENDANCE_BULK_UPLOADED per
bulk run with the counts.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence
from uuid import UUID

from sqlalchemy.orm import Session, sessionmaker

from workforce_batch.domain.types import BatchItemInput, BatchItemStatus
from workforce_batch.services.executor import FanOutExecutor
from workforce_batch.tasks.base import CancellationToken
from workforce_kernel.db.engine import run_transaction
from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.exceptions import InactiveEmployeeError, UnknownEmployeeError
from workforce_kernel.logging_config import LogContext, get_logger
from workforce_kernel.models.audit_event import AuditAction
from workforce_kernel.services.auditor_service import AuditorService
from workforce_modules.attendance.config import AttendanceConfig
from workforce_modules.attendance.models import (
    AttendanceInput,
    AttendanceRecord,
    BulkIngestSummary,
    RowError,
)
from workforce_modules.attendance.store import AttendanceStore
from workforce_modules.attendance.validation import (
    canonicalize_row,
    normalize_attendance,
    parse_attendance_row,
    validate_attendance,
)
from workforce_modules.employees.directory import EmployeeDirectory
from workforce_modules.employees.models import Employee

logger = get_logger("modules.attendance.ingestor")


class AttendanceIngestor:

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        directory: EmployeeDirectory,
        clock: Clock | None = None,
        config: AttendanceConfig | None = None,
        executor: FanOutExecutor | None = None,
    ):
        self._session_factory = session_factory
        self._directory = directory
        self._clock = clock or SystemClock()
        self._config = config or AttendanceConfig()
        self._executor = executor or FanOutExecutor(clock=self._clock)

    # -------------------------------------------------------------------------
    # Single write
    # -------------------------------------------------------------------------

    def record_attendance(self, attendance: AttendanceInput, actor_id: UUID) -> AttendanceRecord:
        with LogContext.bind(
            actor_id=str(actor_id),
            employee_id=str(attendance.employee_id),
            operation="record_attendance",
        ):
            employee = self._directory.get(attendance.employee_id)
            if employee is None:
                raise UnknownEmployeeError(str(attendance.employee_id))
            return self._store(employee, attendance, actor_id, audit=True)

    def _store(
        self,
        employee: Employee,
        attendance: AttendanceInput,
        actor_id: UUID,
        audit: bool,
    ) -> AttendanceRecord:
        if not employee.is_active:
            raise InactiveEmployeeError(str(employee.id))
        attendance = normalize_attendance(attendance)
        hours = validate_attendance(attendance, self._clock.today(), self._config)

        def work(session: Session) -> AttendanceRecord:
            record, created = AttendanceStore(session).upsert(attendance, hours, actor_id)
            if audit:
                AuditorService(session, self._clock).record(
                    "AttendanceRecord", record.id, AuditAction.ATTENDANCE_RECORDED, actor_id,
                    {
                        "employee_id": record.employee_id,
                        "date": record.date,
                        "status": record.status,
                        "hours": record.hours,
                        "created": created,
                    },
                )
            return record

        return run_transaction(self._session_factory, work, operation="record_attendance")

    # -------------------------------------------------------------------------
    # Bulk
    # -------------------------------------------------------------------------

    def bulk_ingest(
        self,
        rows: Sequence[Mapping[str, Any]],
        actor_id: UUID,
        cancel_token: CancellationToken | None = None,
        deadline_seconds: float | None = None,
    ) -> BulkIngestSummary:
        """
        Validate and upsert every row independently.

        Rows are numbered from 1 in the returned errors.
        """
        items = [
            BatchItemInput(item_index=i, item_key=f"row-{i + 1}", payload={"row": row})
            for i, row in enumerate(rows)
        ]

        def handle(item: BatchItemInput) -> dict[str, Any]:
            raw = canonicalize_row(item.payload["row"])
            employee = self._resolve_employee(raw)
            with LogContext.bind(employee_id=str(employee.id)):
                attendance = parse_attendance_row(raw, employee.id, self._config)
                record = self._store(employee, attendance, actor_id, audit=False)
            return {"record": record}

        with LogContext.bind(actor_id=str(actor_id), operation="bulk_attendance"):
            run = self._executor.run(
                "attendance_bulk_ingest", items, handle,
                cancel_token=cancel_token, deadline_seconds=deadline_seconds,
            )

            errors = []
            for result in run.item_results:
                if result.status == BatchItemStatus.FAILED:
                    row = rows[result.item_index]
                    ref = _employee_ref(canonicalize_row(row)) if isinstance(row, Mapping) else None
                    errors.append(
                        RowError(
                            row=result.item_index + 1,
                            code=result.error_code or "UNKNOWN",
                            message=result.error_message or "",
                            employee_ref=ref,
                        )
                    )

            summary = BulkIngestSummary(
                total_records=len(rows),
                uploaded_count=run.succeeded,
                errors=tuple(errors),
                skipped_count=run.skipped,
                status=run.status,
                records=tuple(r.result_data["record"] for r in run.successes),
                run_id=run.run_id,
            )

            def audit(session: Session) -> None:
                AuditorService(session, self._clock).record(
                    "AttendanceUpload", run.run_id, AuditAction.ATTENDANCE_BULK_UPLOADED, actor_id,
                    {
                        "total_records": summary.total_records,
                        "uploaded_count": summary.uploaded_count,
                        "error_count": len(summary.errors),
                        "skipped_count": summary.skipped_count,
                    },
                )

            run_transaction(self._session_factory, audit, operation="bulk_attendance_audit")

            logger.info(
                "attendance_bulk_ingested",
                extra={
                    "run_id": str(run.run_id),
                    "total_records": summary.total_records,
                    "uploaded_count": summary.uploaded_count,
                    "error_count": len(summary.errors),
                    "skipped_count": summary.skipped_count,
                },
            )
        return summary

    def _resolve_employee(self, row: Mapping[str, Any]) -> Employee:
        """Employee by code, falling back to email, then to an explicit id."""
        code = row.get("employee_code")
        email = row.get("email")
        employee = None
        if code not in (None, ""):
            employee = self._directory.find_by_code(str(code))
        if employee is None and email not in (None, ""):
            employee = self._directory.find_by_email(str(email))
        if employee is None and row.get("employee_id") not in (None, ""):
            try:
                employee = self._directory.get(UUID(str(row["employee_id"])))
            except ValueError:
                employee = None
        if employee is None:
            raise UnknownEmployeeError(_employee_ref(row) or "<missing>")
        return employee


def _employee_ref(row: Mapping[str, Any]) -> str | None:
    for key in ("employee_code", "email", "employee_id"):
        value = row.get(key)
        if value not in (None, ""):
            return str(value)
    return None
