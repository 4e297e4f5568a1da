"""
AttendanceStore -- durable, idempotent storage of daily attendance.

Responsibility:
    Upserts attendance keyed by (employee_id, date) and answers range and
    filter queries.  The store is the only writer of ``attendance_records``.

Architecture position:
    Modules > Attendance.  Session-bound (``BaseService``): flushes inside
    the caller's transaction, never commits.

Invariants enforced:
    - At most one row per (employee_id, date).  The existing row is read
      with a row lock (PostgreSQL) and updated in place; a concurrent first
      insert that loses the unique race surfaces as IntegrityError and the
      caller's ``run_transaction`` re-runs the upsert, which then updates.
    - Re-applying the same input leaves exactly one row with identical
      values.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from workforce_kernel.exceptions import InvalidRangeError
from workforce_kernel.logging_config import get_logger
from workforce_kernel.services.base import BaseService
from workforce_modules.attendance.models import (
    AttendanceInput,
    AttendanceQuery,
    AttendanceRecord,
    AttendanceReport,
    AttendanceStatus,
    AttendanceTotals,
)
from workforce_modules.attendance.orm import AttendanceRecordModel

logger = get_logger("modules.attendance.store")


class AttendanceStore(BaseService):
    """Upsert and query attendance rows within a caller-owned session."""

    def upsert(
        self,
        attendance: AttendanceInput,
        hours: Decimal,
        actor_id: UUID,
    ) -> tuple[AttendanceRecord, bool]:
        """
        Insert or replace the row for (employee_id, date).

        Returns:
            The stored record and True when a new row was created.
        """
        model = self.session.execute(
            select(AttendanceRecordModel)
            .where(
                AttendanceRecordModel.employee_id == attendance.employee_id,
                AttendanceRecordModel.work_date == attendance.date,
            )
            .with_for_update()
        ).scalar_one_or_none()

        created = model is None
        if created:
            model = AttendanceRecordModel(
                employee_id=attendance.employee_id,
                work_date=attendance.date,
                created_by_id=actor_id,
            )
            self.session.add(model)
        else:
            model.updated_by_id = actor_id

        link = attendance.job_link
        model.status = attendance.status.value
        model.check_in = attendance.check_in
        model.check_out = attendance.check_out
        model.hours = hours
        model.job_link = link.as_dict() if link is not None else None
        model.project_ref = link.project_id if link is not None else None
        model.job_ref = link.job_id if link is not None else None
        model.remarks = attendance.remarks
        self.session.flush()

        logger.info(
            "attendance_upserted",
            extra={
                "employee_id": str(attendance.employee_id),
                "date": attendance.date.isoformat(),
                "status": attendance.status.value,
                "inserted": created,
            },
        )
        return model.to_dto(), created

    def get(self, employee_id: UUID, on_date: date) -> AttendanceRecord | None:
        model = self.session.execute(
            select(AttendanceRecordModel).where(
                AttendanceRecordModel.employee_id == employee_id,
                AttendanceRecordModel.work_date == on_date,
            )
        ).scalar_one_or_none()
        return model.to_dto() if model is not None else None

    def list_for_period(
        self, employee_id: UUID, period_start: date, period_end: date,
    ) -> list[AttendanceRecord]:
        return list(
            self.query(
                AttendanceQuery(
                    employee_id=employee_id,
                    date_from=period_start,
                    date_to=period_end,
                )
            ).records
        )

    def query(self, query: AttendanceQuery) -> AttendanceReport:
        if query.date_from and query.date_to and query.date_to < query.date_from:
            raise InvalidRangeError("date_to", query.date_from, query.date_to)

        stmt = select(AttendanceRecordModel)
        if query.employee_id is not None:
            stmt = stmt.where(AttendanceRecordModel.employee_id == query.employee_id)
        if query.date_from is not None:
            stmt = stmt.where(AttendanceRecordModel.work_date >= query.date_from)
        if query.date_to is not None:
            stmt = stmt.where(AttendanceRecordModel.work_date <= query.date_to)
        if query.project_id is not None:
            stmt = stmt.where(AttendanceRecordModel.project_ref == query.project_id)
        if query.job_id is not None:
            stmt = stmt.where(AttendanceRecordModel.job_ref == query.job_id)
        stmt = stmt.order_by(
            AttendanceRecordModel.work_date, AttendanceRecordModel.employee_id,
        )

        records = tuple(m.to_dto() for m in self.session.execute(stmt).scalars())
        return AttendanceReport(records=records, totals=summarize_records(records))


def summarize_records(records: tuple[AttendanceRecord, ...]) -> AttendanceTotals:
    """Raw counts over query results; no leave reconciliation."""
    by_status = {status: 0 for status in AttendanceStatus}
    total_hours = Decimal("0")
    for record in records:
        by_status[record.status] += 1
        total_hours += record.hours
    return AttendanceTotals(
        total_days=len(records),
        total_hours=total_hours.quantize(Decimal("0.01")),
        present_days=by_status[AttendanceStatus.PRESENT],
        absent_days=by_status[AttendanceStatus.ABSENT],
        leave_days=by_status[AttendanceStatus.LEAVE],
        half_days=by_status[AttendanceStatus.HALF_DAY],
    )
