"""
Attendance Domain Models (``workforce_modules.attendance.models``).

Responsibility
--------------
Frozen value objects for daily attendance: the validated input of a
single write, the stored record, query filters, period summaries and
bulk-ingestion results.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* Hours are ``Decimal`` -- NEVER ``float``.
* At most one ``AttendanceRecord`` per (employee_id, date); enforced by
  the ``uq_attendance_employee_date`` constraint in ``orm.py``.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from workforce_batch.domain.types import BatchJobStatus


class AttendanceStatus(str, Enum):
    """Closed set of daily attendance outcomes."""
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LEAVE = "LEAVE"
    HALF_DAY = "HALF_DAY"

    @property
    def is_worked(self) -> bool:
        """Statuses for which check-in/out and hours are meaningful."""
        return self in (AttendanceStatus.PRESENT, AttendanceStatus.HALF_DAY)


@dataclass(frozen=True)
class JobLink:
    """Reference to an external project/job the day's hours are booked to."""
    project_id: str | None = None
    job_id: str | None = None

    def as_dict(self) -> dict[str, str | None]:
        return {"projectId": self.project_id, "jobId": self.job_id}


@dataclass(frozen=True)
class AttendanceInput:
    """A single attendance write, already parsed into typed values."""
    employee_id: UUID
    date: date
    status: AttendanceStatus
    check_in: datetime | None = None
    check_out: datetime | None = None
    job_link: JobLink | None = None
    remarks: str | None = None


@dataclass(frozen=True)
class AttendanceRecord:
    """A stored attendance row."""
    id: UUID
    employee_id: UUID
    date: date
    status: AttendanceStatus
    hours: Decimal
    check_in: datetime | None = None
    check_out: datetime | None = None
    job_link: JobLink | None = None
    remarks: str | None = None


@dataclass(frozen=True)
class AttendanceQuery:
    """Filters for ``AttendanceStore.query``; all optional."""
    employee_id: UUID | None = None
    date_from: date | None = None
    date_to: date | None = None
    project_id: str | None = None
    job_id: str | None = None


@dataclass(frozen=True)
class AttendanceTotals:
    total_days: int
    total_hours: Decimal
    present_days: int
    absent_days: int
    leave_days: int
    half_days: int


@dataclass(frozen=True)
class AttendanceReport:
    records: tuple[AttendanceRecord, ...]
    totals: AttendanceTotals


@dataclass(frozen=True)
class AttendanceSummary:
    """
    Per-employee totals for a period, produced by ``AttendanceAggregator``.

    ``days_on_leave`` counts dates covered by APPROVED leave (clipped to the
    period, once per date) and equals ``paid_leave_days + unpaid_leave_days``.
    ``recorded_leave_days`` counts raw LEAVE attendance entries on dates
    with no approved leave; they are informational and never paid.
    ``conflicts`` lists dates where attendance says worked but approved
    leave covers the date.
    """
    employee_id: UUID
    period_start: date
    period_end: date
    days_present: Decimal
    days_absent: int
    days_on_leave: int
    paid_leave_days: int
    unpaid_leave_days: int
    total_hours: Decimal
    overtime_hours: Decimal
    recorded_leave_days: int = 0
    conflicts: tuple[date, ...] = ()


@dataclass(frozen=True)
class RowError:
    """Why one bulk row was not stored. ``row`` is 1-based."""
    row: int
    code: str
    message: str
    employee_ref: str | None = None


@dataclass(frozen=True)
class BulkIngestSummary:
    total_records: int
    uploaded_count: int
    errors: tuple[RowError, ...] = ()
    skipped_count: int = 0
    status: BatchJobStatus = BatchJobStatus.COMPLETED
    records: tuple[AttendanceRecord, ...] = field(default_factory=tuple)
    run_id: UUID | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "totalRecords": self.total_records,
            "uploadedCount": self.uploaded_count,
            "skippedCount": self.skipped_count,
            "status": self.status.value,
            "errors": [
                {"row": e.row, "code": e.code, "error": e.message}
                for e in self.errors
            ],
        }
