"""
AttendanceAggregator -- per-employee, per-period attendance totals.

Responsibility:
    Combines attendance rows with APPROVED leave into the figures payroll
    needs: days present/absent/on leave, hours and overtime.

Architecture position:
    Modules > Attendance.  ``summarize_period`` is a pure function; the
    ``AttendanceAggregator`` class only loads its inputs from a caller-owned
    session.  No writes, so it is safe to run concurrently for different
    employees.

Rules:
    - days_present = PRESENT + 0.5 x HALF_DAY.
    - Approved leave wins.  A date covered by APPROVED leave counts once as
      leave and is excluded from present/absent/hours, whatever attendance
      says.  PRESENT/HALF_DAY on such a date is reported as a conflict and
      logged.
    - A date is paid leave when any covering APPROVED request has a paid
      leave type; otherwise it is unpaid leave.
    - A LEAVE attendance entry with no approved leave behind it is counted
      in ``recorded_leave_days`` only.
    - overtime = sum over worked days of max(0, hours - standard daily hours).
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from workforce_kernel.exceptions import InvalidRangeError
from workforce_kernel.logging_config import get_logger
from workforce_modules.attendance.config import AttendanceConfig
from workforce_modules.attendance.models import (
    AttendanceRecord,
    AttendanceStatus,
    AttendanceSummary,
)
from workforce_modules.attendance.store import AttendanceStore
from workforce_modules.leave.models import LeaveRequest, LeaveStatus, LeaveType
from workforce_modules.leave.selector import LeaveSelector

logger = get_logger("modules.attendance.aggregator")

HALF = Decimal("0.5")
DEFAULT_PAID_LEAVE_TYPES = frozenset({LeaveType.SICK, LeaveType.CASUAL, LeaveType.EARNED})


def summarize_period(
    employee_id: UUID,
    period_start: date,
    period_end: date,
    records: Iterable[AttendanceRecord],
    approved_leave: Iterable[LeaveRequest],
    standard_daily_hours: Decimal,
    paid_leave_types: frozenset[LeaveType] = DEFAULT_PAID_LEAVE_TYPES,
) -> AttendanceSummary:
    if period_end < period_start:
        raise InvalidRangeError("period_end", period_start, period_end)

    # date -> paid?
    leave_dates: dict[date, bool] = {}
    for leave in approved_leave:
        if leave.status != LeaveStatus.APPROVED or leave.employee_id != employee_id:
            continue
        paid = leave.leave_type in paid_leave_types
        for day in leave.dates():
            if period_start <= day <= period_end:
                leave_dates[day] = leave_dates.get(day, False) or paid

    days_present = Decimal("0")
    days_absent = 0
    recorded_leave = 0
    total_hours = Decimal("0")
    overtime = Decimal("0")
    conflicts: list[date] = []

    for record in records:
        if record.employee_id != employee_id or not period_start <= record.date <= period_end:
            continue
        if record.date in leave_dates:
            if record.status.is_worked:
                conflicts.append(record.date)
            continue

        if record.status == AttendanceStatus.PRESENT:
            days_present += 1
        elif record.status == AttendanceStatus.HALF_DAY:
            days_present += HALF
        elif record.status == AttendanceStatus.ABSENT:
            days_absent += 1
        else:
            recorded_leave += 1

        if record.status.is_worked:
            total_hours += record.hours
            overtime += max(Decimal("0"), record.hours - standard_daily_hours)

    paid_days = sum(1 for paid in leave_dates.values() if paid)

    if conflicts:
        logger.warning(
            "attendance_leave_conflict",
            extra={
                "employee_id": str(employee_id),
                "dates": [d.isoformat() for d in sorted(conflicts)],
                "resolution": "approved_leave_wins",
            },
        )

    return AttendanceSummary(
        employee_id=employee_id,
        period_start=period_start,
        period_end=period_end,
        days_present=days_present,
        days_absent=days_absent,
        days_on_leave=len(leave_dates),
        paid_leave_days=paid_days,
        unpaid_leave_days=len(leave_dates) - paid_days,
        total_hours=total_hours.quantize(Decimal("0.01")),
        overtime_hours=overtime.quantize(Decimal("0.01")),
        recorded_leave_days=recorded_leave,
        conflicts=tuple(sorted(conflicts)),
    )


class AttendanceAggregator:
    """Loads a period's attendance and approved leave, then summarizes it."""

    def __init__(
        self,
        session: Session,
        config: AttendanceConfig | None = None,
        paid_leave_types: frozenset[LeaveType] = DEFAULT_PAID_LEAVE_TYPES,
    ):
        self._session = session
        self._config = config or AttendanceConfig()
        self._paid_leave_types = paid_leave_types

    def aggregate(
        self, employee_id: UUID, period_start: date, period_end: date,
    ) -> AttendanceSummary:
        if period_end < period_start:
            raise InvalidRangeError("period_end", period_start, period_end)
        records = AttendanceStore(self._session).list_for_period(
            employee_id, period_start, period_end,
        )
        leave = LeaveSelector(self._session).approved_overlapping(
            employee_id, period_start, period_end,
        )
        summary = summarize_period(
            employee_id,
            period_start,
            period_end,
            records,
            leave,
            self._config.standard_daily_hours,
            self._paid_leave_types,
        )
        logger.debug(
            "attendance_aggregated",
            extra={
                "employee_id": str(employee_id),
                "period_start": period_start.isoformat(),
                "period_end": period_end.isoformat(),
                "days_present": str(summary.days_present),
                "days_on_leave": summary.days_on_leave,
                "total_hours": str(summary.total_hours),
            },
        )
        return summary
