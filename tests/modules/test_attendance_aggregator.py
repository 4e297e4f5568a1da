"""
Attendance aggregation: days present/absent/on leave, hours, overtime and
reconciliation with approved leave.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from workforce_kernel.exceptions import InvalidRangeError
from workforce_modules.attendance import (
    AttendanceAggregator,
    AttendanceRecord,
    AttendanceStatus,
    summarize_period,
)
from workforce_modules.leave import LeaveApplication, LeaveRequest, LeaveStatus, LeaveType

START = date(2024, 3, 1)
END = date(2024, 3, 31)
EIGHT = Decimal("8")


def _record(employee_id, day, status, hours="0"):
    return AttendanceRecord(
        id=uuid4(), employee_id=employee_id, date=day, status=status, hours=Decimal(hours),
    )


def _leave(employee_id, start, end, leave_type=LeaveType.SICK, status=LeaveStatus.APPROVED):
    return LeaveRequest(
        id=uuid4(), employee_id=employee_id, from_date=start, to_date=end,
        leave_type=leave_type, status=status,
    )


class TestSummarizePeriod:

    def test_counts_and_hours(self):
        emp = uuid4()
        records = [
            _record(emp, date(2024, 3, 4), AttendanceStatus.PRESENT, "8"),
            _record(emp, date(2024, 3, 5), AttendanceStatus.PRESENT, "10"),
            _record(emp, date(2024, 3, 6), AttendanceStatus.HALF_DAY, "4"),
            _record(emp, date(2024, 3, 7), AttendanceStatus.ABSENT),
            _record(emp, date(2024, 3, 8), AttendanceStatus.LEAVE),
        ]
        summary = summarize_period(emp, START, END, records, [], EIGHT)

        assert summary.days_present == Decimal("2.5")
        assert summary.days_absent == 1
        assert summary.total_hours == Decimal("22.00")
        assert summary.overtime_hours == Decimal("2.00")
        assert summary.recorded_leave_days == 1
        assert summary.days_on_leave == 0
        assert summary.conflicts == ()

    def test_approved_leave_counted_once_per_date(self):
        emp = uuid4()
        leave = [
            _leave(emp, date(2024, 3, 1), date(2024, 3, 3)),
            _leave(emp, date(2024, 3, 3), date(2024, 3, 4), LeaveType.UNPAID),
        ]
        summary = summarize_period(emp, START, END, [], leave, EIGHT)

        assert summary.days_on_leave == 4
        # 3 March is covered by both; paid wins for that date
        assert summary.paid_leave_days == 3
        assert summary.unpaid_leave_days == 1

    def test_leave_clipped_to_period(self):
        emp = uuid4()
        leave = [_leave(emp, date(2024, 2, 27), date(2024, 3, 2))]
        summary = summarize_period(emp, START, END, [], leave, EIGHT)
        assert summary.days_on_leave == 2

    def test_approved_leave_wins_over_attendance(self, captured_logs):
        emp = uuid4()
        records = [
            _record(emp, date(2024, 3, 1), AttendanceStatus.PRESENT, "9"),
            _record(emp, date(2024, 3, 2), AttendanceStatus.ABSENT),
            _record(emp, date(2024, 3, 4), AttendanceStatus.PRESENT, "8"),
        ]
        leave = [_leave(emp, date(2024, 3, 1), date(2024, 3, 3))]
        summary = summarize_period(emp, START, END, records, leave, EIGHT)

        assert summary.days_present == Decimal("1")
        assert summary.days_absent == 0
        assert summary.days_on_leave == 3
        assert summary.total_hours == Decimal("8.00")
        assert summary.overtime_hours == Decimal("0.00")
        assert summary.conflicts == (date(2024, 3, 1),)
        conflict_logs = [r for r in captured_logs() if r["message"] == "attendance_leave_conflict"]
        assert conflict_logs[0]["dates"] == ["2024-03-01"]

    def test_pending_and_rejected_leave_ignored(self):
        emp = uuid4()
        leave = [
            _leave(emp, date(2024, 3, 1), date(2024, 3, 3), status=LeaveStatus.PENDING),
            _leave(emp, date(2024, 3, 4), date(2024, 3, 5), status=LeaveStatus.REJECTED),
        ]
        assert summarize_period(emp, START, END, [], leave, EIGHT).days_on_leave == 0

    def test_other_employees_and_dates_ignored(self):
        emp = uuid4()
        records = [
            _record(uuid4(), date(2024, 3, 4), AttendanceStatus.PRESENT, "8"),
            _record(emp, date(2024, 4, 1), AttendanceStatus.PRESENT, "8"),
        ]
        assert summarize_period(emp, START, END, records, [], EIGHT).days_present == 0

    def test_custom_paid_leave_types(self):
        emp = uuid4()
        leave = [_leave(emp, date(2024, 3, 1), date(2024, 3, 2), LeaveType.CASUAL)]
        summary = summarize_period(emp, START, END, [], leave, EIGHT, frozenset({LeaveType.SICK}))
        assert summary.paid_leave_days == 0
        assert summary.unpaid_leave_days == 2

    def test_inverted_period(self):
        with pytest.raises(InvalidRangeError):
            summarize_period(uuid4(), END, START, [], [], EIGHT)


class TestAttendanceAggregator:

    def test_reads_attendance_and_approved_leave(
        self, record_day, leave_workflow, employees, session_factory, test_actor_id,
    ):
        emp = employees["daily"]
        record_day(emp, date(2024, 3, 4))
        record_day(emp, date(2024, 3, 5), out_hour=19)
        record_day(emp, date(2024, 3, 6), AttendanceStatus.ABSENT)
        approved = leave_workflow.apply(
            LeaveApplication(emp.id, date(2024, 3, 11), date(2024, 3, 12), LeaveType.EARNED),
            test_actor_id,
        )
        leave_workflow.approve(approved.id, test_actor_id)
        leave_workflow.apply(
            LeaveApplication(emp.id, date(2024, 3, 13), date(2024, 3, 13), LeaveType.SICK),
            test_actor_id,
        )

        with session_factory() as s:
            summary = AttendanceAggregator(s).aggregate(emp.id, START, END)

        assert summary.days_present == Decimal("2")
        assert summary.days_absent == 1
        assert summary.days_on_leave == 2
        assert summary.paid_leave_days == 2
        assert summary.total_hours == Decimal("18.00")
        assert summary.overtime_hours == Decimal("2.00")
