"""AttendanceStore.query filters and totals."""

from datetime import date
from decimal import Decimal

import pytest

from workforce_kernel.exceptions import InvalidRangeError
from workforce_modules.attendance import (
    AttendanceQuery,
    AttendanceStatus,
    AttendanceStore,
    JobLink,
)


@pytest.fixture
def march_attendance(record_day, employees):
    alice, bob = employees["monthly"], employees["daily"]
    record_day(alice, date(2024, 3, 4), job_link=JobLink("P-1", "J-1"))
    record_day(alice, date(2024, 3, 5), out_hour=13, status=AttendanceStatus.HALF_DAY)
    record_day(alice, date(2024, 3, 6), AttendanceStatus.LEAVE)
    record_day(bob, date(2024, 3, 4), job_link=JobLink("P-1", "J-2"))
    record_day(bob, date(2024, 3, 11), AttendanceStatus.ABSENT)
    record_day(bob, date(2024, 4, 1), job_link=JobLink("P-2", None))
    return alice, bob


def _query(session, **filters):
    return AttendanceStore(session).query(AttendanceQuery(**filters))


class TestAttendanceQuery:

    def test_no_filters_returns_everything_in_date_order(self, session, march_attendance):
        report = _query(session)
        dates = [r.date for r in report.records]
        assert len(dates) == 6
        assert dates == sorted(dates)

    def test_employee_and_range(self, session, march_attendance):
        alice, _ = march_attendance
        report = _query(
            session, employee_id=alice.id, date_from=date(2024, 3, 5), date_to=date(2024, 3, 31),
        )
        assert [r.date for r in report.records] == [date(2024, 3, 5), date(2024, 3, 6)]

    def test_range_bounds_inclusive(self, session, march_attendance):
        report = _query(session, date_from=date(2024, 3, 4), date_to=date(2024, 3, 4))
        assert len(report.records) == 2

    def test_project_and_job_filters(self, session, march_attendance):
        _, bob = march_attendance
        assert len(_query(session, project_id="P-1").records) == 2
        by_job = _query(session, project_id="P-1", job_id="J-2").records
        assert [r.employee_id for r in by_job] == [bob.id]

    def test_totals(self, session, march_attendance):
        alice, _ = march_attendance
        totals = _query(session, employee_id=alice.id).totals
        assert totals.total_days == 3
        assert totals.present_days == 1
        assert totals.half_days == 1
        assert totals.leave_days == 1
        assert totals.absent_days == 0
        assert totals.total_hours == Decimal("12.00")

    def test_empty_result(self, session, march_attendance):
        report = _query(session, date_from=date(2023, 1, 1), date_to=date(2023, 1, 31))
        assert report.records == ()
        assert report.totals.total_days == 0
        assert report.totals.total_hours == Decimal("0.00")

    def test_inverted_range(self, session, march_attendance):
        with pytest.raises(InvalidRangeError) as exc_info:
            _query(session, date_from=date(2024, 3, 31), date_to=date(2024, 3, 1))
        assert exc_info.value.field == "date_to"

    def test_get_single_day(self, session, march_attendance):
        alice, _ = march_attendance
        store = AttendanceStore(session)
        assert store.get(alice.id, date(2024, 3, 4)).job_link == JobLink("P-1", "J-1")
        assert store.get(alice.id, date(2024, 3, 7)) is None
