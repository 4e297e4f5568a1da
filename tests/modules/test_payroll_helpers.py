"""
Pure payroll calculations: working days, rates, basic salary and the
gross/net identities.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from workforce_modules.attendance.models import AttendanceSummary
from workforce_modules.employees.models import Employee, SalaryType
from workforce_modules.payroll.helpers import (
    basic_salary,
    compute_pay,
    hourly_equivalent_rate,
    month_bounds,
    overtime_pay,
    quantize_money,
    working_days_in_month,
)

EIGHT = Decimal("8")


def _summary(days_present="0", paid_leave=0, hours="0", overtime="0"):
    return AttendanceSummary(
        employee_id=uuid4(),
        period_start=date(2024, 3, 1),
        period_end=date(2024, 3, 31),
        days_present=Decimal(days_present),
        days_absent=0,
        days_on_leave=paid_leave,
        paid_leave_days=paid_leave,
        unpaid_leave_days=0,
        total_hours=Decimal(hours),
        overtime_hours=Decimal(overtime),
    )


def _employee(salary_type, rate, allowances="0", deductions="0"):
    return Employee(
        id=uuid4(), code="E1", name="Test", salary_type=salary_type, rate=Decimal(rate),
        allowances=Decimal(allowances), deductions=Decimal(deductions),
    )


class TestCalendar:

    def test_month_bounds(self):
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
        assert month_bounds(2023, 2) == (date(2023, 2, 1), date(2023, 2, 28))

    @pytest.mark.parametrize(
        "year, month, expected",
        [(2024, 3, 21), (2024, 2, 21), (2024, 6, 20), (2024, 9, 21)],
    )
    def test_weekdays_counted(self, year, month, expected):
        assert working_days_in_month(year, month) == expected

    def test_custom_weekend(self):
        # Friday/Saturday weekend; March 2024 has 5 Fridays and 5 Saturdays
        assert working_days_in_month(2024, 3, weekend_days=(4, 5)) == 21

    def test_override_wins(self):
        assert working_days_in_month(2024, 3, override=26) == 26

    def test_bad_month(self):
        with pytest.raises(ValueError):
            working_days_in_month(2024, 13)


class TestRates:

    def test_hourly_equivalents(self):
        assert hourly_equivalent_rate(SalaryType.HOURLY, Decimal("100"), 21, EIGHT) == Decimal("100")
        assert hourly_equivalent_rate(SalaryType.DAILY, Decimal("1000"), 21, EIGHT) == Decimal("125")
        assert hourly_equivalent_rate(SalaryType.MONTHLY, Decimal("33600"), 21, EIGHT) == Decimal("200")

    def test_monthly_with_no_working_days(self):
        assert hourly_equivalent_rate(SalaryType.MONTHLY, Decimal("30000"), 0, EIGHT) == 0

    def test_overtime_pay(self):
        assert overtime_pay(Decimal("2"), Decimal("125"), Decimal("1.5")) == Decimal("375.00")

    def test_half_up_rounding(self):
        assert quantize_money(Decimal("10.005")) == Decimal("10.01")
        assert quantize_money(Decimal("10.004")) == Decimal("10.00")


class TestBasicSalary:

    def test_monthly_prorated(self):
        assert basic_salary(
            SalaryType.MONTHLY, Decimal("30000"), Decimal("20"), 0, Decimal("0"), 21,
        ) == Decimal("28571.43")

    def test_monthly_full_month_with_leave(self):
        assert basic_salary(
            SalaryType.MONTHLY, Decimal("30000"), Decimal("19"), 2, Decimal("0"), 21,
        ) == Decimal("30000.00")

    def test_monthly_capped_at_working_days(self):
        assert basic_salary(
            SalaryType.MONTHLY, Decimal("30000"), Decimal("25"), 3, Decimal("0"), 21,
        ) == Decimal("30000.00")

    def test_daily_counts_half_days_and_paid_leave(self):
        assert basic_salary(
            SalaryType.DAILY, Decimal("1000"), Decimal("10.5"), 2, Decimal("0"), 21,
        ) == Decimal("12500.00")

    def test_hourly_uses_hours(self):
        assert basic_salary(
            SalaryType.HOURLY, Decimal("100"), Decimal("0"), 5, Decimal("37.25"), 21,
        ) == Decimal("3725.00")

    def test_nothing_worked(self):
        for salary_type in SalaryType:
            assert basic_salary(salary_type, Decimal("30000"), Decimal("0"), 0, Decimal("0"), 21) == 0


class TestComputePay:

    def test_monthly_breakdown(self):
        pay = compute_pay(
            _employee(SalaryType.MONTHLY, "33600", allowances="2000", deductions="500"),
            _summary(days_present="21", hours="170", overtime="2"),
            21, Decimal("1.5"), EIGHT,
        )
        assert pay.basic_salary == Decimal("33600.00")
        assert pay.hourly_rate == Decimal("200")
        assert pay.overtime_pay == Decimal("600.00")
        assert pay.gross_pay == Decimal("36200.00")
        assert pay.net_pay == Decimal("35700.00")
        assert pay.days_present == Decimal("21.0")
        assert pay.working_days == 21

    def test_net_may_go_negative(self):
        pay = compute_pay(
            _employee(SalaryType.DAILY, "1000", deductions="1500"),
            _summary(days_present="1"),
            21, Decimal("1.5"), EIGHT,
        )
        assert pay.net_pay == Decimal("-500.00")

    @settings(max_examples=200, deadline=None)
    @given(
        salary_type=st.sampled_from(list(SalaryType)),
        rate=st.decimals(min_value=0, max_value=100000, places=2),
        allowances=st.decimals(min_value=0, max_value=10000, places=2),
        deductions=st.decimals(min_value=0, max_value=10000, places=2),
        half_days=st.integers(min_value=0, max_value=62),
        paid_leave=st.integers(min_value=0, max_value=31),
        hours=st.decimals(min_value=0, max_value=400, places=2),
        overtime=st.decimals(min_value=0, max_value=100, places=2),
        working_days=st.integers(min_value=1, max_value=31),
    )
    def test_identities_hold(
        self, salary_type, rate, allowances, deductions, half_days, paid_leave,
        hours, overtime, working_days,
    ):
        days_present = Decimal(half_days) / 2
        employee = _employee(salary_type, str(rate), str(allowances), str(deductions))
        pay = compute_pay(
            employee,
            _summary(str(days_present), paid_leave, str(hours), str(overtime)),
            working_days, Decimal("1.5"), EIGHT,
        )

        assert pay.gross_pay == pay.basic_salary + pay.overtime_pay + pay.allowances
        assert pay.net_pay == pay.gross_pay - pay.deductions
        assert pay.basic_salary >= 0
        assert pay.overtime_pay >= 0
        for amount in (pay.basic_salary, pay.overtime_pay, pay.gross_pay, pay.net_pay):
            assert amount == amount.quantize(Decimal("0.01"))
        if salary_type == SalaryType.MONTHLY:
            assert pay.basic_salary <= quantize_money(employee.rate)
