"""
Payroll Helpers (``workforce_modules.payroll.helpers``).

Responsibility
--------------
Pure calculation functions for monthly pay: working days, hourly
equivalents, basic salary per salary type, overtime pay, gross and net.

Architecture position
---------------------
**Modules layer** -- pure helper functions.  No I/O, no session, no
clock, no database access.  Called by ``PayrollGenerator``,
``LabourCostAllocator`` and tests.

Invariants enforced
-------------------
* All numeric inputs and outputs use ``Decimal`` -- NEVER ``float``.
* Money is quantized to 0.01 with ROUND_HALF_UP; intermediate rates are
  not rounded.
* MONTHLY basic salary never exceeds the monthly rate: paid days are
  capped at the month's working days.

Failure modes
-------------
* Zero worked and paid-leave days -> basic salary ``Decimal("0.00")``.
* ``month`` outside 1..12 -> ``ValueError`` from ``calendar``.
"""

from __future__ import annotations

import calendar
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from workforce_modules.attendance.models import AttendanceSummary
from workforce_modules.employees.models import Employee, SalaryType
from workforce_modules.payroll.models import PayBreakdown

MONEY = Decimal("0.01")
DAYS = Decimal("0.1")
ZERO = Decimal("0")


def quantize_money(value: Decimal, quantum: Decimal = MONEY) -> Decimal:
    return value.quantize(quantum, rounding=ROUND_HALF_UP)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar date of the month."""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def working_days_in_month(
    year: int,
    month: int,
    weekend_days: tuple[int, ...] = (5, 6),
    override: int | None = None,
) -> int:
    """
    Working days in the month.

    ``override`` wins when given; otherwise every date whose weekday is not
    in ``weekend_days`` counts.  Public holidays are not modelled.
    """
    if override is not None:
        return override
    start, end = month_bounds(year, month)
    return sum(
        1
        for day in range(start.day, end.day + 1)
        if date(year, month, day).weekday() not in weekend_days
    )


def hourly_equivalent_rate(
    salary_type: SalaryType,
    rate: Decimal,
    working_days: int,
    standard_daily_hours: Decimal,
) -> Decimal:
    """
    Rate per hour used for overtime.

    MONTHLY: rate / (working_days x standard hours).
    DAILY:   rate / standard hours.
    HOURLY:  rate.
    """
    if salary_type == SalaryType.HOURLY:
        return rate
    if salary_type == SalaryType.DAILY:
        return rate / standard_daily_hours
    if working_days <= 0:
        return ZERO
    return rate / (Decimal(working_days) * standard_daily_hours)


def basic_salary(
    salary_type: SalaryType,
    rate: Decimal,
    days_present: Decimal,
    paid_leave_days: int,
    total_hours: Decimal,
    working_days: int,
    quantum: Decimal = MONEY,
) -> Decimal:
    """
    Basic pay for the month.

    MONTHLY: rate x min(days_present + paid leave, working_days) / working_days.
    DAILY:   rate x (days_present + paid leave).
    HOURLY:  rate x total_hours.
    """
    paid_days = days_present + paid_leave_days
    if salary_type == SalaryType.HOURLY:
        amount = rate * total_hours
    elif salary_type == SalaryType.DAILY:
        amount = rate * paid_days
    else:
        if working_days <= 0:
            return quantize_money(ZERO, quantum)
        capped = min(paid_days, Decimal(working_days))
        amount = rate * capped / Decimal(working_days)
    return quantize_money(amount, quantum)


def overtime_pay(
    overtime_hours: Decimal,
    hourly_rate: Decimal,
    multiplier: Decimal,
    quantum: Decimal = MONEY,
) -> Decimal:
    return quantize_money(overtime_hours * hourly_rate * multiplier, quantum)


def gross_pay(basic: Decimal, overtime: Decimal, allowances: Decimal) -> Decimal:
    return basic + overtime + allowances


def net_pay(gross: Decimal, deductions: Decimal) -> Decimal:
    return gross - deductions


def compute_pay(
    employee: Employee,
    summary: AttendanceSummary,
    working_days: int,
    overtime_multiplier: Decimal,
    standard_daily_hours: Decimal,
    money_quantum: Decimal = MONEY,
    days_quantum: Decimal = DAYS,
) -> PayBreakdown:
    """Full pay breakdown for one employee from a month's attendance summary."""
    hourly = hourly_equivalent_rate(
        employee.salary_type, employee.rate, working_days, standard_daily_hours,
    )
    basic = basic_salary(
        employee.salary_type,
        employee.rate,
        summary.days_present,
        summary.paid_leave_days,
        summary.total_hours,
        working_days,
        money_quantum,
    )
    overtime = overtime_pay(summary.overtime_hours, hourly, overtime_multiplier, money_quantum)
    allowances = quantize_money(employee.allowances, money_quantum)
    deductions = quantize_money(employee.deductions, money_quantum)
    gross = gross_pay(basic, overtime, allowances)
    return PayBreakdown(
        basic_salary=basic,
        overtime_hours=quantize_money(summary.overtime_hours, money_quantum),
        overtime_pay=overtime,
        allowances=allowances,
        deductions=deductions,
        gross_pay=gross,
        net_pay=net_pay(gross, deductions),
        days_present=summary.days_present.quantize(days_quantum, rounding=ROUND_HALF_UP),
        paid_leave_days=summary.paid_leave_days,
        working_days=working_days,
        hourly_rate=hourly,
    )
