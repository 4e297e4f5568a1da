"""
LabourCostAllocator -- labour cost per project and job for a month.

Read-only.  Hours on attendance rows that carry a job link are priced at
the employee's hourly-equivalent rate and grouped by (project, job).
Projects and jobs live in an external system, so nothing is written back.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session, sessionmaker

from workforce_kernel.db.engine import session_scope
from workforce_kernel.exceptions import ValidationError
from workforce_kernel.logging_config import get_logger
from workforce_modules.attendance.models import AttendanceQuery
from workforce_modules.attendance.store import AttendanceStore
from workforce_modules.employees.directory import EmployeeDirectory
from workforce_modules.employees.models import Employee
from workforce_modules.payroll.config import PayrollConfig
from workforce_modules.payroll.helpers import (
    hourly_equivalent_rate,
    month_bounds,
    quantize_money,
    working_days_in_month,
)
from workforce_modules.payroll.models import LabourCostLine, LabourCostReport

logger = get_logger("modules.payroll.labour_costs")


class LabourCostAllocator:

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        directory: EmployeeDirectory,
        config: PayrollConfig | None = None,
    ):
        self._session_factory = session_factory
        self._directory = directory
        self._config = config or PayrollConfig()

    def allocate(self, month: int, year: int) -> LabourCostReport:
        if not 1 <= month <= 12:
            raise ValidationError("month", f"month must be 1-12, got {month}")

        period_start, period_end = month_bounds(year, month)
        working_days = working_days_in_month(
            year, month, self._config.weekend_days, self._config.working_days_per_month,
        )
        with session_scope(self._session_factory, operation="labour_cost_allocation") as session:
            records = AttendanceStore(session).query(
                AttendanceQuery(date_from=period_start, date_to=period_end)
            ).records

        hours: dict[tuple[str | None, str | None], Decimal] = defaultdict(Decimal)
        cost: dict[tuple[str | None, str | None], Decimal] = defaultdict(Decimal)
        people: dict[tuple[str | None, str | None], set[UUID]] = defaultdict(set)
        rates: dict[UUID, Decimal] = {}

        for record in records:
            if record.job_link is None or not record.status.is_worked or record.hours <= 0:
                continue
            if record.employee_id not in rates:
                employee = self._directory.get(record.employee_id)
                rates[record.employee_id] = self._rate(employee, working_days)
            key = (record.job_link.project_id, record.job_link.job_id)
            hours[key] += record.hours
            cost[key] += record.hours * rates[record.employee_id]
            people[key].add(record.employee_id)

        lines = tuple(
            LabourCostLine(
                project_id=key[0],
                job_id=key[1],
                hours=hours[key].quantize(Decimal("0.01")),
                cost=quantize_money(cost[key], self._config.money_quantum),
                employee_count=len(people[key]),
            )
            for key in sorted(hours, key=lambda k: (k[0] or "", k[1] or ""))
        )
        report = LabourCostReport(
            month=month,
            year=year,
            lines=lines,
            total_hours=sum((line.hours for line in lines), Decimal("0.00")),
            total_cost=sum((line.cost for line in lines), Decimal("0.00")),
        )
        logger.info(
            "labour_costs_allocated",
            extra={
                "month": month,
                "year": year,
                "lines": len(lines),
                "total_cost": str(report.total_cost),
            },
        )
        return report

    def _rate(self, employee: Employee | None, working_days: int) -> Decimal:
        if employee is None:
            return Decimal("0")
        return hourly_equivalent_rate(
            employee.salary_type, employee.rate, working_days, self._config.standard_daily_hours,
        )
