"""
Payroll Domain Models (``workforce_modules.payroll.models``).

Responsibility
--------------
Frozen value objects for monthly payroll: the stored record, the
computed pay breakdown, per-employee generation failures, the result of
a generation run, and query filters.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* Monetary amounts are ``Decimal`` -- NEVER ``float``.
* ``gross_pay == basic_salary + overtime_pay + allowances`` and
  ``net_pay == gross_pay - deductions``.
* At most one ``PayrollRecord`` per (employee_id, month, year); enforced by
  ``uq_payroll_employee_period`` in ``orm.py``.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from workforce_batch.domain.types import BatchJobStatus


class PaymentStatus(str, Enum):
    UNPAID = "UNPAID"
    PAID = "PAID"


@dataclass(frozen=True)
class PayBreakdown:
    """The figures ``compute_pay`` derives for one employee and month."""
    basic_salary: Decimal
    overtime_hours: Decimal
    overtime_pay: Decimal
    allowances: Decimal
    deductions: Decimal
    gross_pay: Decimal
    net_pay: Decimal
    days_present: Decimal
    paid_leave_days: int
    working_days: int
    hourly_rate: Decimal


@dataclass(frozen=True)
class PayrollRecord:
    id: UUID
    employee_id: UUID
    month: int
    year: int
    basic_salary: Decimal
    overtime_hours: Decimal
    overtime_pay: Decimal
    allowances: Decimal
    deductions: Decimal
    gross_pay: Decimal
    net_pay: Decimal
    days_present: Decimal
    generated_at: datetime
    paid: bool = False
    paid_at: datetime | None = None
    payment_ref: str | None = None
    revision: int = 1

    @property
    def payment_status(self) -> PaymentStatus:
        return PaymentStatus.PAID if self.paid else PaymentStatus.UNPAID


@dataclass(frozen=True)
class EmployeePayrollError:
    """Why payroll was not generated for one employee."""
    employee_id: UUID
    code: str
    message: str
    employee_name: str | None = None


@dataclass(frozen=True)
class PayrollGenerationResult:
    run_id: UUID
    month: int
    year: int
    status: BatchJobStatus
    generated: tuple[PayrollRecord, ...]
    errors: tuple[EmployeePayrollError, ...] = ()
    skipped: tuple[UUID, ...] = ()
    total_net_pay: Decimal = Decimal("0")

    @property
    def generated_count(self) -> int:
        return len(self.generated)


@dataclass(frozen=True)
class PayrollQuery:
    """Filters for ``PayrollLedger.list``; all optional."""
    employee_id: UUID | None = None
    month: int | None = None
    year: int | None = None
    paid: bool | None = None


@dataclass(frozen=True)
class LabourCostLine:
    """Labour cost booked to one project/job for a month."""
    project_id: str | None
    job_id: str | None
    hours: Decimal
    cost: Decimal
    employee_count: int


@dataclass(frozen=True)
class LabourCostReport:
    month: int
    year: int
    lines: tuple[LabourCostLine, ...]
    total_hours: Decimal
    total_cost: Decimal
