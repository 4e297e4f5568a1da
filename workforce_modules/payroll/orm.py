"""
Payroll ORM Persistence Model (``workforce_modules.payroll.orm``).

Invariants enforced:
    - (employee_id, month, year) is unique (uq_payroll_employee_period).
    - ``paid`` only moves false -> true, through ``PayrollLedger.mark_paid``.
    - Once ``paid`` is true, monetary fields and ``days_present`` are frozen
      (ORM listener in ``workforce_kernel.db.immutability``).
    - ``revision`` starts at 1 and increases by one on every draft
      replacement.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from workforce_kernel.db.base import TrackedBase


class PayrollRecordModel(TrackedBase):
    """ORM model for ``PayrollRecord``."""

    __tablename__ = "payroll_records"

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("employees.id"), nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    basic_salary: Mapped[Decimal] = mapped_column(nullable=False)
    overtime_hours: Mapped[Decimal] = mapped_column(nullable=False)
    overtime_pay: Mapped[Decimal] = mapped_column(nullable=False)
    allowances: Mapped[Decimal] = mapped_column(nullable=False)
    deductions: Mapped[Decimal] = mapped_column(nullable=False)
    gross_pay: Mapped[Decimal] = mapped_column(nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(nullable=False)
    days_present: Mapped[Decimal] = mapped_column(nullable=False)
    generated_at: Mapped[datetime] = mapped_column(nullable=False)
    paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    paid_at: Mapped[datetime | None] = mapped_column(nullable=True)
    payment_ref: Mapped[str | None] = mapped_column(String(100), nullable=True)
    revision: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        UniqueConstraint("employee_id", "month", "year", name="uq_payroll_employee_period"),
        Index("idx_payroll_period", "year", "month"),
        Index("idx_payroll_paid", "paid"),
    )

    # Columns frozen once the record is paid.
    FROZEN_WHEN_PAID = (
        "employee_id", "month", "year",
        "basic_salary", "overtime_hours", "overtime_pay",
        "allowances", "deductions", "gross_pay", "net_pay",
        "days_present", "generated_at", "revision",
        "paid", "paid_at", "payment_ref",
    )

    def to_dto(self):
        from workforce_modules.payroll.models import PayrollRecord
        return PayrollRecord(
            id=self.id,
            employee_id=self.employee_id,
            month=self.month,
            year=self.year,
            basic_salary=_money(self.basic_salary),
            overtime_hours=_money(self.overtime_hours),
            overtime_pay=_money(self.overtime_pay),
            allowances=_money(self.allowances),
            deductions=_money(self.deductions),
            gross_pay=_money(self.gross_pay),
            net_pay=_money(self.net_pay),
            days_present=Decimal(self.days_present).quantize(Decimal("0.1")),
            generated_at=self.generated_at,
            paid=self.paid,
            paid_at=self.paid_at,
            payment_ref=self.payment_ref,
            revision=self.revision,
        )

    def __repr__(self) -> str:
        state = "paid" if self.paid else "unpaid"
        return f"<PayrollRecordModel {self.employee_id} {self.year}-{self.month:02d} {state}>"


def _money(value) -> Decimal:
    return Decimal(value).quantize(Decimal("0.01"))
