"""
Employee ORM Persistence Model (``workforce_modules.employees.orm``).

Responsibility:
    The ``employees`` table mirrors the external employee master.  The
    engine reads it through ``SqlEmployeeDirectory`` and never writes it
    during attendance or payroll processing.

Invariants enforced:
    - ``code`` is unique (uq_employee_code).
    - ``email`` is unique when present (uq_employee_email).
    - Monetary fields use Decimal (Numeric(38,9)).
"""

from decimal import Decimal

from sqlalchemy import Boolean, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from workforce_kernel.db.base import TrackedBase


class EmployeeModel(TrackedBase):
    """ORM model for ``Employee``."""

    __tablename__ = "employees"

    code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(254), nullable=True)
    salary_type: Mapped[str] = mapped_column(String(20), nullable=False)
    rate: Mapped[Decimal] = mapped_column(nullable=False)
    allowances: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    deductions: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("code", name="uq_employee_code"),
        UniqueConstraint("email", name="uq_employee_email"),
        Index("idx_employee_active", "is_active"),
    )

    def to_dto(self):
        from workforce_modules.employees.models import Employee, SalaryType
        return Employee(
            id=self.id,
            code=self.code,
            name=self.name,
            email=self.email,
            salary_type=SalaryType(self.salary_type),
            rate=self.rate,
            allowances=self.allowances,
            deductions=self.deductions,
            is_active=self.is_active,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id) -> "EmployeeModel":
        return cls(
            id=dto.id,
            code=dto.code,
            name=dto.name,
            email=dto.email,
            salary_type=dto.salary_type.value,
            rate=dto.rate,
            allowances=dto.allowances,
            deductions=dto.deductions,
            is_active=dto.is_active,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<EmployeeModel {self.code} ({self.salary_type})>"
