"""
Leave ORM Persistence Model (``workforce_modules.leave.orm``).

Invariants enforced:
    - ``status`` stores the LeaveStatus value string.
    - Once ``status`` is APPROVED or REJECTED the row is frozen
      (ORM listener in ``workforce_kernel.db.immutability``).
"""

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from workforce_kernel.db.base import TrackedBase


class LeaveRequestModel(TrackedBase):
    """ORM model for ``LeaveRequest``."""

    __tablename__ = "leave_requests"

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("employees.id"), nullable=False)
    from_date: Mapped[date] = mapped_column(Date, nullable=False)
    to_date: Mapped[date] = mapped_column(Date, nullable=False)
    leave_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    decided_by_id: Mapped[UUID | None] = mapped_column(nullable=True)
    decided_at: Mapped[datetime | None] = mapped_column(nullable=True)

    __table_args__ = (
        Index("idx_leave_employee_range", "employee_id", "from_date", "to_date"),
        Index("idx_leave_status", "status"),
    )

    def to_dto(self):
        from workforce_modules.leave.models import LeaveRequest, LeaveStatus, LeaveType
        return LeaveRequest(
            id=self.id,
            employee_id=self.employee_id,
            from_date=self.from_date,
            to_date=self.to_date,
            leave_type=LeaveType(self.leave_type),
            status=LeaveStatus(self.status),
            reason=self.reason,
            decided_by=self.decided_by_id,
            decided_at=self.decided_at,
        )

    def __repr__(self) -> str:
        return (
            f"<LeaveRequestModel {self.employee_id} {self.from_date}..{self.to_date} "
            f"{self.leave_type} {self.status}>"
        )
