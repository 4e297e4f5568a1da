"""
Attendance ORM Persistence Model (``workforce_modules.attendance.orm``).

Responsibility:
    Persists ``AttendanceRecord``.  The job link is kept both as the
    original JSON object and as denormalized ``project_ref`` / ``job_ref``
    columns so project and job filters are plain indexed equality checks.

Invariants enforced:
    - One row per (employee_id, date) -- uq_attendance_employee_date.  This
      constraint is what makes concurrent and repeated writes idempotent.
    - ``hours`` is Decimal and never negative.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Date, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from workforce_kernel.db.base import TrackedBase


class AttendanceRecordModel(TrackedBase):
    """ORM model for ``AttendanceRecord``."""

    __tablename__ = "attendance_records"

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("employees.id"), nullable=False)
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    check_in: Mapped[datetime | None] = mapped_column(nullable=True)
    check_out: Mapped[datetime | None] = mapped_column(nullable=True)
    hours: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    job_link: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    project_ref: Mapped[str | None] = mapped_column(String(100), nullable=True)
    job_ref: Mapped[str | None] = mapped_column(String(100), nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("employee_id", "work_date", name="uq_attendance_employee_date"),
        Index("idx_attendance_work_date", "work_date"),
        Index("idx_attendance_project", "project_ref"),
        Index("idx_attendance_job", "job_ref"),
    )

    def to_dto(self):
        from workforce_modules.attendance.models import (
            AttendanceRecord,
            AttendanceStatus,
            JobLink,
        )
        link = None
        if self.project_ref is not None or self.job_ref is not None:
            link = JobLink(project_id=self.project_ref, job_id=self.job_ref)
        return AttendanceRecord(
            id=self.id,
            employee_id=self.employee_id,
            date=self.work_date,
            status=AttendanceStatus(self.status),
            hours=self.hours.quantize(Decimal("0.01")),
            check_in=self.check_in,
            check_out=self.check_out,
            job_link=link,
            remarks=self.remarks,
        )

    def __repr__(self) -> str:
        return f"<AttendanceRecordModel {self.employee_id} {self.work_date} {self.status}>"
