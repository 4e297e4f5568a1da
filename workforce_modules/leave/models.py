"""
Leave Domain Models (``workforce_modules.leave.models``).

Invariants enforced
-------------------
* ``from_date <= to_date`` (inclusive range), checked by ``LeaveWorkflow.apply``.
* ``day_count`` is the inclusive calendar-day span; weekends and holidays
  are not excluded.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from uuid import UUID


class LeaveType(str, Enum):
    SICK = "SICK"
    CASUAL = "CASUAL"
    EARNED = "EARNED"
    UNPAID = "UNPAID"


class LeaveStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class LeaveApplication:
    """What an employee submits."""
    employee_id: UUID
    from_date: date
    to_date: date
    leave_type: LeaveType
    reason: str | None = None


@dataclass(frozen=True)
class LeaveRequest:
    id: UUID
    employee_id: UUID
    from_date: date
    to_date: date
    leave_type: LeaveType
    status: LeaveStatus
    reason: str | None = None
    decided_by: UUID | None = None
    decided_at: datetime | None = None

    @property
    def day_count(self) -> int:
        return (self.to_date - self.from_date).days + 1

    def dates(self):
        """Every calendar date in the request, inclusive."""
        for offset in range(self.day_count):
            yield self.from_date + timedelta(days=offset)


@dataclass(frozen=True)
class LeaveQuery:
    """Filters for listing leave; date bounds match any overlap."""
    employee_id: UUID | None = None
    status: LeaveStatus | None = None
    leave_type: LeaveType | None = None
    date_from: date | None = None
    date_to: date | None = None
