"""
LeaveSelector -- read-only leave queries inside a caller-owned session.

Used by ``LeaveWorkflow`` for lookups and by ``AttendanceAggregator`` to
find APPROVED leave overlapping a pay period.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import select

from workforce_kernel.exceptions import InvalidRangeError
from workforce_kernel.services.base import BaseService
from workforce_modules.leave.models import LeaveQuery, LeaveRequest, LeaveStatus
from workforce_modules.leave.orm import LeaveRequestModel


class LeaveSelector(BaseService):

    def get(self, leave_id: UUID) -> LeaveRequest | None:
        model = self.session.get(LeaveRequestModel, leave_id)
        return model.to_dto() if model is not None else None

    def list(self, query: LeaveQuery) -> list[LeaveRequest]:
        if query.date_from and query.date_to and query.date_to < query.date_from:
            raise InvalidRangeError("date_to", query.date_from, query.date_to)

        stmt = select(LeaveRequestModel)
        if query.employee_id is not None:
            stmt = stmt.where(LeaveRequestModel.employee_id == query.employee_id)
        if query.status is not None:
            stmt = stmt.where(LeaveRequestModel.status == query.status.value)
        if query.leave_type is not None:
            stmt = stmt.where(LeaveRequestModel.leave_type == query.leave_type.value)
        if query.date_from is not None:
            stmt = stmt.where(LeaveRequestModel.to_date >= query.date_from)
        if query.date_to is not None:
            stmt = stmt.where(LeaveRequestModel.from_date <= query.date_to)
        stmt = stmt.order_by(LeaveRequestModel.from_date, LeaveRequestModel.created_at)
        return [m.to_dto() for m in self.session.execute(stmt).scalars()]

    def approved_overlapping(
        self, employee_id: UUID, period_start: date, period_end: date,
    ) -> list[LeaveRequest]:
        return self.list(
            LeaveQuery(
                employee_id=employee_id,
                status=LeaveStatus.APPROVED,
                date_from=period_start,
                date_to=period_end,
            )
        )
