"""
LeaveWorkflow -- leave request lifecycle (``workforce_modules.leave.service``).

Responsibility
--------------
Creates leave requests and records exactly one decision per request.
The workforce engine consumes leave status; it does not own the
submission UI.

Architecture position
---------------------
**Modules layer** -- orchestrator.  Owns its transactions through
``run_transaction``; reads through ``LeaveSelector``; legality of each
decision comes from ``LEAVE_REQUEST_WORKFLOW``.

Invariants enforced
-------------------
* Requests are created PENDING with ``from_date <= to_date``.
* PENDING -> APPROVED | REJECTED happens at most once.  The decision is a
  compare-and-set ``UPDATE ... WHERE status = 'PENDING'``, so two
  concurrent deciders cannot both succeed.
* ``decided_by`` and ``decided_at`` are recorded with the decision.

Failure modes
-------------
* ``InvalidRangeError`` -- to_date before from_date.
* ``UnknownEmployeeError`` / ``InactiveEmployeeError`` on apply.
* ``LeaveRequestNotFoundError`` -- unknown id.
* ``InvalidTransitionError`` -- request already decided.

Audit relevance
---------------
LEAVE_APPLIED, LEAVE_APPROVED and LEAVE_REJECTED audit events are written
in the same transaction as the change.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session, sessionmaker

from workforce_kernel.db.engine import run_transaction, session_scope
from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.exceptions import (
    InactiveEmployeeError,
    InvalidRangeError,
    InvalidTransitionError,
    LeaveRequestNotFoundError,
    UnknownEmployeeError,
    ValidationError,
)
from workforce_kernel.logging_config import LogContext, get_logger
from workforce_kernel.models.audit_event import AuditAction
from workforce_kernel.services.auditor_service import AuditorService
from workforce_modules.employees.directory import EmployeeDirectory
from workforce_modules.leave.models import (
    LeaveApplication,
    LeaveQuery,
    LeaveRequest,
    LeaveStatus,
    LeaveType,
)
from workforce_modules.leave.orm import LeaveRequestModel
from workforce_modules.leave.selector import LeaveSelector
from workforce_modules.leave.workflows import LEAVE_REQUEST_WORKFLOW

logger = get_logger("modules.leave.service")

_DECISION_AUDIT = {
    LeaveStatus.APPROVED.value: AuditAction.LEAVE_APPROVED,
    LeaveStatus.REJECTED.value: AuditAction.LEAVE_REJECTED,
}


class LeaveWorkflow:
    """Apply for, decide and query leave requests."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        directory: EmployeeDirectory,
        clock: Clock | None = None,
    ):
        self._session_factory = session_factory
        self._directory = directory
        self._clock = clock or SystemClock()

    def apply(self, application: LeaveApplication, actor_id: UUID) -> LeaveRequest:
        try:
            leave_type = LeaveType(application.leave_type)
        except ValueError:
            raise ValidationError(
                "leave_type", f"{application.leave_type!r} is not a leave type",
            ) from None
        if application.to_date < application.from_date:
            raise InvalidRangeError("to_date", application.from_date, application.to_date)

        employee = self._directory.get(application.employee_id)
        if employee is None:
            raise UnknownEmployeeError(str(application.employee_id))
        if not employee.is_active:
            raise InactiveEmployeeError(str(employee.id))

        def work(session: Session) -> LeaveRequest:
            model = LeaveRequestModel(
                employee_id=application.employee_id,
                from_date=application.from_date,
                to_date=application.to_date,
                leave_type=leave_type.value,
                status=LEAVE_REQUEST_WORKFLOW.initial_state,
                reason=application.reason,
                created_by_id=actor_id,
            )
            session.add(model)
            session.flush()
            dto = model.to_dto()
            AuditorService(session, self._clock).record(
                "LeaveRequest", dto.id, AuditAction.LEAVE_APPLIED, actor_id,
                {
                    "employee_id": dto.employee_id,
                    "from_date": dto.from_date,
                    "to_date": dto.to_date,
                    "leave_type": dto.leave_type,
                    "days": dto.day_count,
                },
            )
            return dto

        with LogContext.bind(actor_id=str(actor_id), operation="leave_apply"):
            request = run_transaction(self._session_factory, work, operation="leave_apply")
            logger.info(
                "leave_applied",
                extra={
                    "leave_id": str(request.id),
                    "employee_id": str(request.employee_id),
                    "leave_type": request.leave_type.value,
                    "days": request.day_count,
                },
            )
        return request

    def approve(self, leave_id: UUID, actor_id: UUID) -> LeaveRequest:
        return self._decide(leave_id, "approve", actor_id)

    def reject(self, leave_id: UUID, actor_id: UUID) -> LeaveRequest:
        return self._decide(leave_id, "reject", actor_id)

    def _decide(self, leave_id: UUID, action: str, actor_id: UUID) -> LeaveRequest:
        def work(session: Session) -> LeaveRequest:
            current = session.execute(
                select(LeaveRequestModel.status)
                .where(LeaveRequestModel.id == leave_id)
                .with_for_update()
            ).scalar_one_or_none()
            if current is None:
                raise LeaveRequestNotFoundError(str(leave_id))

            transition = LEAVE_REQUEST_WORKFLOW.find_transition(current, action)
            if transition is None:
                raise InvalidTransitionError("LeaveRequest", str(leave_id), current, action)

            now = self._clock.now_utc()
            result = session.execute(
                update(LeaveRequestModel)
                .where(
                    LeaveRequestModel.id == leave_id,
                    LeaveRequestModel.status == transition.from_state,
                )
                .values(
                    status=transition.to_state,
                    decided_by_id=actor_id,
                    decided_at=now,
                    updated_by_id=actor_id,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                # Another decider won between our read and our write.
                latest = session.execute(
                    select(LeaveRequestModel.status).where(LeaveRequestModel.id == leave_id)
                ).scalar_one()
                raise InvalidTransitionError("LeaveRequest", str(leave_id), latest, action)

            model = session.get(LeaveRequestModel, leave_id, populate_existing=True)
            dto = model.to_dto()
            AuditorService(session, self._clock).record(
                "LeaveRequest", dto.id, _DECISION_AUDIT[transition.to_state], actor_id,
                {
                    "employee_id": dto.employee_id,
                    "from_state": transition.from_state,
                    "to_state": transition.to_state,
                },
            )
            return dto

        with LogContext.bind(actor_id=str(actor_id), operation=f"leave_{action}"):
            try:
                request = run_transaction(
                    self._session_factory, work, operation=f"leave_{action}",
                )
            except InvalidTransitionError as exc:
                logger.warning(
                    "leave_transition_rejected",
                    extra={
                        "leave_id": str(leave_id),
                        "action": action,
                        "current_state": exc.current_state,
                    },
                )
                raise
            logger.info(
                "leave_decided",
                extra={
                    "leave_id": str(leave_id),
                    "status": request.status.value,
                    "decided_by": str(actor_id),
                },
            )
        return request

    def get(self, leave_id: UUID) -> LeaveRequest:
        with session_scope(self._session_factory, operation="leave_get") as session:
            request = LeaveSelector(session).get(leave_id)
        if request is None:
            raise LeaveRequestNotFoundError(str(leave_id))
        return request

    def list(self, query: LeaveQuery | None = None) -> list[LeaveRequest]:
        with session_scope(self._session_factory, operation="leave_list") as session:
            return LeaveSelector(session).list(query or LeaveQuery())
