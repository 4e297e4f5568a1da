"""
PayrollLedger -- payment state of payroll records.

Responsibility
--------------
The only writer of ``paid``, ``paid_at`` and ``payment_ref``.  Also serves
payroll reads (get by id, filtered list).

Architecture position
---------------------
**Modules layer** -- orchestrator.  Each ``mark_paid`` is one
``run_transaction`` unit; legality comes from ``PAYROLL_PAYMENT_WORKFLOW``.

Invariants enforced
-------------------
* UNPAID -> PAID happens at most once.  The write is a compare-and-set
  ``UPDATE ... WHERE paid = false``; of two concurrent callers exactly one
  succeeds and the other gets ``AlreadyPaidError``.
* The first ``paid_at`` and ``payment_ref`` are never overwritten.

Failure modes
-------------
* ``PayrollRecordNotFoundError`` -- unknown id.
* ``AlreadyPaidError`` -- record already paid.

Audit relevance
---------------
PAYROLL_PAID in the same transaction as the update.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session, sessionmaker

from workforce_kernel.db.engine import run_transaction, session_scope
from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.exceptions import AlreadyPaidError, PayrollRecordNotFoundError
from workforce_kernel.logging_config import LogContext, get_logger
from workforce_kernel.models.audit_event import AuditAction
from workforce_kernel.services.auditor_service import AuditorService
from workforce_modules.payroll.models import PaymentStatus, PayrollQuery, PayrollRecord
from workforce_modules.payroll.orm import PayrollRecordModel
from workforce_modules.payroll.workflows import PAYROLL_PAYMENT_WORKFLOW

logger = get_logger("modules.payroll.ledger")


class PayrollLedger:

    def __init__(self, session_factory: sessionmaker[Session], clock: Clock | None = None):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()

    def mark_paid(
        self,
        payroll_id: UUID,
        actor_id: UUID,
        paid_at: datetime | None = None,
        payment_ref: str | None = None,
    ) -> PayrollRecord:
        """Record payment of an unpaid record; ``paid_at`` defaults to now."""
        transition = PAYROLL_PAYMENT_WORKFLOW.find_transition(PaymentStatus.UNPAID.value, "pay")
        paid_at = paid_at or self._clock.now_utc()

        def work(session: Session) -> PayrollRecord:
            result = session.execute(
                update(PayrollRecordModel)
                .where(
                    PayrollRecordModel.id == payroll_id,
                    PayrollRecordModel.paid.is_(False),
                )
                .values(
                    paid=True,
                    paid_at=paid_at,
                    payment_ref=payment_ref,
                    updated_by_id=actor_id,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                employee_id = session.execute(
                    select(PayrollRecordModel.employee_id).where(PayrollRecordModel.id == payroll_id)
                ).scalar_one_or_none()
                if employee_id is None:
                    raise PayrollRecordNotFoundError(str(payroll_id))
                raise AlreadyPaidError(str(payroll_id), str(employee_id))

            record = session.get(PayrollRecordModel, payroll_id, populate_existing=True).to_dto()
            AuditorService(session, self._clock).record(
                "PayrollRecord", record.id, AuditAction.PAYROLL_PAID, actor_id,
                {
                    "employee_id": record.employee_id,
                    "month": record.month,
                    "year": record.year,
                    "from_state": transition.from_state,
                    "to_state": transition.to_state,
                    "paid_at": record.paid_at,
                    "payment_ref": record.payment_ref,
                    "net_pay": record.net_pay,
                },
            )
            return record

        with LogContext.bind(actor_id=str(actor_id), operation="mark_paid"):
            try:
                record = run_transaction(self._session_factory, work, operation="mark_paid")
            except AlreadyPaidError:
                logger.warning(
                    "payroll_double_payment_blocked",
                    extra={"payroll_id": str(payroll_id)},
                )
                raise
            logger.info(
                "payroll_marked_paid",
                extra={
                    "payroll_id": str(record.id),
                    "employee_id": str(record.employee_id),
                    "payment_ref": record.payment_ref,
                    "net_pay": str(record.net_pay),
                },
            )
        return record

    def get(self, payroll_id: UUID) -> PayrollRecord:
        with session_scope(self._session_factory, operation="payroll_get") as session:
            model = session.get(PayrollRecordModel, payroll_id)
            record = model.to_dto() if model is not None else None
        if record is None:
            raise PayrollRecordNotFoundError(str(payroll_id))
        return record

    def list(self, query: PayrollQuery | None = None) -> list[PayrollRecord]:
        query = query or PayrollQuery()
        stmt = select(PayrollRecordModel)
        if query.employee_id is not None:
            stmt = stmt.where(PayrollRecordModel.employee_id == query.employee_id)
        if query.month is not None:
            stmt = stmt.where(PayrollRecordModel.month == query.month)
        if query.year is not None:
            stmt = stmt.where(PayrollRecordModel.year == query.year)
        if query.paid is not None:
            stmt = stmt.where(PayrollRecordModel.paid.is_(query.paid))
        stmt = stmt.order_by(
            PayrollRecordModel.year, PayrollRecordModel.month, PayrollRecordModel.created_at,
        )
        with session_scope(self._session_factory, operation="payroll_list") as session:
            return [m.to_dto() for m in session.execute(stmt).scalars()]
