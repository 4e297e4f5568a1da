"""
PayrollGenerator -- monthly payroll records from attendance and leave.

Responsibility
--------------
The only writer that creates or replaces payroll records.  For each
employee it aggregates the calendar month, computes pay and stores an
unpaid record, replacing an earlier unpaid draft.

Architecture position
---------------------
**Modules layer** -- orchestrator.  Employees fan out through
``FanOutExecutor``; each employee is one ``run_transaction`` unit, so one
failure never affects another employee's record.

Invariants enforced
-------------------
* At most one record per (employee_id, month, year): unique constraint
  plus a locked read.  A concurrent insert that loses the unique race is
  re-run and takes the replace path.
* A paid record is never replaced.  The replace is a compare-and-set
  ``UPDATE ... WHERE paid = false``; zero rows means the record was paid
  concurrently and the employee fails with ``AlreadyPaidError``.
* Every replacement increments ``revision``.

Failure modes
-------------
* ``ValidationError`` -- month outside 1..12 (whole call).
* Per employee: ``ALREADY_PAID``, ``UNKNOWN_EMPLOYEE``,
  ``INACTIVE_EMPLOYEE``, ``TIMEOUT``.

Audit relevance
---------------
PAYROLL_GENERATED or PAYROLL_REGENERATED per record, in the record's
transaction; PAYROLL_RUN_COMPLETED once per call with the totals.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session, sessionmaker

from workforce_batch.domain.types import BatchItemInput, BatchItemStatus, BatchJobStatus
from workforce_batch.services.executor import FanOutExecutor
from workforce_batch.tasks.base import CancellationToken
from workforce_kernel.db.engine import run_transaction
from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.exceptions import (
    AlreadyPaidError,
    InactiveEmployeeError,
    UnknownEmployeeError,
    ValidationError,
)
from workforce_kernel.logging_config import LogContext, get_logger
from workforce_kernel.models.audit_event import AuditAction
from workforce_kernel.services.auditor_service import AuditorService
from workforce_modules.attendance.aggregator import AttendanceAggregator
from workforce_modules.attendance.config import AttendanceConfig
from workforce_modules.employees.directory import EmployeeDirectory
from workforce_modules.employees.models import Employee
from workforce_modules.payroll.config import PayrollConfig
from workforce_modules.payroll.helpers import compute_pay, month_bounds, working_days_in_month
from workforce_modules.payroll.models import (
    EmployeePayrollError,
    PayrollGenerationResult,
    PayrollRecord,
)
from workforce_modules.payroll.orm import PayrollRecordModel

logger = get_logger("modules.payroll.generator")


class PayrollGenerator:
    """Generates (or regenerates) unpaid payroll records for a month."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        directory: EmployeeDirectory,
        clock: Clock | None = None,
        config: PayrollConfig | None = None,
        attendance_config: AttendanceConfig | None = None,
        executor: FanOutExecutor | None = None,
    ):
        self._session_factory = session_factory
        self._directory = directory
        self._clock = clock or SystemClock()
        self._config = config or PayrollConfig()
        # Overtime threshold follows the payroll standard day.
        self._attendance_config = replace(
            attendance_config or AttendanceConfig(),
            standard_daily_hours=self._config.standard_daily_hours,
        )
        self._executor = executor or FanOutExecutor(clock=self._clock)

    def generate(
        self,
        month: int,
        year: int,
        actor_id: UUID,
        employee_ids: Sequence[UUID] | None = None,
        cancel_token: CancellationToken | None = None,
        deadline_seconds: float | None = None,
    ) -> PayrollGenerationResult:
        if not 1 <= month <= 12:
            raise ValidationError("month", f"month must be 1-12, got {month}")
        if not 1 <= year <= 9999:
            raise ValidationError("year", f"year out of range: {year}")

        with LogContext.bind(actor_id=str(actor_id), operation="generate_payroll"):
            employees, errors = self._select_employees(employee_ids)
            working_days = working_days_in_month(
                year, month, self._config.weekend_days, self._config.working_days_per_month,
            )
            logger.info(
                "payroll_generation_started",
                extra={
                    "month": month,
                    "year": year,
                    "employee_count": len(employees),
                    "working_days": working_days,
                },
            )

            by_index = dict(enumerate(employees))
            items = [
                BatchItemInput(item_index=i, item_key=emp.code, payload={"employee": emp})
                for i, emp in by_index.items()
            ]

            def handle(item: BatchItemInput) -> dict[str, Any]:
                employee: Employee = item.payload["employee"]
                with LogContext.bind(employee_id=str(employee.id)):
                    record = self._generate_one(employee, month, year, working_days, actor_id)
                return {"record": record}

            run = self._executor.run(
                "payroll_generation", items, handle,
                cancel_token=cancel_token, deadline_seconds=deadline_seconds,
            )

            generated: list[PayrollRecord] = []
            skipped: list[UUID] = []
            for result in run.item_results:
                employee = by_index[result.item_index]
                if result.status == BatchItemStatus.SUCCEEDED:
                    generated.append(result.result_data["record"])
                elif result.status == BatchItemStatus.FAILED:
                    errors.append(
                        EmployeePayrollError(
                            employee_id=employee.id,
                            employee_name=employee.name,
                            code=result.error_code or "UNKNOWN",
                            message=result.error_message or "",
                        )
                    )
                else:
                    skipped.append(employee.id)

            total_net = sum((r.net_pay for r in generated), Decimal("0.00"))
            status = _overall_status(run.status, len(generated), len(errors), len(skipped))
            outcome = PayrollGenerationResult(
                run_id=run.run_id,
                month=month,
                year=year,
                status=status,
                generated=tuple(generated),
                errors=tuple(errors),
                skipped=tuple(skipped),
                total_net_pay=total_net,
            )

            def audit(session: Session) -> None:
                AuditorService(session, self._clock).record(
                    "PayrollRun", run.run_id, AuditAction.PAYROLL_RUN_COMPLETED, actor_id,
                    {
                        "month": month,
                        "year": year,
                        "status": status.value,
                        "generated": len(generated),
                        "errors": len(errors),
                        "skipped": len(skipped),
                        "total_net_pay": total_net,
                    },
                )

            run_transaction(self._session_factory, audit, operation="payroll_run_audit")

            logger.info(
                "payroll_run_completed",
                extra={
                    "run_id": str(run.run_id),
                    "month": month,
                    "year": year,
                    "status": status.value,
                    "generated": len(generated),
                    "errors": len(errors),
                    "skipped": len(skipped),
                    "total_net_pay": str(total_net),
                },
            )
        return outcome

    def _select_employees(
        self, employee_ids: Sequence[UUID] | None,
    ) -> tuple[list[Employee], list[EmployeePayrollError]]:
        if not employee_ids:
            return self._directory.list_active(), []

        employees: list[Employee] = []
        errors: list[EmployeePayrollError] = []
        seen: set[UUID] = set()
        for employee_id in employee_ids:
            if employee_id in seen:
                continue
            seen.add(employee_id)
            employee = self._directory.get(employee_id)
            if employee is None:
                exc = UnknownEmployeeError(str(employee_id))
                errors.append(EmployeePayrollError(employee_id, exc.code, str(exc)))
            elif not employee.is_active:
                exc = InactiveEmployeeError(str(employee_id))
                errors.append(
                    EmployeePayrollError(employee_id, exc.code, str(exc), employee.name)
                )
            else:
                employees.append(employee)
        return employees, errors

    def _generate_one(
        self,
        employee: Employee,
        month: int,
        year: int,
        working_days: int,
        actor_id: UUID,
    ) -> PayrollRecord:
        period_start, period_end = month_bounds(year, month)

        def work(session: Session) -> PayrollRecord:
            existing = session.execute(
                select(PayrollRecordModel)
                .where(
                    PayrollRecordModel.employee_id == employee.id,
                    PayrollRecordModel.month == month,
                    PayrollRecordModel.year == year,
                )
                .with_for_update()
            ).scalar_one_or_none()
            if existing is not None and existing.paid:
                raise AlreadyPaidError(str(existing.id), str(employee.id))

            summary = AttendanceAggregator(
                session, self._attendance_config, self._config.paid_leave_type_set,
            ).aggregate(employee.id, period_start, period_end)
            pay = compute_pay(
                employee,
                summary,
                working_days,
                self._config.overtime_multiplier,
                self._config.standard_daily_hours,
                self._config.money_quantum,
                self._config.days_quantum,
            )
            values = {
                "basic_salary": pay.basic_salary,
                "overtime_hours": pay.overtime_hours,
                "overtime_pay": pay.overtime_pay,
                "allowances": pay.allowances,
                "deductions": pay.deductions,
                "gross_pay": pay.gross_pay,
                "net_pay": pay.net_pay,
                "days_present": pay.days_present,
                "generated_at": self._clock.now_utc(),
            }

            if existing is None:
                model = PayrollRecordModel(
                    employee_id=employee.id,
                    month=month,
                    year=year,
                    paid=False,
                    revision=1,
                    created_by_id=actor_id,
                    **values,
                )
                session.add(model)
                session.flush()
                action = AuditAction.PAYROLL_GENERATED
            else:
                result = session.execute(
                    update(PayrollRecordModel)
                    .where(
                        PayrollRecordModel.id == existing.id,
                        PayrollRecordModel.paid.is_(False),
                    )
                    .values(
                        revision=PayrollRecordModel.revision + 1,
                        updated_by_id=actor_id,
                        **values,
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    raise AlreadyPaidError(str(existing.id), str(employee.id))
                model = session.get(PayrollRecordModel, existing.id, populate_existing=True)
                action = AuditAction.PAYROLL_REGENERATED

            record = model.to_dto()
            AuditorService(session, self._clock).record(
                "PayrollRecord", record.id, action, actor_id,
                {
                    "employee_id": employee.id,
                    "month": month,
                    "year": year,
                    "revision": record.revision,
                    "days_present": record.days_present,
                    "paid_leave_days": pay.paid_leave_days,
                    "working_days": working_days,
                    "basic_salary": record.basic_salary,
                    "overtime_pay": record.overtime_pay,
                    "gross_pay": record.gross_pay,
                    "net_pay": record.net_pay,
                },
            )
            logger.info(
                "payroll_record_generated",
                extra={
                    "payroll_id": str(record.id),
                    "employee_id": str(employee.id),
                    "revision": record.revision,
                    "net_pay": str(record.net_pay),
                },
            )
            return record

        return run_transaction(self._session_factory, work, operation="generate_payroll_record")


def _overall_status(
    run_status: BatchJobStatus, generated: int, failed: int, skipped: int,
) -> BatchJobStatus:
    """Run status including employees rejected before the fan-out."""
    if run_status == BatchJobStatus.CANCELLED:
        return run_status
    if failed == 0 and skipped == 0:
        return BatchJobStatus.COMPLETED
    if generated == 0:
        return BatchJobStatus.FAILED
    return BatchJobStatus.PARTIALLY_COMPLETED
