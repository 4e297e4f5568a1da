"""
Employee Directory (``workforce_modules.employees.directory``).

Responsibility
--------------
The read-only contract through which attendance and payroll resolve
employees.  ``SqlEmployeeDirectory`` reads the ``employees`` table; any
other HR source can be plugged in by implementing ``EmployeeDirectory``.

Each lookup opens its own short read transaction so the directory is safe
to share across fan-out worker threads.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from workforce_kernel.db.engine import session_scope
from workforce_modules.employees.models import Employee
from workforce_modules.employees.orm import EmployeeModel


@runtime_checkable
class EmployeeDirectory(Protocol):
    """Read-only employee lookups."""

    def get(self, employee_id: UUID) -> Employee | None:
        ...

    def find_by_code(self, code: str) -> Employee | None:
        ...

    def find_by_email(self, email: str) -> Employee | None:
        ...

    def list_active(self) -> list[Employee]:
        ...


class SqlEmployeeDirectory:
    """``EmployeeDirectory`` backed by the ``employees`` table."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def _one(self, stmt) -> Employee | None:
        with session_scope(self._session_factory, operation="employee_lookup") as session:
            model = session.execute(stmt).scalar_one_or_none()
            return model.to_dto() if model is not None else None

    def get(self, employee_id: UUID) -> Employee | None:
        return self._one(select(EmployeeModel).where(EmployeeModel.id == employee_id))

    def find_by_code(self, code: str) -> Employee | None:
        return self._one(select(EmployeeModel).where(EmployeeModel.code == code.strip()))

    def find_by_email(self, email: str) -> Employee | None:
        return self._one(
            select(EmployeeModel).where(
                func.lower(EmployeeModel.email) == email.strip().lower()
            )
        )

    def list_active(self) -> list[Employee]:
        with session_scope(self._session_factory, operation="employee_list") as session:
            models = session.execute(
                select(EmployeeModel)
                .where(EmployeeModel.is_active.is_(True))
                .order_by(EmployeeModel.code)
            ).scalars().all()
            return [m.to_dto() for m in models]
