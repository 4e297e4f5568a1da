"""
Employee Domain Models (``workforce_modules.employees.models``).

Responsibility
--------------
Frozen value objects for the employee master data the engine consumes.
Employee records are owned by an external HR system; the engine only
reads them (code, email, active flag, compensation terms).

Invariants enforced
-------------------
* All models are ``frozen=True``.
* ``rate``, ``allowances`` and ``deductions`` are ``Decimal`` and non-negative.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from uuid import UUID

from workforce_kernel.logging_config import get_logger

logger = get_logger("modules.employees.models")


class SalaryType(str, Enum):
    """How ``rate`` is interpreted."""
    MONTHLY = "MONTHLY"
    DAILY = "DAILY"
    HOURLY = "HOURLY"


@dataclass(frozen=True)
class Employee:
    """An employee as seen by attendance and payroll."""
    id: UUID
    code: str
    name: str
    salary_type: SalaryType
    rate: Decimal
    email: str | None = None
    allowances: Decimal = Decimal("0")
    deductions: Decimal = Decimal("0")
    is_active: bool = True

    def __post_init__(self):
        for name in ("rate", "allowances", "deductions"):
            if getattr(self, name) < 0:
                logger.warning(
                    "employee_negative_compensation",
                    extra={"employee_id": str(self.id), "field": name},
                )
                raise ValueError(f"{name} cannot be negative")
