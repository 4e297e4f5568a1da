"""
Payroll Configuration Schema.

Defines the structure and defaults for payroll computation settings.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Self

from workforce_kernel.logging_config import get_logger
from workforce_modules.leave.models import LeaveType

logger = get_logger("modules.payroll.config")


@dataclass(frozen=True)
class PayrollConfig:
    """
    Configuration schema for the payroll module.

        config = PayrollConfig(overtime_multiplier=Decimal("2"))
    """

    overtime_multiplier: Decimal = Decimal("1.5")

    # Hours in a standard day; overtime threshold and the divisor for
    # hourly-equivalent rates of MONTHLY and DAILY employees
    standard_daily_hours: Decimal = Decimal("8")

    # Fixed working-day count for every month; None means count weekdays
    working_days_per_month: int | None = None

    # date.weekday() values that are not working days (Mon=0)
    weekend_days: tuple[int, ...] = (5, 6)

    paid_leave_types: tuple[str, ...] = ("SICK", "CASUAL", "EARNED")

    money_quantum: Decimal = Decimal("0.01")
    days_quantum: Decimal = Decimal("0.1")

    def __post_init__(self):
        if self.overtime_multiplier < 1:
            raise ValueError("overtime_multiplier must be at least 1")
        if self.standard_daily_hours <= 0 or self.standard_daily_hours > 24:
            raise ValueError("standard_daily_hours must be in (0, 24]")
        if self.working_days_per_month is not None and not 1 <= self.working_days_per_month <= 31:
            raise ValueError("working_days_per_month must be between 1 and 31")
        if any(d not in range(7) for d in self.weekend_days):
            raise ValueError("weekend_days must be weekday numbers 0-6")
        if len(set(self.weekend_days)) >= 7:
            raise ValueError("weekend_days cannot cover the whole week")
        valid_types = {t.value for t in LeaveType}
        unknown = set(self.paid_leave_types) - valid_types
        if unknown:
            raise ValueError(f"Unknown paid_leave_types: {sorted(unknown)}")

    @property
    def paid_leave_type_set(self) -> frozenset[LeaveType]:
        return frozenset(LeaveType(t) for t in self.paid_leave_types)

    @classmethod
    def with_defaults(cls) -> Self:
        logger.info("payroll_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from a dictionary (e.g. a YAML section)."""
        logger.info(
            "payroll_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        values = dict(data)
        for key in ("overtime_multiplier", "standard_daily_hours", "money_quantum", "days_quantum"):
            if key in values:
                values[key] = Decimal(str(values[key]))
        for key in ("weekend_days", "paid_leave_types"):
            if key in values:
                values[key] = tuple(values[key])
        return cls(**values)
