"""
Attendance Configuration Schema.

Defines the structure and defaults for attendance validation and
aggregation settings.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Self

from workforce_kernel.logging_config import get_logger

logger = get_logger("modules.attendance.config")


@dataclass(frozen=True)
class AttendanceConfig:
    """
    Configuration schema for the attendance module.

        config = AttendanceConfig(standard_daily_hours=Decimal("9"))
    """

    # Hours per day beyond which worked time counts as overtime
    standard_daily_hours: Decimal = Decimal("8")

    # Upper bound on check_out - check_in for a single day
    max_daily_hours: Decimal = Decimal("24")

    allow_future_dates: bool = False

    # Bulk rows with a blank status are recorded as PRESENT
    default_bulk_status: str = "PRESENT"

    def __post_init__(self):
        if self.standard_daily_hours <= 0:
            raise ValueError("standard_daily_hours must be positive")
        if self.max_daily_hours <= 0 or self.max_daily_hours > 48:
            raise ValueError("max_daily_hours must be in (0, 48]")
        if self.standard_daily_hours > self.max_daily_hours:
            raise ValueError("standard_daily_hours cannot exceed max_daily_hours")
        if self.default_bulk_status not in {"PRESENT", "ABSENT", "LEAVE", "HALF_DAY"}:
            raise ValueError(
                f"default_bulk_status must be an attendance status, got '{self.default_bulk_status}'"
            )

    @classmethod
    def with_defaults(cls) -> Self:
        logger.info("attendance_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from a dictionary (e.g. a YAML section)."""
        logger.info(
            "attendance_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        values = dict(data)
        for key in ("standard_daily_hours", "max_daily_hours"):
            if key in values:
                values[key] = Decimal(str(values[key]))
        return cls(**values)
