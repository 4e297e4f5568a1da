"""
Attendance Module (``workforce_modules.attendance``).

Daily attendance per employee: validated single and bulk writes, filtered
queries, and per-period aggregation combined with approved leave.
"""

from workforce_modules.attendance.aggregator import (
    DEFAULT_PAID_LEAVE_TYPES,
    AttendanceAggregator,
    summarize_period,
)
from workforce_modules.attendance.config import AttendanceConfig
from workforce_modules.attendance.ingestor import AttendanceIngestor
from workforce_modules.attendance.models import (
    AttendanceInput,
    AttendanceQuery,
    AttendanceRecord,
    AttendanceReport,
    AttendanceStatus,
    AttendanceSummary,
    AttendanceTotals,
    BulkIngestSummary,
    JobLink,
    RowError,
)
from workforce_modules.attendance.store import AttendanceStore

__all__ = [
    "DEFAULT_PAID_LEAVE_TYPES",
    "AttendanceAggregator",
    "AttendanceConfig",
    "AttendanceIngestor",
    "AttendanceInput",
    "AttendanceQuery",
    "AttendanceRecord",
    "AttendanceReport",
    "AttendanceStatus",
    "AttendanceStore",
    "AttendanceSummary",
    "AttendanceTotals",
    "BulkIngestSummary",
    "JobLink",
    "RowError",
    "summarize_period",
]
