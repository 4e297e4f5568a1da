"""
Leave Module (``workforce_modules.leave``).

Leave requests and their single PENDING -> APPROVED | REJECTED decision.
Approved leave is authoritative input to attendance aggregation.
"""

from workforce_modules.leave.models import (
    LeaveApplication,
    LeaveQuery,
    LeaveRequest,
    LeaveStatus,
    LeaveType,
)
from workforce_modules.leave.selector import LeaveSelector
from workforce_modules.leave.service import LeaveWorkflow
from workforce_modules.leave.workflows import LEAVE_REQUEST_WORKFLOW

__all__ = [
    "LEAVE_REQUEST_WORKFLOW",
    "LeaveApplication",
    "LeaveQuery",
    "LeaveRequest",
    "LeaveSelector",
    "LeaveStatus",
    "LeaveType",
    "LeaveWorkflow",
]
