"""Leave Workflows.

State machine for leave requests: PENDING -> APPROVED | REJECTED, both
terminal.
"""

from workforce_kernel.domain.workflow import Guard, Transition, Workflow
from workforce_kernel.logging_config import get_logger
from workforce_modules.leave.models import LeaveStatus

logger = get_logger("modules.leave.workflows")


STILL_PENDING = Guard(
    name="still_pending",
    description="Request has not been decided by anyone else (compare-and-set on status)",
)

LEAVE_REQUEST_WORKFLOW = Workflow(
    name="leave_request",
    description="Leave request approval lifecycle",
    initial_state=LeaveStatus.PENDING.value,
    states=(
        LeaveStatus.PENDING.value,
        LeaveStatus.APPROVED.value,
        LeaveStatus.REJECTED.value,
    ),
    transitions=(
        Transition(
            LeaveStatus.PENDING.value, LeaveStatus.APPROVED.value,
            action="approve", guard=STILL_PENDING,
        ),
        Transition(
            LeaveStatus.PENDING.value, LeaveStatus.REJECTED.value,
            action="reject", guard=STILL_PENDING,
        ),
    ),
    terminal_states=(LeaveStatus.APPROVED.value, LeaveStatus.REJECTED.value),
)

logger.info(
    "leave_workflow_registered",
    extra={
        "workflow": LEAVE_REQUEST_WORKFLOW.name,
        "states": list(LEAVE_REQUEST_WORKFLOW.states),
        "transitions": len(LEAVE_REQUEST_WORKFLOW.transitions),
    },
)
