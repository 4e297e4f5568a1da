"""Payroll Workflows.

State machine for payroll payment: UNPAID -> PAID, one way.
"""

from workforce_kernel.domain.workflow import Guard, Transition, Workflow
from workforce_kernel.logging_config import get_logger
from workforce_modules.payroll.models import PaymentStatus

logger = get_logger("modules.payroll.workflows")


NOT_YET_PAID = Guard(
    name="not_yet_paid",
    description="Record is still unpaid at write time (compare-and-set on paid)",
)

PAYROLL_PAYMENT_WORKFLOW = Workflow(
    name="payroll_payment",
    description="Payroll record payment lifecycle",
    initial_state=PaymentStatus.UNPAID.value,
    states=(PaymentStatus.UNPAID.value, PaymentStatus.PAID.value),
    transitions=(
        Transition(
            PaymentStatus.UNPAID.value, PaymentStatus.PAID.value,
            action="pay", guard=NOT_YET_PAID,
        ),
    ),
    terminal_states=(PaymentStatus.PAID.value,),
)

logger.info(
    "payroll_workflow_registered",
    extra={
        "workflow": PAYROLL_PAYMENT_WORKFLOW.name,
        "states": list(PAYROLL_PAYMENT_WORKFLOW.states),
        "transitions": len(PAYROLL_PAYMENT_WORKFLOW.transitions),
    },
)
