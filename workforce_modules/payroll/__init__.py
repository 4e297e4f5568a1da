"""
Payroll Module (``workforce_modules.payroll``).

Monthly payroll records derived from attendance and approved leave, and
their one-way UNPAID -> PAID payment state.
"""

from workforce_modules.payroll.config import PayrollConfig
from workforce_modules.payroll.generator import PayrollGenerator
from workforce_modules.payroll.labour_costs import LabourCostAllocator
from workforce_modules.payroll.ledger import PayrollLedger
from workforce_modules.payroll.models import (
    EmployeePayrollError,
    LabourCostLine,
    LabourCostReport,
    PayBreakdown,
    PaymentStatus,
    PayrollGenerationResult,
    PayrollQuery,
    PayrollRecord,
)
from workforce_modules.payroll.workflows import PAYROLL_PAYMENT_WORKFLOW

__all__ = [
    "PAYROLL_PAYMENT_WORKFLOW",
    "EmployeePayrollError",
    "LabourCostAllocator",
    "LabourCostLine",
    "LabourCostReport",
    "PayBreakdown",
    "PaymentStatus",
    "PayrollConfig",
    "PayrollGenerationResult",
    "PayrollGenerator",
    "PayrollLedger",
    "PayrollQuery",
    "PayrollRecord",
]
