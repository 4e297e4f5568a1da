"""
Employees Module (``workforce_modules.employees``).

Read-only view of the external employee master: identity (id, code,
email), active flag and compensation terms consumed by payroll.
"""

from workforce_modules.employees.directory import EmployeeDirectory, SqlEmployeeDirectory
from workforce_modules.employees.models import Employee, SalaryType

__all__ = [
    "Employee",
    "EmployeeDirectory",
    "SalaryType",
    "SqlEmployeeDirectory",
]
