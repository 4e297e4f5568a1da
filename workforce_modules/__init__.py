"""
Workforce Modules.

Domain modules over the workforce kernel.  Each module contains:
- Domain models (frozen dataclasses)
- ORM persistence models
- Workflows (state machines), where the module has a lifecycle
- Configuration schemas
- Services that own their transactions

Modules:
- Employees: read-only view of the external employee master
- Attendance: daily records, bulk ingestion, period aggregation
- Leave: leave requests and their approval decision
- Payroll: monthly generation, payment state, labour cost allocation
"""
