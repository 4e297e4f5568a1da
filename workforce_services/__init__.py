"""
workforce_services -- public API of the workforce engine.

Responsibility:
    ``WorkforceEngine`` composes the module orchestrators into the external
    contracts (record/bulk attendance, leave decisions, payroll generation
    and payment, attendance queries).

Architecture position:
    Services -- composition root over ``workforce_modules``,
    ``workforce_ingestion`` and ``workforce_kernel``.  Nothing below this
    layer imports from it.
"""

from workforce_services.engine import WorkforceEngine

__all__ = ["WorkforceEngine"]
