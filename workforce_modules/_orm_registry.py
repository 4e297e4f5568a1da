"""
Module ORM Registry (``workforce_modules._orm_registry``).

Responsibility
--------------
Ensure every SQLAlchemy ORM model is imported so that ``Base.metadata``
contains its table before ``create_tables()`` runs.

Architecture position
---------------------
**Modules layer** -- utility.  ``workforce_kernel.db.engine`` imports it
lazily inside ``create_tables`` / ``drop_tables``.
"""


def import_all_orm_models() -> None:
    """Import kernel models and every ``workforce_modules.*.orm`` module.

    Employees come first: attendance, leave and payroll reference
    ``employees.id``.  Idempotent -- repeated calls are harmless.
    """
    import workforce_kernel.models.audit_event  # noqa: F401
    # fmt: off
    import workforce_modules.employees.orm  # noqa: F401
    import workforce_modules.attendance.orm  # noqa: F401
    import workforce_modules.leave.orm  # noqa: F401
    import workforce_modules.payroll.orm  # noqa: F401
    # fmt: on
