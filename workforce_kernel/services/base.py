"""
BaseService -- abstract base for session-bound services.

Responsibility:
    Provides the common constructor and session-handling contract for
    services that read and write inside a caller-owned transaction.
    Concrete services use ``session.flush()`` -- never ``session.commit()``.

Architecture position:
    Kernel > Services.  Stores (AttendanceStore), selectors and the
    AuditorService extend this class; orchestrators such as the ingestor,
    the payroll generator and the ledger own the transaction instead.

Failure modes:
    - If a subclass calls ``session.commit()``, a multi-step unit of work
      (upsert + audit) is no longer atomic.
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseService(ABC):
    """
    Abstract base class for session-bound services.

    Guarantees:
        - The service never calls ``session.commit()`` or
          ``session.rollback()`` -- the caller controls transaction
          boundaries.
    """

    def __init__(self, session: Session):
        self.session = session
