"""
ORM-Level Immutability Enforcement.

SQLAlchemy fires ``before_update`` / ``before_delete`` mapper events
before the SQL is sent.  The listeners here check the frozen-row rules
and raise ``ImmutabilityViolationError``, which aborts the flush and the
transaction:

    session.flush()
         |
         v
    [before_update] --> _check_*_immutability() --> ImmutabilityViolationError
    [before_delete] --> _check_*_delete() --------/
         |
         v
    SQL sent to database (only if checks pass)

Protected entities
------------------

Entity              | When immutable                  | Mutable fields
--------------------|---------------------------------|------------------------
PayrollRecordModel  | once paid = true                | updated_at, updated_by_id
LeaveRequestModel   | once status APPROVED/REJECTED   | updated_at, updated_by_id
AuditEvent          | always                          | none

The workflow writes themselves (leave decision, payroll payment and draft
replacement) are compare-and-set bulk UPDATEs that never load the row into
the unit of work, so these listeners only see ORM-level edits.

The "was frozen" test reads the attribute history: the value loaded from
the database, not the value about to be written.

Usage::

    from workforce_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # once at startup

``unregister_immutability_listeners()`` exists for tests only.
"""

from sqlalchemy import event
from sqlalchemy.orm.attributes import get_history

from workforce_kernel.exceptions import ImmutabilityViolationError
from workforce_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

_AUDIT_METADATA = frozenset({"updated_at", "updated_by_id"})
_DECIDED_LEAVE_STATES = frozenset({"APPROVED", "REJECTED"})


def _previous_value(target, key):
    """Value of ``key`` as loaded from the database."""
    history = get_history(target, key)
    if history.deleted:
        return history.deleted[0]
    if history.unchanged:
        return history.unchanged[0]
    return None


def _changed_columns(mapper, target) -> list[str]:
    return [
        attr.key
        for attr in mapper.column_attrs
        if attr.key not in _AUDIT_METADATA and get_history(target, attr.key).has_changes()
    ]


def _block(entity_type: str, target, operation: str, reason: str, fields=None):
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(target.id),
            "operation": operation,
            "fields": fields or [],
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=reason,
    )


def _check_payroll_record_immutability(mapper, connection, target):
    """Paid payroll records keep their monetary fields and payment details."""
    if not _previous_value(target, "paid"):
        return
    changed = _changed_columns(mapper, target)
    if changed:
        _block(
            "PayrollRecord", target, "UPDATE",
            f"Paid payroll record cannot be modified (fields: {', '.join(sorted(changed))})",
            changed,
        )


def _check_payroll_record_delete(mapper, connection, target):
    if _previous_value(target, "paid"):
        _block("PayrollRecord", target, "DELETE", "Paid payroll record cannot be deleted")


def _check_leave_request_immutability(mapper, connection, target):
    """A decided leave request is final."""
    if _previous_value(target, "status") not in _DECIDED_LEAVE_STATES:
        return
    changed = _changed_columns(mapper, target)
    if changed:
        _block(
            "LeaveRequest", target, "UPDATE",
            f"Decided leave request cannot be modified (fields: {', '.join(sorted(changed))})",
            changed,
        )


def _check_leave_request_delete(mapper, connection, target):
    if _previous_value(target, "status") in _DECIDED_LEAVE_STATES:
        _block("LeaveRequest", target, "DELETE", "Decided leave request cannot be deleted")


def _check_audit_event_immutability(mapper, connection, target):
    _block("AuditEvent", target, "UPDATE", "Audit events are immutable and cannot be modified")


def _check_audit_event_delete(mapper, connection, target):
    _block("AuditEvent", target, "DELETE", "Audit events cannot be deleted")


def _listeners():
    from workforce_kernel.models.audit_event import AuditEvent
    from workforce_modules.leave.orm import LeaveRequestModel
    from workforce_modules.payroll.orm import PayrollRecordModel

    return (
        (PayrollRecordModel, "before_update", _check_payroll_record_immutability),
        (PayrollRecordModel, "before_delete", _check_payroll_record_delete),
        (LeaveRequestModel, "before_update", _check_leave_request_immutability),
        (LeaveRequestModel, "before_delete", _check_leave_request_delete),
        (AuditEvent, "before_update", _check_audit_event_immutability),
        (AuditEvent, "before_delete", _check_audit_event_delete),
    )


def register_immutability_listeners():
    """
    Register all immutability listeners.  Idempotent.

    Call after the ORM models are importable and before any writes.
    """
    registered = 0
    for target, event_name, listener_fn in _listeners():
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)
            registered += 1
    logger.info("immutability_listeners_registered", extra={"registered": registered})


def unregister_immutability_listeners():
    """Remove all immutability listeners.  TESTS ONLY."""
    for target, event_name, listener_fn in _listeners():
        if event.contains(target, event_name, listener_fn):
            event.remove(target, event_name, listener_fn)
    logger.warning("immutability_listeners_unregistered")
