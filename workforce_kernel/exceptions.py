"""
Typed Exception Hierarchy for the Workforce Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the engine (an HTTP layer, a CLI, a batch report) need to react
to failures precisely. Matching on message text is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (field, employee_id, payroll_id, ...)

Example:
    try:
        ledger.mark_paid(payroll_id, actor_id)
    except AlreadyPaidError as e:
        api_response(code=e.code, payroll_id=e.payroll_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    WorkforceError (base)
    |
    +-- ValidationError
    |   +-- InvalidRangeError
    |   +-- InactiveEmployeeError
    |
    +-- NotFoundError
    |   +-- UnknownEmployeeError
    |   +-- LeaveRequestNotFoundError
    |   +-- PayrollRecordNotFoundError
    |
    +-- InvalidTransitionError
    +-- AlreadyPaidError
    +-- OperationTimeoutError
    +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                  | When Raised
----------------------|-------------------------------------------------------
VALIDATION_ERROR      | Malformed or out-of-domain input (names the field)
INVALID_RANGE         | to_date earlier than from_date
INACTIVE_EMPLOYEE     | Attendance recorded for an inactive employee
NOT_FOUND             | Generic missing entity
UNKNOWN_EMPLOYEE      | Employee code / email / id does not resolve
LEAVE_NOT_FOUND       | Leave request id does not exist
PAYROLL_NOT_FOUND     | Payroll record id does not exist
INVALID_TRANSITION    | State change not allowed from the current state
ALREADY_PAID          | Regenerating or paying a record that is already paid
TIMEOUT               | Pool acquire, lock wait or statement exceeded its bound
IMMUTABILITY_VIOLATION| ORM attempt to alter a frozen row

===============================================================================
HANDLING PATTERNS
===============================================================================

Single-record operations raise these exceptions directly.  Batch
operations (bulk attendance, payroll generation) catch them per item and
report ``code`` + ``str(exc)`` in the structured batch result; nothing is
retried on the caller's behalf.
"""


class WorkforceError(Exception):
    """
    Base exception for all workforce engine errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "WORKFORCE_ERROR"


# Validation


class ValidationError(WorkforceError):
    """Input failed validation. ``field`` names the offending input."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class InvalidRangeError(ValidationError):
    """A date range whose end precedes its start."""

    code: str = "INVALID_RANGE"

    def __init__(self, field: str, start, end):
        self.start = start
        self.end = end
        super().__init__(field, f"end {end} is before start {start}")


class InactiveEmployeeError(ValidationError):
    """Attendance or payroll requested for an inactive employee."""

    code: str = "INACTIVE_EMPLOYEE"

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__("employee_id", f"employee {employee_id} is inactive")


# Lookup


class NotFoundError(WorkforceError):
    """Base exception for missing entities."""

    code: str = "NOT_FOUND"


class UnknownEmployeeError(NotFoundError):
    """An employee reference (id, code or email) does not resolve."""

    code: str = "UNKNOWN_EMPLOYEE"

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Unknown employee: {reference}")


class LeaveRequestNotFoundError(NotFoundError):
    """Leave request with given ID was not found."""

    code: str = "LEAVE_NOT_FOUND"

    def __init__(self, leave_id: str):
        self.leave_id = leave_id
        super().__init__(f"Leave request not found: {leave_id}")


class PayrollRecordNotFoundError(NotFoundError):
    """Payroll record with given ID was not found."""

    code: str = "PAYROLL_NOT_FOUND"

    def __init__(self, payroll_id: str):
        self.payroll_id = payroll_id
        super().__init__(f"Payroll record not found: {payroll_id}")


# State machines


class InvalidTransitionError(WorkforceError):
    """
    A workflow action is not allowed from the entity's current state.

    Raised when approving or rejecting a leave request that is already
    decided.
    """

    code: str = "INVALID_TRANSITION"

    def __init__(self, entity_type: str, entity_id: str, current_state: str, action: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.current_state = current_state
        self.action = action
        super().__init__(
            f"Cannot {action} {entity_type} {entity_id} in state {current_state}"
        )


class AlreadyPaidError(WorkforceError):
    """
    The payroll record is already paid.

    Raised by generation (a paid record is never replaced) and by
    payment (a record is never paid twice).
    """

    code: str = "ALREADY_PAID"

    def __init__(self, payroll_id: str, employee_id: str | None = None):
        self.payroll_id = payroll_id
        self.employee_id = employee_id
        super().__init__(f"Payroll record {payroll_id} is already paid")


# Resources


class OperationTimeoutError(WorkforceError):
    """A storage call exceeded its pool, lock or statement timeout."""

    code: str = "TIMEOUT"

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Operation {operation} timed out: {detail}")


# Immutability


class ImmutabilityViolationError(WorkforceError):
    """
    Attempted to modify or delete an immutable record.

    Paid payroll records, decided leave requests and audit events are
    frozen once written.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
