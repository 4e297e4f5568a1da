"""AuditorService: append, trace and payload-hash verification."""

from decimal import Decimal
from uuid import uuid4

from workforce_kernel.models.audit_event import AuditAction
from workforce_kernel.services.auditor_service import AuditorService
from workforce_kernel.utils.hashing import canonicalize_json, hash_payload


class TestRecord:

    def test_payload_is_canonical_json(self, session, deterministic_clock, test_actor_id):
        employee_id = uuid4()
        event = AuditorService(session, deterministic_clock).record(
            "PayrollRecord", uuid4(), AuditAction.PAYROLL_GENERATED, test_actor_id,
            {"employee_id": employee_id, "net_pay": Decimal("31500.00")},
        )
        assert event.payload == {"employee_id": str(employee_id), "net_pay": "31500"}
        assert event.occurred_at == deterministic_clock.now_utc()
        assert len(event.payload_hash) == 64

    def test_verify_detects_tampering(self, session, deterministic_clock, test_actor_id):
        auditor = AuditorService(session, deterministic_clock)
        event = auditor.record(
            "LeaveRequest", uuid4(), AuditAction.LEAVE_APPROVED, test_actor_id,
            {"to_state": "APPROVED"},
        )
        assert auditor.verify(event)

        event.payload = {"to_state": "REJECTED"}
        assert not auditor.verify(event)


class TestTrace:

    def test_trace_in_occurrence_order(self, session, deterministic_clock, test_actor_id):
        auditor = AuditorService(session, deterministic_clock)
        payroll_id = uuid4()

        auditor.record("PayrollRecord", payroll_id, AuditAction.PAYROLL_GENERATED, test_actor_id)
        deterministic_clock.tick()
        auditor.record("PayrollRecord", payroll_id, AuditAction.PAYROLL_REGENERATED, test_actor_id)
        deterministic_clock.tick()
        auditor.record("PayrollRecord", payroll_id, AuditAction.PAYROLL_PAID, test_actor_id)
        auditor.record("PayrollRecord", uuid4(), AuditAction.PAYROLL_PAID, test_actor_id)

        trace = auditor.trace("PayrollRecord", payroll_id)
        assert trace.actions == (
            AuditAction.PAYROLL_GENERATED,
            AuditAction.PAYROLL_REGENERATED,
            AuditAction.PAYROLL_PAID,
        )
        assert all(e.actor_id == test_actor_id for e in trace.entries)

    def test_empty_trace(self, session, deterministic_clock):
        trace = AuditorService(session, deterministic_clock).trace("LeaveRequest", uuid4())
        assert trace.is_empty


class TestHashing:

    def test_decimal_scale_does_not_change_hash(self):
        assert hash_payload({"net": Decimal("30000.00")}) == hash_payload(
            {"net": Decimal("30000.000000000")}
        )

    def test_key_order_does_not_change_hash(self):
        assert canonicalize_json({"b": 1, "a": 2}) == canonicalize_json({"a": 2, "b": 1})
