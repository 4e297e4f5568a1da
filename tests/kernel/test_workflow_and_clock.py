"""Workflow state-machine definitions and the deterministic clock."""

from datetime import date, datetime, timedelta, timezone

import pytest

from workforce_kernel.domain.clock import DeterministicClock, SystemClock
from workforce_kernel.domain.workflow import Transition, Workflow
from workforce_modules.leave.workflows import LEAVE_REQUEST_WORKFLOW
from workforce_modules.payroll.workflows import PAYROLL_PAYMENT_WORKFLOW


class TestWorkflowDefinition:

    def test_initial_state_must_be_a_state(self):
        with pytest.raises(ValueError, match="initial_state"):
            Workflow("w", "", "X", ("A", "B"), ())

    def test_transition_must_reference_known_states(self):
        with pytest.raises(ValueError, match="unknown state"):
            Workflow("w", "", "A", ("A", "B"), (Transition("A", "C", "go"),))

    def test_terminal_state_has_no_outgoing_transition(self):
        with pytest.raises(ValueError, match="terminal"):
            Workflow(
                "w", "", "A", ("A", "B"),
                (Transition("A", "B", "go"), Transition("B", "A", "back")),
                terminal_states=("B",),
            )


class TestLeaveRequestWorkflow:

    def test_pending_can_be_approved_or_rejected(self):
        assert LEAVE_REQUEST_WORKFLOW.initial_state == "PENDING"
        assert LEAVE_REQUEST_WORKFLOW.find_transition("PENDING", "approve").to_state == "APPROVED"
        assert LEAVE_REQUEST_WORKFLOW.find_transition("PENDING", "reject").to_state == "REJECTED"

    @pytest.mark.parametrize("state", ["APPROVED", "REJECTED"])
    @pytest.mark.parametrize("action", ["approve", "reject"])
    def test_decided_states_are_final(self, state, action):
        assert LEAVE_REQUEST_WORKFLOW.is_terminal(state)
        assert LEAVE_REQUEST_WORKFLOW.find_transition(state, action) is None


class TestPayrollPaymentWorkflow:

    def test_unpaid_to_paid_only(self):
        assert PAYROLL_PAYMENT_WORKFLOW.initial_state == "UNPAID"
        assert PAYROLL_PAYMENT_WORKFLOW.find_transition("UNPAID", "pay").to_state == "PAID"
        assert PAYROLL_PAYMENT_WORKFLOW.find_transition("PAID", "pay") is None
        assert PAYROLL_PAYMENT_WORKFLOW.is_terminal("PAID")


class TestDeterministicClock:

    def test_fixed_until_advanced(self):
        clock = DeterministicClock(datetime(2024, 3, 31, 23, 59, 59, tzinfo=timezone.utc))
        assert clock.now() == clock.now()
        assert clock.tick() == datetime(2024, 4, 1, 0, 0, 0, tzinfo=timezone.utc)
        assert clock.today() == date(2024, 4, 1)

    def test_advance_and_set_time(self):
        clock = DeterministicClock()
        start = clock.now()
        clock.advance(90)
        assert clock.now() - start == timedelta(seconds=90)
        clock.set_time(datetime(2024, 3, 1, tzinfo=timezone.utc))
        assert clock.now() == datetime(2024, 3, 1, tzinfo=timezone.utc)

    def test_today_is_utc_date(self):
        ist = timezone(timedelta(hours=5, minutes=30))
        clock = DeterministicClock(datetime(2024, 3, 2, 2, 0, tzinfo=ist))
        assert clock.today() == date(2024, 3, 1)


class TestSystemClock:

    def test_timezone_aware(self):
        assert SystemClock().now_utc().tzinfo is not None
