"""
Tests for Result, Workflow, Identity and Clock.
"""

from datetime import date, datetime, timezone
from uuid import uuid4

import pytest

from estate_kernel.domain.clock import DeterministicClock, SystemClock
from estate_kernel.domain.identity import Identity
from estate_kernel.domain.result import Result, ValidationError
from estate_kernel.domain.workflow import Transition, Workflow
from estate_kernel.exceptions import (
    InvalidTransitionError,
    OptimisticLockError,
    UnwrapFailureError,
)


class TestResult:
    """Tests for Result success/failure values."""

    def test_ok_carries_value_and_warnings(self):
        result = Result.ok(42, warnings=["careful"])
        assert result.is_success
        assert bool(result)
        assert result.unwrap() == 42
        assert result.warnings == ("careful",)

    def test_fail_requires_an_error(self):
        """A failed Result always carries at least one error."""
        with pytest.raises(ValueError):
            Result(is_success=False)

    def test_success_cannot_carry_errors(self):
        with pytest.raises(ValueError):
            Result(is_success=True, errors=(ValidationError("X", "x"),))

    def test_error_message_joins_messages(self):
        result = Result.fail(
            ValidationError("A", "first problem"),
            ValidationError("B", "second problem"),
        )
        assert result.is_failure
        assert result.error_codes == ("A", "B")
        assert result.error_message == "first problem; second problem"

    def test_unwrap_failure_raises(self):
        result = Result.failure("NOPE", "not allowed", field="amount")
        assert result.errors[0].field == "amount"
        with pytest.raises(UnwrapFailureError):
            result.unwrap()

    def test_from_errors(self):
        assert Result.from_errors([], value="v").unwrap() == "v"
        assert Result.from_errors([ValidationError("E", "e")]).is_failure

    def test_with_warnings_appends(self):
        result = Result.ok(1, warnings=["a"]).with_warnings("b")
        assert result.warnings == ("a", "b")


_FLOW = Workflow(
    name="sample",
    description="Sample lifecycle",
    initial_state="open",
    states=("open", "paid", "closed"),
    transitions=(
        Transition("open", "paid", action="pay"),
        Transition("open", "closed", action="pay"),
        Transition("paid", "closed", action="close"),
    ),
    terminal_states=("closed",),
)


class TestWorkflow:
    """Tests for the Workflow state machine value object."""

    def test_find_first_transition_for_action(self):
        assert _FLOW.find_transition("open", "pay").to_state == "paid"

    def test_find_transition_selects_target_state(self):
        """An action with several outcomes is disambiguated by the target."""
        assert _FLOW.find_transition("open", "pay", "closed").to_state == "closed"

    def test_missing_transition(self):
        assert _FLOW.find_transition("closed", "pay") is None
        with pytest.raises(InvalidTransitionError):
            _FLOW.require_transition("closed", "pay")

    def test_allowed_actions_are_unique(self):
        assert _FLOW.allowed_actions("open") == ("pay",)
        assert _FLOW.allowed_actions("closed") == ()

    def test_terminal_state_cannot_have_outgoing_transition(self):
        with pytest.raises(ValueError):
            Workflow(
                name="bad",
                description="",
                initial_state="a",
                states=("a", "b"),
                transitions=(Transition("b", "a", action="reopen"),),
                terminal_states=("b",),
            )

    def test_unknown_state_rejected(self):
        with pytest.raises(ValueError):
            Workflow(
                name="bad",
                description="",
                initial_state="a",
                states=("a",),
                transitions=(Transition("a", "z", action="go"),),
            )

    def test_initial_state_must_exist(self):
        with pytest.raises(ValueError):
            Workflow(name="bad", description="", initial_state="x", states=("a",), transitions=())


class TestIdentity:
    """Tests for identity and optimistic versioning."""

    def test_new_starts_at_version_zero(self):
        identity = Identity.new()
        assert identity.version == 0

    def test_new_with_given_id(self):
        given = uuid4()
        assert Identity.new(given).id == given

    def test_bump_keeps_id(self):
        identity = Identity.new()
        bumped = identity.bump()
        assert bumped.id == identity.id
        assert bumped.version == 1
        assert identity.version == 0

    def test_expect_version(self):
        identity = Identity.new().bump()
        identity.expect_version(1, "Debt")
        with pytest.raises(OptimisticLockError):
            identity.expect_version(0, "Debt")


class TestClock:
    """Tests for the clock abstraction."""

    def test_system_clock_is_utc(self):
        assert SystemClock().now().tzinfo is not None

    def test_deterministic_clock_from_date(self):
        """A date pins the clock to noon UTC on that day."""
        clock = DeterministicClock(date(2024, 5, 1))
        assert clock.now() == datetime(2024, 5, 1, 12, tzinfo=timezone.utc)
        assert clock.today() == date(2024, 5, 1)

    def test_naive_datetime_becomes_utc(self):
        clock = DeterministicClock(datetime(2024, 5, 1, 8, 30))
        assert clock.now().tzinfo == timezone.utc

    def test_advance_and_set(self):
        clock = DeterministicClock(date(2024, 5, 1))
        clock.advance_days(3)
        assert clock.today() == date(2024, 5, 4)
        clock.set_time(date(2030, 1, 1))
        assert clock.today() == date(2030, 1, 1)

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            DeterministicClock("2024-01-01")
