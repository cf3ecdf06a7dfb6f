"""Tests for the step guard."""

import pytest

from mortgage_funnel.wizard.guard import StepGuard
from mortgage_funnel.wizard.session import SESSION_KEY, SessionTracker


@pytest.fixture
def tracker(store, clock) -> SessionTracker:
    return SessionTracker(store, clock=clock)


@pytest.fixture
def guard(tracker) -> StepGuard:
    return StepGuard(tracker)


def _through_prefix(tracker, store, loan_type="refinance", step=2):
    tracker.create()
    store.set("loanType", loan_type)
    store.set("residencyStatus", "uae-resident")
    store.set("isUAEResident", "true")
    tracker.update(step)


@pytest.mark.unit
class TestStepGuard:

    @pytest.mark.parametrize("stored", [
        {},
        {SESSION_KEY: "not json at all"},
        {SESSION_KEY: '{"isValid": false}'},
        {SESSION_KEY: "[1, 2, 3]"},
    ])
    def test_step_one_always_valid(self, store, guard, stored):
        for key, value in stored.items():
            store.set(key, value)

        assert guard.validate(1).valid is True

    def test_no_session(self, guard):
        result = guard.validate(2)

        assert result.valid is False
        assert result.reason == "No valid session"

    def test_invalid_flag(self, store, guard):
        store.set(SESSION_KEY, '{"id": "x", "startTime": 0, "currentStep": 3, "isValid": false}')

        assert guard.validate(2).reason == "No valid session"

    def test_expired_session_is_cleared(self, tracker, store, clock, guard):
        _through_prefix(tracker, store, step=5)
        clock.advance(minutes=30, seconds=1)

        result = guard.validate(3, "refinance")

        assert result.reason == "Session expired"
        assert store.get(SESSION_KEY) is None
        assert store.get("loanType") is None
        assert store.get("residencyStatus") is None

    def test_step_two_requires_loan_type(self, tracker, store, guard):
        tracker.create()
        assert guard.validate(2).reason == "Step 1 not completed"

        store.set("loanType", "new-purchase")
        assert guard.validate(2).valid

    @pytest.mark.parametrize("missing", ["loanType", "residencyStatus"])
    def test_branch_steps_need_prefix_answers(self, tracker, store, guard, missing):
        _through_prefix(tracker, store)
        store.delete(missing)

        assert guard.validate(3, "refinance").reason == "Basic prerequisites not met"

    def test_branch_mismatch(self, tracker, store, guard):
        _through_prefix(tracker, store, loan_type="investment")

        assert guard.validate(3, "refinance").reason == "Invalid loan type for this flow"

    def test_basic_flow_not_completed(self, tracker, store, guard):
        _through_prefix(tracker, store, step=1)

        assert guard.validate(3, "refinance").reason == "Basic flow not completed"

    def test_cannot_skip_steps(self, tracker, store, guard):
        _through_prefix(tracker, store, step=4)

        assert guard.validate(5, "refinance").valid
        assert guard.validate(6, "refinance").reason == "Cannot skip steps"

    def test_generic_steps_are_not_skip_protected(self, tracker, store, guard):
        _through_prefix(tracker, store, step=2)

        assert guard.validate(7).valid

    def test_unreadable_storage_fails_closed(self, store, guard):
        store.set(SESSION_KEY, "{oops")

        result = guard.validate(4, "new-purchase")

        assert result.valid is False
        assert result.reason == "Session validation error"

    def test_validate_never_writes(self, tracker, store, guard):
        _through_prefix(tracker, store, step=3)
        before = {key: store.get(key) for key in store.keys()}

        for step in range(1, 11):
            guard.validate(step)
            guard.validate(step, "refinance")
            guard.validate(step, "new-purchase")

        assert {key: store.get(key) for key in store.keys()} == before

    def test_guard_result_is_truthy(self, tracker, store, guard):
        _through_prefix(tracker, store)

        assert guard.validate(3, "refinance")
        assert not guard.validate(3, "investment")
