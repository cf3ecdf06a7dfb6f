"""Step Guard: decides whether a screen may be entered.

validate(step, branch) reads the session record and stored answers and
returns a GuardResult. It writes nothing, with one exception: an expired
session is cleared as a side effect of the expiry check.

Step 1 always passes, even when storage is unreadable. Every other step
fails closed on a storage error.
"""

import logging
from dataclasses import dataclass

from mortgage_funnel.wizard.session import SessionTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GuardResult:
    valid: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.valid


ALLOWED = GuardResult(True)


class StepGuard:
    def __init__(self, tracker: SessionTracker):
        self.tracker = tracker
        self.store = tracker.store

    def validate(self, required_step: int, required_branch: str | None = None) -> GuardResult:
        if required_step == 1:
            return ALLOWED
        try:
            return self._check(required_step, required_branch)
        except Exception as e:
            logger.error(f"Session validation error: {e}")
            return GuardResult(False, "Session validation error")

    def _check(self, required_step: int, required_branch: str | None) -> GuardResult:
        record = self.tracker.load()
        if not record or not record.get("isValid"):
            return GuardResult(False, "No valid session")

        if self.tracker.is_expired(record):
            self.tracker.clear()
            return GuardResult(False, "Session expired")

        loan_type = self.store.get("loanType")

        if required_step == 2:
            if not loan_type:
                return GuardResult(False, "Step 1 not completed")
            return ALLOWED

        if required_step > 2:
            residency_status = self.store.get("residencyStatus")
            if not loan_type or not residency_status:
                return GuardResult(False, "Basic prerequisites not met")

            if required_branch and loan_type != required_branch:
                return GuardResult(False, "Invalid loan type for this flow")

            # Only branch screens are skip-protected; generic steps are not.
            if required_branch:
                current_step = int(record.get("currentStep", 0))
                if current_step < 2:
                    return GuardResult(False, "Basic flow not completed")
                if current_step < required_step - 1:
                    return GuardResult(False, "Cannot skip steps")

        return ALLOWED
