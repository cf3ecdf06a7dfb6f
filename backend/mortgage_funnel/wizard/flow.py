"""Flow Router: maps screen paths to step requirements.

Numbering is global across branches:
  1 = loan type, 2 = residency, 3+ = branch-specific screens.

  purchase   : 9 steps  (7 branch screens incl. contact details)
  refinance  : 8 steps  (6 branch screens incl. contact details)
  investment : 10 steps (8 branch screens incl. contact details)

The branch is chosen once at step 1; every later routing decision reads
the stored `loanType`. There is no way to switch branch without a restart.
"""

import enum
from dataclasses import dataclass

from mortgage_funnel.fields import LoanType
from mortgage_funnel.wizard.store import SessionStore

BASE = "/get-mortgage"
ENTRY_PATH = BASE
STEP1_PATH = f"{BASE}/step1"
STEP2_PATH = f"{BASE}/step2"
STEP3_PATH = f"{BASE}/step3"

CONTACT = "contact"

_BRANCH_SLUGS = {
    LoanType.NEW_PURCHASE.value: "purchase",
    LoanType.REFINANCE.value: "refinance",
    LoanType.INVESTMENT.value: "investment",
}

# Ordered answer key per branch screen (screen 2 of a branch is global step 3)
BRANCH_SCREENS: dict[str, tuple[str, ...]] = {
    LoanType.NEW_PURCHASE.value: (
        "propertyStatus",
        "propertyType",
        "budgetRange",
        "downPayment",
        "monthlyIncome",
        "employmentStatus",
        CONTACT,
    ),
    LoanType.REFINANCE.value: (
        "refinanceReason",
        "currentRate",
        "remainingBalance",
        "propertyValue",
        "monthlyIncomeRefinance",
        CONTACT,
    ),
    LoanType.INVESTMENT.value: (
        "investmentGoal",
        "investorExperience",
        "investmentBudget",
        "investmentHorizon",
        "investmentIncomeSource",
        "investmentFinancingStructure",
        "propertyType",
        CONTACT,
    ),
}

DEFAULT_TOTAL_STEPS = 4


@dataclass(frozen=True)
class StepRequirement:
    step: int
    branch: str | None = None
    # Storage key this screen writes; CONTACT for the contact form, None otherwise
    answer_key: str | None = None
    path: str = ""

    @property
    def is_complete_screen(self) -> bool:
        return self.path.endswith("/complete")


class FlowState(str, enum.Enum):
    ENTRY = "entry"
    LOAN_TYPE_CHOSEN = "loan_type_chosen"
    RESIDENCY_CHOSEN = "residency_chosen"
    BRANCH_QUESTIONS = "branch_questions"
    CONTACT_DETAILS_CAPTURED = "contact_details_captured"
    # Request in flight; only observable inside LandingFunnel.submit()
    SUBMITTED = "submitted"
    COMPLETE = "complete"


def _build_step_map() -> dict[str, StepRequirement]:
    steps = {
        STEP1_PATH: StepRequirement(1, None, "loanType", STEP1_PATH),
        STEP2_PATH: StepRequirement(2, None, "residencyStatus", STEP2_PATH),
        STEP3_PATH: StepRequirement(3, None, None, STEP3_PATH),
    }
    for branch, screens in BRANCH_SCREENS.items():
        slug = _BRANCH_SLUGS[branch]
        for index, key in enumerate(screens):
            path = f"{BASE}/{slug}/step{index + 2}"
            steps[path] = StepRequirement(index + 3, branch, key, path)
        complete = f"{BASE}/{slug}/complete"
        steps[complete] = StepRequirement(len(screens) + 2, branch, None, complete)
    return steps


STEP_MAP: dict[str, StepRequirement] = _build_step_map()


class FlowRouter:
    """Static routing table plus the few decisions that read the store."""

    step_map = STEP_MAP

    def requirements(self, path: str) -> StepRequirement:
        return self.step_map.get(path) or StepRequirement(1, None, None, path)

    def branch_paths(self, branch: str) -> list[str]:
        slug = _BRANCH_SLUGS[branch]
        return [
            f"{BASE}/{slug}/step{index + 2}"
            for index in range(len(BRANCH_SCREENS[branch]))
        ]

    def branch_entry(self, branch: str | None) -> str:
        if branch not in BRANCH_SCREENS:
            return STEP3_PATH
        return self.branch_paths(branch)[0]

    def contact_path(self, branch: str) -> str:
        return self.branch_paths(branch)[-1]

    def complete_path(self, branch: str) -> str:
        return f"{BASE}/{_BRANCH_SLUGS[branch]}/complete"

    def total_steps(self, branch: str | None) -> int:
        if branch not in BRANCH_SCREENS:
            return DEFAULT_TOTAL_STEPS
        return len(BRANCH_SCREENS[branch]) + 2

    def next_path(self, path: str, loan_type: str | None) -> str:
        """Where a screen goes after it has been answered."""
        if path == ENTRY_PATH:
            return STEP1_PATH
        if path == STEP1_PATH:
            return STEP2_PATH
        if path in (STEP2_PATH, STEP3_PATH):
            # step 3 is a dispatcher; an unknown loan type starts over
            if loan_type not in BRANCH_SCREENS:
                return STEP1_PATH if path == STEP3_PATH else STEP3_PATH
            return self.branch_entry(loan_type)

        req = self.requirements(path)
        if req.branch is None or req.is_complete_screen:
            return ENTRY_PATH
        paths = self.branch_paths(req.branch)
        index = paths.index(path)
        if index + 1 < len(paths):
            return paths[index + 1]
        return self.complete_path(req.branch)

    def state(self, store: SessionStore) -> FlowState:
        """Derive the flow state machine position from stored answers."""
        loan_type = store.get("loanType")
        if not loan_type:
            return FlowState.ENTRY
        if not store.get("residencyStatus"):
            return FlowState.LOAN_TYPE_CHOSEN
        # A failed submission still lands on the completion screen
        if store.get("applicationId") or store.get("pendingSubmission"):
            return FlowState.COMPLETE
        if store.get("fullName") and store.get("email"):
            return FlowState.CONTACT_DETAILS_CAPTURED
        screens = BRANCH_SCREENS.get(loan_type, ())
        if any(store.get(key) for key in screens if key != CONTACT):
            return FlowState.BRANCH_QUESTIONS
        return FlowState.RESIDENCY_CHOSEN
