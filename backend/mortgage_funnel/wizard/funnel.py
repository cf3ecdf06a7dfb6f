"""LandingFunnel: the wizard as one object a screen layer can drive.

    funnel = LandingFunnel(MemorySessionStore())
    funnel.start()                                   # → "/get-mortgage/step1"
    funnel.answer("/get-mortgage/step1", "refinance")
    funnel.answer("/get-mortgage/step2", "uae-resident")
    ...
    result = funnel.submit_contact({...})            # → SubmissionResult

Every screen entry goes through the step guard first; a rejected entry
raises SessionInvalidError pointing back at the entry page.
"""

import logging
import time
from typing import Callable

from mortgage_funnel.fields import CHOICE_LABELS, CONTACT_KEYS, FIELDS_BY_KEY, ResidencyStatus
from mortgage_funnel.schemas.validators import is_valid_email, is_valid_phone
from mortgage_funnel.wizard import currency
from mortgage_funnel.wizard.answers import AnswerSet, load_answers
from mortgage_funnel.wizard.errors import InvalidAnswerError, SessionInvalidError
from mortgage_funnel.wizard.flow import CONTACT, ENTRY_PATH, STEP1_PATH, FlowRouter, FlowState, StepRequirement
from mortgage_funnel.wizard.gateway import SubmissionGateway, SubmissionResult
from mortgage_funnel.wizard.guard import StepGuard
from mortgage_funnel.wizard.session import SessionTracker
from mortgage_funnel.wizard.store import SessionStore

logger = logging.getLogger(__name__)

# Screens whose options are localised money ranges
_RANGE_OPTIONS = {
    "budgetRange": currency.get_budget_ranges,
    "monthlyIncome": currency.get_income_ranges,
    "monthlyIncomeRefinance": currency.get_income_ranges,
    "propertyValue": currency.get_property_value_ranges,
    "remainingBalance": currency.get_refinance_balance_ranges,
    "investmentBudget": currency.get_investment_budget_ranges,
}


class LandingFunnel:
    def __init__(
        self,
        store: SessionStore,
        gateway: SubmissionGateway | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.tracker = SessionTracker(store, clock=clock)
        self.guard = StepGuard(self.tracker)
        self.router = FlowRouter()
        self._owns_gateway = gateway is None
        self.gateway = gateway or SubmissionGateway(store, router=self.router)
        self._submitting = False

    def close(self) -> None:
        if self._owns_gateway:
            self.gateway.close()

    @property
    def state(self) -> FlowState:
        if self._submitting:
            return FlowState.SUBMITTED
        return self.router.state(self.store)

    @property
    def loan_type(self) -> str | None:
        return self.store.get("loanType")

    # ── Navigation ───────────────────────────────────────────

    def start(self) -> str:
        """Begin a fresh attempt. Any previous answers are discarded."""
        self.tracker.clear()
        self.tracker.create()
        return STEP1_PATH

    def enter(self, path: str) -> StepRequirement:
        """Guard a screen, then record it as reached."""
        req = self.router.requirements(path)
        result = self.guard.validate(req.step, req.branch)
        if not result:
            logger.info(f"Redirecting {path} to entry: {result.reason}")
            raise SessionInvalidError(result.reason, ENTRY_PATH)

        if req.is_complete_screen and not (self.store.get("fullName") and self.store.get("email")):
            raise SessionInvalidError("Contact details not captured", ENTRY_PATH)

        self.tracker.update(req.step)
        return req

    def answer(self, path: str, value) -> str:
        """Store the answer for a single-choice screen and return the next path."""
        req = self.enter(path)
        key = req.answer_key
        if key is None:
            return self.router.next_path(path, self.loan_type)
        if key == CONTACT:
            self.save_contact(value)
            return self.router.next_path(path, self.loan_type)

        value = self._check_choice(key, value)
        self.store.set(key, value)
        if key == "residencyStatus":
            is_resident = value == ResidencyStatus.UAE_RESIDENT.value
            self.store.set("isUAEResident", "true" if is_resident else "false")

        return self.router.next_path(path, self.loan_type)

    @staticmethod
    def _check_choice(key: str, value) -> str:
        choices = FIELDS_BY_KEY[key].choices
        value = getattr(value, "value", value)
        if choices is not None and (not isinstance(value, str) or value not in {c.value for c in choices}):
            raise InvalidAnswerError(key, value)
        return str(value)

    # ── Contact details + submission ─────────────────────────

    def save_contact(self, details: dict) -> None:
        """Validate the whole contact form, then persist it.

        Nothing is written when any field is rejected.
        """
        clean: dict[str, str] = {}
        for key, value in details.items():
            if key not in CONTACT_KEYS:
                raise InvalidAnswerError(key, value)
            if value in (None, ""):
                continue
            if key == "email" and not is_valid_email(value):
                raise InvalidAnswerError(key, value)
            if key == "phoneNumber" and not is_valid_phone(value):
                raise InvalidAnswerError(key, value)
            if FIELDS_BY_KEY[key].choices is not None:
                value = self._check_choice(key, value)
            clean[key] = str(value).strip()

        for key, value in clean.items():
            self.store.set(key, value)

    def answers(self) -> AnswerSet:
        return load_answers(self.store)

    def submit_contact(self, details: dict) -> SubmissionResult:
        """Contact screen submit: guard, save, then send the application."""
        loan_type = self.loan_type
        if loan_type is None:
            raise SessionInvalidError("Step 1 not completed", ENTRY_PATH)
        self.enter(self.router.contact_path(loan_type))
        self.save_contact(details)
        return self.submit()

    def submit(self) -> SubmissionResult:
        self._submitting = True
        try:
            return self.gateway.submit(self.answers())
        finally:
            self._submitting = False

    # ── Presentation helpers ─────────────────────────────────

    def currency_config(self) -> currency.CurrencyConfig:
        return currency.get_currency_config(self.store)

    def options(self, key: str) -> list[currency.RangeOption]:
        """Choices for a screen, localised where they are money ranges."""
        if key in _RANGE_OPTIONS:
            return _RANGE_OPTIONS[key](self.currency_config())
        choices = FIELDS_BY_KEY[key].choices
        if choices is None:
            return []
        labels = CHOICE_LABELS.get(key, {})
        return [
            currency.RangeOption(id=c.value, title=labels.get(c.value, c.value), description="")
            for c in choices
        ]

    def progress(self) -> tuple[int, int]:
        """(current step, total steps) for the progress bar."""
        return self.tracker.current_step(), self.router.total_steps(self.loan_type)

    def restart_residency(self) -> None:
        """Forget the residency answer, e.g. when the user goes back to step 2."""
        currency.clear_residency_status(self.store)
