"""Typed answer sets: one model per branch.

Every field is optional so a partially completed flow can be loaded at any
point. Attribute names are snake_case; the catalogue maps them onto the
storage and wire keys.

    answers = load_answers(store)        # → PurchaseAnswers | RefinanceAnswers | ...
    answers.missing_required()           # → ["email"]
    answers.to_payload()                 # → {"loanType": ..., "monthlyIncome": ...}
"""

from pydantic import BaseModel, ConfigDict, field_validator

from mortgage_funnel.fields import (
    BestTimeToCall,
    BudgetRange,
    ContactMethod,
    CurrentRate,
    DownPayment,
    EmploymentStatus,
    FIELDS_BY_KEY,
    InvestmentDownPayment,
    InvestmentFinancingStructure,
    InvestmentGoal,
    InvestmentHorizon,
    InvestmentIncomeSource,
    InvestorExperience,
    LoanType,
    MonthlyIncome,
    PropertyStatus,
    PropertyType,
    PropertyValue,
    REQUIRED_FIELDS,
    RefinanceReason,
    RemainingBalance,
    ResidencyStatus,
    fields_for_branch,
)
from mortgage_funnel.wizard.store import SessionStore


class AnswerSet(BaseModel):
    """Shared prefix + contact details. Branch models add their own screens."""

    model_config = ConfigDict(use_enum_values=True)

    loan_type: LoanType | None = None
    is_uae_resident: bool | None = None
    residency_status: ResidencyStatus | None = None

    full_name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    contact_method: ContactMethod | None = None
    best_time_to_call: BestTimeToCall | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def branch(self) -> str | None:
        return self.loan_type

    def payload_fields(self):
        return tuple(f for f in fields_for_branch(self.loan_type or "") if f.submitted)

    def to_payload(self) -> dict:
        """Fixed-shape submission payload keyed by wire names.

        Unanswered fields are omitted. A wire key that several storage
        keys map onto takes the first answered one.
        """
        payload: dict = {}
        for field in self.payload_fields():
            if field.attr not in type(self).model_fields:
                continue
            value = getattr(self, field.attr)
            if value is None or field.payload_key in payload:
                continue
            payload[field.payload_key] = value
        return payload

    def missing_required(self) -> list[str]:
        payload = self.to_payload()
        return [key for key in REQUIRED_FIELDS if payload.get(key) in (None, "")]

    def contact_details(self) -> dict[str, str]:
        return {
            key: getattr(self, FIELDS_BY_KEY[key].attr)
            for key in ("fullName", "email", "phoneNumber", "contactMethod", "bestTimeToCall")
            if getattr(self, FIELDS_BY_KEY[key].attr) is not None
        }


class PurchaseAnswers(AnswerSet):
    property_status: PropertyStatus | None = None
    property_type: PropertyType | None = None
    budget_range: BudgetRange | None = None
    down_payment: DownPayment | None = None
    monthly_income: MonthlyIncome | None = None
    employment_status: EmploymentStatus | None = None


class RefinanceAnswers(AnswerSet):
    refinance_reason: RefinanceReason | None = None
    current_rate: CurrentRate | None = None
    remaining_balance: RemainingBalance | None = None
    property_value: PropertyValue | None = None
    # Submitted as `monthlyIncome`
    monthly_income_refinance: MonthlyIncome | None = None


class InvestmentAnswers(AnswerSet):
    investment_goal: InvestmentGoal | None = None
    investor_experience: InvestorExperience | None = None
    investment_budget: BudgetRange | None = None
    investment_budget_range: BudgetRange | None = None
    investment_horizon: InvestmentHorizon | None = None
    investment_income_source: InvestmentIncomeSource | None = None
    investment_financing_structure: InvestmentFinancingStructure | None = None
    investment_down_payment: InvestmentDownPayment | None = None
    property_type: PropertyType | None = None

    def to_payload(self) -> dict:
        payload = super().to_payload()
        # Older screens stored the budget under investmentBudgetRange
        if "investmentBudget" not in payload and self.investment_budget_range:
            payload["investmentBudget"] = self.investment_budget_range
        return payload


ANSWER_MODELS: dict[str, type[AnswerSet]] = {
    LoanType.NEW_PURCHASE.value: PurchaseAnswers,
    LoanType.REFINANCE.value: RefinanceAnswers,
    LoanType.INVESTMENT.value: InvestmentAnswers,
}


def _read_value(store: SessionStore, key: str):
    raw = store.get(key)
    if raw is None:
        return None
    if FIELDS_BY_KEY[key].boolean:
        return raw == "true"
    return raw


def load_answers(store: SessionStore) -> AnswerSet:
    """Build the typed answer set for whatever branch the store holds.

    Raises pydantic.ValidationError if a stored value is outside its choices.
    """
    loan_type = store.get("loanType")
    model = ANSWER_MODELS.get(loan_type or "", AnswerSet)
    data = {}
    for attr in model.model_fields:
        key = next((f.key for f in FIELDS_BY_KEY.values() if f.attr == attr), None)
        if key is None:
            continue
        value = _read_value(store, key)
        if value is not None:
            data[attr] = value
    return model.model_validate(data)
