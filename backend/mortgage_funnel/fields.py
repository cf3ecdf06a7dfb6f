"""Answer-field catalogue: the one definition of every wizard question.

Everything that needs to know "which answers exist" derives from
ANSWER_FIELDS:
  - the wizard clear routine (every storage key is wiped on restart)
  - payload assembly in the Submission Gateway
  - enum validation on the create endpoint
  - the CSV export columns

Storage keys are the camelCase names used both in client storage and on
the wire; `attr` is the snake_case attribute on Python models.
"""

import enum
from dataclasses import dataclass


# ── Choice enums ─────────────────────────────────────────────

class LoanType(str, enum.Enum):
    NEW_PURCHASE = "new-purchase"
    REFINANCE = "refinance"
    INVESTMENT = "investment"


class ResidencyStatus(str, enum.Enum):
    UAE_RESIDENT = "uae-resident"
    NON_RESIDENT = "non-resident"


class PropertyStatus(str, enum.Enum):
    BROWSING = "browsing"
    LOOKING = "looking"
    FOUND = "found"


class PropertyType(str, enum.Enum):
    VILLA = "villa"
    APARTMENT = "apartment"
    TOWNHOUSE = "townhouse"
    NOT_SURE = "not-sure"


class BudgetRange(str, enum.Enum):
    UNDER_1M = "under-1m"
    FROM_1M_TO_2M = "1m-2m"
    FROM_2M_TO_5M = "2m-5m"
    ABOVE_5M = "above-5m"


class DownPayment(str, enum.Enum):
    TEN_PERCENT = "10-percent"
    TWENTY_TO_25_PERCENT = "20-25-percent"
    THIRTY_PLUS_PERCENT = "30-plus-percent"
    NEED_GUIDANCE = "need-guidance"


class MonthlyIncome(str, enum.Enum):
    UNDER_15K = "under-15k"
    FROM_15K_TO_30K = "15k-30k"
    FROM_30K_TO_50K = "30k-50k"
    ABOVE_50K = "above-50k"


class EmploymentStatus(str, enum.Enum):
    UAE_RESIDENT_EMPLOYEE = "uae-resident-employee"
    UAE_NATIONAL = "uae-national"
    EXPAT_WORK_VISA = "expat-work-visa"
    SELF_EMPLOYED = "self-employed"


class RefinanceReason(str, enum.Enum):
    LOWER_RATE = "lower-rate"
    CASH_OUT = "cash-out"
    SWITCHING_BANK = "switching-bank"
    DEBT_CONSOLIDATION = "debt-consolidation"


class CurrentRate(str, enum.Enum):
    ABOVE_4 = "above-4"
    FROM_3_5_TO_4 = "3-5-to-4"
    FROM_3_TO_3_5 = "3-to-3-5"
    BELOW_3 = "below-3"


class RemainingBalance(str, enum.Enum):
    UNDER_500K = "under-500k"
    FROM_500K_TO_1M = "500k-1m"
    FROM_1M_TO_2M = "1m-2m"
    ABOVE_2M = "above-2m"


class PropertyValue(str, enum.Enum):
    UNDER_2M = "under-2m"
    FROM_2M_TO_5M = "2m-5m"
    FROM_5M_TO_10M = "5m-10m"
    ABOVE_10M = "above-10m"


class InvestmentGoal(str, enum.Enum):
    RENTAL_INCOME = "rental-income"
    CAPITAL_APPRECIATION = "capital-appreciation"
    BOTH_RETURNS = "both-returns"
    SHORT_TERM_FLIP = "short-term-flip"


class InvestorExperience(str, enum.Enum):
    FIRST_INVESTMENT = "first-investment"
    OWN_1_2 = "own-1-2"
    OWN_3_PLUS = "own-3-plus"
    PROFESSIONAL_INVESTOR = "professional-investor"


class InvestmentHorizon(str, enum.Enum):
    SHORT_TERM = "short-term"
    MID_TERM = "mid-term"
    LONG_TERM = "long-term"


class InvestmentIncomeSource(str, enum.Enum):
    EMPLOYMENT_SALARY = "employment-salary"
    BUSINESS_INCOME = "business-income"
    INVESTMENT_RETURNS = "investment-returns"
    MULTIPLE_SOURCES = "multiple-sources"


class InvestmentFinancingStructure(str, enum.Enum):
    TRADITIONAL_MORTGAGE = "traditional-mortgage"
    ISLAMIC_FINANCING = "islamic-financing"
    DEVELOPER_FINANCING = "developer-financing"
    NEED_ADVICE = "need-advice"


class InvestmentDownPayment(str, enum.Enum):
    TWENTY_FIVE_PERCENT = "25-percent"
    THIRTY_TO_40_PERCENT = "30-40-percent"
    FIFTY_PLUS_PERCENT = "50-plus-percent"
    NEED_FINANCING_OPTIONS = "need-financing-options"


class ContactMethod(str, enum.Enum):
    EMAIL = "email"
    PHONE = "phone"
    WHATSAPP = "whatsapp"
    BOTH = "both"


class BestTimeToCall(str, enum.Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    ANYTIME = "anytime"


# ── Backend-only enums ───────────────────────────────────────

class ApplicationStatus(str, enum.Enum):
    NEW_LEAD = "New Lead"
    CONTACTED = "Contacted"
    QUALIFIED = "Qualified"
    PROPOSAL_SENT = "Proposal Sent"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    ARCHIVED = "Archived"


class Priority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Currency(str, enum.Enum):
    AED = "AED"
    USD = "USD"


# ── Field catalogue ──────────────────────────────────────────

SHARED = "shared"
CONTACT = "contact"
CLIENT = "client"


@dataclass(frozen=True)
class AnswerField:
    """Definition for a single stored answer."""
    key: str
    attr: str
    # SHARED | CONTACT | CLIENT and/or LoanType values
    groups: frozenset[str]
    choices: type[enum.Enum] | None = None
    boolean: bool = False
    # Wire key in the submission payload; None means "never submitted"
    payload_key: str | None = None
    label: str = ""

    @property
    def submitted(self) -> bool:
        return self.payload_key is not None


def _f(key, attr, groups, choices=None, *, boolean=False, payload_key="", label=""):
    return AnswerField(
        key=key,
        attr=attr,
        groups=frozenset((groups,) if isinstance(groups, str) else groups),
        choices=choices,
        boolean=boolean,
        payload_key=key if payload_key == "" else payload_key,
        label=label or key,
    )


_PURCHASE = LoanType.NEW_PURCHASE.value
_REFINANCE = LoanType.REFINANCE.value
_INVESTMENT = LoanType.INVESTMENT.value

ANSWER_FIELDS: tuple[AnswerField, ...] = (
    # Shared prefix (steps 1-2)
    _f("loanType", "loan_type", SHARED, LoanType, label="Loan Type"),
    _f("isUAEResident", "is_uae_resident", SHARED, boolean=True, label="UAE Resident"),
    _f("residencyStatus", "residency_status", SHARED, ResidencyStatus, label="Residency Status"),
    # Purchase
    _f("propertyStatus", "property_status", _PURCHASE, PropertyStatus, label="Property Status"),
    _f("propertyType", "property_type", (_PURCHASE, _INVESTMENT), PropertyType, label="Property Type"),
    _f("budgetRange", "budget_range", _PURCHASE, BudgetRange, label="Budget Range"),
    _f("downPayment", "down_payment", _PURCHASE, DownPayment, label="Down Payment"),
    _f("monthlyIncome", "monthly_income", _PURCHASE, MonthlyIncome, label="Monthly Income"),
    _f("employmentStatus", "employment_status", _PURCHASE, EmploymentStatus, label="Employment Status"),
    # Refinance
    _f("refinanceReason", "refinance_reason", _REFINANCE, RefinanceReason, label="Refinance Reason"),
    _f("currentRate", "current_rate", _REFINANCE, CurrentRate, label="Current Rate"),
    _f("remainingBalance", "remaining_balance", _REFINANCE, RemainingBalance, label="Remaining Balance"),
    _f("propertyValue", "property_value", _REFINANCE, PropertyValue, label="Property Value"),
    _f(
        "monthlyIncomeRefinance", "monthly_income_refinance", _REFINANCE, MonthlyIncome,
        payload_key="monthlyIncome", label="Monthly Income",
    ),
    # Investment
    _f("investmentGoal", "investment_goal", _INVESTMENT, InvestmentGoal, label="Investment Goal"),
    _f("investorExperience", "investor_experience", _INVESTMENT, InvestorExperience, label="Investor Experience"),
    _f("investmentBudget", "investment_budget", _INVESTMENT, BudgetRange, label="Investment Budget"),
    _f(
        "investmentBudgetRange", "investment_budget_range", _INVESTMENT, BudgetRange,
        payload_key=None, label="Investment Budget",
    ),
    _f("investmentHorizon", "investment_horizon", _INVESTMENT, InvestmentHorizon, label="Investment Horizon"),
    _f(
        "investmentIncomeSource", "investment_income_source", _INVESTMENT, InvestmentIncomeSource,
        label="Income Source",
    ),
    _f(
        "investmentFinancingStructure", "investment_financing_structure", _INVESTMENT,
        InvestmentFinancingStructure, label="Financing Structure",
    ),
    _f(
        "investmentDownPayment", "investment_down_payment", _INVESTMENT, InvestmentDownPayment,
        label="Investment Down Payment",
    ),
    # Contact details (final screen of every branch)
    _f("fullName", "full_name", CONTACT, label="Full Name"),
    _f("email", "email", CONTACT, label="Email"),
    _f("phoneNumber", "phone_number", CONTACT, label="Phone Number"),
    _f("contactMethod", "contact_method", CONTACT, ContactMethod, label="Preferred Contact Method"),
    _f("bestTimeToCall", "best_time_to_call", CONTACT, BestTimeToCall, label="Best Time to Call"),
    # Client bookkeeping
    _f("applicationId", "application_id", CLIENT, payload_key=None, label="Application ID"),
)

FIELDS_BY_KEY: dict[str, AnswerField] = {f.key: f for f in ANSWER_FIELDS}

# Every client storage key that holds answer data
ANSWER_KEYS: tuple[str, ...] = tuple(f.key for f in ANSWER_FIELDS)

CONTACT_KEYS: tuple[str, ...] = tuple(f.key for f in ANSWER_FIELDS if CONTACT in f.groups)

REQUIRED_FIELDS: tuple[str, ...] = (
    "loanType",
    "isUAEResident",
    "residencyStatus",
    "fullName",
    "email",
    "phoneNumber",
)

# Enumerated fields accepted by the create endpoint, keyed by wire name.
# monthlyIncomeRefinance folds into monthlyIncome so it is not listed twice.
PAYLOAD_CHOICES: dict[str, type[enum.Enum]] = {
    f.payload_key: f.choices
    for f in ANSWER_FIELDS
    if f.submitted and f.choices is not None
}

# Display labels for choice values (notification + admin summaries)
CHOICE_LABELS: dict[str, dict[str, str]] = {
    "loanType": {
        "new-purchase": "New Purchase",
        "refinance": "Refinance",
        "investment": "Investment Property",
    },
    "propertyStatus": {
        "browsing": "Just browsing",
        "looking": "Actively searching",
        "found": "Found my home",
    },
    "propertyType": {
        "villa": "Villa",
        "apartment": "Apartment",
        "townhouse": "Townhouse",
        "not-sure": "Not sure yet",
    },
    "budgetRange": {
        "under-1m": "Under AED 1M",
        "1m-2m": "AED 1M - 2M",
        "2m-5m": "AED 2M - 5M",
        "above-5m": "Above AED 5M",
    },
    "downPayment": {
        "10-percent": "10%",
        "20-25-percent": "20-25%",
        "30-plus-percent": "30% or more",
        "need-guidance": "Need guidance",
    },
    "monthlyIncome": {
        "under-15k": "Under AED 15K",
        "15k-30k": "AED 15K - 30K",
        "30k-50k": "AED 30K - 50K",
        "above-50k": "Above AED 50K",
    },
    "employmentStatus": {
        "uae-resident-employee": "UAE Resident Employee",
        "uae-national": "UAE National",
        "expat-work-visa": "Expat on work visa",
        "self-employed": "Self-employed",
    },
    "contactMethod": {
        "email": "Email",
        "phone": "Phone Call",
        "whatsapp": "WhatsApp",
        "both": "Email & Phone",
    },
    "bestTimeToCall": {
        "morning": "Morning (9AM - 12PM)",
        "afternoon": "Afternoon (12PM - 5PM)",
        "evening": "Evening (5PM - 8PM)",
        "anytime": "Anytime",
    },
    "investmentGoal": {
        "rental-income": "Rental income",
        "capital-appreciation": "Capital appreciation",
        "both-returns": "Both rental and appreciation",
        "short-term-flip": "Short-term flip",
    },
    "investorExperience": {
        "first-investment": "First investment property",
        "own-1-2": "Own 1-2 properties",
        "own-3-plus": "Own 3+ properties",
        "professional-investor": "Professional investor",
    },
    "investmentHorizon": {
        "short-term": "Short-term (1-3 years)",
        "mid-term": "Mid-term (3-7 years)",
        "long-term": "Long-term (7+ years)",
    },
    "investmentIncomeSource": {
        "employment-salary": "Employment salary",
        "business-income": "Business income",
        "investment-returns": "Investment returns",
        "multiple-sources": "Multiple sources",
    },
    "investmentFinancingStructure": {
        "traditional-mortgage": "Traditional mortgage",
        "islamic-financing": "Islamic financing (Sharia)",
        "developer-financing": "Developer financing",
        "need-advice": "Need advice",
    },
    "investmentDownPayment": {
        "25-percent": "25%",
        "30-40-percent": "30-40%",
        "50-plus-percent": "50% or more",
        "need-financing-options": "Need financing options",
    },
}
CHOICE_LABELS["investmentBudget"] = CHOICE_LABELS["budgetRange"]


def display_value(key: str, value) -> str:
    """Human label for a stored choice; falls back to the raw value."""
    if value is None:
        return "Not provided"
    return CHOICE_LABELS.get(key, {}).get(str(value), str(value))


def fields_for_branch(loan_type: str) -> tuple[AnswerField, ...]:
    """Shared + branch + contact fields relevant to one loan type."""
    return tuple(
        f for f in ANSWER_FIELDS
        if f.groups & {SHARED, CONTACT, loan_type}
    )
