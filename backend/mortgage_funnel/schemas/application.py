"""Schemas for landing submissions and the mortgage admin API.

Landing submissions are validated by hand (validate_submission) rather
than by a pydantic model so the 400 response can carry the flat list of
human-readable messages the landing page displays.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mortgage_funnel.fields import ANSWER_FIELDS, PAYLOAD_CHOICES, REQUIRED_FIELDS
from mortgage_funnel.middleware.exceptions import SubmissionValidationError
from mortgage_funnel.schemas.validators import (
    is_valid_email,
    is_valid_phone,
    normalize_email,
    normalize_phone,
    sanitize_name,
)

# Wire key → LandingApplication column
WIRE_TO_COLUMN: dict[str, str] = {
    f.payload_key: f.attr
    for f in ANSWER_FIELDS
    if f.submitted and f.key == f.payload_key
}

_TEXT_FIELDS = ("fullName", "email", "phoneNumber")


def _present(value) -> bool:
    if isinstance(value, str):
        return bool(value.strip())
    return value is not None


def validate_submission(data: dict) -> dict:
    """Validate and sanitise a landing submission.

    Returns the column-keyed values ready for LandingApplication(**values).
    Raises SubmissionValidationError listing every problem found.
    """
    errors: list[str] = []
    clean: dict = {}

    for field in REQUIRED_FIELDS:
        if not _present(data.get(field)):
            errors.append(f"{field} is required")

    for field in _TEXT_FIELDS:
        value = data.get(field)
        if _present(value) and not isinstance(value, str):
            errors.append(f"Invalid value for {field}")

    email = data.get("email")
    if isinstance(email, str) and _present(email):
        if is_valid_email(email):
            clean["email"] = normalize_email(email)
        else:
            errors.append("Invalid email format")

    phone = data.get("phoneNumber")
    if isinstance(phone, str) and _present(phone):
        if is_valid_phone(phone):
            clean["phone_number"] = normalize_phone(phone)
        else:
            errors.append("Invalid phone number format")

    full_name = data.get("fullName")
    if isinstance(full_name, str) and full_name.strip():
        clean["full_name"] = sanitize_name(full_name)

    for field, choices in PAYLOAD_CHOICES.items():
        value = data.get(field)
        if not _present(value):
            continue
        if not isinstance(value, str) or value not in {c.value for c in choices}:
            errors.append(f"Invalid value for {field}")
        else:
            clean[WIRE_TO_COLUMN[field]] = value

    is_uae_resident = data.get("isUAEResident")
    if isinstance(is_uae_resident, bool):
        clean["is_uae_resident"] = is_uae_resident
    else:
        errors.append("isUAEResident must be a boolean value")

    if errors:
        raise SubmissionValidationError(errors)

    return clean


# ── Admin request bodies ─────────────────────────────────────
# Fields are optional so missing values surface as the API's own
# 400 messages instead of generic schema errors.

class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class StatusUpdateRequest(BaseModel):
    status: str | None = None
    notes: str | None = None


class NoteCreateRequest(BaseModel):
    content: str | None = None
    # Older admin clients post the text as `note`
    note: str | None = None


class BulkActionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: str | None = None
    application_ids: list[str] | None = Field(default=None, alias="applicationIds")
    status: str | None = None


# ── Responses ────────────────────────────────────────────────

class _CamelModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class AuditEntryOut(_CamelModel):
    id: str
    action: str
    timestamp: datetime
    actor: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    details: dict | None = None


class ApplicationSummary(_CamelModel):
    id: str
    loan_type: str
    is_uae_resident: bool = Field(alias="isUAEResident")
    residency_status: str
    full_name: str
    email: str
    phone_number: str
    budget_range: str | None = None
    investment_budget: str | None = None
    status: str
    priority: str
    currency_displayed: str
    created_at: datetime
    updated_at: datetime


class ApplicationOut(ApplicationSummary):
    property_status: str | None = None
    property_type: str | None = None
    down_payment: str | None = None
    monthly_income: str | None = None
    employment_status: str | None = None
    refinance_reason: str | None = None
    current_rate: str | None = None
    remaining_balance: str | None = None
    property_value: str | None = None
    investment_goal: str | None = None
    investor_experience: str | None = None
    investment_horizon: str | None = None
    investment_income_source: str | None = None
    investment_financing_structure: str | None = None
    investment_down_payment: str | None = None
    contact_method: str | None = None
    best_time_to_call: str | None = None
    assigned_to: str | None = None
    last_contact_date: datetime | None = None
    next_followup_date: datetime | None = None
    notes: list = []
    source: str
    session_id: str | None = None
    referrer: str | None = None
    marketing_consent: bool = False
    last_updated: datetime | None = None
