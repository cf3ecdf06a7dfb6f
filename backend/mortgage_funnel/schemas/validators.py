"""Reusable input validators for landing submissions.

The patterns are deliberately loose: a lead with an odd-looking but
reachable phone number is still a lead.
"""

import re

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_REGEX = re.compile(r"^[\+]?[0-9\s\-\(\)]{10,15}$")

FULL_NAME_MAX_LENGTH = 100


def is_valid_email(value: str) -> bool:
    return isinstance(value, str) and bool(EMAIL_REGEX.match(value.strip()))


def is_valid_phone(value: str) -> bool:
    return isinstance(value, str) and bool(PHONE_REGEX.match(value.strip()))


def normalize_email(value: str) -> str:
    return value.strip().lower()


def normalize_phone(value: str) -> str:
    """Collapse runs of whitespace and trim."""
    return re.sub(r"\s+", " ", value).strip()


def sanitize_name(value: str, max_length: int = FULL_NAME_MAX_LENGTH) -> str:
    return value.strip()[:max_length]
