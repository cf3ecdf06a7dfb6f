"""Currency localisation driven by the stored UAE residency answer.

Residents see AED amounts; everyone else sees USD, converted at a fixed
approximate rate. Range option ids never change between currencies, only
their titles do.
"""

import math
import re
from dataclasses import dataclass

from mortgage_funnel.fields import Currency
from mortgage_funnel.wizard.store import SessionStore

AED_TO_USD_RATE = 0.27


@dataclass(frozen=True)
class CurrencyConfig:
    is_uae_resident: bool
    currency: Currency
    symbol: str


@dataclass(frozen=True)
class RangeOption:
    id: str
    title: str
    description: str


AED_CONFIG = CurrencyConfig(True, Currency.AED, "AED")
USD_CONFIG = CurrencyConfig(False, Currency.USD, "$")


def get_currency_config(store: SessionStore | None = None) -> CurrencyConfig:
    """AED unless the store says the applicant is not a UAE resident.

    Without a store (server-side rendering) AED is assumed.
    """
    if store is None:
        return AED_CONFIG
    return AED_CONFIG if store.get("isUAEResident") == "true" else USD_CONFIG


def convert_aed_to_usd(aed_amount: str | int | float) -> int:
    """Convert and round to the nearest thousand dollars."""
    if isinstance(aed_amount, str):
        aed_amount = float(re.sub(r"[^\d.]", "", aed_amount))
    return int(math.floor(aed_amount * AED_TO_USD_RATE / 1000 + 0.5)) * 1000


def format_currency(
    aed_amount: str | int | float,
    config: CurrencyConfig,
    include_symbol: bool = True,
) -> str:
    if config.is_uae_resident:
        return f"AED {aed_amount}" if include_symbol else str(aed_amount)
    formatted = f"{convert_aed_to_usd(aed_amount):,}"
    return f"${formatted}" if include_symbol else formatted


# ── Localised option tables ──────────────────────────────────
# {range id: (AED title, USD title, description)}

_BUDGET_RANGES = {
    "under-1m": ("Under AED 1M", "Under $270K", "Starter homes and apartments"),
    "1m-2m": ("AED 1M - 2M", "$270K - $540K", "Mid-range properties"),
    "2m-5m": ("AED 2M - 5M", "$540K - $1.35M", "Premium properties"),
    "above-5m": ("Above AED 5M", "Above $1.35M", "Luxury properties"),
}

_INCOME_RANGES = {
    "under-15k": ("Under AED 15K", "Under $4K", "Entry-level income range"),
    "15k-30k": ("AED 15K - 30K", "$4K - $8K", "Mid-level income range"),
    "30k-50k": ("AED 30K - 50K", "$8K - $13.5K", "High income range"),
    "above-50k": ("Above AED 50K", "Above $13.5K", "Premium income range"),
}

_PROPERTY_VALUE_RANGES = {
    "under-2m": ("Under AED 2M", "Under $540K", "Modest property value"),
    "2m-5m": ("AED 2M - 5M", "$540K - $1.35M", "Mid-range property value"),
    "5m-10m": ("AED 5M - 10M", "$1.35M - $2.7M", "High-end property value"),
    "above-10m": ("Above AED 10M", "Above $2.7M", "Premium property value"),
}

_REFINANCE_BALANCE_RANGES = {
    "under-500k": ("Under AED 500K", "Under $135K", "Small remaining balance"),
    "500k-1m": ("AED 500K - 1M", "$135K - $270K", "Mid-range balance"),
    "1m-2m": ("AED 1M - 2M", "$270K - $540K", "Large balance"),
    "above-2m": ("Above AED 2M", "Above $540K", "Premium mortgage balance"),
}

_INVESTMENT_BUDGET_RANGES = {
    "under-1m": ("Under AED 1M", "Under $270K", "Entry properties"),
    "1m-2m": ("AED 1M - 2M", "$270K - $540K", "Mid-range"),
    "2m-5m": ("AED 2M - 5M", "$540K - $1.35M", "Premium"),
    "above-5m": ("Above AED 5M", "Above $1.35M", "Luxury investments"),
}


def _localise(table: dict, config: CurrencyConfig) -> list[RangeOption]:
    column = 0 if config.is_uae_resident else 1
    return [
        RangeOption(id=range_id, title=titles[column], description=titles[2])
        for range_id, titles in table.items()
    ]


def get_budget_ranges(config: CurrencyConfig) -> list[RangeOption]:
    return _localise(_BUDGET_RANGES, config)


def get_income_ranges(config: CurrencyConfig) -> list[RangeOption]:
    return _localise(_INCOME_RANGES, config)


def get_property_value_ranges(config: CurrencyConfig) -> list[RangeOption]:
    return _localise(_PROPERTY_VALUE_RANGES, config)


def get_refinance_balance_ranges(config: CurrencyConfig) -> list[RangeOption]:
    return _localise(_REFINANCE_BALANCE_RANGES, config)


def get_investment_budget_ranges(config: CurrencyConfig) -> list[RangeOption]:
    return _localise(_INVESTMENT_BUDGET_RANGES, config)


def budget_range_title(range_id: str, config: CurrencyConfig) -> str:
    """Display title for one budget range id in the given currency."""
    titles = _BUDGET_RANGES[range_id]
    return titles[0] if config.is_uae_resident else titles[1]


def clear_residency_status(store: SessionStore) -> None:
    store.delete("isUAEResident")
    store.delete("residencyStatus")
