"""Tests for residency-driven currency localisation."""

import re

import pytest

from mortgage_funnel.fields import Currency
from mortgage_funnel.wizard import currency
from mortgage_funnel.wizard.currency import (
    AED_CONFIG,
    USD_CONFIG,
    convert_aed_to_usd,
    format_currency,
    get_currency_config,
)

RANGE_TABLES = [
    currency.get_budget_ranges,
    currency.get_income_ranges,
    currency.get_property_value_ranges,
    currency.get_refinance_balance_ranges,
    currency.get_investment_budget_ranges,
]


def strip_amounts(title: str) -> str:
    title = title.replace("AED ", "").replace("$", "")
    return re.sub(r"[\d.KM]", "", title)


@pytest.mark.unit
class TestCurrencyConfig:

    def test_resident_sees_aed(self, store):
        store.set("isUAEResident", "true")

        config = get_currency_config(store)

        assert config.currency == Currency.AED
        assert config.symbol == "AED"

    def test_non_resident_sees_usd(self, store):
        store.set("isUAEResident", "false")

        assert get_currency_config(store) == USD_CONFIG

    def test_unanswered_defaults_to_usd(self, store):
        assert get_currency_config(store).currency == Currency.USD

    def test_no_store_defaults_to_aed(self):
        assert get_currency_config() == AED_CONFIG

    def test_clear_residency_status(self, store):
        store.set("isUAEResident", "true")
        store.set("residencyStatus", "uae-resident")
        store.set("loanType", "refinance")

        currency.clear_residency_status(store)

        assert store.get("isUAEResident") is None
        assert store.get("residencyStatus") is None
        assert store.get("loanType") == "refinance"


@pytest.mark.unit
class TestConversion:

    @pytest.mark.parametrize("aed, usd", [
        (1_000_000, 270_000),
        (500_000, 135_000),
        (5_000_000, 1_350_000),
        ("2,000,000", 540_000),
        (1_234, 0),
    ])
    def test_rounds_to_nearest_thousand(self, aed, usd):
        assert convert_aed_to_usd(aed) == usd

    def test_format_aed(self):
        assert format_currency(1_000_000, AED_CONFIG) == "AED 1000000"
        assert format_currency(1_000_000, AED_CONFIG, include_symbol=False) == "1000000"

    def test_format_usd(self):
        assert format_currency(1_000_000, USD_CONFIG) == "$270,000"
        assert format_currency(500_000, USD_CONFIG, include_symbol=False) == "135,000"


@pytest.mark.unit
class TestLocalisedRanges:

    @pytest.mark.parametrize("table", RANGE_TABLES)
    def test_ids_and_descriptions_do_not_change(self, table):
        aed = table(AED_CONFIG)
        usd = table(USD_CONFIG)

        assert [o.id for o in aed] == [o.id for o in usd]
        assert [o.description for o in aed] == [o.description for o in usd]

    @pytest.mark.parametrize("table", RANGE_TABLES)
    def test_titles_differ_only_in_amounts(self, table):
        for aed, usd in zip(table(AED_CONFIG), table(USD_CONFIG)):
            assert strip_amounts(aed.title) == strip_amounts(usd.title)

    def test_budget_titles(self):
        assert currency.budget_range_title("above-5m", AED_CONFIG) == "Above AED 5M"
        assert currency.budget_range_title("above-5m", USD_CONFIG) == "Above $1.35M"
