"""Tests for the raw-text field cleaners."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from loanflow.ingest.cleaners import (
    CLEANERS,
    clean_currency,
    clean_date,
    clean_integer,
    clean_percentage,
    clean_phone,
    clean_text,
)
from loanflow.models.schema_mapping import DataType


class TestCleanText:
    def test_strips_whitespace(self):
        assert clean_text("  Ada  ") == ("Ada", None)

    def test_blank_is_none_without_issue(self):
        assert clean_text("   ") == (None, None)


class TestCleanCurrency:
    @pytest.mark.parametrize("raw, expected", [
        ("$125,000.50", Decimal("125000.50")),
        ("$(1,234.56)", Decimal("-1234.56")),
        ("-(20.00)", Decimal("-20.00")),
        ("15.75-", Decimal("-15.75")),
        ("-3", Decimal("-3")),
        ("0", Decimal("0")),
        ("£ 1 000", Decimal("1000")),
    ])
    def test_parses_servicing_formats(self, raw, expected):
        assert clean_currency(raw, "Prin Bal") == (expected, None)

    def test_unparseable_value_is_noted(self):
        value, issue = clean_currency("N/A", "Prin Bal")
        assert value is None
        assert issue == "Prin Bal: unparseable currency 'N/A'"

    def test_missing_value_is_noted(self):
        assert clean_currency("", "Prin Bal") == (None, "Prin Bal: missing currency value")


class TestCleanPercentage:
    def test_percent_sign_is_dropped(self):
        assert clean_percentage("5.25%", "Int Rate") == (Decimal("5.25"), None)

    def test_bare_number(self):
        assert clean_percentage("0.0525") == (Decimal("0.0525"), None)

    def test_garbage_is_noted(self):
        value, issue = clean_percentage("about five", "Int Rate")
        assert value is None
        assert "Int Rate" in issue


class TestCleanDate:
    @pytest.mark.parametrize("raw", [
        "2024-01-15",
        "2024-01-15 00:00:00",
        "01/15/2024",
        "1/15/24",
        "15-Jan-2024",
        "Jan 15, 2024",
        "January 15, 2024",
        "2024/01/15",
        "2024-01-15T08:00:00Z",
        "20240115",
        "45306",
    ])
    def test_recognized_formats(self, raw):
        assert clean_date(raw, "Next Pymt Due") == (date(2024, 1, 15), None)

    def test_numeric_text_is_a_serial_not_a_year(self):
        assert clean_date("2024") == (date(1905, 7, 16), None)

    @pytest.mark.parametrize("raw", ["Pending Sale", "N/A", "TBD"])
    def test_status_words_are_not_dates(self, raw):
        value, issue = clean_date(raw, "FC Closed Date")
        assert value is None
        assert issue == f"FC Closed Date: invalid date {raw!r}"

    def test_native_values_pass_through(self):
        assert clean_date(date(2024, 1, 15)) == (date(2024, 1, 15), None)
        assert clean_date(datetime(2024, 1, 15, 9, 30)) == (date(2024, 1, 15), None)

    def test_blank_is_none_without_issue(self):
        assert clean_date("") == (None, None)

    def test_invalid_date_is_noted(self):
        value, issue = clean_date("13/45/2024", "Maturity Date")
        assert value is None
        assert issue == "Maturity Date: invalid date '13/45/2024'"

    def test_out_of_range_serial_is_invalid(self):
        value, issue = clean_date("99999999")
        assert value is None
        assert issue is not None


class TestCleanInteger:
    @pytest.mark.parametrize("raw, expected", [("300", 300), ("1,200", 1200), ("360.0", 360), ("-2", -2)])
    def test_whole_numbers(self, raw, expected):
        assert clean_integer(raw) == (expected, None)

    def test_fraction_is_rejected(self):
        value, issue = clean_integer("12.5", "Remg Term")
        assert value is None
        assert issue == "Remg Term: invalid integer '12.5'"


class TestCleanPhone:
    def test_us_number_to_e164(self):
        assert clean_phone("(650) 253-0000", "FC Atty POC Phone") == ("+16502530000", None)

    def test_region_applies_to_national_numbers(self):
        assert clean_phone("020 7031 3000", region="GB") == ("+442070313000", None)

    def test_invalid_number_is_noted(self):
        value, issue = clean_phone("12", "FC Atty POC Phone")
        assert value is None
        assert issue.startswith("FC Atty POC Phone: invalid phone number")

    def test_blank_is_none(self):
        assert clean_phone("") == (None, None)


def test_every_data_type_has_a_cleaner():
    assert set(CLEANERS) == set(DataType)
