"""Unit tests for period handling and month arithmetic"""

import pytest
from datetime import date
from fintrack_analytics.domain.aggregator import parse_period, resolve_period
from fintrack_analytics.domain.exceptions import InputError
from fintrack_analytics.utils.date_utils import add_months, month_label, next_month_labels, subtract_months


@pytest.mark.parametrize(
    "raw,expected",
    [("6months", "6months"), ("6 months", "6months"), ("1year", "1year"), (" 1 Year ", "1year"), (None, "6months")],
)
def test_parse_period_supported_values(raw, expected):
    assert parse_period(raw) == expected


def test_parse_period_rejects_unknown():
    with pytest.raises(InputError):
        parse_period("5years")


def test_resolve_period_fails_closed():
    assert resolve_period("5years") == "6months"
    assert resolve_period("") == "6months"


def test_month_arithmetic_clamps_day():
    assert subtract_months(date(2026, 8, 31), 6) == date(2026, 2, 28)
    assert add_months(date(2026, 11, 15), 3) == date(2027, 2, 15)
    assert subtract_months(date(2026, 1, 10), 12) == date(2025, 1, 10)


def test_month_labels():
    assert month_label(date(2026, 3, 9)) == "2026-03"
    assert next_month_labels(date(2026, 11, 30), 3) == ["2026-12", "2027-01", "2027-02"]
