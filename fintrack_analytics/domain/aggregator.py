"""Aggregator - shapes ledger store queries into typed series for the analyzers"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, List, Optional

from fintrack_analytics.domain.exceptions import InputError
from fintrack_analytics.domain.ledger import LedgerStore
from fintrack_analytics.domain.models import (
    EXPENSE,
    INCOME,
    BudgetStatus,
    DateRange,
    GroupBy,
    GroupRow,
    MonthlyCashFlow,
    MonthlySeries,
    Transaction,
)
from fintrack_analytics.utils.date_utils import subtract_months

DEFAULT_PERIOD = "6months"

# Period label -> trailing months
PERIOD_MONTHS = {"6months": 6, "1year": 12}

_PERIOD_ALIASES = {
    "6months": "6months",
    "6 months": "6months",
    "1year": "1year",
    "1 year": "1year",
    "12months": "1year",
    "12 months": "1year",
}

MAX_SERIES_POINTS = 12


def parse_period(period: Optional[str]) -> str:
    """Normalize a period string to "6months" or "1year".

    Raises:
        InputError: for any other value
    """
    if period is None:
        return DEFAULT_PERIOD
    key = period.strip().lower()
    if key not in _PERIOD_ALIASES:
        raise InputError(f"Unsupported period: {period!r}")
    return _PERIOD_ALIASES[key]


def resolve_period(period: Optional[str]) -> str:
    """Like parse_period, but fails closed to the 6-month window"""
    try:
        return parse_period(period)
    except InputError as e:
        logging.warning(f"{e}, falling back to {DEFAULT_PERIOD}")
        return DEFAULT_PERIOD


class Aggregator:
    """Issues the grouped and raw ledger queries for one user as of one day"""

    def __init__(self, store: LedgerStore, user_id: str, as_of: date):
        self.store = store
        self.user_id = user_id
        self.as_of = as_of

    def trailing_months(self, months: int) -> DateRange:
        return DateRange(start=subtract_months(self.as_of, months), end=self.as_of)

    def trailing_days(self, days: int) -> DateRange:
        return DateRange(start=self.as_of - timedelta(days=days), end=self.as_of)

    def period_range(self, period: str) -> DateRange:
        return self.trailing_months(PERIOD_MONTHS[resolve_period(period)])

    def weekday_totals(self, kind: str, date_range: DateRange) -> List[GroupRow]:
        rows = self.store.sum_by_group(self.user_id, kind, date_range, GroupBy.WEEKDAY)
        return sorted(rows, key=lambda r: r.weekday)

    def monthly_category_totals(self, kind: str, date_range: DateRange) -> List[GroupRow]:
        """Rows per (month, category): chronological, largest total first within a month"""
        rows = self.store.sum_by_group(self.user_id, kind, date_range, GroupBy.MONTH_CATEGORY)
        return sorted(rows, key=lambda r: (r.month, -r.total, r.category))

    def category_monthly_series(self, kind: str, months: int = 12) -> Dict[str, MonthlySeries]:
        """Per-category chronological monthly totals, at most 12 points each"""
        rows = self.monthly_category_totals(kind, self.trailing_months(months))

        series: Dict[str, MonthlySeries] = {}
        for row in rows:
            entry = series.setdefault(row.category, MonthlySeries(category=row.category, kind=kind))
            entry.points.append((row.month, row.total))

        for entry in series.values():
            entry.points = entry.points[-MAX_SERIES_POINTS:]
        return series

    def kind_total(self, kind: str, date_range: DateRange) -> float:
        rows = self.store.sum_by_group(self.user_id, kind, date_range, GroupBy.CATEGORY)
        return sum(r.total for r in rows)

    def distinct_categories(self, kind: str, date_range: DateRange) -> int:
        rows = self.store.sum_by_group(self.user_id, kind, date_range, GroupBy.CATEGORY)
        return len({r.category for r in rows})

    def monthly_cash_flow(self, months: int) -> List[MonthlyCashFlow]:
        """Income and expense totals for every month with any activity, chronological"""
        date_range = self.trailing_months(months)
        income = self.store.sum_by_group(self.user_id, INCOME, date_range, GroupBy.MONTH)
        expenses = self.store.sum_by_group(self.user_id, EXPENSE, date_range, GroupBy.MONTH)

        totals: Dict[str, Dict[str, float]] = defaultdict(lambda: {INCOME: 0.0, EXPENSE: 0.0})
        for row in income:
            totals[row.month][INCOME] += row.total
        for row in expenses:
            totals[row.month][EXPENSE] += row.total

        return [
            MonthlyCashFlow(month=month, income=values[INCOME], expenses=values[EXPENSE])
            for month, values in sorted(totals.items())
        ]

    def raw_expenses(self, date_range: DateRange) -> List[Transaction]:
        return self.store.raw_expenses(self.user_id, date_range)

    def budget_status(self, month: str) -> List[BudgetStatus]:
        return self.store.budget_status(self.user_id, month)
