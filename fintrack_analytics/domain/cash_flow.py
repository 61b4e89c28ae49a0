"""Cash flow projection - run-rate forecast of income, expenses and balance"""

import hashlib
import random
import statistics
from typing import List, Optional

from fintrack_analytics.domain.aggregator import Aggregator
from fintrack_analytics.domain.models import CashFlowProjection, MonthlyCashFlow, ProjectionPoint
from fintrack_analytics.domain.trends import calculate_trend
from fintrack_analytics.utils.date_utils import next_month_labels

HISTORY_WINDOW_MONTHS = 6
DEFAULT_PROJECTION_MONTHS = 3
DEFAULT_JITTER = 0.05


def projection_seed(*parts: str) -> int:
    """Stable seed so an unchanged ledger always yields the same projection"""
    digest = hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()
    return int(digest[:16], 16)


def project_cash_flow(
    history: List[MonthlyCashFlow],
    months: List[str],
    jitter: float = DEFAULT_JITTER,
    rng: Optional[random.Random] = None,
) -> CashFlowProjection:
    """
    Project income and expenses from historical monthly averages.

    Each projected value is the run rate scaled by a factor drawn uniformly from
    [1 - jitter, 1 + jitter]; the running balance accumulates net flow from zero.
    """
    if not history:
        return CashFlowProjection(
            projection=[],
            confidence="low",
            message="Insufficient data for projection",
        )

    rng = rng or random.Random(0)
    avg_income = statistics.fmean(m.income for m in history)
    avg_expenses = statistics.fmean(m.expenses for m in history)

    projection = []
    running_balance = 0.0
    for month in months:
        income = avg_income * (1 + rng.uniform(-jitter, jitter))
        expenses = avg_expenses * (1 + rng.uniform(-jitter, jitter))
        running_balance += income - expenses

        projection.append(
            ProjectionPoint(
                month=month,
                projected_income=round(income, 2),
                projected_expenses=round(expenses, 2),
                net_flow=round(income - expenses, 2),
                running_balance=round(running_balance, 2),
            )
        )

    return CashFlowProjection(
        projection=projection,
        confidence="high" if len(history) >= 4 else "medium",
        trends={
            "income_trend": round(calculate_trend([m.income for m in history]), 2),
            "expense_trend": round(calculate_trend([m.expenses for m in history]), 2),
        },
    )


def analyze_cash_flow(
    aggregator: Aggregator,
    months: int = DEFAULT_PROJECTION_MONTHS,
    jitter: float = DEFAULT_JITTER,
    ledger_version: str = "",
) -> CashFlowProjection:
    history = aggregator.monthly_cash_flow(HISTORY_WINDOW_MONTHS)
    labels = next_month_labels(aggregator.as_of, months)

    seed = projection_seed(aggregator.user_id, labels[0] if labels else "", ledger_version)
    return project_cash_flow(history, labels, jitter, random.Random(seed))
