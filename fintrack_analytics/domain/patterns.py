"""Spending pattern analysis - weekday and monthly distributions with insights"""

from collections import defaultdict
from typing import Dict, List

from fintrack_analytics.domain.aggregator import Aggregator
from fintrack_analytics.domain.models import (
    EXPENSE,
    GroupRow,
    Insight,
    MonthlyCategorySpending,
    SpendingPatterns,
    WeekdaySpending,
)

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def build_weekly_patterns(rows: List[GroupRow]) -> List[WeekdaySpending]:
    """Average expense per transaction for each weekday that has activity"""
    return [
        WeekdaySpending(
            day_of_week=row.weekday,
            day_name=DAY_NAMES[row.weekday],
            avg_spending=round(row.total / row.count, 2) if row.count else 0.0,
            transaction_count=row.count,
            common_categories=sorted(row.categories),
        )
        for row in sorted(rows, key=lambda r: r.weekday)
    ]


def build_monthly_trends(rows: List[GroupRow]) -> List[MonthlyCategorySpending]:
    """(month, category) totals, largest first within each month"""
    ordered = sorted(rows, key=lambda r: (r.month, -r.total, r.category))
    return [
        MonthlyCategorySpending(
            month=row.month,
            category=row.category,
            total_spending=round(row.total, 2),
            frequency=row.count,
        )
        for row in ordered
    ]


def generate_pattern_insights(
    weekly: List[WeekdaySpending],
    monthly: List[MonthlyCategorySpending],
) -> List[Insight]:
    insights = []

    if weekly:
        # Ties go to the earliest day of the week
        top_day = max(weekly, key=lambda d: (d.avg_spending, -d.day_of_week))
        insights.append(
            Insight(
                type="pattern",
                message=f"You tend to spend most on {top_day.day_name}",
                value=f"${top_day.avg_spending:.2f} average",
            )
        )

    if monthly:
        by_category: Dict[str, float] = defaultdict(float)
        for entry in monthly:
            by_category[entry.category] += entry.total_spending
        category, total = max(sorted(by_category.items()), key=lambda item: item[1])
        insights.append(
            Insight(
                type="category",
                message=f"{category} is your largest spending category",
                value=f"${total:.2f} total",
            )
        )

    return insights


def analyze_spending_patterns(aggregator: Aggregator, period: str) -> SpendingPatterns:
    date_range = aggregator.period_range(period)
    weekly = build_weekly_patterns(aggregator.weekday_totals(EXPENSE, date_range))
    monthly = build_monthly_trends(aggregator.monthly_category_totals(EXPENSE, date_range))

    return SpendingPatterns(
        weekly_patterns=weekly,
        monthly_trends=monthly,
        insights=generate_pattern_insights(weekly, monthly),
    )
