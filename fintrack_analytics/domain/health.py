"""Financial health scoring - composite 0-100 score with letter grade"""

import math
from typing import List

from fintrack_analytics.domain.aggregator import Aggregator
from fintrack_analytics.domain.models import (
    EXPENSE,
    INCOME,
    HealthFactor,
    HealthInputs,
    HealthRecommendation,
    HealthScore,
)
from fintrack_analytics.utils.date_utils import month_label

HEALTH_WINDOW_MONTHS = 3
DIVERSITY_TARGET = 8

# Targeted actions surfaced for the weakest negative factor
_FACTOR_ACTIONS = {
    "Savings rate": "Cut discretionary spending until income covers expenses",
    "Budget adherence": "Review the categories that went over budget this month",
    "Expense categorization": "Categorize your expenses to see where money goes",
    "Income stability": "Record your income so savings can be tracked",
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_savings_rate(total_income: float, total_expenses: float) -> float:
    """(income - expense) / income × 100, defined as 0 when there is no income"""
    if total_income <= 0:
        return 0.0
    return (total_income - total_expenses) / total_income * 100


def score_savings_rate(savings_rate: float) -> HealthFactor:
    """
    Savings component (30 points max).

    - ≥20%: 30 points
    - ≥10%: 20 points
    - ≥0%:  10 points
    - <0%:  0 points
    """
    if savings_rate >= 20:
        return HealthFactor(factor="Savings rate", impact=30, status="positive")
    elif savings_rate >= 10:
        return HealthFactor(factor="Savings rate", impact=20, status="positive")
    elif savings_rate >= 0:
        return HealthFactor(factor="Savings rate", impact=10, status="neutral")
    else:
        return HealthFactor(factor="Savings rate", impact=0, status="negative")


def calculate_budget_adherence(inputs: HealthInputs) -> float:
    """Percentage of budgeted categories not exceeding their budget, 0 without budgets"""
    if not inputs.budgets:
        return 0.0
    met = sum(1 for b in inputs.budgets if b.status != "over_budget")
    return met / len(inputs.budgets) * 100


def score_budget_adherence(adherence: float) -> HealthFactor:
    """Budget component (25 points max)"""
    points = _round_half_up(adherence / 100 * 25)
    if adherence >= 75:
        status = "positive"
    elif adherence >= 50:
        status = "neutral"
    else:
        status = "negative"
    return HealthFactor(factor="Budget adherence", impact=points, status=status)


def score_category_diversity(category_count: int) -> HealthFactor:
    """Diversity component (20 points max), saturating at 8 categories"""
    diversity = min(category_count, DIVERSITY_TARGET)
    points = _round_half_up(diversity / DIVERSITY_TARGET * 20)
    status = "positive" if diversity >= 5 else "neutral"
    return HealthFactor(factor="Expense categorization", impact=points, status=status)


def score_income_presence(total_income: float) -> HealthFactor:
    """Income component: flat 25 points when any income was recorded"""
    if total_income > 0:
        return HealthFactor(factor="Income stability", impact=25, status="positive")
    return HealthFactor(factor="Income stability", impact=0, status="negative")


def get_health_grade(score: int) -> str:
    """Letter grade, lower bounds inclusive"""
    if score >= 90:
        return "A+"
    elif score >= 80:
        return "A"
    elif score >= 70:
        return "B"
    elif score >= 60:
        return "C"
    elif score >= 50:
        return "D"
    return "F"


def generate_health_recommendations(score: int, factors: List[HealthFactor]) -> List[HealthRecommendation]:
    if score < 50:
        return [
            HealthRecommendation(
                priority="high",
                message="Focus on building emergency savings",
                action="Aim to save at least 10% of your income",
            )
        ]

    negative = [f for f in factors if f.status == "negative"]
    if not negative:
        return []

    weakest = min(negative, key=lambda f: f.impact)
    return [
        HealthRecommendation(
            priority="medium",
            message=f"Improve your {weakest.factor.lower()}",
            action=_FACTOR_ACTIONS.get(weakest.factor, "This will significantly boost your financial health score"),
        )
    ]


def calculate_health_score(inputs: HealthInputs) -> HealthScore:
    """
    Combine the four components into a 0-100 score.

    Example:
        income 5000, expenses 3000 (40% savings) → 30
        2/2 budgets met → 25, 6 categories → 15, income present → 25
        total 95 → "A+"
    """
    savings_rate = calculate_savings_rate(inputs.total_income, inputs.total_expenses)
    adherence = calculate_budget_adherence(inputs)

    factors = [
        score_savings_rate(savings_rate),
        score_budget_adherence(adherence),
        score_category_diversity(inputs.category_diversity),
        score_income_presence(inputs.total_income),
    ]
    score = max(0, min(sum(f.impact for f in factors), 100))

    return HealthScore(
        overall_score=score,
        grade=get_health_grade(score),
        factors=factors,
        recommendations=generate_health_recommendations(score, factors),
        metrics={
            "savings_rate": round(savings_rate, 2),
            "budget_adherence": round(adherence, 2),
            "category_diversity": inputs.category_diversity,
            "total_income": round(inputs.total_income, 2),
            "total_expenses": round(inputs.total_expenses, 2),
        },
    )


def analyze_health(aggregator: Aggregator) -> HealthScore:
    window = aggregator.trailing_months(HEALTH_WINDOW_MONTHS)
    inputs = HealthInputs(
        total_income=aggregator.kind_total(INCOME, window),
        total_expenses=aggregator.kind_total(EXPENSE, window),
        category_diversity=aggregator.distinct_categories(EXPENSE, window),
        budgets=aggregator.budget_status(month_label(aggregator.as_of)),
    )
    return calculate_health_score(inputs)
