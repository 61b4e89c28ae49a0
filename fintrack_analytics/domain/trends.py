"""Trend prediction - per-category linear regression forecast for next month"""

import statistics
from typing import Dict, List, Sequence

from fintrack_analytics.domain.aggregator import Aggregator
from fintrack_analytics.domain.models import (
    EXPENSE,
    CategoryPrediction,
    MonthlySeries,
    PredictionRecommendation,
    PredictionSummary,
)

MIN_SERIES_POINTS = 3
DEFAULT_WARNING_THRESHOLD = 200.0


def calculate_trend(values: Sequence[float]) -> float:
    """
    Ordinary least-squares slope of values against x = 1..n.

    slope = (n·Σxy − Σx·Σy) / (n·Σx² − (Σx)²), 0 when fewer than two points.
    """
    n = len(values)
    if n < 2:
        return 0.0

    sum_x = n * (n + 1) / 2
    sum_y = sum(values)
    sum_xy = sum((x + 1) * y for x, y in enumerate(values))
    sum_x2 = n * (n + 1) * (2 * n + 1) / 6

    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def calculate_confidence(values: Sequence[float]) -> str:
    """
    Forecast confidence from the coefficient of variation (population std / mean).

    Thresholds:
    - CV < 0.30: high
    - CV < 0.60: medium
    - otherwise, fewer than 3 points or zero mean: low
    """
    if len(values) < MIN_SERIES_POINTS:
        return "low"

    mean = statistics.fmean(values)
    if mean == 0:
        return "low"

    cv = statistics.pstdev(values) / mean
    if cv < 0.3:
        return "high"
    elif cv < 0.6:
        return "medium"
    else:
        return "low"


def trend_label(slope: float) -> str:
    if slope > 0:
        return "increasing"
    elif slope < 0:
        return "decreasing"
    return "stable"


def predict_category(values: Sequence[float]) -> CategoryPrediction:
    """Next-month forecast: mean plus one slope step, floored at zero"""
    slope = calculate_trend(values)
    forecast = max(0.0, statistics.fmean(values) + slope)

    return CategoryPrediction(
        predicted_amount=round(forecast, 2),
        confidence=calculate_confidence(values),
        trend=trend_label(slope),
    )


def generate_prediction_recommendations(
    predictions: Dict[str, CategoryPrediction],
    threshold: float = DEFAULT_WARNING_THRESHOLD,
) -> List[PredictionRecommendation]:
    return [
        PredictionRecommendation(
            type="warning",
            category=category,
            message=f"{category} spending is predicted to increase",
            action=f"Consider setting a budget limit for {category}",
        )
        for category, prediction in predictions.items()
        if prediction.trend == "increasing" and prediction.predicted_amount > threshold
    ]


def build_predictions(
    series_by_category: Dict[str, MonthlySeries],
    threshold: float = DEFAULT_WARNING_THRESHOLD,
) -> PredictionSummary:
    predictions: Dict[str, CategoryPrediction] = {}
    for category in sorted(series_by_category):
        values = series_by_category[category].values
        if len(values) < MIN_SERIES_POINTS:
            continue
        predictions[category] = predict_category(values)

    total = sum(p.predicted_amount for p in predictions.values())

    return PredictionSummary(
        next_month_predictions=predictions,
        total_predicted_spending=round(total, 2),
        recommendations=generate_prediction_recommendations(predictions, threshold),
    )


def analyze_trends(aggregator: Aggregator, threshold: float = DEFAULT_WARNING_THRESHOLD) -> PredictionSummary:
    series = aggregator.category_monthly_series(EXPENSE, months=12)
    return build_predictions(series, threshold)
