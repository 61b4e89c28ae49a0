"""Anomaly detection - z-score flagging of recent expenses against category baselines"""

import statistics
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from fintrack_analytics.domain.aggregator import Aggregator
from fintrack_analytics.domain.models import (
    AnomalyRecord,
    AnomalyReport,
    CategoryBaseline,
    Transaction,
)

BASELINE_WINDOW_MONTHS = 6
RECENT_WINDOW_DAYS = 30
MIN_BASELINE_SAMPLES = 5
Z_SCORE_THRESHOLD = 2.0
MAX_RESULTS = 10


def build_baselines(
    transactions: List[Transaction],
    min_samples: int = MIN_BASELINE_SAMPLES,
) -> Dict[str, CategoryBaseline]:
    """
    Mean and sample standard deviation of expense amounts per category.

    Categories with fewer than `min_samples` transactions get no baseline, so
    their transactions are never flagged.
    """
    amounts: Dict[str, List[float]] = defaultdict(list)
    for txn in transactions:
        amounts[txn.category].append(txn.amount)

    return {
        category: CategoryBaseline(
            category=category,
            mean=statistics.fmean(values),
            std=statistics.stdev(values),
            sample_count=len(values),
        )
        for category, values in amounts.items()
        if len(values) >= max(min_samples, 2)
    }


def classify_severity(z_score: float) -> str:
    if z_score > 3:
        return "high"
    elif z_score > 2.5:
        return "medium"
    return "low"


def score_transaction(
    txn: Transaction,
    baseline: CategoryBaseline,
    z_threshold: float = Z_SCORE_THRESHOLD,
) -> Optional[Tuple[float, AnomalyRecord]]:
    """Return (exact z, record) when the transaction deviates more than z_threshold"""
    if baseline.std == 0:
        return None

    z_score = abs(txn.amount - baseline.mean) / baseline.std
    if z_score <= z_threshold:
        return None

    deviation = (txn.amount - baseline.mean) / baseline.mean * 100
    record = AnomalyRecord(
        transaction_id=txn.transaction_id,
        date=txn.date,
        category=txn.category,
        description=txn.description,
        amount=round(txn.amount, 2),
        avg_amount=round(baseline.mean, 2),
        z_score=round(z_score, 2),
        severity=classify_severity(z_score),
        deviation_percentage=f"{deviation:+.1f}",
    )
    return z_score, record


def detect_anomalies(
    baselines: Dict[str, CategoryBaseline],
    recent: List[Transaction],
    z_threshold: float = Z_SCORE_THRESHOLD,
    max_results: int = MAX_RESULTS,
) -> AnomalyReport:
    flagged = []
    for txn in recent:
        baseline = baselines.get(txn.category)
        if baseline is None:
            continue
        scored = score_transaction(txn, baseline, z_threshold)
        if scored is not None:
            flagged.append(scored)

    flagged.sort(key=lambda item: (-item[0], item[1].transaction_id))
    high_count = sum(1 for _, record in flagged if record.severity == "high")

    return AnomalyReport(
        unusual_transactions=[record for _, record in flagged[:max_results]],
        summary={"total": len(flagged), "high_severity_count": high_count},
    )


def analyze_anomalies(
    aggregator: Aggregator,
    min_samples: int = MIN_BASELINE_SAMPLES,
    z_threshold: float = Z_SCORE_THRESHOLD,
    max_results: int = MAX_RESULTS,
) -> AnomalyReport:
    history = aggregator.raw_expenses(aggregator.trailing_months(BASELINE_WINDOW_MONTHS))
    recent_start = aggregator.trailing_days(RECENT_WINDOW_DAYS).start
    recent = [t for t in history if t.date >= recent_start]

    baselines = build_baselines(history, min_samples)
    return detect_anomalies(baselines, recent, z_threshold, max_results)
