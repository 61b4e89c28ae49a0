"""Analytics orchestrator - runs the five analyzers concurrently and assembles one report"""

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from functools import partial
from typing import Any, Callable, Dict, List, Optional

from fintrack_analytics.config import settings
from fintrack_analytics.domain.aggregator import Aggregator, resolve_period
from fintrack_analytics.domain.anomalies import analyze_anomalies
from fintrack_analytics.domain.cache import AnalyticsCache, CacheKey
from fintrack_analytics.domain.cash_flow import analyze_cash_flow
from fintrack_analytics.domain.exceptions import OrchestrationError
from fintrack_analytics.domain.health import analyze_health
from fintrack_analytics.domain.ledger import LedgerStore
from fintrack_analytics.domain.models import AnalyticsReport
from fintrack_analytics.domain.patterns import analyze_spending_patterns
from fintrack_analytics.domain.trends import analyze_trends
from fintrack_analytics.infrastructure.observability.metrics import (
    cache_lookup_counter,
    record_section_failure,
    section_duration_histogram,
)

SECTIONS = (
    "spending_patterns",
    "predictions",
    "health_score",
    "anomalies",
    "cash_flow_projection",
)


@dataclass
class ReportOutcome:
    report: AnalyticsReport
    failed_sections: List[str]
    cache_hit: bool


class AnalyticsEngine:
    """Stateless analytics service over a ledger store"""

    def __init__(
        self,
        store: LedgerStore,
        cache: Optional[AnalyticsCache] = None,
        task_timeout: Optional[float] = None,
        prediction_threshold: Optional[float] = None,
        projection_months: Optional[int] = None,
        projection_jitter: Optional[float] = None,
    ):
        self.store = store
        self.cache = cache
        self.task_timeout = task_timeout if task_timeout is not None else settings.analytics_task_timeout_seconds
        self.prediction_threshold = (
            prediction_threshold if prediction_threshold is not None else settings.prediction_warning_threshold
        )
        self.projection_months = projection_months if projection_months is not None else settings.projection_months
        self.projection_jitter = projection_jitter if projection_jitter is not None else settings.projection_jitter

    async def generate_report(
        self,
        user_id: str,
        period: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> AnalyticsReport:
        outcome = await self.build_report(user_id, period, as_of)
        return outcome.report

    async def build_report(
        self,
        user_id: str,
        period: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> ReportOutcome:
        """
        Compute every section concurrently with per-section failure isolation.

        Flow:
        1. Resolve the period (unsupported values become "6months")
        2. Serve from cache when the ledger version is unchanged
        3. Run the five analyzers in worker threads, each under a deadline
        4. Convert any section failure into a None section
        5. Cache the report only if every section succeeded

        Cancelling this coroutine cancels every in-flight section.

        Raises:
            OrchestrationError: if joining the section tasks fails unexpectedly
        """
        resolved_period = resolve_period(period)
        as_of = as_of or date.today()
        generated_at = datetime.now(timezone.utc)

        ledger_version = await self._ledger_version(user_id)
        cache_key = None
        if self.cache is not None and ledger_version is not None:
            cache_key = CacheKey(user_id, resolved_period, as_of, ledger_version)
            cached = self.cache.get(cache_key)
            if cached is not None:
                cache_lookup_counter.labels(result="hit").inc()
                return ReportOutcome(replace(cached, generated_at=generated_at), [], True)
            cache_lookup_counter.labels(result="miss").inc()

        aggregator = Aggregator(self.store, user_id, as_of)
        jobs: Dict[str, Callable[[], Any]] = {
            "spending_patterns": partial(analyze_spending_patterns, aggregator, resolved_period),
            "predictions": partial(analyze_trends, aggregator, self.prediction_threshold),
            "health_score": partial(analyze_health, aggregator),
            "anomalies": partial(
                analyze_anomalies,
                aggregator,
                settings.anomaly_min_samples,
                settings.anomaly_z_threshold,
                settings.anomaly_max_results,
            ),
            "cash_flow_projection": partial(
                analyze_cash_flow,
                aggregator,
                self.projection_months,
                self.projection_jitter,
                ledger_version or "",
            ),
        }

        try:
            async with asyncio.TaskGroup() as group:
                tasks = {name: group.create_task(self._run_section(user_id, name, job)) for name, job in jobs.items()}
        except ExceptionGroup as e:
            raise OrchestrationError(f"Failed to join analytics sections: {e}") from e

        sections = {name: task.result() for name, task in tasks.items()}
        failed = [name for name in SECTIONS if sections[name] is None]

        report = AnalyticsReport(
            user_id=user_id,
            generated_at=generated_at,
            period=resolved_period,
            **sections,
        )

        if cache_key is not None and not failed:
            self.cache.put(cache_key, report)

        return ReportOutcome(report, failed, False)

    async def _ledger_version(self, user_id: str) -> Optional[str]:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.store.ledger_version, user_id),
                timeout=self.task_timeout,
            )
        except Exception as e:
            logging.warning(f"Ledger version unavailable, skipping cache: {e}", extra={"user_id": user_id})
            return None

    async def _run_section(self, user_id: str, name: str, job: Callable[[], Any]) -> Any:
        start_time = time.perf_counter()
        try:
            return await asyncio.wait_for(asyncio.to_thread(job), timeout=self.task_timeout)
        except TimeoutError:
            record_section_failure(name, timed_out=True)
            logging.error(
                f"Analytics section {name} timed out after {self.task_timeout}s",
                extra={"user_id": user_id, "section": name},
            )
            return None
        except Exception as e:
            record_section_failure(name, timed_out=False)
            logging.error(
                f"Analytics section {name} failed: {e}",
                extra={"user_id": user_id, "section": name},
            )
            return None
        finally:
            section_duration_histogram.labels(section=name).observe(time.perf_counter() - start_time)
