"""Prometheus metrics for report outcomes, section failures, latency and caching"""

from prometheus_client import Counter, Histogram

# Report metrics
report_counter = Counter(
    "fintrack_analytics_reports_total",
    "Total analytics reports generated",
    ["outcome"],  # complete | partial
)

section_failure_counter = Counter(
    "fintrack_analytics_section_failures_total",
    "Analytics sections that failed and were returned as null",
    ["section", "reason"],  # reason: error | timeout
)

section_duration_histogram = Histogram(
    "fintrack_analytics_section_duration_seconds",
    "Time spent computing one analytics section",
    ["section"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

# Cache metrics
cache_lookup_counter = Counter(
    "fintrack_analytics_cache_lookups_total",
    "Report cache lookups",
    ["result"],  # hit | miss
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_report(failed_sections: list[str]) -> None:
    """Count a finished report as complete or partial"""
    outcome = "partial" if failed_sections else "complete"
    report_counter.labels(outcome=outcome).inc()


def record_section_failure(section: str, timed_out: bool) -> None:
    reason = "timeout" if timed_out else "error"
    section_failure_counter.labels(section=section, reason=reason).inc()
