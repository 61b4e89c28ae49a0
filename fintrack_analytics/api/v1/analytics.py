"""GET /v1/analytics/{user_id} - Financial analytics report endpoint"""

import asyncio
import logging
import time
from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from fintrack_analytics.api.v1.schemas import AnalyticsResponse
from fintrack_analytics.api.dependencies import get_analytics_engine, get_request_id
from fintrack_analytics.config import settings
from fintrack_analytics.domain.exceptions import OrchestrationError
from fintrack_analytics.domain.orchestrator import AnalyticsEngine
from fintrack_analytics.infrastructure.observability.logging import log_report
from fintrack_analytics.infrastructure.observability.metrics import record_report

router = APIRouter()


@router.get("/analytics/{user_id}", response_model=AnalyticsResponse)
async def get_analytics(
    user_id: str,
    request: Request,
    period: str = Query("6months", description="Trailing window: 6months or 1year"),
    engine: AnalyticsEngine = Depends(get_analytics_engine),
):
    """
    Build the analytics report for a user.

    Flow:
    1. Start the report (five sections computed concurrently)
    2. Cancel it if the client disconnects while waiting
    3. Return every section that succeeded; failed sections are null

    Unsupported periods fall back to "6months" instead of failing.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    report_task = asyncio.create_task(engine.build_report(user_id, period))
    try:
        while not report_task.done():
            await asyncio.wait({report_task}, timeout=settings.disconnect_poll_seconds)
            if not report_task.done() and await request.is_disconnected():
                report_task.cancel()
                # Let every section unwind before answering
                await asyncio.wait({report_task})
                logging.warning("Client disconnected, report cancelled", extra={"request_id": request_id})
                raise HTTPException(status_code=499, detail="Client closed request")

        outcome = report_task.result()

    except asyncio.CancelledError:
        report_task.cancel()
        raise

    except OrchestrationError as e:
        logging.error(f"Orchestration error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    # Record metrics and logs
    duration_ms = (time.time() - start_time) * 1000
    if not outcome.cache_hit:
        record_report(outcome.failed_sections)
    log_report(request_id, user_id, outcome.report.period, outcome.failed_sections, outcome.cache_hit, duration_ms)

    return AnalyticsResponse.model_validate(asdict(outcome.report))
