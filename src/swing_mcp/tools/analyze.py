"""Swing analysis tool: segment immediately, enrich in the background."""

import asyncio
import logging
from contextlib import aclosing
from time import perf_counter
from typing import Any

from swing_mcp.analysis import InsufficientDataError, segment, summarize
from swing_mcp.data.cache import price_cache
from swing_mcp.data.yfinance_client import (
    DataUnavailableError,
    ServerShuttingDownError,
    fetch_history_with_provenance,
)
from swing_mcp.enrichment import (
    ENRICH_CAP,
    EnrichmentOrchestrator,
    ExplanationProvider,
    get_default_provider,
)
from swing_mcp.enrichment.orchestrator import ENRICH_MODE
from swing_mcp.models import AnalysisResult, MovementEvent
from swing_mcp.store import AnalysisStore, analysis_store
from swing_mcp.utils.responses import (
    ErrorType,
    context_provenance,
    error_response,
    price_provenance,
    response_meta,
)
from swing_mcp.utils.validators import AnalysisParams

logger = logging.getLogger(__name__)


async def run_enrichment(
    store: AnalysisStore,
    run_id: str,
    ticker: str,
    orchestrator: EnrichmentOrchestrator,
    events: list[MovementEvent],
) -> None:
    """
    Drain the orchestrator's updates into the store for one run.

    Stops (and cancels outstanding requests) as soon as the run is superseded.
    """
    async with aclosing(orchestrator.enrich(ticker, events)) as updates:
        async for update in updates:
            if not store.is_current(run_id):
                logger.info(f"Run {run_id} superseded; abandoning enrichment")
                return
            store.apply_context(run_id, update.index, update.context)
            store.set_outstanding(run_id, update.outstanding)


async def wait_for_enrichment(
    run_id: str | None = None,
    store: AnalysisStore = analysis_store,
    timeout: float | None = None,
) -> bool:
    """
    Wait for a run's background enrichment to finish.

    Returns:
        True if enrichment is finished (or there was none), False on timeout
    """
    task = store.task(run_id)
    if task is None:
        return True
    done, _ = await asyncio.wait({task}, timeout=timeout)
    return task in done


async def analyze_swings(
    ticker: str,
    year: int,
    threshold_pct: float = 5.0,
    *,
    provider: ExplanationProvider | None = None,
    store: AnalysisStore = analysis_store,
    cap: int = ENRICH_CAP,
    mode: str = ENRICH_MODE,
    include_data: bool = True,
) -> dict[str, Any]:
    """
    Segment a ticker's daily closes for a year into swings and start enrichment.

    The segmented result is published and returned before any explanation
    request completes. Poll swing_analysis_status() to watch contexts fill in.

    Args:
        ticker: Ticker symbol (e.g., BTC-USD, AAPL)
        year: Calendar year
        threshold_pct: Swing threshold in percent (clamped to a 2% minimum)
        provider: Explanation provider (default: Bedrock)
        store: Result store to publish into
        cap: Maximum number of swings to explain
        mode: "per_event" (one request per swing) or "batch"
        include_data: Include the full price series in the response

    Returns:
        Dict with run_id, outstanding count, summary and the initial result
    """
    started = perf_counter()

    try:
        params = AnalysisParams(ticker=ticker, year=year, threshold_pct=threshold_pct)
        orchestrator = EnrichmentOrchestrator(
            provider if provider is not None else get_default_provider(),
            cap=cap,
            mode=mode,
        )
    except ValueError as e:
        return error_response(ErrorType.INVALID_PARAMETERS, str(e), ticker=ticker)

    history = params.history
    uri = history.to_uri()
    series = price_cache.get_points(uri)

    if series is not None:
        cache_meta = price_cache.get_metadata(uri) or {}
        price_source = price_provenance(uri, cached_at=cache_meta.get("stored_at"))
    else:
        try:
            series, download = await fetch_history_with_provenance(history)
        except (DataUnavailableError, ServerShuttingDownError) as e:
            return error_response(
                ErrorType.DATA_UNAVAILABLE,
                f"Failed to fetch accurate historical data for {params.ticker}: {e}",
                ticker=params.ticker,
            )
        uri = price_cache.store(history, series)
        price_source = price_provenance(uri, download=download)

    try:
        movements = segment(series, params.threshold_fraction)
    except InsufficientDataError as e:
        logger.info(f"analyze_swings({params.ticker}/{params.year}): {e}")
        return error_response(
            ErrorType.INSUFFICIENT_DATA,
            f"Insufficient data found for {params.ticker} in {params.year}.",
            ticker=params.ticker,
        )

    result = AnalysisResult(
        ticker=params.ticker,
        year=params.year,
        target_percentage=params.threshold_pct,
        data=series,
        movements=movements,
    )
    run_id = store.publish(
        result,
        outstanding=min(orchestrator.cap, len(movements)),
        summary=summarize(result),
        resource_uri=uri,
    )
    logger.info(
        f"analyze_swings({params.ticker}/{params.year}): {len(series)} points, "
        f"{len(movements)} swings at {params.threshold_pct}% (run {run_id})"
    )

    if movements:
        task = asyncio.create_task(
            run_enrichment(store, run_id, params.ticker, orchestrator, movements),
            name=f"enrich-{run_id}",
        )
        store.attach_task(run_id, task)

    snapshot = store.snapshot(run_id, include_data=include_data) or {}

    return {
        "meta": response_meta("analyze_swings", started),
        "data_provenance": {
            "price": price_source,
            "context": context_provenance(
                orchestrator.provider, orchestrator.mode, orchestrator.cap
            ),
        },
        **snapshot,
    }


async def swing_analysis_status(
    run_id: str | None = None,
    *,
    store: AnalysisStore = analysis_store,
    wait_seconds: float = 0.0,
    include_data: bool = False,
) -> dict[str, Any]:
    """
    Current snapshot of an analysis run.

    Args:
        run_id: Run to report on (default: the current run)
        store: Result store to read from
        wait_seconds: Wait up to this long for enrichment to finish first
        include_data: Include the full price series

    Returns:
        Snapshot dict, or an analysis_not_found error response
    """
    started = perf_counter()

    if store.snapshot(run_id, include_data=False) is None:
        return error_response(
            ErrorType.ANALYSIS_NOT_FOUND,
            "No current analysis for this run. Call analyze_swings first.",
            run_id=run_id,
        )

    if wait_seconds > 0:
        await wait_for_enrichment(run_id, store, timeout=wait_seconds)

    snapshot = store.snapshot(run_id, include_data=include_data)
    if snapshot is None:
        # Superseded while waiting
        return error_response(
            ErrorType.ANALYSIS_NOT_FOUND,
            "Analysis was superseded by a newer run.",
            run_id=run_id,
        )

    return {"meta": response_meta("swing_analysis_status", started), **snapshot}
