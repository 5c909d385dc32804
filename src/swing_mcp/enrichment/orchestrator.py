"""Bounded-concurrency enrichment of swings with causal explanations."""

import asyncio
import logging
import os
from collections.abc import AsyncIterator, Sequence
from contextlib import aclosing
from dataclasses import dataclass
from enum import Enum

from swing_mcp.enrichment.providers import ExplanationProvider
from swing_mcp.models import MovementEvent
from swing_mcp.utils.sanitize import MAX_CONTEXT_WORDS, sanitize_text, truncate_words

logger = logging.getLogger(__name__)

ENRICH_CAP = int(os.environ.get("ENRICH_CAP", "15"))
# 0 means "same as cap"
ENRICH_MAX_CONCURRENCY = int(os.environ.get("ENRICH_MAX_CONCURRENCY", "0"))
ENRICH_MODE = os.environ.get("ENRICH_MODE", "per_event").lower()
VALID_MODES = {"per_event", "batch"}

FAILED_CONTEXT = "Event research failed for this period."
NO_DATA_CONTEXT = "No specific event data identified for this movement."
LIMITED_CONTEXT = "Detailed context limited to first {cap} swings."

# Raw provider text is bounded before word truncation
_MAX_RAW_CHARS = 4000


class ContextStatus(str, Enum):
    """Terminal state of one swing's enrichment."""

    FULFILLED = "fulfilled"
    FAILED = "failed"
    NO_DATA = "no_data"
    LIMITED = "limited"


@dataclass(frozen=True)
class ContextUpdate:
    """One settled swing: the text to merge at `index` and the count still pending."""

    index: int
    context: str
    status: ContextStatus
    outstanding: int


@dataclass
class EnrichmentProgress:
    """Live counters for a single enrich() run."""

    submitted: int = 0
    outstanding: int = 0
    fulfilled: int = 0
    failed: int = 0

    @property
    def complete(self) -> bool:
        return self.outstanding == 0


def resolve_context(raw: object) -> tuple[str, ContextStatus]:
    """
    Map a raw provider response to the context text to store.

    Non-string or empty responses fall back to the no-data note. Valid text is
    sanitized and capped at MAX_CONTEXT_WORDS regardless of what the provider
    was asked for.
    """
    if not isinstance(raw, str):
        return NO_DATA_CONTEXT, ContextStatus.NO_DATA
    text = sanitize_text(raw, max_length=_MAX_RAW_CHARS)
    if not text:
        return NO_DATA_CONTEXT, ContextStatus.NO_DATA
    return truncate_words(text, MAX_CONTEXT_WORDS), ContextStatus.FULFILLED


class EnrichmentOrchestrator:
    """
    Attach explanations to swings without blocking on slow or failing providers.

    Only the first `cap` swings are submitted, one explanation attempt each,
    no retries. Later swings get a fixed "limited" note. Results arrive in
    completion order and are addressed by index, so consumers can merge them
    into a pre-allocated movements list in any order.
    """

    def __init__(
        self,
        provider: ExplanationProvider,
        cap: int = ENRICH_CAP,
        max_concurrency: int | None = None,
        mode: str = ENRICH_MODE,
    ) -> None:
        if cap < 0:
            raise ValueError(f"Invalid cap {cap}. Must be >= 0.")
        mode = mode.lower().strip()
        if mode not in VALID_MODES:
            raise ValueError(f"Invalid mode '{mode}'. Must be one of: {VALID_MODES}")

        self.provider = provider
        self.cap = cap
        self.mode = mode
        self.max_concurrency = max(1, max_concurrency or ENRICH_MAX_CONCURRENCY or cap)
        self.progress = EnrichmentProgress()

    @property
    def outstanding(self) -> int:
        return self.progress.outstanding

    async def enrich(
        self, ticker: str, events: Sequence[MovementEvent]
    ) -> AsyncIterator[ContextUpdate]:
        """
        Explain swings and yield one ContextUpdate per swing as each settles.

        Swings past the cap are yielded first, without a request. The
        outstanding count starts at min(cap, len(events)) and drops by one
        per settled request, success or failure.

        Args:
            ticker: Ticker symbol passed to the provider
            events: Swings in segmentation order

        Yields:
            ContextUpdate for every index in `events`, exactly once each
        """
        submitted = list(events[: self.cap])
        self.progress = EnrichmentProgress(submitted=len(submitted), outstanding=len(submitted))

        limited = LIMITED_CONTEXT.format(cap=self.cap)
        for index in range(len(submitted), len(events)):
            yield ContextUpdate(index, limited, ContextStatus.LIMITED, self.progress.outstanding)

        if not submitted:
            return

        logger.info(
            f"enrich({ticker}): submitting {len(submitted)} of {len(events)} swings "
            f"(mode={self.mode}, max_concurrency={self.max_concurrency})"
        )

        if self.mode == "batch":
            settlements = self._run_batch(ticker, submitted)
        else:
            settlements = self._run_per_event(ticker, submitted)

        async with aclosing(settlements):
            async for index, context, status in settlements:
                self._settle(status)
                yield ContextUpdate(index, context, status, self.progress.outstanding)

        logger.info(
            f"enrich({ticker}): done, {self.progress.fulfilled} explained, "
            f"{self.progress.failed} fell back"
        )

    def _settle(self, status: ContextStatus) -> None:
        self.progress.outstanding -= 1
        if status == ContextStatus.FULFILLED:
            self.progress.fulfilled += 1
        else:
            self.progress.failed += 1

    async def _explain_one(
        self, ticker: str, index: int, event: MovementEvent
    ) -> tuple[str, ContextStatus]:
        try:
            raw = await self.provider.explain(ticker, event)
        except Exception as e:
            logger.warning(f"enrich({ticker}): swing {index} research failed: {e}")
            return FAILED_CONTEXT, ContextStatus.FAILED
        return resolve_context(raw)

    async def _run_per_event(
        self, ticker: str, events: list[MovementEvent]
    ) -> AsyncIterator[tuple[int, str, ContextStatus]]:
        """One task per swing; a single loop drains their results from a queue."""
        queue: asyncio.Queue[tuple[int, str, ContextStatus]] = asyncio.Queue()
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def worker(index: int, event: MovementEvent) -> None:
            async with semaphore:
                context, status = await self._explain_one(ticker, index, event)
            queue.put_nowait((index, context, status))

        tasks = [asyncio.create_task(worker(i, e)) for i, e in enumerate(events)]
        try:
            for _ in range(len(tasks)):
                yield await queue.get()
        finally:
            # Consumer gone (run superseded or closed early): stop pending work
            for task in tasks:
                if not task.done():
                    task.cancel()

    async def _run_batch(
        self, ticker: str, events: list[MovementEvent]
    ) -> AsyncIterator[tuple[int, str, ContextStatus]]:
        """Single batched request; short or malformed output fails per index."""
        try:
            results = await self.provider.explain_all(ticker, events)
        except Exception as e:
            logger.warning(f"enrich({ticker}): batched research failed: {e}")
            for index in range(len(events)):
                yield index, FAILED_CONTEXT, ContextStatus.FAILED
            return

        if not isinstance(results, (list, tuple)):
            logger.warning(
                f"enrich({ticker}): batched research returned {type(results).__name__}"
            )
            results = []

        for index in range(len(events)):
            raw = results[index] if index < len(results) else None
            context, status = resolve_context(raw)
            yield index, context, status
