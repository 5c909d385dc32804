"""Async yfinance client: one year of daily closes per call, bounded and retried."""

import asyncio
import logging
import os
import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

import yfinance as yf
from requests.exceptions import HTTPError

from swing_mcp.models import PricePoint
from swing_mcp.utils.series import normalize_series, standardize_history
from swing_mcp.utils.validators import HistoryParams

logger = logging.getLogger(__name__)

# Downloads run in threads; the semaphore keeps callers from queueing unbounded work
_max_workers = int(os.environ.get("YF_MAX_WORKERS", "4"))
_executor = ThreadPoolExecutor(max_workers=_max_workers, thread_name_prefix="yf-download")
_download_slots = asyncio.Semaphore(_max_workers)

_max_retries = int(os.environ.get("YF_MAX_RETRIES", "3"))
_base_delay = float(os.environ.get("YF_BASE_DELAY", "1.0"))  # seconds
_max_delay = float(os.environ.get("YF_MAX_DELAY", "30.0"))  # seconds

_TRANSIENT_MESSAGES = ("rate limit", "too many requests", "connection", "timeout", "temporar")

shutdown_event = asyncio.Event()


class ServerShuttingDownError(Exception):
    """Raised when server is shutting down."""

    pass


class DataUnavailableError(Exception):
    """Raised when no usable price history can be produced for a request."""

    pass


class YFinanceRetryError(DataUnavailableError):
    """Raised when a transient failure outlasts every retry."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


def _is_transient(error: Exception) -> bool:
    """Rate limiting, upstream 5xx and network hiccups get another attempt."""
    response = getattr(error, "response", None)
    if isinstance(error, HTTPError) and response is not None:
        status = response.status_code
        return status == 429 or 500 <= status < 600
    message = str(error).lower()
    return any(fragment in message for fragment in _TRANSIENT_MESSAGES)


def _backoff(attempt: int) -> float:
    """Delay before retrying after the given 0-based attempt, +/-25% jitter."""
    delay = _base_delay * (2**attempt)
    delay += delay * 0.25 * (2 * random.random() - 1)
    return min(delay, _max_delay)


@dataclass
class DownloadRecord:
    """Attempts made for one year download, reported as price provenance."""

    attempts: int = 0
    waited_s: float = 0.0
    errors: list[str] = field(default_factory=list)

    def to_provenance(self) -> dict[str, Any]:
        prov: dict[str, Any] = {
            "source": "yfinance",
            "attempts": self.attempts,
            "total_backoff_seconds": round(self.waited_s, 2),
        }
        if self.errors:
            prov["retry_errors"] = self.errors[-3:]
        return prov


def _download_points(params: HistoryParams) -> list[PricePoint]:
    df = yf.download(**params.to_yf_kwargs())
    if df is None or df.empty:
        raise DataUnavailableError(f"No data returned for {params.ticker} in {params.year}")
    points = normalize_series(standardize_history(df))
    if not points:
        raise DataUnavailableError(f"Malformed price data for {params.ticker} in {params.year}")
    return points


async def fetch_history_with_provenance(
    params: HistoryParams,
) -> tuple[list[PricePoint], dict[str, Any]]:
    """
    Fetch one calendar year of daily closes.

    The series is standardized and normalized (filtered, de-duplicated,
    sorted) before it is returned. Transient failures are retried with
    exponential backoff up to YF_MAX_RETRIES times; anything else fails
    the request at once.

    Returns:
        Tuple of (ascending PricePoints, provenance dict)

    Raises:
        ServerShuttingDownError: If server is shutting down
        DataUnavailableError: If no usable data could be produced
            (YFinanceRetryError when retries were exhausted)
    """
    label = f"{params.ticker}/{params.year}"
    record = DownloadRecord()
    loop = asyncio.get_running_loop()

    async with _download_slots:
        while True:
            if shutdown_event.is_set():
                raise ServerShuttingDownError("Server is shutting down")

            record.attempts += 1
            try:
                points = await loop.run_in_executor(_executor, _download_points, params)
            except DataUnavailableError:
                raise
            except Exception as e:
                if not _is_transient(e):
                    raise DataUnavailableError(f"Failed to fetch data for {label}: {e}") from e

                record.errors.append(type(e).__name__)
                if record.attempts > _max_retries:
                    logger.warning(
                        f"fetch_history({label}): giving up after {record.attempts} attempts: {e}"
                    )
                    raise YFinanceRetryError(
                        f"Failed after {record.attempts} attempts: {e}", record.attempts
                    ) from e

                delay = _backoff(record.attempts - 1)
                record.waited_s += delay
                logger.info(
                    f"fetch_history({label}): attempt {record.attempts} failed ({e}); "
                    f"retrying in {delay:.1f}s"
                )
                await asyncio.sleep(delay)
                continue

            return points, record.to_provenance()


async def shutdown_executor() -> None:
    """Stop accepting downloads and drop queued ones."""
    shutdown_event.set()
    _executor.shutdown(wait=False, cancel_futures=True)
