"""Response envelope for swing tools: version block, price/context provenance, errors."""

from datetime import datetime, timezone
from enum import Enum
from time import perf_counter
from typing import Any

from swing_mcp import SCHEMA_VERSION, SERVER_VERSION


class ErrorType(str, Enum):
    """Run-fatal failures a tool reports instead of a result."""

    INVALID_PARAMETERS = "invalid_parameters"
    DATA_UNAVAILABLE = "data_unavailable"
    INSUFFICIENT_DATA = "insufficient_data"
    ANALYSIS_NOT_FOUND = "analysis_not_found"


def response_meta(tool: str, started: float | None = None) -> dict[str, Any]:
    """
    Version block attached to every response.

    Args:
        tool: Tool that produced the response
        started: perf_counter() reading taken when the tool started
    """
    meta: dict[str, Any] = {
        "tool": tool,
        "server_version": SERVER_VERSION,
        "schema_version": SCHEMA_VERSION,
    }
    if started is not None:
        meta["duration_ms"] = round((perf_counter() - started) * 1000, 1)
    return meta


def price_provenance(
    resource_uri: str,
    download: dict[str, Any] | None = None,
    cached_at: str | None = None,
) -> dict[str, Any]:
    """
    Where a run's price series came from.

    A series read back from the cache reports when it was stored; a fresh
    download reports its attempt record and the adjustment applied.
    """
    if download is None:
        return {"source": "cache", "as_of": cached_at, "resource_uri": resource_uri}
    return {
        "source": "yfinance",
        **download,
        "as_of": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "price_adjustment": "auto_adjust",
        "resource_uri": resource_uri,
    }


def context_provenance(provider: object, mode: str, cap: int) -> dict[str, Any]:
    """Which provider explains swings, how, and for how many."""
    return {"source": type(provider).__name__, "mode": mode, "cap": cap}


def error_response(
    error_type: ErrorType, message: str, **ids: str | None
) -> dict[str, Any]:
    """
    Error payload returned in place of a result.

    Identifying fields (ticker, run_id) are included only when set.
    """
    response: dict[str, Any] = {
        "error": True,
        "error_type": ErrorType(error_type).value,
        "message": message,
        "meta": response_meta("error"),
    }
    response.update({key: value for key, value in ids.items() if value is not None})
    return response
