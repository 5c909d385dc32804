"""Data layer for fetching and caching price history."""

from swing_mcp.data.cache import PriceCache, points_to_csv, price_cache
from swing_mcp.data.yfinance_client import (
    DataUnavailableError,
    DownloadRecord,
    ServerShuttingDownError,
    YFinanceRetryError,
    fetch_history_with_provenance,
    shutdown_executor,
)

__all__ = [
    # Cache
    "PriceCache",
    "points_to_csv",
    "price_cache",
    # yfinance
    "DataUnavailableError",
    "DownloadRecord",
    "ServerShuttingDownError",
    "YFinanceRetryError",
    "fetch_history_with_provenance",
    "shutdown_executor",
]
