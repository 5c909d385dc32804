"""Price data resource handler."""

from swing_mcp.data.cache import price_cache
from swing_mcp.utils.validators import HistoryParams


class ResourceNotFoundError(Exception):
    """Resource not found in cache."""

    pass


def read_price_resource(ticker: str, year: int | str) -> tuple[str, str]:
    """
    Serve cached price data only. O(1), no transformation.

    Args:
        ticker: Ticker symbol
        year: Calendar year

    Returns:
        Tuple of (csv_text, mime_type)

    Raises:
        ResourceNotFoundError: If resource not in cache
        ValueError: If ticker/year are invalid
    """
    uri = HistoryParams(ticker=ticker, year=int(year)).to_uri()
    csv_text = price_cache.get_csv(uri)

    if csv_text is None:
        raise ResourceNotFoundError(f"Resource not cached. Call analyze_swings first: {uri}")

    return csv_text, "text/csv"
