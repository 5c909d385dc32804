"""Swing Analysis MCP Server using FastMCP."""

import asyncio
import json
import logging
import os

from fastmcp import FastMCP

from swing_mcp import SCHEMA_VERSION, SERVER_VERSION
from swing_mcp.data.yfinance_client import shutdown_executor
from swing_mcp.enrichment.providers import shutdown_provider_executor
from swing_mcp.prompts.templates import get_prompt
from swing_mcp.resources.price_resource import ResourceNotFoundError, read_price_resource
from swing_mcp.tools import analyze_swings, swing_analysis_status

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
logger = logging.getLogger(__name__)

# Create FastMCP server instance
mcp = FastMCP(
    name="swing-analysis",
)


# ============================================================================
# TOOLS
# ============================================================================


@mcp.tool(name="analyze_swings")
async def analyze_swings_tool(
    ticker: str,
    year: int,
    threshold: float = 5.0,
    include_data: bool = False,
) -> str:
    """
    Find every price swing of at least `threshold` percent in a year of daily closes.

    Swings are measured from a floating reference: once the close moves
    `threshold`% away from the reference, a swing is recorded and that close
    becomes the new reference. Thresholds below 2% are raised to 2%.

    The segmentation is returned immediately. Causal context for each swing
    (first 15 swings only) is researched in the background; call
    get_swing_analysis with the returned run_id to pick it up.

    Args:
        ticker: Ticker symbol (e.g., BTC-USD, ETH-USD, AAPL)
        year: Calendar year (e.g., 2024)
        threshold: Swing threshold in percent (default: 5, minimum: 2)
        include_data: Include the full daily price series (default: false)

    Returns:
        JSON with run_id, outstanding context count, summary and swing timeline
    """
    result = await analyze_swings(
        ticker=ticker,
        year=year,
        threshold_pct=threshold,
        include_data=include_data,
    )
    return json.dumps(result, indent=2, default=str)


@mcp.tool(name="get_swing_analysis")
async def get_swing_analysis_tool(
    run_id: str | None = None,
    wait_seconds: float = 0.0,
    include_data: bool = False,
) -> str:
    """
    Get the current state of a swing analysis, including any context found so far.

    `outstanding` is the number of swings still being researched; when
    `enrichment_complete` is true every swing has its final context.

    Args:
        run_id: Run id from analyze_swings (default: latest run)
        wait_seconds: Wait up to this many seconds for research to finish (default: 0)
        include_data: Include the full daily price series (default: false)

    Returns:
        JSON snapshot of the analysis
    """
    result = await swing_analysis_status(
        run_id=run_id,
        wait_seconds=max(0.0, min(wait_seconds, 60.0)),
        include_data=include_data,
    )
    return json.dumps(result, indent=2, default=str)


# ============================================================================
# RESOURCES
# ============================================================================


@mcp.resource("price://{ticker}/{year}/1d")
def get_cached_price_data(ticker: str, year: str) -> str:
    """
    Get cached daily closes as CSV.

    Must call analyze_swings first to populate the cache.

    Args:
        ticker: Ticker symbol
        year: Calendar year

    Returns:
        CSV data with date,price columns
    """
    try:
        csv_text, _ = read_price_resource(ticker, year)
        return csv_text
    except ResourceNotFoundError:
        return f"Resource not cached. Call analyze_swings('{ticker}', {year}) first."
    except ValueError as e:
        return f"Error: {e}"


# ============================================================================
# PROMPTS
# ============================================================================


@mcp.prompt
def swing_report(ticker: str, year: str, threshold: str = "5") -> str:
    """Generate a swing timeline report for a ticker and year."""
    result = get_prompt("swing_report", {"ticker": ticker, "year": year, "threshold": threshold})
    if result:
        return result["messages"][0]["content"]
    return f"Analyze {ticker} swings in {year} using the analyze_swings tool."


# ============================================================================
# ENTRY POINT
# ============================================================================


def main() -> None:
    """Run the MCP server."""
    logger.info(f"Starting Swing Analysis MCP Server v{SERVER_VERSION} (schema v{SCHEMA_VERSION})")
    try:
        mcp.run()
    finally:
        asyncio.run(shutdown_executor())
        shutdown_provider_executor()


if __name__ == "__main__":
    main()
