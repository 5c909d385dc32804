"""Swing analysis tools."""

from swing_mcp.tools.analyze import (
    analyze_swings,
    run_enrichment,
    swing_analysis_status,
    wait_for_enrichment,
)

__all__ = [
    "analyze_swings",
    "run_enrichment",
    "swing_analysis_status",
    "wait_for_enrichment",
]
