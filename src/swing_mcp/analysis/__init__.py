"""Swing detection and report statistics."""

from swing_mcp.analysis.segmenter import InsufficientDataError, segment
from swing_mcp.analysis.summary import summarize

__all__ = [
    "InsufficientDataError",
    "segment",
    "summarize",
]
