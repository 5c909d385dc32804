"""Utility modules."""

from swing_mcp.utils.responses import (
    ErrorType,
    context_provenance,
    error_response,
    price_provenance,
    response_meta,
)
from swing_mcp.utils.sanitize import sanitize_text, truncate_words
from swing_mcp.utils.series import normalize_series, standardize_history
from swing_mcp.utils.validators import AnalysisParams, HistoryParams, clamp_threshold

__all__ = [
    "ErrorType",
    "context_provenance",
    "error_response",
    "price_provenance",
    "response_meta",
    "sanitize_text",
    "truncate_words",
    "normalize_series",
    "standardize_history",
    "AnalysisParams",
    "HistoryParams",
    "clamp_threshold",
]
