"""Swing explanation providers and the enrichment orchestrator."""

from swing_mcp.enrichment.orchestrator import (
    ENRICH_CAP,
    FAILED_CONTEXT,
    LIMITED_CONTEXT,
    NO_DATA_CONTEXT,
    ContextStatus,
    ContextUpdate,
    EnrichmentOrchestrator,
    EnrichmentProgress,
    resolve_context,
)
from swing_mcp.enrichment.providers import (
    BedrockExplanationProvider,
    ExplanationError,
    ExplanationProvider,
    get_default_provider,
    parse_batch_response,
    shutdown_provider_executor,
)

__all__ = [
    # Orchestrator
    "ENRICH_CAP",
    "FAILED_CONTEXT",
    "LIMITED_CONTEXT",
    "NO_DATA_CONTEXT",
    "ContextStatus",
    "ContextUpdate",
    "EnrichmentOrchestrator",
    "EnrichmentProgress",
    "resolve_context",
    # Providers
    "BedrockExplanationProvider",
    "ExplanationError",
    "ExplanationProvider",
    "get_default_provider",
    "parse_batch_response",
    "shutdown_provider_executor",
]
