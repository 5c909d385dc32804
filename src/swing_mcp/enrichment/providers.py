"""Explanation providers for swing events."""

import asyncio
import json
import logging
import os
import re
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from swing_mcp.models import MovementEvent
from swing_mcp.prompts.templates import (
    RESEARCH_SYSTEM_PROMPT,
    build_batch_prompt,
    build_event_prompt,
)

logger = logging.getLogger(__name__)

BEDROCK_MODEL_ID = os.environ.get("BEDROCK_MODEL_ID", "anthropic.claude-3-haiku-20240307-v1:0")
AWS_REGION = os.environ.get("AWS_REGION", "us-east-1")
BEDROCK_MAX_TOKENS = int(os.environ.get("BEDROCK_MAX_TOKENS", "300"))
BEDROCK_TEMPERATURE = float(os.environ.get("BEDROCK_TEMPERATURE", "0.2"))

_executor = ThreadPoolExecutor(max_workers=int(os.environ.get("BEDROCK_MAX_WORKERS", "8")))

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


class ExplanationError(Exception):
    """Raised when a provider cannot produce an explanation."""

    pass


class ExplanationProvider(ABC):
    """Abstract interface for explaining why a swing happened."""

    @abstractmethod
    async def explain(self, ticker: str, event: MovementEvent) -> str:
        """
        Explain a single swing.

        Args:
            ticker: The ticker symbol.
            event: The swing to explain.

        Returns:
            str: Free-text explanation, nominally at most 50 words.

        Raises:
            ExplanationError: If no explanation could be produced.
        """
        pass

    async def explain_all(self, ticker: str, events: list[MovementEvent]) -> list[str | None]:
        """
        Explain several swings in one request.

        Returns:
            list: One entry per input event, aligned by index. Entries that
                  are None (or missing) count as failures for that index.

        Raises:
            ExplanationError: If the whole request failed.
        """
        raise ExplanationError(f"{type(self).__name__} does not support batched explanations")


def parse_batch_response(text: str, expected: int) -> list[str | None]:
    """
    Shape-check a JSON array response and align it to `expected` entries.

    Non-string entries become None; short arrays are padded with None; extra
    entries are dropped.

    Raises:
        ExplanationError: If the text is not a JSON array
    """
    cleaned = _CODE_FENCE.sub("", text.strip())
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ExplanationError(f"Batch response is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ExplanationError(f"Batch response is {type(data).__name__}, expected list")

    aligned: list[str | None] = [item if isinstance(item, str) else None for item in data[:expected]]
    aligned.extend([None] * (expected - len(aligned)))
    return aligned


class BedrockExplanationProvider(ExplanationProvider):
    """AWS Bedrock (Anthropic messages API) implementation."""

    def __init__(
        self,
        model_id: str = BEDROCK_MODEL_ID,
        region_name: str = AWS_REGION,
        max_tokens: int = BEDROCK_MAX_TOKENS,
        temperature: float = BEDROCK_TEMPERATURE,
    ) -> None:
        self.model_id = model_id
        self.region_name = region_name
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client: Any = None

    def _ensure_client(self) -> Any:
        """Initialize Bedrock runtime client if not already initialized"""
        if self._client is None:
            self._client = boto3.client("bedrock-runtime", region_name=self.region_name)
        return self._client

    async def _invoke(self, prompt: str, max_tokens: int) -> str:
        client = self._ensure_client()
        body = {
            "anthropic_version": "bedrock-2023-05-31",
            "max_tokens": max_tokens,
            "temperature": self.temperature,
            "system": RESEARCH_SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": prompt}],
        }

        def _call() -> dict[str, Any]:
            response = client.invoke_model(modelId=self.model_id, body=json.dumps(body))
            return json.loads(response["body"].read())

        try:
            loop = asyncio.get_running_loop()
            response_body = await loop.run_in_executor(_executor, _call)
        except (BotoCoreError, ClientError) as e:
            raise ExplanationError(f"Bedrock invocation failed: {e}") from e
        except (KeyError, json.JSONDecodeError) as e:
            raise ExplanationError(f"Malformed Bedrock response: {e}") from e

        content = response_body.get("content")
        if isinstance(content, list):
            return "".join(
                block.get("text", "") for block in content if isinstance(block, dict)
            )
        if isinstance(content, str):
            return content
        raise ExplanationError("Bedrock response has no text content")

    async def explain(self, ticker: str, event: MovementEvent) -> str:
        return await self._invoke(build_event_prompt(ticker, event), self.max_tokens)

    async def explain_all(self, ticker: str, events: list[MovementEvent]) -> list[str | None]:
        if not events:
            return []
        text = await self._invoke(
            build_batch_prompt(ticker, events), self.max_tokens * len(events)
        )
        return parse_batch_response(text, len(events))


_default_provider: ExplanationProvider | None = None


def get_default_provider() -> ExplanationProvider:
    """Shared provider used when a caller does not pass one."""
    global _default_provider
    if _default_provider is None:
        _default_provider = BedrockExplanationProvider()
    return _default_provider


def shutdown_provider_executor() -> None:
    """Drop queued Bedrock calls on server shutdown."""
    _executor.shutdown(wait=False, cancel_futures=True)
