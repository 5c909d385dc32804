"""Prompt templates for swing analysis and event research."""

from typing import Any

from swing_mcp.models import MovementEvent
from swing_mcp.utils.sanitize import MAX_CONTEXT_WORDS

# System instruction for explanation providers
RESEARCH_SYSTEM_PROMPT = (
    f"You are a concise financial analyst. Your responses MUST NEVER exceed "
    f"{MAX_CONTEXT_WORDS} words. Be direct and strictly focused on the requested "
    f"price direction."
)

# MCP prompt definitions
PROMPTS = {
    "swing_report": {
        "description": "Swing timeline report for a ticker and year",
        "arguments": [
            {"name": "ticker", "required": True},
            {"name": "year", "required": True},
            {"name": "threshold", "required": False},
        ],
    },
}


def _describe_move(move: MovementEvent) -> str:
    return (
        f"{move.type.value} {abs(move.percentage_change):.2f}% between "
        f"{move.start_date.isoformat()} and {move.end_date.isoformat()} "
        f"(${move.start_price:,.2f} to ${move.end_price:,.2f})"
    )


def build_event_prompt(ticker: str, move: MovementEvent) -> str:
    """Research prompt for a single swing."""
    direction = move.type.value
    return f"""Research and explain why the price of {ticker} moved {direction} by {abs(move.percentage_change):.2f}% between {move.start_date.isoformat()} and {move.end_date.isoformat()}.
The price went from ${move.start_price:,.2f} to ${move.end_price:,.2f}.
Identify specific macro or micro events (news, central bank decisions, earnings, hacks, ETF flows) that directly contributed to this {direction} movement.

STRICT INSTRUCTION: Provide a concise summary of NO MORE THAN {MAX_CONTEXT_WORDS} WORDS. Do not use filler phrases. Focus solely on causes for the {direction} direction."""


def build_batch_prompt(ticker: str, moves: list[MovementEvent]) -> str:
    """Research prompt for several swings answered as one JSON array."""
    lines = "\n".join(f"{i + 1}. {_describe_move(m)}" for i, m in enumerate(moves))
    return f"""For each of the following price swings of {ticker}, explain the specific macro or micro events that caused the move.

{lines}

Return ONLY a JSON array of {len(moves)} strings, in the same order as the list above.
Each string is a summary of NO MORE THAN {MAX_CONTEXT_WORDS} WORDS focused solely on the causes of that swing's direction."""


def get_prompt(name: str, arguments: dict[str, str]) -> dict[str, Any] | None:
    """
    Get a prompt by name with arguments filled in.

    Returns dict with 'messages' key for MCP GetPromptResult.
    """
    if name not in PROMPTS:
        return None

    if name == "swing_report":
        ticker = arguments.get("ticker", "")
        year = arguments.get("year", "")
        threshold = arguments.get("threshold") or "5"
        return {
            "messages": [
                {
                    "role": "user",
                    "content": f"""Build a swing report for {ticker} in {year} at a {threshold}% threshold.

Use these tools:
1. analyze_swings("{ticker}", {year}, {threshold})
2. get_swing_analysis(run_id) until enrichment_complete is true

Then present:
1. **Header**: Ticker, year, target threshold
2. **Summary**: Period high/low, final price, net change, up/down swing counts, average swing days
3. **Timeline**: One entry per swing with direction, % change, start/end date and price, days taken, and context

Render context text verbatim. Do not invent causes for swings without context.""",
                }
            ]
        }

    return None
