"""Report summary statistics."""

from typing import Any

from swing_mcp.models import AnalysisResult, MovementType


def summarize(result: AnalysisResult) -> dict[str, Any] | None:
    """
    Headline numbers for a swing report.

    Returns:
        Dict with period high/low, first/final price, net change, swing
        counts and average swing length, or None when there is no data
    """
    if not result.data:
        return None

    prices = [p.price for p in result.data]
    first = prices[0]
    last = prices[-1]

    movements = result.movements
    up_count = sum(1 for m in movements if m.type == MovementType.UP)
    down_count = sum(1 for m in movements if m.type == MovementType.DOWN)
    avg_days = (
        round(sum(m.days_taken for m in movements) / len(movements), 1) if movements else 0.0
    )

    return {
        "period_high": max(prices),
        "period_low": min(prices),
        "first_price": first,
        "final_price": last,
        "net_change_pct": round((last - first) / first * 100, 2),
        "movement_count": len(movements),
        "up_count": up_count,
        "down_count": down_count,
        "avg_swing_days": avg_days,
    }
