"""Swing segmentation over a daily close series."""

from collections.abc import Sequence

from swing_mcp.models import MovementEvent, MovementType, PricePoint


class InsufficientDataError(ValueError):
    """Raised when a series is too short to contain a swing."""

    def __init__(self, points: int, ticker: str | None = None, year: int | None = None):
        where = f" for {ticker} in {year}" if ticker is not None and year is not None else ""
        super().__init__(f"Insufficient data found{where}: {points} price point(s), need at least 2")
        self.points = points


def segment(series: Sequence[PricePoint], threshold_fraction: float) -> list[MovementEvent]:
    """
    Split a price series into confirmed swings.

    A floating base starts at the first sample. Each later sample is compared
    to the base; once the move reaches the threshold (inclusive) an event is
    emitted from base to that sample and the sample becomes the new base.
    Movement after the last confirmed swing that never reaches the threshold
    is not reported.

    The threshold is used as given; callers clamp it beforehand.

    Args:
        series: PricePoints sorted ascending by date
        threshold_fraction: Minimum absolute move as a fraction (0.05 = 5%)

    Returns:
        Contiguous, non-overlapping events in series order

    Raises:
        InsufficientDataError: If the series has fewer than 2 points
    """
    if len(series) < 2:
        raise InsufficientDataError(len(series))

    movements: list[MovementEvent] = []
    base = series[0]

    for point in series[1:]:
        change = (point.price - base.price) / base.price

        if abs(change) >= threshold_fraction:
            movements.append(
                MovementEvent(
                    start_date=base.date,
                    end_date=point.date,
                    start_price=base.price,
                    end_price=point.price,
                    type=MovementType.UP if change > 0 else MovementType.DOWN,
                    percentage_change=change * 100,
                    # Calendar days, not sample count: weekends/holidays have no samples
                    days_taken=(point.date - base.date).days,
                )
            )
            base = point

    return movements
