"""Pytest configuration and fixtures."""

import asyncio
from datetime import date, timedelta

import pytest

from swing_mcp.enrichment.providers import ExplanationError, ExplanationProvider
from swing_mcp.models import MovementEvent, MovementType, PricePoint


@pytest.fixture
def example_series() -> list[PricePoint]:
    """Three-sample series with one up swing and one down swing at 2%."""
    return [
        PricePoint(date(2024, 1, 1), 100.0),
        PricePoint(date(2024, 1, 10), 103.0),
        PricePoint(date(2024, 2, 1), 80.0),
    ]


@pytest.fixture
def weekday_series() -> list[PricePoint]:
    """Weekday-only closes (no weekend samples) for two weeks of January 2024."""
    days = [1, 2, 3, 4, 5, 8, 9, 10, 11, 12]
    prices = [100.0, 101.0, 104.0, 103.0, 99.0, 98.0, 92.0, 95.0, 97.0, 96.0]
    return [PricePoint(date(2024, 1, d), p) for d, p in zip(days, prices)]


def make_events(count: int) -> list[MovementEvent]:
    """Contiguous alternating swings, one per day starting 2024-01-01."""
    events: list[MovementEvent] = []
    price = 100.0
    for i in range(count):
        up = i % 2 == 0
        end_price = price * (1.1 if up else 0.9)
        events.append(
            MovementEvent(
                start_date=date(2024, 1, 1) + timedelta(days=i),
                end_date=date(2024, 1, 2) + timedelta(days=i),
                start_price=price,
                end_price=end_price,
                type=MovementType.UP if up else MovementType.DOWN,
                percentage_change=(end_price - price) / price * 100,
                days_taken=1,
            )
        )
        price = end_price
    return events


class ScriptedProvider(ExplanationProvider):
    """
    Provider whose per-swing behavior is scripted.

    Swings are keyed by days from 2024-01-01 to their start date, which is
    the list position for make_events() output.

    `delays` maps index -> seconds to sleep before answering (default 0).
    `failures` is a set of indexes that raise ExplanationError.
    `responses` maps index -> raw response (default "Swing {index} explained.").
    """

    def __init__(
        self,
        delays: dict[int, float] | None = None,
        failures: set[int] | None = None,
        responses: dict[int, object] | None = None,
        batch_response: list[object] | None = None,
        batch_error: Exception | None = None,
    ) -> None:
        self.delays = delays or {}
        self.failures = failures or set()
        self.responses = responses or {}
        self.batch_response = batch_response
        self.batch_error = batch_error
        self.calls: list[int] = []
        self.batch_calls: list[int] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def _index(self, event: MovementEvent) -> int:
        return (event.start_date - date(2024, 1, 1)).days

    async def explain(self, ticker: str, event: MovementEvent) -> str:
        index = self._index(event)
        self.calls.append(index)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(index, 0))
            if index in self.failures:
                raise ExplanationError(f"scripted failure for {index}")
            return self.responses.get(index, f"Swing {index} explained.")  # type: ignore[return-value]
        finally:
            self.in_flight -= 1

    async def explain_all(self, ticker: str, events: list[MovementEvent]) -> list[str | None]:
        self.batch_calls.append(len(events))
        if self.batch_error is not None:
            raise self.batch_error
        if self.batch_response is not None:
            return self.batch_response  # type: ignore[return-value]
        return [f"Swing {self._index(e)} explained." for e in events]


@pytest.fixture
def scripted_provider() -> ScriptedProvider:
    return ScriptedProvider()
