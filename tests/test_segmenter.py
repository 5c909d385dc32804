"""Tests for swing segmentation."""

from datetime import date, timedelta

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from swing_mcp.analysis.segmenter import InsufficientDataError, segment
from swing_mcp.models import MovementType, PricePoint


class TestSegmentExamples:
    """Worked examples."""

    def test_up_then_down(self, example_series: list[PricePoint]) -> None:
        """Test the 100 -> 103 -> 80 series at 2% yields one up and one down swing."""
        events = segment(example_series, 0.02)

        assert len(events) == 2

        up, down = events
        assert up.type == MovementType.UP
        assert up.start_date == date(2024, 1, 1)
        assert up.end_date == date(2024, 1, 10)
        assert up.start_price == 100.0
        assert up.end_price == 103.0
        assert up.percentage_change == pytest.approx(3.0)
        assert up.days_taken == 9

        assert down.type == MovementType.DOWN
        assert down.start_date == date(2024, 1, 10)
        assert down.end_date == date(2024, 2, 1)
        assert down.percentage_change == pytest.approx(-22.3301, abs=1e-4)
        assert down.days_taken == 22

    def test_context_starts_empty(self, example_series: list[PricePoint]) -> None:
        """Test freshly segmented swings have no context."""
        assert all(e.context is None for e in segment(example_series, 0.02))

    def test_days_taken_uses_calendar_days(self, weekday_series: list[PricePoint]) -> None:
        """Test day counts span weekends instead of counting samples."""
        events = segment(weekday_series, 0.03)

        assert [(e.start_date.day, e.end_date.day) for e in events] == [
            (1, 3),
            (3, 5),
            (5, 9),
            (9, 10),
        ]
        # 5th -> 9th is two samples apart but four calendar days
        assert events[2].days_taken == 4
        assert [e.days_taken for e in events] == [2, 2, 4, 1]

    def test_trailing_tail_dropped(self, weekday_series: list[PricePoint]) -> None:
        """Test sub-threshold movement after the last swing is not reported."""
        events = segment(weekday_series, 0.03)

        assert events[-1].end_date == date(2024, 1, 10)
        assert events[-1].end_date < weekday_series[-1].date

    def test_exact_threshold_emits(self) -> None:
        """Test a move of exactly the threshold confirms a swing."""
        series = [
            PricePoint(date(2024, 3, 1), 100.0),
            PricePoint(date(2024, 3, 2), 102.0),
            PricePoint(date(2024, 3, 3), 110.0),
        ]
        events = segment(series, 0.02)

        assert events[0].end_date == date(2024, 3, 2)
        assert events[0].end_price == 102.0
        assert events[1].start_date == date(2024, 3, 2)

    def test_no_swings_when_flat(self) -> None:
        """Test a series that never reaches the threshold yields no swings."""
        series = [PricePoint(date(2024, 1, d), 100.0 + d * 0.1) for d in range(1, 10)]
        assert segment(series, 0.05) == []

    def test_base_floats_only_on_confirmation(self) -> None:
        """Test the reference does not move with sub-threshold samples."""
        series = [
            PricePoint(date(2024, 1, 1), 100.0),
            PricePoint(date(2024, 1, 2), 103.0),
            PricePoint(date(2024, 1, 3), 104.0),
            PricePoint(date(2024, 1, 4), 105.0),
        ]
        events = segment(series, 0.05)

        assert len(events) == 1
        assert events[0].start_price == 100.0
        assert events[0].end_price == 105.0
        assert events[0].days_taken == 3

    def test_threshold_not_clamped(self) -> None:
        """Test the segmenter uses the threshold as given."""
        series = [
            PricePoint(date(2024, 1, 1), 100.0),
            PricePoint(date(2024, 1, 2), 101.0),
        ]
        assert len(segment(series, 0.01)) == 1


class TestSegmentErrors:
    """Tests for insufficient input."""

    def test_single_point_raises(self) -> None:
        """Test a single sample raises InsufficientDataError."""
        with pytest.raises(InsufficientDataError):
            segment([PricePoint(date(2024, 1, 1), 100.0)], 0.02)

    def test_empty_raises(self) -> None:
        """Test an empty series raises InsufficientDataError."""
        with pytest.raises(InsufficientDataError) as exc_info:
            segment([], 0.02)
        assert exc_info.value.points == 0

    def test_error_message_names_run(self) -> None:
        """Test the error message includes ticker and year when given."""
        err = InsufficientDataError(1, ticker="BTC-USD", year=2024)
        assert "BTC-USD" in str(err)
        assert "2024" in str(err)


# Helper strategy for generating sorted series with calendar gaps
@st.composite
def price_series(draw, min_points=2, max_points=60):
    """Generate an ascending daily series with random gaps between samples."""
    count = draw(st.integers(min_value=min_points, max_value=max_points))
    prices = draw(
        st.lists(
            st.floats(min_value=1.0, max_value=1000.0, allow_nan=False, allow_infinity=False),
            min_size=count,
            max_size=count,
        )
    )
    gaps = draw(st.lists(st.integers(min_value=1, max_value=5), min_size=count, max_size=count))
    points = []
    day = date(2023, 1, 1)
    for price, gap in zip(prices, gaps):
        points.append(PricePoint(day, price))
        day += timedelta(days=gap)
    return points


thresholds = st.floats(min_value=0.02, max_value=0.5, allow_nan=False)


@settings(max_examples=200)
@given(series=price_series(), threshold=thresholds)
def test_property_every_swing_meets_threshold(series, threshold):
    """Every emitted swing moves at least the threshold."""
    for event in segment(series, threshold):
        assert abs(event.percentage_change) >= threshold * 100 - 1e-9


@settings(max_examples=200)
@given(series=price_series(), threshold=thresholds)
def test_property_swings_are_contiguous(series, threshold):
    """Each swing starts where the previous one ended, beginning at the first sample."""
    events = segment(series, threshold)
    if events:
        assert events[0].start_date == series[0].date
    for prev, nxt in zip(events, events[1:]):
        assert prev.end_date == nxt.start_date
        assert prev.end_price == nxt.start_price


@settings(max_examples=200)
@given(series=price_series(), threshold=thresholds)
def test_property_days_taken_is_calendar_span(series, threshold):
    """days_taken equals the calendar distance between start and end."""
    for event in segment(series, threshold):
        assert event.days_taken == (event.end_date - event.start_date).days
        assert event.days_taken > 0


@settings(max_examples=200)
@given(series=price_series(), threshold=thresholds)
def test_property_type_matches_sign(series, threshold):
    """UP swings end higher, DOWN swings end lower."""
    for event in segment(series, threshold):
        if event.type == MovementType.UP:
            assert event.end_price > event.start_price
        else:
            assert event.end_price < event.start_price


@settings(max_examples=100)
@given(series=price_series(), threshold=thresholds)
def test_property_deterministic(series, threshold):
    """Re-running on identical input yields identical swings."""
    assert segment(series, threshold) == segment(list(series), threshold)
