"""Validation utilities and parameter classes."""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

import pytz

# Swings smaller than this are noise; user input is clamped up to it
MIN_THRESHOLD_PCT = 2.0
MIN_YEAR = 1970
DEFAULT_TZ = "America/New_York"


def clamp_threshold(threshold_pct: float) -> float:
    """
    Clamp a user-supplied swing threshold (in percent) to the 2% floor.

    Raises:
        ValueError: If the threshold is not a finite number
    """
    try:
        value = float(threshold_pct)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid threshold '{threshold_pct}'. Must be a number.") from e
    if not math.isfinite(value):
        raise ValueError(f"Invalid threshold '{threshold_pct}'. Must be finite.")
    return max(MIN_THRESHOLD_PCT, value)


def exchange_today(tz: str = DEFAULT_TZ) -> date:
    """Current calendar date in the exchange timezone."""
    return datetime.now(pytz.timezone(tz)).date()


@dataclass(frozen=True)
class HistoryParams:
    """Immutable history request. Used for cache key + fetch."""

    ticker: str
    year: int
    tz: str = DEFAULT_TZ

    def __post_init__(self) -> None:
        # Normalize ticker: uppercase, strip whitespace
        ticker = str(self.ticker).upper().strip()
        if not ticker:
            raise ValueError("Ticker must not be empty")
        object.__setattr__(self, "ticker", ticker)

        try:
            year = int(self.year)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid year '{self.year}'") from e

        current_year = exchange_today(self.tz).year
        if year < MIN_YEAR or year > current_year:
            raise ValueError(
                f"Invalid year '{self.year}'. Must be between {MIN_YEAR} and {current_year}."
            )
        object.__setattr__(self, "year", year)

    @property
    def is_current_year(self) -> bool:
        return self.year == exchange_today(self.tz).year

    def date_range(self) -> tuple[date, date]:
        """
        Start (inclusive) and end (exclusive) dates for the year.

        The current year ends tomorrow so today's close is included.
        """
        start = date(self.year, 1, 1)
        if self.is_current_year:
            end = exchange_today(self.tz) + timedelta(days=1)
        else:
            end = date(self.year + 1, 1, 1)
        return start, end

    def to_uri(self) -> str:
        """Canonical URI for caching."""
        return f"price://{self.ticker}/{self.year}/1d"

    def to_yf_kwargs(self) -> dict[str, Any]:
        """Kwargs for yf.download()."""
        start, end = self.date_range()
        return {
            "tickers": self.ticker,
            "start": start.isoformat(),
            "end": end.isoformat(),
            "interval": "1d",
            "auto_adjust": True,
            "progress": False,
        }


@dataclass(frozen=True)
class AnalysisParams:
    """Validated input for one swing analysis run."""

    ticker: str
    year: int
    threshold_pct: float
    history: HistoryParams = field(init=False)

    def __post_init__(self) -> None:
        history = HistoryParams(ticker=self.ticker, year=self.year)
        object.__setattr__(self, "history", history)
        object.__setattr__(self, "ticker", history.ticker)
        object.__setattr__(self, "year", history.year)
        object.__setattr__(self, "threshold_pct", clamp_threshold(self.threshold_pct))

    @property
    def threshold_fraction(self) -> float:
        return self.threshold_pct / 100.0
