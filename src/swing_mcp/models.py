"""Core data types for swing analysis."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any


class MovementType(str, Enum):
    """Direction of a confirmed swing."""

    UP = "UP"
    DOWN = "DOWN"


@dataclass(frozen=True)
class PricePoint:
    """Single daily close."""

    date: date
    price: float

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date.isoformat(), "price": self.price}


@dataclass
class MovementEvent:
    """
    A confirmed swing between two samples of a price series.

    Everything except `context` is fixed at segmentation time. `context` is
    filled in at most once, by enrichment.
    """

    start_date: date
    end_date: date
    start_price: float
    end_price: float
    type: MovementType
    percentage_change: float
    days_taken: int
    context: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "start_price": self.start_price,
            "end_price": self.end_price,
            "type": self.type.value,
            "percentage_change": round(self.percentage_change, 4),
            "days_taken": self.days_taken,
            "context": self.context,
        }


@dataclass
class AnalysisResult:
    """Price series plus its segmentation for one ticker/year/threshold run."""

    ticker: str
    year: int
    target_percentage: float
    data: list[PricePoint] = field(default_factory=list)
    movements: list[MovementEvent] = field(default_factory=list)

    def to_dict(self, include_data: bool = True) -> dict[str, Any]:
        result: dict[str, Any] = {
            "ticker": self.ticker,
            "year": self.year,
            "target_percentage": self.target_percentage,
            "movements": [m.to_dict() for m in self.movements],
        }
        if include_data:
            result["data"] = [p.to_dict() for p in self.data]
        return result
