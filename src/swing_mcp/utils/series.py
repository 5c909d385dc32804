"""Price series standardization utilities."""

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

import numpy as np
import pandas as pd

from swing_mcp.models import PricePoint

logger = logging.getLogger(__name__)


def standardize_history(df: pd.DataFrame) -> pd.DataFrame:
    """
    Standardize a raw daily download to a (date, close) schema.

    Output columns (always, in this order): date, close
    Dates are ISO strings (YYYY-MM-DD). Missing close is filled with NaN.

    Args:
        df: Raw DataFrame from yfinance

    Returns:
        Standardized DataFrame with consistent schema
    """
    df = df.copy()

    # Handle multi-index from yf.download (ticker as second level)
    if isinstance(df.columns, pd.MultiIndex):
        df.columns = df.columns.get_level_values(0)

    # Lowercase all column names
    df.columns = [str(c).lower() for c in df.columns]

    # Reset index to make date a column
    df = df.reset_index()

    # Normalize date column name
    date_cols = [c for c in df.columns if str(c).lower() in ("date", "datetime", "index")]
    if date_cols:
        df = df.rename(columns={date_cols[0]: "date"})

    if "date" in df.columns and pd.api.types.is_datetime64_any_dtype(df["date"]):
        # Daily bars only; drop any time/timezone component
        df["date"] = df["date"].dt.strftime("%Y-%m-%d")

    for col in ("date", "close"):
        if col not in df.columns:
            df[col] = np.nan

    return df[["date", "close"]]


def _parse_date(value: Any) -> date | None:
    """Parse a sample date, returning None when missing or unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return None if pd.isna(value) else value.date()
    if isinstance(value, date):
        return value
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(ts):
        return None
    return ts.date()


def _to_frame(rows: Iterable[Any] | pd.DataFrame) -> pd.DataFrame:
    if isinstance(rows, pd.DataFrame):
        df = rows.copy()
    else:
        records: list[dict[str, Any]] = []
        for row in rows:
            if isinstance(row, PricePoint):
                records.append({"date": row.date, "price": row.price})
            elif isinstance(row, Mapping):
                records.append({"date": row.get("date"), "price": row.get("price", row.get("close"))})
            else:
                records.append({"date": None, "price": None})
        df = pd.DataFrame.from_records(records, columns=["date", "price"])

    if "price" not in df.columns and "close" in df.columns:
        df = df.rename(columns={"close": "price"})
    for col in ("date", "price"):
        if col not in df.columns:
            df[col] = None
    return df[["date", "price"]].reset_index(drop=True)


def normalize_series(rows: Iterable[Any] | pd.DataFrame) -> list[PricePoint]:
    """
    Turn a possibly noisy, unsorted sample list into a clean daily series.

    Samples missing either field, with an unparseable date, or with a
    non-finite/non-positive price are dropped. Duplicate dates keep the last
    sample in input order. Output is sorted ascending by date.

    Args:
        rows: PricePoints, mappings with date/price (or close), or a DataFrame

    Returns:
        Ascending list of PricePoint
    """
    df = _to_frame(rows)
    total = len(df)
    if total == 0:
        return []

    df["date"] = df["date"].map(_parse_date)
    df["price"] = pd.to_numeric(df["price"], errors="coerce")

    valid = df["date"].notna() & np.isfinite(df["price"].astype(float)) & (df["price"] > 0)
    df = df.loc[valid]

    # Last sample wins on duplicate dates; stable sort keeps it deterministic
    df = df.drop_duplicates(subset="date", keep="last")
    df = df.sort_values("date", kind="mergesort")

    dropped = total - len(df)
    if dropped:
        logger.debug(f"normalize_series: dropped {dropped} of {total} samples")

    return [PricePoint(date=d, price=float(p)) for d, p in zip(df["date"], df["price"])]
