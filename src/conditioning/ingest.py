"""
Conditioning Step 1: Load a series from CSV

Fail-loud parsing:
- Dates parsed with an explicit format (errors="raise")
- Values converted with errors="raise" (no silent NaN)
- Duplicate timestamps rejected
- Result sorted into a pd.Series with a DatetimeIndex
"""

import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd

logger = logging.getLogger(__name__)


def load_series_csv(
    path: Union[str, Path],
    value_col: str,
    date_col: str = "date",
    date_format: Optional[str] = None,
    freq: Optional[str] = None,
) -> pd.Series:
    """
    Load one value column of a CSV as a time-indexed series.

    Args:
        path: CSV file with at least `date_col` and `value_col`
        value_col: Numeric column to load ("cases", "CO2", ...)
        date_col: Calendar date column
        date_format: strptime format for `date_col` (None lets pandas infer)
        freq: Optional pandas frequency to stamp on the index ("D", "MS")

    Returns:
        Float series named `value_col`, sorted by date

    Raises:
        ValueError: missing columns, empty file, unparseable dates,
            non-numeric or missing values, duplicate dates, or an index that
            does not match `freq`
    """
    df = pd.read_csv(path)

    missing = [col for col in (date_col, value_col) if col not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns {missing} in {path}; got {df.columns.tolist()}")
    if df.empty:
        raise ValueError(f"No rows in {path}")

    return series_from_frame(
        df,
        value_col=value_col,
        date_col=date_col,
        date_format=date_format,
        freq=freq,
    )


def series_from_frame(
    df: pd.DataFrame,
    value_col: str,
    date_col: str = "date",
    date_format: Optional[str] = None,
    freq: Optional[str] = None,
) -> pd.Series:
    """Same gates as load_series_csv, for a DataFrame already in memory."""
    if df[date_col].isna().any():
        raise ValueError(f"{int(df[date_col].isna().sum())} rows with missing '{date_col}'")
    if df[value_col].isna().any():
        raise ValueError(f"{int(df[value_col].isna().sum())} rows with missing '{value_col}'")

    ds = pd.to_datetime(df[date_col], format=date_format, errors="raise")
    values = pd.to_numeric(df[value_col], errors="raise").astype(float)

    series = pd.Series(values.to_numpy(), index=pd.DatetimeIndex(ds), name=value_col)
    series.index.name = date_col

    n_duplicates = int(series.index.duplicated().sum())
    if n_duplicates:
        raise ValueError(f"{n_duplicates} duplicate timestamps in '{date_col}'")

    series = series.sort_index()

    if freq is not None:
        regular = series.asfreq(freq)
        off_grid = int((~series.index.isin(regular.index)).sum())
        if off_grid:
            raise ValueError(f"{off_grid} timestamps do not fall on freq={freq!r}")
        # asfreq inserts NaN for every missing slot
        series = regular
        n_gaps = int(series.isna().sum())
        if n_gaps:
            raise ValueError(f"{n_gaps} missing timestamps at freq={freq!r}")

    logger.info(
        f"[load] {value_col}: {len(series)} rows, "
        f"{series.index.min().date()} to {series.index.max().date()}"
    )
    return series
