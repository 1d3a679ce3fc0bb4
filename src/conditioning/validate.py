"""
Conditioning Step 3: Validate Time Series Integrity

Checks run on a loaded series before any transform:
- Uniqueness: no duplicate timestamps
- Frequency: expected regular index vs observed (missing periods)
- Monotonic: increasing time
- Values: nulls, zeros (collection dropouts), bounds
"""

from dataclasses import dataclass
from typing import List

import pandas as pd


@dataclass
class ValidationResult:
    """Results of time series validation"""
    is_valid: bool
    n_rows: int
    n_duplicates: int
    n_missing_periods: int
    missing_periods: List[pd.Timestamp]
    n_nulls: int
    n_zeros: int
    value_min: float
    value_max: float
    is_monotonic: bool


def validate_time_index(series: pd.Series, freq: str = "D") -> ValidationResult:
    """
    Validate series integrity for modeling.

    Zeros are counted but do not fail validation: in daily case counts they
    are reporting gaps that the smoother absorbs.

    Args:
        series: Series with a DatetimeIndex
        freq: Expected pandas frequency ("D", "MS", ...)

    Returns:
        ValidationResult with detailed findings
    """
    index = series.index

    n_duplicates = int(index.duplicated(keep=False).sum())

    if len(index):
        sorted_index = index.sort_values()
        expected_range = pd.date_range(start=sorted_index.min(), end=sorted_index.max(), freq=freq)
        missing_periods = sorted(set(expected_range) - set(sorted_index))
    else:
        missing_periods = []

    is_monotonic = bool(index.is_monotonic_increasing)
    n_nulls = int(series.isna().sum())
    n_zeros = int((series == 0).sum())

    is_valid = (n_duplicates == 0) and (len(missing_periods) == 0) and is_monotonic and n_nulls == 0

    return ValidationResult(
        is_valid=is_valid,
        n_rows=len(series),
        n_duplicates=n_duplicates,
        n_missing_periods=len(missing_periods),
        missing_periods=missing_periods[:10],  # First 10 only
        n_nulls=n_nulls,
        n_zeros=n_zeros,
        value_min=float(series.min()) if len(series) else float("nan"),
        value_max=float(series.max()) if len(series) else float("nan"),
        is_monotonic=is_monotonic,
    )
