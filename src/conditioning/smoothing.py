"""
Conditioning Step 5: Centered moving averages

Absorb periodic zero-reporting (weekends, holidays) without shifting phase.
Boundary points whose window is incomplete stay NaN: they are undefined,
not zero, and downstream code has to drop them explicitly.
"""

import logging

import pandas as pd

logger = logging.getLogger(__name__)


def centered_moving_average(series: pd.Series, half_window: int = 3) -> pd.Series:
    """
    value[i] = mean(value[i - w .. i + w]) when the full window exists.

    Args:
        series: Input series (NaN inside a window makes that output NaN)
        half_window: w; the window spans 2w + 1 observations

    Returns:
        Smoothed series on the same index, NaN at the w points on each edge
    """
    if half_window < 0:
        raise ValueError(f"half_window must be >= 0, got {half_window}")

    window = 2 * half_window + 1
    smoothed = series.rolling(window=window, center=True, min_periods=window).mean()
    smoothed.name = series.name

    logger.info(
        f"[smooth] {window}-point centered MA: "
        f"{int(smoothed.notna().sum())}/{len(series)} defined"
    )
    return smoothed


def double_moving_average(series: pd.Series, m: int = 12) -> pd.Series:
    """
    2 x m centered moving average.

    For an even period the m-MA sits between observations; averaging two
    consecutive m-MAs re-centres it. Weights are 1/(2m) at both ends and 1/m
    inside, spanning m + 1 observations. Used as the trend-cycle estimate for
    monthly data (m=12).
    """
    if m < 2 or m % 2:
        raise ValueError(f"double_moving_average needs an even m >= 2, got {m}")

    first = series.rolling(window=m, min_periods=m).mean()
    second = first.rolling(window=2, min_periods=2).mean()
    # The trailing 2xm average ends at i; centre it on i - m/2
    trend = second.shift(-(m // 2))
    trend.name = series.name

    logger.info(f"[smooth] 2x{m} MA: {int(trend.notna().sum())}/{len(series)} defined")
    return trend


def drop_undefined_edges(series: pd.Series) -> pd.Series:
    """
    Strip leading/trailing NaN (moving-average boundaries) before fitting.

    Raises:
        ValueError: if NaN remain inside the series, or nothing is defined
    """
    first = series.first_valid_index()
    last = series.last_valid_index()
    if first is None:
        raise ValueError("Series has no defined values")

    trimmed = series.loc[first:last]
    n_interior = int(trimmed.isna().sum())
    if n_interior:
        raise ValueError(f"{n_interior} undefined values inside the series; refusing to impute")

    if series.index.freq is not None:
        trimmed = trimmed.asfreq(series.index.freq)
    return trimmed
