"""
Conditioning Step 2: Truncate + hold out

Range filters only; nothing is interpolated:
- truncate_series: drop pre-onset / low-count observations before a cutoff
- split_holdout: keep the last h observations aside for accuracy checks
"""

import logging
from typing import Tuple, Union

import pandas as pd

logger = logging.getLogger(__name__)


def truncate_series(
    series: pd.Series,
    cutoff: Union[str, pd.Timestamp],
) -> pd.Series:
    """
    Keep observations with timestamp >= cutoff, in original order.

    Early count data with near-zero values destabilizes variance estimates,
    so the reports start each series at a hand-picked onset date.

    Args:
        series: Series with a DatetimeIndex
        cutoff: First timestamp to keep

    Returns:
        New series (possibly empty)
    """
    if not isinstance(series.index, pd.DatetimeIndex):
        raise ValueError("truncate_series expects a DatetimeIndex")

    cutoff = pd.Timestamp(cutoff)
    truncated = series[series.index >= cutoff].copy()
    if series.index.freq is not None and len(truncated):
        truncated = truncated.asfreq(series.index.freq)

    logger.info(f"[truncate] cutoff={cutoff.date()}: kept {len(truncated)}/{len(series)} rows")
    return truncated


def split_holdout(series: pd.Series, horizon: int) -> Tuple[pd.Series, pd.Series]:
    """
    Split off the last `horizon` observations.

    Returns:
        (train, test) with train.index.max() < test.index.min()
    """
    if horizon < 1:
        raise ValueError(f"horizon must be >= 1, got {horizon}")
    if horizon >= len(series):
        raise ValueError(f"horizon {horizon} leaves no training data (n={len(series)})")

    train = series.iloc[:-horizon].copy()
    test = series.iloc[-horizon:].copy()

    logger.info(
        f"[holdout] train={len(train)} rows to {train.index.max().date()}, "
        f"test={len(test)} rows"
    )
    return train, test
