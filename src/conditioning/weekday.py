"""
Conditioning Step 4: Day-of-week collection bias

Daily case counts are under-reported on some weekdays. Regress the series on
one-hot weekday indicators (no intercept) so each coefficient is that
weekday's mean level. Diagnostic only: the series is never modified here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum

import numpy as np
import pandas as pd
import statsmodels.api as sm

logger = logging.getLogger(__name__)


class Weekday(IntEnum):
    SUN = 0
    MON = 1
    TUE = 2
    WED = 3
    THU = 4
    FRI = 5
    SAT = 6

    @property
    def column(self) -> str:
        return self.name.lower()


WEEKDAY_COLUMNS = [day.column for day in Weekday]


def day_of_week(ts) -> Weekday:
    """Map a timestamp to its weekday (pandas counts Monday as 0)."""
    return Weekday((pd.Timestamp(ts).dayofweek + 1) % 7)


def weekday_dummies(series: pd.Series) -> pd.DataFrame:
    """
    One indicator column per weekday, row-aligned to `series`.

    Exactly one column is 1 in every row.
    """
    if not isinstance(series.index, pd.DatetimeIndex):
        raise ValueError("weekday_dummies expects a DatetimeIndex")

    days = np.asarray([day_of_week(ts) for ts in series.index], dtype=int)
    values = np.zeros((len(days), len(Weekday)), dtype=int)
    values[np.arange(len(days)), days] = 1
    return pd.DataFrame(values, index=series.index, columns=WEEKDAY_COLUMNS)


@dataclass(frozen=True)
class WeekdayEffect:
    """Per-weekday mean levels and a test for equal levels"""
    means: pd.Series
    f_pvalue: float
    n_obs: int

    @property
    def lowest(self) -> Weekday:
        return Weekday[str(self.means.idxmin()).upper()]

    @property
    def highest(self) -> Weekday:
        return Weekday[str(self.means.idxmax()).upper()]

    def has_effect(self, alpha: float = 0.05) -> bool:
        """True when the equal-levels hypothesis is rejected at `alpha`."""
        return bool(np.isfinite(self.f_pvalue) and self.f_pvalue < alpha)


def weekday_effect(series: pd.Series) -> WeekdayEffect:
    """
    Estimate weekday mean levels.

    The level estimates come from OLS without an intercept on all seven
    indicators. The p-value comes from the equivalent intercept model with
    six indicators, whose overall F-test is "all weekdays equal".
    """
    y = series.dropna()
    if y.empty:
        raise ValueError("weekday_effect needs at least one defined observation")

    X = weekday_dummies(y)
    present = [col for col in WEEKDAY_COLUMNS if X[col].any()]

    levels = sm.OLS(y.to_numpy(dtype=float), X[present].to_numpy(dtype=float)).fit()
    means = pd.Series(levels.params, index=present, name="mean_level")

    f_pvalue = float("nan")
    if len(present) > 1 and len(y) > len(present):
        X_const = sm.add_constant(X[present[1:]].to_numpy(dtype=float), has_constant="add")
        with np.errstate(divide="ignore", invalid="ignore"):
            f_pvalue = float(sm.OLS(y.to_numpy(dtype=float), X_const).fit().f_pvalue)

    effect = WeekdayEffect(means=means, f_pvalue=f_pvalue, n_obs=len(y))
    logger.info(
        f"[weekday] lowest={effect.lowest.name} ({means.min():.1f}), "
        f"highest={effect.highest.name} ({means.max():.1f}), F p={f_pvalue:.3g}"
    )
    return effect
