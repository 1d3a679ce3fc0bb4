"""
Stationarity: Differencing-order selection

Sequence:
1. nsdiffs -> D (STL seasonal strength above 0.64 means difference at the period)
2. ndiffs  -> d (repeat KPSS, differencing while H0 "stationary" is rejected)
3. KPSS on the fully differenced series must not reject
4. ADF must reject on the differenced series and, when any differencing
   was applied, fail to reject on the undifferenced one

When KPSS and ADF disagree the decision is returned unconfirmed, with a
reason; choosing between them is left to the analyst.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd
from statsmodels.tsa.seasonal import STL

from src.conditioning.smoothing import drop_undefined_edges

from .unitroot import StationarityTest, adf_test, kpss_test

logger = logging.getLogger(__name__)

SEASONAL_STRENGTH_THRESHOLD = 0.64


class DifferencingDisputeError(ValueError):
    """KPSS and ADF disagree on the differencing order"""


def difference(series: pd.Series, order: int = 1, lag: int = 1) -> pd.Series:
    """
    Apply lag-`lag` differencing `order` times, dropping the undefined head.
    """
    if order < 0 or lag < 1:
        raise ValueError(f"Invalid differencing order={order}, lag={lag}")

    out = series
    for _ in range(order):
        out = out.diff(lag).iloc[lag:]
    if series.index.freq is not None and len(out):
        out = out.asfreq(series.index.freq)
    return out


def seasonal_strength(series: pd.Series, period: int) -> float:
    """
    F_s = max(0, 1 - Var(remainder) / Var(seasonal + remainder)) from STL.

    Returns 0.0 for non-seasonal periods or fewer than two full cycles.
    """
    x = series.dropna()
    if period < 2 or len(x) < 2 * period + 1:
        return 0.0

    fit = STL(x.to_numpy(dtype=float), period=period, robust=True).fit()
    remainder = np.asarray(fit.resid)
    detrended = np.asarray(fit.seasonal) + remainder

    var_detrended = np.var(detrended)
    if var_detrended == 0:
        return 0.0
    return float(max(0.0, 1.0 - np.var(remainder) / var_detrended))


def nsdiffs(
    series: pd.Series,
    period: int,
    max_D: int = 1,
    threshold: float = SEASONAL_STRENGTH_THRESHOLD,
) -> int:
    """Recommended number of seasonal differences."""
    x = series.dropna()
    D = 0
    while D < max_D and seasonal_strength(x, period) > threshold:
        x = difference(x, order=1, lag=period)
        D += 1
    return D


def ndiffs(series: pd.Series, alpha: float = 0.05, max_d: int = 2) -> int:
    """Recommended number of first differences (repeated KPSS)."""
    x = series.dropna()
    d = 0
    while d < max_d and len(x) > 3:
        if not kpss_test(x, alpha=alpha).reject_null:
            break
        x = difference(x)
        d += 1
    return d


@dataclass(frozen=True)
class DifferencingOrder:
    """Chosen (d, D) and the evidence behind it"""
    d: int
    D: int
    period: int
    alpha: float
    kpss: StationarityTest
    adf_undifferenced: StationarityTest
    adf_differenced: StationarityTest
    confirmed: bool
    reason: str = ""

    @property
    def orders(self) -> Tuple[int, int]:
        return self.d, self.D

    def as_dict(self) -> Dict:
        return {
            "d": self.d,
            "D": self.D,
            "period": self.period,
            "alpha": self.alpha,
            "confirmed": self.confirmed,
            "reason": self.reason,
            "kpss": self.kpss.as_dict(),
            "adf_undifferenced": self.adf_undifferenced.as_dict(),
            "adf_differenced": self.adf_differenced.as_dict(),
        }


def apply_differencing(series: pd.Series, d: int, D: int, period: int) -> pd.Series:
    """Seasonal differences first, then first differences."""
    out = difference(series, order=D, lag=period) if D else series
    return difference(out, order=d) if d else out


def select_differencing(
    series: pd.Series,
    period: int = 7,
    alpha: float = 0.05,
    max_d: int = 2,
    max_D: int = 1,
) -> DifferencingOrder:
    """
    Decide (d, D) for a transformed series and cross-check the two test families.

    Args:
        series: Transformed series; NaN is only allowed at the edges
        period: Seasonal period (7 for daily data, 12 for monthly)
        alpha: Significance level for every test
        max_d: Upper bound on first differences
        max_D: Upper bound on seasonal differences

    Returns:
        DifferencingOrder; `confirmed` is False when the families disagree
    """
    x = drop_undefined_edges(series)

    D = nsdiffs(x, period=period, max_D=max_D)
    seasonal = apply_differencing(x, d=0, D=D, period=period)
    d = ndiffs(seasonal, alpha=alpha, max_d=max_d)
    differenced = apply_differencing(x, d=d, D=D, period=period)

    kpss_result = kpss_test(differenced, alpha=alpha)
    adf_undiff = adf_test(x, alpha=alpha)
    adf_diff = adf_test(differenced, alpha=alpha)

    problems = []
    if kpss_result.reject_null:
        problems.append(f"KPSS still rejects stationarity after d={d}, D={D}")
    if not adf_diff.reject_null:
        problems.append("ADF does not reject a unit root on the differenced series")
    if d + D > 0 and adf_undiff.reject_null:
        problems.append("ADF rejects a unit root on the undifferenced series")

    confirmed = not problems
    reason = "; ".join(problems) if problems else "KPSS and ADF agree"

    decision = DifferencingOrder(
        d=d,
        D=D,
        period=period,
        alpha=alpha,
        kpss=kpss_result,
        adf_undifferenced=adf_undiff,
        adf_differenced=adf_diff,
        confirmed=confirmed,
        reason=reason,
    )

    if confirmed:
        logger.info(f"[difference] d={d}, D={D} (period={period}): {reason}")
    else:
        logger.warning(f"[difference] d={d}, D={D} (period={period}) unconfirmed: {reason}")
    return decision


def resolve_differencing(
    decision: DifferencingOrder,
    override: Optional[Tuple[Optional[int], Optional[int]]] = None,
    on_dispute: str = "warn",
) -> Tuple[int, int]:
    """
    Orders to fit with.

    A human override always wins; a None entry in it keeps the selected
    order for that position. Otherwise an unconfirmed decision either
    proceeds with the KPSS-derived orders ("warn") or raises ("raise").
    """
    if override is not None and any(order is not None for order in override):
        d_override, D_override = override
        d = decision.d if d_override is None else int(d_override)
        D = decision.D if D_override is None else int(D_override)
        logger.info(f"[difference] using override (d, D)=({d}, {D}) over {decision.orders}")
        return d, D

    if not decision.confirmed:
        if on_dispute == "raise":
            raise DifferencingDisputeError(
                f"Differencing (d={decision.d}, D={decision.D}) disputed: {decision.reason}"
            )
        if on_dispute != "warn":
            raise ValueError(f"Unknown on_dispute policy: {on_dispute}")
        logger.warning(f"[difference] proceeding with unconfirmed {decision.orders}")

    return decision.orders
