# file: src/stationarity/residuals.py
"""
Residual diagnostics: is anything left for the model to explain?
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd
from statsmodels.stats.diagnostic import acorr_ljungbox
from statsmodels.tsa.stattools import acf

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LjungBoxResult:
    statistic: float
    pvalue: float
    lags: int
    model_df: int

    def is_white_noise(self, alpha: float = 0.05) -> bool:
        return bool(np.isfinite(self.pvalue) and self.pvalue > alpha)


def default_lags(n_obs: int, period: int) -> int:
    """min(2 * period, n / 5), with period 1 meaning non-seasonal (10 lags)"""
    base = 2 * period if period > 1 else 10
    return max(1, min(base, n_obs // 5))


def ljung_box(
    residuals: pd.Series,
    lags: Optional[int] = None,
    model_df: int = 0,
    period: int = 1,
) -> LjungBoxResult:
    """
    Portmanteau test of residual independence.

    model_df (number of fitted ARMA parameters) is subtracted from the
    degrees of freedom; lags is raised to model_df + 1 so the test stays
    defined.
    """
    resid = pd.Series(residuals, dtype="float64").dropna()
    if len(resid) < 3:
        raise ValueError(f"Ljung-Box needs at least 3 residuals, got {len(resid)}")

    if lags is None:
        lags = default_lags(len(resid), period)
    lags = max(int(lags), model_df + 1)
    lags = min(lags, len(resid) - 1)
    model_df = min(model_df, lags - 1)

    table = acorr_ljungbox(resid, lags=[lags], model_df=model_df, return_df=True)
    row = table.iloc[-1]
    return LjungBoxResult(
        statistic=float(row["lb_stat"]),
        pvalue=float(row["lb_pvalue"]),
        lags=lags,
        model_df=model_df,
    )


def residual_acf(residuals: pd.Series, nlags: int = 28) -> pd.DataFrame:
    """
    Residual autocorrelations with the +/- 1.96/sqrt(n) white-noise band.

    Returns:
        DataFrame [lag, acf, significant], lag 0 excluded
    """
    resid = pd.Series(residuals, dtype="float64").dropna()
    nlags = min(nlags, len(resid) - 1)
    values = acf(resid.to_numpy(), nlags=nlags, fft=True)[1:]
    bound = 1.96 / np.sqrt(len(resid))

    return pd.DataFrame({
        "lag": np.arange(1, nlags + 1),
        "acf": values,
        "significant": np.abs(values) > bound,
    })
