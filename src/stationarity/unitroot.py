"""
Stationarity: Unit-root and stationarity tests

Two complementary families, with opposite nulls:
- KPSS: H0 = series is (level) stationary
- ADF:  H0 = series has a unit root

Decisions compare the test statistic with the tabulated critical value at
alpha. Only when alpha is not tabulated does the p-value get compared with
alpha. A p-value is never compared with a statistic.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from typing import Dict

import numpy as np
import pandas as pd
from statsmodels.tsa.stattools import adfuller, kpss

logger = logging.getLogger(__name__)

KPSS = "kpss"
ADF = "adf"

NULL_STATIONARY = "stationary"
NULL_UNIT_ROOT = "unit root"


def alpha_key(alpha: float) -> str:
    """0.05 -> '5%', 0.025 -> '2.5%' (statsmodels critical-value keys)"""
    return f"{alpha * 100:g}%"


@dataclass(frozen=True)
class StationarityTest:
    """Outcome of one KPSS or ADF run"""
    name: str
    statistic: float
    pvalue: float
    lags: int
    nobs: int
    alpha: float = 0.05
    critical_values: Dict[str, float] = field(default_factory=dict)

    @property
    def null_hypothesis(self) -> str:
        return NULL_STATIONARY if self.name == KPSS else NULL_UNIT_ROOT

    @property
    def critical_value(self) -> float:
        """Critical value at alpha, NaN when alpha is not tabulated"""
        return float(self.critical_values.get(alpha_key(self.alpha), np.nan))

    @property
    def reject_null(self) -> bool:
        crit = self.critical_value
        if np.isfinite(crit):
            # KPSS rejects in the upper tail, ADF in the lower tail
            if self.name == KPSS:
                return bool(self.statistic > crit)
            return bool(self.statistic < crit)
        return bool(self.pvalue < self.alpha)

    @property
    def is_stationary(self) -> bool:
        """KPSS: not rejected. ADF: rejected."""
        if self.name == KPSS:
            return not self.reject_null
        return self.reject_null

    def as_dict(self) -> Dict:
        return {
            "test": self.name,
            "null": self.null_hypothesis,
            "statistic": self.statistic,
            "pvalue": self.pvalue,
            "critical_value": self.critical_value,
            "alpha": self.alpha,
            "reject_null": self.reject_null,
            "stationary": self.is_stationary,
        }


def _clean(series: pd.Series, name: str) -> np.ndarray:
    x = pd.Series(series, dtype="float64").replace([np.inf, -np.inf], np.nan).dropna().to_numpy()
    if x.size < 3:
        raise ValueError(f"{name} requires at least 3 finite observations, got {x.size}")
    return x


def kpss_test(series: pd.Series, alpha: float = 0.05, regression: str = "c") -> StationarityTest:
    """
    KPSS test (H0: stationary around a level, or a trend with regression="ct").

    statsmodels reports p-values only inside its lookup table (0.01-0.10) and
    warns when the statistic falls outside it; the warning is silenced because
    the decision uses the critical value.
    """
    x = _clean(series, "KPSS")
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        stat, pvalue, lags, crit = kpss(x, regression=regression, nlags="auto")

    result = StationarityTest(
        name=KPSS,
        statistic=float(stat),
        pvalue=float(pvalue),
        lags=int(lags),
        nobs=int(x.size),
        alpha=alpha,
        critical_values={k: float(v) for k, v in crit.items()},
    )
    logger.debug(f"[kpss] stat={result.statistic:.4f} crit={result.critical_value:.4f} reject={result.reject_null}")
    return result


def adf_test(series: pd.Series, alpha: float = 0.05, regression: str = "c") -> StationarityTest:
    """Augmented Dickey-Fuller test (H0: unit root), lag order by AIC."""
    x = _clean(series, "ADF")
    res = adfuller(x, regression=regression, autolag="AIC")
    stat, pvalue, usedlag, nobs, crit = res[:5]

    result = StationarityTest(
        name=ADF,
        statistic=float(stat),
        pvalue=float(pvalue),
        lags=int(usedlag),
        nobs=int(nobs),
        alpha=alpha,
        critical_values={k: float(v) for k, v in crit.items()},
    )
    logger.debug(f"[adf] stat={result.statistic:.4f} crit={result.critical_value:.4f} reject={result.reject_null}")
    return result
