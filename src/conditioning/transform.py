"""
Conditioning Step 6: Variance-stabilizing power transform

value ** lam, with lam == 0 meaning log. Counts with zeros cannot be logged,
so choose_power falls back to the square root for them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

SQRT = 0.5
LOG = 0.0


@dataclass(frozen=True)
class PowerTransform:
    """Invertible power transform (lam=0.5 square root, lam=0 log)"""
    lam: float = SQRT

    def __post_init__(self):
        if self.lam < 0:
            raise ValueError(f"Only non-negative exponents are supported, got {self.lam}")

    @property
    def name(self) -> str:
        if self.lam == LOG:
            return "log"
        if self.lam == SQRT:
            return "sqrt"
        return f"power({self.lam:g})"

    def apply(self, series: pd.Series) -> pd.Series:
        """Forward transform; NaN passes through."""
        defined = series.dropna()
        if (defined < 0).any():
            raise ValueError(f"{self.name} transform is undefined for negative values")
        if self.lam == LOG and (defined == 0).any():
            raise ValueError("log transform is undefined at zero; use the square root")

        if self.lam == LOG:
            return np.log(series)
        return series ** self.lam

    def inverse(self, transformed):
        """
        Back-transform to the original scale.

        Negative values (typically lower interval bounds) are clipped at 0
        before inverting a power, since they have no preimage.
        """
        if self.lam == LOG:
            return np.exp(transformed)
        if isinstance(transformed, (pd.Series, pd.DataFrame)):
            clipped = transformed.clip(lower=0)
        else:
            clipped = np.clip(transformed, 0, None)
        return clipped ** (1.0 / self.lam)


def choose_power(series: pd.Series) -> PowerTransform:
    """Square root when the series contains zeros, log otherwise."""
    defined = series.dropna()
    if (defined < 0).any():
        raise ValueError("Power transforms need non-negative values")

    lam = SQRT if (defined == 0).any() else LOG
    transform = PowerTransform(lam)
    logger.info(f"[transform] chose {transform.name} ({int((defined == 0).sum())} zeros)")
    return transform
