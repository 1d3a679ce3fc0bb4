"""
Stationarity: How many differences does a series need?

- unitroot - KPSS / ADF wrappers with a critical-value decision rule
- differencing - ndiffs / nsdiffs and the cross-checked (d, D) decision
- residuals - Ljung-Box and residual ACF for fitted models
"""

from .differencing import (DifferencingDisputeError, DifferencingOrder,
                           apply_differencing, difference, ndiffs, nsdiffs,
                           resolve_differencing, seasonal_strength,
                           select_differencing)
from .residuals import LjungBoxResult, ljung_box, residual_acf
from .unitroot import StationarityTest, adf_test, kpss_test

__all__ = [
    # Tests
    "StationarityTest",
    "kpss_test",
    "adf_test",
    # Differencing
    "difference",
    "apply_differencing",
    "seasonal_strength",
    "ndiffs",
    "nsdiffs",
    "select_differencing",
    "resolve_differencing",
    "DifferencingOrder",
    "DifferencingDisputeError",
    # Residuals
    "LjungBoxResult",
    "ljung_box",
    "residual_acf",
]
