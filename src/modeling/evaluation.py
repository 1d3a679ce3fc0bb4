# file: src/modeling/evaluation.py
"""
Modeling: Forecast Evaluation Metrics

Computes forecasting metrics with explicit NaN handling (fail-loud principle).
Read-only: nothing here refits a model.
"""

import logging
from typing import Dict, Optional

import numpy as np

logger = logging.getLogger(__name__)


def _as_float(values) -> np.ndarray:
    return np.asarray(values, dtype=float)


class ForecastMetrics:
    """Compute forecasting evaluation metrics"""

    @staticmethod
    def rmse(y_true, y_pred) -> float:
        """
        Root Mean Squared Error: sqrt(mean((forecast - actual) ** 2))

        Explicit NaN masking (fail-loud):
        - Returns NaN if no valid predictions
        - Masks NaN/inf values before computation
        """
        y_true, y_pred = _as_float(y_true), _as_float(y_pred)
        if y_true.shape != y_pred.shape:
            raise ValueError(f"Shape mismatch: actual {y_true.shape} vs forecast {y_pred.shape}")

        valid_mask = np.isfinite(y_pred) & np.isfinite(y_true)

        if valid_mask.sum() == 0:
            return np.nan

        return float(np.sqrt(np.mean((y_pred[valid_mask] - y_true[valid_mask]) ** 2)))

    @staticmethod
    def mae(y_true, y_pred) -> float:
        """Mean Absolute Error (NaN-masked)"""
        y_true, y_pred = _as_float(y_true), _as_float(y_pred)
        valid_mask = np.isfinite(y_pred) & np.isfinite(y_true)

        if valid_mask.sum() == 0:
            return np.nan

        return float(np.mean(np.abs(y_pred[valid_mask] - y_true[valid_mask])))

    @staticmethod
    def mape(y_true, y_pred) -> float:
        """
        Mean Absolute Percentage Error (%)

        Zero actuals are masked along with NaN/inf; case counts do hit zero.
        """
        y_true, y_pred = _as_float(y_true), _as_float(y_pred)
        valid_mask = (
            np.isfinite(y_pred) &
            np.isfinite(y_true) &
            (np.abs(y_true) > 1e-10)
        )

        if valid_mask.sum() == 0:
            return np.nan

        ape = np.abs((y_pred[valid_mask] - y_true[valid_mask]) / np.abs(y_true[valid_mask]))
        return float(100 * np.mean(ape))

    @staticmethod
    def mase(y_true, y_pred, y_train, season_length: int = 1) -> float:
        """
        Mean Absolute Scaled Error

        Scales error relative to the in-sample seasonal naive forecast.
        Returns NaN with too little training data or a flat training series.
        """
        y_true, y_pred, y_train = _as_float(y_true), _as_float(y_pred), _as_float(y_train)
        y_train = y_train[np.isfinite(y_train)]

        if len(y_train) <= season_length:
            return np.nan

        mae_train = np.mean(np.abs(y_train[season_length:] - y_train[:-season_length]))
        if mae_train < 1e-10:
            return np.nan

        valid_mask = np.isfinite(y_pred) & np.isfinite(y_true)
        if valid_mask.sum() == 0:
            return np.nan

        mae_test = np.mean(np.abs(y_pred[valid_mask] - y_true[valid_mask]))
        return float(mae_test / mae_train)

    @staticmethod
    def coverage(y_true, lower, upper) -> float:
        """
        Prediction Interval Coverage (%)

        Denominator counts valid (non-NaN) rows only.
        """
        y_true, lower, upper = _as_float(y_true), _as_float(lower), _as_float(upper)
        valid_mask = (
            np.isfinite(y_true) &
            np.isfinite(lower) &
            np.isfinite(upper)
        )

        if valid_mask.sum() == 0:
            return np.nan

        covered = (y_true[valid_mask] >= lower[valid_mask]) & \
                  (y_true[valid_mask] <= upper[valid_mask])

        return float(100 * np.mean(covered))


def compute_series_metrics(
    y_true,
    y_pred,
    y_train=None,
    lower=None,
    upper=None,
    season_length: int = 1,
    valid_threshold: int = 1,
) -> Dict[str, float]:
    """
    Compute all metrics with explicit validation

    Args:
        y_true: Held-out actual values
        y_pred: Point forecasts
        y_train: Training values (for MASE)
        lower, upper: Prediction interval bounds (for coverage)
        season_length: Seasonal naive lag for MASE
        valid_threshold: Minimum valid predictions required

    Returns:
        Dictionary of metrics plus valid_count (and error when too few rows)
    """
    y_true, y_pred = _as_float(y_true), _as_float(y_pred)
    valid_count = int((np.isfinite(y_pred) & np.isfinite(y_true)).sum())

    if valid_count < valid_threshold:
        logger.warning(f"[metrics] only {valid_count} valid predictions (< {valid_threshold})")
        return {
            "rmse": np.nan,
            "mae": np.nan,
            "mape": np.nan,
            "mase": np.nan,
            "coverage": np.nan,
            "valid_count": valid_count,
            "error": f"Insufficient valid predictions: {valid_count} < {valid_threshold}",
        }

    metrics: Dict[str, Optional[float]] = {
        "rmse": ForecastMetrics.rmse(y_true, y_pred),
        "mae": ForecastMetrics.mae(y_true, y_pred),
        "mape": ForecastMetrics.mape(y_true, y_pred),
        "mase": np.nan,
        "coverage": np.nan,
    }
    if y_train is not None:
        metrics["mase"] = ForecastMetrics.mase(y_true, y_pred, y_train, season_length=season_length)
    if lower is not None and upper is not None:
        metrics["coverage"] = ForecastMetrics.coverage(y_true, lower, upper)

    metrics["valid_count"] = valid_count
    return metrics
