"""
Modeling: Metrics Tests

Validates NaN-aware behavior (explicit masking, not silent ignoring).
"""

import numpy as np
import pytest

from src.modeling.evaluation import ForecastMetrics, compute_series_metrics


class TestRmse:

    def test_matches_definition(self):
        """RMSE over an 8-step holdout is sqrt(mean((forecast - actual)^2))"""
        actual = np.array([120.0, 98.0, 143.0, 150.0, 161.0, 133.0, 87.0, 175.0])
        forecast = np.array([118.5, 104.0, 139.0, 155.5, 149.0, 140.0, 95.0, 170.0])

        result = ForecastMetrics.rmse(actual, forecast)

        assert result == np.sqrt(np.mean((forecast - actual) ** 2))
        assert result > 0

    def test_perfect_forecast_is_zero(self):
        values = np.array([1.0, 2.0, 3.0])
        assert ForecastMetrics.rmse(values, values) == 0.0

    @pytest.mark.fail_loud
    def test_shape_mismatch_raises(self):
        with pytest.raises(ValueError, match="Shape mismatch"):
            ForecastMetrics.rmse(np.ones(8), np.ones(7))


@pytest.mark.fail_loud
class TestMetricsNaNHandling:
    """Metrics must explicitly handle NaN via masking"""

    def test_rmse_nan_masked(self):
        y_true = np.array([100.0, 102.0, np.nan, 106.0])
        y_pred = np.array([99.0, 101.0, 104.0, 107.0])

        assert ForecastMetrics.rmse(y_true, y_pred) == pytest.approx(1.0)

    def test_rmse_all_nan_returns_nan(self):
        nans = np.full(3, np.nan)
        assert np.isnan(ForecastMetrics.rmse(nans, nans))

    def test_mape_masks_zero_actuals(self):
        y_true = np.array([0.0, 100.0, 200.0])
        y_pred = np.array([5.0, 110.0, 180.0])

        assert ForecastMetrics.mape(y_true, y_pred) == pytest.approx(10.0)

    def test_coverage_counts_valid_rows(self):
        y_true = np.array([1.0, 5.0, np.nan, 3.0])
        lower = np.array([0.0, 0.0, 0.0, 4.0])
        upper = np.array([2.0, 4.0, 9.0, 6.0])

        assert ForecastMetrics.coverage(y_true, lower, upper) == pytest.approx(100 / 3)


class TestMase:

    def test_scaled_by_naive_error(self):
        y_train = np.array([1.0, 2.0, 3.0, 4.0])
        y_true = np.array([5.0, 6.0])
        y_pred = np.array([7.0, 8.0])

        assert ForecastMetrics.mase(y_true, y_pred, y_train) == pytest.approx(2.0)

    def test_flat_training_returns_nan(self):
        assert np.isnan(ForecastMetrics.mase(np.ones(2), np.ones(2), np.ones(10)))


class TestComputeSeriesMetrics:

    def test_all_metrics_present(self):
        metrics = compute_series_metrics(
            y_true=[10.0, 12.0],
            y_pred=[11.0, 12.0],
            y_train=[8.0, 9.0, 10.0],
            lower=[9.0, 11.0],
            upper=[13.0, 13.0],
        )

        assert set(metrics) >= {"rmse", "mae", "mape", "mase", "coverage", "valid_count"}
        assert metrics["valid_count"] == 2
        assert metrics["coverage"] == 100.0
        assert metrics["mae"] == pytest.approx(0.5)

    @pytest.mark.fail_loud
    def test_below_threshold_reports_error(self):
        metrics = compute_series_metrics(
            y_true=[10.0, np.nan],
            y_pred=[11.0, 12.0],
            valid_threshold=2,
        )

        assert metrics["valid_count"] == 1
        assert np.isnan(metrics["rmse"])
        assert "Insufficient" in metrics["error"]
