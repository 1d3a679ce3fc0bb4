"""
Reports: Pipeline Smoke Tests

End-to-end runs on small synthetic CSVs: both reports must produce their
artifacts and reuse them on a second run.
"""

import numpy as np
import pandas as pd
import pytest
from typer.testing import CliRunner

from src.modeling.models import EtsSpec
from src.reports.cli import app
from src.reports.config import Co2ReportConfig, CovidReportConfig
from src.reports.tasks import (build_sarima_candidates, condition_covid,
                               load_and_validate, run_co2_report,
                               run_covid_report)


@pytest.fixture
def covid_csv(tmp_path):
    """150 days from Sunday 2020-03-01, growing counts, zero every Sunday"""
    rng = np.random.default_rng(8)
    dates = pd.date_range("2020-03-01", periods=150, freq="D")
    cases = np.round(20 + 1.5 * np.arange(150) + rng.normal(0, 4, size=150)).clip(min=1)
    cases[::7] = 0
    path = tmp_path / "covid_cases.csv"
    pd.DataFrame({"date": dates.strftime("%m/%d/%Y"), "cases": cases.astype(int)}).to_csv(path, index=False)
    return path


@pytest.fixture
def co2_csv(tmp_path):
    """12 years of monthly values: trend + annual cycle"""
    rng = np.random.default_rng(4)
    n = 144
    dates = pd.date_range("1990-01-01", periods=n, freq="MS")
    values = 350 + 0.12 * np.arange(n) + 3 * np.sin(2 * np.pi * np.arange(n) / 12) + rng.normal(0, 0.3, size=n)
    path = tmp_path / "co2.csv"
    pd.DataFrame({"date": dates.strftime("%Y-%m-%d"), "CO2": values}).to_csv(path, index=False)
    return path


def _covid_config(covid_csv, tmp_path, **overrides):
    params = dict(
        data_path=str(covid_csv),
        arma_candidates=((1, 0, 0, 0), (0, 1, 0, 0)),
        artifacts_dir=str(tmp_path / "artifacts"),
    )
    params.update(overrides)
    return CovidReportConfig(**params)


def _co2_config(co2_csv, tmp_path, **overrides):
    params = dict(
        data_path=str(co2_csv),
        ets_candidates=(
            EtsSpec(error="add", trend="add"),
            EtsSpec(error="add", trend="add", seasonal="add", seasonal_periods=12),
        ),
        artifacts_dir=str(tmp_path / "artifacts"),
    )
    params.update(overrides)
    return Co2ReportConfig(**params)


class TestConfigDefaults:

    def test_covid_defaults(self):
        cfg = CovidReportConfig()
        assert cfg.cutoff == "2020-04-01"
        assert cfg.half_window == 3
        assert cfg.period == 7
        assert cfg.horizon == 8
        assert cfg.summary_path().name == "summary.json"
        assert cfg.report_path().name == "covid"

    def test_co2_defaults(self):
        cfg = Co2ReportConfig()
        assert cfg.period == 12
        assert cfg.freq == "MS"
        assert cfg.ets_candidates[0].name == "ETS(A,N,N)"

    def test_candidates_take_chosen_orders(self):
        specs = build_sarima_candidates(CovidReportConfig(), d=1, D=1)
        assert len(specs) == 6
        assert all(s.order[1] == 1 and s.seasonal_order[1] == 1 for s in specs)
        assert all(s.period == 7 for s in specs)


class TestCovidConditioning:

    def test_conditioning_chain(self, covid_csv, tmp_path):
        cfg = _covid_config(covid_csv, tmp_path)

        raw = load_and_validate(cfg)
        conditioned = condition_covid(raw, cfg)

        assert len(raw) == 150
        assert conditioned.truncated.index[0] == pd.Timestamp("2020-04-01")
        assert conditioned.weekday.lowest.name == "SUN"
        assert conditioned.transform.name == "sqrt"
        assert conditioned.smoothed.dropna().min() > 0

    @pytest.mark.fail_loud
    def test_cutoff_past_end_raises(self, covid_csv, tmp_path):
        cfg = _covid_config(covid_csv, tmp_path, cutoff="2021-01-01")
        with pytest.raises(ValueError, match="cutoff"):
            condition_covid(load_and_validate(cfg), cfg)


@pytest.mark.smoke
class TestCovidReport:

    def test_artifacts_written(self, covid_csv, tmp_path):
        cfg = _covid_config(covid_csv, tmp_path)

        summary = run_covid_report(cfg)

        assert cfg.summary_path().exists()
        assert cfg.leaderboard_path().exists()
        assert cfg.forecast_path().exists()
        assert summary["transform"] == "sqrt"
        assert summary["n_truncated"] == 119
        assert summary["n_modeled"] == 119 - 6 - 8
        assert summary["best_model"] in {s.name for s in build_sarima_candidates(cfg, **summary["fitted_orders"])}
        assert all(1 <= lag <= 2 * cfg.period for lag in summary["best_residual_acf_lags"])

        forecast = pd.read_parquet(cfg.forecast_path())
        assert len(forecast) == 8
        assert {"ds", "mean", "lower", "upper", "actual"} <= set(forecast.columns)
        assert (forecast["lower"] >= 0).all()

        leaderboard = pd.read_parquet(cfg.leaderboard_path())
        assert len(leaderboard) == 2
        assert "holdout_rmse" in leaderboard.columns

    def test_rerun_reuses_summary(self, covid_csv, tmp_path):
        cfg = _covid_config(covid_csv, tmp_path)
        first = run_covid_report(cfg)

        second = run_covid_report(cfg)

        assert second["best_model"] == first["best_model"]
        assert second["leaderboard_path"] == first["leaderboard_path"]

    @pytest.mark.fail_loud
    def test_override_is_applied(self, covid_csv, tmp_path):
        cfg = _covid_config(covid_csv, tmp_path, differencing_override=(1, 0))

        summary = run_covid_report(cfg)

        assert summary["fitted_orders"] == {"d": 1, "D": 0}

    def test_partial_override_keeps_selected_seasonal_order(self, covid_csv, tmp_path):
        cfg = _covid_config(covid_csv, tmp_path, differencing_override=(1, None))

        summary = run_covid_report(cfg)

        assert summary["fitted_orders"] == {"d": 1, "D": summary["differencing"]["D"]}


@pytest.mark.smoke
class TestCo2Report:

    def test_seasonal_model_selected(self, co2_csv, tmp_path):
        cfg = _co2_config(co2_csv, tmp_path)

        summary = run_co2_report(cfg)

        assert summary["best_model"] == "ETS(A,A,A)"
        assert summary["seasonal_strength"] > 0.64
        assert summary["n_train"] == 144 - 24
        assert summary["trend_end"] > summary["trend_start"]
        assert isinstance(summary["best_residual_acf_lags"], list)
        assert all(1 <= lag <= 24 for lag in summary["best_residual_acf_lags"])

        forecast = pd.read_parquet(cfg.forecast_path())
        assert len(forecast) == 24

    def test_rmse_selection(self, co2_csv, tmp_path):
        cfg = _co2_config(co2_csv, tmp_path, selection_metric="rmse")
        summary = run_co2_report(cfg)
        assert summary["selection_metric"] == "rmse"
        assert summary["best_model"] == "ETS(A,A,A)"

    @pytest.mark.fail_loud
    def test_unknown_metric_raises(self, co2_csv, tmp_path):
        cfg = _co2_config(co2_csv, tmp_path, selection_metric="mape")
        with pytest.raises(ValueError, match="selection_metric"):
            run_co2_report(cfg)


class TestCli:

    def test_show_prints_summary(self, co2_csv, tmp_path):
        cfg = _co2_config(co2_csv, tmp_path)
        run_co2_report(cfg)

        result = CliRunner().invoke(app, ["show", str(cfg.summary_path())])

        assert result.exit_code == 0, result.output
        assert "ETS(A,A,A)" in result.output

    def _run_covid_cli(self, monkeypatch, tmp_path, args):
        """Invoke `covid` with the pipeline replaced by a config capture"""
        captured = {}

        def fake_report(cfg):
            captured["config"] = cfg
            return {"report": cfg.name, "best_model": "ARIMA(1,1,0)", "leaderboard_path": "unused"}

        monkeypatch.setattr("src.reports.cli.run_covid_report", fake_report)
        monkeypatch.setattr("src.reports.cli._print_leaderboard", lambda path: None)

        result = CliRunner().invoke(
            app, ["covid", "--artifacts-dir", str(tmp_path / "artifacts"), *args]
        )
        assert result.exit_code == 0, result.output
        return captured["config"]

    def test_covid_d_only_leaves_seasonal_order_open(self, monkeypatch, tmp_path):
        cfg = self._run_covid_cli(monkeypatch, tmp_path, ["--d", "1"])
        assert cfg.differencing_override == (1, None)

    def test_covid_seasonal_d_only_leaves_d_open(self, monkeypatch, tmp_path):
        cfg = self._run_covid_cli(monkeypatch, tmp_path, ["--seasonal-d", "0"])
        assert cfg.differencing_override == (None, 0)

    def test_covid_without_orders_has_no_override(self, monkeypatch, tmp_path):
        cfg = self._run_covid_cli(monkeypatch, tmp_path, [])
        assert cfg.differencing_override is None
