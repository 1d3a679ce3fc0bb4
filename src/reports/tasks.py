# file: src/reports/tasks.py
"""
Reports: Pipeline Tasks

Each report is a linear chain of pure steps; every step takes the previous
step's output and returns a new object:

COVID:  load -> validate -> truncate -> weekday check -> 7-day centered MA
        -> sqrt -> (d, D) -> SARIMA candidates -> AICc -> holdout RMSE
CO2:    load -> validate -> 2x12 MA trend + seasonal strength
        -> ETS candidates -> AICc / holdout RMSE

Artifacts (summary.json, leaderboard.parquet, forecast.parquet) are written
atomically; existing ones are reused unless overwrite is set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

import numpy as np
import pandas as pd

from src.conditioning.ingest import load_series_csv
from src.conditioning.prepare import split_holdout, truncate_series
from src.conditioning.smoothing import (centered_moving_average,
                                        double_moving_average,
                                        drop_undefined_edges)
from src.conditioning.transform import PowerTransform, choose_power
from src.conditioning.validate import validate_time_index
from src.conditioning.weekday import WeekdayEffect, weekday_effect
from src.modeling.models import SarimaSpec
from src.modeling.selection import (CandidateEvaluator, CandidateResult,
                                    ModelSelector, score_holdout)
from src.reports.config import Co2ReportConfig, CovidReportConfig
from src.reports.io_utils import atomic_write_json, atomic_write_parquet, read_json
from src.stationarity.differencing import (DifferencingOrder,
                                           resolve_differencing,
                                           seasonal_strength,
                                           select_differencing)
from src.stationarity.residuals import residual_acf

logger = logging.getLogger(__name__)

ReportConfig = Union[CovidReportConfig, Co2ReportConfig]


@dataclass(frozen=True)
class ConditionedSeries:
    """Every intermediate of the COVID conditioning chain"""
    raw: pd.Series
    truncated: pd.Series
    weekday: WeekdayEffect
    smoothed: pd.Series
    transform: PowerTransform


def load_and_validate(config: ReportConfig) -> pd.Series:
    """
    Task 1: Load the CSV and enforce the integrity gates.
    """
    series = load_series_csv(
        config.data_path,
        value_col=config.value_col,
        date_col=config.date_col,
        date_format=config.date_format,
        freq=config.freq,
    )

    report = validate_time_index(series, freq=config.freq)
    if not report.is_valid:
        raise ValueError(
            f"Time-series integrity failed: "
            f"{report.n_duplicates} duplicate timestamps; "
            f"{report.n_missing_periods} missing periods; "
            f"{report.n_nulls} nulls; monotonic={report.is_monotonic}"
        )
    logger.info(f"[validate] OK: {report.n_rows} rows, {report.n_zeros} zeros")
    return series


def condition_covid(raw: pd.Series, config: CovidReportConfig) -> ConditionedSeries:
    """
    Task 2: Truncate, check the weekday effect, smooth, pick the transform.
    """
    truncated = truncate_series(raw, config.cutoff)
    if truncated.empty:
        raise ValueError(f"No observations on or after cutoff {config.cutoff}")

    effect = weekday_effect(truncated)
    if effect.has_effect(config.alpha):
        logger.info(
            f"[weekday] collection bias detected (lowest={effect.lowest.name}); "
            f"smoothing with a {2 * config.half_window + 1}-day centered MA"
        )

    smoothed = centered_moving_average(truncated, half_window=config.half_window)

    if config.power is None:
        transform = choose_power(truncated)
    else:
        transform = PowerTransform(config.power)

    return ConditionedSeries(
        raw=raw,
        truncated=truncated,
        weekday=effect,
        smoothed=smoothed,
        transform=transform,
    )


def build_sarima_candidates(config: CovidReportConfig, d: int, D: int) -> List[SarimaSpec]:
    """(p, q, P, Q) grid from config, completed with the chosen (d, D)."""
    return [
        SarimaSpec(order=(p, d, q), seasonal_order=(P, D, Q), period=config.period)
        for p, q, P, Q in config.arma_candidates
    ]


def _leaderboard_with_holdout(
    selector: ModelSelector,
    results: List[CandidateResult],
    holdout: Dict[str, Dict],
) -> pd.DataFrame:
    leaderboard = selector.generate_leaderboard(results)
    leaderboard["holdout_rmse"] = leaderboard["model"].map(
        lambda name: holdout.get(name, {}).get("rmse", np.nan)
    )
    return leaderboard


def _significant_acf_lags(result: CandidateResult, period: int) -> List[int]:
    """Residual ACF lags (up to two seasons) outside the white-noise band"""
    table = residual_acf(result.model.residuals, nlags=2 * period)
    lags = [int(lag) for lag in table.loc[table["significant"], "lag"]]
    if lags:
        logger.info(f"[residuals] {result.name}: significant ACF at lags {lags}")
    return lags


def _reuse_existing(config: ReportConfig) -> Optional[Dict]:
    summary_path = config.summary_path()
    if summary_path.exists() and not config.overwrite:
        logger.info(f"[{config.name}] summary exists, skipping: {summary_path}")
        return read_json(summary_path)
    return None


def _publish(
    config: ReportConfig,
    summary: Dict,
    leaderboard: pd.DataFrame,
    forecast: pd.DataFrame,
) -> Dict:
    atomic_write_parquet(leaderboard, config.leaderboard_path())
    atomic_write_parquet(forecast, config.forecast_path())

    summary = {
        **summary,
        "leaderboard_path": str(config.leaderboard_path()),
        "forecast_path": str(config.forecast_path()),
    }
    atomic_write_json(summary, config.summary_path())
    logger.info(f"[{config.name}] wrote artifacts to {config.report_path()}")
    return summary


def run_covid_report(config: CovidReportConfig) -> Dict:
    """
    Runs the COVID SARIMA report and returns a summary dict.
    """
    existing = _reuse_existing(config)
    if existing is not None:
        return existing

    logger.info("=" * 60)
    logger.info("START COVID REPORT")
    logger.info("=" * 60)

    raw = load_and_validate(config)
    conditioned = condition_covid(raw, config)

    defined = drop_undefined_edges(conditioned.smoothed)
    train, test = split_holdout(defined, config.horizon)
    transform = conditioned.transform
    train_t = transform.apply(train)

    decision: DifferencingOrder = select_differencing(
        train_t,
        period=config.period,
        alpha=config.alpha,
        max_d=config.max_d,
        max_D=config.max_D,
    )
    d, D = resolve_differencing(
        decision,
        override=config.differencing_override,
        on_dispute=config.on_dispute,
    )

    specs = build_sarima_candidates(config, d=d, D=D)
    results = CandidateEvaluator(period=config.period).run(train_t, specs)

    selector = ModelSelector(alpha=config.alpha)
    best = selector.select_best(results)

    holdout = {}
    best_forecast = None
    for result in results:
        if not result.ok:
            continue
        frame, metrics = score_holdout(
            result.model,
            train,
            test,
            inverse=transform.inverse,
            alpha=config.alpha,
            season_length=config.period,
        )
        holdout[result.name] = metrics
        if result is best:
            best_forecast = frame

    leaderboard = _leaderboard_with_holdout(selector, results, holdout)

    summary = {
        "report": config.name,
        "n_raw": len(raw),
        "n_truncated": len(conditioned.truncated),
        "n_modeled": len(train),
        "cutoff": config.cutoff,
        "weekday_means": conditioned.weekday.means.round(3).to_dict(),
        "weekday_lowest": conditioned.weekday.lowest.name,
        "weekday_f_pvalue": conditioned.weekday.f_pvalue,
        "transform": transform.name,
        "differencing": decision.as_dict(),
        "fitted_orders": {"d": d, "D": D},
        "best_model": best.name,
        "best_aicc": best.aicc,
        "best_residuals_ok": best.residuals_ok(config.alpha),
        "best_residual_acf_lags": _significant_acf_lags(best, config.period),
        "best_params": {k: float(v) for k, v in best.model.params.items()},
        "holdout": holdout.get(best.name, {}),
        "failed_candidates": {r.name: r.error for r in results if not r.ok},
    }

    logger.info("=" * 60)
    logger.info("COVID REPORT COMPLETE")
    logger.info("=" * 60)
    return _publish(config, summary, leaderboard, best_forecast)


def run_co2_report(config: Co2ReportConfig) -> Dict:
    """
    Runs the CO2 ETS report and returns a summary dict.
    """
    existing = _reuse_existing(config)
    if existing is not None:
        return existing

    if config.selection_metric not in ("aicc", "rmse"):
        raise ValueError(f"Unknown selection_metric: {config.selection_metric}")

    logger.info("=" * 60)
    logger.info("START CO2 REPORT")
    logger.info("=" * 60)

    raw = load_and_validate(config)
    series = truncate_series(raw, config.cutoff) if config.cutoff else raw

    trend = double_moving_average(series, m=config.period)
    defined_trend = trend.dropna()
    strength = seasonal_strength(series, config.period)
    logger.info(f"[seasonality] STL seasonal strength={strength:.3f}")

    train, test = split_holdout(series, config.horizon)
    results = CandidateEvaluator(period=config.period).run(train, config.ets_candidates)

    selector = ModelSelector(alpha=config.alpha)

    holdout = {}
    frames = {}
    for result in results:
        if not result.ok:
            continue
        frame, metrics = score_holdout(
            result.model,
            train,
            test,
            alpha=config.alpha,
            season_length=config.period,
        )
        holdout[result.name] = metrics
        frames[result.name] = frame

    if config.selection_metric == "rmse":
        scored = [r for r in results if r.ok and np.isfinite(holdout[r.name]["rmse"])]
        if not scored:
            raise RuntimeError("No candidate produced a finite holdout RMSE")
        best = min(scored, key=lambda r: holdout[r.name]["rmse"])
        logger.info(f"[select] best by holdout RMSE={best.name}")
    else:
        best = selector.select_best(results)

    leaderboard = _leaderboard_with_holdout(selector, results, holdout)

    summary = {
        "report": config.name,
        "n_obs": len(series),
        "n_train": len(train),
        "seasonal_strength": strength,
        "trend_start": float(defined_trend.iloc[0]) if len(defined_trend) else None,
        "trend_end": float(defined_trend.iloc[-1]) if len(defined_trend) else None,
        "selection_metric": config.selection_metric,
        "best_model": best.name,
        "best_aicc": best.aicc,
        "best_residuals_ok": best.residuals_ok(config.alpha),
        "best_residual_acf_lags": _significant_acf_lags(best, config.period),
        "best_params": {k: float(v) for k, v in best.model.params.items()},
        "holdout": holdout.get(best.name, {}),
        "failed_candidates": {r.name: r.error for r in results if not r.ok},
    }

    logger.info("=" * 60)
    logger.info("CO2 REPORT COMPLETE")
    logger.info("=" * 60)
    return _publish(config, summary, leaderboard, frames[best.name])
