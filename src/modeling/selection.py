"""
Modeling: Candidate Evaluation and Selection

Fits every candidate spec on the same series, records AICc and residual
diagnostics, and picks the minimum-AICc model. One candidate failing never
aborts the others: its error is kept on the result instead.
"""

import logging
import time
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from src.stationarity.residuals import LjungBoxResult, ljung_box

from .evaluation import compute_series_metrics
from .models import ForecastModel, ModelFactory, ModelSpec

logger = logging.getLogger(__name__)


@dataclass
class CandidateResult:
    """One candidate's fit: handle + comparable metrics, or the failure reason"""
    spec: ModelSpec
    model: Optional[ForecastModel] = None
    aicc: float = np.nan
    aic: float = np.nan
    ljung_box: Optional[LjungBoxResult] = None
    error: Optional[str] = None
    fit_time: float = 0.0

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def ok(self) -> bool:
        return self.error is None and self.model is not None

    def residuals_ok(self, alpha: float = 0.05) -> bool:
        """No significant residual autocorrelation left at alpha"""
        return self.ljung_box is not None and self.ljung_box.is_white_noise(alpha)


class CandidateEvaluator:
    """Fits candidate specs in isolation"""

    def __init__(self, period: int = 1, ljung_box_lags: Optional[int] = None):
        """
        Args:
            period: Seasonal period, sets the default Ljung-Box lag (2 * period)
            ljung_box_lags: Explicit Ljung-Box lag, overrides the default
        """
        self.period = period
        self.ljung_box_lags = ljung_box_lags

    def run(self, y: pd.Series, specs: Iterable[ModelSpec]) -> List[CandidateResult]:
        """
        Fit all candidates on `y`.

        Returns:
            One CandidateResult per spec, in input order
        """
        specs = list(specs)
        logger.info(f"[fit] evaluating {len(specs)} candidates on {len(y)} observations")

        results = []
        for spec in specs:
            results.append(self._fit_one(y, spec))

        n_failed = sum(not r.ok for r in results)
        if n_failed:
            logger.warning(f"[fit] {n_failed}/{len(results)} candidates failed")
        return results

    def _fit_one(self, y: pd.Series, spec: ModelSpec) -> CandidateResult:
        start_time = time.time()
        try:
            model = ModelFactory.create(spec).fit(y)
            lb = ljung_box(
                model.residuals,
                lags=self.ljung_box_lags,
                model_df=model.model_df,
                period=self.period,
            )
            result = CandidateResult(
                spec=spec,
                model=model,
                aicc=model.aicc,
                aic=model.aic,
                ljung_box=lb,
            )
            logger.info(f"[fit] {spec.name}: AICc={result.aicc:.2f}, Ljung-Box p={lb.pvalue:.3f}")
        except Exception as e:
            logger.warning(f"[fit] {spec.name} failed: {e}")
            result = CandidateResult(spec=spec, error=f"{type(e).__name__}: {e}")

        result.fit_time = time.time() - start_time
        return result


class ModelSelector:
    """Select the best candidate by information criterion"""

    def __init__(self, alpha: float = 0.05):
        self.alpha = alpha

    def select_best(self, results: List[CandidateResult]) -> CandidateResult:
        """
        Minimum finite AICc among successful fits.

        Ties keep input order, so list simpler models first.
        """
        valid = [r for r in results if r.ok and np.isfinite(r.aicc)]
        if not valid:
            reasons = "; ".join(f"{r.name}: {r.error}" for r in results)
            raise RuntimeError(f"No candidate model could be fitted ({reasons})")

        best = valid[0]
        for result in valid[1:]:
            if result.aicc < best.aicc:
                best = result

        if not best.residuals_ok(self.alpha):
            pvalue = best.ljung_box.pvalue if best.ljung_box else np.nan
            logger.warning(
                f"[select] {best.name} has autocorrelated residuals "
                f"(Ljung-Box p={pvalue:.3f}); review before accepting"
            )
        logger.info(f"[select] best={best.name} AICc={best.aicc:.2f}")
        return best

    def generate_leaderboard(self, results: List[CandidateResult]) -> pd.DataFrame:
        """
        One row per candidate sorted by AICc (failures last).
        """
        rows = []
        for result in results:
            lb = result.ljung_box
            rows.append({
                "model": result.name,
                "aicc": result.aicc,
                "aic": result.aic,
                "lb_stat": lb.statistic if lb else np.nan,
                "lb_pvalue": lb.pvalue if lb else np.nan,
                "residuals_ok": result.residuals_ok(self.alpha),
                "fit_time": round(result.fit_time, 3),
                "error": result.error,
            })

        leaderboard = pd.DataFrame(rows, columns=[
            "model", "aicc", "aic", "lb_stat", "lb_pvalue", "residuals_ok", "fit_time", "error",
        ])
        leaderboard = leaderboard.sort_values("aicc", kind="mergesort", na_position="last")
        leaderboard["aicc_rank"] = leaderboard["aicc"].rank(method="min")
        return leaderboard.reset_index(drop=True)


def score_holdout(
    model: ForecastModel,
    train: pd.Series,
    test: pd.Series,
    inverse=None,
    alpha: float = 0.05,
    season_length: int = 1,
) -> Tuple[pd.DataFrame, dict]:
    """
    Forecast len(test) steps and compare with the held-out actuals.

    Args:
        model: Fitted model
        train: Training series on the original scale (for MASE)
        test: Held-out actuals on the original scale
        inverse: Back-transform applied to forecasts fitted on a transformed scale
        alpha: 1 - interval level
        season_length: Seasonal naive lag for MASE

    Returns:
        (forecast frame [mean, lower, upper, actual], metrics dict)
    """
    frame = model.forecast(len(test), alpha=alpha)
    if inverse is not None:
        frame = inverse(frame)
    frame["actual"] = test.to_numpy(dtype=float)

    metrics = compute_series_metrics(
        y_true=frame["actual"].to_numpy(),
        y_pred=frame["mean"].to_numpy(),
        y_train=train.to_numpy(dtype=float),
        lower=frame["lower"].to_numpy(),
        upper=frame["upper"].to_numpy(),
        season_length=season_length,
    )
    logger.info(f"[holdout] {model.get_name()}: RMSE={metrics['rmse']:.3f}, MAE={metrics['mae']:.3f}")
    return frame, metrics
