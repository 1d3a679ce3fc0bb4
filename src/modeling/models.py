"""
Modeling: Model Implementations

Two families, both fitted by statsmodels:
1. SARIMA(p,d,q)(P,D,Q)[s] via SARIMAX
2. ETS(error, trend, season) via ETSModel

Each fitted model exposes parameters, AIC/AICc, residuals, and a forecast
with prediction intervals. Fitting errors propagate; isolating them per
candidate is the evaluator's job.
"""

import logging
import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import numpy as np
import pandas as pd
from statsmodels.tools.sm_exceptions import ConvergenceWarning
from statsmodels.tsa.exponential_smoothing.ets import ETSModel
from statsmodels.tsa.statespace.sarimax import SARIMAX

logger = logging.getLogger(__name__)

_COMPONENT_CODES = {None: "N", "add": "A", "mul": "M"}


@dataclass(frozen=True)
class SarimaSpec:
    """SARIMA orders; period 1 means non-seasonal"""
    order: Tuple[int, int, int]
    seasonal_order: Tuple[int, int, int] = (0, 0, 0)
    period: int = 1

    @property
    def name(self) -> str:
        p, d, q = self.order
        if self.period > 1 and any(self.seasonal_order):
            P, D, Q = self.seasonal_order
            return f"SARIMA({p},{d},{q})({P},{D},{Q})[{self.period}]"
        return f"ARIMA({p},{d},{q})"

    @property
    def n_arma_params(self) -> int:
        p, _, q = self.order
        P, _, Q = self.seasonal_order
        return p + q + P + Q

    @property
    def burn_in(self) -> int:
        """Leading residuals dominated by the diffuse initialization"""
        return self.order[1] + self.seasonal_order[1] * self.period


@dataclass(frozen=True)
class EtsSpec:
    """ETS components: error/trend/seasonal in {"add", "mul", None}"""
    error: str = "add"
    trend: Optional[str] = None
    damped_trend: bool = False
    seasonal: Optional[str] = None
    seasonal_periods: Optional[int] = None

    def __post_init__(self):
        for label, value in (("error", self.error), ("trend", self.trend), ("seasonal", self.seasonal)):
            if value not in _COMPONENT_CODES:
                raise ValueError(f"Unknown ETS {label} component: {value!r}")
        if self.error is None:
            raise ValueError("ETS error component is required")
        if self.damped_trend and self.trend is None:
            raise ValueError("damped_trend needs a trend component")
        if self.seasonal is not None and not self.seasonal_periods:
            raise ValueError("seasonal ETS needs seasonal_periods")

    @property
    def name(self) -> str:
        trend = _COMPONENT_CODES[self.trend] + ("d" if self.damped_trend else "")
        return f"ETS({_COMPONENT_CODES[self.error]},{trend},{_COMPONENT_CODES[self.seasonal]})"

    @property
    def n_smoothing_params(self) -> int:
        return 1 + (self.trend is not None) + (self.seasonal is not None) + self.damped_trend


ModelSpec = Union[SarimaSpec, EtsSpec]


def future_index(index: pd.Index, horizon: int) -> pd.Index:
    """Timestamps for the `horizon` steps after `index`"""
    if isinstance(index, pd.DatetimeIndex):
        freq = index.freq or pd.infer_freq(index)
        if freq is not None:
            return pd.date_range(start=index[-1], periods=horizon + 1, freq=freq)[1:]
    return pd.RangeIndex(len(index), len(index) + horizon)


def _interval_frame(frame: pd.DataFrame, index: pd.Index) -> pd.DataFrame:
    """Normalize statsmodels summary frames to [mean, lower, upper]."""
    lower = next(col for col in frame.columns if "lower" in col)
    upper = next(col for col in frame.columns if "upper" in col)
    out = pd.DataFrame({
        "mean": frame["mean"].to_numpy(dtype=float),
        "lower": frame[lower].to_numpy(dtype=float),
        "upper": frame[upper].to_numpy(dtype=float),
    }, index=index)
    out.index.name = "ds"
    return out


class ForecastModel(ABC):
    """Base class for fitted-model handles"""

    def __init__(self, spec: ModelSpec):
        self.spec = spec
        self.result = None
        self.train_index: Optional[pd.Index] = None
        self.convergence_warnings = 0

    @abstractmethod
    def fit(self, y: pd.Series) -> "ForecastModel":
        """Fit model to training data"""
        pass

    @abstractmethod
    def forecast(self, horizon: int, alpha: float = 0.05) -> pd.DataFrame:
        """Point forecasts and (1 - alpha) prediction interval, [mean, lower, upper]"""
        pass

    @property
    @abstractmethod
    def model_df(self) -> int:
        """Degrees of freedom to remove in residual portmanteau tests"""
        pass

    def get_name(self) -> str:
        return self.spec.name

    @property
    def fitted(self) -> bool:
        return self.result is not None

    def _require_fit(self):
        if self.result is None:
            raise RuntimeError(f"{self.get_name()} has not been fitted")
        return self.result

    @property
    def aicc(self) -> float:
        return float(self._require_fit().aicc)

    @property
    def aic(self) -> float:
        return float(self._require_fit().aic)

    @property
    def params(self) -> pd.Series:
        params = self._require_fit().params
        if isinstance(params, pd.Series):
            return params
        names = getattr(self._require_fit().model, "param_names", None)
        return pd.Series(np.asarray(params), index=names)

    @property
    def residuals(self) -> pd.Series:
        resid = self._require_fit().resid
        if isinstance(resid, pd.Series):
            return resid
        return pd.Series(np.asarray(resid), index=self.train_index)

    def _fit_quietly(self, model):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", ConvergenceWarning)
            result = model.fit(disp=False)
        self.convergence_warnings = sum(issubclass(w.category, ConvergenceWarning) for w in caught)
        if self.convergence_warnings:
            logger.warning(f"[fit] {self.get_name()}: optimizer did not fully converge")
        other = {str(w.message) for w in caught if not issubclass(w.category, ConvergenceWarning)}
        for message in sorted(other):
            logger.warning(f"[fit] {self.get_name()}: {message}")
        return result


class SARIMAModel(ForecastModel):
    """SARIMA via statsmodels SARIMAX (no exogenous regressors)"""

    def fit(self, y: pd.Series) -> "SARIMAModel":
        spec = self.spec
        if spec.period > 1:
            seasonal_order = (*spec.seasonal_order, spec.period)
        else:
            seasonal_order = (0, 0, 0, 0)

        self.train_index = y.index
        model = SARIMAX(
            y,
            order=spec.order,
            seasonal_order=seasonal_order,
        )
        self.result = self._fit_quietly(model)
        logger.debug(f"[fit] {self.get_name()} AICc={self.aicc:.2f}")
        return self

    def forecast(self, horizon: int, alpha: float = 0.05) -> pd.DataFrame:
        result = self._require_fit()
        frame = result.get_forecast(steps=horizon).summary_frame(alpha=alpha)
        return _interval_frame(frame, future_index(self.train_index, horizon))

    @property
    def model_df(self) -> int:
        return self.spec.n_arma_params

    @property
    def residuals(self) -> pd.Series:
        return super().residuals.iloc[self.spec.burn_in:]


class ExponentialSmoothingModel(ForecastModel):
    """ETS via statsmodels ETSModel"""

    def fit(self, y: pd.Series) -> "ExponentialSmoothingModel":
        spec = self.spec
        self.train_index = y.index
        model = ETSModel(
            y,
            error=spec.error,
            trend=spec.trend,
            damped_trend=spec.damped_trend,
            seasonal=spec.seasonal,
            seasonal_periods=spec.seasonal_periods,
        )
        self.result = self._fit_quietly(model)
        logger.debug(f"[fit] {self.get_name()} AICc={self.aicc:.2f}")
        return self

    def forecast(self, horizon: int, alpha: float = 0.05) -> pd.DataFrame:
        result = self._require_fit()
        n = len(self.train_index)
        prediction = result.get_prediction(start=n, end=n + horizon - 1)
        frame = prediction.summary_frame(alpha=alpha)
        return _interval_frame(frame, future_index(self.train_index, horizon))

    @property
    def model_df(self) -> int:
        return self.spec.n_smoothing_params


class ModelFactory:
    """Factory for creating model handles from specs"""

    _models = {
        SarimaSpec: SARIMAModel,
        EtsSpec: ExponentialSmoothingModel,
    }

    @classmethod
    def create(cls, spec: ModelSpec) -> ForecastModel:
        """Create an unfitted model for a spec"""
        model_cls = cls._models.get(type(spec))
        if model_cls is None:
            raise ValueError(f"Unknown model spec: {spec!r}")
        return model_cls(spec)

    @classmethod
    def list_models(cls) -> List[str]:
        """List available model families"""
        return [model_cls.__name__ for model_cls in cls._models.values()]
