"""
Modeling: Candidate fitting, selection and accuracy

- Model implementations (SARIMA via SARIMAX, ETS via ETSModel)
- Candidate evaluation with per-candidate failure isolation
- Selection by AICc, residual diagnostics, leaderboard
- Holdout metrics (RMSE, MAE, MAPE, MASE, coverage)
"""

from .evaluation import ForecastMetrics, compute_series_metrics
from .models import (EtsSpec, ExponentialSmoothingModel, ForecastModel,
                     ModelFactory, ModelSpec, SarimaSpec, SARIMAModel,
                     future_index)
from .selection import (CandidateEvaluator, CandidateResult, ModelSelector,
                        score_holdout)

__all__ = [
    # Models
    "ForecastModel",
    "SARIMAModel",
    "ExponentialSmoothingModel",
    "ModelFactory",
    "ModelSpec",
    "SarimaSpec",
    "EtsSpec",
    "future_index",
    # Evaluation
    "ForecastMetrics",
    "compute_series_metrics",
    # Selection
    "CandidateEvaluator",
    "CandidateResult",
    "ModelSelector",
    "score_holdout",
]
