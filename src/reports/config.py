# file: src/reports/config.py
"""
Reports: Pipeline Configuration

Candidate model specifications are configuration: which models to compare
is an analyst's decision, the pipeline only makes the comparison auditable.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from src.modeling.models import EtsSpec


@dataclass(frozen=True)
class CovidReportConfig:
    name: str = "covid"

    # Data parameters
    data_path: str = "data/covid_cases.csv"
    date_col: str = "date"
    value_col: str = "cases"
    date_format: Optional[str] = "%m/%d/%Y"
    freq: str = "D"
    cutoff: str = "2020-04-01"

    # Conditioning
    half_window: int = 3
    power: Optional[float] = None  # None: sqrt if the series has zeros, else log

    # Differencing
    period: int = 7
    alpha: float = 0.05
    max_d: int = 2
    max_D: int = 1
    differencing_override: Optional[Tuple[Optional[int], Optional[int]]] = None  # (d, D); None keeps the selected order
    on_dispute: str = "warn"  # "warn" | "raise"

    # Candidates: (p, q, P, Q); d and D come from the differencing step
    arma_candidates: Tuple[Tuple[int, int, int, int], ...] = (
        (0, 1, 0, 1),
        (1, 0, 0, 1),
        (1, 1, 0, 1),
        (2, 1, 0, 1),
        (1, 1, 1, 1),
        (0, 2, 0, 1),
    )

    # Forecasting
    horizon: int = 8

    # IO
    artifacts_dir: str = "artifacts"
    overwrite: bool = False

    def report_path(self) -> Path:
        return Path(self.artifacts_dir) / self.name

    def summary_path(self) -> Path:
        return self.report_path() / "summary.json"

    def leaderboard_path(self) -> Path:
        return self.report_path() / "leaderboard.parquet"

    def forecast_path(self) -> Path:
        return self.report_path() / "forecast.parquet"


@dataclass(frozen=True)
class Co2ReportConfig:
    name: str = "co2"

    # Data parameters
    data_path: str = "data/co2.csv"
    date_col: str = "date"
    value_col: str = "CO2"
    date_format: Optional[str] = "%Y-%m-%d"
    freq: str = "MS"
    cutoff: Optional[str] = None

    # Seasonality
    period: int = 12
    alpha: float = 0.05

    # Candidates, simplest first (ties in AICc keep this order)
    ets_candidates: Tuple[EtsSpec, ...] = (
        EtsSpec(error="add"),
        EtsSpec(error="add", trend="add"),
        EtsSpec(error="add", trend="add", damped_trend=True),
        EtsSpec(error="add", trend="add", seasonal="add", seasonal_periods=12),
        EtsSpec(error="add", trend="add", damped_trend=True, seasonal="add", seasonal_periods=12),
        EtsSpec(error="mul", trend="add", seasonal="mul", seasonal_periods=12),
    )
    selection_metric: str = "aicc"  # "aicc" | "rmse"

    # Forecasting
    horizon: int = 24

    # IO
    artifacts_dir: str = "artifacts"
    overwrite: bool = False

    def report_path(self) -> Path:
        return Path(self.artifacts_dir) / self.name

    def summary_path(self) -> Path:
        return self.report_path() / "summary.json"

    def leaderboard_path(self) -> Path:
        return self.report_path() / "leaderboard.parquet"

    def forecast_path(self) -> Path:
        return self.report_path() / "forecast.parquet"
