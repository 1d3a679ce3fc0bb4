"""
Conditioning: Load and prepare a series for modeling

Simple, step-by-step functions:
0. config - Data / artifact locations from env
1. ingest - Fail-loud CSV load into a time-indexed series
2. prepare - Truncate before onset, hold out the tail
3. validate - Check time series integrity
4. weekday - Day-of-week collection bias diagnostic
5. smoothing - Centered moving averages (NaN at the edges)
6. transform - Square-root / log variance stabilization
"""

from .config import Settings, load_settings
from .ingest import load_series_csv, series_from_frame
from .prepare import split_holdout, truncate_series
from .smoothing import centered_moving_average, double_moving_average, drop_undefined_edges
from .transform import PowerTransform, choose_power
from .validate import ValidationResult, validate_time_index
from .weekday import Weekday, WeekdayEffect, day_of_week, weekday_dummies, weekday_effect

__all__ = [
    "Settings",
    "load_settings",
    "load_series_csv",
    "series_from_frame",
    "truncate_series",
    "split_holdout",
    "ValidationResult",
    "validate_time_index",
    "Weekday",
    "WeekdayEffect",
    "day_of_week",
    "weekday_dummies",
    "weekday_effect",
    "centered_moving_average",
    "double_moving_average",
    "drop_undefined_edges",
    "PowerTransform",
    "choose_power",
]
