"""
Reports: End-to-end report pipelines

- config - Frozen per-report configuration (paths, candidates, policies)
- tasks - Linear COVID (SARIMA) and CO2 (ETS) pipelines
- io_utils - Atomic artifact writes
- cli - Typer entry point (`tsreports covid`, `tsreports co2`)
"""

from .config import Co2ReportConfig, CovidReportConfig
from .tasks import (ConditionedSeries, build_sarima_candidates,
                    condition_covid, load_and_validate, run_co2_report,
                    run_covid_report)

__all__ = [
    "CovidReportConfig",
    "Co2ReportConfig",
    "ConditionedSeries",
    "load_and_validate",
    "condition_covid",
    "build_sarima_candidates",
    "run_covid_report",
    "run_co2_report",
]
