# file: src/reports/cli.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

import pandas as pd
import typer
from rich.console import Console
from rich.table import Table

from src.conditioning.config import load_settings
from src.reports.config import Co2ReportConfig, CovidReportConfig
from src.reports.io_utils import read_json
from src.reports.tasks import run_co2_report, run_covid_report

logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
app = typer.Typer(add_completion=False, help="Series conditioning and model comparison reports.")
console = Console()


def _print_summary(title: str, results: Dict) -> None:
    table = Table(title=title)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")

    for k in ("best_model", "best_aicc", "best_residuals_ok", "best_residual_acf_lags",
              "transform", "fitted_orders", "holdout"):
        if k in results:
            table.add_row(k, str(results[k]))

    console.print(table)

    failed = results.get("failed_candidates") or {}
    for name, error in failed.items():
        console.print(f"[yellow]failed[/yellow] {name}: {error}")


def _print_leaderboard(path: str) -> None:
    leaderboard = pd.read_parquet(path)
    table = Table(title="Candidates (by AICc)")
    for col in ("model", "aicc", "lb_pvalue", "residuals_ok", "holdout_rmse"):
        table.add_column(col)
    for row in leaderboard.itertuples(index=False):
        table.add_row(
            row.model,
            f"{row.aicc:.2f}",
            f"{row.lb_pvalue:.3f}",
            str(row.residuals_ok),
            f"{row.holdout_rmse:.3f}",
        )
    console.print(table)


@app.command()
def covid(
    data_path: Optional[str] = typer.Option(None, help="CSV with date,cases columns"),
    cutoff: str = "2020-04-01",
    horizon: int = 8,
    half_window: int = 3,
    on_dispute: str = typer.Option("warn", help="warn | raise when KPSS and ADF disagree"),
    d: Optional[int] = typer.Option(None, help="Override the non-seasonal differencing order"),
    seasonal_d: Optional[int] = typer.Option(None, help="Override the seasonal differencing order"),
    artifacts_dir: Optional[str] = None,
    overwrite: bool = False,
):
    """SARIMA report on daily county case counts."""
    settings = load_settings()
    override = None
    if d is not None or seasonal_d is not None:
        override = (d, seasonal_d)

    cfg = CovidReportConfig(
        data_path=data_path or str(settings.data_path() / "covid_cases.csv"),
        cutoff=cutoff,
        horizon=horizon,
        half_window=half_window,
        on_dispute=on_dispute,
        differencing_override=override,
        artifacts_dir=artifacts_dir or settings.artifacts_dir,
        overwrite=overwrite,
    )

    results = run_covid_report(cfg)
    _print_summary("COVID report", results)
    _print_leaderboard(results["leaderboard_path"])


@app.command()
def co2(
    data_path: Optional[str] = typer.Option(None, help="CSV with date,CO2 columns"),
    horizon: int = 24,
    selection_metric: str = typer.Option("aicc", help="aicc | rmse"),
    artifacts_dir: Optional[str] = None,
    overwrite: bool = False,
):
    """ETS report on monthly CO2."""
    settings = load_settings()
    cfg = Co2ReportConfig(
        data_path=data_path or str(settings.data_path() / "co2.csv"),
        horizon=horizon,
        selection_metric=selection_metric,
        artifacts_dir=artifacts_dir or settings.artifacts_dir,
        overwrite=overwrite,
    )

    results = run_co2_report(cfg)
    _print_summary("CO2 report", results)
    _print_leaderboard(results["leaderboard_path"])


@app.command()
def show(summary_path: Path):
    """Print a previously written summary.json."""
    results = read_json(summary_path)
    _print_summary(str(results.get("report", summary_path)), results)


if __name__ == "__main__":
    app()
