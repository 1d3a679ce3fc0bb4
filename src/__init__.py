"""
TSREPORTS - Series conditioning and model comparison for forecasting reports

Modules:
- conditioning: Load, truncate, weekday check, smoothing, power transform
- stationarity: KPSS / ADF, differencing-order selection, residual tests
- modeling: SARIMA / ETS candidates, AICc selection, holdout metrics
- reports: COVID (SARIMA) and CO2 (ETS) pipelines + Typer CLI
"""
