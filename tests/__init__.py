"""
TSREPORTS Test Suite

Tests organized by package:
- conditioning/: loading gates, truncation, weekday check, smoothing, transform
- stationarity/: decision rule, differencing orders, residual tests
- modeling/: metrics, model handles, candidate isolation and selection
- reports/: synthetic end-to-end report runs
"""
