"""
Conditioning: Fail-Loud Loading Tests

Every malformed input must raise ValueError before any modeling happens.
"""

import pandas as pd
import pytest

from src.conditioning.ingest import load_series_csv, series_from_frame
from src.conditioning.validate import validate_time_index


def _write_csv(tmp_path, rows, columns=("date", "cases")):
    path = tmp_path / "series.csv"
    pd.DataFrame(rows, columns=list(columns)).to_csv(path, index=False)
    return path


@pytest.mark.fail_loud
class TestLoadGates:
    """Malformed rows abort the load"""

    def test_valid_csv_loads(self, tmp_path):
        """Valid daily CSV loads sorted with a daily freq"""
        path = _write_csv(tmp_path, [
            ("03/03/2020", 5),
            ("03/01/2020", 1),
            ("03/02/2020", 0),
        ])

        series = load_series_csv(path, value_col="cases", date_format="%m/%d/%Y", freq="D")

        assert len(series) == 3
        assert series.index.is_monotonic_increasing
        assert series.index.freqstr == "D"
        assert list(series) == [1.0, 0.0, 5.0]
        assert series.name == "cases"

    def test_invalid_date_raises(self, tmp_path):
        """Unparseable date should raise, not become NaT"""
        path = _write_csv(tmp_path, [("03/01/2020", 1), ("NOT_A_DATE", 2)])

        with pytest.raises(ValueError):
            load_series_csv(path, value_col="cases", date_format="%m/%d/%Y")

    def test_non_numeric_raises(self, tmp_path):
        """Non-numeric value should raise, not coerce to NaN"""
        path = _write_csv(tmp_path, [("03/01/2020", "1"), ("03/02/2020", "UNKNOWN")])

        with pytest.raises(ValueError):
            load_series_csv(path, value_col="cases", date_format="%m/%d/%Y")

    def test_missing_value_raises(self, tmp_path):
        """Empty value cell is a load error"""
        path = _write_csv(tmp_path, [("03/01/2020", 1), ("03/02/2020", None)])

        with pytest.raises(ValueError, match="missing 'cases'"):
            load_series_csv(path, value_col="cases", date_format="%m/%d/%Y")

    def test_missing_column_raises(self, tmp_path):
        """Wrong value column name is a load error"""
        path = _write_csv(tmp_path, [("03/01/2020", 1)])

        with pytest.raises(ValueError, match="Missing required columns"):
            load_series_csv(path, value_col="CO2")

    def test_duplicate_dates_raise(self, tmp_path):
        """Duplicate timestamps are rejected"""
        path = _write_csv(tmp_path, [("03/01/2020", 1), ("03/01/2020", 2), ("03/02/2020", 3)])

        with pytest.raises(ValueError, match="duplicate"):
            load_series_csv(path, value_col="cases", date_format="%m/%d/%Y")

    def test_gap_raises_with_freq(self, tmp_path):
        """A missing day is rejected when a daily freq is required"""
        path = _write_csv(tmp_path, [("03/01/2020", 1), ("03/02/2020", 2), ("03/04/2020", 4)])

        with pytest.raises(ValueError, match="missing timestamps"):
            load_series_csv(path, value_col="cases", date_format="%m/%d/%Y", freq="D")

    def test_off_grid_dates_raise(self):
        """Mid-month dates do not fit a month-start index"""
        df = pd.DataFrame({
            "date": ["2020-01-01", "2020-01-15", "2020-02-01"],
            "CO2": [410.0, 410.5, 411.0],
        })

        with pytest.raises(ValueError, match="do not fall on"):
            series_from_frame(df, value_col="CO2", freq="MS")


@pytest.mark.fail_loud
class TestValidationReport:
    """Integrity report on an in-memory series"""

    def test_gap_detected(self):
        """Missing day is reported"""
        index = pd.to_datetime(["2020-03-01", "2020-03-02", "2020-03-04"])
        series = pd.Series([1.0, 2.0, 3.0], index=index)

        result = validate_time_index(series, freq="D")

        assert not result.is_valid
        assert result.n_missing_periods == 1
        assert result.missing_periods[0] == pd.Timestamp("2020-03-03")

    def test_zeros_counted_not_failed(self):
        """Zeros are dropouts, not integrity failures"""
        series = pd.Series([3.0, 0.0, 0.0, 4.0], index=pd.date_range("2020-03-01", periods=4, freq="D"))

        result = validate_time_index(series, freq="D")

        assert result.is_valid
        assert result.n_zeros == 2
