"""
Tests for Graph Series Builder
==============================
"""

import pytest
import sys
from datetime import date, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from conftest import TODAY
from analysis.graph import build_graph_series
from data.validator import DailyAggregate, Prediction


def aggregate(day, low, avg, high):
    return DailyAggregate(date=day, min_price=low, avg_price=avg, max_price=high)


def constant_predictor(price=1000, band=0.15):
    def predict(day):
        return Prediction(predicted_price=price, confidence="high",
                          min_price=int(round(price * (1 - band))),
                          max_price=int(round(price * (1 + band))))
    return predict


@pytest.fixture
def trailing_month():
    """Thirty days of observed fares ending today."""
    return [
        aggregate(TODAY - timedelta(days=i), 900, 1000.4, 1200)
        for i in range(30)
    ]


class TestGraphSeries:
    """Tests for build_graph_series."""

    def test_example_scenario(self, trailing_month):
        """Test 30 actual days followed by 10 predicted days."""
        series = build_graph_series(trailing_month, constant_predictor(), TODAY, horizon_days=10)

        actual = [p for p in series if p.is_actual]
        predicted = [p for p in series if not p.is_actual]
        assert len(actual) == 30
        assert len(predicted) == 10
        assert all(p.low <= p.typical <= p.high for p in predicted)
        assert predicted[0].date == TODAY + timedelta(days=1)

    def test_actual_values_rounded(self, trailing_month):
        """Test observed fares are reported as integers."""
        series = build_graph_series(trailing_month, None, TODAY, horizon_days=10)

        assert series[0].low == 900
        assert series[0].typical == 1000
        assert series[0].high == 1200

    def test_sorted_unique_dates(self, trailing_month):
        """Test ordering and uniqueness."""
        series = build_graph_series(list(reversed(trailing_month)), constant_predictor(),
                                    TODAY, horizon_days=10)
        dates = [p.date for p in series]

        assert dates == sorted(dates)
        assert len(dates) == len(set(dates))

    def test_actual_takes_precedence(self):
        """Test that future days with observed fares are not predicted."""
        future = TODAY + timedelta(days=3)
        series = build_graph_series([aggregate(future, 500, 600, 700)], constant_predictor(),
                                    TODAY, horizon_days=5)

        point = next(p for p in series if p.date == future)
        assert point.is_actual is True
        assert point.typical == 600
        assert len(series) == 5

    def test_missing_prediction_omitted(self):
        """Test that days without a prediction are skipped."""
        def sometimes(day):
            if day.day % 2:
                return None
            return constant_predictor()(day)

        series = build_graph_series([], sometimes, TODAY, horizon_days=10)

        assert len(series) == 5
        assert all(p.date.day % 2 == 0 for p in series)

    def test_zero_prediction_omitted(self):
        """Test that non-positive predictions are skipped."""
        series = build_graph_series([], constant_predictor(price=0), TODAY, horizon_days=10)

        assert series == []

    def test_no_predictor(self):
        """Test that only actual data is emitted without a predictor."""
        series = build_graph_series([aggregate(TODAY, 900, 1000, 1200)], None, TODAY, 10)

        assert len(series) == 1
        assert series[0].is_actual is True

    def test_window_bounds(self):
        """Test that aggregates outside the window are dropped."""
        series = build_graph_series([
            aggregate(TODAY - timedelta(days=31), 900, 1000, 1200),
            aggregate(TODAY - timedelta(days=30), 900, 1000, 1200),
            aggregate(TODAY + timedelta(days=11), 900, 1000, 1200),
        ], None, TODAY, horizon_days=10)

        assert [p.date for p in series] == [TODAY - timedelta(days=30)]

    def test_band_ordering_enforced(self):
        """Test that low/high always bracket the typical price."""
        def inverted(day):
            return Prediction(predicted_price=1000, confidence="low",
                              min_price=1100, max_price=900)

        series = build_graph_series([], inverted, TODAY, horizon_days=3)

        assert all(p.low == 1000 and p.high == 1000 for p in series)
