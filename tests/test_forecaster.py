"""
Tests for PriceForecaster
=========================

Unit tests for lazy per-route training, predictions and trends.
"""

import pytest
import numpy as np
import sys
from datetime import date, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from conftest import TODAY
from data.store import InMemoryFlightDataStore
from data.validator import InvalidRangeError, TripType
from models.forecaster import (ForecastConfig, ModelCache, PriceForecaster,
                               confidence_for_lead_time, forecast)
from models.trainer import TrainingResult


class LeadTimeModel:
    """Predicts base + slope * days_until_departure."""

    def __init__(self, base=1000.0, slope=10.0):
        self.base = base
        self.slope = slope

    def predict(self, X):
        X = np.asarray(X)
        return self.base + self.slope * X[:, 2]


class BrokenModel:
    def predict(self, X):
        raise RuntimeError("booster corrupted")


class FailingTrainer:
    def train(self, X, y):
        raise RuntimeError("regression library failure")


class CountingStore(InMemoryFlightDataStore):
    """Empty store that counts record queries."""

    def __init__(self):
        super().__init__()
        self.queries = 0

    def get_price_records(self, *args, **kwargs):
        self.queries += 1
        return super().get_price_records(*args, **kwargs)


def stub_training(model, rmse=12.5, mae=8.0):
    return TrainingResult(model=model, rmse=rmse, mae=mae, n_samples=100, cross_validated=True)


@pytest.fixture
def forecaster(sample_store, fast_trainer, clock):
    return PriceForecaster(sample_store, trainer=fast_trainer, clock=clock)


class TestConfidence:
    """Tests for lead-time confidence bands."""

    @pytest.mark.parametrize("days,expected", [
        (0, ("high", 0.15)),
        (30, ("high", 0.15)),
        (31, ("medium", 0.20)),
        (60, ("medium", 0.20)),
        (61, ("low", 0.25)),
        (365, ("low", 0.25)),
    ])
    def test_bands(self, days, expected):
        """Test confidence thresholds."""
        assert confidence_for_lead_time(days, ForecastConfig()) == expected


class TestForecast:
    """Tests for single forecasts from a trained model."""

    def test_band_around_prediction(self):
        """Test band width for a high-confidence lead time."""
        training = stub_training(LeadTimeModel(base=1000, slope=0))

        prediction = forecast(training, TODAY + timedelta(days=10), TODAY)

        assert prediction.predicted_price == 1000
        assert prediction.confidence == "high"
        assert prediction.min_price == 850
        assert prediction.max_price == 1150
        assert prediction.rmse == 12.5

    def test_low_confidence_far_out(self):
        """Test band width for a distant departure."""
        training = stub_training(LeadTimeModel(base=1000, slope=0))

        prediction = forecast(training, TODAY + timedelta(days=90), TODAY)

        assert prediction.confidence == "low"
        assert prediction.min_price == 750
        assert prediction.max_price == 1250

    def test_past_date_uses_zero_lead_time(self):
        """Test that past departures are predicted at lead time 0."""
        training = stub_training(LeadTimeModel(base=1000, slope=10))

        prediction = forecast(training, TODAY - timedelta(days=20), TODAY)

        assert prediction.predicted_price == 1000

    def test_negative_prediction_clamped(self):
        """Test that predictions never go below zero."""
        training = stub_training(LeadTimeModel(base=-500, slope=0))

        prediction = forecast(training, TODAY, TODAY)

        assert prediction.predicted_price == 0
        assert prediction.min_price == 0

    def test_prediction_failure_returns_none(self):
        """Test that a failing model yields no prediction."""
        assert forecast(stub_training(BrokenModel()), TODAY, TODAY) is None


class TestModelCache:
    """Tests for the per-route model cache."""

    def test_begin_training_guard(self):
        """Test that a second training claim is refused."""
        cache = ModelCache()
        key = ("BKK", "CNX", TripType.ROUND_TRIP)

        assert cache.begin_training(key) is True
        assert cache.begin_training(key) is False
        assert cache.is_training(key) is True

    def test_routes_are_independent(self):
        """Test that training one route does not block another."""
        cache = ModelCache()
        cache.begin_training(("BKK", "CNX", TripType.ROUND_TRIP))

        assert cache.begin_training(("BKK", "CNX", TripType.ONE_WAY)) is True
        assert cache.begin_training(("BKK", "HKT", TripType.ROUND_TRIP)) is True

    def test_finish_training_stores_model(self):
        """Test that finishing training stores the result and clears the flag."""
        cache = ModelCache()
        key = ("BKK", "CNX", TripType.ROUND_TRIP)
        training = stub_training(LeadTimeModel())

        cache.begin_training(key)
        cache.finish_training(key, training)

        assert cache.get(key) is training
        assert cache.is_training(key) is False
        assert len(cache) == 1

    def test_clear(self):
        """Test clearing cached models."""
        cache = ModelCache()
        key = ("BKK", "CNX", TripType.ROUND_TRIP)
        cache.finish_training(key, stub_training(LeadTimeModel()))

        cache.clear(key)

        assert cache.get(key) is None


class TestPriceForecaster:
    """Tests for PriceForecaster with a store."""

    def test_lazy_training(self, forecaster):
        """Test that the first prediction trains the route model."""
        assert len(forecaster.cache) == 0

        prediction = forecaster.predict_price("BKK", "CNX", TODAY + timedelta(days=14))

        assert prediction is not None
        assert prediction.predicted_price > 0
        assert prediction.confidence == "high"
        assert prediction.min_price <= prediction.predicted_price <= prediction.max_price
        assert len(forecaster.cache) == 1

    def test_model_reused(self, forecaster):
        """Test that later predictions reuse the cached model."""
        forecaster.predict_price("BKK", "CNX", TODAY + timedelta(days=5))
        key = forecaster.route_key("bkk", "cnx", TripType.ROUND_TRIP)
        training = forecaster.cache.get(key)

        forecaster.predict_price("BKK", "CNX", TODAY + timedelta(days=6))

        assert forecaster.cache.get(key) is training

    def test_cross_validated_on_window(self, forecaster):
        """Test that training uses the history/lookahead window."""
        training = forecaster.train_route("BKK", "CNX")

        # 180 days back + today + 60 ahead, two fares per day
        assert training.n_samples == 241 * 2
        assert training.cross_validated is True
        assert training.rmse > 0

    def test_no_data_returns_none(self, fast_trainer, clock):
        """Test that a route without data has no prediction."""
        forecaster = PriceForecaster(InMemoryFlightDataStore(), trainer=fast_trainer, clock=clock)

        assert forecaster.predict_price("BKK", "CNX", TODAY) is None
        assert len(forecaster.cache) == 0

    def test_other_trip_type_has_no_data(self, forecaster):
        """Test that models are per trip type."""
        assert forecaster.predict_price("BKK", "CNX", TODAY, TripType.ONE_WAY) is None

    def test_training_in_progress_skips(self, forecaster):
        """Test that a concurrent caller proceeds without a model."""
        key = forecaster.route_key("BKK", "CNX", TripType.ROUND_TRIP)
        forecaster.cache.begin_training(key)

        assert forecaster.train_route("BKK", "CNX") is None
        assert forecaster.predict_price("BKK", "CNX", TODAY) is None
        assert forecaster.cache.is_training(key) is True

    def test_training_failure_is_recovered(self, sample_store, clock):
        """Test that library failures leave the route without a model."""
        forecaster = PriceForecaster(sample_store, trainer=FailingTrainer(), clock=clock)
        key = forecaster.route_key("BKK", "CNX", TripType.ROUND_TRIP)

        assert forecaster.predict_price("BKK", "CNX", TODAY) is None
        assert forecaster.cache.is_training(key) is False
        assert forecaster.cache.get(key) is None

    def test_predict_price_range(self, forecaster):
        """Test daily forecasts over a range."""
        start = TODAY + timedelta(days=1)
        points = forecaster.predict_price_range("BKK", "CNX", start, start + timedelta(days=6))

        assert len(points) == 7
        assert [p.date for p in points] == [start + timedelta(days=i) for i in range(7)]
        assert all(p.min_price <= p.predicted_price <= p.max_price for p in points)

    def test_predict_price_range_untrainable_route(self, fast_trainer, clock):
        """Test that a route without data is queried once for a whole range."""
        store = CountingStore()
        forecaster = PriceForecaster(store, trainer=fast_trainer, clock=clock)

        points = forecaster.predict_price_range("BKK", "CNX", TODAY,
                                                TODAY + timedelta(days=59))

        assert points == []
        assert store.queries == 1

    def test_predict_price_range_reversed(self, forecaster):
        """Test that a reversed range is rejected."""
        with pytest.raises(InvalidRangeError):
            forecaster.predict_price_range("BKK", "CNX", TODAY, TODAY - timedelta(days=1))


class TestPriceTrend:
    """Tests for get_price_trend."""

    def make_forecaster(self, model, clock):
        forecaster = PriceForecaster(InMemoryFlightDataStore(), clock=clock)
        key = forecaster.route_key("BKK", "CNX", TripType.ROUND_TRIP)
        forecaster.cache.finish_training(key, stub_training(model))
        return forecaster

    def test_increasing(self, clock):
        """Test a rising forecast."""
        forecaster = self.make_forecaster(LeadTimeModel(base=1000, slope=10), clock)

        trend = forecaster.get_price_trend("BKK", "CNX", days_ahead=30)

        assert trend.trend == "increasing"
        assert trend.change_percent == 30.0
        assert trend.current_avg_price == 1000
        assert trend.future_avg_price == 1300

    def test_decreasing(self, clock):
        """Test a falling forecast."""
        forecaster = self.make_forecaster(LeadTimeModel(base=1000, slope=-5), clock)

        trend = forecaster.get_price_trend("BKK", "CNX", days_ahead=30)

        assert trend.trend == "decreasing"
        assert trend.change_percent == -15.0

    def test_stable_within_threshold(self, clock):
        """Test that small changes are stable."""
        forecaster = self.make_forecaster(LeadTimeModel(base=1000, slope=1), clock)

        trend = forecaster.get_price_trend("BKK", "CNX", days_ahead=30)

        assert trend.trend == "stable"

    def test_zero_current_price(self, clock):
        """Test that a zero current forecast gives no trend."""
        forecaster = self.make_forecaster(LeadTimeModel(base=0, slope=10), clock)

        assert forecaster.get_price_trend("BKK", "CNX") is None

    def test_no_model(self, fast_trainer, clock):
        """Test that a route without data has no trend."""
        forecaster = PriceForecaster(InMemoryFlightDataStore(), trainer=fast_trainer, clock=clock)

        assert forecaster.get_price_trend("BKK", "CNX") is None
