"""
Price Forecaster
================

Lazily trains one boosted-tree model per route and trip type and turns it
into point forecasts with lead-time based confidence bands.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

try:
    from .trainer import RegressionTrainer, TrainingResult
    from ..data.processor import FlightDataProcessor
    from ..data.store import FlightDataStore
    from ..data.validator import (DateRange, ForecastPoint, Prediction, PriceTrend,
                                  TravelClass, TripType)
    from ..features.engineering import FeatureEngineer
except ImportError:
    from models.trainer import RegressionTrainer, TrainingResult
    from data.processor import FlightDataProcessor
    from data.store import FlightDataStore
    from data.validator import (DateRange, ForecastPoint, Prediction, PriceTrend,
                                TravelClass, TripType)
    from features.engineering import FeatureEngineer

logger = logging.getLogger(__name__)

RouteKey = Tuple[str, str, TripType]


@dataclass
class ForecastConfig:
    """Configuration for training windows and confidence bands."""
    history_days: int = 180
    lookahead_days: int = 60
    high_confidence_days: int = 30
    medium_confidence_days: int = 60
    high_band: float = 0.15
    medium_band: float = 0.20
    low_band: float = 0.25
    min_recommended_samples: int = 5
    trend_threshold_percent: float = 5.0


@dataclass
class RouteModelState:
    training: Optional[TrainingResult] = None
    is_training: bool = False


class ModelCache:
    """
    Trained models keyed by route, each with its own in-flight flag.

    A route that is already training refuses a second training run; the
    caller proceeds without a model instead of waiting.
    """

    def __init__(self):
        self._states: Dict[RouteKey, RouteModelState] = {}
        self._lock = threading.Lock()

    def get(self, key: RouteKey) -> Optional[TrainingResult]:
        with self._lock:
            state = self._states.get(key)
            return state.training if state else None

    def is_training(self, key: RouteKey) -> bool:
        with self._lock:
            state = self._states.get(key)
            return bool(state and state.is_training)

    def begin_training(self, key: RouteKey) -> bool:
        """Claim the route for training; False if a run is already in flight."""
        with self._lock:
            state = self._states.setdefault(key, RouteModelState())
            if state.is_training:
                return False
            state.is_training = True
            return True

    def finish_training(self, key: RouteKey, training: Optional[TrainingResult]) -> None:
        with self._lock:
            state = self._states.setdefault(key, RouteModelState())
            state.training = training
            state.is_training = False

    def clear(self, key: Optional[RouteKey] = None) -> None:
        with self._lock:
            if key is None:
                self._states.clear()
            else:
                self._states.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for s in self._states.values() if s.training is not None)


def confidence_for_lead_time(days_until_departure: int,
                             config: ForecastConfig) -> Tuple[str, float]:
    """Confidence label and relative band width for a lead time in days."""
    if days_until_departure <= config.high_confidence_days:
        return "high", config.high_band
    if days_until_departure <= config.medium_confidence_days:
        return "medium", config.medium_band
    return "low", config.low_band


def forecast(training: TrainingResult, target_date: date, today: date,
             engineer: Optional[FeatureEngineer] = None,
             config: Optional[ForecastConfig] = None) -> Optional[Prediction]:
    """
    Point prediction and confidence band for one departure day.

    Returns None if the model fails to predict.
    """
    engineer = engineer or FeatureEngineer()
    config = config or ForecastConfig()

    days_until_departure = max(0, (target_date - today).days)
    features = np.asarray([engineer.build(target_date, days_until_departure)],
                          dtype=np.float32)

    try:
        raw = training.model.predict(features)[0]
    except Exception:
        logger.exception("Prediction failed for %s", target_date)
        return None

    predicted_price = max(0, int(round(float(raw))))
    confidence, band = confidence_for_lead_time(days_until_departure, config)

    return Prediction(
        predicted_price=predicted_price,
        confidence=confidence,
        min_price=int(round(predicted_price * (1 - band))),
        max_price=int(round(predicted_price * (1 + band))),
        rmse=round(training.rmse, 2),
        mae=round(training.mae, 2),
    )


class PriceForecaster:
    """
    Route-level price forecasting backed by a Flight Data Store.

    Models are trained on economy-class fares departing within
    [today - history_days, today + lookahead_days] and cached per
    (origin, destination, trip type). Training failures leave the route
    without a model; the next prediction retries.
    """

    def __init__(self, store: FlightDataStore,
                 cache: Optional[ModelCache] = None,
                 config: Optional[ForecastConfig] = None,
                 trainer: Optional[RegressionTrainer] = None,
                 engineer: Optional[FeatureEngineer] = None,
                 processor: Optional[FlightDataProcessor] = None,
                 clock: Optional[Callable[[], date]] = None):
        self.store = store
        self.cache = cache if cache is not None else ModelCache()
        self.config = config or ForecastConfig()
        self.trainer = trainer or RegressionTrainer()
        self.engineer = engineer or FeatureEngineer()
        self.processor = processor or FlightDataProcessor()
        self.clock = clock or date.today

    @staticmethod
    def route_key(origin: str, destination: str, trip_type: TripType) -> RouteKey:
        return origin.upper(), destination.upper(), TripType(trip_type)

    def train_route(self, origin: str, destination: str,
                    trip_type: TripType = TripType.ROUND_TRIP) -> Optional[TrainingResult]:
        """
        Train (or retrain) the model for a route.

        Returns:
            TrainingResult, or None if training is already running, there
            is no data or the regression library failed
        """
        key = self.route_key(origin, destination, trip_type)
        if not self.cache.begin_training(key):
            logger.warning("Training already in progress for %s -> %s (%s), skipping",
                           key[0], key[1], key[2].value)
            return None

        training = None
        try:
            today = self.clock()
            window = DateRange(start=today - timedelta(days=self.config.history_days),
                               end=today + timedelta(days=self.config.lookahead_days))
            records = self.store.get_price_records(key[0], key[1], window, key[2],
                                                   TravelClass.ECONOMY)
            df = self.processor.get_feature_frame(records, today)
            logger.info("Training price model for %s -> %s (%s) on %d samples",
                        key[0], key[1], key[2].value, len(df))
            if 0 < len(df) < self.config.min_recommended_samples:
                logger.warning("Very limited data for training (%d rows)", len(df))

            X, y = self.engineer.training_set(df)
            try:
                training = self.trainer.train(X, y)
            except Exception:
                logger.exception("Model training failed for %s -> %s", key[0], key[1])
                training = None
        finally:
            self.cache.finish_training(key, training)

        if training is not None:
            logger.info("Model trained. RMSE: %.2f, MAE: %.2f", training.rmse, training.mae)
        return training

    def predict_price(self, origin: str, destination: str, target_date: date,
                      trip_type: TripType = TripType.ROUND_TRIP) -> Optional[Prediction]:
        """
        Predict the fare for one departure day.

        Returns:
            Prediction, or None when no model is available
        """
        training = self.ensure_model(origin, destination, trip_type)
        if training is None:
            logger.warning("Model not available for %s -> %s, cannot predict",
                           origin.upper(), destination.upper())
            return None

        return forecast(training, target_date, self.clock(), self.engineer, self.config)

    def ensure_model(self, origin: str, destination: str,
                     trip_type: TripType = TripType.ROUND_TRIP) -> Optional[TrainingResult]:
        """Cached model for the route, training one first if there is none."""
        training = self.cache.get(self.route_key(origin, destination, trip_type))
        if training is None:
            training = self.train_route(origin, destination, trip_type)
        return training

    def predict_price_range(self, origin: str, destination: str,
                            start_date: date, end_date: date,
                            trip_type: TripType = TripType.ROUND_TRIP) -> List[ForecastPoint]:
        """Daily forecasts for every day in [start_date, end_date] that has one."""
        DateRange(start=start_date, end=end_date)

        training = self.ensure_model(origin, destination, trip_type)
        if training is None:
            logger.warning("Model not available for %s -> %s, no range forecast",
                           origin.upper(), destination.upper())
            return []

        today = self.clock()
        points = []
        day = start_date
        while day <= end_date:
            prediction = forecast(training, day, today, self.engineer, self.config)
            if prediction is not None:
                points.append(ForecastPoint(
                    date=day,
                    predicted_price=prediction.predicted_price,
                    min_price=prediction.min_price,
                    max_price=prediction.max_price,
                ))
            day += timedelta(days=1)
        return points

    def get_price_trend(self, origin: str, destination: str,
                        trip_type: TripType = TripType.ROUND_TRIP,
                        days_ahead: int = 30) -> Optional[PriceTrend]:
        """Compare today's forecast with the forecast days_ahead later."""
        today = self.clock()
        current = self.predict_price(origin, destination, today, trip_type)
        future = self.predict_price(origin, destination,
                                    today + timedelta(days=days_ahead), trip_type)

        if current is None or future is None or current.predicted_price == 0:
            return None

        change = (future.predicted_price - current.predicted_price) / current.predicted_price * 100
        threshold = self.config.trend_threshold_percent
        if change > threshold:
            trend = "increasing"
        elif change < -threshold:
            trend = "decreasing"
        else:
            trend = "stable"

        return PriceTrend(
            trend=trend,
            change_percent=round(change, 2),
            current_avg_price=current.predicted_price,
            future_avg_price=future.predicted_price,
        )

    def predictor_for(self, origin: str, destination: str,
                      trip_type: TripType = TripType.ROUND_TRIP) -> Callable[[date], Optional[Prediction]]:
        """Single-argument prediction callable bound to one route."""
        def predict(day: date) -> Optional[Prediction]:
            return self.predict_price(origin, destination, day, trip_type)
        return predict
