"""
Flight Analysis Service
=======================

Runs a complete price analysis for one route: seasons, the recommended
travel period, a week-before/after comparison, the daily chart, the
flight list, forecasts and the price graph.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, List, Optional

from pydantic import BaseModel

try:
    from .chart import ChartPoint, build_chart_series
    from .comparison import PriceComparison, compare_prices
    from .duration import DurationRangeOptimizer
    from .graph import GraphPoint, build_graph_series
    from .pricing import PriceAdjuster
    from .seasons import PriceRange, SeasonBucket, SeasonClassifier, month_seasons
    from ..data.store import FlightDataStore
    from ..data.validator import (AnalysisRequest, DateRange, DurationRange, FlightPriceRecord,
                                  ForecastPoint, Passengers, Prediction, PriceTrend,
                                  SeasonType, TravelClass, TripType)
    from ..models.forecaster import PriceForecaster
except ImportError:
    from analysis.chart import ChartPoint, build_chart_series
    from analysis.comparison import PriceComparison, compare_prices
    from analysis.duration import DurationRangeOptimizer
    from analysis.graph import GraphPoint, build_graph_series
    from analysis.pricing import PriceAdjuster
    from analysis.seasons import PriceRange, SeasonBucket, SeasonClassifier, month_seasons
    from data.store import FlightDataStore
    from data.validator import (AnalysisRequest, DateRange, DurationRange, FlightPriceRecord,
                                ForecastPoint, Passengers, Prediction, PriceTrend,
                                SeasonType, TravelClass, TripType)
    from models.forecaster import PriceForecaster

logger = logging.getLogger(__name__)


@dataclass
class AnalysisConfig:
    """Configuration for analysis windows and the price graph."""
    min_season_span_days: int = 180
    graph_horizon_days: int = 350
    actual_window_days: int = 30
    trend_days_ahead: int = 30


class RecommendedPeriod(BaseModel):
    start_date: date
    end_date: Optional[date] = None
    duration: Optional[int] = None
    airline: Optional[str] = None
    season: SeasonType
    price: int
    savings: int = 0


class FlightListItem(BaseModel):
    id: Optional[int] = None
    departure_date: date
    return_date: Optional[date] = None
    price: int
    season: SeasonType = SeasonType.NORMAL
    trip_type: TripType
    travel_class: TravelClass
    airline_code: str = ""
    airline_name: str = ""
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None
    duration: Optional[int] = None
    flight_number: Optional[str] = None
    airplane: Optional[str] = None
    often_delayed: bool = False
    carbon_emissions_kg: Optional[float] = None
    legroom: Optional[str] = None


class AnalysisResult(BaseModel):
    origin: str
    destination: str
    analysis_window: DateRange
    recommended_period: Optional[RecommendedPeriod] = None
    seasons: List[SeasonBucket]
    price_comparison: PriceComparison
    chart_series: List[ChartPoint]
    flight_list: List[FlightListItem]
    prediction: Optional[Prediction] = None
    trend: Optional[PriceTrend] = None
    graph_series: List[GraphPoint]


def _first_of_month(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def _last_of_month(day: date, months: int) -> date:
    first = _first_of_month(day, months)
    return first.replace(day=calendar.monthrange(first.year, first.month)[1])


def resolve_analysis_window(start_date: date, end_date: Optional[date] = None,
                            config: Optional[AnalysisConfig] = None) -> DateRange:
    """
    Departure-date window to analyse for a requested travel period.

    Short requests are widened to the twelve calendar months from six
    months before the start month to five months after it. Longer ones run
    from two weeks before the start to whichever is later of 90 days after
    the end and the end of the fifth month after the end month.
    """
    config = config or AnalysisConfig()
    span = (end_date - start_date).days if end_date else 0

    if span < config.min_season_span_days:
        window = DateRange(start=_first_of_month(start_date, -6),
                           end=_last_of_month(start_date, 5))
        logger.info("Requested span of %d days is too narrow, analysing %s to %s",
                    span, window.start, window.end)
        return window

    return DateRange(
        start=start_date - timedelta(days=14),
        end=max(end_date + timedelta(days=90), _last_of_month(end_date, 5)),
    )


def carbon_emissions_kg(grams: Optional[float]) -> Optional[float]:
    if not grams:
        return None
    return round(grams / 1000, 1)


class FlightAnalysisService:
    """
    Entry point for route price analysis.

    Records are read in economy class and scaled to the requested class,
    so every class shares one set of seasons and one forecasting model.
    """

    def __init__(self, store: FlightDataStore,
                 forecaster: Optional[PriceForecaster] = None,
                 config: Optional[AnalysisConfig] = None,
                 classifier: Optional[SeasonClassifier] = None,
                 clock: Optional[Callable[[], date]] = None):
        self.store = store
        self.clock = clock or date.today
        self.forecaster = forecaster or PriceForecaster(store, clock=self.clock)
        self.config = config or AnalysisConfig()
        self.classifier = classifier or SeasonClassifier()

    def analyze(self, origin: str, destination: str, duration_range: DurationRange,
                trip_type: TripType = TripType.ROUND_TRIP,
                passengers: Optional[Passengers] = None,
                travel_class: TravelClass = TravelClass.ECONOMY,
                start_date: Optional[date] = None,
                end_date: Optional[date] = None) -> AnalysisResult:
        """
        Analyse fares for a route.

        Raises:
            ValueError: If the request is invalid (InvalidRangeError for bad ranges)
            pydantic.ValidationError: If request fields are malformed
        """
        request = AnalysisRequest(
            origin=origin,
            destination=destination,
            duration_range=duration_range,
            trip_type=trip_type,
            passengers=passengers or Passengers(),
            travel_class=travel_class,
            start_date=start_date,
            end_date=end_date,
        )
        today = self.clock()
        window = resolve_analysis_window(request.start_date or today, request.end_date,
                                         self.config)

        records = self.store.get_price_records(request.origin, request.destination, window,
                                               request.trip_type, TravelClass.ECONOMY)
        logger.info("Analysing %s -> %s (%s, %s): %d records",
                    request.origin, request.destination, request.trip_type.value,
                    request.travel_class.value, len(records))
        if not records:
            logger.warning("No price records for %s -> %s in %s to %s",
                           request.origin, request.destination, window.start, window.end)

        seasons = self.classifier.classify(records)
        season_map = month_seasons(seasons)
        optimizer = DurationRangeOptimizer(records)
        adjuster = PriceAdjuster(request.passengers, request.travel_class, request.trip_type)

        recommended = self._recommend(request, seasons, optimizer, adjuster)
        base_date = request.start_date or (recommended.start_date if recommended else today)

        comparison = compare_prices(optimizer, base_date, request.duration_range,
                                    request.trip_type, adjuster)
        chart = build_chart_series(optimizer, base_date, request.duration_range,
                                   request.trip_type, adjuster, season_map)
        flight_list = [self._flight_item(r, adjuster, season_map) for r in records]

        prediction, trend, graph = self._forecasts(request, base_date, today)

        return AnalysisResult(
            origin=request.origin,
            destination=request.destination,
            analysis_window=window,
            recommended_period=recommended,
            seasons=[self._scale_season(bucket, adjuster) for bucket in seasons],
            price_comparison=comparison,
            chart_series=chart,
            flight_list=flight_list,
            prediction=prediction,
            trend=trend,
            graph_series=graph,
        )

    def predict_price(self, origin: str, destination: str, target_date: date,
                      trip_type: TripType = TripType.ROUND_TRIP) -> Optional[Prediction]:
        return self.forecaster.predict_price(origin, destination, target_date, trip_type)

    def predict_price_range(self, origin: str, destination: str,
                            start_date: date, end_date: date,
                            trip_type: TripType = TripType.ROUND_TRIP) -> List[ForecastPoint]:
        return self.forecaster.predict_price_range(origin, destination, start_date,
                                                   end_date, trip_type)

    def get_price_trend(self, origin: str, destination: str,
                        trip_type: TripType = TripType.ROUND_TRIP,
                        days_ahead: Optional[int] = None) -> Optional[PriceTrend]:
        days_ahead = self.config.trend_days_ahead if days_ahead is None else days_ahead
        return self.forecaster.get_price_trend(origin, destination, trip_type, days_ahead)

    def _trip_price(self, start: date, fallback: float, request: AnalysisRequest,
                    optimizer: DurationRangeOptimizer):
        """Base fare, return date and length of a trip starting on start."""
        if request.trip_type == TripType.ONE_WAY:
            return fallback, None, None

        result = optimizer.best_price(start, request.duration_range, TripType.ROUND_TRIP)
        if result.found:
            return result.price, result.return_date, result.duration

        duration = int(round(request.duration_range.average))
        return fallback, start + timedelta(days=duration), duration

    def _recommend(self, request: AnalysisRequest, seasons: List[SeasonBucket],
                   optimizer: DurationRangeOptimizer,
                   adjuster: PriceAdjuster) -> Optional[RecommendedPeriod]:
        candidates = [bucket for bucket in seasons if not bucket.is_empty]
        if not candidates:
            return None

        cheapest = min(candidates, key=lambda bucket: bucket.best_deal.price)
        start = cheapest.best_deal.date
        base_price, return_date, duration = self._trip_price(
            start, cheapest.best_deal.price, request, optimizer)
        price = adjuster.display(base_price)

        if request.start_date is not None:
            season = month_seasons(seasons).get(request.start_date.month, SeasonType.NORMAL)
            user = optimizer.best_price(request.start_date, request.duration_range,
                                        request.trip_type)
            compared = adjuster.display(user.price) if user.found else price
        else:
            season = cheapest.type
            high = next(b for b in seasons if b.type == SeasonType.HIGH)
            compared = price if high.is_empty else adjuster.display(high.best_deal.price)

        period = RecommendedPeriod(
            start_date=start,
            end_date=return_date,
            duration=duration,
            airline=optimizer.airline_on(start) or cheapest.best_deal.airline,
            season=season,
            price=price,
            savings=max(0, compared - price),
        )
        logger.info("Recommended %s season departure on %s at %d (savings %d)",
                    cheapest.type.value, start, period.price, period.savings)
        return period

    @staticmethod
    def _scale_season(bucket: SeasonBucket, adjuster: PriceAdjuster) -> SeasonBucket:
        """Season with its fares shown as the requested party would pay them."""
        if bucket.is_empty:
            return bucket
        return bucket.model_copy(update={
            "price_range": PriceRange(min=adjuster.display(bucket.price_range.min),
                                      max=adjuster.display(bucket.price_range.max)),
            "best_deal": bucket.best_deal.model_copy(
                update={"price": adjuster.display(bucket.best_deal.price)}),
        })

    @staticmethod
    def _flight_item(record: FlightPriceRecord, adjuster: PriceAdjuster,
                     season_map) -> FlightListItem:
        return FlightListItem(
            id=record.id,
            departure_date=record.departure_date,
            return_date=record.return_date,
            price=int(round(adjuster.fare(record.price))),
            season=season_map.get(record.departure_date.month, SeasonType.NORMAL),
            trip_type=record.trip_type,
            travel_class=adjuster.travel_class,
            airline_code=record.airline_code,
            airline_name=record.airline_name,
            departure_time=record.departure_time,
            arrival_time=record.arrival_time,
            duration=record.duration,
            flight_number=record.flight_number,
            airplane=record.airplane,
            often_delayed=record.often_delayed,
            carbon_emissions_kg=carbon_emissions_kg(record.carbon_emissions),
            legroom=record.legroom,
        )

    def _forecasts(self, request: AnalysisRequest, target_date: date, today: date):
        """Prediction, trend and graph series; all degrade to empty without a model."""
        origin, destination, trip_type = request.origin, request.destination, request.trip_type
        horizon = self.config.graph_horizon_days
        aggregates = self.store.get_daily_aggregates(
            origin, destination,
            DateRange(start=today - timedelta(days=self.config.actual_window_days),
                      end=today + timedelta(days=horizon)),
            trip_type, TravelClass.ECONOMY,
        )

        if self.forecaster.ensure_model(origin, destination, trip_type) is None:
            logger.warning("No price model for %s -> %s, skipping forecasts",
                           origin, destination)
            graph = build_graph_series(aggregates, None, today, horizon,
                                       self.config.actual_window_days)
            return None, None, graph

        prediction = self.forecaster.predict_price(origin, destination, target_date, trip_type)
        trend = self.get_price_trend(origin, destination, trip_type)
        graph = build_graph_series(aggregates,
                                   self.forecaster.predictor_for(origin, destination, trip_type),
                                   today, horizon, self.config.actual_window_days)
        return prediction, trend, graph
