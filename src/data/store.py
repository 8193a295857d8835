"""
Flight Data Store
=================

Read-only interface to historical flight prices, plus an in-memory
implementation used by the demo and tests.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Tuple

from .processor import FlightDataProcessor
from .validator import (
    DailyAggregate,
    DateRange,
    FlightPriceRecord,
    TravelClass,
    TripType,
)


class FlightDataStore(ABC):
    """Source of flight-price records for one origin/destination route."""

    @abstractmethod
    def get_price_records(self, origin: str, destination: str,
                          date_range: DateRange, trip_type: TripType,
                          travel_class: TravelClass) -> List[FlightPriceRecord]:
        """
        Fetch records departing within date_range, ordered by departure date.

        Args:
            origin: Origin airport code
            destination: Destination airport code
            date_range: Inclusive departure-date range
            trip_type: Trip type filter
            travel_class: Travel class filter

        Returns:
            Matching records (may be empty)
        """
        pass

    @abstractmethod
    def get_daily_aggregates(self, origin: str, destination: str,
                             date_range: DateRange, trip_type: TripType,
                             travel_class: TravelClass) -> List[DailyAggregate]:
        """Min/avg/max fare per departure day within date_range."""
        pass


class InMemoryFlightDataStore(FlightDataStore):
    """Store backed by a list of records keyed by (origin, destination)."""

    def __init__(self, processor: FlightDataProcessor = None):
        self.processor = processor or FlightDataProcessor()
        self._routes: Dict[Tuple[str, str], List[FlightPriceRecord]] = {}

    def add_records(self, origin: str, destination: str,
                    records: Iterable[FlightPriceRecord]) -> "InMemoryFlightDataStore":
        key = (origin.upper(), destination.upper())
        self._routes.setdefault(key, []).extend(records)
        self._routes[key].sort(key=lambda r: r.departure_date)
        return self

    def get_price_records(self, origin, destination, date_range, trip_type,
                          travel_class):
        records = self._routes.get((origin.upper(), destination.upper()), [])
        return [
            r for r in records
            if date_range.contains(r.departure_date)
            and r.trip_type == trip_type
            and r.travel_class == travel_class
        ]

    def get_daily_aggregates(self, origin, destination, date_range, trip_type,
                             travel_class):
        records = self.get_price_records(origin, destination, date_range,
                                         trip_type, travel_class)
        return self.processor.daily_aggregates(records)

    @property
    def routes(self) -> List[Tuple[str, str]]:
        return sorted(self._routes)
