"""
Duration-Range Optimizer
========================

Finds the cheapest trip starting on a given day. Round trips are priced
as an outbound and a return leg, scanning every allowed trip length.
"""

from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

try:
    from ..data.validator import DurationRange, FlightPriceRecord, TripType
except ImportError:
    from data.validator import DurationRange, FlightPriceRecord, TripType


class DurationSearchResult(BaseModel):
    """Best price for one departure day; price 0 means nothing was found."""
    price: float = 0
    return_date: Optional[date] = None
    duration: Optional[int] = None
    airline: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.price > 0


NOT_FOUND = DurationSearchResult()


class DailyPriceIndex:
    """Cheapest valid record per departure day, optionally for one trip type."""

    def __init__(self, records: Iterable[FlightPriceRecord],
                 trip_type: Optional[TripType] = None):
        self._cheapest: Dict[date, FlightPriceRecord] = {}
        for record in records:
            if not record.has_valid_price:
                continue
            if trip_type is not None and record.trip_type != trip_type:
                continue
            current = self._cheapest.get(record.departure_date)
            if current is None or record.price < current.price:
                self._cheapest[record.departure_date] = record

    def record_on(self, day: date) -> Optional[FlightPriceRecord]:
        return self._cheapest.get(day)

    def price_on(self, day: date) -> float:
        record = self._cheapest.get(day)
        return record.price if record else 0

    def __contains__(self, day: date) -> bool:
        return day in self._cheapest

    def __len__(self) -> int:
        return len(self._cheapest)

    @property
    def days(self) -> List[date]:
        return sorted(self._cheapest)


class DurationRangeOptimizer:
    """
    Prices trips over one route's records.

    One-way trips use the cheapest record departing that day with a
    one-way trip type. Round trips try every length d in
    [duration.min, duration.max]: the cheapest fare departing on the start
    day plus the cheapest fare departing on start + d days, whatever their
    trip type. Both legs must exist; the smallest sum wins, the shortest
    trip winning ties.
    """

    def __init__(self, records: Iterable[FlightPriceRecord]):
        self.records = list(records)
        self.legs = DailyPriceIndex(self.records)
        self._by_trip_type = {
            trip_type: DailyPriceIndex(self.records, trip_type)
            for trip_type in TripType
        }

    def cheapest_record_on(self, day: date,
                           trip_type: Optional[TripType] = None) -> Optional[FlightPriceRecord]:
        index = self.legs if trip_type is None else self._by_trip_type[TripType(trip_type)]
        return index.record_on(day)

    def airline_on(self, day: date) -> Optional[str]:
        """Airline of the cheapest fare departing on day, if any."""
        record = self.legs.record_on(day)
        return record.display_airline if record else None

    def best_price(self, departure_date: date, duration_range: DurationRange,
                   trip_type: TripType) -> DurationSearchResult:
        if TripType(trip_type) == TripType.ONE_WAY:
            record = self.cheapest_record_on(departure_date, TripType.ONE_WAY)
            if record is None:
                return NOT_FOUND
            return DurationSearchResult(price=record.price, airline=record.display_airline)

        outbound = self.legs.record_on(departure_date)
        if outbound is None:
            return NOT_FOUND

        best = NOT_FOUND
        for days in range(duration_range.min, duration_range.max + 1):
            return_date = departure_date + timedelta(days=days)
            inbound = self.legs.record_on(return_date)
            if inbound is None:
                continue

            total = outbound.price + inbound.price
            if not best.found or total < best.price:
                best = DurationSearchResult(
                    price=total,
                    return_date=return_date,
                    duration=days,
                    airline=outbound.display_airline,
                )
        return best


def best_price_for_duration(records: Iterable[FlightPriceRecord], departure_date: date,
                            duration_range: DurationRange,
                            trip_type: TripType) -> DurationSearchResult:
    """Convenience wrapper for a single search over a record list."""
    return DurationRangeOptimizer(records).best_price(departure_date, duration_range, trip_type)
