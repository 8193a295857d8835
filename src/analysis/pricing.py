"""
Pricing Rules
=============

Passenger discounts, travel-class multipliers and the one-way fare rule.
"""

try:
    from ..data.validator import Passengers, TravelClass, TripType
except ImportError:
    from data.validator import Passengers, TravelClass, TripType


# Fare share paid per passenger type
ADULT_FACTOR = 1.0
CHILD_FACTOR = 0.75
INFANT_FACTOR = 0.1

# Relative to economy
TRAVEL_CLASS_MULTIPLIERS = {
    TravelClass.ECONOMY: 1.0,
    TravelClass.BUSINESS: 2.5,
    TravelClass.FIRST: 4.0,
}

ONE_WAY_FACTOR = 0.5


def passenger_factor(passengers: Passengers) -> float:
    return (passengers.adults * ADULT_FACTOR
            + passengers.children * CHILD_FACTOR
            + passengers.infants * INFANT_FACTOR)


def price_with_discounts(price: float, passengers: Passengers) -> float:
    """Total fare for a party, before rounding."""
    return price * passenger_factor(passengers)


def travel_class_multiplier(travel_class: TravelClass) -> float:
    return TRAVEL_CLASS_MULTIPLIERS.get(TravelClass(travel_class), 1.0)


def trip_type_factor(trip_type: TripType) -> float:
    return ONE_WAY_FACTOR if TripType(trip_type) == TripType.ONE_WAY else 1.0


class PriceAdjuster:
    """Applies one request's passenger, class and trip-type rules to base fares."""

    def __init__(self, passengers: Passengers,
                 travel_class: TravelClass = TravelClass.ECONOMY,
                 trip_type: TripType = TripType.ROUND_TRIP):
        self.passengers = passengers
        self.travel_class = TravelClass(travel_class)
        self.trip_type = TripType(trip_type)

    @property
    def multiplier(self) -> float:
        return passenger_factor(self.passengers) * travel_class_multiplier(self.travel_class)

    def fare(self, price: float) -> float:
        """Party fare in the requested class, unrounded."""
        return price * self.multiplier

    def display(self, price: float) -> int:
        """Party fare with the one-way rule applied, rounded for display."""
        return int(round(self.fare(price) * trip_type_factor(self.trip_type)))
