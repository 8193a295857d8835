"""
Flight Data Validator
=====================

Typed flight-price records and analysis requests, validated with Pydantic
models for type safety and data integrity.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, List, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InvalidRangeError(ValueError):
    """Raised when a caller-supplied date or duration range is empty or reversed."""


class TripType(str, Enum):
    ONE_WAY = "one-way"
    ROUND_TRIP = "round-trip"


class TravelClass(str, Enum):
    ECONOMY = "economy"
    BUSINESS = "business"
    FIRST = "first"


class PriceLevel(str, Enum):
    """Discrete price tag attached to a record by the ingestion pipeline."""
    LOW = "low"
    TYPICAL = "typical"
    HIGH = "high"


class SeasonType(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


def to_calendar_day(value: Any) -> Any:
    """Reduce datetimes and ISO strings to their (UTC) calendar day."""
    if isinstance(value, str) and "T" in value:
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def check_duration(minimum: int, maximum: int) -> None:
    if maximum < minimum:
        raise InvalidRangeError(
            f"Duration range max ({maximum}) is smaller than min ({minimum})"
        )


class FlightPriceRecord(BaseModel):
    """One observed fare. Read-only to the analysis engine."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    route_id: Optional[int] = None
    airline_id: Optional[int] = None
    departure_date: date
    return_date: Optional[date] = None
    price: float = Field(..., ge=0, description="Fare in the route's currency")
    trip_type: TripType = TripType.ROUND_TRIP
    travel_class: TravelClass = TravelClass.ECONOMY
    price_level: Optional[PriceLevel] = None
    airline_code: str = ""
    airline_name: str = ""
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0, description="Flight duration in minutes")
    flight_number: Optional[str] = None
    airplane: Optional[str] = None
    often_delayed: bool = False
    carbon_emissions: Optional[float] = Field(None, ge=0, description="Grams of CO2")
    legroom: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None

    @field_validator("departure_date", "return_date", mode="before")
    @classmethod
    def calendar_day(cls, v):
        """Compare dates by UTC calendar day only."""
        return to_calendar_day(v)

    @field_validator("price_level", mode="before")
    @classmethod
    def known_price_level(cls, v):
        """Treat unknown or blank tags as a missing price level."""
        if v is None or isinstance(v, PriceLevel):
            return v
        text = str(v).strip().lower()
        if text in {level.value for level in PriceLevel}:
            return text
        return None

    @property
    def has_valid_price(self) -> bool:
        return self.price > 0

    @property
    def display_airline(self) -> str:
        return self.airline_name or self.airline_code


class DailyAggregate(BaseModel):
    """Min/avg/max fare for one departure day."""

    date: date
    min_price: float = Field(..., ge=0)
    avg_price: float = Field(..., ge=0)
    max_price: float = Field(..., ge=0)


class DateRange(BaseModel):
    """Inclusive range of calendar days."""

    start: date
    end: date

    @field_validator("start", "end", mode="before")
    @classmethod
    def calendar_day(cls, v):
        return to_calendar_day(v)

    def __init__(self, **data):
        super().__init__(**data)
        if self.end < self.start:
            raise InvalidRangeError(f"Date range end {self.end} is before start {self.start}")

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


class DurationRange(BaseModel):
    """Inclusive [min, max] number of days a round trip may span."""

    min: int = Field(..., ge=0)
    max: int = Field(..., ge=0)

    def __init__(self, **data):
        super().__init__(**data)
        check_duration(self.min, self.max)

    @property
    def average(self) -> float:
        return (self.min + self.max) / 2


class Passengers(BaseModel):
    """Passenger breakdown used for fare discounts."""

    adults: int = Field(1, ge=0)
    children: int = Field(0, ge=0)
    infants: int = Field(0, ge=0)

    def model_post_init(self, __context) -> None:
        """Validate that at least one passenger travels."""
        if self.adults + self.children + self.infants == 0:
            raise ValueError("At least one passenger is required")

    @property
    def count(self) -> int:
        return self.adults + self.children + self.infants


class AnalysisRequest(BaseModel):
    """Validated input for a route price analysis."""

    origin: str = Field(..., min_length=3, max_length=4, description="Origin airport code")
    destination: str = Field(..., min_length=3, max_length=4, description="Destination airport code")
    duration_range: DurationRange
    trip_type: TripType = TripType.ROUND_TRIP
    passengers: Passengers = Field(default_factory=Passengers)
    travel_class: TravelClass = TravelClass.ECONOMY
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("origin", "destination")
    @classmethod
    def uppercase_airport(cls, v: str) -> str:
        """Convert airport codes to uppercase."""
        return v.upper()

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def calendar_day(cls, v):
        return to_calendar_day(v)

    def __init__(self, **data):
        """Validate route, trip lengths and requested dates."""
        super().__init__(**data)
        check_duration(self.duration_range.min, self.duration_range.max)
        if self.origin == self.destination:
            raise ValueError("Origin and destination must be different airports")
        if self.end_date is not None:
            if self.start_date is None:
                raise InvalidRangeError("end_date requires a start_date")
            if self.end_date <= self.start_date:
                raise InvalidRangeError(
                    f"end_date {self.end_date} must be after start_date {self.start_date}"
                )


class Prediction(BaseModel):
    """Point forecast with a lead-time based confidence band."""

    predicted_price: int = Field(..., ge=0)
    confidence: str = Field(..., pattern="^(high|medium|low)$")
    min_price: int = Field(..., ge=0)
    max_price: int = Field(..., ge=0)
    rmse: float = Field(0.0, ge=0, description="Cross-validated RMSE, 0 when unknown")
    mae: float = Field(0.0, ge=0, description="Cross-validated MAE, 0 when unknown")


class ForecastPoint(BaseModel):
    date: date
    predicted_price: int
    min_price: int
    max_price: int


class PriceTrend(BaseModel):
    trend: str = Field(..., pattern="^(increasing|decreasing|stable)$")
    change_percent: float
    current_avg_price: int
    future_avg_price: int


class FlightDataValidator:
    """Validates raw rows and analysis parameters for the analysis engine."""

    def validate_record(self, row: dict) -> FlightPriceRecord:
        """
        Validate one raw store row.

        Raises:
            pydantic.ValidationError: If the row is malformed
        """
        return FlightPriceRecord.model_validate(row)

    def validate_records(self, rows: List[dict]) -> List[FlightPriceRecord]:
        return [self.validate_record(row) for row in rows]

    def validate_request(self, **params) -> AnalysisRequest:
        """
        Validate analysis parameters.

        Raises:
            ValueError: If validation fails (InvalidRangeError for bad ranges)
        """
        return AnalysisRequest(**params)

    def get_validation_errors(self, origin: str, destination: str,
                              start_date: Optional[date] = None,
                              end_date: Optional[date] = None,
                              duration_min: int = 0,
                              duration_max: int = 0) -> List[str]:
        """Get list of validation errors for request parameters."""
        errors = []

        if not origin or not (3 <= len(origin) <= 4):
            errors.append(f"Invalid origin airport: {origin}")
        if not destination or not (3 <= len(destination) <= 4):
            errors.append(f"Invalid destination airport: {destination}")
        if origin and destination and origin.upper() == destination.upper():
            errors.append("Origin and destination must be different")
        if end_date is not None and start_date is not None and end_date <= start_date:
            errors.append("End date must be after start date")
        if duration_min < 0 or duration_max < duration_min:
            errors.append("Duration range must satisfy 0 <= min <= max")

        return errors
