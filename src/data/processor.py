"""
Flight Data Processor
=====================

Handles loading, tabulating and aggregating flight-price records.
"""

import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from .validator import (
    DailyAggregate,
    FlightDataValidator,
    FlightPriceRecord,
    PriceLevel,
    TravelClass,
    TripType,
)

logger = logging.getLogger(__name__)


class FlightDataProcessor:
    """Process flight-price records for analysis and model training."""

    # Relative monthly demand used by the sample generator (Jan..Dec)
    MONTH_FACTORS = [1.25, 1.1, 0.95, 1.2, 0.85, 0.8, 0.85, 0.9, 0.8, 0.9, 1.0, 1.35]

    # Airline pricing tiers for sample data
    AIRLINE_TIERS = {
        "TG": ("Thai Airways", 1.2),
        "FD": ("Thai AirAsia", 0.8),
        "SL": ("Thai Lion Air", 0.85),
        "PG": ("Bangkok Airways", 1.1),
        "DD": ("Nok Air", 0.9),
    }

    COLUMNS = ["departure_date", "return_date", "price", "trip_type",
               "travel_class", "price_level", "airline_code", "airline_name"]

    def __init__(self):
        self.validator = FlightDataValidator()

    def load_records(self, filepath: str) -> List[FlightPriceRecord]:
        """Load flight-price records from a CSV file."""
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Data file not found: {filepath}")

        df = pd.read_csv(path)
        df = df.replace({np.nan: None})
        records = self.validator.validate_records(df.to_dict(orient="records"))
        logger.info("Loaded %d flight price records from %s", len(records), path)
        return records

    def to_frame(self, records: Iterable[FlightPriceRecord]) -> pd.DataFrame:
        """Tabulate records; enum columns hold their string values."""
        rows = [record.model_dump(mode="json") for record in records]
        if not rows:
            return pd.DataFrame(columns=self.COLUMNS)

        df = pd.DataFrame(rows)
        df["departure_date"] = pd.to_datetime(df["departure_date"]).dt.date
        return df

    def daily_aggregates(self, records: Iterable[FlightPriceRecord]) -> List[DailyAggregate]:
        """
        Min/avg/max fare per departure day, ascending by date.

        Records without a valid (> 0) price are ignored, so a day with
        only zero fares produces no aggregate.
        """
        df = self.to_frame(r for r in records if r.has_valid_price)
        if df.empty:
            return []

        grouped = (
            df.groupby("departure_date")["price"]
            .agg(["min", "mean", "max"])
            .sort_index()
        )

        return [
            DailyAggregate(
                date=day,
                min_price=float(row["min"]),
                avg_price=float(row["mean"]),
                max_price=float(row["max"]),
            )
            for day, row in grouped.iterrows()
        ]

    def monthly_average_prices(self, records: Iterable[FlightPriceRecord]) -> pd.Series:
        """Average valid fare per calendar month (1-12), indexed by month."""
        df = self.to_frame(r for r in records if r.has_valid_price)
        if df.empty:
            return pd.Series(dtype=float)

        months = pd.to_datetime(df["departure_date"]).dt.month
        return df.groupby(months)["price"].mean().sort_index()

    def create_sample_records(self, start: date, days: int = 365,
                              flights_per_day: int = 3,
                              trip_type: TripType = TripType.ROUND_TRIP,
                              base_price: float = 3000.0,
                              tag_price_levels: bool = True,
                              seed: int = 42) -> List[FlightPriceRecord]:
        """Generate synthetic seasonal fares for training/testing."""
        rng = np.random.RandomState(seed)
        airlines = list(self.AIRLINE_TIERS.items())

        raw = []
        for offset in range(days):
            day = start + timedelta(days=offset)
            season_factor = self.MONTH_FACTORS[day.month - 1]
            weekend_factor = 1.1 if day.weekday() >= 5 else 1.0

            for _ in range(flights_per_day):
                code, (name, tier) = airlines[rng.randint(len(airlines))]
                noise = rng.normal(0, base_price * 0.05)
                price = max(500.0, base_price * season_factor * weekend_factor * tier + noise)
                raw.append((day, code, name, round(price), season_factor))

        records = []
        for idx, (day, code, name, price, season_factor) in enumerate(raw, start=1):
            level = None
            if tag_price_levels:
                if season_factor < 0.9:
                    level = PriceLevel.LOW
                elif season_factor > 1.15:
                    level = PriceLevel.HIGH
                else:
                    level = PriceLevel.TYPICAL

            records.append(FlightPriceRecord(
                id=idx,
                departure_date=day,
                price=price,
                trip_type=trip_type,
                travel_class=TravelClass.ECONOMY,
                price_level=level,
                airline_code=code,
                airline_name=name,
                duration=75,
                flight_number=f"{code}{100 + idx % 900}",
            ))

        return records

    def get_feature_frame(self, records: Iterable[FlightPriceRecord],
                          today: Optional[date] = None) -> pd.DataFrame:
        """Departure date, lead time and price columns for model training."""
        today = today or date.today()
        df = self.to_frame(r for r in records if r.has_valid_price)
        if df.empty:
            return pd.DataFrame(columns=["departure_date", "days_until_departure", "price"])

        df = df.sort_values("departure_date", kind="stable").reset_index(drop=True)
        df["days_until_departure"] = [
            max(0, (d - today).days) for d in df["departure_date"]
        ]
        return df[["departure_date", "days_until_departure", "price"]]
