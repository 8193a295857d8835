"""
Pytest Configuration and Fixtures
=================================

Shared fixtures for all tests.
"""

import pytest
from datetime import date, timedelta
from typing import List

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from data.validator import FlightPriceRecord, PriceLevel, TripType


TODAY = date(2025, 3, 1)


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: end-to-end tests over generated data")


def make_record(day, price, trip_type=TripType.ROUND_TRIP, level=None,
                airline="Thai Airways", **kwargs) -> FlightPriceRecord:
    """Build a record with sensible defaults."""
    return FlightPriceRecord(
        departure_date=day,
        price=price,
        trip_type=trip_type,
        price_level=level,
        airline_name=airline,
        **kwargs
    )


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def clock():
    """Fixed clock for forecaster and analysis service."""
    return lambda: TODAY


@pytest.fixture
def season_records() -> List[FlightPriceRecord]:
    """One low-season and one high-season fare."""
    return [
        make_record(date(2025, 6, 15), 5000, level=PriceLevel.LOW, airline="Nok Air"),
        make_record(date(2025, 12, 25), 15000, level=PriceLevel.HIGH, airline="Thai Airways"),
    ]


@pytest.fixture
def week_records() -> List[FlightPriceRecord]:
    """One-way fares a week either side of 2025-06-15."""
    return [
        make_record(date(2025, 6, 8), 4500, trip_type=TripType.ONE_WAY),
        make_record(date(2025, 6, 15), 5000, trip_type=TripType.ONE_WAY),
        make_record(date(2025, 6, 22), 5500, trip_type=TripType.ONE_WAY),
    ]


@pytest.fixture
def sample_records() -> List[FlightPriceRecord]:
    """A year of generated round-trip fares around TODAY."""
    from data.processor import FlightDataProcessor

    processor = FlightDataProcessor()
    return processor.create_sample_records(TODAY - timedelta(days=200), days=365,
                                           flights_per_day=2, seed=42)


@pytest.fixture
def sample_store(sample_records):
    """In-memory store holding the generated fares for BKK -> CNX."""
    from data.store import InMemoryFlightDataStore

    return InMemoryFlightDataStore().add_records("BKK", "CNX", sample_records)


@pytest.fixture
def fast_trainer():
    """Small sklearn-backed trainer to keep model tests quick."""
    from models.trainer import RegressionTrainer, TrainerConfig

    return RegressionTrainer(TrainerConfig(n_estimators=20, backend="sklearn"))
