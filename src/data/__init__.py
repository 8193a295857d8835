from .processor import FlightDataProcessor
from .store import FlightDataStore, InMemoryFlightDataStore
from .validator import FlightDataValidator, FlightPriceRecord

__all__ = [
    "FlightDataProcessor",
    "FlightDataStore",
    "InMemoryFlightDataStore",
    "FlightDataValidator",
    "FlightPriceRecord",
]
