#!/usr/bin/env python3
"""
Flight Price Analysis Demo
==========================

Runs a route analysis and price forecasts over generated sample fares.
"""

import logging
import sys
from datetime import date, timedelta
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from data.processor import FlightDataProcessor
from data.store import InMemoryFlightDataStore
from data.validator import DurationRange, Passengers, TravelClass, TripType
from analysis.orchestrator import AnalysisConfig, FlightAnalysisService


def main():
    logging.basicConfig(level=logging.WARNING,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("Flight Price Analysis Demo")
    print("=" * 60)
    print()

    today = date.today()

    # 1. Data Generation
    print("1. Generating sample fares BKK -> CNX...")
    processor = FlightDataProcessor()
    start = today - timedelta(days=200)
    round_trip = processor.create_sample_records(start, days=400, seed=42)
    one_way = processor.create_sample_records(start, days=400, seed=7,
                                              trip_type=TripType.ONE_WAY,
                                              base_price=1600)
    store = InMemoryFlightDataStore(processor)
    store.add_records("BKK", "CNX", round_trip + one_way)
    print(f"   Generated {len(round_trip)} round-trip and {len(one_way)} one-way fares")
    print()

    # 2. Route analysis
    print("2. Analysing a round trip for 2 adults and 1 child...")
    service = FlightAnalysisService(store, config=AnalysisConfig(graph_horizon_days=60))
    result = service.analyze(
        "BKK", "CNX",
        duration_range=DurationRange(min=3, max=7),
        trip_type=TripType.ROUND_TRIP,
        passengers=Passengers(adults=2, children=1),
        travel_class=TravelClass.ECONOMY,
        start_date=today + timedelta(days=45),
    )
    print(f"   Analysis window: {result.analysis_window.start} to {result.analysis_window.end}")
    for season in result.seasons:
        deal = season.best_deal
        deal_text = f"best {deal.price:,.0f} on {deal.date}" if deal else "no data"
        print(f"   {season.type.value:>6}: {', '.join(season.month_names) or '-'} ({deal_text})")
    print()

    period = result.recommended_period
    if period:
        print(f"   Recommended: {period.start_date} -> {period.end_date} "
              f"({period.duration} days, {period.airline})")
        print(f"   Price: {period.price:,}  Savings: {period.savings:,}")
    print()

    # 3. Week before/after
    comparison = result.price_comparison
    print(f"3. Comparing against {comparison.base_date} (base {comparison.base_price}):")
    for label, side in (("before", comparison.if_go_before), ("after", comparison.if_go_after)):
        print(f"   Go {label} ({side.date}): {side.price:,} "
              f"({side.difference:+,} / {side.percentage:+d}%)")
    print()

    # 4. Forecasts
    print("4. Forecasts:")
    if result.prediction:
        p = result.prediction
        print(f"   Predicted fare: {p.predicted_price:,} "
              f"[{p.min_price:,} - {p.max_price:,}] ({p.confidence} confidence)")
    if result.trend:
        print(f"   Trend: {result.trend.trend} ({result.trend.change_percent:+.2f}%)")
    predicted = [point for point in result.graph_series if not point.is_actual]
    print(f"   Graph: {len(result.graph_series)} points, {len(predicted)} predicted")
    print()

    print("=" * 60)
    print("Demo Complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
