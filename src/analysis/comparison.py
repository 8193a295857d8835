"""
Price-Comparison Engine
=======================

Compares the fare for a chosen departure day with leaving a week earlier
or a week later.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from pydantic import BaseModel

try:
    from .duration import DurationRangeOptimizer, DurationSearchResult
    from .pricing import PriceAdjuster
    from ..data.validator import DurationRange, Passengers, TripType
except ImportError:
    from analysis.duration import DurationRangeOptimizer, DurationSearchResult
    from analysis.pricing import PriceAdjuster
    from data.validator import DurationRange, Passengers, TripType

logger = logging.getLogger(__name__)

PRICE_COMPARISON_DAYS = 7


class ComparisonSide(BaseModel):
    date: date
    return_date: Optional[date] = None
    price: int = 0
    difference: int = 0
    percentage: int = 0


class PriceComparison(BaseModel):
    base_date: date
    base_price: Optional[int] = None
    base_airline: Optional[str] = None
    base_return_date: Optional[date] = None
    if_go_before: ComparisonSide
    if_go_after: ComparisonSide


def _difference(price: float, reference: float):
    diff = price - reference
    return int(round(diff)), int(round(diff / reference * 100))


def _differences(base_price: float, before_price: float, after_price: float):
    """Return (before_diff, before_pct, after_diff, after_pct)."""
    if base_price > 0:
        return _difference(before_price, base_price) + _difference(after_price, base_price)
    if before_price > 0 and after_price > 0:
        average = (before_price + after_price) / 2
        return _difference(before_price, average) + _difference(after_price, average)
    # One priced neighbour: it is the reference, the unpriced side keeps 0 percent
    if before_price > 0:
        return 0, 0, int(round(after_price - before_price)), 0
    if after_price > 0:
        return int(round(before_price - after_price)), 0, 0, 0
    return 0, 0, 0, 0


def compare_prices(optimizer: DurationRangeOptimizer, base_date: date,
                   duration_range: DurationRange, trip_type: TripType,
                   adjuster: Optional[PriceAdjuster] = None) -> PriceComparison:
    """
    Price the base day and the days PRICE_COMPARISON_DAYS before and after it.

    Prices are party fares (passenger discounts and class multiplier
    applied) before differencing. Differences are measured against the
    base price, so a neighbour with no fare reads as -100%. When the base
    day has no fare but both neighbours do, the neighbours' average is the
    reference. With a single neighbour priced, that side reports 0 and the
    other side its absolute difference with 0 percent.
    """
    adjuster = adjuster or PriceAdjuster(Passengers())
    before_date = base_date - timedelta(days=PRICE_COMPARISON_DAYS)
    after_date = base_date + timedelta(days=PRICE_COMPARISON_DAYS)

    def search(day: date) -> DurationSearchResult:
        return optimizer.best_price(day, duration_range, trip_type)

    base, before, after = search(base_date), search(before_date), search(after_date)
    base_price = adjuster.fare(base.price)
    before_price = adjuster.fare(before.price)
    after_price = adjuster.fare(after.price)

    if base_price <= 0:
        logger.info("No fare on %s, comparing %s against %s", base_date,
                    before_date, after_date)

    before_diff, before_pct, after_diff, after_pct = _differences(
        base_price, before_price, after_price)

    return PriceComparison(
        base_date=base_date,
        base_price=int(round(base_price)) if base_price > 0 else None,
        base_airline=optimizer.airline_on(base_date) or base.airline,
        base_return_date=base.return_date,
        if_go_before=ComparisonSide(
            date=before_date,
            return_date=before.return_date,
            price=int(round(before_price)),
            difference=before_diff,
            percentage=before_pct,
        ),
        if_go_after=ComparisonSide(
            date=after_date,
            return_date=after.return_date,
            price=int(round(after_price)),
            difference=after_diff,
            percentage=after_pct,
        ),
    )
