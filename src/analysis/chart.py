"""
Daily Price Chart
=================

Best fare for every departure day of one calendar month.
"""

import calendar
from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel

try:
    from .duration import DurationRangeOptimizer
    from .pricing import PriceAdjuster
    from ..data.validator import DurationRange, SeasonType, TripType
except ImportError:
    from analysis.duration import DurationRangeOptimizer
    from analysis.pricing import PriceAdjuster
    from data.validator import DurationRange, SeasonType, TripType


class ChartPoint(BaseModel):
    date: date
    price: int
    return_date: Optional[date] = None
    duration: Optional[int] = None
    airline: Optional[str] = None
    season: SeasonType = SeasonType.NORMAL


def build_chart_series(optimizer: DurationRangeOptimizer, base_date: date,
                       duration_range: DurationRange, trip_type: TripType,
                       adjuster: PriceAdjuster,
                       seasons_by_month: Optional[Dict[int, SeasonType]] = None) -> List[ChartPoint]:
    """
    One point per day of base_date's month that has a fare.

    The base date is always included, with price 0 when it has no fare.
    Months missing from seasons_by_month are labelled normal.
    """
    seasons_by_month = seasons_by_month or {}
    season = seasons_by_month.get(base_date.month, SeasonType.NORMAL)
    _, days_in_month = calendar.monthrange(base_date.year, base_date.month)

    points = []
    for day_number in range(1, days_in_month + 1):
        day = base_date.replace(day=day_number)
        result = optimizer.best_price(day, duration_range, trip_type)
        if not result.found and day != base_date:
            continue

        points.append(ChartPoint(
            date=day,
            price=adjuster.display(result.price),
            return_date=result.return_date,
            duration=result.duration,
            airline=result.airline,
            season=season,
        ))
    return points
