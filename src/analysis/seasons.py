"""
Season Classifier
=================

Labels calendar months as low, normal or high season for a route and
summarises each season's price range and cheapest fare.
"""

import calendar
import logging
import math
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel, Field

try:
    from ..data.processor import FlightDataProcessor
    from ..data.validator import FlightPriceRecord, PriceLevel, SeasonType
except ImportError:
    from data.processor import FlightDataProcessor
    from data.validator import FlightPriceRecord, PriceLevel, SeasonType

logger = logging.getLogger(__name__)

SEASON_ORDER = [SeasonType.LOW, SeasonType.NORMAL, SeasonType.HIGH]

LEVEL_TO_SEASON = {
    PriceLevel.LOW: SeasonType.LOW,
    PriceLevel.TYPICAL: SeasonType.NORMAL,
    PriceLevel.HIGH: SeasonType.HIGH,
}

SEASON_DESCRIPTIONS = {
    SeasonType.LOW: "Cheapest time of the year, best for flexible travellers",
    SeasonType.NORMAL: "Moderate fares, a good balance of price and demand",
    SeasonType.HIGH: "Holiday and peak periods with the highest fares, book early",
}

NO_DATA_DESCRIPTION = "No data available"


class PriceRange(BaseModel):
    min: float = 0
    max: float = 0


class BestDeal(BaseModel):
    """The cheapest fare of a season."""
    date: date
    price: float = Field(..., ge=0)
    airline: str = ""


class SeasonBucket(BaseModel):
    """One season with the months it covers and its fares."""
    type: SeasonType
    months: List[int] = Field(default_factory=list, description="Calendar months 1-12")
    price_range: PriceRange = Field(default_factory=PriceRange)
    best_deal: Optional[BestDeal] = None
    description: str = NO_DATA_DESCRIPTION

    @property
    def month_names(self) -> List[str]:
        return [calendar.month_name[m] for m in self.months]

    @property
    def is_empty(self) -> bool:
        return self.best_deal is None


def empty_buckets() -> List[SeasonBucket]:
    return [SeasonBucket(type=season) for season in SEASON_ORDER]


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """Nearest-rank percentile of an ascending sequence."""
    if not sorted_values:
        return 0.0
    index = math.ceil((p / 100) * len(sorted_values)) - 1
    return sorted_values[max(0, index)]


def month_seasons(buckets: Iterable[SeasonBucket]) -> Dict[int, SeasonType]:
    """Month (1-12) to season for every month listed in the buckets."""
    mapping = {}
    for bucket in buckets:
        for month in bucket.months:
            mapping[month] = bucket.type
    return mapping


def season_for_date(buckets: Iterable[SeasonBucket], day: date,
                    default: SeasonType = SeasonType.NORMAL) -> SeasonType:
    return month_seasons(buckets).get(day.month, default)


class SeasonClassifier:
    """
    Classifies months into seasons from a route's price records.

    Records tagged with a price level are grouped by tag (low, typical
    as normal, high). A month with mixed tags goes to the season with
    the most records in that month, ties going to the first tag seen.
    When no record carries a price level, months are ranked by average
    fare: the bottom third (33rd percentile of month averages) is low,
    the top third (67th percentile) high, the rest normal.

    Months without data are left out of every season.

    Price range and best deal come from every record in the season's
    group, so with mixed tags a season's best deal can fall in a month
    listed under another season. Month labels (season_for_date) then
    disagree with the bucket the deal came from.
    """

    LOW_PERCENTILE = 33
    HIGH_PERCENTILE = 67

    def __init__(self, processor: Optional[FlightDataProcessor] = None):
        self.processor = processor or FlightDataProcessor()

    def classify(self, records: Iterable[FlightPriceRecord]) -> List[SeasonBucket]:
        """
        Build the low, normal and high season buckets.

        Returns:
            Exactly three buckets ordered low, normal, high
        """
        records = list(records)
        if not records:
            return empty_buckets()

        tagged = [r for r in records if r.price_level is not None]
        if tagged:
            logger.info("Classifying seasons from price_level (%d/%d records tagged)",
                        len(tagged), len(records))
            groups = {season: [] for season in SEASON_ORDER}
            for record in tagged:
                groups[LEVEL_TO_SEASON[record.price_level]].append(record)
            month_map = self._dominant_season_by_month(tagged)
        else:
            logger.warning("No records carry a price_level, using month-average percentiles")
            month_map = self.month_seasons_by_percentile(records)
            groups = {
                season: [r for r in records if month_map.get(r.departure_date.month) == season]
                for season in SEASON_ORDER
            }

        buckets = [
            self._build_bucket(season, month_map, groups[season])
            for season in SEASON_ORDER
        ]

        for bucket in buckets:
            logger.info("Season %s: months=%s range=%s-%s",
                        bucket.type.value, bucket.months,
                        bucket.price_range.min, bucket.price_range.max)
        return buckets

    def month_seasons_by_percentile(self, records: Iterable[FlightPriceRecord]) -> Dict[int, SeasonType]:
        """Season per month from where the month's average fare ranks."""
        averages = self.processor.monthly_average_prices(records)
        if averages.empty:
            return {}

        ranked = sorted(float(v) for v in averages.values)
        low_threshold = percentile(ranked, self.LOW_PERCENTILE)
        high_threshold = percentile(ranked, self.HIGH_PERCENTILE)

        mapping = {}
        for month, avg in averages.items():
            if avg <= low_threshold:
                mapping[int(month)] = SeasonType.LOW
            elif avg >= high_threshold:
                mapping[int(month)] = SeasonType.HIGH
            else:
                mapping[int(month)] = SeasonType.NORMAL
        return mapping

    @staticmethod
    def _dominant_season_by_month(records: List[FlightPriceRecord]) -> Dict[int, SeasonType]:
        counts: Dict[int, Dict[SeasonType, int]] = {}
        for record in records:
            per_month = counts.setdefault(record.departure_date.month, {})
            season = LEVEL_TO_SEASON[record.price_level]
            per_month[season] = per_month.get(season, 0) + 1

        # max() keeps the first maximum, i.e. the first tag seen for the month
        return {
            month: max(per_month, key=per_month.get)
            for month, per_month in counts.items()
        }

    @staticmethod
    def _build_bucket(season: SeasonType, month_map: Dict[int, SeasonType],
                      group: List[FlightPriceRecord]) -> SeasonBucket:
        months = sorted(m for m, s in month_map.items() if s == season)
        priced = [r for r in group if r.has_valid_price]

        if not priced:
            return SeasonBucket(type=season, months=months)

        cheapest = min(priced, key=lambda r: r.price)
        return SeasonBucket(
            type=season,
            months=months,
            price_range=PriceRange(min=cheapest.price, max=max(r.price for r in priced)),
            best_deal=BestDeal(
                date=cheapest.departure_date,
                price=cheapest.price,
                airline=cheapest.display_airline,
            ),
            description=SEASON_DESCRIPTIONS[season],
        )
