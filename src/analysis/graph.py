"""
Graph Series Builder
====================

Daily low/typical/high series mixing observed fares with forecasts.
"""

import logging
from datetime import date, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel

try:
    from ..data.validator import DailyAggregate, Prediction
except ImportError:
    from data.validator import DailyAggregate, Prediction

logger = logging.getLogger(__name__)

Predictor = Callable[[date], Optional[Prediction]]


class GraphPoint(BaseModel):
    date: date
    low: int
    typical: int
    high: int
    is_actual: bool


def build_graph_series(aggregates: Iterable[DailyAggregate], predictor: Optional[Predictor],
                       today: date, horizon_days: int,
                       actual_window_days: int = 30) -> List[GraphPoint]:
    """
    Build the price graph from today - actual_window_days to today + horizon_days.

    Days with observed fares are emitted as actual points. Each day from
    tomorrow onwards without observed fares is forecast; days where the
    predictor returns None or a non-positive price are left out.

    Args:
        aggregates: Daily min/avg/max fares
        predictor: Callable returning a Prediction for a departure day
        today: Reference day
        horizon_days: Number of days after today to cover
        actual_window_days: Number of days before today to cover

    Returns:
        Points ascending by date, at most one per day
    """
    window_start = today - timedelta(days=actual_window_days)
    window_end = today + timedelta(days=horizon_days)

    points: Dict[date, GraphPoint] = {}
    for agg in aggregates:
        if not (window_start <= agg.date <= window_end) or agg.min_price <= 0:
            continue
        points[agg.date] = GraphPoint(
            date=agg.date,
            low=int(round(agg.min_price)),
            typical=int(round(agg.avg_price)),
            high=int(round(agg.max_price)),
            is_actual=True,
        )

    predicted = 0
    if predictor is not None:
        for offset in range(1, horizon_days + 1):
            day = today + timedelta(days=offset)
            if day in points:
                continue

            prediction = predictor(day)
            if prediction is None or prediction.predicted_price <= 0:
                continue

            typical = prediction.predicted_price
            points[day] = GraphPoint(
                date=day,
                low=min(prediction.min_price, typical),
                typical=typical,
                high=max(prediction.max_price, typical),
                is_actual=False,
            )
            predicted += 1

    logger.info("Graph series: %d actual, %d predicted points",
                len(points) - predicted, predicted)
    return [points[day] for day in sorted(points)]
