from .seasons import SeasonBucket, SeasonClassifier
from .duration import DurationRangeOptimizer, DurationSearchResult
from .comparison import PRICE_COMPARISON_DAYS, PriceComparison, compare_prices
from .graph import GraphPoint, build_graph_series
from .orchestrator import AnalysisConfig, AnalysisResult, FlightAnalysisService

__all__ = ["SeasonBucket", "SeasonClassifier", "DurationRangeOptimizer",
           "DurationSearchResult", "PRICE_COMPARISON_DAYS", "PriceComparison",
           "compare_prices", "GraphPoint", "build_graph_series", "AnalysisConfig",
           "AnalysisResult", "FlightAnalysisService"]
