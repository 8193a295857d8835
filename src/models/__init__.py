from .boosting import GradientBoostedModel
from .trainer import RegressionTrainer, TrainerConfig
from .forecaster import ForecastConfig, ModelCache, PriceForecaster

__all__ = ["GradientBoostedModel", "RegressionTrainer", "TrainerConfig",
           "ForecastConfig", "ModelCache", "PriceForecaster"]
