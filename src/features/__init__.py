from .engineering import FeatureEngineer

__all__ = ["FeatureEngineer"]
