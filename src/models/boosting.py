"""
Gradient Boosted Model
======================

Gradient-boosted decision tree regressor for flight prices. Uses XGBoost
when it is installed and scikit-learn's GradientBoostingRegressor otherwise.
"""

import numpy as np
from typing import Dict, Any
from .base import BasePriceModel

from sklearn.ensemble import GradientBoostingRegressor

# Optional advanced boosting library
try:
    import xgboost as xgb
    HAS_XGBOOST = True
except ImportError:
    HAS_XGBOOST = False


BACKENDS = ("auto", "sklearn", "xgboost")


def resolve_backend(backend: str) -> str:
    """Pick the concrete boosting library for a configured backend name."""
    if backend not in BACKENDS:
        raise ValueError(f"Unknown boosting backend: {backend}. Expected one of {BACKENDS}")
    if backend == "auto":
        return "xgboost" if HAS_XGBOOST else "sklearn"
    if backend == "xgboost" and not HAS_XGBOOST:
        raise ValueError("xgboost backend requested but xgboost is not installed")
    return backend


class GradientBoostedModel(BasePriceModel):
    """
    Boosted tree ensemble with a squared-error regression objective.

    Hyperparameters default to max depth 6, learning rate 0.1 and
    100 boosting rounds.
    """

    def __init__(self, n_estimators: int = 100, learning_rate: float = 0.1,
                 max_depth: int = 6, random_state: int = 42,
                 backend: str = "auto"):
        super().__init__("GradientBoostedModel")
        self.n_estimators = n_estimators
        self.learning_rate = learning_rate
        self.max_depth = max_depth
        self.random_state = random_state
        self.backend = resolve_backend(backend)
        self.model = self._build()

    def _build(self) -> Any:
        if self.backend == "xgboost":
            return xgb.XGBRegressor(
                n_estimators=self.n_estimators,
                learning_rate=self.learning_rate,
                max_depth=self.max_depth,
                objective="reg:squarederror",
                random_state=self.random_state,
                verbosity=0
            )

        return GradientBoostingRegressor(
            n_estimators=self.n_estimators,
            learning_rate=self.learning_rate,
            max_depth=self.max_depth,
            loss="squared_error",
            random_state=self.random_state
        )

    def fit(self, X: np.ndarray, y: np.ndarray) -> "GradientBoostedModel":
        if len(X) == 0:
            raise ValueError("Cannot fit on an empty training set")

        self.model.fit(X, y)
        self.is_fitted = True
        return self

    def predict(self, X: np.ndarray) -> np.ndarray:
        self.check_fitted()
        return np.asarray(self.model.predict(X), dtype=np.float64)

    def get_feature_importance(self) -> np.ndarray:
        """Feature importances of the fitted tree ensemble."""
        self.check_fitted()
        return np.asarray(self.model.feature_importances_)

    def get_params(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "n_estimators": self.n_estimators,
            "learning_rate": self.learning_rate,
            "max_depth": self.max_depth,
            "random_state": self.random_state,
        }
