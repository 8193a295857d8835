"""
Base Model Interface
====================

Common interface for fare regressors used by the trainer and forecaster.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score


class BasePriceModel(ABC):
    """
    A regressor mapping feature rows to fares.

    Subclasses set ``is_fitted`` once trained; ``predict`` on an unfitted
    model raises ValueError.
    """

    def __init__(self, name: str):
        self.name = name
        self.is_fitted = False
        self._metrics: Dict[str, float] = {}

    @abstractmethod
    def fit(self, X: np.ndarray, y: np.ndarray) -> "BasePriceModel":
        """
        Train on (features, fare) samples.

        Returns:
            Self for method chaining
        """
        pass

    @abstractmethod
    def predict(self, X: np.ndarray) -> np.ndarray:
        pass

    @abstractmethod
    def get_params(self) -> Dict[str, Any]:
        pass

    def check_fitted(self) -> None:
        if not self.is_fitted:
            raise ValueError("Model not fitted. Call fit() first.")

    def evaluate(self, X: np.ndarray, y: np.ndarray) -> Dict[str, float]:
        """
        Score predictions against held-out fares.

        Returns:
            Dictionary with mae, mse, rmse and r2 (r2 is 0 for a single sample)
        """
        y = np.asarray(y, dtype=np.float64)
        predictions = self.predict(X)

        mse = float(mean_squared_error(y, predictions))
        self._metrics = {
            "mae": float(mean_absolute_error(y, predictions)),
            "mse": mse,
            "rmse": float(np.sqrt(mse)),
            "r2": float(r2_score(y, predictions)) if len(y) > 1 else 0.0,
        }
        return self._metrics

    @property
    def metrics(self) -> Dict[str, float]:
        """Latest evaluation metrics."""
        return self._metrics.copy()

    def __repr__(self) -> str:
        state = "fitted" if self.is_fitted else "unfitted"
        return f"{self.name}({state}, {self.get_params()})"
