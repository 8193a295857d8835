"""
Feature Engineering
===================

Calendar and lead-time features for flight price prediction.
"""

from datetime import date
from typing import List, Tuple, Optional

import numpy as np
import pandas as pd


class FeatureEngineer:
    """
    Turns a departure date and its lead time into a fixed feature vector.

    Features, in order:
    - day of week (0 = Sunday .. 6 = Saturday)
    - month of year (0 = January .. 11 = December)
    - days until departure (>= 0)
    - weekend flag (1 on Saturday/Sunday)
    """

    FEATURE_NAMES = ["day_of_week", "month_of_year", "days_until_departure", "is_weekend"]

    def build(self, day: date, days_until_departure: int) -> List[float]:
        """Feature vector for a single departure day."""
        # Python counts Monday as 0; shift so Sunday is 0
        day_of_week = (day.weekday() + 1) % 7
        month_of_year = day.month - 1
        is_weekend = 1 if day_of_week in (0, 6) else 0

        return [day_of_week, month_of_year, max(0, int(days_until_departure)), is_weekend]

    def transform(self, df: pd.DataFrame) -> np.ndarray:
        """
        Build the feature matrix for a frame of departures.

        Args:
            df: DataFrame with departure_date and days_until_departure columns

        Returns:
            Feature matrix (n_samples, 4)
        """
        required = ["departure_date", "days_until_departure"]
        missing = [col for col in required if col not in df.columns]
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

        rows = [
            self.build(day, lead)
            for day, lead in zip(df["departure_date"], df["days_until_departure"])
        ]
        return np.asarray(rows, dtype=np.float32).reshape(-1, len(self.FEATURE_NAMES))

    def training_set(self, df: pd.DataFrame) -> Tuple[np.ndarray, Optional[np.ndarray]]:
        """
        Features and labels for model training.

        Returns:
            Tuple of (features, labels) where labels is None if 'price' not in df
        """
        X = self.transform(df)
        y = df["price"].to_numpy(dtype=np.float64) if "price" in df.columns else None
        return X, y

    def get_feature_names(self) -> List[str]:
        return list(self.FEATURE_NAMES)
