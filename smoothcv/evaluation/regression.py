"""Single-predictor OLS fit, prediction and error metrics."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence
import logging

import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression
from sklearn.metrics import mean_squared_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegressionModel:
    """A fitted regression of one target column on one predictor column."""
    target: str
    predictor: str
    estimator: Any
    n_train: int

    @property
    def intercept(self) -> float:
        return float(self.estimator.intercept_)

    @property
    def slope(self) -> float:
        return float(self.estimator.coef_[0])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (excludes the estimator object)."""
        return {
            "target": self.target,
            "predictor": self.predictor,
            "intercept": self.intercept,
            "slope": self.slope,
            "n_train": self.n_train,
        }


class RegressionEvaluator:
    """Fits ``target ~ predictor`` by least squares and scores held-out predictions."""

    def fit(
        self,
        frame: pd.DataFrame,
        target: str,
        predictor: str,
        rows: Optional[Sequence[int]] = None,
    ) -> RegressionModel:
        """
        Fit a linear regression of ``target`` on ``predictor``.

        Args:
            frame: Dataset containing both columns
            target: Target column name
            predictor: Predictor column name
            rows: Positional rows to train on (all rows when None)

        Returns:
            RegressionModel
        """
        train = frame if rows is None else frame.iloc[list(rows)]
        if len(train) == 0:
            raise ValueError("Cannot fit a regression on zero rows")

        X = train[[predictor]].to_numpy(dtype=float)
        y = train[target].to_numpy(dtype=float)
        if np.isnan(X).any() or np.isnan(y).any():
            raise ValueError(
                f"Training rows for '{target} ~ {predictor}' contain missing values"
            )

        estimator = LinearRegression().fit(X, y)
        return RegressionModel(
            target=target,
            predictor=predictor,
            estimator=estimator,
            n_train=len(train),
        )

    def predict(self, model: RegressionModel, values) -> np.ndarray:
        """Predict the target for new predictor values."""
        X = np.asarray(values, dtype=float).reshape(-1, 1)
        return model.estimator.predict(X)

    @staticmethod
    def mse(actual, predicted) -> float:
        """Mean of squared differences."""
        return float(mean_squared_error(np.asarray(actual, dtype=float), np.asarray(predicted, dtype=float)))

    @staticmethod
    def rmse(actual, predicted) -> float:
        return float(np.sqrt(RegressionEvaluator.mse(actual, predicted)))

    def holdout_mse(
        self,
        train: pd.DataFrame,
        holdout: pd.DataFrame,
        target: str,
        predictor: str,
    ) -> float:
        """Fit on ``train`` and return the MSE of predictions on ``holdout``."""
        model = self.fit(train, target, predictor)
        predicted = self.predict(model, holdout[predictor])
        return self.mse(holdout[target], predicted)
