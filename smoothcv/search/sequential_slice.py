"""
Sequential-slice cross-validated grid search over the exponential-smoothing alpha.

The smoother's initial level is estimated from data, so random folds would
let holdout observations shape the smoothed training predictor. Instead each
slice is split into a leading training range and a trailing holdout range:

1. fit the smoother (fixed alpha, estimated level) on training ``x_noisy``;
2. regress ``y`` on the smoothed training predictor;
3. extend the fitted smoother forward through holdout ``x_noisy``, starting
   from its last training level;
4. score the regression on the holdout rows.

Step 3 is an online forward pass, so each holdout predictor value depends
only on the training range and on holdout observations up to that row. It
never touches holdout targets.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple
import logging

import numpy as np
import pandas as pd

from ..data.splitters import TimeSeriesSplitter
from ..data.structs import NOISY_COLUMN, TARGET_COLUMN, SliceSpec, validate_dataset
from ..evaluation.regression import RegressionEvaluator, RegressionModel
from ..smoothing.exponential import ExponentialFit, ExponentialSmoother
from ..utils.error_handling import candidate_context
from .grid import HyperparameterGridResult

logger = logging.getLogger(__name__)

SMOOTHED_COLUMN = "x_es"


class SequentialSliceSearch:
    """Grid-searches the smoothing alpha on ordered train/holdout slices."""

    def __init__(
        self,
        evaluator: Optional[RegressionEvaluator] = None,
        smoother: Optional[ExponentialSmoother] = None,
        predictor: str = NOISY_COLUMN,
        target: str = TARGET_COLUMN,
        max_workers: int = 1,
    ):
        self.evaluator = evaluator or RegressionEvaluator()
        self.smoother = smoother or ExponentialSmoother()
        self.predictor = predictor
        self.target = target
        self.max_workers = max_workers

    def search(
        self,
        dataset: pd.DataFrame,
        alpha_candidates: Sequence[float],
        slice_specs: Sequence[SliceSpec],
    ) -> HyperparameterGridResult:
        """
        Score every alpha candidate by mean holdout MSE across slices.

        Args:
            dataset: Rows in temporal order with the predictor and target columns
            alpha_candidates: Alphas to try, each in (0, 1)
            slice_specs: Non-overlapping slices over positional rows

        Returns:
            HyperparameterGridResult keyed by alpha

        Raises:
            InvalidSliceError: If a slice is empty, out of range, or overlaps another
            InvalidAlphaError: If a candidate lies outside (0, 1)
        """
        validate_dataset(dataset, required=(self.predictor, self.target))
        TimeSeriesSplitter().validate_slices(slice_specs, len(dataset))
        if len(alpha_candidates) == 0:
            raise ValueError("alpha_candidates is empty")

        logger.info(
            f"Sequential slice search: {len(alpha_candidates)} candidates, "
            f"{len(slice_specs)} slices"
        )

        def evaluate(alpha: float) -> Tuple[float, List[float]]:
            with candidate_context("alpha", alpha):
                return self._evaluate_alpha(dataset, alpha, slice_specs)

        if self.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                outcomes = list(executor.map(evaluate, alpha_candidates))
        else:
            outcomes = [evaluate(a) for a in alpha_candidates]

        scores = {alpha: float(np.mean(slices)) for alpha, slices in outcomes}
        return HyperparameterGridResult(
            parameter="alpha",
            scores=scores,
            fold_scores={alpha: slices for alpha, slices in outcomes},
            metadata={
                "slices": [spec.to_dict() for spec in slice_specs],
                "predictor": self.predictor,
                "target": self.target,
            },
        )

    def fit_slice(
        self,
        dataset: pd.DataFrame,
        alpha: float,
        spec: SliceSpec,
    ) -> Tuple[ExponentialFit, RegressionModel]:
        """Fit the smoother and the regression on a slice's training rows only."""
        train, _ = spec.split(dataset)
        fitted = self.smoother.fit_with_alpha(train[self.predictor], alpha)
        train_frame = pd.DataFrame({
            self.target: train[self.target].to_numpy(),
            SMOOTHED_COLUMN: fitted.smoothed.to_numpy(),
        })
        model = self.evaluator.fit(train_frame, self.target, SMOOTHED_COLUMN)
        return fitted, model

    def holdout_predictor(
        self,
        dataset: pd.DataFrame,
        fitted: ExponentialFit,
        spec: SliceSpec,
    ) -> pd.Series:
        """Smoothed predictor for the holdout rows, continued from the trained state."""
        _, holdout = spec.split(dataset)
        return self.smoother.extend(fitted.state, holdout[self.predictor])

    def slice_mse(self, dataset: pd.DataFrame, alpha: float, spec: SliceSpec) -> float:
        """Holdout MSE of one slice for one alpha."""
        fitted, model = self.fit_slice(dataset, alpha, spec)
        predicted = self.evaluator.predict(model, self.holdout_predictor(dataset, fitted, spec))
        _, holdout = spec.split(dataset)
        return self.evaluator.mse(holdout[self.target], predicted)

    def _evaluate_alpha(
        self,
        dataset: pd.DataFrame,
        alpha: float,
        slice_specs: Sequence[SliceSpec],
    ) -> Tuple[float, List[float]]:
        slices = []
        for i, spec in enumerate(slice_specs):
            mse = self.slice_mse(dataset, alpha, spec)
            logger.debug(f"alpha={alpha} slice={i} mse={mse:.6f}")
            slices.append(mse)

        mean_mse = float(np.mean(slices))
        logger.info(
            f"alpha={alpha}: mean MSE {mean_mse:.6f} over {len(slices)} slices",
            extra={"props": {"parameter": "alpha", "candidate": alpha, "mse": mean_mse}},
        )
        return alpha, slices
