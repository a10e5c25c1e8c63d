"""
K-fold cross-validated grid search over the moving-average window.

Moving-average weights are fixed constants rather than estimates, so an
ordinary k-fold partition of the smoothed rows cannot leak fitted state
from holdout rows into training rows. Contrast with
``sequential_slice``, where the smoother itself is estimated.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple
import logging

import numpy as np
import pandas as pd
from sklearn.model_selection import KFold

from ..data.structs import NOISY_COLUMN, TARGET_COLUMN, validate_dataset
from ..evaluation.regression import RegressionEvaluator
from ..smoothing.moving_average import moving_average
from ..utils.error_handling import InsufficientDataError, candidate_context
from .grid import HyperparameterGridResult

logger = logging.getLogger(__name__)

SMOOTHED_COLUMN = "x_ma"


class KFoldWindowSearch:
    """Grid-searches the backward moving-average window by k-fold CV."""

    def __init__(
        self,
        evaluator: Optional[RegressionEvaluator] = None,
        predictor: str = NOISY_COLUMN,
        target: str = TARGET_COLUMN,
        shuffle: bool = False,
        random_state: Optional[int] = None,
        max_workers: int = 1,
    ):
        """
        Args:
            evaluator: Regression fit/predict/mse provider
            predictor: Noisy column to smooth
            target: Regression target column
            shuffle: Shuffle rows before forming folds (contiguous folds otherwise)
            random_state: Seed used when shuffling
            max_workers: Threads evaluating candidates concurrently
        """
        self.evaluator = evaluator or RegressionEvaluator()
        self.predictor = predictor
        self.target = target
        self.shuffle = shuffle
        self.random_state = random_state
        self.max_workers = max_workers

    def search(
        self,
        dataset: pd.DataFrame,
        window_candidates: Sequence[int],
        k_folds: int,
    ) -> HyperparameterGridResult:
        """
        Score every window candidate by mean held-out MSE.

        Args:
            dataset: Rows in temporal order with the predictor and target columns
            window_candidates: Windows to try, in ascending order
            k_folds: Number of folds

        Returns:
            HyperparameterGridResult keyed by window

        Raises:
            InsufficientDataError: If a window leaves fewer rows than folds
            InvalidWindowError: If a window does not fit the dataset
        """
        validate_dataset(dataset, required=(self.predictor, self.target))
        if k_folds < 2:
            raise ValueError(f"k_folds must be at least 2, got {k_folds}")
        if len(window_candidates) == 0:
            raise ValueError("window_candidates is empty")

        logger.info(
            f"K-fold window search: {len(window_candidates)} candidates, "
            f"{k_folds} folds, {len(dataset)} rows"
        )

        def evaluate(window: int) -> Tuple[int, List[float], int]:
            with candidate_context("window", window):
                return self._evaluate_window(dataset, window, k_folds)

        if self.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                outcomes = list(executor.map(evaluate, window_candidates))
        else:
            outcomes = [evaluate(w) for w in window_candidates]

        scores = {}
        fold_scores = {}
        n_rows = {}
        for window, folds, rows in outcomes:
            scores[window] = float(np.mean(folds))
            fold_scores[window] = folds
            n_rows[window] = rows

        return HyperparameterGridResult(
            parameter="window",
            scores=scores,
            fold_scores=fold_scores,
            n_rows=n_rows,
            metadata={
                "k_folds": k_folds,
                "shuffle": self.shuffle,
                "random_state": self.random_state,
                "predictor": self.predictor,
                "target": self.target,
            },
        )

    def _evaluate_window(
        self,
        dataset: pd.DataFrame,
        window: int,
        k_folds: int,
    ) -> Tuple[int, List[float], int]:
        # Private copy so candidates never see each other's smoothed column
        working = dataset.copy()
        working[SMOOTHED_COLUMN] = moving_average(working[self.predictor], window, "backward")
        working = working.dropna().reset_index(drop=True)

        if len(working) < k_folds:
            raise InsufficientDataError(
                f"Window {window} leaves {len(working)} complete rows, "
                f"fewer than {k_folds} folds",
                candidate=window,
            )

        kfold = KFold(
            n_splits=k_folds,
            shuffle=self.shuffle,
            random_state=self.random_state if self.shuffle else None,
        )
        folds = []
        for fold, (train_idx, holdout_idx) in enumerate(kfold.split(working)):
            mse = self.evaluator.holdout_mse(
                working.iloc[train_idx],
                working.iloc[holdout_idx],
                self.target,
                SMOOTHED_COLUMN,
            )
            logger.debug(f"window={window} fold={fold} mse={mse:.6f}")
            folds.append(mse)

        mean_mse = float(np.mean(folds))
        logger.info(
            f"window={window}: mean MSE {mean_mse:.6f} over {k_folds} folds",
            extra={"props": {"parameter": "window", "candidate": window, "mse": mean_mse}},
        )
        return window, folds, len(working)
