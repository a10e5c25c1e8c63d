"""End-to-end smoothing experiment: simulate, search, select, evaluate."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import logging

import pandas as pd

from smoothcv.data.noise import NoiseModel
from smoothcv.data.splitters import TimeSeriesSplitter
from smoothcv.data.structs import LATENT_COLUMN, NOISY_COLUMN, TARGET_COLUMN, validate_dataset
from smoothcv.evaluation.regression import RegressionEvaluator
from smoothcv.search.grid import SELECTION_POLICIES, HyperparameterGridResult
from smoothcv.search.kfold_window import KFoldWindowSearch
from smoothcv.search.sequential_slice import SequentialSliceSearch
from smoothcv.smoothing.exponential import ExponentialSmoother
from smoothcv.smoothing.moving_average import moving_average
from smoothcv.utils.config_manager import ExperimentConfig

logger = logging.getLogger(__name__)

MODEL_NAMES = ("true", "noisy", "movingAverage", "exponentialSmoothing")


@dataclass
class ExperimentReport:
    """Grids, selected hyperparameters and test errors of one run."""
    window_grid: HyperparameterGridResult
    alpha_grid: HyperparameterGridResult
    selected_window: int
    selected_alpha: float
    test_rmse: Dict[str, float]
    estimated_alpha: float
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "window_grid": self.window_grid.to_dict(),
            "alpha_grid": self.alpha_grid.to_dict(),
            "selected_window": self.selected_window,
            "selected_alpha": self.selected_alpha,
            "test_rmse": self.test_rmse,
            "estimated_alpha": self.estimated_alpha,
            "metadata": self.metadata,
        }


def evaluate_models(
    train: pd.DataFrame,
    test: pd.DataFrame,
    window: int,
    alpha: float,
    evaluator: Optional[RegressionEvaluator] = None,
    smoother: Optional[ExponentialSmoother] = None,
) -> Dict[str, float]:
    """
    Test RMSE of ``y`` regressed on each candidate predictor.

    The moving average for test rows runs over the train and test noisy
    series joined end to end; backward windows only reach into the past, so
    no test target or later observation is used. The exponential smoother is
    fitted on the training rows and extended through the test rows.

    Args:
        train: Training rows in temporal order
        test: Test rows that immediately follow ``train``
        window: Moving-average window
        alpha: Exponential-smoothing alpha

    Returns:
        Mapping model name -> test RMSE. 'true' is only present when the
        latent column ``x`` is available.
    """
    evaluator = evaluator or RegressionEvaluator()
    smoother = smoother or ExponentialSmoother()
    results: Dict[str, float] = {}

    def score(train_x, test_x) -> float:
        train_frame = pd.DataFrame({"y": train[TARGET_COLUMN].to_numpy(), "p": train_x}).dropna()
        model = evaluator.fit(train_frame, "y", "p")
        return evaluator.rmse(test[TARGET_COLUMN], evaluator.predict(model, test_x))

    if LATENT_COLUMN in train.columns and LATENT_COLUMN in test.columns:
        results["true"] = score(train[LATENT_COLUMN].to_numpy(), test[LATENT_COLUMN].to_numpy())

    results["noisy"] = score(train[NOISY_COLUMN].to_numpy(), test[NOISY_COLUMN].to_numpy())

    joined = pd.concat([train[NOISY_COLUMN], test[NOISY_COLUMN]], ignore_index=True)
    smoothed = moving_average(joined, window, "backward").to_numpy()
    results["movingAverage"] = score(smoothed[:len(train)], smoothed[len(train):])

    fitted = smoother.fit_with_alpha(train[NOISY_COLUMN], alpha)
    extended = smoother.extend(fitted.state, test[NOISY_COLUMN])
    results["exponentialSmoothing"] = score(fitted.smoothed.to_numpy(), extended.to_numpy())

    for name, value in results.items():
        logger.info(f"Test RMSE {name}: {value:.6f}")
    return results


def run_experiment(
    config: Optional[ExperimentConfig] = None,
    dataset: Optional[pd.DataFrame] = None,
) -> ExperimentReport:
    """
    Run the full experiment described by ``config``.

    Args:
        config: Experiment settings (defaults when None)
        dataset: Use these rows instead of simulating new ones

    Returns:
        ExperimentReport
    """
    config = config or ExperimentConfig()
    logger.info(f"Starting experiment with config {config.to_dict()}")

    if dataset is None:
        dataset = NoiseModel(config.noise_variance, config.random_state).generate(
            config.n_samples,
            intercept=config.intercept,
            slope=config.slope,
            error_sd=config.error_sd,
            latent=config.latent,
        )
    validate_dataset(dataset)

    splitter = TimeSeriesSplitter()
    train, test = splitter.train_test_split(dataset, config.test_fraction)
    evaluator = RegressionEvaluator()
    smoother = ExponentialSmoother()

    window_grid = KFoldWindowSearch(
        evaluator=evaluator,
        shuffle=config.shuffle_folds,
        random_state=config.random_state,
        max_workers=config.max_workers,
    ).search(train, config.window_candidates, config.k_folds)

    slices = splitter.sequential_slices(
        len(train),
        n_slices=config.n_slices,
        slice_size=config.slice_size,
        train_size=config.slice_train_size,
    )
    alpha_grid = SequentialSliceSearch(
        evaluator=evaluator,
        smoother=smoother,
        max_workers=config.max_workers,
    ).search(train, config.alpha_candidates, slices)

    window_policy = SELECTION_POLICIES[config.window_selection]
    if config.window_selection == "plateau":
        selected_window = window_policy(window_grid, tolerance=config.window_tolerance)
    else:
        selected_window = window_policy(window_grid)
    selected_alpha = SELECTION_POLICIES[config.alpha_selection](alpha_grid)
    logger.info(f"Selected window={selected_window}, alpha={selected_alpha}")

    # Maximum-likelihood alpha on the whole training range, for comparison
    estimated_alpha = smoother.fit(train[NOISY_COLUMN]).alpha

    test_rmse = evaluate_models(train, test, selected_window, selected_alpha, evaluator, smoother)

    return ExperimentReport(
        window_grid=window_grid,
        alpha_grid=alpha_grid,
        selected_window=selected_window,
        selected_alpha=selected_alpha,
        test_rmse=test_rmse,
        estimated_alpha=estimated_alpha,
        metadata={
            "config": config.to_dict(),
            "train_rows": len(train),
            "test_rows": len(test),
        },
    )
