"""
Single exponential smoothing (ETS A,N,N) with explicit, immutable state.

The smoothed level follows

    l_t = alpha * x_t + (1 - alpha) * l_{t-1}

starting from an initial level ``l0``. Under additive Gaussian errors the
one-step-ahead forecast of ``x_t`` is ``l_{t-1}``, so maximum likelihood
reduces to minimising the sum of squared one-step errors. For a fixed alpha
every forecast is linear in ``l0`` and the optimal ``l0`` has a closed form;
alpha itself is found by a coarse grid followed by bounded scalar refinement.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
import pandas as pd
from scipy.optimize import minimize_scalar

from ..utils.error_handling import EmptySeriesError, InvalidAlphaError

logger = logging.getLogger(__name__)

ALPHA_BOUNDS = (1e-4, 1.0 - 1e-4)


@dataclass(frozen=True)
class SmootherState:
    """Everything needed to continue a smoother into later observations."""
    alpha: float
    last_value: float


@dataclass(frozen=True)
class ExponentialFit:
    """Result of fitting a smoother to one series."""
    alpha: float
    initial_level: float
    smoothed: pd.Series
    sse: float
    alpha_estimated: bool = True

    @property
    def state(self) -> SmootherState:
        return SmootherState(alpha=self.alpha, last_value=float(self.smoothed.iloc[-1]))

    @property
    def n_obs(self) -> int:
        return len(self.smoothed)

    @property
    def log_likelihood(self) -> float:
        """Gaussian log-likelihood with the error variance concentrated out."""
        sigma2 = self.sse / self.n_obs
        if sigma2 <= 0:
            return float("inf")
        return float(-0.5 * self.n_obs * (np.log(2 * np.pi * sigma2) + 1.0))

    @property
    def aic(self) -> float:
        # l0 and sigma^2 are always estimated
        n_params = 3 if self.alpha_estimated else 2
        return -2.0 * self.log_likelihood + 2.0 * n_params


def _check_alpha(alpha: float) -> None:
    if not 0.0 < alpha < 1.0:
        raise InvalidAlphaError(f"alpha must lie in (0, 1), got {alpha}", candidate=alpha)


def _as_values(series) -> pd.Series:
    values = pd.Series(series, dtype=float)
    if len(values) == 0:
        raise EmptySeriesError("Cannot smooth an empty series")
    if values.isna().any():
        raise ValueError("Series contains missing values")
    return values


def smooth_with_level(series, alpha: float, initial_level: float) -> pd.Series:
    """
    Run the smoothing recursion from a given initial level.

    ``alpha`` may be 1, in which case the output reproduces the input.

    Args:
        series: Observations in temporal order
        alpha: Weight on the current observation, in (0, 1]
        initial_level: Level before the first observation

    Returns:
        Smoothed series aligned to ``series``
    """
    if not 0.0 < alpha <= 1.0:
        raise InvalidAlphaError(f"alpha must lie in (0, 1], got {alpha}", candidate=alpha)
    values = _as_values(series)

    # Seed the recursion by prepending the initial level as observation zero
    seeded = pd.Series(np.concatenate([[initial_level], values.to_numpy()]))
    smoothed = seeded.ewm(alpha=alpha, adjust=False).mean().to_numpy()[1:]
    return pd.Series(smoothed, index=values.index, name=values.name)


def _profile_level(values: np.ndarray, alpha: float) -> Tuple[float, float]:
    """Return (optimal l0, SSE at that l0) for a fixed alpha."""
    n = len(values)
    # Levels with l0 = 0; one-step forecasts are these shifted by one
    base_levels = smooth_with_level(values, alpha, 0.0).to_numpy()
    base_forecast = np.concatenate([[0.0], base_levels[:-1]])
    # Sensitivity of each forecast to l0
    decay = (1.0 - alpha) ** np.arange(n)

    residual = values - base_forecast
    level = float(np.dot(decay, residual) / np.dot(decay, decay))
    sse = float(np.sum((residual - decay * level) ** 2))
    return level, sse


class ExponentialSmoother:
    """
    Fits and extends single exponential smoothers.

    Fitting returns an ExponentialFit; continuing into new data only needs
    the fit's SmootherState, so nothing is re-estimated out of sample.
    """

    def __init__(self, alpha_bounds: Tuple[float, float] = ALPHA_BOUNDS, grid_size: int = 99):
        lower, upper = alpha_bounds
        if not 0.0 < lower < upper < 1.0:
            raise InvalidAlphaError(
                f"alpha_bounds must satisfy 0 < lower < upper < 1, got {alpha_bounds}"
            )
        self.alpha_bounds = alpha_bounds
        self.grid_size = grid_size

    def fit(self, series) -> ExponentialFit:
        """
        Estimate alpha and the initial level by maximum likelihood.

        Args:
            series: Observations in temporal order

        Returns:
            ExponentialFit with the estimated alpha
        """
        values = _as_values(series)
        x = values.to_numpy()

        grid = np.linspace(*self.alpha_bounds, self.grid_size)
        grid_sse = [_profile_level(x, a)[1] for a in grid]
        best = int(np.argmin(grid_sse))

        lower = grid[max(best - 1, 0)]
        upper = grid[min(best + 1, len(grid) - 1)]
        result = minimize_scalar(
            lambda a: _profile_level(x, a)[1],
            bounds=(lower, upper),
            method="bounded",
            options={"xatol": 1e-8},
        )
        alpha = float(result.x) if result.fun <= grid_sse[best] else float(grid[best])

        logger.debug(f"Estimated alpha={alpha:.6f} on {len(x)} observations")
        return self._build_fit(values, alpha, alpha_estimated=True)

    def fit_with_alpha(self, series, alpha: float) -> ExponentialFit:
        """
        Estimate only the initial level for a supplied alpha.

        Raises:
            InvalidAlphaError: If alpha is outside (0, 1)
        """
        _check_alpha(alpha)
        values = _as_values(series)
        return self._build_fit(values, alpha, alpha_estimated=False)

    def extend(self, prior_state: SmootherState, new_series) -> pd.Series:
        """
        Continue a fitted smoother into the observations that follow it.

        The first new level is ``alpha * new[0] + (1 - alpha) * prior_state.last_value``.
        """
        return self.extend_with_state(prior_state, new_series)[0]

    def extend_with_state(
        self,
        prior_state: SmootherState,
        new_series,
    ) -> Tuple[pd.Series, SmootherState]:
        """Like ``extend`` but also return the state after the last new observation."""
        _check_alpha(prior_state.alpha)
        smoothed = smooth_with_level(new_series, prior_state.alpha, prior_state.last_value)
        return smoothed, SmootherState(prior_state.alpha, float(smoothed.iloc[-1]))

    def _build_fit(self, values: pd.Series, alpha: float, alpha_estimated: bool) -> ExponentialFit:
        level, sse = _profile_level(values.to_numpy(), alpha)
        return ExponentialFit(
            alpha=alpha,
            initial_level=level,
            smoothed=smooth_with_level(values, alpha, level),
            sse=sse,
            alpha_estimated=alpha_estimated,
        )
