"""
Property-based tests for the smoothers.

Covers the shape of moving-average output, the limits of the exponential
recursion, and the continuation law: smoothing n+m values in one pass gives
the same last m values as smoothing n values and extending with the other m.
"""

import numpy as np
import pandas as pd
from hypothesis import given, settings, assume, strategies as st

from smoothcv.smoothing.exponential import ExponentialSmoother, SmootherState, smooth_with_level
from smoothcv.smoothing.moving_average import moving_average

finite_floats = st.floats(min_value=-1000, max_value=1000, allow_nan=False, allow_infinity=False)


@st.composite
def series_and_window(draw, min_size=1, max_size=80, odd=False):
    """A float series and a window that fits it."""
    values = draw(st.lists(finite_floats, min_size=min_size, max_size=max_size))
    window = draw(st.integers(min_value=1, max_value=len(values)))
    if odd and window % 2 == 0:
        window -= 1
    return pd.Series(values), window


alphas = st.floats(min_value=0.01, max_value=0.99, allow_nan=False)


class TestMovingAverageProperties:
    """Moving-average shape and value properties."""

    @given(data=series_and_window())
    @settings(max_examples=100, deadline=None)
    def test_backward_shape_and_means(self, data):
        series, window = data
        result = moving_average(series, window, "backward")

        assert len(result) == len(series)
        assert result.iloc[:window - 1].isna().all()
        assert not result.iloc[window - 1:].isna().any()

        values = series.to_numpy()
        for i in range(window - 1, len(values)):
            expected = np.mean(values[i - window + 1:i + 1])
            assert np.isclose(result.iloc[i], expected, rtol=1e-9, atol=1e-6)

    @given(data=series_and_window(odd=True))
    @settings(max_examples=100, deadline=None)
    def test_centered_odd_window_symmetric(self, data):
        series, window = data
        half = (window - 1) // 2
        result = moving_average(series, window, "centered")

        assert len(result) == len(series)
        assert result.iloc[:half].isna().all()
        assert result.iloc[len(series) - half:].isna().all()
        assert not result.iloc[half:len(series) - half].isna().any()

        values = series.to_numpy()
        for i in range(half, len(values) - half):
            expected = np.mean(values[i - half:i + half + 1])
            assert np.isclose(result.iloc[i], expected, rtol=1e-9, atol=1e-6)


class TestExponentialProperties:
    """Exponential recursion and continuation properties."""

    @given(values=st.lists(finite_floats, min_size=1, max_size=60), level=finite_floats)
    @settings(max_examples=100, deadline=None)
    def test_alpha_one_is_identity(self, values, level):
        result = smooth_with_level(pd.Series(values), 1.0, level)
        np.testing.assert_array_equal(result.to_numpy(), np.asarray(values))

    @given(values=st.lists(finite_floats, min_size=1, max_size=60), level=finite_floats)
    @settings(max_examples=100, deadline=None)
    def test_tiny_alpha_stays_at_level(self, values, level):
        result = smooth_with_level(pd.Series(values), 1e-10, level)
        np.testing.assert_allclose(result.to_numpy(), level, atol=1e-4)

    @given(
        values=st.lists(finite_floats, min_size=2, max_size=80),
        alpha=alphas,
        level=finite_floats,
        data=st.data(),
    )
    @settings(max_examples=100, deadline=None)
    def test_continuation_law(self, values, alpha, level, data):
        split = data.draw(st.integers(min_value=1, max_value=len(values) - 1))
        full = smooth_with_level(pd.Series(values), alpha, level).to_numpy()

        head = smooth_with_level(pd.Series(values[:split]), alpha, level)
        tail = ExponentialSmoother().extend(
            SmootherState(alpha=alpha, last_value=float(head.iloc[-1])),
            pd.Series(values[split:]),
        ).to_numpy()

        np.testing.assert_allclose(tail, full[split:], rtol=1e-12, atol=1e-9)

    @given(values=st.lists(finite_floats, min_size=3, max_size=80), alpha=alphas, data=st.data())
    @settings(max_examples=50, deadline=None)
    def test_fitted_state_extends_like_one_pass(self, values, alpha, data):
        split = data.draw(st.integers(min_value=1, max_value=len(values) - 1))
        smoother = ExponentialSmoother()

        fit = smoother.fit_with_alpha(pd.Series(values[:split]), alpha)
        extended = smoother.extend(fit.state, pd.Series(values[split:])).to_numpy()
        one_pass = smooth_with_level(pd.Series(values), alpha, fit.initial_level).to_numpy()

        np.testing.assert_allclose(extended, one_pass[split:], rtol=1e-12, atol=1e-9)

    @given(values=st.lists(finite_floats, min_size=1, max_size=60), alpha=alphas, level=finite_floats)
    @settings(max_examples=100, deadline=None)
    def test_smoothed_within_observed_range(self, values, alpha, level):
        result = smooth_with_level(pd.Series(values), alpha, level).to_numpy()
        low = min(min(values), level)
        high = max(max(values), level)
        assert np.all(result >= low - 1e-9)
        assert np.all(result <= high + 1e-9)

    @given(values=st.lists(finite_floats, min_size=2, max_size=40), alpha=alphas)
    @settings(max_examples=50, deadline=None)
    def test_fit_with_alpha_never_undefined(self, values, alpha):
        assume(len(set(values)) > 1)
        fit = ExponentialSmoother().fit_with_alpha(pd.Series(values), alpha)
        assert len(fit.smoothed) == len(values)
        assert np.isfinite(fit.smoothed.to_numpy()).all()
        assert np.isfinite(fit.initial_level)
