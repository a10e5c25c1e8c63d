"""Unit tests for the sequential-slice alpha search."""

import pytest
import numpy as np

from smoothcv.data.splitters import make_sequential_slices
from smoothcv.data.structs import SliceSpec
from smoothcv.search.sequential_slice import SequentialSliceSearch
from smoothcv.smoothing.exponential import ExponentialSmoother, smooth_with_level
from smoothcv.utils.error_handling import InvalidAlphaError, InvalidSliceError

ALPHAS = [0.1, 0.3, 0.6]


@pytest.fixture
def slices():
    return make_sequential_slices(1000, n_slices=5, slice_size=200, train_size=150)


class TestSequentialSliceSearch:
    """Tests for SequentialSliceSearch."""

    def test_one_entry_per_candidate(self, synthetic_dataset, slices):
        grid = SequentialSliceSearch().search(synthetic_dataset, ALPHAS, slices)

        assert grid.parameter == "alpha"
        assert grid.candidates == ALPHAS
        for alpha in ALPHAS:
            assert len(grid.fold_scores[alpha]) == 5
            assert grid.scores[alpha] == pytest.approx(np.mean(grid.fold_scores[alpha]))

    def test_slice_mse_matches_manual_computation(self, synthetic_dataset, slices):
        spec = slices[2]
        alpha = 0.3
        train = synthetic_dataset.iloc[spec.start:spec.train_stop]
        holdout = synthetic_dataset.iloc[spec.train_stop:spec.stop]

        fit = ExponentialSmoother().fit_with_alpha(train["x_noisy"], alpha)
        slope, intercept = np.polyfit(fit.smoothed.to_numpy(), train["y"].to_numpy(), 1)
        extended = smooth_with_level(holdout["x_noisy"], alpha, fit.smoothed.iloc[-1])
        expected = np.mean((holdout["y"].to_numpy() - (intercept + slope * extended.to_numpy())) ** 2)

        result = SequentialSliceSearch().slice_mse(synthetic_dataset, alpha, spec)
        assert result == pytest.approx(expected, rel=1e-8)

    def test_holdout_targets_do_not_touch_training_or_predictor(self, synthetic_dataset, slices):
        search = SequentialSliceSearch()
        mutated = synthetic_dataset.copy()
        for spec in slices:
            mutated.iloc[spec.train_stop:spec.stop, mutated.columns.get_loc("y")] += 100.0

        for spec in slices:
            fit, model = search.fit_slice(synthetic_dataset, 0.3, spec)
            fit_m, model_m = search.fit_slice(mutated, 0.3, spec)

            assert fit.initial_level == fit_m.initial_level
            assert fit.state == fit_m.state
            assert model.intercept == model_m.intercept
            assert model.slope == model_m.slope
            np.testing.assert_array_equal(
                search.holdout_predictor(synthetic_dataset, fit, spec).to_numpy(),
                search.holdout_predictor(mutated, fit_m, spec).to_numpy(),
            )

    def test_holdout_predictor_is_forward_only(self, synthetic_dataset, slices):
        search = SequentialSliceSearch()
        spec = slices[0]
        cut = spec.train_stop + 20
        mutated = synthetic_dataset.copy()
        mutated.iloc[cut:, mutated.columns.get_loc("x_noisy")] = 50.0

        fit, _ = search.fit_slice(synthetic_dataset, 0.4, spec)
        original = search.holdout_predictor(synthetic_dataset, fit, spec).to_numpy()
        changed = search.holdout_predictor(mutated, fit, spec).to_numpy()

        np.testing.assert_array_equal(original[:20], changed[:20])
        assert not np.allclose(original[20:], changed[20:])

    def test_rows_outside_slices_leave_grid_unchanged(self, synthetic_dataset):
        slices = make_sequential_slices(1000, n_slices=4, slice_size=200, train_size=150)
        mutated = synthetic_dataset.copy()
        mutated.iloc[800:, mutated.columns.get_loc("y")] *= -1
        mutated.iloc[800:, mutated.columns.get_loc("x_noisy")] += 10

        search = SequentialSliceSearch()
        assert search.search(synthetic_dataset, ALPHAS, slices).scores == \
            search.search(mutated, ALPHAS, slices).scores

    def test_parallel_matches_sequential(self, synthetic_dataset, slices):
        sequential = SequentialSliceSearch().search(synthetic_dataset, ALPHAS, slices)
        parallel = SequentialSliceSearch(max_workers=3).search(synthetic_dataset, ALPHAS, slices)
        assert parallel.candidates == ALPHAS
        for alpha in ALPHAS:
            assert parallel.scores[alpha] == pytest.approx(sequential.scores[alpha])

    def test_invalid_alpha_fails_fast(self, synthetic_dataset, slices):
        with pytest.raises(InvalidAlphaError) as excinfo:
            SequentialSliceSearch().search(synthetic_dataset, [0.2, 1.0, 0.5], slices)
        assert excinfo.value.candidate == 1.0

    def test_overlapping_slices(self, synthetic_dataset):
        overlapping = [SliceSpec(0, 150, 200), SliceSpec(180, 330, 380)]
        with pytest.raises(InvalidSliceError, match="overlap"):
            SequentialSliceSearch().search(synthetic_dataset, ALPHAS, overlapping)

    def test_empty_holdout(self, synthetic_dataset):
        with pytest.raises(InvalidSliceError, match="empty holdout"):
            SequentialSliceSearch().search(synthetic_dataset, ALPHAS, [SliceSpec(0, 200, 200)])

    def test_empty_training(self, synthetic_dataset):
        with pytest.raises(InvalidSliceError, match="empty training"):
            SequentialSliceSearch().search(synthetic_dataset, ALPHAS, [SliceSpec(10, 10, 60)])

    def test_slice_past_end(self, synthetic_dataset):
        with pytest.raises(InvalidSliceError, match="past the end"):
            SequentialSliceSearch().search(synthetic_dataset, ALPHAS, [SliceSpec(900, 1000, 1100)])

    def test_no_slices(self, synthetic_dataset):
        with pytest.raises(InvalidSliceError):
            SequentialSliceSearch().search(synthetic_dataset, ALPHAS, [])
