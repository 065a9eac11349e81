"""Tests for the weighted-mean estimator."""

from __future__ import annotations

import math

import numpy as np
import pytest
from scipy import stats

from ageplateau.compute.weighted_mean import fit_weighted_mean, normal_quantile
from ageplateau.config import SolverSettings
from ageplateau.domain.results import DispersionModel
from ageplateau.errors import DegenerateInputError, NonConvergenceWarning

FU = DispersionModel.FIXED_UNCERTAINTY
RE = DispersionModel.RANDOM_EFFECTS


def test_normal_quantile() -> None:
    assert normal_quantile(0.95) == pytest.approx(1.959964, rel=1e-6)


# =============================================================================
# Fixed uncertainty (model-1)
# =============================================================================


class TestFixedUncertainty:
    def test_identical_values(self) -> None:
        fit = fit_weighted_mean([5.0, 5.0, 5.0], [1.0, 1.0, 1.0], model=FU)
        assert fit.mean.value == pytest.approx(5.0)
        assert fit.mean.standard_error == pytest.approx(1 / math.sqrt(3))
        assert fit.mean.ci_half_width == pytest.approx(normal_quantile(0.95) / math.sqrt(3))
        assert fit.mswd == pytest.approx(0.0)
        assert fit.p_value == pytest.approx(1.0)
        assert fit.degrees_of_freedom == 2
        assert fit.dispersion is None

    def test_overdispersion_inflates_error(self) -> None:
        fit = fit_weighted_mean([0.0, 10.0], [1.0, 1.0], model=FU)
        assert fit.mean.value == pytest.approx(5.0)
        assert fit.mswd == pytest.approx(50.0)
        assert fit.mean.standard_error == pytest.approx(5.0)
        assert fit.mean.ci_half_width == pytest.approx(stats.t.ppf(0.975, 1) * 5.0)
        assert fit.p_value == pytest.approx(stats.chi2.sf(50.0, 1))


# =============================================================================
# Random effects (model-3)
# =============================================================================


class TestRandomEffects:
    def test_identical_values(self) -> None:
        fit = fit_weighted_mean([5.0, 5.0, 5.0], [1.0, 1.0, 1.0], model=RE)
        assert fit.dispersion is not None
        assert fit.dispersion.w == 0.0
        assert fit.dispersion.ci_lower == 0.0
        assert fit.dispersion.ci_upper > 0.0
        assert fit.mean.standard_error == pytest.approx(1 / math.sqrt(3))
        assert fit.mswd == pytest.approx(0.0)
        assert fit.p_value == pytest.approx(1.0)
        assert fit.degrees_of_freedom == 1

    def test_overdispersed_values(self) -> None:
        values = [9.0, 10.0, 11.0, 12.0, 8.0]
        fit = fit_weighted_mean(values, [0.1] * 5, model=RE)
        assert fit.dispersion is not None
        assert fit.dispersion.w == pytest.approx(math.sqrt(1.99), rel=1e-6)
        assert fit.dispersion.ci_lower < fit.dispersion.w < fit.dispersion.ci_upper
        assert fit.mean.standard_error == pytest.approx(math.sqrt(0.4), rel=1e-6)
        assert fit.mean.ci_half_width == pytest.approx(normal_quantile(0.95) * math.sqrt(0.4), rel=1e-6)
        assert fit.converged

    def test_two_points_have_zero_dof(self) -> None:
        fit = fit_weighted_mean([10.0, 10.1], [0.2, 0.2], model=RE)
        assert fit.degrees_of_freedom == 0
        assert fit.mswd == 0.0
        assert fit.p_value == 1.0

    def test_non_convergence_warns(self) -> None:
        values = [9.0, 10.0, 11.0, 12.0, 8.0]
        solver = SolverSettings(max_iterations=1, tolerance=1e-15)
        with pytest.warns(NonConvergenceWarning):
            fit = fit_weighted_mean(values, [0.1] * 5, model=RE, solver=solver)
        assert not fit.converged


# =============================================================================
# Cross-model properties
# =============================================================================


class TestModelProperties:
    def test_models_agree_on_consistent_data(self) -> None:
        values = [10.0, 10.1, 9.9]
        sigmas = [0.2, 0.2, 0.2]
        fu = fit_weighted_mean(values, sigmas, model=FU)
        re = fit_weighted_mean(values, sigmas, model=RE)
        assert re.mean.value == pytest.approx(fu.mean.value)
        assert re.mean.standard_error == pytest.approx(fu.mean.standard_error)

    def test_random_effects_error_never_below_analytical(self) -> None:
        rng = np.random.default_rng(42)
        sigmas = rng.uniform(0.1, 0.3, size=10)
        values = 20.0 + rng.normal(0.0, 0.5, size=10)
        re = fit_weighted_mean(values, sigmas, model=RE)
        naive = 1.0 / math.sqrt(np.sum(1.0 / sigmas**2))
        assert re.mean.standard_error >= naive

    def test_deterministic(self) -> None:
        values = [10.0, 10.4, 9.7, 10.2]
        sigmas = [0.1, 0.2, 0.15, 0.1]
        assert fit_weighted_mean(values, sigmas) == fit_weighted_mean(values, sigmas)


# =============================================================================
# Input handling
# =============================================================================


class TestInputs:
    def test_missing_values_excluded(self) -> None:
        fit = fit_weighted_mean([1.0, np.nan, 2.0], [1.0, 1.0, 1.0], model=FU)
        assert fit.n == 2
        assert fit.retained_indices == (0, 2)
        assert fit.mean.value == pytest.approx(1.5)

    def test_non_positive_sigma_excluded(self) -> None:
        fit = fit_weighted_mean([1.0, 100.0, 2.0], [1.0, 0.0, 1.0], model=FU)
        assert fit.retained_indices == (0, 2)

    def test_valid_mask(self) -> None:
        fit = fit_weighted_mean([10.0, 50.0, 10.1], [0.2] * 3, valid=[True, False, True])
        assert fit.retained_indices == (0, 2)

    def test_caller_indices(self) -> None:
        fit = fit_weighted_mean([10.0, 10.1, 9.9], [0.2] * 3, indices=[5, 6, 7])
        assert fit.retained_indices == (5, 6, 7)

    @pytest.mark.parametrize("values", [[1.0], [1.0, np.nan], []])
    def test_degenerate(self, values: list[float]) -> None:
        with pytest.raises(DegenerateInputError):
            fit_weighted_mean(values, [1.0] * len(values))

    def test_length_mismatch(self) -> None:
        with pytest.raises(ValueError, match="same length"):
            fit_weighted_mean([1.0, 2.0], [1.0])

    @pytest.mark.parametrize("level", [0.0, 1.0, 1.5])
    def test_confidence_level_range(self, level: float) -> None:
        with pytest.raises(ValueError, match="confidence_level"):
            fit_weighted_mean([1.0, 2.0], [1.0, 1.0], confidence_level=level)

    def test_model_string(self) -> None:
        fit = fit_weighted_mean([1.0, 2.0], [1.0, 1.0], model="model-1")
        assert fit.model is FU


class TestOutlierDetection:
    @pytest.mark.parametrize("model", [FU, RE])
    def test_gross_outlier_removed(self, model: DispersionModel) -> None:
        values = [10.0, 10.1, 9.9, 10.05, 50.0]
        fit = fit_weighted_mean(values, [0.2] * 5, model=model, detect_outliers=True)
        assert fit.retained_indices == (0, 1, 2, 3)
        assert fit.mean.value == pytest.approx(10.0125)

    def test_disabled_keeps_everything(self) -> None:
        values = [10.0, 10.1, 9.9, 10.05, 50.0]
        fit = fit_weighted_mean(values, [0.2] * 5, detect_outliers=False)
        assert fit.n == 5
