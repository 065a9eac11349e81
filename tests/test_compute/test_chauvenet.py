"""Tests for the modified Chauvenet outlier filter."""

from __future__ import annotations

import numpy as np
import pytest

from ageplateau.compute.chauvenet import chauvenet, outlier_probabilities
from ageplateau.config import ChauvenetCriterion
from ageplateau.domain.results import DispersionModel

MODELS = [DispersionModel.FIXED_UNCERTAINTY, DispersionModel.RANDOM_EFFECTS]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def two_outliers() -> tuple[np.ndarray, np.ndarray]:
    """Six consistent values followed by a moderate and a gross outlier."""
    values = np.array([10.0, 10.1, 9.9, 10.05, 9.95, 10.0, 30.0, 50.0])
    return values, np.full(len(values), 0.2)


# =============================================================================
# Single-pass homogeneity test
# =============================================================================


class TestChauvenet:
    @pytest.mark.parametrize("model", MODELS)
    def test_pair_always_passes(self, model: DispersionModel) -> None:
        mask = chauvenet([0.0, 100.0], [0.1, 0.1], model=model)
        assert mask.all()

    @pytest.mark.parametrize("model", MODELS)
    def test_homogeneous_group_passes(self, model: DispersionModel) -> None:
        mask = chauvenet([10.0, 10.1, 9.9], [0.2, 0.2, 0.2], model=model)
        assert mask.all()

    @pytest.mark.parametrize("model", MODELS)
    def test_gross_outlier_flagged(self, model: DispersionModel) -> None:
        mask = chauvenet([50.0, 10.0, 10.1, 9.9], [0.2] * 4, model=model)
        np.testing.assert_array_equal(mask, [False, True, True, True])

    def test_ineligible_elements_are_ignored(self) -> None:
        mask = chauvenet([10.0, 50.0, 10.1, 9.9], [0.2] * 4, valid=[True, False, True, True])
        np.testing.assert_array_equal(mask, [True, True, True, True])

    def test_missing_values_are_ineligible(self) -> None:
        mask = chauvenet([10.0, np.nan, 10.1, 9.9], [0.2, 0.2, np.nan, 0.2])
        assert mask.all()

    @pytest.mark.parametrize("model", MODELS)
    def test_single_pass_flags_one(self, model: DispersionModel, two_outliers) -> None:
        values, sigmas = two_outliers
        mask = chauvenet(values, sigmas, model=model)
        assert mask.sum() == len(values) - 1
        assert not mask[7]

    @pytest.mark.parametrize("model", MODELS)
    def test_iterate_removes_all_outliers(self, model: DispersionModel, two_outliers) -> None:
        values, sigmas = two_outliers
        mask = chauvenet(values, sigmas, model=model, iterate=True)
        np.testing.assert_array_equal(mask, [True] * 6 + [False, False])

    def test_alpha_controls_rejection(self) -> None:
        values = [10.0, 10.0, 10.0, 11.0]
        sigmas = [0.2] * 4
        assert not chauvenet(values, sigmas).all()
        strict = ChauvenetCriterion(alpha=1e-6)
        assert chauvenet(values, sigmas, criterion=strict).all()

    def test_min_group_size(self) -> None:
        criterion = ChauvenetCriterion(min_group_size=3)
        assert chauvenet([50.0, 10.0, 10.1], [0.2] * 3, criterion=criterion).all()

    def test_model_accepts_string(self) -> None:
        mask = chauvenet([50.0, 10.0, 10.1, 9.9], [0.2] * 4, model="model-1")
        assert not mask[0]

    def test_length_mismatch(self) -> None:
        with pytest.raises(ValueError, match="same length"):
            chauvenet([1.0, 2.0, 3.0], [0.1, 0.1])

    def test_valid_length_mismatch(self) -> None:
        with pytest.raises(ValueError, match="valid mask length"):
            chauvenet([1.0, 2.0, 3.0], [0.1] * 3, valid=[True, False])


class TestOutlierProbabilities:
    @pytest.mark.parametrize("model", MODELS)
    def test_identical_values(self, model: DispersionModel) -> None:
        probs = outlier_probabilities(np.full(4, 7.0), np.full(4, 0.5), model=model)
        np.testing.assert_allclose(probs, 1.0)

    @pytest.mark.parametrize("model", MODELS)
    def test_outlier_has_lowest_probability(self, model: DispersionModel) -> None:
        values = np.array([10.0, 10.1, 9.9, 12.0])
        probs = outlier_probabilities(values, np.full(4, 0.2), model=model)
        assert int(np.argmin(probs)) == 3
        assert np.all((probs >= 0) & (probs <= 1))
