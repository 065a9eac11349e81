from __future__ import annotations

import math

import pytest

from ageplateau.compute.exterr import add_external_error
from ageplateau.compute.plateau import search_plateau
from ageplateau.compute.weighted_mean import fit_weighted_mean
from ageplateau.domain.results import PlateauResult
from ageplateau.domain.steps import StepSequence


@pytest.fixture
def overdispersed_fit():
    """Model-1 fit with MSWD 50, so its interval uses Student-t."""
    return fit_weighted_mean([0.0, 10.0], [1.0, 1.0], model="fixed_uncertainty")


def test_statistics_are_unchanged(overdispersed_fit) -> None:
    fit = add_external_error(overdispersed_fit, 9.0)
    assert fit.mean.value == overdispersed_fit.mean.value
    assert fit.mean.standard_error == overdispersed_fit.mean.standard_error
    assert fit.mean.ci_half_width == overdispersed_fit.mean.ci_half_width
    assert fit.mswd == overdispersed_fit.mswd
    assert fit.p_value == overdispersed_fit.p_value
    assert fit.external_variance == 9.0


def test_reuses_interval_multiplier(overdispersed_fit) -> None:
    fit = add_external_error(overdispersed_fit, 9.0)
    multiplier = overdispersed_fit.mean.ci_half_width / overdispersed_fit.mean.standard_error
    assert fit.mean.ci_exterr_half_width == pytest.approx(multiplier * math.sqrt(25.0 + 9.0))
    assert fit.mean.ci_exterr_half_width > fit.mean.ci_half_width


def test_zero_variance_matches_internal(overdispersed_fit) -> None:
    fit = add_external_error(overdispersed_fit, 0.0)
    assert fit.mean.ci_exterr_half_width == pytest.approx(fit.mean.ci_half_width)


def test_reapplying_replaces(overdispersed_fit) -> None:
    twice = add_external_error(add_external_error(overdispersed_fit, 9.0), 16.0)
    once = add_external_error(overdispersed_fit, 16.0)
    assert twice.mean.ci_exterr_half_width == pytest.approx(once.mean.ci_exterr_half_width)


def test_original_not_mutated(overdispersed_fit) -> None:
    add_external_error(overdispersed_fit, 9.0)
    assert overdispersed_fit.mean.ci_exterr_half_width is None
    assert overdispersed_fit.external_variance is None


@pytest.mark.parametrize("variance", [-1.0, math.nan, math.inf])
def test_invalid_variance(overdispersed_fit, variance: float) -> None:
    with pytest.raises(ValueError, match="external_variance"):
        add_external_error(overdispersed_fit, variance)


def test_preserves_plateau_result_type() -> None:
    seq = StepSequence.from_arrays([0.2, 0.3, 0.5], [10.0, 10.1, 9.9], [0.2, 0.2, 0.2])
    result = add_external_error(search_plateau(seq), 0.04)
    assert isinstance(result, PlateauResult)
    assert result.window_indices == (0, 1, 2)
    assert result.mean.ci_exterr_half_width is not None
