"""High-level entry points combining the adapters with the plateau search."""

from __future__ import annotations

from collections.abc import Iterable

from numpy.typing import ArrayLike

from ageplateau.compute.argon import (
    DEFAULT_DECAY_CONSTANT,
    DEFAULT_DECAY_CONSTANT_SIGMA,
    argon_external_variance,
    argon_steps,
)
from ageplateau.compute.exterr import add_external_error
from ageplateau.compute.plateau import search_plateau
from ageplateau.config import PlateauConfig
from ageplateau.domain.results import PlateauResult
from ageplateau.domain.steps import StepSequence


def plateau(
    sequence: StepSequence,
    *,
    config: PlateauConfig | None = None,
) -> PlateauResult:
    """Search for a plateau and apply ``config.external_variance`` if set."""
    config = config or PlateauConfig()
    result = search_plateau(sequence, config=config)
    if config.external_variance is not None and result.found:
        result = add_external_error(result, config.external_variance)
    return result


def argon_plateau(
    ar39: ArrayLike,
    ratios: ArrayLike,
    ratio_sigmas: ArrayLike,
    *,
    j: float,
    j_sigma: float = 0.0,
    decay_constant: float = DEFAULT_DECAY_CONSTANT,
    decay_constant_sigma: float = DEFAULT_DECAY_CONSTANT_SIGMA,
    exterr: bool = True,
    hide: Iterable[int] = (),
    omit: Iterable[int] = (),
    config: PlateauConfig | None = None,
) -> PlateauResult:
    """Plateau age of a 40Ar/39Ar release spectrum.

    Ages are computed from the ratios with internal uncertainties only; when
    ``exterr`` is True the J-factor and decay-constant uncertainties are then
    added to the plateau mean as an external error band.

    Args:
        ar39: 39Ar released per step (the weights).
        ratios: Radiogenic 40Ar*/39Ar ratio per step.
        ratio_sigmas: 1-sigma ratio uncertainty per step.
        j: Irradiation parameter.
        j_sigma: 1-sigma uncertainty of ``j``.
        decay_constant: Total 40K decay constant per Myr.
        decay_constant_sigma: 1-sigma uncertainty of ``decay_constant``.
        exterr: Propagate external uncertainties into the result.
        hide: Steps removed before the search.
        omit: Steps kept in place but excluded from the search.
        config: Search configuration.

    Returns:
        PlateauResult with ages in Ma.
    """
    sequence = argon_steps(
        ar39, ratios, ratio_sigmas, j=j, decay_constant=decay_constant, hide=hide, omit=omit
    )
    result = search_plateau(sequence, config=config)
    if exterr and result.found:
        variance = argon_external_variance(
            result.mean.value,
            j=j,
            j_sigma=j_sigma,
            decay_constant=decay_constant,
            decay_constant_sigma=decay_constant_sigma,
        )
        result = add_external_error(result, variance)
    return result


__all__ = ["argon_plateau", "plateau"]
