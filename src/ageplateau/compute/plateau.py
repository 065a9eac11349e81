"""Plateau search over contiguous windows of a step sequence.

The plateau is the contiguous run of steps carrying the largest cumulative
weight fraction whose eligible steps pass the modified Chauvenet criterion.

Scan order (load-bearing for tie-breaks):
- start index ``i`` ascending over ``0 .. n-2``
- for each ``i``, end index ``j`` descending from ``n-1`` to ``i+1``
- the first (widest) passing window at a given start is accepted if its
  fraction is strictly greater than the best so far; narrower windows at that
  start are then skipped

Ties in fraction therefore go to the lowest start index, widest window.
"""

from __future__ import annotations

import logging

import numpy as np

from ageplateau.compute.chauvenet import chauvenet
from ageplateau.compute.weighted_mean import fit_weighted_mean, normal_quantile
from ageplateau.config import PlateauConfig
from ageplateau.domain.results import DispersionModel, MeanEstimate, PlateauResult
from ageplateau.domain.steps import StepSequence

logger = logging.getLogger(__name__)


def _no_plateau(
    sequence: StepSequence,
    model: DispersionModel,
    confidence_level: float,
) -> PlateauResult:
    """Trivial result used when no window qualifies: the first step as the mean."""
    n = len(sequence)
    if n > 0:
        value = float(sequence.values[0])
        sigma = float(sequence.sigmas[0])
    else:
        value = sigma = float("nan")
    return PlateauResult(
        model=model,
        confidence_level=confidence_level,
        n=min(n, 1),
        mean=MeanEstimate(
            value=value,
            standard_error=sigma,
            ci_half_width=normal_quantile(confidence_level) * sigma,
        ),
        degrees_of_freedom=0,
        mswd=1.0,
        p_value=1.0,
        fraction=0.0,
        window_indices=(),
        total_step_count=n,
    )


def search_plateau(
    sequence: StepSequence,
    *,
    model: DispersionModel | str | None = None,
    confidence_level: float | None = None,
    config: PlateauConfig | None = None,
) -> PlateauResult:
    """Find the longest homogeneous run of steps and fit its weighted mean.

    Args:
        sequence: Ordered steps; ``eligible=False`` steps keep their slot but
            neither count toward a window's fraction nor enter its statistics.
        model: Dispersion model; overrides ``config.dispersion_model``.
        confidence_level: Overrides ``config.confidence_level``.
        config: Search configuration (Chauvenet rule, solver bounds).

    Returns:
        PlateauResult for the winning window. If no window passes,
        ``result.found`` is False, ``fraction`` is 0 and the mean is the first
        step's value and uncertainty.
    """
    config = config or PlateauConfig()
    model = DispersionModel.parse(model) if model is not None else config.dispersion_model
    if confidence_level is None:
        confidence_level = config.confidence_level

    n = len(sequence)
    usable = sequence.usable
    contribution = np.where(usable, sequence.normalized_weights(), 0.0)
    values = np.asarray(sequence.values)
    sigmas = np.asarray(sequence.sigmas)

    best = _no_plateau(sequence, model, confidence_level)
    best_fraction = 0.0

    for i in range(n - 1):
        for j in range(n - 1, i, -1):
            fraction = float(np.sum(contribution[i : j + 1]))
            if fraction <= best_fraction:
                # Narrower windows at this start cannot carry more weight.
                break
            window = np.arange(i, j + 1, dtype=np.int64)
            window_usable = usable[i : j + 1]
            if int(np.sum(window_usable)) < 2:
                continue

            passed = chauvenet(
                values[i : j + 1],
                sigmas[i : j + 1],
                window_usable,
                model=model,
                criterion=config.chauvenet,
                solver=config.solver,
            )
            if not passed.all():
                continue

            fit = fit_weighted_mean(
                values[i : j + 1],
                sigmas[i : j + 1],
                model=model,
                confidence_level=confidence_level,
                detect_outliers=False,
                valid=window_usable,
                indices=window,
                solver=config.solver,
            )
            best = PlateauResult(
                **fit.model_dump(),
                fraction=min(fraction, 1.0),
                window_indices=tuple(int(k) for k in window),
                total_step_count=n,
            )
            best_fraction = fraction
            logger.debug(f"Accepted window [{i}, {j}] with fraction {fraction:.4f}")
            break

    if not best.found:
        logger.info(f"No plateau found among {n} steps")
    return best


__all__ = ["search_plateau"]
