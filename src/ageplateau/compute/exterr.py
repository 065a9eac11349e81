"""External (systematic) uncertainty for fitted means.

Adds a second, wider confidence band on top of the internal one. The point
estimate, MSWD, p-value and internal interval are left untouched; only
``mean.ci_exterr_half_width`` and ``external_variance`` are set.
"""

from __future__ import annotations

import math
from typing import TypeVar

from ageplateau.compute.weighted_mean import normal_quantile
from ageplateau.domain.results import FitResult

FitT = TypeVar("FitT", bound=FitResult)


def add_external_error(fit: FitT, external_variance: float) -> FitT:
    """Return a copy of ``fit`` with an external-error confidence half-width.

    The internal interval multiplier (``ci_half_width / standard_error``) is
    reused so the external band keeps the internal band's Student-t or normal
    convention:

        ci_exterr = multiplier * sqrt(standard_error**2 + external_variance)

    Applying it again replaces the previous external band rather than stacking.

    Args:
        fit: A ``FitResult`` or ``PlateauResult``.
        external_variance: Variance of the systematic contribution, in squared
            units of the mean (>= 0).

    Returns:
        A new result of the same type as ``fit``.

    Raises:
        ValueError: If ``external_variance`` is negative or not finite.
    """
    external_variance = float(external_variance)
    if not math.isfinite(external_variance) or external_variance < 0:
        raise ValueError(f"external_variance must be finite and >= 0: {external_variance}")

    se = fit.mean.standard_error
    ci = fit.mean.ci_half_width
    if math.isfinite(se) and se > 0 and math.isfinite(ci):
        multiplier = ci / se
    else:
        multiplier = normal_quantile(fit.confidence_level)

    ci_exterr = multiplier * math.sqrt(se**2 + external_variance)
    mean = fit.mean.model_copy(update={"ci_exterr_half_width": ci_exterr})
    return fit.model_copy(update={"mean": mean, "external_variance": external_variance})


__all__ = ["add_external_error"]
