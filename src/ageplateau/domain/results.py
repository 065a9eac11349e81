"""Estimator and plateau result models.

This module provides:
- DispersionModel: Model-1 (fixed uncertainty) vs model-3 (random effects)
- MeanEstimate: Point estimate, standard error and confidence half-widths
- DispersionEstimate: Overdispersion with asymmetric confidence bounds
- FitResult: Output of the weighted-mean estimator
- PlateauResult: FitResult of the winning window plus its coverage
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class DispersionModel(str, Enum):
    """How excess scatter beyond the quoted uncertainties is handled."""

    FIXED_UNCERTAINTY = "fixed_uncertainty"  # model-1: inflate the error by sqrt(MSWD)
    RANDOM_EFFECTS = "random_effects"  # model-3: fit an explicit dispersion term

    @property
    def n_params(self) -> int:
        return 1 if self is DispersionModel.FIXED_UNCERTAINTY else 2

    @classmethod
    def parse(cls, value: DispersionModel | str) -> DispersionModel:
        """Accept the enum, its value, or the 'model-1'/'model-3' shorthand."""
        if isinstance(value, DispersionModel):
            return value
        key = str(value).strip().lower().replace("-", "_")
        aliases = {
            "model_1": cls.FIXED_UNCERTAINTY,
            "model1": cls.FIXED_UNCERTAINTY,
            "fixed": cls.FIXED_UNCERTAINTY,
            "model_3": cls.RANDOM_EFFECTS,
            "model3": cls.RANDOM_EFFECTS,
            "random": cls.RANDOM_EFFECTS,
        }
        if key in aliases:
            return aliases[key]
        return cls(key)


ConfidenceLevel = Annotated[float, Field(gt=0, lt=1, description="Confidence level")]
PValue = Annotated[float, Field(ge=0, le=1, description="Chi-square p-value")]


def _json_float(value: float | None) -> float | None:
    if value is None or not math.isfinite(value):
        return None
    return float(value)


class MeanEstimate(FrozenModel):
    """Weighted-mean point estimate.

    ``ci_exterr_half_width`` is only set once external (systematic)
    uncertainty has been added; it never replaces ``ci_half_width``.
    """

    value: float
    standard_error: float
    ci_half_width: float
    ci_exterr_half_width: float | None = None


class DispersionEstimate(FrozenModel):
    """Overdispersion ``w`` with its (generally asymmetric) confidence bounds."""

    w: float = Field(ge=0)
    ci_lower: float = Field(ge=0)
    ci_upper: float = Field(ge=0)

    @property
    def ll(self) -> float:
        """Width of the lower half of the confidence interval."""
        return self.w - self.ci_lower

    @property
    def ul(self) -> float:
        """Width of the upper half of the confidence interval."""
        return self.ci_upper - self.w


class FitResult(FrozenModel):
    """Output of one weighted-mean fit.

    Attributes:
        model: Dispersion model used for the fit.
        confidence_level: Confidence level of all reported intervals.
        n: Number of points used in the fit.
        mean: Point estimate and uncertainties.
        dispersion: Overdispersion estimate (random effects only).
        degrees_of_freedom: n minus the number of fitted parameters.
        mswd: Mean square of weighted deviates (analytical uncertainties only).
        p_value: Upper-tail chi-square probability of ``mswd * degrees_of_freedom``.
        retained_indices: Positions (in the caller's index space) used by the fit.
        converged: False if the dispersion solve hit its iteration cap.
        external_variance: External variance folded into ``ci_exterr_half_width``.
    """

    model: DispersionModel
    confidence_level: ConfidenceLevel = 0.95
    n: int = Field(ge=0)
    mean: MeanEstimate
    dispersion: DispersionEstimate | None = None
    degrees_of_freedom: int = Field(ge=0)
    mswd: float = Field(ge=0)
    p_value: PValue
    retained_indices: tuple[int, ...] = ()
    converged: bool = True
    external_variance: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe dictionary (non-finite floats become None)."""
        payload: dict[str, Any] = {
            "model": self.model.value,
            "confidence_level": self.confidence_level,
            "n": self.n,
            "mean": {
                "value": _json_float(self.mean.value),
                "standard_error": _json_float(self.mean.standard_error),
                "ci_half_width": _json_float(self.mean.ci_half_width),
                "ci_exterr_half_width": _json_float(self.mean.ci_exterr_half_width),
            },
            "dispersion": None,
            "degrees_of_freedom": self.degrees_of_freedom,
            "mswd": _json_float(self.mswd),
            "p_value": _json_float(self.p_value),
            "retained_indices": list(self.retained_indices),
            "converged": self.converged,
            "external_variance": _json_float(self.external_variance),
        }
        if self.dispersion is not None:
            payload["dispersion"] = {
                "w": _json_float(self.dispersion.w),
                "ci_lower": _json_float(self.dispersion.ci_lower),
                "ci_upper": _json_float(self.dispersion.ci_upper),
            }
        return payload


class PlateauResult(FitResult):
    """Weighted-mean fit of the winning window.

    When no window passes, ``window_indices`` is empty, ``fraction`` is 0 and
    the mean is the first step's value (see ``search_plateau``).
    """

    fraction: float = Field(ge=0, le=1)
    window_indices: tuple[int, ...] = ()
    total_step_count: int = Field(ge=0)

    @property
    def found(self) -> bool:
        return len(self.window_indices) >= 2

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update(
            {
                "found": self.found,
                "fraction": self.fraction,
                "window_indices": list(self.window_indices),
                "total_step_count": self.total_step_count,
            }
        )
        return payload


__all__ = [
    "DispersionEstimate",
    "DispersionModel",
    "FitResult",
    "FrozenModel",
    "MeanEstimate",
    "PlateauResult",
]
