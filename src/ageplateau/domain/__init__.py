"""Domain models for ageplateau.

This package is domain-only: steps going into the search and the result
records coming out of it.
"""

from ageplateau.domain.results import (
    DispersionEstimate,
    DispersionModel,
    FitResult,
    MeanEstimate,
    PlateauResult,
)
from ageplateau.domain.steps import Step, StepSequence

__all__ = [
    "Step",
    "StepSequence",
    "DispersionModel",
    "DispersionEstimate",
    "MeanEstimate",
    "FitResult",
    "PlateauResult",
]
