"""ageplateau: plateau search and robust weighted means for step-heating spectra.

Typical use:

    >>> from ageplateau import StepSequence, search_plateau
    >>> seq = StepSequence.from_arrays([0.2, 0.3, 0.5], [10.0, 10.1, 9.9], [0.2, 0.2, 0.2])
    >>> result = search_plateau(seq)
    >>> result.window_indices
    (0, 1, 2)
"""

from __future__ import annotations

__version__ = "0.1.0"

from ageplateau.api import argon_plateau, plateau
from ageplateau.compute import (
    add_external_error,
    argon_age,
    argon_external_variance,
    argon_steps,
    chauvenet,
    fit_weighted_mean,
    search_plateau,
)
from ageplateau.config import ChauvenetCriterion, PlateauConfig, SolverSettings, load_config
from ageplateau.domain import (
    DispersionEstimate,
    DispersionModel,
    FitResult,
    MeanEstimate,
    PlateauResult,
    Step,
    StepSequence,
)
from ageplateau.errors import (
    AgePlateauError,
    ConfigError,
    DegenerateInputError,
    NonConvergenceWarning,
)

__all__ = [
    "__version__",
    # domain
    "Step",
    "StepSequence",
    "DispersionModel",
    "DispersionEstimate",
    "MeanEstimate",
    "FitResult",
    "PlateauResult",
    # config
    "ChauvenetCriterion",
    "PlateauConfig",
    "SolverSettings",
    "load_config",
    # compute
    "chauvenet",
    "fit_weighted_mean",
    "search_plateau",
    "add_external_error",
    "argon_age",
    "argon_steps",
    "argon_external_variance",
    # api
    "plateau",
    "argon_plateau",
    # errors
    "AgePlateauError",
    "ConfigError",
    "DegenerateInputError",
    "NonConvergenceWarning",
]
