"""Pure-compute layer: Chauvenet filter, weighted means, plateau search.

Everything here operates on numpy arrays or ``StepSequence`` objects; no I/O.
"""

from ageplateau.compute.argon import (
    DEFAULT_DECAY_CONSTANT,
    DEFAULT_DECAY_CONSTANT_SIGMA,
    argon_age,
    argon_external_variance,
    argon_steps,
)
from ageplateau.compute.chauvenet import chauvenet, outlier_probabilities
from ageplateau.compute.exterr import add_external_error
from ageplateau.compute.plateau import search_plateau
from ageplateau.compute.weighted_mean import fit_weighted_mean, normal_quantile

__all__ = [
    "DEFAULT_DECAY_CONSTANT",
    "DEFAULT_DECAY_CONSTANT_SIGMA",
    "add_external_error",
    "argon_age",
    "argon_external_variance",
    "argon_steps",
    "chauvenet",
    "fit_weighted_mean",
    "normal_quantile",
    "outlier_probabilities",
    "search_plateau",
]
