"""40Ar/39Ar adapter: from isotope ratios to age steps and back.

Ages follow the standard age equation

    t = ln(1 + J * R) / lambda

where ``R`` is the radiogenic 40Ar*/39Ar ratio, ``J`` the irradiation
parameter and ``lambda`` the total 40K decay constant (per Myr, so ages are
in Ma). Step uncertainties are internal only (from ``R``); the J-factor and
decay-constant uncertainties are applied to the plateau mean afterwards via
``argon_external_variance``.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ageplateau.domain.steps import StepSequence

# Total 40K decay constant and 1-sigma uncertainty (Steiger & Jaeger, 1977), per Myr.
DEFAULT_DECAY_CONSTANT: float = 5.543e-4
DEFAULT_DECAY_CONSTANT_SIGMA: float = 0.010e-4


def argon_age(
    ratios: ArrayLike,
    ratio_sigmas: ArrayLike,
    *,
    j: float,
    decay_constant: float = DEFAULT_DECAY_CONSTANT,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Convert 40Ar*/39Ar ratios to ages with internal uncertainties.

    Parameters
    ----------
    ratios : array_like
        Radiogenic 40Ar*/39Ar ratios. Shape (n,).
    ratio_sigmas : array_like
        1-sigma ratio uncertainties. Shape (n,).
    j : float
        Irradiation parameter (> 0).
    decay_constant : float, optional
        Total 40K decay constant per Myr (> 0).

    Returns
    -------
    tuple[np.ndarray, np.ndarray]
        (ages, age_sigmas) in Ma. Ratios with ``1 + J * R <= 0`` give NaN.
    """
    if j <= 0:
        raise ValueError(f"J must be positive: {j}")
    if decay_constant <= 0:
        raise ValueError(f"decay_constant must be positive: {decay_constant}")

    r = np.asarray(ratios, dtype=np.float64).ravel()
    sr = np.asarray(ratio_sigmas, dtype=np.float64).ravel()
    if len(r) != len(sr):
        raise ValueError(f"ratios and ratio_sigmas must have same length: {len(r)} vs {len(sr)}")

    arg = 1.0 + j * r
    with np.errstate(invalid="ignore", divide="ignore"):
        positive = arg > 0
        ages = np.where(positive, np.log(np.where(positive, arg, 1.0)) / decay_constant, np.nan)
        sigmas = np.where(positive, j * sr / (decay_constant * np.where(positive, arg, 1.0)), np.nan)
    return ages.astype(np.float64), sigmas.astype(np.float64)


def argon_steps(
    ar39: ArrayLike,
    ratios: ArrayLike,
    ratio_sigmas: ArrayLike,
    *,
    j: float,
    decay_constant: float = DEFAULT_DECAY_CONSTANT,
    hide: Iterable[int] = (),
    omit: Iterable[int] = (),
) -> StepSequence:
    """Build an age ``StepSequence`` weighted by the 39Ar released per step."""
    ages, sigmas = argon_age(ratios, ratio_sigmas, j=j, decay_constant=decay_constant)
    return StepSequence.from_arrays(ar39, ages, sigmas, hide=hide, omit=omit)


def argon_external_variance(
    age: float,
    *,
    j: float,
    j_sigma: float,
    decay_constant: float = DEFAULT_DECAY_CONSTANT,
    decay_constant_sigma: float = DEFAULT_DECAY_CONSTANT_SIGMA,
) -> float:
    """Variance of an age due to the J-factor and decay-constant uncertainties.

    With ``R = (exp(lambda * t) - 1) / J``:

        dt/dJ      = R / (lambda * (1 + J * R))
        dt/dlambda = -t / lambda
    """
    if j <= 0:
        raise ValueError(f"J must be positive: {j}")
    if decay_constant <= 0:
        raise ValueError(f"decay_constant must be positive: {decay_constant}")
    if j_sigma < 0 or decay_constant_sigma < 0:
        raise ValueError("uncertainties must be non-negative")

    growth = math.exp(decay_constant * age)
    ratio = (growth - 1.0) / j
    dt_dj = ratio / (decay_constant * growth)
    dt_dlambda = -age / decay_constant
    return (dt_dj * j_sigma) ** 2 + (dt_dlambda * decay_constant_sigma) ** 2


__all__ = [
    "DEFAULT_DECAY_CONSTANT",
    "DEFAULT_DECAY_CONSTANT_SIGMA",
    "argon_age",
    "argon_external_variance",
    "argon_steps",
]
