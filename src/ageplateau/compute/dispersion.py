"""Low-level weighted-mean solvers.

This module contains ONLY numpy/scipy operations on pre-validated arrays (finite
values, finite and strictly positive sigmas, at least one element). Input
validation, outlier handling and result assembly live in ``weighted_mean``.

Two solvers are provided:
- inverse_variance_fit: classical inverse-variance weighted mean (model-1)
- solve_random_effects: joint maximum-likelihood mean and overdispersion
  ``w`` where each element has variance ``sigma_i**2 + w**2`` (model-3)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from scipy import optimize, stats

logger = logging.getLogger(__name__)

# Upper-bound bracketing for the dispersion interval doubles this many times at most.
_MAX_BRACKET_DOUBLINGS = 64


@dataclass(frozen=True)
class InverseVarianceFit:
    """Inverse-variance weighted mean without any dispersion term.

    Attributes:
        mean: Weighted mean.
        standard_error: Classical standard error ``1/sqrt(sum(1/sigma**2))``.
        chi2: Sum of squared standardized residuals.
        dof: Degrees of freedom (``n - 1``, never negative).
    """

    mean: float
    standard_error: float
    chi2: float
    dof: int

    @property
    def mswd(self) -> float:
        return self.chi2 / self.dof if self.dof > 0 else 0.0


@dataclass(frozen=True)
class RandomEffectsFit:
    """Maximum-likelihood mean and overdispersion.

    Attributes:
        mean: Weighted mean using weights ``1/(sigma**2 + w**2)``.
        w: Overdispersion (standard deviation of the true values).
        standard_error: Standard error of ``mean`` given ``w``.
        chi2: Sum of squared residuals scaled by the analytical sigmas only.
        dof: Degrees of freedom (``n - 2``, never negative).
        iterations: Number of scoring iterations performed.
        converged: False if the iteration cap was reached first.
    """

    mean: float
    w: float
    standard_error: float
    chi2: float
    dof: int
    iterations: int
    converged: bool

    @property
    def mswd(self) -> float:
        return self.chi2 / self.dof if self.dof > 0 else 0.0


def inverse_variance_fit(
    values: NDArray[np.float64],
    sigmas: NDArray[np.float64],
) -> InverseVarianceFit:
    """Compute the inverse-variance weighted mean of ``values``."""
    weights = 1.0 / sigmas**2
    sum_w = float(np.sum(weights))
    mean = float(np.sum(weights * values) / sum_w)
    chi2 = float(np.sum(weights * (values - mean) ** 2))
    return InverseVarianceFit(
        mean=mean,
        standard_error=math.sqrt(1.0 / sum_w),
        chi2=chi2,
        dof=max(len(values) - 1, 0),
    )


def _moment_start(values: NDArray[np.float64], var: NDArray[np.float64]) -> float:
    """DerSimonian-Laird moment estimate of ``w**2``, used as the starting point."""
    weights = 1.0 / var
    sum_w = float(np.sum(weights))
    mean = float(np.sum(weights * values) / sum_w)
    q = float(np.sum(weights * (values - mean) ** 2))
    denom = sum_w - float(np.sum(weights**2)) / sum_w
    if denom <= 0:
        return 0.0
    return max(0.0, (q - (len(values) - 1)) / denom)


def solve_random_effects(
    values: NDArray[np.float64],
    sigmas: NDArray[np.float64],
    *,
    max_iterations: int = 200,
    tolerance: float = 1e-10,
) -> RandomEffectsFit:
    """Jointly estimate the mean and overdispersion by Fisher scoring.

    For fixed ``w**2`` the mean is the weighted mean with weights
    ``u_i = 1/(sigma_i**2 + w**2)``. Each scoring step updates

        w**2 <- max(0, sum(u_i**2 * ((x_i - mean)**2 - sigma_i**2)) / sum(u_i**2))

    which is the stationary condition of the likelihood in ``w**2``. The
    iteration stops once the update moves ``w**2`` by less than ``tolerance``
    relative to ``w**2 + mean(sigma**2)``, or after ``max_iterations`` steps.

    Parameters
    ----------
    values : np.ndarray
        Finite values. Shape (n,).
    sigmas : np.ndarray
        Finite, strictly positive 1-sigma uncertainties. Shape (n,).
    max_iterations : int, optional
        Iteration cap. Default is 200.
    tolerance : float, optional
        Relative convergence tolerance on ``w**2``. Default is 1e-10.

    Returns
    -------
    RandomEffectsFit
        ``converged`` is False when the iteration cap was hit; the last
        iterate is still returned.
    """
    var = sigmas**2
    scale = float(np.mean(var))
    tau2 = _moment_start(values, var)

    converged = False
    iterations = 0
    for iterations in range(1, max_iterations + 1):
        u = 1.0 / (var + tau2)
        mean = float(np.sum(u * values) / np.sum(u))
        u2 = u**2
        tau2_new = max(0.0, float(np.sum(u2 * ((values - mean) ** 2 - var)) / np.sum(u2)))
        step = abs(tau2_new - tau2)
        tau2 = tau2_new
        if step <= tolerance * (tau2 + scale):
            converged = True
            break

    if not converged:
        logger.debug(f"Random-effects scoring stopped after {iterations} iterations (w^2={tau2:.6g})")

    u = 1.0 / (var + tau2)
    sum_u = float(np.sum(u))
    mean = float(np.sum(u * values) / sum_u)
    chi2 = float(np.sum((values - mean) ** 2 / var))
    return RandomEffectsFit(
        mean=mean,
        w=math.sqrt(tau2),
        standard_error=math.sqrt(1.0 / sum_u),
        chi2=chi2,
        dof=max(len(values) - 2, 0),
        iterations=iterations,
        converged=converged,
    )


def profile_log_likelihood(
    w: float,
    values: NDArray[np.float64],
    sigmas: NDArray[np.float64],
) -> float:
    """Gaussian log-likelihood with the mean profiled out, as a function of ``w``.

    Constant terms are dropped.
    """
    var = sigmas**2 + w**2
    u = 1.0 / var
    mean = float(np.sum(u * values) / np.sum(u))
    return -0.5 * float(np.sum(np.log(var) + (values - mean) ** 2 / var))


def dispersion_interval(
    values: NDArray[np.float64],
    sigmas: NDArray[np.float64],
    w_hat: float,
    confidence_level: float,
) -> tuple[float, float]:
    """Profile-likelihood confidence bounds for the overdispersion.

    The bounds are the values of ``w`` at which twice the drop in profile
    log-likelihood from its maximum equals the chi-square(1) quantile. The
    lower bound is 0 whenever ``w = 0`` lies inside the interval.

    Returns:
        Tuple of (lower, upper) absolute bounds with ``lower <= w_hat <= upper``.
    """
    critical = 0.5 * float(stats.chi2.ppf(confidence_level, 1))
    peak = profile_log_likelihood(w_hat, values, sigmas)

    def excess(w: float) -> float:
        return peak - profile_log_likelihood(w, values, sigmas) - critical

    if w_hat <= 0 or excess(0.0) <= 0:
        lower = 0.0
    else:
        lower = float(optimize.brentq(excess, 0.0, w_hat))

    step = max(w_hat, float(np.max(sigmas)), float(np.std(values)))
    if step <= 0:
        step = 1.0
    hi = w_hat + step
    for _ in range(_MAX_BRACKET_DOUBLINGS):
        if excess(hi) > 0:
            break
        step *= 2.0
        hi = w_hat + step
    else:
        logger.warning("Could not bracket the upper dispersion bound; reporting infinity")
        return lower, math.inf

    upper = float(optimize.brentq(excess, w_hat, hi))
    return lower, upper


__all__ = [
    "InverseVarianceFit",
    "RandomEffectsFit",
    "dispersion_interval",
    "inverse_variance_fit",
    "profile_log_likelihood",
    "solve_random_effects",
]
