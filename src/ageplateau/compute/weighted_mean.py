"""Weighted-mean estimator with two dispersion models.

- Fixed uncertainty (model-1): inverse-variance weighted mean. When the MSWD
  exceeds 1 the excess scatter is attributed to underestimated input
  uncertainties: the standard error is inflated by sqrt(MSWD) and the
  confidence interval uses Student-t with ``n - 1`` degrees of freedom.
- Random effects (model-3): the mean and an overdispersion ``w`` are fitted
  jointly by maximum likelihood; ``w`` gets asymmetric profile-likelihood
  confidence bounds. The confidence interval of the mean uses the normal
  quantile.

In both models the MSWD and p-value are computed from the analytical
uncertainties only, with ``n - 1`` (model-1) or ``n - 2`` (model-3) degrees
of freedom.
"""

from __future__ import annotations

import logging
import math
import warnings

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats

from ageplateau.compute.chauvenet import chauvenet
from ageplateau.compute.dispersion import (
    dispersion_interval,
    inverse_variance_fit,
    solve_random_effects,
)
from ageplateau.config import ChauvenetCriterion, SolverSettings
from ageplateau.domain.results import (
    DispersionEstimate,
    DispersionModel,
    FitResult,
    MeanEstimate,
)
from ageplateau.errors import DegenerateInputError, NonConvergenceWarning

logger = logging.getLogger(__name__)


def normal_quantile(confidence_level: float) -> float:
    """Two-sided normal quantile for ``confidence_level`` (1.96 for 0.95)."""
    return float(stats.norm.ppf(0.5 + confidence_level / 2.0))


def _chi2_p_value(chi2: float, dof: int) -> float:
    if dof <= 0:
        return 1.0
    return float(min(1.0, max(0.0, stats.chi2.sf(chi2, dof))))


def _fit_fixed_uncertainty(
    x: NDArray[np.float64],
    s: NDArray[np.float64],
    confidence_level: float,
) -> tuple[MeanEstimate, None, int, float, float, bool]:
    fit = inverse_variance_fit(x, s)
    mswd = fit.mswd
    if mswd > 1.0:
        standard_error = fit.standard_error * math.sqrt(mswd)
        quantile = float(stats.t.ppf(0.5 + confidence_level / 2.0, fit.dof))
    else:
        standard_error = fit.standard_error
        quantile = normal_quantile(confidence_level)
    mean = MeanEstimate(
        value=fit.mean,
        standard_error=standard_error,
        ci_half_width=quantile * standard_error,
    )
    return mean, None, fit.dof, mswd, _chi2_p_value(fit.chi2, fit.dof), True


def _fit_random_effects(
    x: NDArray[np.float64],
    s: NDArray[np.float64],
    confidence_level: float,
    solver: SolverSettings,
) -> tuple[MeanEstimate, DispersionEstimate, int, float, float, bool]:
    fit = solve_random_effects(
        x, s, max_iterations=solver.max_iterations, tolerance=solver.tolerance
    )
    if not fit.converged:
        logger.warning(
            f"Random-effects fit did not converge in {fit.iterations} iterations; "
            f"returning last estimate (w={fit.w:.6g})"
        )
        warnings.warn(
            f"Random-effects dispersion solve did not converge in {fit.iterations} iterations",
            NonConvergenceWarning,
            stacklevel=3,
        )
    lower, upper = dispersion_interval(x, s, fit.w, confidence_level)
    mean = MeanEstimate(
        value=fit.mean,
        standard_error=fit.standard_error,
        ci_half_width=normal_quantile(confidence_level) * fit.standard_error,
    )
    dispersion = DispersionEstimate(w=fit.w, ci_lower=lower, ci_upper=upper)
    return mean, dispersion, fit.dof, fit.mswd, _chi2_p_value(fit.chi2, fit.dof), fit.converged


def fit_weighted_mean(
    values: ArrayLike,
    sigmas: ArrayLike,
    *,
    model: DispersionModel | str = DispersionModel.RANDOM_EFFECTS,
    confidence_level: float = 0.95,
    detect_outliers: bool = False,
    valid: ArrayLike | None = None,
    indices: ArrayLike | None = None,
    criterion: ChauvenetCriterion | None = None,
    solver: SolverSettings | None = None,
) -> FitResult:
    """Fit a weighted mean to (value, sigma) pairs.

    Parameters
    ----------
    values : array_like
        Measured values. Shape (n,). NaN marks a missing value.
    sigmas : array_like
        1-sigma uncertainties. Shape (n,). NaN or non-positive marks the
        element unusable.
    model : DispersionModel or str
        ``fixed_uncertainty`` (model-1) or ``random_effects`` (model-3).
    confidence_level : float
        Confidence level of the reported intervals, in (0, 1).
    detect_outliers : bool
        If True, iteratively remove elements failing the modified Chauvenet
        criterion before fitting.
    valid : array_like of bool, optional
        Caller eligibility mask. Shape (n,).
    indices : array_like of int, optional
        Caller index of each element, used for ``retained_indices``.
        Defaults to ``0..n-1``.
    criterion : ChauvenetCriterion, optional
        Outlier rule used when ``detect_outliers`` is True.
    solver : SolverSettings, optional
        Iteration bounds for the random-effects solve.

    Returns
    -------
    FitResult

    Raises
    ------
    DegenerateInputError
        If fewer than 2 usable elements remain.
    ValueError
        If inputs have mismatched lengths or ``confidence_level`` is out of range.
    """
    x = np.asarray(values, dtype=np.float64).ravel()
    s = np.asarray(sigmas, dtype=np.float64).ravel()
    n = len(x)
    if len(s) != n:
        raise ValueError(f"values and sigmas must have same length: {n} vs {len(s)}")
    if not 0.0 < confidence_level < 1.0:
        raise ValueError(f"confidence_level must be in (0, 1): {confidence_level}")

    idx = np.arange(n, dtype=np.int64) if indices is None else np.asarray(indices, dtype=np.int64).ravel()
    if len(idx) != n:
        raise ValueError(f"indices length {len(idx)} != values length {n}")

    with np.errstate(invalid="ignore"):
        usable = np.isfinite(x) & np.isfinite(s) & (s > 0)
    if valid is not None:
        mask = np.asarray(valid, dtype=np.bool_).ravel()
        if len(mask) != n:
            raise ValueError(f"valid mask length {len(mask)} != values length {n}")
        usable &= mask

    n_usable = int(np.sum(usable))
    if n_usable < 2:
        raise DegenerateInputError(n_usable)

    model = DispersionModel.parse(model)
    solver = solver or SolverSettings()

    if detect_outliers:
        passed = chauvenet(
            x, s, usable, model=model, criterion=criterion, solver=solver, iterate=True
        )
        rejected = idx[usable & ~passed]
        if len(rejected):
            logger.info(f"Removed {len(rejected)} outlier(s) at indices {rejected.tolist()}")
        usable &= passed

    xs = x[usable]
    ss = s[usable]
    if model is DispersionModel.FIXED_UNCERTAINTY:
        mean, dispersion, dof, mswd, p_value, converged = _fit_fixed_uncertainty(
            xs, ss, confidence_level
        )
    else:
        mean, dispersion, dof, mswd, p_value, converged = _fit_random_effects(
            xs, ss, confidence_level, solver
        )

    return FitResult(
        model=model,
        confidence_level=confidence_level,
        n=len(xs),
        mean=mean,
        dispersion=dispersion,
        degrees_of_freedom=dof,
        mswd=mswd,
        p_value=p_value,
        retained_indices=tuple(int(i) for i in idx[usable]),
        converged=converged,
    )


__all__ = ["fit_weighted_mean", "normal_quantile"]
