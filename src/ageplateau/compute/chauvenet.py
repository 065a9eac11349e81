"""Modified Chauvenet outlier filter.

Decides whether a small group of (value, sigma) pairs is statistically
homogeneous under a chosen dispersion model. Each eligible element is compared
with the fit of the *other* eligible elements (leave-one-out), so a single
gross outlier cannot hide by inflating the dispersion it is judged against:

- fixed uncertainty: ``z = |x_k - mean| / sqrt(max(1, mswd) * (sigma_k**2 + se**2))``
- random effects:    ``z = |x_k - mean| / sqrt(sigma_k**2 + w**2 + se**2)``

The element with the smallest two-sided probability ``p = 2 * sf(z)`` is
flagged when ``p < criterion.threshold(m)`` for a group of ``m`` eligible
elements. Non-eligible elements are always reported valid and never enter
the statistic.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats

from ageplateau.compute.dispersion import inverse_variance_fit, solve_random_effects
from ageplateau.config import ChauvenetCriterion, SolverSettings
from ageplateau.domain.results import DispersionModel

logger = logging.getLogger(__name__)


def outlier_probabilities(
    values: NDArray[np.float64],
    sigmas: NDArray[np.float64],
    *,
    model: DispersionModel = DispersionModel.RANDOM_EFFECTS,
    solver: SolverSettings | None = None,
) -> NDArray[np.float64]:
    """Leave-one-out two-sided probabilities for every element.

    Parameters
    ----------
    values : np.ndarray
        Finite values. Shape (m,), m >= 2.
    sigmas : np.ndarray
        Finite, strictly positive uncertainties. Shape (m,).
    model : DispersionModel
        Dispersion model used for the reference fit.
    solver : SolverSettings, optional
        Iteration bounds for the random-effects reference fit.

    Returns
    -------
    np.ndarray
        Probability of a deviation at least as large as observed, per element.
    """
    solver = solver or SolverSettings()
    m = len(values)
    probs = np.ones(m, dtype=np.float64)
    for k in range(m):
        others = np.arange(m) != k
        if model is DispersionModel.FIXED_UNCERTAINTY:
            iv_fit = inverse_variance_fit(values[others], sigmas[others])
            center = iv_fit.mean
            var = max(1.0, iv_fit.mswd) * (sigmas[k] ** 2 + iv_fit.standard_error**2)
        else:
            re_fit = solve_random_effects(
                values[others],
                sigmas[others],
                max_iterations=solver.max_iterations,
                tolerance=solver.tolerance,
            )
            if not re_fit.converged:
                logger.debug(f"Leave-one-out fit without element {k} did not converge")
            center = re_fit.mean
            var = sigmas[k] ** 2 + re_fit.w**2 + re_fit.standard_error**2
        probs[k] = 2.0 * float(stats.norm.sf(abs(values[k] - center) / np.sqrt(var)))
    return probs


def chauvenet(
    values: ArrayLike,
    sigmas: ArrayLike,
    valid: ArrayLike | None = None,
    *,
    model: DispersionModel | str = DispersionModel.RANDOM_EFFECTS,
    criterion: ChauvenetCriterion | None = None,
    solver: SolverSettings | None = None,
    iterate: bool = False,
) -> NDArray[np.bool_]:
    """Test a group for homogeneity with the modified Chauvenet criterion.

    Args:
        values: Group values. Shape (n,).
        sigmas: Group 1-sigma uncertainties. Shape (n,).
        valid: Eligibility mask; False elements are skipped but keep their
            position. Elements with a missing value or a missing/non-positive
            sigma are treated as ineligible.
        model: Dispersion model for the reference fits.
        criterion: Rejection rule (default ``ChauvenetCriterion()``).
        solver: Random-effects iteration bounds.
        iterate: If False, flag at most the single least consistent element
            (enough to decide homogeneity). If True, keep removing the least
            consistent element and retesting until the remainder passes.

    Returns:
        Boolean mask of shape (n,); True for elements that passed or were not
        eligible. ``mask.all()`` means the eligible group is homogeneous.
    """
    x = np.asarray(values, dtype=np.float64).ravel()
    s = np.asarray(sigmas, dtype=np.float64).ravel()
    if len(x) != len(s):
        raise ValueError(f"values and sigmas must have same length: {len(x)} vs {len(s)}")
    if valid is None:
        eligible = np.ones(len(x), dtype=np.bool_)
    else:
        eligible = np.asarray(valid, dtype=np.bool_).ravel().copy()
        if len(eligible) != len(x):
            raise ValueError(f"valid mask length {len(eligible)} != values length {len(x)}")

    model = DispersionModel.parse(model)
    criterion = criterion or ChauvenetCriterion()

    with np.errstate(invalid="ignore"):
        eligible &= np.isfinite(x) & np.isfinite(s) & (s > 0)

    passed = np.ones(len(x), dtype=np.bool_)
    while True:
        idx = np.flatnonzero(eligible)
        m = len(idx)
        if m <= criterion.min_group_size:
            break
        probs = outlier_probabilities(x[idx], s[idx], model=model, solver=solver)
        worst = int(np.argmin(probs))
        threshold = criterion.threshold(m)
        if probs[worst] >= threshold:
            break
        logger.debug(
            f"Chauvenet rejects element {int(idx[worst])} (p={probs[worst]:.3g} < {threshold:.3g}, m={m})"
        )
        passed[idx[worst]] = False
        eligible[idx[worst]] = False
        if not iterate:
            break
    return passed


__all__ = ["chauvenet", "outlier_probabilities"]
