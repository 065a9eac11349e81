"""Age (release) spectrum rendering.

A spectrum is drawn as one box per step: the box width is the step's share
of the total weight (so the x-axis runs over the cumulative fraction 0..1)
and the box height spans the step's confidence interval. Plateau steps are
coloured differently, and the plateau mean is drawn as a horizontal line over
its internal (and, if present, external) confidence bands.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from ageplateau.compute.weighted_mean import normal_quantile

if TYPE_CHECKING:
    import matplotlib.axes

    from ageplateau.domain.results import PlateauResult
    from ageplateau.domain.steps import StepSequence


@dataclass(frozen=True)
class SpectrumGeometry:
    """Box layout of a spectrum.

    Attributes:
        x: Box edges on the cumulative-fraction axis, starting at 0. Shape (k+1,).
        lower: Lower box bounds. Shape (k,).
        upper: Upper box bounds. Shape (k,).
        indices: Sequence positions of the drawn steps. Shape (k,).
        ylim: (min(lower), max(upper)).
    """

    x: NDArray[np.float64]
    lower: NDArray[np.float64]
    upper: NDArray[np.float64]
    indices: NDArray[np.int64]
    ylim: tuple[float, float]


def spectrum_geometry(sequence: StepSequence, confidence_level: float = 0.95) -> SpectrumGeometry:
    """Compute box edges and bounds for every step with complete data.

    Steps with a missing weight, value or sigma are not drawn; the remaining
    weights are renormalized so the boxes span exactly 0..1.

    Raises:
        ValueError: If no drawable step carries positive weight.
    """
    drawable = (
        np.isfinite(sequence.weights) & np.isfinite(sequence.values) & np.isfinite(sequence.sigmas)
    )
    weights = np.asarray(sequence.weights)[drawable]
    total = float(np.sum(weights))
    if total <= 0:
        raise ValueError("Spectrum needs at least one step with positive weight")

    quantile = normal_quantile(confidence_level)
    values = np.asarray(sequence.values)[drawable]
    half = quantile * np.asarray(sequence.sigmas)[drawable]
    lower = values - half
    upper = values + half
    return SpectrumGeometry(
        x=np.concatenate([[0.0], np.cumsum(weights) / total]),
        lower=lower,
        upper=upper,
        indices=np.flatnonzero(drawable).astype(np.int64),
        ylim=(float(np.min(lower)), float(np.max(upper))),
    )


def _signif(x: float, sigdig: int) -> str:
    if not math.isfinite(x):
        return "NA"
    return f"{x:.{sigdig}g}"


def _round_with_errors(value: float, errors: Sequence[float], sigdig: int) -> list[str]:
    """Format a value and its errors to ``sigdig`` significant digits of the smallest error."""
    finite = [e for e in errors if math.isfinite(e) and e > 0]
    if not finite or not math.isfinite(value):
        return [_signif(value, sigdig + 2)] + [_signif(e, sigdig) for e in errors]
    decimals = sigdig - 1 - math.floor(math.log10(min(finite)))
    if decimals >= 0:
        return [f"{x:.{decimals}f}" for x in (value, *errors)]
    return [f"{round(x, decimals):.0f}" for x in (value, *errors)]


def format_plateau_title(
    result: PlateauResult,
    *,
    sigdig: int = 2,
    units: str = "",
    tracer: str = "",
) -> list[str]:
    """Three caption lines summarising a plateau fit.

    Args:
        result: Plateau search result.
        sigdig: Significant digits of the uncertainties.
        units: Unit label appended to the mean (e.g. "Ma").
        tracer: Name of the weighting tracer (e.g. "39Ar"); "spectrum" if empty.

    Returns:
        [mean line, MSWD line, coverage line].
    """
    mean = result.mean
    errors = [mean.standard_error, mean.ci_half_width]
    if mean.ci_exterr_half_width is not None:
        errors.append(mean.ci_exterr_half_width)
    rounded = _round_with_errors(mean.value, errors, sigdig)

    line1 = f"mean = {rounded[0]} ± {' | '.join(rounded[1:])}"
    if units:
        line1 += f" {units}"
    line1 += f" (n={len(result.window_indices)}/{result.total_step_count})"

    line2 = f"MSWD = {_signif(result.mswd, sigdig)}, p($\\chi^2$) = {_signif(result.p_value, sigdig)}"

    percent = _signif(100.0 * result.fraction, sigdig)
    target = f"the {tracer}" if tracer else "the spectrum"
    line3 = f"includes {percent}% of {target}"
    return [line1, line2, line3]


def plot_age_spectrum(
    sequence: StepSequence,
    result: PlateauResult | None = None,
    *,
    ax: matplotlib.axes.Axes | None = None,
    confidence_level: float | None = None,
    plateau_color: str | None = None,
    non_plateau_color: str | None = None,
    line_color: str | None = None,
    xlabel: str | None = None,
    ylabel: str | None = None,
    show_title: bool = True,
    sigdig: int = 2,
    units: str = "",
    tracer: str = "",
    style: str = "default",
) -> matplotlib.axes.Axes:
    """Plot an age spectrum with the plateau highlighted.

    Parameters
    ----------
    sequence : StepSequence
        Steps to draw (hidden steps are already absent).
    result : PlateauResult, optional
        Plateau search result. If None or not found, only the boxes are drawn.
    ax : matplotlib.axes.Axes, optional
        Axes to plot on. If None, creates a new figure and axes.
    confidence_level : float, optional
        Box height confidence level. Defaults to the result's level, else 0.95.
    plateau_color, non_plateau_color, line_color : str, optional
        Override COLORS["plateau"], COLORS["non_plateau"], COLORS["mean_line"].
    xlabel, ylabel : str, optional
        Axis labels. Default to LABELS["cumulative_fraction"] and LABELS["age_ma"].
    show_title : bool, default=True
        Add the ``format_plateau_title`` caption when a plateau was found.
    sigdig, units, tracer
        Passed to ``format_plateau_title``.
    style : str, default="default"
        Style preset: "default", "paper", or "presentation".

    Returns
    -------
    matplotlib.axes.Axes
        The axes containing the plot.
    """
    from matplotlib.patches import Rectangle

    from ._core import ensure_ax, style_context
    from ._styles import COLORS, LABELS

    if confidence_level is None:
        confidence_level = result.confidence_level if result is not None else 0.95
    geometry = spectrum_geometry(sequence, confidence_level)

    plateau_color = plateau_color or COLORS["plateau"]
    non_plateau_color = non_plateau_color or COLORS["non_plateau"]
    line_color = line_color or COLORS["mean_line"]

    found = result is not None and result.found
    usable = sequence.usable
    in_plateau = set(result.window_indices) if found and result is not None else set()

    with style_context(style):
        fig, ax = ensure_ax(ax)

        if found and result is not None:
            m = result.mean.value
            exterr = result.mean.ci_exterr_half_width
            if exterr is not None:
                ax.fill_between([0.0, 1.0], m - exterr, m + exterr, color=COLORS["ci_exterr"], linewidth=0)
            ci = result.mean.ci_half_width
            ax.fill_between([0.0, 1.0], m - ci, m + ci, color=COLORS["ci"], linewidth=0)
            ax.plot([0.0, 1.0], [m, m], color=line_color, linewidth=2)

        x = geometry.x
        n_boxes = len(geometry.indices)
        for k, position in enumerate(geometry.indices):
            pos = int(position)
            color = plateau_color if pos in in_plateau and bool(usable[pos]) else non_plateau_color
            ax.add_patch(
                Rectangle(
                    (x[k], geometry.lower[k]),
                    x[k + 1] - x[k],
                    geometry.upper[k] - geometry.lower[k],
                    facecolor=color,
                    edgecolor=COLORS["box_edge"],
                    linewidth=0.8,
                )
            )
            if k < n_boxes - 1:
                ax.plot(
                    [x[k + 1], x[k + 1]],
                    [geometry.lower[k], geometry.upper[k + 1]],
                    color=COLORS["box_edge"],
                    linewidth=0.8,
                )

        ax.set_xlim(0.0, 1.0)
        ymin, ymax = geometry.ylim
        if ymax > ymin:
            pad = 0.02 * (ymax - ymin)
            ax.set_ylim(ymin - pad, ymax + pad)
        ax.set_xlabel(xlabel if xlabel is not None else LABELS["cumulative_fraction"])
        ax.set_ylabel(ylabel if ylabel is not None else LABELS["age_ma"])

        if show_title and found and result is not None:
            lines = format_plateau_title(result, sigdig=sigdig, units=units, tracer=tracer)
            ax.set_title("\n".join(lines))

    return ax


__all__ = [
    "SpectrumGeometry",
    "format_plateau_title",
    "plot_age_spectrum",
    "spectrum_geometry",
]
