"""Core plotting utilities for ageplateau.

This module provides low-level utilities used by all plot functions:
- ensure_ax: Create or validate matplotlib axes
- style_context: Context manager for style presets

All matplotlib imports are lazy (inside functions) to allow importing
this module even without matplotlib installed.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from matplotlib.axes import Axes
    from matplotlib.figure import Figure, SubFigure


def ensure_ax(ax: Axes | None = None) -> tuple[Figure | SubFigure, Axes]:
    """Return (figure, axes), creating new ones if ax is None.

    Args:
        ax: Optional matplotlib Axes. If None, creates new figure and axes.

    Returns:
        Tuple of (Figure, Axes).
    """
    import matplotlib.pyplot as plt

    if ax is None:
        fig, ax = plt.subplots()
        return fig, ax
    return ax.figure, ax


@contextmanager
def style_context(style: str = "default") -> Iterator[None]:
    """Apply a style preset temporarily, restoring rcParams on exit.

    Args:
        style: Style preset name. One of "default", "paper", "presentation".

    Raises:
        ValueError: If style is not recognized.
    """
    import matplotlib.pyplot as plt

    from ._styles import STYLES

    if style not in STYLES:
        valid_styles = ", ".join(sorted(STYLES.keys()))
        raise ValueError(f"Unknown style {style!r}. Valid styles: {valid_styles}")

    with plt.rc_context(STYLES[style]):
        yield
