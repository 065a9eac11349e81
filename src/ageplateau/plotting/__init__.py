"""Plotting utilities for ageplateau.

Renders age (release) spectra with the plateau highlighted. Plot functions
require matplotlib:

    pip install 'ageplateau[plotting]'

``spectrum_geometry`` and ``format_plateau_title`` are pure helpers and work
without matplotlib; they live in ``ageplateau.plotting.spectrum``.

Example:
    >>> from ageplateau.plotting import plot_age_spectrum
    >>> ax = plot_age_spectrum(sequence, result, style="paper")
"""

from __future__ import annotations

import importlib.util

# Check for matplotlib availability without importing it
MATPLOTLIB_AVAILABLE = importlib.util.find_spec("matplotlib") is not None

if MATPLOTLIB_AVAILABLE:
    from .spectrum import format_plateau_title, plot_age_spectrum, spectrum_geometry

    __all__: list[str] = [
        "format_plateau_title",
        "plot_age_spectrum",
        "spectrum_geometry",
    ]
else:
    __all__: list[str] = []


def __getattr__(name: str) -> object:
    """Raise a helpful error when plotting is used without matplotlib."""
    if not MATPLOTLIB_AVAILABLE:
        from ageplateau.errors import MissingOptionalDependencyError

        raise MissingOptionalDependencyError("plotting")
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    """Return module attributes for tab completion."""
    return sorted(set(globals().keys()) | set(__all__))
