"""Style presets and constants for plotting.

This module defines:
- STYLES: matplotlib rcParams presets ("default", "paper", "presentation")
- COLORS: Standard colors for spectrum boxes and plateau bands
- LABELS: Standard axis labels
"""

from __future__ import annotations

from typing import Any

# =============================================================================
# Style Presets
# =============================================================================

STYLES: dict[str, dict[str, Any]] = {
    "default": {
        "figure.figsize": (8, 5),
        "figure.dpi": 100,
        "font.size": 10,
        "axes.titlesize": 10,
        "axes.labelsize": 10,
        "xtick.labelsize": 9,
        "ytick.labelsize": 9,
        "lines.linewidth": 1.5,
        "axes.linewidth": 1.0,
        "axes.grid": False,
    },
    "paper": {
        # Publication-ready: small figures, high resolution
        "figure.figsize": (3.5, 2.8),
        "figure.dpi": 300,
        "font.size": 7,
        "axes.titlesize": 7,
        "axes.labelsize": 8,
        "xtick.labelsize": 7,
        "ytick.labelsize": 7,
        "lines.linewidth": 1.0,
        "axes.linewidth": 0.8,
        "axes.grid": False,
        "font.family": "serif",
    },
    "presentation": {
        "figure.figsize": (10, 6),
        "figure.dpi": 150,
        "font.size": 14,
        "axes.titlesize": 14,
        "axes.labelsize": 14,
        "xtick.labelsize": 12,
        "ytick.labelsize": 12,
        "lines.linewidth": 2.5,
        "axes.linewidth": 1.5,
        "axes.grid": True,
        "grid.alpha": 0.3,
    },
}


# =============================================================================
# Color Definitions
# =============================================================================

COLORS: dict[str, str] = {
    # Step boxes
    "plateau": "#00FF0080",  # Translucent green - steps in the plateau
    "non_plateau": "#00FFFF80",  # Translucent cyan - remaining steps
    "box_edge": "#000000",
    # Plateau mean and bands
    "mean_line": "#FF0000",
    "ci": "#BFBFBF",  # gray75 - internal confidence band
    "ci_exterr": "#E5E5E5",  # gray90 - external confidence band
}


# =============================================================================
# Axis Labels
# =============================================================================

LABELS: dict[str, str] = {
    "cumulative_fraction": "cumulative fraction",
    "cumulative_ar39": r"cumulative $^{39}$Ar fraction",
    "age_ma": "age [Ma]",
}
