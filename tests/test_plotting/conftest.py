"""Pytest fixtures for plotting tests.

All tests in this directory require matplotlib, so we skip the entire
module if matplotlib is not available.
"""

from __future__ import annotations

import pytest

# Skip all tests in this directory if matplotlib is not installed
pytest.importorskip("matplotlib")

# Use non-interactive backend for tests
import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt

from ageplateau.compute.plateau import search_plateau
from ageplateau.domain.results import PlateauResult
from ageplateau.domain.steps import StepSequence


@pytest.fixture
def spectrum() -> StepSequence:
    """Five-step spectrum with an anomalous first step."""
    return StepSequence.from_arrays(
        [0.1, 0.2, 0.3, 0.2, 0.2],
        [150.0, 100.0, 100.2, 99.9, 100.1],
        [0.5, 0.2, 0.2, 0.2, 0.2],
    )


@pytest.fixture
def plateau_result(spectrum: StepSequence) -> PlateauResult:
    return search_plateau(spectrum)


@pytest.fixture(autouse=True)
def cleanup_figures():
    """Close all figures after each test to prevent memory leaks."""
    yield
    plt.close("all")
