"""Configuration for the plateau search and weighted-mean estimator.

All settings are frozen pydantic models so they can be validated once, shared
freely, and round-tripped through JSON:

    >>> config = PlateauConfig(dispersion_model="fixed_uncertainty")
    >>> config.chauvenet.threshold(4)
    0.0125
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import Field, ValidationError, field_validator

from ageplateau.domain.results import DispersionModel, FrozenModel
from ageplateau.errors import ConfigError


class ChauvenetCriterion(FrozenModel):
    """Modified Chauvenet rule.

    The least consistent element of an ``m``-element group is rejected when its
    two-sided probability falls below ``alpha / m``. The threshold tightens as
    the group grows, keeping the family-wise false-rejection rate near
    ``alpha``. Classical Chauvenet corresponds to ``alpha = 0.5``.

    Groups with ``min_group_size`` or fewer elements always pass.
    """

    alpha: float = Field(default=0.05, gt=0, lt=1)
    min_group_size: int = Field(default=2, ge=2)

    def threshold(self, m: int) -> float:
        return self.alpha / max(int(m), 1)


class SolverSettings(FrozenModel):
    """Bounds on the random-effects fixed-point iteration."""

    max_iterations: int = Field(default=200, ge=1)
    tolerance: float = Field(default=1e-10, gt=0)


class PlateauConfig(FrozenModel):
    """Top-level configuration for a plateau computation."""

    dispersion_model: DispersionModel = DispersionModel.RANDOM_EFFECTS
    confidence_level: float = Field(default=0.95, gt=0, lt=1)
    chauvenet: ChauvenetCriterion = Field(default_factory=ChauvenetCriterion)
    solver: SolverSettings = Field(default_factory=SolverSettings)
    external_variance: float | None = Field(default=None, ge=0)

    @field_validator("dispersion_model", mode="before")
    @classmethod
    def _parse_model(cls, value: object) -> DispersionModel:
        if isinstance(value, (str, DispersionModel)):
            return DispersionModel.parse(value)
        raise ValueError(f"Unsupported dispersion model: {value!r}")


def load_config(path: Path | str) -> PlateauConfig:
    """Load a ``PlateauConfig`` from a JSON object file.

    Raises:
        ConfigError: If the file is missing, unreadable, malformed or invalid.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read config file: {exc}") from exc

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Malformed JSON in config file {path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    try:
        return PlateauConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {path}: {exc}") from exc


__all__ = [
    "ChauvenetCriterion",
    "PlateauConfig",
    "SolverSettings",
    "load_config",
]
