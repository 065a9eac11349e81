"""Shared helpers for click-based `ageplateau` commands."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import click

from ageplateau.config import PlateauConfig, load_config
from ageplateau.domain.results import DispersionModel
from ageplateau.errors import ConfigError

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_RUNTIME_ERROR = 2

MODEL_CHOICES = [model.value for model in DispersionModel] + ["model-1", "model-3"]


class AgePlateauCliError(click.ClickException):
    """Click exception with explicit exit-code control."""

    def __init__(self, message: str, *, exit_code: int = EXIT_INPUT_ERROR) -> None:
        super().__init__(message)
        self.exit_code = int(exit_code)


def configure_logging(verbose: bool) -> None:
    """Route library logging to stderr; DEBUG when verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def dump_json_output(payload: dict[str, Any], out_path: Path | None) -> None:
    """Write JSON payload to file or stdout."""
    text = json.dumps(payload, sort_keys=True, indent=2)
    if out_path is None:
        click.echo(text)
        return
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text + "\n", encoding="utf-8")


def resolve_optional_output_path(output_arg: str | None) -> Path | None:
    """Map '-', empty, or None to stdout; otherwise return filesystem path."""
    if output_arg is None:
        return None
    value = str(output_arg).strip()
    if value in {"", "-"}:
        return None
    return Path(value)


def resolve_config(
    config_path: Path | None,
    *,
    model: str | None,
    confidence_level: float | None,
    alpha: float | None,
    external_variance: float | None = None,
) -> PlateauConfig:
    """Load an optional JSON config and apply command-line overrides on top."""
    try:
        config = load_config(config_path) if config_path is not None else PlateauConfig()
    except ConfigError as exc:
        raise AgePlateauCliError(str(exc), exit_code=EXIT_INPUT_ERROR) from exc

    updates: dict[str, Any] = {}
    if model is not None:
        updates["dispersion_model"] = DispersionModel.parse(model)
    if confidence_level is not None:
        updates["confidence_level"] = confidence_level
    if alpha is not None:
        updates["chauvenet"] = {**config.chauvenet.model_dump(), "alpha": alpha}
    if external_variance is not None:
        updates["external_variance"] = external_variance
    if not updates:
        return config
    try:
        return PlateauConfig.model_validate({**config.model_dump(), **updates})
    except ValueError as exc:
        raise AgePlateauCliError(f"Invalid option: {exc}", exit_code=EXIT_INPUT_ERROR) from exc
