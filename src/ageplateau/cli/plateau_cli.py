"""`ageplateau plateau` command: plateau search over a step table."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click

from ageplateau.api import plateau
from ageplateau.cli.common_cli import (
    EXIT_INPUT_ERROR,
    MODEL_CHOICES,
    AgePlateauCliError,
    dump_json_output,
    resolve_config,
    resolve_optional_output_path,
)
from ageplateau.domain.results import PlateauResult
from ageplateau.domain.steps import StepSequence
from ageplateau.io.step_table import read_step_table


def load_sequence(path: Path, *, hide: tuple[int, ...], omit: tuple[int, ...]) -> StepSequence:
    try:
        return read_step_table(path, hide=hide, omit=omit)
    except (OSError, ValueError) as exc:
        raise AgePlateauCliError(f"Cannot read step table {path}: {exc}", exit_code=EXIT_INPUT_ERROR) from exc


def plateau_payload(sequence: StepSequence, result: PlateauResult) -> dict[str, Any]:
    payload = result.to_dict()
    payload["window_source_indices"] = [
        int(sequence.source_indices[i]) for i in result.window_indices
    ]
    return {"schema_version": 1, "result": payload}


def step_selection_options(func: Any) -> Any:
    func = click.option(
        "--omit",
        multiple=True,
        type=int,
        help="Zero-based row index to keep but exclude from the plateau (repeatable).",
    )(func)
    func = click.option(
        "--hide",
        multiple=True,
        type=int,
        help="Zero-based row index to drop entirely (repeatable).",
    )(func)
    return func


def model_options(func: Any) -> Any:
    func = click.option(
        "--alpha",
        type=float,
        default=None,
        help="Family-wise significance of the Chauvenet outlier test.",
    )(func)
    func = click.option(
        "--confidence-level",
        type=float,
        default=None,
        help="Confidence level of reported intervals (default 0.95).",
    )(func)
    func = click.option(
        "--model",
        type=click.Choice(MODEL_CHOICES, case_sensitive=False),
        default=None,
        help="Dispersion model (default random_effects).",
    )(func)
    func = click.option(
        "--config",
        "config_path",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help="JSON configuration file; command-line options override it.",
    )(func)
    return func


@click.command("plateau")
@click.argument("steps_csv", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@model_options
@step_selection_options
@click.option(
    "--external-variance",
    type=float,
    default=None,
    help="Systematic variance added to the plateau mean's external error band.",
)
@click.option(
    "-o",
    "--out",
    "output_path_arg",
    type=str,
    default="-",
    show_default=True,
    help="JSON output path; '-' writes to stdout.",
)
def plateau_command(
    steps_csv: Path,
    config_path: Path | None,
    model: str | None,
    confidence_level: float | None,
    alpha: float | None,
    hide: tuple[int, ...],
    omit: tuple[int, ...],
    external_variance: float | None,
    output_path_arg: str,
) -> None:
    """Find the plateau of a weight,value,sigma CSV and emit schema-stable JSON."""
    out_path = resolve_optional_output_path(output_path_arg)
    config = resolve_config(
        config_path,
        model=model,
        confidence_level=confidence_level,
        alpha=alpha,
        external_variance=external_variance,
    )
    sequence = load_sequence(steps_csv, hide=hide, omit=omit)
    result = plateau(sequence, config=config)
    dump_json_output(plateau_payload(sequence, result), out_path)
