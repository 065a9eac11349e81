"""`ageplateau wtdmean` command: weighted mean of a value table."""

from __future__ import annotations

from pathlib import Path

import click

from ageplateau.cli.common_cli import (
    EXIT_INPUT_ERROR,
    MODEL_CHOICES,
    AgePlateauCliError,
    dump_json_output,
    resolve_config,
    resolve_optional_output_path,
)
from ageplateau.compute.exterr import add_external_error
from ageplateau.compute.weighted_mean import fit_weighted_mean
from ageplateau.errors import DegenerateInputError
from ageplateau.io.step_table import read_value_table


@click.command("wtdmean")
@click.argument("values_csv", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--model",
    type=click.Choice(MODEL_CHOICES, case_sensitive=False),
    default=None,
    help="Dispersion model (default random_effects).",
)
@click.option("--confidence-level", type=float, default=None, help="Confidence level (default 0.95).")
@click.option("--alpha", type=float, default=None, help="Significance of the outlier test.")
@click.option(
    "--detect-outliers/--no-detect-outliers",
    default=True,
    show_default=True,
    help="Remove modified-Chauvenet outliers before fitting.",
)
@click.option("--external-variance", type=float, default=None, help="Systematic variance to add.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON configuration file; command-line options override it.",
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
def wtdmean_command(
    values_csv: Path,
    model: str | None,
    confidence_level: float | None,
    alpha: float | None,
    detect_outliers: bool,
    external_variance: float | None,
    config_path: Path | None,
    output_path_arg: str,
) -> None:
    """Fit a weighted mean to a value,sigma CSV and emit JSON."""
    out_path = resolve_optional_output_path(output_path_arg)
    config = resolve_config(
        config_path,
        model=model,
        confidence_level=confidence_level,
        alpha=alpha,
        external_variance=external_variance,
    )
    try:
        values, sigmas = read_value_table(values_csv)
    except (OSError, ValueError) as exc:
        raise AgePlateauCliError(f"Cannot read value table {values_csv}: {exc}") from exc

    try:
        fit = fit_weighted_mean(
            values,
            sigmas,
            model=config.dispersion_model,
            confidence_level=config.confidence_level,
            detect_outliers=detect_outliers,
            criterion=config.chauvenet,
            solver=config.solver,
        )
    except DegenerateInputError as exc:
        raise AgePlateauCliError(str(exc), exit_code=EXIT_INPUT_ERROR) from exc

    if config.external_variance is not None:
        fit = add_external_error(fit, config.external_variance)
    dump_json_output({"schema_version": 1, "result": fit.to_dict()}, out_path)
