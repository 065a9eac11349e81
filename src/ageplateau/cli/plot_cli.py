"""`ageplateau plot` command: render an age spectrum to an image file."""

from __future__ import annotations

import importlib.util
from pathlib import Path

import click

from ageplateau.api import plateau
from ageplateau.cli.common_cli import EXIT_RUNTIME_ERROR, AgePlateauCliError, resolve_config
from ageplateau.cli.plateau_cli import load_sequence, model_options, step_selection_options


@click.command("plot")
@click.argument("steps_csv", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@model_options
@step_selection_options
@click.option(
    "--out",
    "-o",
    "output_path",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Image output path (format from the extension, e.g. .png or .pdf).",
)
@click.option("--no-plateau", is_flag=True, default=False, help="Draw the boxes only.")
@click.option("--units", type=str, default="Ma", show_default=True, help="Units shown in the title.")
@click.option(
    "--style",
    type=click.Choice(["default", "paper", "presentation"]),
    default="default",
    show_default=True,
)
def plot_command(
    steps_csv: Path,
    config_path: Path | None,
    model: str | None,
    confidence_level: float | None,
    alpha: float | None,
    hide: tuple[int, ...],
    omit: tuple[int, ...],
    output_path: Path,
    no_plateau: bool,
    units: str,
    style: str,
) -> None:
    """Plot the age spectrum of a weight,value,sigma CSV."""
    if importlib.util.find_spec("matplotlib") is None:
        raise AgePlateauCliError(
            "Plotting requires matplotlib. Install with: pip install 'ageplateau[plotting]'",
            exit_code=EXIT_RUNTIME_ERROR,
        )
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    from ageplateau.plotting.spectrum import plot_age_spectrum

    config = resolve_config(
        config_path, model=model, confidence_level=confidence_level, alpha=alpha
    )
    sequence = load_sequence(steps_csv, hide=hide, omit=omit)
    result = None if no_plateau else plateau(sequence, config=config)

    try:
        ax = plot_age_spectrum(
            sequence,
            result,
            confidence_level=config.confidence_level,
            units=units,
            style=style,
        )
    except ValueError as exc:
        raise AgePlateauCliError(str(exc), exit_code=EXIT_RUNTIME_ERROR) from exc

    fig = ax.figure
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, bbox_inches="tight")
    plt.close(fig)
    click.echo(str(output_path))
