"""Entry point for the `ageplateau` command group."""

from __future__ import annotations

import click

from ageplateau.cli.common_cli import configure_logging
from ageplateau.cli.plateau_cli import plateau_command
from ageplateau.cli.plot_cli import plot_command
from ageplateau.cli.wtdmean_cli import wtdmean_command


@click.group()
@click.version_option(package_name="ageplateau")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """ageplateau CLI for step-heating plateau ages and weighted means."""
    configure_logging(verbose)


cli.add_command(plateau_command)
cli.add_command(wtdmean_command)
cli.add_command(plot_command)


if __name__ == "__main__":
    cli()
