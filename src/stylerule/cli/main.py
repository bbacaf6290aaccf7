"""stylerule CLI entry point: Click group with subcommands."""

import logging

import click

from stylerule import __version__


@click.group()
@click.version_option(version=__version__, prog_name="stylerule")
@click.option("--verbose", "-v", is_flag=True, help="Log rule resolution at debug level")
def cli(verbose: bool) -> None:
    """stylerule - render templated CSS rules into scoped stylesheets."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Import and register subcommands
from stylerule.cli.check import check  # noqa: E402
from stylerule.cli.render import render  # noqa: E402

cli.add_command(render)
cli.add_command(check)
