"""CLI command: stylerule check -- compile CSS templates without rendering."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from stylerule.errors import TemplateCompileError
from stylerule.rule import Rule


@click.command()
@click.argument("templates", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
def check(templates: tuple[str, ...]) -> None:
    """Compile each template and report syntax errors.

    Exits with code 1 if any template fails to compile.
    """
    failures = 0
    for path in templates:
        name = Path(path).name
        try:
            Rule(Path(path).read_text(encoding="utf-8"), name=name)
        except TemplateCompileError as exc:
            failures += 1
            click.echo(f"FAIL: {exc}", err=True)
            continue
        click.echo(f"OK: {name}")

    click.echo()
    click.echo(f"Summary: {len(templates) - failures} ok, {failures} failed")
    if failures:
        sys.exit(1)
