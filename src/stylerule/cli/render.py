"""CLI command: stylerule render -- render a CSS template to a stylesheet."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click

from stylerule.config import RenderConfig
from stylerule.errors import StyleRuleError
from stylerule.rule import Rule

logger = logging.getLogger(__name__)

_TEMPLATE_PATH = click.Path(exists=True, dir_okay=False)


def _load_rule(path: str, feed: Rule | None = None, *depends: Rule) -> Rule:
    source = Path(path).read_text(encoding="utf-8")
    return Rule(source, feed, *depends, name=Path(path).name)


def _load_binding(path: str | None) -> Any:
    if path is None:
        return {}
    return json.loads(Path(path).read_text(encoding="utf-8"))


@click.command()
@click.argument("template", type=_TEMPLATE_PATH)
@click.option("--binding", "binding_path", type=_TEMPLATE_PATH, help="JSON file bound as '.' in the template")
@click.option("--parent", "parent_scope", default="", help="Parent selector for '&' and leading ':' selectors")
@click.option("--feed", "feed_path", type=_TEMPLATE_PATH, help="Template whose rules 'extend' can copy from")
@click.option("--depends", "depends_paths", type=_TEMPLATE_PATH, multiple=True, help="Template rendered ahead of TEMPLATE (repeatable)")
@click.option("--compact", is_flag=True, help="One line per rule")
@click.option("--indent", default=2, type=click.IntRange(min=0), help="Spaces per indentation level")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write CSS here instead of stdout")
def render(
    template: str,
    binding_path: str | None,
    parent_scope: str,
    feed_path: str | None,
    depends_paths: tuple[str, ...],
    compact: bool,
    indent: int,
    output: str | None,
) -> None:
    """Render TEMPLATE with a JSON binding and print the resulting CSS."""
    config = RenderConfig(indent=" " * indent, compact=compact, parent_scope=parent_scope)

    try:
        binding = _load_binding(binding_path)
        feed = _load_rule(feed_path) if feed_path else None
        depends = [_load_rule(p) for p in depends_paths]
        rule = _load_rule(template, feed, *depends)
        css = rule.render(binding, config=config)
    except json.JSONDecodeError as exc:
        click.echo(f"Error: invalid binding JSON: {exc}", err=True)
        sys.exit(1)
    except StyleRuleError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if output:
        Path(output).write_text(css, encoding="utf-8")
        logger.info("Wrote %s", output)
    else:
        click.echo(css, nl=False)
