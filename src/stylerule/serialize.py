"""Render a Stylesheet back to CSS text."""

from __future__ import annotations

from stylerule.config import RenderConfig
from stylerule.model import StyleRule, Stylesheet


def _header(rule: StyleRule) -> str:
    if rule.is_at_rule:
        return f"@{rule.name} {rule.prelude}" if rule.prelude else f"@{rule.name}"
    return ", ".join(rule.selectors)


def _render_rule(rule: StyleRule, config: RenderConfig, depth: int) -> list[str]:
    pad = config.indent * depth
    header = _header(rule)
    if not rule.has_block:
        return [f"{pad}{header};"]

    body = [d.to_css() for d in rule.declarations]
    if config.compact:
        parts = body + [
            line for child in rule.rules for line in _render_rule(child, config, 0)
        ]
        inner = " ".join(parts)
        return [f"{header} {{ {inner} }}" if inner else f"{header} {{}}"]

    lines = [f"{pad}{header} {{"]
    lines.extend(f"{pad}{config.indent}{decl}" for decl in body)
    for child in rule.rules:
        lines.extend(_render_rule(child, config, depth + 1))
    lines.append(f"{pad}}}")
    return lines


def render_css(sheet: Stylesheet, config: RenderConfig | None = None) -> str:
    """Serialize *sheet* as CSS text, one rule after another in order."""
    config = config or RenderConfig()
    lines: list[str] = []
    for rule in sheet.rules:
        lines.extend(_render_rule(rule, config, 0))
    return "\n".join(lines) + "\n" if lines else ""
