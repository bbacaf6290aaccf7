"""Parse rendered CSS text into the stylesheet model.

Tokenizing and the CSS syntax level are handled by tinycss2; this module maps
its node tree onto Stylesheet / StyleRule / Declaration and rejects anything
tinycss2 reports as a parse error.
"""

from __future__ import annotations

import logging

import tinycss2
from tinycss2 import ast

from stylerule.errors import CSSParseError
from stylerule.model import Declaration, RuleKind, StyleRule, Stylesheet

__all__ = ["parse_css", "split_selectors"]

logger = logging.getLogger(__name__)

# At-rules whose block holds a list of rules rather than declarations.
RULE_LIST_AT_RULES = frozenset(
    {
        "media",
        "supports",
        "document",
        "-moz-document",
        "container",
        "layer",
        "scope",
        "starting-style",
        "font-feature-values",
        "keyframes",
        "-webkit-keyframes",
        "-moz-keyframes",
        "-o-keyframes",
    }
)


def _raise_parse_error(node: ast.ParseError) -> None:
    raise CSSParseError(
        f"{node.kind}: {node.message}",
        line=node.source_line,
        column=node.source_column,
    )


def split_selectors(prelude: list[ast.Node]) -> list[str]:
    """Split a qualified rule prelude on top-level commas.

    Commas inside functional pseudo-classes such as ``:is(.a, .b)`` belong
    to a nested block and do not split.
    """
    groups: list[list[ast.Node]] = [[]]
    for token in prelude:
        if token.type == "literal" and token.value == ",":
            groups.append([])
        else:
            groups[-1].append(token)
    selectors = [tinycss2.serialize(group).strip() for group in groups]
    return [s for s in selectors if s]


def _declarations(content: list[ast.Node]) -> list[Declaration]:
    declarations: list[Declaration] = []
    for node in tinycss2.parse_blocks_contents(
        content, skip_comments=True, skip_whitespace=True
    ):
        if node.type == "error":
            _raise_parse_error(node)
        if node.type != "declaration":
            raise CSSParseError(
                f"unexpected {node.type} inside a declaration block",
                line=node.source_line,
                column=node.source_column,
            )
        declarations.append(
            Declaration(
                property=node.name,
                value=tinycss2.serialize(node.value).strip(),
                important=node.important,
            )
        )
    return declarations


def _convert(node: ast.Node) -> StyleRule:
    if node.type == "error":
        _raise_parse_error(node)

    if node.type == "qualified-rule":
        return StyleRule(
            kind=RuleKind.QUALIFIED,
            prelude=tinycss2.serialize(node.prelude).strip(),
            selectors=split_selectors(node.prelude),
            declarations=_declarations(node.content),
        )

    if node.type == "at-rule":
        name = node.lower_at_keyword
        prelude = tinycss2.serialize(node.prelude).strip()
        if node.content is None:
            return StyleRule(
                kind=RuleKind.AT, prelude=prelude, name=name, has_block=False
            )
        if name in RULE_LIST_AT_RULES:
            nested = tinycss2.parse_rule_list(
                node.content, skip_comments=True, skip_whitespace=True
            )
            return StyleRule(
                kind=RuleKind.AT,
                prelude=prelude,
                rules=[_convert(child) for child in nested],
                name=name,
            )
        return StyleRule(
            kind=RuleKind.AT,
            prelude=prelude,
            declarations=_declarations(node.content),
            name=name,
        )

    raise CSSParseError(
        f"unexpected {node.type}",
        line=getattr(node, "source_line", None),
        column=getattr(node, "source_column", None),
    )


def parse_css(text: str) -> Stylesheet:
    """Parse CSS *text* into a Stylesheet, preserving rule order.

    Raises CSSParseError on the first syntax error.
    """
    nodes = tinycss2.parse_stylesheet(text, skip_comments=True, skip_whitespace=True)
    rules = [_convert(node) for node in nodes]
    logger.debug("Parsed %d top-level rule(s)", len(rules))
    return Stylesheet(rules=rules)
