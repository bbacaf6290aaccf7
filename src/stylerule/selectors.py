"""Selector rewriting relative to a parent scope."""

from __future__ import annotations

from dataclasses import replace

from stylerule.model import StyleRule

PARENT_REFERENCE = "&"
PSEUDO_PREFIX = ":"


def adjust_name(selector: str, parent_scope: str) -> str:
    """Resolve *selector* against *parent_scope*.

    - ``&`` is replaced by the parent scope, every occurrence:
      ``"& .child"`` under ``.card`` becomes ``".card .child"``.
    - A leading ``:`` is glued onto the parent scope with no separator:
      ``":focus"`` under ``.input`` becomes ``".input:focus"``.
    - Anything else is already a full selector and is returned as is.

    Surrounding whitespace is trimmed first.
    """
    selector = selector.strip()
    if PARENT_REFERENCE in selector:
        return selector.replace(PARENT_REFERENCE, parent_scope)
    if selector.startswith(PSEUDO_PREFIX):
        return parent_scope + selector
    return selector


def morph_rule(rule: StyleRule, parent_scope: str) -> StyleRule:
    """Return *rule* with its selectors rewritten against *parent_scope*.

    Nested at-rules (``@media`` inside ``@supports``, ...) are rewritten
    recursively; other nested rules only have their own selectors adjusted.
    The prelude keeps the text as written.
    """
    nested: list[StyleRule] = []
    for child in rule.rules:
        if child.is_at_rule:
            nested.append(morph_rule(child, parent_scope))
        else:
            nested.append(
                replace(
                    child,
                    selectors=[adjust_name(s, parent_scope) for s in child.selectors],
                )
            )
    return replace(
        rule,
        selectors=[adjust_name(s, parent_scope) for s in rule.selectors],
        rules=nested,
    )
