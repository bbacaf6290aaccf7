"""Rule: a CSS template rendered into a scoped Stylesheet."""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Callable

from stylerule.config import RenderConfig
from stylerule.css import parse_css
from stylerule.extension import extend
from stylerule.helpers import HELPERS
from stylerule.model import StyleRule, Stylesheet
from stylerule.selectors import morph_rule
from stylerule.serialize import render_css
from stylerule.template import compile_template

logger = logging.getLogger(__name__)

FUNCTION_NAMES = frozenset(HELPERS) | {"extend"}


class Rule:
    """A CSS template plus the rules it draws on.

    Args:
        source: CSS text containing template actions, e.g.
            ``"& { width: {{ add .Width 10 }}px; {{ extend \".base\" }} }"``.
        feed: Rule whose rendered stylesheet the ``extend`` function reads
            from. Its rules are never part of this rule's output.
        *depends: Rules rendered with the same binding and parent scope whose
            rules are placed, in order, ahead of this rule's own.
        name: Name used in template error messages.

    Raises:
        TemplateCompileError: *source* is not a valid template.
    """

    def __init__(
        self,
        source: str,
        feed: Rule | None = None,
        *depends: Rule,
        name: str = "css",
    ) -> None:
        if feed is not None and not isinstance(feed, Rule):
            raise TypeError(f"feed must be a Rule, got {type(feed).__name__}")
        for dep in depends:
            if not isinstance(dep, Rule):
                raise TypeError(f"depends entries must be Rule, got {type(dep).__name__}")

        self.name = name
        self.feed = feed
        self.depends: tuple[Rule, ...] = depends
        self.template = compile_template(source, FUNCTION_NAMES, name=name)

    def functions(self, feed_sheet: Stylesheet | None) -> dict[str, Callable[..., Any]]:
        """Function table for one render, with ``extend`` reading *feed_sheet*."""
        return {**HELPERS, "extend": partial(extend, feed_sheet)}

    def stylesheet(self, binding: Any, parent_scope: str) -> Stylesheet:
        """Render this rule against *binding*, scoping selectors to *parent_scope*.

        The feed is rendered first so ``extend`` can see it, then every
        dependency in order, then this rule's own template. The result holds
        the dependencies' rules followed by this rule's rules. Any error from
        the feed or a dependency is raised as is and stops the render.
        """
        feed_sheet: Stylesheet | None = None
        if self.feed is not None:
            logger.debug("%s: resolving feed %s", self.name, self.feed.name)
            feed_sheet = self.feed.stylesheet(binding, parent_scope)

        rules: list[StyleRule] = []
        for dep in self.depends:
            logger.debug("%s: resolving dependency %s", self.name, dep.name)
            rules.extend(dep.stylesheet(binding, parent_scope).rules)

        content = self.template.execute(binding, self.functions(feed_sheet))
        sheet = parse_css(content)
        rules.extend(morph_rule(rule, parent_scope) for rule in sheet.rules)

        logger.debug(
            "%s: rendered %d rule(s) under %r", self.name, len(rules), parent_scope
        )
        return Stylesheet(rules=rules)

    def render(
        self,
        binding: Any,
        parent_scope: str | None = None,
        config: RenderConfig | None = None,
    ) -> str:
        """Render straight to CSS text.

        *parent_scope* defaults to ``config.parent_scope``.
        """
        config = config or RenderConfig()
        scope = config.parent_scope if parent_scope is None else parent_scope
        return render_css(self.stylesheet(binding, scope), config)

    def __repr__(self) -> str:
        feed = self.feed.name if self.feed is not None else None
        return f"Rule(name={self.name!r}, feed={feed!r}, depends={len(self.depends)})"
