"""Stylesheet model: Declaration, StyleRule, and Stylesheet dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stylerule.config import RenderConfig


class RuleKind(Enum):
    """Whether a parsed rule is a style rule or an at-rule."""

    QUALIFIED = "qualified"
    AT = "at"


@dataclass(frozen=True)
class Declaration:
    """A single ``property: value`` pair, optionally marked important."""

    property: str
    value: str
    important: bool = False

    def to_css(self, with_important: bool = True) -> str:
        text = f"{self.property}: {self.value}"
        if with_important and self.important:
            text += " !important"
        return text + ";"

    def __str__(self) -> str:
        return self.to_css()


@dataclass(frozen=True)
class StyleRule:
    """A parsed rule.

    Attributes:
        kind: Qualified (style) rule or at-rule.
        prelude: Raw selector text, or the at-rule prelude, as written in the
            source. Never rewritten; used as the match key for ``extend``.
        selectors: Comma-separated selectors of a qualified rule. Empty for
            at-rules.
        declarations: Declarations of the rule body, in source order.
        rules: Nested rules of an at-rule block, in source order.
        name: At-keyword without the ``@`` (``"media"``); empty for
            qualified rules.
        has_block: False for statement at-rules such as ``@import``.
    """

    kind: RuleKind
    prelude: str
    selectors: list[str] = field(default_factory=list)
    declarations: list[Declaration] = field(default_factory=list)
    rules: list[StyleRule] = field(default_factory=list)
    name: str = ""
    has_block: bool = True

    @property
    def is_at_rule(self) -> bool:
        return self.kind is RuleKind.AT


@dataclass(frozen=True)
class Stylesheet:
    """An ordered collection of rules."""

    rules: list[StyleRule] = field(default_factory=list)

    def to_css(self, config: RenderConfig | None = None) -> str:
        from stylerule.serialize import render_css

        return render_css(self, config)
