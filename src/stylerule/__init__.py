"""Template-driven CSS rules rendered into scoped stylesheets."""

from stylerule.config import RenderConfig
from stylerule.css import parse_css
from stylerule.errors import (
    CSSParseError,
    StyleRuleError,
    TemplateCompileError,
    TemplateExecutionError,
)
from stylerule.extension import extend
from stylerule.helpers import HELPERS, add, multiply, subtract
from stylerule.model import Declaration, RuleKind, StyleRule, Stylesheet
from stylerule.rule import Rule
from stylerule.selectors import adjust_name, morph_rule
from stylerule.serialize import render_css

__version__ = "0.1.0"

__all__ = [
    # Core
    "Rule",
    "RenderConfig",
    # Model
    "Declaration",
    "RuleKind",
    "StyleRule",
    "Stylesheet",
    # Operations
    "adjust_name",
    "extend",
    "morph_rule",
    "parse_css",
    "render_css",
    # Helpers
    "HELPERS",
    "add",
    "multiply",
    "subtract",
    # Errors
    "CSSParseError",
    "StyleRuleError",
    "TemplateCompileError",
    "TemplateExecutionError",
]
