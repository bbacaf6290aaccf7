"""Tests for Rule: feed, depends, and end-to-end stylesheet rendering."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from stylerule import Rule
from stylerule.config import RenderConfig
from stylerule.errors import (
    CSSParseError,
    TemplateCompileError,
    TemplateExecutionError,
)
from stylerule.model import Declaration


class _SpyRule(Rule):
    """A rule that counts how often it is rendered."""

    def __init__(self, source: str = ".spy { x: 1 }"):
        super().__init__(source, name="spy")
        self.calls = 0

    def stylesheet(self, binding, parent_scope):
        self.calls += 1
        return super().stylesheet(binding, parent_scope)


class _FailingRule(Rule):
    def __init__(self, error: Exception):
        super().__init__("", name="failing")
        self.error = error

    def stylesheet(self, binding, parent_scope):
        raise self.error


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_defaults(self):
        rule = Rule(".a { color: red; }")
        assert rule.feed is None
        assert rule.depends == ()
        assert rule.name == "css"

    def test_malformed_template_raises(self):
        with pytest.raises(TemplateCompileError):
            Rule("{{ if .X }}.a { x: 1 }")

    def test_unknown_function_raises(self):
        with pytest.raises(TemplateCompileError, match="darken"):
            Rule("{{ darken .Color }}")

    def test_extend_is_known(self):
        Rule('.a { {{ extend ".b" }} }')

    def test_depends_must_be_rules(self):
        with pytest.raises(TypeError):
            Rule("", None, ".a { x: 1 }")  # type: ignore[arg-type]

    def test_feed_must_be_rule(self):
        with pytest.raises(TypeError):
            Rule("", ".a { x: 1 }")  # type: ignore[arg-type]

    def test_repr(self):
        rule = Rule("", Rule("", name="base"), Rule(""), name="button")
        assert repr(rule) == "Rule(name='button', feed='base', depends=1)"


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestStylesheet:
    def test_binding_substitution(self):
        rule = Rule("& { color: {{ .Color }}; }")
        sheet = rule.stylesheet({"Color": "red"}, ".btn")
        assert sheet.rules[0].selectors == [".btn"]
        assert sheet.rules[0].declarations == [Declaration("color", "red")]

    def test_helpers(self):
        rule = Rule("& { width: {{ multiply .N 4 }}px; height: {{ subtract 2 .N }}px; }")
        decls = rule.stylesheet({"N": 10}, ".box").rules[0].declarations
        assert [d.value for d in decls] == ["40px", "8px"]

    def test_selectors_scoped(self):
        rule = Rule("&:hover { x: 1 }\n:focus { x: 2 }\n& .child, a { x: 3 }")
        sheet = rule.stylesheet({}, ".card")
        assert [r.selectors for r in sheet.rules] == [
            [".card:hover"],
            [".card:focus"],
            [".card .child", "a"],
        ]

    def test_prelude_not_rewritten(self):
        sheet = Rule("&:hover { x: 1 }").stylesheet({}, ".card")
        assert sheet.rules[0].prelude == "&:hover"

    def test_at_rule_scoped(self):
        rule = Rule("@media print { & { color: red; } :hover { color: blue; } }")
        media = rule.stylesheet({}, ".card").rules[0]
        assert media.rules[0].selectors == [".card"]
        assert media.rules[1].selectors == [".card:hover"]

    def test_nested_at_rule_scoped(self):
        rule = Rule("@supports (display: grid) { @media print { & .x { y: 1 } } }")
        sheet = rule.stylesheet({}, ".grid")
        assert sheet.rules[0].rules[0].rules[0].selectors == [".grid .x"]

    def test_empty_template(self):
        assert Rule("").stylesheet({}, ".a").rules == []

    def test_repeatable(self):
        rule = Rule("& { width: {{ .W }}px; }")
        first = rule.stylesheet({"W": 1}, ".a")
        second = rule.stylesheet({"W": 2}, ".b")
        assert first.rules[0].declarations[0].value == "1px"
        assert second.rules[0].declarations[0].value == "2px"
        assert first.rules[0].selectors == [".a"]


class TestDepends:
    def test_order(self):
        b = Rule(".b { color: blue; }")
        c = Rule(".c { color: green; }")
        a = Rule(".a { color: red; }", None, b, c)
        sheet = a.stylesheet({}, ".root")
        assert [r.prelude for r in sheet.rules] == [".b", ".c", ".a"]

    def test_depends_share_binding_and_scope(self):
        base = Rule("& { width: {{ .W }}px; }")
        rule = Rule("&:hover { width: {{ add .W 1 }}px; }", None, base)
        sheet = rule.stylesheet({"W": 5}, ".btn")
        assert [r.selectors for r in sheet.rules] == [[".btn"], [".btn:hover"]]
        assert [r.declarations[0].value for r in sheet.rules] == ["5px", "6px"]

    def test_transitive(self):
        inner = Rule(".inner { x: 1 }")
        middle = Rule(".middle { x: 2 }", None, inner)
        outer = Rule(".outer { x: 3 }", None, middle)
        sheet = outer.stylesheet({}, "")
        assert [r.prelude for r in sheet.rules] == [".inner", ".middle", ".outer"]

    def test_shared_dependency(self):
        shared = Rule(".shared { x: 1 }")
        rule = Rule("", None, shared, shared)
        assert len(rule.stylesheet({}, "").rules) == 2


class TestFeed:
    def test_feed_excluded_from_output(self):
        feed = Rule(".base { color: red; }")
        rule = Rule("", feed)
        assert rule.stylesheet({}, ".x").rules == []

    def test_extend_pulls_declarations(self):
        feed = Rule(".base { color: red; padding: 4px !important; }")
        rule = Rule('& { {{ extend ".base" }} margin: 0; }', feed)
        decls = rule.stylesheet({}, ".btn").rules[0].declarations
        assert decls == [
            Declaration("color", "red"),
            Declaration("padding", "4px", important=True),
            Declaration("margin", "0"),
        ]

    def test_extend_without_feed_is_empty(self):
        rule = Rule('& { {{ extend ".base" }} color: red; }')
        decls = rule.stylesheet({}, ".btn").rules[0].declarations
        assert decls == [Declaration("color", "red")]

    def test_extend_first_match(self):
        feed = Rule(".a { color: red; }\n.a { color: blue; }")
        rule = Rule('& { {{ extend ".a" }} }', feed)
        decls = rule.stylesheet({}, ".x").rules[0].declarations
        assert decls == [Declaration("color", "red")]

    def test_extend_matches_raw_prelude(self):
        feed = Rule("&:hover { color: red; }")
        rule = Rule('& { {{ extend "&:hover" }} }', feed)
        decls = rule.stylesheet({}, ".x").rules[0].declarations
        assert decls == [Declaration("color", "red")]

    def test_feed_uses_same_binding(self):
        feed = Rule(".base { width: {{ .W }}px; }")
        rule = Rule('& { {{ extend ".base" }} }', feed)
        assert rule.stylesheet({"W": 10}, ".x").rules[0].declarations[0].value == "10px"
        assert rule.stylesheet({"W": 20}, ".x").rules[0].declarations[0].value == "20px"

    def test_feed_and_depends(self):
        feed = Rule(".base { color: red; }")
        dep = Rule(".dep { x: 1 }")
        rule = Rule('& { {{ extend ".base" }} }', feed, dep)
        sheet = rule.stylesheet({}, ".btn")
        assert [r.prelude for r in sheet.rules] == [".dep", "&"]

    def test_concurrent_renders_are_independent(self):
        feed = Rule(".base { width: {{ .W }}px; }")
        rule = Rule('& { {{ extend ".base" }} }', feed)

        def width(n: int) -> str:
            return rule.stylesheet({"W": n}, ".x").rules[0].declarations[0].value

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(width, range(50)))
        assert results == [f"{n}px" for n in range(50)]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestErrors:
    def test_execution_error(self):
        rule = Rule("& { width: {{ .Size.W }}px; }")
        with pytest.raises(TemplateExecutionError):
            rule.stylesheet({}, ".x")

    def test_helper_error(self):
        rule = Rule("& { width: {{ add .W 1 }}px; }")
        with pytest.raises(TemplateExecutionError):
            rule.stylesheet({"W": "wide"}, ".x")

    def test_css_error(self):
        rule = Rule("{{ .Body }}")
        with pytest.raises(CSSParseError):
            rule.stylesheet({"Body": "color: red;"}, ".x")

    def test_first_dependency_error_short_circuits(self):
        error = TemplateExecutionError("boom")
        spy = _SpyRule()
        rule = Rule(".a { x: 1 }", None, _FailingRule(error), spy)
        with pytest.raises(TemplateExecutionError) as excinfo:
            rule.stylesheet({}, ".x")
        assert excinfo.value is error
        assert spy.calls == 0

    def test_feed_error_stops_before_depends(self):
        error = CSSParseError("bad feed")
        spy = _SpyRule()
        rule = Rule(".a { x: 1 }", _FailingRule(error), spy)
        with pytest.raises(CSSParseError) as excinfo:
            rule.stylesheet({}, ".x")
        assert excinfo.value is error
        assert spy.calls == 0

    def test_dependency_error_from_template(self):
        broken = Rule("{{ .A.B }}")
        rule = Rule(".a { x: 1 }", None, broken)
        with pytest.raises(TemplateExecutionError):
            rule.stylesheet({}, ".x")

    def test_depends_rendered_when_healthy(self):
        spy = _SpyRule()
        Rule(".a { x: 1 }", None, spy).stylesheet({}, ".x")
        assert spy.calls == 1


# ---------------------------------------------------------------------------
# render
# ---------------------------------------------------------------------------


class TestRender:
    def test_render_text(self):
        css = Rule("& { color: red; }").render({}, ".x")
        assert css == ".x {\n  color: red;\n}\n"

    def test_parent_scope_from_config(self):
        config = RenderConfig(parent_scope=".card", compact=True)
        css = Rule(":hover { color: red; }").render({}, config=config)
        assert css == ".card:hover { color: red; }\n"

    def test_explicit_scope_overrides_config(self):
        config = RenderConfig(parent_scope=".card", compact=True)
        css = Rule("& { x: 1 }").render({}, ".btn", config)
        assert css == ".btn { x: 1; }\n"
