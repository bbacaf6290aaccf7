"""Compile template source into a node tree.

Source is split into literal text and ``{{ ... }}`` actions. Each action body
is parsed with a Lark grammar and transformed into nodes; block actions
(``if``, ``range``, ``with``) are then assembled into a nested tree.
"""

from __future__ import annotations

import ast
import re
from collections.abc import Collection
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from lark import Lark, Token, Transformer
from lark.exceptions import LarkError

from stylerule.errors import TemplateCompileError
from stylerule.template.executor import Template
from stylerule.template.nodes import (
    Action,
    Call,
    Field,
    If,
    Literal,
    Node,
    Pipeline,
    Range,
    Text,
    ValueCommand,
    With,
    iter_calls,
)

GRAMMAR_PATH = Path(__file__).parent / "grammar.lark"

_ACTION_RE = re.compile(
    r"""
    \{\{
    (?P<ltrim>-\s)?         # "{{- " trims whitespace before the action
    (?P<body>
        (?:
            "(?:[^"\\\n]|\\.)*"     # quoted strings may contain "}}"
          | `[^`]*`
          | .
        )*?
    )
    (?P<rtrim>\s-)?         # " -}}" trims whitespace after the action
    \}\}
    """,
    re.VERBOSE | re.DOTALL,
)


@lru_cache(maxsize=1)
def _parser() -> Lark:
    return Lark(GRAMMAR_PATH.read_text(), parser="lalr", start="start")


# ---------------------------------------------------------------------------
# Action markers
# ---------------------------------------------------------------------------


class _Marker:
    """Block structure returned by the transformer for control actions."""


class _IfOpen(_Marker):
    def __init__(self, pipeline: Pipeline):
        self.pipeline = pipeline


class _ElseIf(_Marker):
    def __init__(self, pipeline: Pipeline):
        self.pipeline = pipeline


class _Else(_Marker):
    pass


class _RangeOpen(_Marker):
    def __init__(self, pipeline: Pipeline):
        self.pipeline = pipeline


class _WithOpen(_Marker):
    def __init__(self, pipeline: Pipeline):
        self.pipeline = pipeline


class _End(_Marker):
    pass


class ActionTransformer(Transformer):  # type: ignore[type-arg]
    """Transform the parse tree of one action body into nodes or markers."""

    # ---- operands ----

    def field(self, items: list[Token]) -> Field:
        return Field(path=tuple(str(items[0]).split(".")[1:]))

    def root(self, items: list[Token]) -> Field:
        return Field(path=tuple(str(items[0]).split(".")[1:]), from_root=True)

    def dot(self, items: list[Token]) -> Field:
        return Field()

    def string(self, items: list[Token]) -> Literal:
        return Literal(ast.literal_eval(str(items[0])))

    def raw_string(self, items: list[Token]) -> Literal:
        return Literal(str(items[0])[1:-1])

    def float_value(self, items: list[Token]) -> Literal:
        return Literal(float(items[0]))

    def int_value(self, items: list[Token]) -> Literal:
        return Literal(int(items[0]))

    def true(self, items: list[Token]) -> Literal:
        return Literal(True)

    def false(self, items: list[Token]) -> Literal:
        return Literal(False)

    def nil(self, items: list[Token]) -> Literal:
        return Literal(None)

    # ---- commands ----

    def call(self, items: list[object]) -> Call:
        return Call(name=str(items[0]), args=list(items[1:]))  # type: ignore[arg-type]

    def value(self, items: list[object]) -> ValueCommand:
        return ValueCommand(operand=items[0])  # type: ignore[arg-type]

    def pipeline(self, items: list[object]) -> Pipeline:
        return Pipeline(commands=list(items))  # type: ignore[arg-type]

    # ---- control ----

    def if_open(self, items: list[Pipeline]) -> _IfOpen:
        return _IfOpen(items[0])

    def else_if(self, items: list[Pipeline]) -> _ElseIf:
        return _ElseIf(items[0])

    def else_open(self, items: list[object]) -> _Else:
        return _Else()

    def range_open(self, items: list[Pipeline]) -> _RangeOpen:
        return _RangeOpen(items[0])

    def with_open(self, items: list[Pipeline]) -> _WithOpen:
        return _WithOpen(items[0])

    def end(self, items: list[object]) -> _End:
        return _End()

    def start(self, items: list[object]) -> object:
        return items[0]


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


@dataclass
class _Frame:
    """An open ``if``/``range``/``with`` block awaiting its ``end``."""

    keyword: str
    offset: int
    branches: list[tuple[Pipeline, list[Node]]]
    parent: list[Node]
    else_body: list[Node] | None = None
    body: list[Node] = field(init=False)

    def __post_init__(self) -> None:
        self.body = self.branches[-1][1]

    def build(self) -> Node:
        if self.keyword == "if":
            return If(branches=self.branches, else_body=self.else_body)
        pipeline, body = self.branches[0]
        if self.keyword == "range":
            return Range(pipeline=pipeline, body=body, else_body=self.else_body)
        return With(pipeline=pipeline, body=body, else_body=self.else_body)


def _location(source: str, offset: int) -> tuple[int, int]:
    line = source.count("\n", 0, offset) + 1
    column = offset - (source.rfind("\n", 0, offset) + 1) + 1
    return line, column


class _Compiler:
    def __init__(self, source: str, functions: Collection[str], name: str):
        self.source = source
        self.functions = functions
        self.name = name
        self.transformer = ActionTransformer()

    def error(self, message: str, offset: int) -> TemplateCompileError:
        line, column = _location(self.source, offset)
        return TemplateCompileError(message, name=self.name, line=line, column=column)

    def parse_action(self, body: str, offset: int) -> object:
        try:
            tree = _parser().parse(body)
            result = self.transformer.transform(tree)
        except LarkError as e:
            pos = getattr(e, "pos_in_stream", None) or 0
            raise self.error(
                f"invalid action {body.strip()!r}: {type(e).__name__}", offset + pos
            ) from e
        pipeline = getattr(result, "pipeline", result)
        if isinstance(pipeline, Pipeline):
            for call in iter_calls(pipeline):
                if call.name not in self.functions:
                    raise self.error(f'function "{call.name}" not defined', offset)
        return result

    def compile(self) -> list[Node]:
        root: list[Node] = []
        stack: list[_Frame] = []
        current = root
        trim_next = False
        cursor = 0

        def add_text(text: str, rtrim: bool) -> None:
            if trim_next:
                text = text.lstrip()
            if rtrim:
                text = text.rstrip()
            if not text:
                return
            if "{{" in text:
                raise self.error("unclosed action", self.source.index("{{", cursor))
            current.append(Text(text))

        for match in _ACTION_RE.finditer(self.source):
            add_text(self.source[cursor : match.start()], bool(match.group("ltrim")))
            trim_next = bool(match.group("rtrim"))
            cursor = match.end()

            body = match.group("body")
            offset = match.start("body")
            stripped = body.strip()
            if stripped.startswith("/*"):
                if not stripped.endswith("*/"):
                    raise self.error("unclosed comment", offset)
                continue

            item = self.parse_action(body, offset)

            if isinstance(item, Pipeline):
                current.append(Action(item))
            elif isinstance(item, (_IfOpen, _RangeOpen, _WithOpen)):
                keyword = {_IfOpen: "if", _RangeOpen: "range", _WithOpen: "with"}[type(item)]
                frame = _Frame(keyword, offset, [(item.pipeline, [])], parent=current)
                stack.append(frame)
                current = frame.body
            elif isinstance(item, _ElseIf):
                if not stack or stack[-1].keyword != "if" or stack[-1].else_body is not None:
                    raise self.error("unexpected {{else if}}", offset)
                stack[-1].branches.append((item.pipeline, []))
                current = stack[-1].branches[-1][1]
            elif isinstance(item, _Else):
                if not stack or stack[-1].else_body is not None:
                    raise self.error("unexpected {{else}}", offset)
                stack[-1].else_body = []
                current = stack[-1].else_body
            elif isinstance(item, _End):
                if not stack:
                    raise self.error("unexpected {{end}}", offset)
                frame = stack.pop()
                current = frame.parent
                current.append(frame.build())

        add_text(self.source[cursor:], False)

        if stack:
            raise self.error(f"unexpected EOF: unclosed {{{{{stack[-1].keyword}}}}}", stack[-1].offset)
        return root


def compile_template(
    source: str, functions: Collection[str], name: str = "css"
) -> Template:
    """Compile *source* into a Template.

    *functions* names every function the template may call; calling any other
    name is a compile error. Raises TemplateCompileError with the line and
    column of the offending action.
    """
    nodes = _Compiler(source, functions, name).compile()
    return Template(name=name, nodes=nodes)
