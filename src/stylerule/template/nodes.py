"""Node tree produced by compiling a template."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class Field:
    """A field chain such as ``.Theme.Color``; an empty path is ``.`` itself."""

    path: tuple[str, ...] = ()
    from_root: bool = False  # "$.Theme" starts at the root binding


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class Call:
    """A function call: ``add 1 .Size``."""

    name: str
    args: list[Operand] = field(default_factory=list)


@dataclass(frozen=True)
class ValueCommand:
    """A pipeline command that is a bare operand rather than a call."""

    operand: Operand


@dataclass(frozen=True)
class Pipeline:
    """Commands chained with ``|``; each result feeds the next call's last argument."""

    commands: list[Call | ValueCommand]


Operand = Union[Field, Literal, Pipeline]


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Action:
    pipeline: Pipeline


@dataclass(frozen=True)
class If:
    """``if``/``else if`` branches tried in order, then the optional ``else`` body."""

    branches: list[tuple[Pipeline, list[Node]]]
    else_body: list[Node] | None = None


@dataclass(frozen=True)
class Range:
    pipeline: Pipeline
    body: list[Node]
    else_body: list[Node] | None = None


@dataclass(frozen=True)
class With:
    pipeline: Pipeline
    body: list[Node]
    else_body: list[Node] | None = None


Node = Union[Text, Action, If, Range, With]


def iter_calls(pipeline: Pipeline):
    """Yield every Call in *pipeline*, including those in sub-pipelines."""
    for command in pipeline.commands:
        if isinstance(command, Call):
            yield command
            operands = command.args
        else:
            operands = [command.operand]
        for operand in operands:
            if isinstance(operand, Pipeline):
                yield from iter_calls(operand)
