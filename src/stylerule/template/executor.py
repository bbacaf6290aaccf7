"""Evaluate a compiled template against a binding."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from stylerule.errors import TemplateExecutionError
from stylerule.template.nodes import (
    Action,
    Call,
    Field,
    If,
    Literal,
    Node,
    Operand,
    Pipeline,
    Range,
    Text,
    ValueCommand,
    With,
)

_NO_ARG = object()


def format_value(value: Any) -> str:
    """Render a value the way an action prints it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class Template:
    """A compiled template; see ``compile_template``."""

    def __init__(self, name: str, nodes: list[Node]) -> None:
        self.name = name
        self.nodes = nodes

    def execute(
        self, binding: Any, functions: Mapping[str, Callable[..., Any]]
    ) -> str:
        """Render the template with *binding* as both ``.`` and ``$``.

        Raises TemplateExecutionError on a failed lookup or helper call; no
        partial output is returned.
        """
        out: list[str] = []
        _Execution(self.name, binding, functions).walk(self.nodes, binding, out)
        return "".join(out)

    def __repr__(self) -> str:
        return f"Template(name={self.name!r}, nodes={len(self.nodes)})"


class _Execution:
    def __init__(
        self, name: str, root: Any, functions: Mapping[str, Callable[..., Any]]
    ) -> None:
        self.name = name
        self.root = root
        self.functions = functions

    def error(self, message: str) -> TemplateExecutionError:
        return TemplateExecutionError(message, name=self.name)

    # ---- statements ----

    def walk(self, nodes: list[Node], dot: Any, out: list[str]) -> None:
        for node in nodes:
            if isinstance(node, Text):
                out.append(node.text)
            elif isinstance(node, Action):
                out.append(format_value(self.pipeline(node.pipeline, dot)))
            elif isinstance(node, If):
                for condition, body in node.branches:
                    if self.pipeline(condition, dot):
                        self.walk(body, dot, out)
                        break
                else:
                    if node.else_body is not None:
                        self.walk(node.else_body, dot, out)
            elif isinstance(node, With):
                value = self.pipeline(node.pipeline, dot)
                if value:
                    self.walk(node.body, value, out)
                elif node.else_body is not None:
                    self.walk(node.else_body, dot, out)
            elif isinstance(node, Range):
                self.range(node, dot, out)

    def range(self, node: Range, dot: Any, out: list[str]) -> None:
        value = self.pipeline(node.pipeline, dot)
        items: Iterable[Any]
        if value is None:
            items = ()
        elif isinstance(value, Mapping):
            try:
                keys = sorted(value)
            except TypeError as exc:
                raise self.error(f"range can't sort map keys: {exc}") from exc
            items = [value[key] for key in keys]
        elif isinstance(value, int) and not isinstance(value, bool):
            items = range(value)
        elif isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            raise self.error(f"range can't iterate over {value!r}")
        else:
            items = value

        empty = True
        for item in items:
            empty = False
            self.walk(node.body, item, out)
        if empty and node.else_body is not None:
            self.walk(node.else_body, dot, out)

    # ---- expressions ----

    def pipeline(self, pipeline: Pipeline, dot: Any) -> Any:
        value: Any = _NO_ARG
        for command in pipeline.commands:
            value = self.command(command, dot, value)
        return value

    def command(self, command: Call | ValueCommand, dot: Any, final: Any) -> Any:
        if isinstance(command, ValueCommand):
            if final is not _NO_ARG:
                raise self.error(f"can't give argument to non-function {command.operand}")
            return self.operand(command.operand, dot)

        args = [self.operand(arg, dot) for arg in command.args]
        if final is not _NO_ARG:
            args.append(final)
        return self.call(command.name, args)

    def call(self, name: str, args: list[Any]) -> Any:
        fn = self.functions.get(name)
        if fn is None:
            raise self.error(f'function "{name}" not defined')
        try:
            return fn(*args)
        except TemplateExecutionError:
            raise
        except Exception as exc:
            raise self.error(f"error calling {name}: {exc}") from exc

    def operand(self, operand: Operand, dot: Any) -> Any:
        if isinstance(operand, Literal):
            return operand.value
        if isinstance(operand, Pipeline):
            return self.pipeline(operand, dot)
        start = self.root if operand.from_root else dot
        return self.field(start, operand)

    def field(self, value: Any, operand: Field) -> Any:
        for index, part in enumerate(operand.path):
            if value is None:
                chain = "." + ".".join(operand.path[: index + 1])
                raise self.error(f"nil pointer evaluating {chain}")
            if isinstance(value, Mapping):
                value = value.get(part)
                continue
            try:
                attr = getattr(value, part, _NO_ARG)
            except Exception as exc:
                raise self.error(f"error reading field {part}: {exc}") from exc
            if attr is _NO_ARG:
                raise self.error(
                    f"can't evaluate field {part} in type {type(value).__name__}"
                )
            # Niladic methods are invoked, as a field would be read.
            if inspect.ismethod(attr):
                attr = self.call_method(part, attr)
            value = attr
        return value

    def call_method(self, name: str, method: Callable[[], Any]) -> Any:
        try:
            return method()
        except Exception as exc:
            raise self.error(f"error calling {name}: {exc}") from exc
