"""Arithmetic helpers callable from rule templates."""

from __future__ import annotations

from typing import Callable


def _require_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(
            f"{name}: expected int argument, got {type(value).__name__} ({value!r})"
        )
    return value


def add(a: int, b: int) -> int:
    return _require_int("add", a) + _require_int("add", b)


def multiply(a: int, b: int) -> int:
    return _require_int("multiply", a) * _require_int("multiply", b)


def subtract(a: int, b: int) -> int:
    """Return ``b - a``.

    The operand order is reversed relative to the name; existing templates
    rely on it, so ``{{ subtract 2 10 }}`` renders ``8``.
    """
    return _require_int("subtract", b) - _require_int("subtract", a)


HELPERS: dict[str, Callable[..., object]] = {
    "add": add,
    "multiply": multiply,
    "subtract": subtract,
}
