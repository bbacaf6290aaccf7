"""Error hierarchy for rule compilation and stylesheet rendering."""

from __future__ import annotations


class StyleRuleError(Exception):
    """Base error for all stylerule errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TemplateCompileError(StyleRuleError):
    """Raised when template source cannot be compiled."""

    def __init__(
        self,
        message: str,
        *,
        name: str = "css",
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.name = name
        self.line = line
        self.column = column
        location = f"{name}:{line}:{column}" if line is not None else name
        super().__init__(f"template: {location}: {message}")


class TemplateExecutionError(StyleRuleError):
    """Raised when a compiled template fails against a binding."""

    def __init__(self, message: str, *, name: str = "css") -> None:
        self.name = name
        super().__init__(f"template: {name}: {message}")


class CSSParseError(StyleRuleError):
    """Raised when rendered template output is not valid CSS."""

    def __init__(
        self, message: str, line: int | None = None, column: int | None = None
    ) -> None:
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)
