"""
Exception hierarchy of the template engine.

All expected errors that should be shown to the user as clean messages
(without stack traces) inherit from TemplateError. Parse-time problems are
TemplateSyntaxError subclasses, render-time problems are TemplateRenderError
subclasses.

Programming errors and bugs should NOT inherit from TemplateError,
they propagate with full tracebacks.
"""

from __future__ import annotations

from typing import Any, Optional


class TemplateError(Exception):
    """Base class for all user-facing errors of the engine."""
    pass


# ---- Parse time ----

class TemplateSyntaxError(TemplateError):
    """
    Malformed template text.

    Raised directly for leftover tokens after the outermost construct
    (for example a stray ``::end::``).
    """

    def __init__(self, message: str, token: str = ""):
        super().__init__(message)
        self.token = token


class MalformedMacroError(TemplateSyntaxError):
    """Macro call parentheses never balance before end of input."""

    def __init__(self, name: str, position: int):
        super().__init__(f"Unclosed macro parenthesis in '$${name}(' at position {position}", name)
        self.name = name
        self.position = position


class UnclosedBlockError(TemplateSyntaxError):
    """Missing ``end``/``else`` terminator for ``if``/``foreach``."""

    def __init__(self, construct: str):
        super().__init__(f"Unclosed '{construct}'", construct)
        self.construct = construct


class ExpressionSyntaxError(TemplateSyntaxError):
    """Unexpected token or operator while compiling an expression."""

    def __init__(self, token: str, source: str, message: Optional[str] = None):
        super().__init__(message or f"Unexpected '{token}' in {source}", token)
        self.source = source


# ---- Render time ----

class TemplateRenderError(TemplateError):
    """Base class for failures raised while rendering a parsed template."""
    pass


class NotIterableError(TemplateRenderError):
    """A ``foreach`` source value exposes no iteration capability."""

    def __init__(self, value: Any):
        super().__init__(f"Cannot iter on {value!r}")
        self.value = value


class ExpressionRuntimeError(TemplateRenderError):
    """Failure while evaluating a compiled expression."""

    def __init__(self, source: str, cause: BaseException):
        super().__init__(f"Error : {cause} in {source}")
        self.source = source
        self.cause = cause


class MacroCallError(TemplateRenderError):
    """A macro is not registered or raised while being called."""

    def __init__(self, name: str, args: str, cause: BaseException):
        super().__init__(f"Macro call {name}({args}) failed ({cause})")
        self.name = name
        self.args_repr = args
        self.cause = cause


class GlobalsFrozenError(TemplateError):
    """Write attempt on a frozen TemplateGlobals instance."""
    pass


__all__ = [
    "TemplateError",
    "TemplateSyntaxError",
    "MalformedMacroError",
    "UnclosedBlockError",
    "ExpressionSyntaxError",
    "TemplateRenderError",
    "NotIterableError",
    "ExpressionRuntimeError",
    "MacroCallError",
    "GlobalsFrozenError",
]
