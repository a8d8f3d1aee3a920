"""
Template engine with ``::tag::`` expressions, conditionals, loops and
``$$macro(...)`` calls.

Parse once with ``parse(text)``, then render the returned CompiledTemplate
any number of times with ``render(context, macros)``.
"""

from __future__ import annotations

from .errors import (
    ExpressionRuntimeError,
    ExpressionSyntaxError,
    GlobalsFrozenError,
    MacroCallError,
    MalformedMacroError,
    NotIterableError,
    TemplateError,
    TemplateRenderError,
    TemplateSyntaxError,
    UnclosedBlockError,
)
from .globals import GLOBALS, TemplateGlobals
from .scope import Resolvable
from .template import CompiledTemplate, parse

__all__ = [
    "parse",
    "CompiledTemplate",
    "TemplateGlobals",
    "GLOBALS",
    "Resolvable",
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
