"""
Expression sub-language of templates: ``(a + b)``, ``!flag``, ``user.name``.
"""

from __future__ import annotations

from .compiler import CompiledExpression, ExpressionCompiler, compile_expression, is_falsy
from .lexer import ExpressionLexer, ExprToken

__all__ = [
    "CompiledExpression",
    "ExpressionCompiler",
    "ExpressionLexer",
    "ExprToken",
    "compile_expression",
    "is_falsy",
]
