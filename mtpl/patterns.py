"""
Regular expressions shared by the template lexer and the expression lexer.
"""

from __future__ import annotations

import re

# Tag marker: ::body:: or the opener of a macro call $$name(
SPLITTER = re.compile(r'(::[A-Za-z0-9_ ()&|!+=/><*."-]+::|\$\$([A-Za-z0-9_-]+)\()')

# Atomic expression tokens: parentheses, quoted strings (with the whitespace
# around them), decimal literals and operator character runs
EXPR_SPLITTER = re.compile(
    r'(\(|\)|[ \r\n\t]*"[^"]*"[ \r\n\t]*|(?<![A-Za-z0-9_])[0-9]+\.[0-9]+(?:[Ee][+-]?[0-9]+)?|[!+=/><*.&|-]+)'
)

# Presence of any operator character turns a tag body into an expression
EXPR_OPERATOR = re.compile(r'[()"!+=/><*.&|-]')

EXPR_INT = re.compile(r'^[0-9]+$')
EXPR_FLOAT = re.compile(r'^[+-]?(?=\d|\.\d)\d*(\.\d*)?([Ee][+-]?\d+)?$')

IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')

# Block terminators recognised by the parser
TERMINATORS = ("end", "else")
ELSEIF_PREFIX = "elseif "
IF_PREFIX = "if "
FOREACH_PREFIX = "foreach "

__all__ = [
    "SPLITTER",
    "EXPR_SPLITTER",
    "EXPR_OPERATOR",
    "EXPR_INT",
    "EXPR_FLOAT",
    "IDENTIFIER",
    "TERMINATORS",
    "ELSEIF_PREFIX",
    "IF_PREFIX",
    "FOREACH_PREFIX",
]
