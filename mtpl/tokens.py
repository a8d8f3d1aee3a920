"""
Template token types.

The lexer produces these once per parse; they are immutable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class TextToken:
    """Literal text between tags."""
    text: str
    position: int = 0   # Offset in the source text

    def __repr__(self) -> str:
        return f"Text({self.text!r})"


@dataclass(frozen=True)
class TagToken:
    """Raw content between ``::`` delimiters, not yet interpreted."""
    body: str
    position: int = 0

    def __repr__(self) -> str:
        return f"Tag({self.body!r})"


@dataclass(frozen=True)
class MacroCallToken:
    """
    ``$$name(arg1,arg2,...)`` call.

    Arguments are the raw strings between top-level commas; they are
    parsed as nested templates by the block parser.
    """
    name: str
    raw_args: Tuple[str, ...]
    position: int = 0

    def __repr__(self) -> str:
        return f"MacroCall({self.name!r}, {list(self.raw_args)!r})"


Token = Union[TextToken, TagToken, MacroCallToken]


def token_text(token: Token) -> str:
    """Source-like representation of a token for error messages."""
    if isinstance(token, TextToken):
        return token.text
    if isinstance(token, TagToken):
        return token.body
    return f"$${token.name}({','.join(token.raw_args)})"


__all__ = ["TextToken", "TagToken", "MacroCallToken", "Token", "token_text"]
