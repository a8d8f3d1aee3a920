"""
Lexer for template expressions.

Splits an expression body into atomic tokens:
- parentheses
- quoted string literals (no escapes)
- decimal literals
- operator character runs (``+``, ``>=``, ``&&``, ``.``, ...)
- everything else: trimmed pieces classified later as names or numbers
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ..patterns import EXPR_SPLITTER


@dataclass(frozen=True)
class ExprToken:
    """
    Expression token.

    Attributes:
        value: Token text (atoms keep their surrounding whitespace)
        atom: True for operands (names, numbers, strings),
              False for parentheses and operators
    """
    value: str
    atom: bool

    def __repr__(self) -> str:
        kind = "ATOM" if self.atom else "OP"
        return f"ExprToken({kind}, {self.value!r})"


class ExpressionLexer:
    """Tokenizer for the content of expression tags."""

    def tokenize(self, text: str) -> List[ExprToken]:
        tokens: List[ExprToken] = []
        data = text

        while True:
            match = EXPR_SPLITTER.search(data)
            if match is None:
                break
            start, end = match.span()
            if start > 0:
                self._add_piece(tokens, data[:start])

            value = match.group(0)
            is_atom = '"' in value or value[0].isdigit()
            tokens.append(ExprToken(value, is_atom))
            data = data[end:]

        if data:
            self._add_piece(tokens, data)

        return tokens

    @staticmethod
    def _add_piece(tokens: List[ExprToken], piece: str) -> None:
        # Whitespace between operators carries no meaning
        if piece.strip():
            tokens.append(ExprToken(piece, True))


__all__ = ["ExprToken", "ExpressionLexer"]
