"""
Lexical analyser for templates.

Splits raw template text into text, tag and macro-call tokens. Tag bodies
and macro arguments are kept verbatim; interpreting them is the parser's job.
"""

from __future__ import annotations

import logging
from typing import List

from .errors import MalformedMacroError
from .patterns import SPLITTER
from .tokens import MacroCallToken, TagToken, TextToken, Token

logger = logging.getLogger(__name__)


class TemplateLexer:
    """
    Template tokenizer.

    Recognises two kinds of markers:
    - ``::body::`` tags (variables, expressions, control keywords)
    - ``$$name(`` macro-call openers, whose argument span is found by
      balancing parentheses
    """

    def tokenize(self, text: str) -> List[Token]:
        """
        Splits template text into tokens.

        Args:
            text: Raw template text

        Returns:
            Ordered list of tokens

        Raises:
            MalformedMacroError: When macro parentheses never balance
        """
        tokens: List[Token] = []
        data = text
        offset = 0

        while True:
            match = SPLITTER.search(data)
            if match is None:
                break

            start, end = match.span()
            if start > 0:
                tokens.append(TextToken(data[:start], offset))

            macro_name = match.group(2)
            if macro_name is None:
                tokens.append(TagToken(data[start + 2:end - 2], offset + start))
                offset += end
                data = data[end:]
                continue

            args_end = self._find_closing_paren(data, end, macro_name, offset + start)
            raw_args = tuple(data[end:args_end].split(","))
            tokens.append(MacroCallToken(macro_name, raw_args, offset + start))

            offset += args_end + 1
            data = data[args_end + 1:]

        if data:
            tokens.append(TextToken(data, offset))

        logger.debug("Tokenized template (%d chars) into %d tokens", len(text), len(tokens))
        return tokens

    @staticmethod
    def _find_closing_paren(data: str, start: int, name: str, position: int) -> int:
        """Returns the index of the ``)`` closing a macro call opened before ``start``."""
        depth = 1
        pos = start
        while pos < len(data):
            char = data[pos]
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth == 0:
                    return pos
            pos += 1
        raise MalformedMacroError(name, position)


def tokenize(text: str) -> List[Token]:
    """
    Convenience function for tokenizing a template.

    Raises:
        MalformedMacroError: On unbalanced macro parentheses
    """
    return TemplateLexer().tokenize(text)


__all__ = ["TemplateLexer", "tokenize"]
