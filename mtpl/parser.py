"""
Block parser for templates.

Consumes the token queue produced by the lexer and builds the template AST,
handling nested ``if``/``elseif``/``else``/``foreach`` blocks and macro calls
whose arguments are templates themselves.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import replace
from typing import Deque, List, Optional

from .errors import TemplateSyntaxError, UnclosedBlockError
from .expressions.compiler import ExpressionCompiler
from .lexer import TemplateLexer
from .nodes import (
    BlockNode,
    ExprNode,
    ForeachNode,
    IfNode,
    MacroNode,
    TemplateNode,
    TextNode,
    VarNode,
)
from .patterns import (
    ELSEIF_PREFIX,
    EXPR_OPERATOR,
    FOREACH_PREFIX,
    IDENTIFIER,
    IF_PREFIX,
    TERMINATORS,
)
from .tokens import MacroCallToken, TagToken, TextToken, Token, token_text

logger = logging.getLogger(__name__)

TokenQueue = Deque[Token]


def _is_terminator(token: Token) -> bool:
    return isinstance(token, TagToken) and (
        token.body in TERMINATORS or token.body.startswith(ELSEIF_PREFIX)
    )


def _is_tag(token: Optional[Token], body: str) -> bool:
    return isinstance(token, TagToken) and token.body == body


class TemplateParser:
    """
    Recursive parser for templates.

    The token queue is consumed destructively: ``parse_block`` stops at a
    terminator tag and leaves it at the head of the queue for the enclosing
    construct to take.
    """

    def __init__(self):
        self.lexer = TemplateLexer()
        self.expressions = ExpressionCompiler()

    def parse(self, text: str) -> TemplateNode:
        """
        Parses template text into an AST.

        Args:
            text: Template source

        Returns:
            Root node of the AST

        Raises:
            TemplateSyntaxError: On malformed input (including its
                MalformedMacroError, UnclosedBlockError and
                ExpressionSyntaxError subclasses)
        """
        return self._parse_all(self.lexer.tokenize(text))

    def _parse_all(self, token_list: List[Token]) -> TemplateNode:
        tokens: TokenQueue = deque(token_list)
        root = self.parse_block(tokens)
        if tokens:
            unexpected = token_text(tokens[0])
            raise TemplateSyntaxError(f"Unexpected '{unexpected}'", unexpected)
        return root

    def parse_block(self, tokens: TokenQueue) -> TemplateNode:
        """Parses constructs until a terminator tag or the end of tokens."""
        nodes: List[TemplateNode] = []
        while tokens and not _is_terminator(tokens[0]):
            nodes.append(self.parse_node(tokens))

        if len(nodes) == 1:
            return nodes[0]
        return BlockNode(tuple(nodes))

    def parse_node(self, tokens: TokenQueue) -> TemplateNode:
        """Parses exactly one construct from the head of the queue."""
        token = tokens.popleft()

        if isinstance(token, TextToken):
            return TextNode(token.text)

        if isinstance(token, MacroCallToken):
            return self._parse_macro(token)

        body = token.body

        if body.startswith(IF_PREFIX):
            return self._parse_if(body[len(IF_PREFIX):], tokens)

        if body.startswith(FOREACH_PREFIX):
            return self._parse_foreach(body[len(FOREACH_PREFIX):], tokens)

        if EXPR_OPERATOR.search(body):
            return ExprNode(self.expressions.compile(body))

        return VarNode(body)

    def _parse_if(self, condition_text: str, tokens: TokenQueue) -> IfNode:
        condition = self.expressions.compile(condition_text)
        then_node = self.parse_block(tokens)

        if not tokens:
            raise UnclosedBlockError("if")

        terminator = tokens[0]
        if _is_tag(terminator, "end"):
            tokens.popleft()
            return IfNode(condition, then_node, None)

        if _is_tag(terminator, "else"):
            tokens.popleft()
            else_node = self.parse_block(tokens)
            closing = tokens.popleft() if tokens else None
            if not _is_tag(closing, "end"):
                raise UnclosedBlockError("else")
            return IfNode(condition, then_node, else_node)

        # elseif <expr>: reparsed as a nested "if <expr>" which takes the closing end
        tokens[0] = replace(terminator, body=terminator.body[len("else"):])
        else_node = self.parse_node(tokens)
        return IfNode(condition, then_node, else_node)

    def _parse_foreach(self, source_text: str, tokens: TokenQueue) -> ForeachNode:
        source = self.expressions.compile(source_text)
        body = self.parse_block(tokens)

        closing = tokens.popleft() if tokens else None
        if not _is_tag(closing, "end"):
            raise UnclosedBlockError("foreach")
        return ForeachNode(source, body)

    def _parse_macro(self, token: MacroCallToken) -> MacroNode:
        args: List[TemplateNode] = []
        for raw in token.raw_args:
            stripped = raw.strip()
            if IDENTIFIER.match(stripped):
                # Bare identifier argument: pass the resolved value
                args.append(VarNode(stripped))
            else:
                args.append(self._parse_all(self.lexer.tokenize(raw)))
        return MacroNode(token.name, tuple(args))


def parse_template(text: str) -> TemplateNode:
    """
    Convenience function for parsing template text into an AST.

    Raises:
        TemplateSyntaxError: On malformed input
    """
    root = TemplateParser().parse(text)
    logger.debug("Parsed template into %s", type(root).__name__)
    return root


__all__ = ["TemplateParser", "parse_template"]
