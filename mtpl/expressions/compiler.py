"""
Recursive-descent compiler for template expressions.

Builds a tree of Python closures instead of an AST; the closures receive the
render scope when called, so a compiled expression holds no per-render state.

Grammar (no operator precedence, binary operators need parentheses):
expression → primary ("." NAME)*
primary    → atom
           | "(" expression ")"
           | "(" expression OP expression ")"
           | "!" expression
           | "-" expression
atom       → STRING | INT | FLOAT | NAME
OP         → "+" | "-" | "*" | "/" | ">" | "<" | ">=" | "<=" | "==" | "!=" | "&&" | "||"
"""

from __future__ import annotations

import operator
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Set

from .lexer import ExpressionLexer, ExprToken
from ..errors import ExpressionRuntimeError, ExpressionSyntaxError
from ..patterns import EXPR_FLOAT, EXPR_INT
from ..scope import RenderScope, get_field

Evaluator = Callable[[RenderScope], Any]

EOF = "<eof>"


def _and(left: Any, right: Any) -> Any:
    return left and right


def _or(left: Any, right: Any) -> Any:
    return left or right


BINARY_OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
    "==": operator.eq,
    "!=": operator.ne,
    "&&": _and,
    "||": _or,
}


def is_falsy(value: Any) -> bool:
    """Only None and False are falsy in templates; 0 and "" are not."""
    return value is None or value is False


class CompiledExpression:
    """
    Reusable evaluator of one expression.

    Calling it with a RenderScope evaluates the expression against that
    scope. Any exception raised during evaluation is re-raised as
    ExpressionRuntimeError carrying the expression source.
    """

    __slots__ = ("source", "names", "_func")

    def __init__(self, source: str, func: Evaluator, names: FrozenSet[str] = frozenset()):
        self.source = source
        self.names = names
        self._func = func

    def __call__(self, scope: RenderScope) -> Any:
        try:
            return self._func(scope)
        except Exception as e:
            raise ExpressionRuntimeError(self.source, e) from e

    def __repr__(self) -> str:
        return f"CompiledExpression({self.source!r})"


class ExpressionCompiler:
    """
    Expression compiler.

    Turns expression text into a CompiledExpression, raising
    ExpressionSyntaxError on grammar violations.
    """

    def __init__(self):
        self.lexer = ExpressionLexer()
        self._tokens: List[ExprToken] = []
        self._position = 0
        self._source = ""
        self._names: Set[str] = set()

    def compile(self, source: str) -> CompiledExpression:
        """
        Compiles an expression.

        Args:
            source: Expression text, e.g. ``(user.age >= 18)``

        Returns:
            Reusable compiled expression

        Raises:
            ExpressionSyntaxError: On an unexpected token, an unknown
                operator or a premature end of the expression
        """
        self._tokens = self.lexer.tokenize(source)
        self._position = 0
        self._source = source
        self._names = set()

        func = self._parse_expression()

        if not self._is_at_end():
            self._error(self._current_token().value)

        return CompiledExpression(source, func, frozenset(self._names))

    def _parse_expression(self) -> Evaluator:
        return self._parse_path(self._parse_primary())

    def _parse_path(self, target: Evaluator) -> Evaluator:
        """Applies trailing ``.field`` steps."""
        while self._match_operator("."):
            field_token = self._advance()
            if field_token is None:
                self._error(EOF)
            if not field_token.atom:
                self._error(field_token.value)
            target = self._make_field(target, field_token.value.strip())
        return target

    def _parse_primary(self) -> Evaluator:
        token = self._advance()
        if token is None:
            self._error(EOF)

        if token.atom:
            return self._make_const(token.value)

        if token.value == "(":
            return self._parse_group()

        if token.value == "!":
            inner = self._parse_expression()
            return lambda scope: is_falsy(inner(scope))

        if token.value == "-":
            inner = self._parse_expression()
            return lambda scope: -inner(scope)

        self._error(token.value)

    def _parse_group(self) -> Evaluator:
        """Parses what follows ``(``: a grouped expression or a binary operation."""
        left = self._parse_expression()

        op_token = self._advance()
        if op_token is None:
            self._error(EOF)
        if op_token.atom:
            self._error(op_token.value)
        if op_token.value == ")":
            return left

        right = self._parse_expression()

        closing = self._advance()
        if closing is None:
            self._error(EOF)
        if closing.value != ")":
            self._error(closing.value)

        op = BINARY_OPERATORS.get(op_token.value)
        if op is None:
            raise ExpressionSyntaxError(
                op_token.value, self._source,
                f"Unknown operation {op_token.value} in {self._source}",
            )
        return lambda scope: op(left(scope), right(scope))

    def _make_const(self, raw: str) -> Evaluator:
        value = raw.strip()

        if value.startswith('"'):
            text = value[1:-1]
            return lambda scope: text

        if EXPR_INT.match(value):
            number = int(value)
            return lambda scope: number

        if EXPR_FLOAT.match(value):
            real = float(value)
            return lambda scope: real

        if any(ch.isspace() for ch in value):
            self._error(value)

        self._names.add(value)
        return lambda scope: scope.resolve(value)

    @staticmethod
    def _make_field(target: Evaluator, name: str) -> Evaluator:
        return lambda scope: get_field(target(scope), name)

    # Token helpers

    def _current_token(self) -> Optional[ExprToken]:
        if self._position >= len(self._tokens):
            return None
        return self._tokens[self._position]

    def _is_at_end(self) -> bool:
        return self._position >= len(self._tokens)

    def _advance(self) -> Optional[ExprToken]:
        token = self._current_token()
        if token is not None:
            self._position += 1
        return token

    def _match_operator(self, value: str) -> bool:
        token = self._current_token()
        if token is not None and not token.atom and token.value == value:
            self._position += 1
            return True
        return False

    def _error(self, token: str):
        raise ExpressionSyntaxError(token, self._source)


def compile_expression(source: str) -> CompiledExpression:
    """
    Convenience function for compiling one expression.

    Raises:
        ExpressionSyntaxError: On a grammar violation
    """
    return ExpressionCompiler().compile(source)


__all__ = [
    "CompiledExpression",
    "ExpressionCompiler",
    "compile_expression",
    "is_falsy",
    "BINARY_OPERATORS",
]
