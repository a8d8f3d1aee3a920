"""
Tree-walking renderer for parsed templates.

Executes the AST against a render context, a macro table and globals,
collecting output in a buffer.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional

from .errors import MacroCallError, NotIterableError
from .expressions.compiler import is_falsy
from .globals import GLOBALS, TemplateGlobals
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
from .scope import RenderScope

logger = logging.getLogger(__name__)

Macro = Callable[..., Any]
MacroTable = Mapping[str, Macro]


def stringify(value: Any) -> str:
    """
    Converts a value to its template text.

    None renders as ``null`` and booleans as ``true``/``false``; integral
    floats lose their fractional part; lists and tuples render as ``[a,b]``.
    """
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(stringify(item) for item in value) + "]"
    return str(value)


class TemplateRenderer:
    """
    Renderer of one template execution.

    Holds the mutable per-render state (output buffer, scope); create a new
    instance for every render, including concurrent renders of one AST.
    """

    def __init__(self, macros: Optional[MacroTable] = None, globals: Optional[TemplateGlobals] = None):
        self.macros: MacroTable = macros if macros is not None else {}
        self.globals = globals if globals is not None else GLOBALS
        self._buf: List[str] = []
        self._scope: Optional[RenderScope] = None

    def render(self, node: TemplateNode, context: Any) -> str:
        """
        Renders a template AST.

        Args:
            node: Root of the parsed template
            context: Render context (mapping, Resolvable or plain object)

        Returns:
            Rendered text

        Raises:
            TemplateRenderError: On a failing expression, macro or loop source
        """
        self._scope = RenderScope(context, self.globals)
        self._buf = []
        try:
            self._run(node)
            return "".join(self._buf)
        finally:
            self._buf = []
            self._scope = None

    def resolve(self, name: str) -> Any:
        """Resolves a name in the active render; passed to macros as their first argument."""
        return self._scope.resolve(name)

    def _run(self, node: TemplateNode) -> None:
        scope = self._scope

        if isinstance(node, TextNode):
            self._buf.append(node.text)

        elif isinstance(node, VarNode):
            self._buf.append(stringify(scope.resolve(node.name)))

        elif isinstance(node, ExprNode):
            self._buf.append(stringify(node.expr(scope)))

        elif isinstance(node, IfNode):
            if is_falsy(node.condition(scope)):
                if node.else_node is not None:
                    self._run(node.else_node)
            else:
                self._run(node.then_node)

        elif isinstance(node, BlockNode):
            for child in node.children:
                self._run(child)

        elif isinstance(node, ForeachNode):
            self._run_foreach(node)

        elif isinstance(node, MacroNode):
            self._run_macro(node)

        else:
            raise TypeError(f"Unknown template node type: {type(node).__name__}")

    def _run_foreach(self, node: ForeachNode) -> None:
        scope = self._scope
        value = node.source(scope)

        # Strings are not sequences of contexts
        if isinstance(value, (str, bytes)):
            raise NotIterableError(value)
        try:
            items = iter(value)
        except TypeError:
            raise NotIterableError(value) from None

        scope.push()
        try:
            for item in items:
                scope.context = item
                self._run(node.body)
        finally:
            scope.pop()

    def _run_macro(self, node: MacroNode) -> None:
        macro = self.macros.get(node.name)

        params: List[Any] = [self.resolve]
        for arg in node.args:
            if isinstance(arg, VarNode):
                params.append(self._scope.resolve(arg.name))
            else:
                params.append(self._render_isolated(arg))

        try:
            if macro is None:
                raise KeyError(f"macro '{node.name}' is not registered")
            result = macro(*params)
        except Exception as e:
            raise MacroCallError(node.name, _join_params(params), e) from e

        self._buf.append(stringify(result))

    def _render_isolated(self, node: TemplateNode) -> str:
        outer = self._buf
        self._buf = []
        try:
            self._run(node)
            return "".join(self._buf)
        finally:
            self._buf = outer


def _join_params(params: List[Any]) -> str:
    """Best-effort text of macro arguments for error messages."""
    try:
        return ",".join(stringify(p) for p in params)
    except Exception:
        return "???"


__all__ = ["TemplateRenderer", "Macro", "MacroTable", "stringify"]
