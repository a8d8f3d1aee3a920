"""
Template AST nodes.

Immutable node classes, one per template construct. A parsed tree is never
mutated and can be shared across any number of renders.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .expressions.compiler import CompiledExpression


@dataclass(frozen=True)
class TemplateNode:
    """Base class for all template AST nodes."""
    pass


@dataclass(frozen=True)
class TextNode(TemplateNode):
    """Static text, emitted verbatim."""
    text: str


@dataclass(frozen=True)
class VarNode(TemplateNode):
    """``::name::``, a variable looked up and stringified at render time."""
    name: str


@dataclass(frozen=True)
class ExprNode(TemplateNode):
    """``::(a + b)::``, a pre-compiled expression."""
    expr: CompiledExpression


@dataclass(frozen=True)
class IfNode(TemplateNode):
    """
    Conditional block.

    ``elseif`` chains are represented as a nested IfNode in ``else_node``.
    """
    condition: CompiledExpression
    then_node: TemplateNode
    else_node: Optional[TemplateNode] = None


@dataclass(frozen=True)
class BlockNode(TemplateNode):
    """Sequential composition of nodes."""
    children: Tuple[TemplateNode, ...] = ()


@dataclass(frozen=True)
class ForeachNode(TemplateNode):
    """Loop: the body is rendered once per element, each element becoming the current context."""
    source: CompiledExpression
    body: TemplateNode


@dataclass(frozen=True)
class MacroNode(TemplateNode):
    """``$$name(args)``, a call of a render-time registered macro."""
    name: str
    args: Tuple[TemplateNode, ...] = ()


__all__ = [
    "TemplateNode",
    "TextNode",
    "VarNode",
    "ExprNode",
    "IfNode",
    "BlockNode",
    "ForeachNode",
    "MacroNode",
]
