"""
Static analysis of parsed templates.

Collects the names a template refers to without rendering it; used by the
``check`` CLI command.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Set

from .nodes import (
    BlockNode,
    ExprNode,
    ForeachNode,
    IfNode,
    MacroNode,
    TemplateNode,
    VarNode,
)


@dataclass
class TemplateSummary:
    node_count: int = 0
    variables: Set[str] = field(default_factory=set)
    macros: Set[str] = field(default_factory=set)

    def to_dict(self) -> dict:
        return {
            "nodes": self.node_count,
            "variables": sorted(self.variables),
            "macros": sorted(self.macros),
        }


def iter_nodes(node: TemplateNode) -> Iterator[TemplateNode]:
    """Depth-first pre-order traversal of an AST."""
    yield node
    if isinstance(node, BlockNode):
        for child in node.children:
            yield from iter_nodes(child)
    elif isinstance(node, IfNode):
        yield from iter_nodes(node.then_node)
        if node.else_node is not None:
            yield from iter_nodes(node.else_node)
    elif isinstance(node, ForeachNode):
        yield from iter_nodes(node.body)
    elif isinstance(node, MacroNode):
        for arg in node.args:
            yield from iter_nodes(arg)


def summarize(root: TemplateNode) -> TemplateSummary:
    summary = TemplateSummary()
    for node in iter_nodes(root):
        if isinstance(node, BlockNode):
            continue
        summary.node_count += 1
        if isinstance(node, VarNode):
            summary.variables.add(node.name)
        elif isinstance(node, ExprNode):
            summary.variables.update(node.expr.names)
        elif isinstance(node, IfNode):
            summary.variables.update(node.condition.names)
        elif isinstance(node, ForeachNode):
            summary.variables.update(node.source.names)
        elif isinstance(node, MacroNode):
            summary.macros.add(node.name)
    return summary


__all__ = ["TemplateSummary", "iter_nodes", "summarize"]
