"""
Public embedding API: parse once, render many times.
"""

from __future__ import annotations

from typing import Any, Optional

from .globals import TemplateGlobals
from .nodes import TemplateNode
from .parser import TemplateParser
from .renderer import MacroTable, TemplateRenderer


class CompiledTemplate:
    """
    A parsed template.

    Owns an immutable AST; ``render`` can be called any number of times,
    from several threads if needed, since every call gets its own renderer.
    """

    def __init__(self, source: str, root: TemplateNode):
        self.source = source
        self.root = root

    def render(
        self,
        context: Any = None,
        macros: Optional[MacroTable] = None,
        globals: Optional[TemplateGlobals] = None,
    ) -> str:
        """
        Renders the template.

        Args:
            context: Data for name resolution (mapping, Resolvable or object)
            macros: Macro name -> callable; defaults to an empty table
            globals: Fallback values; defaults to the process-wide GLOBALS

        Returns:
            Rendered text

        Raises:
            TemplateRenderError: On render failures; no partial output is returned
        """
        renderer = TemplateRenderer(macros, globals)
        return renderer.render(self.root, {} if context is None else context)

    def __repr__(self) -> str:
        preview = self.source if len(self.source) <= 40 else self.source[:37] + "..."
        return f"CompiledTemplate({preview!r})"


def parse(text: str) -> CompiledTemplate:
    """
    Parses template text.

    Raises:
        TemplateSyntaxError: On malformed input
    """
    return CompiledTemplate(text, TemplateParser().parse(text))


__all__ = ["CompiledTemplate", "parse"]
