"""
File-based template loading with a parse cache.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .errors import TemplateError
from .globals import TemplateGlobals
from .renderer import MacroTable
from .template import CompiledTemplate, parse

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".tpl"


class TemplateNotFoundError(TemplateError):
    """No template file matches a requested name."""

    def __init__(self, name: str, root: Path):
        super().__init__(f"Template not found: {name} (in {root})")
        self.name = name
        self.root = root


class TemplateLoader:
    """
    Loads templates from a directory.

    A name resolves to ``<root>/<name>`` or ``<root>/<name>.tpl``. Parsed
    templates are cached per file and reparsed when the file's modification
    time changes.
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self._cache: Dict[Path, Tuple[float, CompiledTemplate]] = {}

    def find(self, name: str) -> Path:
        base = self.root.resolve()
        for candidate in (base / name, base / f"{name}{TEMPLATE_SUFFIX}"):
            path = candidate.resolve()
            # Names must not escape the template directory
            if path.is_file() and path.is_relative_to(base):
                return path
        raise TemplateNotFoundError(name, self.root)

    def load(self, name: str) -> CompiledTemplate:
        """
        Returns the compiled template for ``name``.

        Raises:
            TemplateNotFoundError: When no file matches
            TemplateSyntaxError: When the file does not parse
        """
        path = self.find(name)
        mtime = path.stat().st_mtime

        cached = self._cache.get(path)
        if cached is not None and cached[0] == mtime:
            logger.debug("Template cache hit: %s", path)
            return cached[1]

        template = parse(path.read_text(encoding="utf-8"))
        self._cache[path] = (mtime, template)
        logger.debug("Template parsed and cached: %s", path)
        return template

    def render(
        self,
        name: str,
        context: Any = None,
        macros: Optional[MacroTable] = None,
        globals: Optional[TemplateGlobals] = None,
    ) -> str:
        return self.load(name).render(context, macros, globals)

    def clear_cache(self) -> None:
        self._cache.clear()


__all__ = ["TemplateLoader", "TemplateNotFoundError", "TEMPLATE_SUFFIX"]
