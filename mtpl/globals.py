"""
Globals: the last-resort name resolution target.

Lifecycle: populate during initialization, optionally freeze, then treat as
read-only while templates render. Concurrent writers must synchronize
externally.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, Mapping, Optional

from .errors import GlobalsFrozenError

logger = logging.getLogger(__name__)


class TemplateGlobals:
    """
    Key/value store consulted after the current context and the context stack.

    Implements the Resolvable protocol (``has``/``get``).
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values: Dict[str, Any] = dict(values or {})
        self._frozen = False

    def has(self, key: str) -> bool:
        return key in self._values

    def get(self, key: str) -> Any:
        return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        self._ensure_writable()
        if key in self._values:
            logger.debug("Overriding global '%s'", key)
        self._values[key] = value

    def update(self, values: Mapping[str, Any]) -> None:
        self._ensure_writable()
        self._values.update(values)

    def clear(self) -> None:
        self._ensure_writable()
        self._values.clear()

    def freeze(self) -> "TemplateGlobals":
        """Makes the instance read-only. Returns self for chaining."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def _ensure_writable(self) -> None:
        if self._frozen:
            raise GlobalsFrozenError("Template globals are frozen")

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "mutable"
        return f"TemplateGlobals({len(self._values)} keys, {state})"


# Process-wide default used when a render is not given its own instance
GLOBALS = TemplateGlobals()


__all__ = ["TemplateGlobals", "GLOBALS"]
