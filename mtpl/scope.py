"""
Name resolution for template rendering.

A RenderScope holds the current context, the stack of outer contexts saved
by enclosing loops and the globals. Lookups use explicit presence checks on
whatever the context happens to be: a mapping, a Resolvable object or a
plain object with attributes.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, List, Protocol, runtime_checkable

from .globals import TemplateGlobals

CURRENT = "__current__"


@runtime_checkable
class Resolvable(Protocol):
    """
    Context protocol for objects that control their own name lookup.

    ``has`` decides presence, ``get`` returns the value of a present key.
    """

    def has(self, key: str) -> bool:
        ...

    def get(self, key: str) -> Any:
        ...


def has_key(context: Any, key: str) -> bool:
    """Checks whether a context value defines ``key``."""
    if context is None:
        return False
    if isinstance(context, Mapping):
        return key in context
    if isinstance(context, Resolvable):
        return context.has(key)
    if isinstance(context, (str, bytes, int, float, bool)):
        return False
    return hasattr(context, key)


def get_key(context: Any, key: str) -> Any:
    """Returns ``key`` of a context value; caller must check presence first."""
    if isinstance(context, Mapping):
        return context[key]
    if isinstance(context, Resolvable):
        return context.get(key)
    return getattr(context, key)


def get_field(value: Any, name: str) -> Any:
    """
    Field-path step (``value.name``) on an already resolved value.

    An absent value or a missing field yields None.
    """
    if not has_key(value, name):
        return None
    return get_key(value, name)


class RenderScope:
    """
    Per-render name resolution state.

    Not thread-safe; every render gets its own instance.
    """

    def __init__(self, context: Any, globals: TemplateGlobals):
        self.context = context
        self.stack: List[Any] = []
        self.globals = globals

    def resolve(self, name: str) -> Any:
        """
        Resolves a name.

        Order: current context, outer contexts (innermost first),
        ``__current__`` (the current context itself), globals.
        Absence yields None.
        """
        if has_key(self.context, name):
            return get_key(self.context, name)

        for ctx in reversed(self.stack):
            if has_key(ctx, name):
                return get_key(ctx, name)

        if name == CURRENT:
            return self.context

        return self.globals.get(name)

    def push(self) -> None:
        """Saves the current context on the stack of outer contexts."""
        self.stack.append(self.context)

    def pop(self) -> None:
        """Restores the context saved by the matching ``push``."""
        self.context = self.stack.pop()


__all__ = ["Resolvable", "RenderScope", "has_key", "get_key", "get_field", "CURRENT"]
