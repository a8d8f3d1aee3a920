import pytest

from mtpl import GLOBALS

# Export helpers for use in other tests
from tests.infrastructure import write, run_cli, jload, render, render_with


@pytest.fixture(autouse=True)
def _isolate_globals():
    """Process-wide globals are restored after every test."""
    saved = GLOBALS.as_dict()
    yield
    GLOBALS._frozen = False
    GLOBALS.clear()
    GLOBALS.update(saved)


@pytest.fixture
def macros():
    """Macro table used across render tests."""
    return {
        "upper": lambda resolve, s: str(s).upper(),
        "join": lambda resolve, *parts: "-".join(str(p) for p in parts),
        "lookup": lambda resolve, name: resolve(name),
    }


__all__ = ["write", "run_cli", "jload", "render", "render_with"]
