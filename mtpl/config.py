from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import TemplateError
from .globals import TemplateGlobals
from .renderer import Macro

SCHEMA_VERSION = 1
DEFAULT_CFG_FILE = "mtpl.yaml"

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------- #
# YAML loader
# --------------------------------------------------------------------------- #
_yaml = YAML(typ="safe")


class ConfigError(TemplateError):
    """Invalid configuration or context file, with the offending key path."""

    def __init__(self, message: str, path: str = ""):
        self.path = path
        prefix = f"{path}: " if path else ""
        super().__init__(prefix + message)


@dataclass
class EngineConfig:
    """
    Embedder configuration.

    globals:       values merged into the TemplateGlobals of renders
    macros:        macro name -> "package.module:callable" reference
    templates_dir: directory of template files for the loader
    """
    schema_version: int = SCHEMA_VERSION
    globals: Dict[str, Any] = field(default_factory=dict)
    macros: Dict[str, str] = field(default_factory=dict)
    templates_dir: Optional[Path] = None

    def build_globals(self, base: Optional[TemplateGlobals] = None) -> TemplateGlobals:
        """Returns a frozen TemplateGlobals holding ``base`` values overlaid with configured ones."""
        values = base.as_dict() if base is not None else {}
        values.update(self.globals)
        return TemplateGlobals(values).freeze()

    def load_macros(self) -> Dict[str, Macro]:
        """Imports every configured macro reference."""
        return {name: import_macro(ref, f"macros.{name}") for name, ref in self.macros.items()}


# --------------------------------------------------------------------------- #
# HELPERS
# --------------------------------------------------------------------------- #
def import_macro(ref: str, path: str = "") -> Macro:
    """Resolves ``package.module:attr`` (or ``package.module.attr``) to a callable."""
    module_name, sep, attr = ref.partition(":")
    if not sep:
        module_name, _, attr = ref.rpartition(".")
    if not module_name or not attr:
        raise ConfigError(f"invalid macro reference '{ref}', expected 'module:callable'", path)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"cannot import module '{module_name}': {e}", path) from e

    target: Any = module
    for part in attr.split("."):
        if not hasattr(target, part):
            raise ConfigError(f"'{module_name}' has no attribute '{attr}'", path)
        target = getattr(target, part)

    if not callable(target):
        raise ConfigError(f"'{ref}' is not callable", path)
    return target


def _read_yaml(path: Path) -> Any:
    try:
        return _yaml.load(path.read_text(encoding="utf-8"))
    except YAMLError as e:
        raise ConfigError(f"invalid YAML: {e}", str(path)) from e


# --------------------------------------------------------------------------- #
# PUBLIC API
# --------------------------------------------------------------------------- #
def load_config(path: Path) -> EngineConfig:
    """
    Load mtpl.yaml.

    • If the file does not exist, return defaults.
    • A missing schema_version means the current version.
    • Every section is validated; errors name the key path.
    """
    if not path.exists():
        logger.debug("Config %s not found, using defaults", path)
        return EngineConfig()

    raw = _read_yaml(path) or {}
    if not isinstance(raw, dict):
        raise ConfigError("config must be a mapping with keys: schema_version?, globals?, macros?, templates_dir?")

    schema_version = raw.get("schema_version", SCHEMA_VERSION)
    if schema_version != SCHEMA_VERSION:
        raise ConfigError(
            f"unsupported config schema {schema_version} (expected {SCHEMA_VERSION})",
            "schema_version",
        )

    unknown = set(raw) - {"schema_version", "globals", "macros", "templates_dir"}
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(sorted(map(str, unknown))))

    globals_node = raw.get("globals") or {}
    if not isinstance(globals_node, dict):
        raise ConfigError("must be a mapping", "globals")

    macros_node = raw.get("macros") or {}
    if not isinstance(macros_node, dict):
        raise ConfigError("must be a mapping", "macros")
    macros: Dict[str, str] = {}
    for name, ref in macros_node.items():
        if not isinstance(ref, str):
            raise ConfigError("must be a 'module:callable' string", f"macros.{name}")
        macros[str(name)] = ref

    templates_dir = raw.get("templates_dir")
    if templates_dir is not None:
        if not isinstance(templates_dir, str):
            raise ConfigError("must be a string", "templates_dir")
        templates_dir = (path.parent / templates_dir).resolve()

    return EngineConfig(
        schema_version=SCHEMA_VERSION,
        globals={str(k): v for k, v in globals_node.items()},
        macros=macros,
        templates_dir=templates_dir,
    )


def load_context(path: Path) -> Dict[str, Any]:
    """
    Load a render context from a YAML or JSON file.

    The top level must be a mapping; an empty file is an empty context.
    """
    if not path.is_file():
        raise ConfigError("context file not found", str(path))
    raw = _read_yaml(path)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("context must be a mapping", str(path))
    return raw


__all__ = [
    "EngineConfig",
    "ConfigError",
    "load_config",
    "load_context",
    "import_macro",
    "SCHEMA_VERSION",
    "DEFAULT_CFG_FILE",
]
