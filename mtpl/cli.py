from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .analysis import summarize
from .config import DEFAULT_CFG_FILE, ConfigError, EngineConfig, load_config, load_context
from .errors import TemplateError
from .jsonic import dumps as jdumps
from .loader import TemplateLoader
from .template import CompiledTemplate, parse
from .version import tool_version

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="mtpl",
        description="Template engine with ::tags:: and $$macro() calls",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument("--verbose", action="store_true", help="debug logging to stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument(
            "template",
            help="template file, or a template name under templates_dir of the config",
        )
        sp.add_argument(
            "--config",
            metavar="FILE",
            help=f"engine config (default: ./{DEFAULT_CFG_FILE} if present)",
        )

    sp_render = sub.add_parser("render", help="render a template to stdout")
    add_common(sp_render)
    sp_render.add_argument(
        "--data",
        metavar="FILE",
        help="render context as a YAML or JSON mapping",
    )
    sp_render.add_argument(
        "--set",
        action="append",
        metavar="KEY=VALUE",
        help="context value (string); may be repeated, overrides --data",
    )

    sp_check = sub.add_parser("check", help="parse only and print a JSON summary")
    add_common(sp_check)

    return p


def _parse_assignments(items: Optional[List[str]]) -> Dict[str, str]:
    """Parses 'key=value' pairs into a dict."""
    result: Dict[str, str] = {}
    if not items:
        return result

    for item in items:
        if "=" not in item:
            raise ValueError(f"Invalid --set format '{item}'. Expected 'key=value'")
        key, value = item.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError(f"Invalid --set format '{item}'. Empty key")
        result[key] = value
    return result


def _load_engine_config(config_arg: Optional[str]) -> EngineConfig:
    if config_arg:
        path = Path(config_arg)
        if not path.is_file():
            raise ConfigError("config file not found", str(path))
        return load_config(path)
    return load_config(Path.cwd() / DEFAULT_CFG_FILE)


def _load_template(target: str, cfg: EngineConfig) -> CompiledTemplate:
    path = Path(target)
    if path.is_file():
        return parse(path.read_text(encoding="utf-8"))
    loader = TemplateLoader(cfg.templates_dir or Path.cwd())
    return loader.load(target)


def _render(ns: argparse.Namespace) -> str:
    cfg = _load_engine_config(ns.config)
    template = _load_template(ns.template, cfg)

    context: Dict[str, Any] = {}
    if ns.data:
        context.update(load_context(Path(ns.data)))
    context.update(_parse_assignments(ns.set))

    return template.render(context, cfg.load_macros(), cfg.build_globals())


def _check(ns: argparse.Namespace) -> Dict[str, Any]:
    cfg = _load_engine_config(ns.config)
    template = _load_template(ns.template, cfg)
    return {"ok": True, **summarize(template.root).to_dict()}


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if ns.cmd == "render":
            sys.stdout.write(_render(ns))
            return 0

        if ns.cmd == "check":
            sys.stdout.write(jdumps(_check(ns)))
            return 0

    except TemplateError as e:
        logger.debug("Command %s failed", ns.cmd, exc_info=True)
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2
    except ValueError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
