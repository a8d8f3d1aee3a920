"""
Unified test infrastructure for mtpl.

This package contains common utilities and helpers
used across all tests to avoid code duplication.

Modules:
- file_utils: Utilities for creating files and directories
- cli_utils: Running the CLI in a subprocess and reading its JSON output
- rendering_utils: Parse-and-render shortcuts
"""

from .file_utils import write, write_dedent
from .cli_utils import run_cli, jload
from .rendering_utils import render, render_with

__all__ = ["write", "write_dedent", "run_cli", "jload", "render", "render_with"]
