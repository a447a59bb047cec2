"""
pkglock CLI package.

Provides the command-line interface with auto-discovery of commands:
top-level commands live in ``cli/commands/``, grouped commands in
subfolders such as ``cli/debug/``.

Framework utilities for building CLI commands:
- _output: Output formatting (YAML/JSON modes)
- _args: Common argument registration helpers
- _utils: Settings, spec and pipeline loading
"""
from ._args import (
    add_index_flag,
    add_json_flag,
    add_output_flag,
    add_repo_root_flag,
    add_spec_flag,
    add_standard_flags,
)
from ._output import OutputFormatter, print_error

__all__ = [
    "OutputFormatter",
    "print_error",
    "add_index_flag",
    "add_json_flag",
    "add_output_flag",
    "add_repo_root_flag",
    "add_spec_flag",
    "add_standard_flags",
]
