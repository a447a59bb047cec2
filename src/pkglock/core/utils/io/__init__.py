"""I/O utilities for pkglock.

This package provides safe, atomic file operations:
- Core: atomic writes and directory management
- YAML: read/write with locking and deterministic dumps
- Locking: file locking primitives
"""
from __future__ import annotations

from .core import (
    PathLike,
    atomic_write,
    ensure_directory,
    ensure_parent_dir,
    write_text,
)
from .locking import (
    LockTimeoutError,
    acquire_file_lock,
)
from .yaml import (
    dump_yaml_string,
    iter_yaml_files,
    parse_yaml_string,
    read_yaml,
    write_yaml,
)

__all__ = [
    # core
    "PathLike",
    "ensure_parent_dir",
    "ensure_directory",
    "atomic_write",
    "write_text",
    # yaml
    "read_yaml",
    "write_yaml",
    "parse_yaml_string",
    "dump_yaml_string",
    "iter_yaml_files",
    # locking
    "acquire_file_lock",
    "LockTimeoutError",
]
