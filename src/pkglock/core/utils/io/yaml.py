"""YAML I/O utilities with atomic writes and advisory locks."""
from __future__ import annotations

import fcntl
from pathlib import Path
from typing import Any

import yaml

from .core import atomic_write


class _LockDumper(yaml.SafeDumper):
    """SafeDumper that emits multiline strings (Dockerfile bodies) as literal blocks."""


def _str_representer(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_LockDumper.add_representer(str, _str_representer)


def read_yaml(path: Path, default: Any = None, raise_on_error: bool = False) -> Any:
    """Read YAML with error handling.

    Returns default if file is missing or invalid, unless raise_on_error is True.

    Args:
        path: YAML file path to read
        default: Value to return if file missing or invalid (default: None)
        raise_on_error: If True, propagate exceptions instead of returning default.

    Returns:
        Any: Parsed YAML data, or default if error
    """
    path = Path(path)
    if not path.exists():
        if raise_on_error:
            raise FileNotFoundError(f"File not found: {path}")
        return default

    try:
        with open(path, "r", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_SH)
            data = yaml.safe_load(f)
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        return data if data is not None else default
    except (OSError, yaml.YAMLError):
        if raise_on_error:
            raise
        return default


def dump_yaml_string(data: Any, sort_keys: bool = True) -> str:
    """Dump data to a YAML string.

    Keys are sorted by default so that equal data always dumps to equal text.
    """
    return yaml.dump(
        data,
        Dumper=_LockDumper,
        default_flow_style=False,
        sort_keys=sort_keys,
        allow_unicode=True,
    )


def write_yaml(path: Path, data: Any) -> None:
    """Atomically write YAML data to ``path`` with sorted keys."""

    def _writer(f) -> None:
        f.write(dump_yaml_string(data))

    atomic_write(Path(path), _writer)


def parse_yaml_string(content: str, default: Any = None) -> Any:
    """Parse YAML from a string, returning ``default`` for empty documents.

    Raises:
        yaml.YAMLError: If ``content`` is not valid YAML
    """
    data = yaml.safe_load(content)
    return data if data is not None else default


def iter_yaml_files(dir_path: Path) -> list[Path]:
    """Return YAML files in ``dir_path`` in deterministic order.

    Includes both ``*.yml`` and ``*.yaml``. When both ``<name>.yaml`` and
    ``<name>.yml`` exist, only the ``.yaml`` path is returned.
    """
    d = Path(dir_path)
    if not d.exists():
        return []
    yml_files = {p.stem: p for p in d.glob("*.yml")}
    yaml_files = {p.stem: p for p in d.glob("*.yaml")}

    out: list[Path] = []
    for stem in sorted(set(yml_files.keys()) | set(yaml_files.keys())):
        preferred = yaml_files.get(stem) or yml_files.get(stem)
        if preferred is not None:
            out.append(preferred)
    return out


__all__ = [
    "read_yaml",
    "write_yaml",
    "parse_yaml_string",
    "dump_yaml_string",
    "iter_yaml_files",
]
