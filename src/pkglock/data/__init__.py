"""
pkglock data resource helpers.

Provides access to bundled configuration and schema files using
importlib.resources.
"""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml


def get_data_path(subpackage: str, filename: str = "") -> Path:
    """
    Get absolute path to a data file or directory.

    Example:
        >>> get_data_path("config", "defaults.yaml")
        PosixPath('/path/to/pkglock/data/config/defaults.yaml')
    """
    pkg = resources.files("pkglock.data")
    base = Path(str(pkg / subpackage))
    return base / filename if filename else base


@lru_cache(maxsize=16)
def read_yaml(subpackage: str, filename: str) -> dict[str, Any]:
    """Load and cache a bundled YAML document (must be a mapping)."""
    path = get_data_path(subpackage, filename)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Bundled data file is not a mapping: {path}")
    return data


__all__ = ["get_data_path", "read_yaml"]
