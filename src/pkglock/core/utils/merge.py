"""Recursive merge used to layer tool settings.

Bundled defaults, project files and ``PKGLOCK_*`` variables are stacked with
:func:`deep_merge`. Package overrides never go through here: they replace
defaults one key at a time (see ``pkglock.core.packages.context``).
"""
from __future__ import annotations

from typing import Any, Dict, Mapping


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Return ``base`` updated by ``override``; neither input is modified.

    Mappings merge key by key at every depth. Any other value in ``override``,
    lists included, replaces the one in ``base``.

        >>> deep_merge({"lock": {"path": "a", "x": 1}}, {"lock": {"path": "b"}})
        {'lock': {'path': 'b', 'x': 1}}
    """
    merged: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


__all__ = ["deep_merge"]
