"""Shared utilities (I/O, merging, hashing, logging)."""
from __future__ import annotations

from .hashing import canonical_json, content_hash
from .merge import deep_merge

__all__ = ["canonical_json", "content_hash", "deep_merge"]
