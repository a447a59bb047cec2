"""Content hashing and canonical serialization."""
from __future__ import annotations

import hashlib
import json
from typing import Any


def content_hash(text: str) -> str:
    """Return the SHA-256 hex digest of ``text`` encoded as UTF-8."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def canonical_json(data: Any) -> str:
    """Serialize ``data`` so that equal mappings always produce equal text.

    Keys are sorted at every depth and separators carry no whitespace.
    """
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


__all__ = ["content_hash", "canonical_json"]
