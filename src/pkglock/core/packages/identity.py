"""Attach layer checksums and the package spec id to a record."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Sequence

from pkglock.core.utils.hashing import canonical_json, content_hash

from .fields import LAYER_CHECKSUMS, PACKAGE_SPEC_ID


def package_spec_id(record: Mapping[str, Any]) -> str:
    """Hash the canonical serialization of ``record``.

    Key order never matters: the serialization sorts keys at every depth.
    """
    return content_hash(canonical_json(dict(record)))


def identify_package(record: Mapping[str, Any], layer_checksums: Sequence[str]) -> Dict[str, Any]:
    """Return a new record extended with ``LAYER_CHECKSUMS`` and ``PACKAGE_SPEC_ID``."""
    resolved: Dict[str, Any] = dict(record)
    resolved[LAYER_CHECKSUMS] = list(layer_checksums)
    resolved[PACKAGE_SPEC_ID] = package_spec_id(resolved)
    return resolved


__all__ = ["identify_package", "package_spec_id"]
