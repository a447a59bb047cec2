"""Per-package resolution: defaults, context, assembly and identity."""
from __future__ import annotations

from .assembler import assemble_package, check_reserved_fields
from .context import build_package_context, merge_package_override
from .defaults import resolve_effective_defaults
from .fields import (
    BASE_LAYER_CHECKSUM,
    BASE_LAYER_ID,
    LAYER_CHECKSUMS,
    NO_BASE_LAYER,
    PACKAGE_SPEC_ID,
    RESERVED_FIELDS,
)
from .identity import identify_package, package_spec_id

__all__ = [
    "BASE_LAYER_CHECKSUM",
    "BASE_LAYER_ID",
    "LAYER_CHECKSUMS",
    "NO_BASE_LAYER",
    "PACKAGE_SPEC_ID",
    "RESERVED_FIELDS",
    "assemble_package",
    "build_package_context",
    "check_reserved_fields",
    "identify_package",
    "merge_package_override",
    "package_spec_id",
    "resolve_effective_defaults",
]
