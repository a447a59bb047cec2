"""Field names the pipeline adds to package records and layer contexts."""
from __future__ import annotations

LAYER_CHECKSUMS = "LAYER_CHECKSUMS"
PACKAGE_SPEC_ID = "PACKAGE_SPEC_ID"
BASE_LAYER_ID = "BASE_LAYER_ID"
BASE_LAYER_CHECKSUM = "BASE_LAYER_CHECKSUM"

# Sentinel base of the first layer in every chain.
NO_BASE_LAYER = "none"

RESERVED_FIELDS = frozenset({LAYER_CHECKSUMS, PACKAGE_SPEC_ID, BASE_LAYER_ID, BASE_LAYER_CHECKSUM})
