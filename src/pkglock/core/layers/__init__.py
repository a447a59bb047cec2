"""Layer rendering and the content-addressed layer store."""
from __future__ import annotations

from .builder import LayerBuilder
from .models import LayerArtifact, LayerEntry
from .store import DOCKERFILE_SUFFIX, METADATA_SUFFIX, LayerStore

__all__ = [
    "DOCKERFILE_SUFFIX",
    "METADATA_SUFFIX",
    "LayerArtifact",
    "LayerBuilder",
    "LayerEntry",
    "LayerStore",
]
