"""pkglock core: spec expansion, layer store and lock artifacts."""
from __future__ import annotations

from pkglock.core.exceptions import (
    FieldCollisionError,
    LayerRenderError,
    MissingNameError,
    MissingPackageError,
    PipelineError,
    PkglockError,
    SpecValidationError,
    StoreWriteError,
    TemplateError,
)
from pkglock.core.layers import LayerArtifact, LayerStore
from pkglock.core.pipeline import PackagePipeline, PipelineResult, ResolvedPackage
from pkglock.core.spec import LayerDef, Spec, load_spec, parse_spec

__all__ = [
    "FieldCollisionError",
    "LayerArtifact",
    "LayerDef",
    "LayerRenderError",
    "LayerStore",
    "MissingNameError",
    "MissingPackageError",
    "PackagePipeline",
    "PipelineError",
    "PipelineResult",
    "PkglockError",
    "ResolvedPackage",
    "Spec",
    "SpecValidationError",
    "StoreWriteError",
    "TemplateError",
    "load_spec",
    "parse_spec",
]
