"""Spec model and loader."""
from __future__ import annotations

from .loader import load_spec, parse_spec, spec_from_mapping
from .model import LayerDef, Spec

__all__ = ["LayerDef", "Spec", "load_spec", "parse_spec", "spec_from_mapping"]
