"""Template rendering (Jinja2)."""
from __future__ import annotations

from .rendering import DotReferenceExtension, TemplateRenderer

__all__ = ["DotReferenceExtension", "TemplateRenderer"]
