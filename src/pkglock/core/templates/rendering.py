"""Template rendering seam.

Templates are Jinja2 source evaluated with every context key bound as a
top-level variable. Undefined references are errors (``StrictUndefined``), so
a typo in a spec fails loudly instead of rendering an empty string.

Go-template style field references written for gomplate (``{{ .COLOR }}``)
are accepted: :class:`DotReferenceExtension` rewrites ``.NAME`` to ``NAME``
inside tags before Jinja2 compiles the source.
"""
from __future__ import annotations

import re
import threading
from typing import Any, Dict, Mapping, Optional, Tuple

import jinja2
from jinja2.ext import Extension

from pkglock.core.exceptions import TemplateError

_TAG_RE = re.compile(r"\{\{.*?\}\}|\{%.*?%\}", re.DOTALL)
_DOT_REF_RE = re.compile(
    r"('(?:[^'\\]|\\.)*'|\"(?:[^\"\\]|\\.)*\")"  # string literal, kept as is
    r"|(?<![\w\)\]\.'\"])\.([A-Za-z_]\w*)"
)


def _rewrite_tag(match: "re.Match[str]") -> str:
    return _DOT_REF_RE.sub(lambda m: m.group(1) or m.group(2), match.group(0))


class DotReferenceExtension(Extension):
    """Rewrite leading-dot field references inside template tags."""

    def preprocess(self, source: str, name: Optional[str], filename: Optional[str] = None) -> str:
        return _TAG_RE.sub(_rewrite_tag, source)


def _diagnostic(exc: Exception) -> str:
    if isinstance(exc, jinja2.TemplateSyntaxError) and exc.lineno:
        return f"{exc.message} (line {exc.lineno})"
    return str(exc) or exc.__class__.__name__


class TemplateRenderer:
    """Render named templates against a variable context.

    Compiled templates are cached by ``(name, source)``; rendering itself is
    thread-safe, so one renderer is shared by every package worker.
    """

    def __init__(self, *, dot_references: bool = True) -> None:
        extensions = [DotReferenceExtension] if dot_references else []
        self._env = jinja2.Environment(
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
            extensions=extensions,
        )
        self._compiled: Dict[Tuple[str, str], jinja2.Template] = {}
        self._lock = threading.Lock()

    def compile(self, name: str, source: str) -> jinja2.Template:
        """Compile ``source``, raising :class:`TemplateError` on syntax errors."""
        key = (name, source)
        with self._lock:
            cached = self._compiled.get(key)
        if cached is not None:
            return cached
        try:
            template = self._env.from_string(source)
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateError(name, _diagnostic(exc)) from exc
        with self._lock:
            return self._compiled.setdefault(key, template)

    def render(
        self,
        name: str,
        source: str,
        context: Mapping[str, Any],
        *,
        strip: bool = True,
    ) -> str:
        """Render ``source`` with ``context`` keys as top-level variables.

        Args:
            name: Template name, used in error reports.
            source: Template text.
            context: Variables visible to the template.
            strip: Trim surrounding whitespace from the result.

        Raises:
            TemplateError: On syntax errors, undefined variables, or evaluation errors.
        """
        template = self.compile(name, source)
        try:
            rendered = template.render(dict(context))
        except jinja2.TemplateError as exc:
            raise TemplateError(name, _diagnostic(exc)) from exc
        except (TypeError, ValueError, ArithmeticError, LookupError) as exc:
            raise TemplateError(name, f"{exc.__class__.__name__}: {exc}") from exc
        return rendered.strip() if strip else rendered

    def render_all(
        self,
        templates: Mapping[str, str],
        context: Mapping[str, Any],
        *,
        package_index: Optional[int] = None,
    ) -> Dict[str, str]:
        """Render every named template against the same context.

        Templates see only ``context``, never each other's output.
        """
        rendered: Dict[str, str] = {}
        for name, source in templates.items():
            try:
                rendered[name] = self.render(name, source, context)
            except TemplateError as exc:
                if package_index is None:
                    raise
                raise exc.for_package(package_index) from exc.__cause__
        return rendered
