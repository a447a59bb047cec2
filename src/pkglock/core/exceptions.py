from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence


class PkglockError(Exception):
    """Base exception for pkglock."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    @property
    def package_index(self) -> Optional[int]:
        return self.context.get("package_index")

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": {k: v for k, v in self.context.items() if k != "cause"},
        }


def _package_prefix(package_index: Optional[int]) -> str:
    return f"package {package_index}: " if package_index is not None else ""


class SpecValidationError(PkglockError, ValueError):
    """Raised when a spec document is structurally invalid."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        errors: Sequence[str] = (),
    ) -> None:
        ctx: Dict[str, Any] = {"errors": list(errors)}
        if path:
            ctx["path"] = path
        PkglockError.__init__(self, message, context=ctx)
        ValueError.__init__(self, message)

    @property
    def errors(self) -> list[str]:
        return list(self.context.get("errors") or [])


class MissingPackageError(PkglockError, IndexError):
    """Raised when a package index is outside ``1..len(packages)``."""

    def __init__(self, package_index: int, package_count: int) -> None:
        message = (
            f"package {package_index} does not exist "
            f"(spec defines {package_count} package(s), indexes start at 1)"
        )
        PkglockError.__init__(
            self,
            message,
            context={"package_index": package_index, "package_count": package_count},
        )
        IndexError.__init__(self, message)


class TemplateError(PkglockError):
    """Raised when a template fails to render."""

    def __init__(
        self,
        template_name: str,
        diagnostic: str,
        *,
        package_index: Optional[int] = None,
    ) -> None:
        ctx: Dict[str, Any] = {"template": template_name, "diagnostic": diagnostic}
        if package_index is not None:
            ctx["package_index"] = package_index
        super().__init__(
            f"{_package_prefix(package_index)}template {template_name!r} failed to render: {diagnostic}",
            context=ctx,
        )

    @property
    def template_name(self) -> str:
        return self.context["template"]

    @property
    def diagnostic(self) -> str:
        return self.context["diagnostic"]

    def for_package(self, package_index: int) -> "TemplateError":
        """Return a copy attributed to ``package_index``."""
        return TemplateError(self.template_name, self.diagnostic, package_index=package_index)


class FieldCollisionError(PkglockError):
    """Raised when a rendered template would overwrite an existing field."""

    def __init__(self, field: str, *, package_index: Optional[int] = None, reason: str = "") -> None:
        ctx: Dict[str, Any] = {"field": field}
        if package_index is not None:
            ctx["package_index"] = package_index
        detail = reason or "template name collides with an existing default or override"
        super().__init__(f"{_package_prefix(package_index)}field {field!r}: {detail}", context=ctx)

    @property
    def field(self) -> str:
        return self.context["field"]


class LayerRenderError(PkglockError):
    """Raised when a layer's Dockerfile template fails to render for a package."""

    def __init__(self, layer_name: str, package_index: Optional[int], cause: TemplateError) -> None:
        super().__init__(
            f"{_package_prefix(package_index)}layer {layer_name!r} failed to render: {cause.diagnostic}",
            context={
                "layer": layer_name,
                "package_index": package_index,
                "diagnostic": cause.diagnostic,
                "cause": cause,
            },
        )

    @property
    def layer_name(self) -> str:
        return self.context["layer"]


class StoreWriteError(PkglockError):
    """Raised when a layer store entry could not be published atomically."""

    def __init__(self, layer_name: str, content_hash: str, path: str, reason: str) -> None:
        super().__init__(
            f"could not publish layer {layer_name}_{content_hash} to {path}: {reason}",
            context={"layer": layer_name, "content_hash": content_hash, "path": path},
        )


class MissingNameError(PkglockError, LookupError):
    """Raised when a package record has no canonical name field."""

    def __init__(self, field: str, *, package_index: Optional[int] = None) -> None:
        ctx: Dict[str, Any] = {"field": field}
        if package_index is not None:
            ctx["package_index"] = package_index
        message = f"{_package_prefix(package_index)}record has no {field} field"
        PkglockError.__init__(self, message, context=ctx)
        LookupError.__init__(self, message)


class CommandFieldError(PkglockError, ValueError):
    """Raised when a record field cannot be written into a build command."""

    def __init__(self, field: str, reason: str, *, package_index: Optional[int] = None) -> None:
        ctx: Dict[str, Any] = {"field": field, "reason": reason}
        if package_index is not None:
            ctx["package_index"] = package_index
        message = f"{_package_prefix(package_index)}field {field!r} {reason}"
        PkglockError.__init__(self, message, context=ctx)
        ValueError.__init__(self, message)


class PipelineError(PkglockError):
    """Raised when one or more packages failed to resolve."""

    def __init__(self, failures: Sequence[Any]) -> None:
        self.failures = list(failures)
        lines = [str(f.error) for f in self.failures]
        super().__init__(
            f"{len(self.failures)} package(s) failed:\n  " + "\n  ".join(lines),
            context={"package_indexes": [f.index for f in self.failures]},
        )


__all__ = [
    "PkglockError",
    "SpecValidationError",
    "MissingPackageError",
    "TemplateError",
    "FieldCollisionError",
    "LayerRenderError",
    "StoreWriteError",
    "MissingNameError",
    "CommandFieldError",
    "PipelineError",
]
