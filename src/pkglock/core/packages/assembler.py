"""Merge a raw context with rendered template values."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from pkglock.core.exceptions import FieldCollisionError

from .fields import RESERVED_FIELDS


def check_reserved_fields(fields: Mapping[str, Any], *, package_index: Optional[int] = None) -> None:
    """Reject defaults or overrides that use a pipeline-owned field name."""
    clashes = sorted(RESERVED_FIELDS.intersection(fields))
    if clashes:
        raise FieldCollisionError(
            clashes[0],
            package_index=package_index,
            reason="name is reserved for generated package fields",
        )


def assemble_package(
    context: Mapping[str, Any],
    rendered: Mapping[str, str],
    *,
    package_index: Optional[int] = None,
) -> Dict[str, Any]:
    """Return the package record: ``context`` plus each rendered template value.

    Raises:
        FieldCollisionError: If a template name is already a context key or is
            reserved. Collisions are authoring mistakes and are never merged.
    """
    check_reserved_fields(context, package_index=package_index)
    check_reserved_fields(rendered, package_index=package_index)

    record: Dict[str, Any] = dict(context)
    for name, value in rendered.items():
        if name in record:
            raise FieldCollisionError(name, package_index=package_index)
        record[name] = value
    return record


__all__ = ["assemble_package", "check_reserved_fields"]
