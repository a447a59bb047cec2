"""Build the raw variable context of one package."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Sequence

from pkglock.core.exceptions import MissingPackageError


def merge_package_override(
    effective_defaults: Mapping[str, Any],
    override: Mapping[str, Any],
) -> Dict[str, Any]:
    """Shallow merge: each override key replaces the default of the same name."""
    return {**effective_defaults, **override}


def build_package_context(
    effective_defaults: Mapping[str, Any],
    packages: Sequence[Mapping[str, Any]],
    index: int,
) -> Dict[str, Any]:
    """Return the raw context of package ``index`` (1-based).

    Raises:
        MissingPackageError: If ``index`` is outside ``1..len(packages)``.
    """
    if not 1 <= index <= len(packages):
        raise MissingPackageError(index, len(packages))
    return merge_package_override(effective_defaults, packages[index - 1] or {})


__all__ = ["build_package_context", "merge_package_override"]
