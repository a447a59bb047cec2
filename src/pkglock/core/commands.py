"""Per-package build commands.

Each command is a comment naming the package followed by one shell line that
passes every record field as a ``NAME=value`` parameter to the build action::

    # Build package: app
    COLOR=blue PACKAGE_NAME=app make build
"""
from __future__ import annotations

import json
import re
import shlex
from typing import Any, Mapping, Optional, Sequence

from pkglock.core.exceptions import CommandFieldError, MissingNameError

DEFAULT_NAME_FIELD = "PACKAGE_NAME"
DEFAULT_BUILD_ACTION = "make build"

_FIELD_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _shell_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def generate_command(
    record: Mapping[str, Any],
    *,
    name_field: str = DEFAULT_NAME_FIELD,
    build_action: str = DEFAULT_BUILD_ACTION,
    package_index: Optional[int] = None,
) -> str:
    """Return the build command for one package record.

    Raises:
        MissingNameError: If ``name_field`` is absent or empty.
        CommandFieldError: If the name spans lines or a field name is not a
            shell variable name.
    """
    name = record.get(name_field)
    if name is None or name == "":
        raise MissingNameError(name_field, package_index=package_index)
    if any(c in str(name) for c in "\r\n"):
        raise CommandFieldError(name_field, "must be a single line", package_index=package_index)
    for key in record:
        if not _FIELD_NAME_RE.fullmatch(key):
            raise CommandFieldError(key, "is not a valid shell variable name", package_index=package_index)

    params = " ".join(
        f"{key}={shlex.quote(_shell_value(record[key]))}" for key in sorted(record)
    )
    return f"# Build package: {name}\n{params} {build_action}\n"


def join_commands(commands: Sequence[str]) -> str:
    """Concatenate per-package commands into one script."""
    return "".join(commands)


__all__ = ["DEFAULT_BUILD_ACTION", "DEFAULT_NAME_FIELD", "generate_command", "join_commands"]
