"""Shared schema validation utilities.

pkglock validates structured YAML documents (package specs, tool settings)
using JSON Schema. Schemas are stored as YAML files under
``pkglock/data/schemas/`` and loaded in a single, consistent way.
"""
from __future__ import annotations

from typing import Any, Dict, List

from jsonschema import Draft202012Validator

from pkglock.core.exceptions import SpecValidationError
from pkglock.data import read_yaml


def load_schema(schema_name: str) -> Dict[str, Any]:
    """Load a bundled schema dict.

    Automatically appends ``.yaml`` if no extension is present.

    Args:
        schema_name: Schema file name under the schemas root (e.g. "spec.schema").

    Raises:
        FileNotFoundError: If the schema file doesn't exist.
        ValueError: If the schema is not a YAML mapping.
    """
    lowered = schema_name.lower()
    if not (lowered.endswith(".yaml") or lowered.endswith(".yml")):
        schema_name = f"{schema_name}.yaml"
    return read_yaml("schemas", schema_name)


def validate_payload_safe(payload: Any, schema_name: str) -> List[str]:
    """Validate a payload and return error messages (empty if valid).

    Messages are prefixed with the dotted path of the offending value and
    sorted so that output is stable across runs.
    """
    validator = Draft202012Validator(load_schema(schema_name))

    errors: List[str] = []
    for error in sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.path]):
        if error.path:
            path_str = ".".join(str(p) for p in error.path)
            errors.append(f"{path_str}: {error.message}")
        else:
            errors.append(error.message)
    return errors


def validate_payload(payload: Any, schema_name: str, *, source: str | None = None) -> None:
    """Validate a payload against a bundled JSON schema.

    Raises:
        SpecValidationError: If validation fails; ``errors`` lists every problem.
    """
    errors = validate_payload_safe(payload, schema_name)
    if errors:
        where = f" in {source}" if source else ""
        raise SpecValidationError(
            f"Validation failed against schema '{schema_name}'{where}:\n  " + "\n  ".join(errors),
            path=source,
            errors=errors,
        )


__all__ = [
    "load_schema",
    "validate_payload",
    "validate_payload_safe",
]
