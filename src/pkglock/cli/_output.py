"""Unified CLI output formatting.

Data goes to stdout as YAML (the format of the spec and lock files) or, with
``--json``, as JSON. Errors always go to stderr.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Iterable, Optional

from pkglock.core.exceptions import PkglockError
from pkglock.core.utils.io import dump_yaml_string


class OutputFormatter:
    """Output formatter for CLI commands."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        self.json_mode = json_mode
        self.indent = indent

    def data(self, payload: Any) -> None:
        """Print structured data as YAML or JSON."""
        if self.json_mode:
            print(json.dumps(payload, indent=self.indent, sort_keys=True, ensure_ascii=False))
        else:
            sys.stdout.write(dump_yaml_string(payload))

    def text(self, message: str) -> None:
        print(message)

    def success(self, data: dict, message: str) -> None:
        """Print a status payload in JSON mode, ``message`` otherwise."""
        if self.json_mode:
            print(json.dumps({"status": "success", **data}, indent=self.indent, default=str))
        else:
            print(message)

    def error(self, error: Exception, message: Optional[str] = None) -> None:
        msg = message or str(error)
        if self.json_mode:
            if isinstance(error, PkglockError):
                payload = {"error": error.to_json_error()}
            else:
                payload = {"error": {"message": msg, "code": error.__class__.__name__}}
            print(json.dumps(payload, indent=self.indent, default=str), file=sys.stderr)
        else:
            print(f"Error: {msg}", file=sys.stderr)

    def errors(self, errors: Iterable[Exception]) -> None:
        for err in errors:
            self.error(err)


def print_error(message: str) -> None:
    """Print error message to stderr."""
    print(f"Error: {message}", file=sys.stderr)


__all__ = ["OutputFormatter", "print_error"]
