"""Apply environment overrides to spec defaults."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)


def resolve_effective_defaults(
    defaults: Mapping[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Return ``defaults`` with same-named environment variables applied.

    An environment variable replaces a default whenever it is set, even to the
    empty string, and its value is taken as a literal string. The result has
    exactly the key set of ``defaults``.
    """
    env = os.environ if environ is None else environ
    effective: Dict[str, Any] = {}
    for name, value in defaults.items():
        if name in env:
            logger.debug("Default %s overridden from environment", name)
            effective[name] = env[name]
        else:
            effective[name] = value
    return effective


__all__ = ["resolve_effective_defaults"]
