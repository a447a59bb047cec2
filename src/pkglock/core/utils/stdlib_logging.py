"""Stdlib logging setup for the pkglock CLI."""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from pkglock.core.utils.io import ensure_directory

_PKGLOCK_HANDLER: logging.Handler | None = None

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
FILE_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _level_from_name(name: str) -> int:
    level = getattr(logging, str(name).upper(), None)
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(*, level: str = "WARNING", log_path: Optional[Path] = None) -> None:
    """Install the single pkglock handler on the ``pkglock`` logger.

    Logs go to stderr unless ``log_path`` is given; stdout stays reserved for
    command output. Calling again replaces the previous handler.
    """
    global _PKGLOCK_HANDLER

    logger = logging.getLogger("pkglock")
    logger.setLevel(_level_from_name(level))

    if _PKGLOCK_HANDLER is not None:
        logger.removeHandler(_PKGLOCK_HANDLER)
        _PKGLOCK_HANDLER.close()
        _PKGLOCK_HANDLER = None

    handler: logging.Handler
    if log_path is not None:
        resolved = Path(log_path).resolve()
        ensure_directory(resolved.parent)
        handler = logging.FileHandler(resolved, encoding="utf-8")
        handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(_level_from_name(level))

    logger.addHandler(handler)
    _PKGLOCK_HANDLER = handler


def reset_logging_for_tests() -> None:
    """Test-only: remove the pkglock handler."""
    global _PKGLOCK_HANDLER
    if _PKGLOCK_HANDLER is not None:
        logging.getLogger("pkglock").removeHandler(_PKGLOCK_HANDLER)
        _PKGLOCK_HANDLER.close()
        _PKGLOCK_HANDLER = None


__all__ = ["configure_logging", "reset_logging_for_tests"]
