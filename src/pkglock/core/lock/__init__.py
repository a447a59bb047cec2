"""Lock artifact assembly and writing."""
from __future__ import annotations

from .writer import (
    LOCK_BANNER,
    assemble_list,
    lock_is_current,
    read_lock,
    render_list,
    render_lock,
    write_lock,
)

__all__ = [
    "LOCK_BANNER",
    "assemble_list",
    "lock_is_current",
    "read_lock",
    "render_list",
    "render_lock",
    "write_lock",
]
