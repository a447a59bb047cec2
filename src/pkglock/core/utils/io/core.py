"""Crash-safe file output for pkglock artifacts.

The lock file, the layer store and the command script are all rewritten in
place by repeated runs, and build tooling may read them at any moment. Every
write therefore lands in a sibling temp file first and is renamed over the
target only once it is flushed to disk.
"""
from __future__ import annotations

import fcntl
import os
import tempfile
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Any, Callable, ContextManager, Iterator, Optional, TextIO, Union

PathLike = Union[str, Path]


def ensure_parent_dir(path: PathLike) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def ensure_directory(path: PathLike, create: bool = True) -> Path:
    """Return ``path`` as an existing directory, creating it unless ``create`` is False.

    Raises:
        NotADirectoryError: If ``path`` exists and is a file.
        FileNotFoundError: If ``path`` is missing and ``create`` is False.
    """
    directory = Path(path)
    if directory.is_dir():
        return directory
    if directory.exists():
        raise NotADirectoryError(f"Path exists but is not a directory: {directory}")
    if not create:
        raise FileNotFoundError(f"Directory does not exist: {directory}")
    directory.mkdir(parents=True, exist_ok=True)
    return directory


@contextmanager
def _sibling_temp(target: Path, encoding: str) -> Iterator[TextIO]:
    """Yield a locked temp file next to ``target``; rename it over ``target`` on success."""
    fh = tempfile.NamedTemporaryFile(
        "w",
        encoding=encoding,
        dir=str(target.parent),
        prefix=f".{target.name}.",
        suffix=".tmp",
        delete=False,
        newline="",
    )
    tmp = Path(fh.name)
    try:
        with fh:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
            yield fh
            fh.flush()
            os.fsync(fh.fileno())
            fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
        os.replace(tmp, target)
    finally:
        # Only left behind when the writer or the rename failed.
        tmp.unlink(missing_ok=True)


def atomic_write(
    path: PathLike,
    write_fn: Callable[[TextIO], None],
    *,
    lock_cm: Optional[ContextManager[Any]] = None,
    encoding: str = "utf-8",
) -> None:
    """Replace ``path`` with whatever ``write_fn`` writes, all at once.

    ``lock_cm`` (typically :func:`acquire_file_lock`) is held for the whole
    write-and-rename. Readers see either the old file or the new one.
    """
    target = Path(path)
    ensure_parent_dir(target)
    with lock_cm or nullcontext():
        with _sibling_temp(target, encoding) as fh:
            write_fn(fh)


def write_text(path: PathLike, content: str, *, lock_cm: Optional[ContextManager[Any]] = None) -> None:
    """Atomically write UTF-8 ``content`` to ``path``."""
    atomic_write(path, lambda fh: fh.write(content), lock_cm=lock_cm)


__all__ = [
    "PathLike",
    "ensure_parent_dir",
    "ensure_directory",
    "atomic_write",
    "write_text",
]
