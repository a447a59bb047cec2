"""Content-addressed layer store.

Entries are keyed by ``(layer name, content hash)`` and written at most once.
With a ``root`` the store is persisted as::

    <root>/<layer-name>/<content-hash>.Dockerfile   rendered text
    <root>/<layer-name>/<content-hash>.mk           chain metadata

The metadata fragment is published before the Dockerfile, and each file is
written to a temp file and renamed into place, so a Dockerfile is only ever
visible complete and its presence marks a complete entry.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pkglock.core.exceptions import StoreWriteError
from pkglock.core.utils.io import LockTimeoutError, acquire_file_lock, write_text

from .models import LayerArtifact, LayerEntry

logger = logging.getLogger(__name__)

DOCKERFILE_SUFFIX = ".Dockerfile"
METADATA_SUFFIX = ".mk"


class LayerStore:
    """Thread-safe, write-once store of rendered layers.

    ``root=None`` keeps entries in memory only.
    """

    def __init__(
        self,
        root: Optional[Path] = None,
        *,
        lock_timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ) -> None:
        self.root = Path(root) if root is not None else None
        self._lock_timeout = lock_timeout
        self._poll_interval = poll_interval
        self._entries: Dict[Tuple[str, str], LayerEntry] = {}
        self._key_locks: Dict[Tuple[str, str], threading.Lock] = {}
        self._guard = threading.Lock()

    @property
    def persistent(self) -> bool:
        return self.root is not None

    def dockerfile_path(self, name: str, content_hash: str) -> Path:
        if self.root is None:
            raise ValueError("in-memory layer store has no paths")
        return self.root / name / f"{content_hash}{DOCKERFILE_SUFFIX}"

    def metadata_path(self, name: str, content_hash: str) -> Path:
        if self.root is None:
            raise ValueError("in-memory layer store has no paths")
        return self.root / name / f"{content_hash}{METADATA_SUFFIX}"

    def _key_lock(self, key: Tuple[str, str]) -> threading.Lock:
        with self._guard:
            return self._key_locks.setdefault(key, threading.Lock())

    def publish(self, artifact: LayerArtifact, dockerfile: str) -> bool:
        """Add an entry unless ``(name, content_hash)`` is already stored.

        Returns:
            True if this call wrote the entry, False if it already existed.

        Raises:
            StoreWriteError: If a persisted entry could not be written atomically.
        """
        key = artifact.key
        with self._key_lock(key):
            if key in self._entries:
                return False
            entry = LayerEntry(artifact=artifact, dockerfile=dockerfile)
            written = True
            if self.root is not None:
                written = self._persist(entry)
            with self._guard:
                self._entries[key] = entry
        if written:
            logger.info("Published layer %s (base %s)", artifact.id, artifact.base_layer_id)
        return written

    def _persist(self, entry: LayerEntry) -> bool:
        artifact = entry.artifact
        dockerfile_path = self.dockerfile_path(artifact.name, artifact.content_hash)
        if dockerfile_path.exists():
            return False
        try:
            with acquire_file_lock(
                dockerfile_path,
                timeout=self._lock_timeout,
                poll_interval=self._poll_interval,
            ):
                # Another process may have published while we waited.
                if dockerfile_path.exists():
                    return False
                write_text(
                    self.metadata_path(artifact.name, artifact.content_hash),
                    artifact.make_fragment(),
                )
                write_text(dockerfile_path, entry.dockerfile)
        except (LockTimeoutError, OSError) as exc:
            raise StoreWriteError(
                artifact.name, artifact.content_hash, str(dockerfile_path), str(exc)
            ) from exc
        return True

    def get(self, name: str, content_hash: str) -> Optional[LayerEntry]:
        with self._guard:
            return self._entries.get((name, content_hash))

    def __contains__(self, key: object) -> bool:
        with self._guard:
            return key in self._entries

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    def entries(self) -> List[LayerEntry]:
        """Every entry added during this run, ordered by ``(name, content_hash)``."""
        with self._guard:
            return [self._entries[k] for k in sorted(self._entries)]


__all__ = ["DOCKERFILE_SUFFIX", "METADATA_SUFFIX", "LayerStore"]
