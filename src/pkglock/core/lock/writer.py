"""Assemble resolved packages into the lock artifact and write it."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from pkglock.core.utils.io import dump_yaml_string, parse_yaml_string, write_text

logger = logging.getLogger(__name__)

# Fixed text: a timestamp here would make every regeneration a diff.
LOCK_BANNER = (
    "### ***\n"
    "### WARNING: DO NOT manually EDIT or MERGE this file, it is generated by 'pkglock lock'.\n"
    "### INSTEAD: Edit or merge the source in this directory then run 'pkglock lock'.\n"
    "### ***\n"
)


def assemble_list(records: Sequence[Mapping[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """Collect resolved records, already in package-index order, into one document."""
    return {"packages": [dict(r) for r in records]}


def render_list(records: Sequence[Mapping[str, Any]]) -> str:
    """YAML body of the lock artifact, without the banner."""
    return dump_yaml_string(assemble_list(records))


def render_lock(records: Sequence[Mapping[str, Any]]) -> str:
    """Full lock file text: banner followed by the YAML list."""
    return LOCK_BANNER + render_list(records)


def read_lock(path: Path) -> List[Dict[str, Any]]:
    """Parse the packages of an existing lock file (banner lines are YAML comments)."""
    data = parse_yaml_string(Path(path).read_text(encoding="utf-8"), default={})
    if not isinstance(data, dict) or not isinstance(data.get("packages"), list):
        raise ValueError(f"{path} is not a pkglock lock file")
    return list(data["packages"])


def lock_is_current(path: Path, records: Sequence[Mapping[str, Any]]) -> bool:
    """True when ``path`` holds exactly the text :func:`render_lock` would write."""
    path = Path(path)
    if not path.exists():
        return False
    return path.read_text(encoding="utf-8") == render_lock(records)


def write_lock(path: Path, records: Sequence[Mapping[str, Any]]) -> bool:
    """Write the lock file atomically.

    Returns:
        True if the file changed, False if it already held identical content.
    """
    path = Path(path)
    text = render_lock(records)
    if path.exists() and path.read_text(encoding="utf-8") == text:
        logger.info("%s is already up to date", path)
        return False
    write_text(path, text)
    logger.info("Wrote %s (%d package(s))", path, len(records))
    return True


__all__ = [
    "LOCK_BANNER",
    "assemble_list",
    "lock_is_current",
    "read_lock",
    "render_list",
    "render_lock",
    "write_lock",
]
