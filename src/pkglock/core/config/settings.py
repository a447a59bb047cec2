"""Typed view over the merged settings dictionary."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .manager import ConfigManager


@dataclass(frozen=True)
class PkglockSettings:
    repo_root: Path
    spec_path: Path
    lock_path: Path
    store_path: Path
    commands_path: Path
    build_action: str
    name_field: str
    max_workers: int
    lock_timeout_seconds: float
    lock_poll_interval_seconds: float
    log_level: str

    @classmethod
    def from_config(cls, manager: ConfigManager, cfg: Dict[str, Any]) -> "PkglockSettings":
        return cls(
            repo_root=manager.repo_root,
            spec_path=manager.resolve_path(cfg["spec"]["path"]),
            lock_path=manager.resolve_path(cfg["lock"]["path"]),
            store_path=manager.resolve_path(cfg["store"]["path"]),
            commands_path=manager.resolve_path(cfg["commands"]["path"]),
            build_action=str(cfg["commands"]["build_action"]),
            name_field=str(cfg["commands"]["name_field"]),
            max_workers=int(cfg["pipeline"]["max_workers"]),
            lock_timeout_seconds=float(cfg["file_locking"]["timeout_seconds"]),
            lock_poll_interval_seconds=float(cfg["file_locking"]["poll_interval_seconds"]),
            log_level=str(cfg["logging"]["level"]).upper(),
        )


def load_settings(
    repo_root: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> PkglockSettings:
    """Load, validate and type the settings for ``repo_root``."""
    manager = ConfigManager(repo_root, environ=environ)
    return PkglockSettings.from_config(manager, manager.load_config())


__all__ = ["PkglockSettings", "load_settings"]
