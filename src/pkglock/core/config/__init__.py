"""pkglock tool configuration."""
from __future__ import annotations

from .manager import ENV_PREFIX, ConfigManager
from .settings import PkglockSettings, load_settings

__all__ = ["ConfigManager", "ENV_PREFIX", "PkglockSettings", "load_settings"]
