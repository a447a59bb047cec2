"""
pkglock configuration management (YAML + environment).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from pkglock.core.schemas import validate_payload
from pkglock.core.utils.io import iter_yaml_files, read_yaml
from pkglock.core.utils.merge import deep_merge as _deep_merge
from pkglock.data import get_data_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "PKGLOCK_"
PROJECT_CONFIG_DIRNAME = ".pkglock"


class ConfigManager:
    """Load, merge, and validate pkglock settings.

    Configuration sources (highest to lowest priority):
    1. Environment variables: PKGLOCK_<section>__<key>
    2. Project config: <repo_root>/.pkglock/config/*.yml (alphabetical order)
    3. Bundled defaults: pkglock.data/config/*.yaml (alphabetical order)

    These settings describe where pkglock reads and writes; they never feed
    package resolution. Package defaults are overridden by bare environment
    variables instead (see ``pkglock.core.packages.defaults``).
    """

    def __init__(
        self,
        repo_root: Optional[Path] = None,
        *,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.repo_root = Path(repo_root or Path.cwd()).resolve()
        self.environ = os.environ if environ is None else environ
        self.core_config_dir = get_data_path("config")
        self.project_config_dir = self.repo_root / PROJECT_CONFIG_DIRNAME / "config"

    def deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge dictionaries. Delegates to shared implementation."""
        return _deep_merge(base, override)

    def _load_directory(self, directory: Path, cfg: Dict[str, Any]) -> Dict[str, Any]:
        for path in iter_yaml_files(directory):
            # Fail closed: configuration must never silently ignore invalid YAML.
            data = read_yaml(path, default={}, raise_on_error=True)
            if not isinstance(data, dict):
                raise ValueError(f"Config file must contain a mapping: {path}")
            logger.debug("Loaded config layer %s", path)
            cfg = self.deep_merge(cfg, data)
        return cfg

    # ---------- environment overrides ----------

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _parse_env_key(self, raw: str) -> List[str]:
        segs = raw.split("__") if "__" in raw else raw.split("_")
        if any(seg == "" for seg in segs):
            raise ValueError(f"Malformed {ENV_PREFIX}* key: empty segment in '{raw}'.")
        return [seg.lower() for seg in segs]

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(self.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            raw = key[len(ENV_PREFIX):]
            if not raw:
                raise ValueError(f"Malformed {ENV_PREFIX}* key")
            yield self._parse_env_key(raw), self._coerce_type(self.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        cur: Union[Dict[str, Any], Any] = root
        for part in path[:-1]:
            if not isinstance(cur, dict):
                raise ValueError("Path traverses non-dict container")
            key_candidates = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
            key_to_use = key_candidates.get(part, part)
            cur = cur.setdefault(key_to_use, {})
        if not isinstance(cur, dict):
            raise ValueError("Key assignment requires dict")
        key_candidates = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
        cur[key_candidates.get(path[-1], path[-1])] = value

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, typed_value in self._iter_env_overrides():
            logger.debug("Config override from environment: %s", ".".join(path))
            self._set_nested(cfg, path, typed_value)

    # ---------- loading ----------

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Load and merge configuration from every source.

        Raises:
            SpecValidationError: If ``validate`` and the merged settings are invalid.
        """
        cfg: Dict[str, Any] = {}
        cfg = self._load_directory(self.core_config_dir, cfg)
        cfg = self._load_directory(self.project_config_dir, cfg)
        self.apply_env_overrides(cfg)

        if validate:
            validate_payload(cfg, "config.schema", source="pkglock settings")
        return cfg

    def resolve_path(self, value: Union[str, Path]) -> Path:
        """Resolve a configured path relative to ``repo_root``."""
        p = Path(value).expanduser()
        return p if p.is_absolute() else self.repo_root / p


__all__ = ["ConfigManager", "ENV_PREFIX", "PROJECT_CONFIG_DIRNAME"]
