"""Shared CLI helpers: settings, spec and pipeline loading."""
from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from pkglock.core.config import PkglockSettings, load_settings
from pkglock.core.layers import LayerStore
from pkglock.core.pipeline import PackagePipeline, StageResult
from pkglock.core.spec import Spec, load_spec

from ._output import OutputFormatter


def get_repo_root(args: argparse.Namespace) -> Path:
    """Repository root from ``--repo-root``, else the current directory."""
    raw = getattr(args, "repo_root", None)
    return Path(raw).resolve() if raw else Path.cwd().resolve()


@dataclass
class CliContext:
    settings: PkglockSettings
    spec_path: Path
    spec: Spec
    pipeline: PackagePipeline

    def layer_store(self, root: Optional[str] = None) -> LayerStore:
        """A persisted store at ``root`` or the configured ``store.path``."""
        path = Path(root).resolve() if root else self.settings.store_path
        return LayerStore(
            path,
            lock_timeout=self.settings.lock_timeout_seconds,
            poll_interval=self.settings.lock_poll_interval_seconds,
        )

    def output_path(self, raw: Optional[str], default: Path) -> Path:
        return Path(raw).resolve() if raw else default


def load_context(args: argparse.Namespace) -> CliContext:
    """Load settings, read the spec, and build the pipeline for a command."""
    settings = load_settings(get_repo_root(args))
    raw_spec = getattr(args, "spec", None)
    spec_path = Path(raw_spec).resolve() if raw_spec else settings.spec_path
    spec = load_spec(spec_path)
    pipeline = PackagePipeline(spec, max_workers=settings.max_workers)
    return CliContext(settings=settings, spec_path=spec_path, spec=spec, pipeline=pipeline)


def selected_indexes(args: argparse.Namespace) -> Optional[List[int]]:
    indexes = getattr(args, "indexes", None)
    return list(indexes) if indexes else None


def report_failures(formatter: OutputFormatter, stage: StageResult) -> int:
    """Print every package failure; return the exit code for the stage."""
    if stage.ok:
        return 0
    formatter.errors(f.error for f in stage.failures)
    return 1


__all__ = [
    "CliContext",
    "get_repo_root",
    "load_context",
    "report_failures",
    "selected_indexes",
]
