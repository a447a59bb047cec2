"""Shared output for the per-package debug stages."""
from __future__ import annotations

import argparse
from typing import Any, Callable, Dict

from pkglock.cli import OutputFormatter
from pkglock.cli._utils import CliContext, load_context, report_failures, selected_indexes
from pkglock.core.exceptions import PkglockError


def run_stage(
    args: argparse.Namespace,
    field: str,
    stage_fn: Callable[[CliContext], Callable[[int], Dict[str, Any]]],
) -> int:
    """Run one stage for the selected packages and print ``[{index, <field>}]``."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        ctx = load_context(args)
        stage = ctx.pipeline.map_packages(stage_fn(ctx), selected_indexes(args))
    except (PkglockError, OSError) as exc:
        formatter.error(exc)
        return 1

    formatter.data([{"index": i, field: stage.results[i]} for i in sorted(stage.results)])
    return report_failures(formatter, stage)
