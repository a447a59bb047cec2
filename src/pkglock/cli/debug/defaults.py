"""
pkglock debug defaults command.

SUMMARY: Print spec defaults with environment overrides applied
"""

from __future__ import annotations

import argparse

from pkglock.cli import OutputFormatter, add_standard_flags
from pkglock.cli._utils import load_context
from pkglock.core.exceptions import PkglockError

SUMMARY = "Print spec defaults with environment overrides applied"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        ctx = load_context(args)
    except (PkglockError, OSError) as exc:
        formatter.error(exc)
        return 1
    formatter.data(dict(ctx.pipeline.effective_defaults))
    return 0
