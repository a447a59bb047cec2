"""
pkglock check command.

SUMMARY: Fail when the lock file is missing or out of date
"""

from __future__ import annotations

import argparse

from pkglock.cli import OutputFormatter, add_output_flag, add_standard_flags
from pkglock.cli._utils import load_context, report_failures
from pkglock.core.exceptions import PkglockError
from pkglock.core.lock import lock_is_current

SUMMARY = "Fail when the lock file is missing or out of date"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)
    add_output_flag(parser, "Lock file to check (default: lock.path setting)")


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        ctx = load_context(args)
        lock_path = ctx.output_path(getattr(args, "output", None), ctx.settings.lock_path)
        result = ctx.pipeline.run()
    except (PkglockError, OSError) as exc:
        formatter.error(exc)
        return 1

    if not result.ok:
        return report_failures(formatter, result)

    current = lock_is_current(lock_path, result.records)
    if formatter.json_mode:
        formatter.data({"lock": str(lock_path), "current": current})
    elif current:
        formatter.text(f"{lock_path} is up to date.")
    else:
        formatter.text(f"{lock_path} is out of date; run 'pkglock lock'.")
    return 0 if current else 1
