"""
pkglock lock command.

SUMMARY: Publish layer Dockerfiles and update the lock file
"""

from __future__ import annotations

import argparse

from pkglock.cli import OutputFormatter, add_output_flag, add_standard_flags
from pkglock.cli._utils import load_context, report_failures
from pkglock.core.exceptions import PkglockError
from pkglock.core.lock import write_lock

SUMMARY = "Publish layer Dockerfiles and update the lock file"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)
    add_output_flag(parser, "Lock file to write (default: lock.path setting)")
    parser.add_argument("--store", type=str, help="Layer store directory (default: store.path setting)")


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        ctx = load_context(args)
        lock_path = ctx.output_path(getattr(args, "output", None), ctx.settings.lock_path)
        store = ctx.layer_store(getattr(args, "store", None))
        result = ctx.pipeline.run(store)
        if not result.ok:
            # Leave the previous lock file untouched.
            return report_failures(formatter, result)
        changed = write_lock(lock_path, result.records)
    except (PkglockError, OSError) as exc:
        formatter.error(exc)
        return 1

    message = f"{lock_path} updated." if changed else f"{lock_path} is already up to date."
    formatter.success(
        {"lock": str(lock_path), "changed": changed, "packages": len(result.records)},
        message,
    )
    return 0
