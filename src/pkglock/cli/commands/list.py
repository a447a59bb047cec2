"""
pkglock list command.

SUMMARY: Print the fully expanded package list
"""

from __future__ import annotations

import argparse

from pkglock.cli import OutputFormatter, add_index_flag, add_standard_flags
from pkglock.cli._utils import load_context, report_failures, selected_indexes
from pkglock.core.exceptions import PkglockError
from pkglock.core.lock import assemble_list

SUMMARY = "Print the fully expanded package list"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)
    add_index_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        ctx = load_context(args)
        result = ctx.pipeline.run(indexes=selected_indexes(args))
    except (PkglockError, OSError) as exc:
        formatter.error(exc)
        return 1

    if not result.ok:
        return report_failures(formatter, result)
    formatter.data(assemble_list(result.records))
    return 0
