"""
pkglock commands command.

SUMMARY: Write one build command per package
"""

from __future__ import annotations

import argparse
import sys

from pkglock.cli import OutputFormatter, add_index_flag, add_output_flag, add_standard_flags
from pkglock.cli._utils import load_context, report_failures, selected_indexes
from pkglock.core.commands import join_commands
from pkglock.core.exceptions import PkglockError
from pkglock.core.utils.io import write_text

SUMMARY = "Write one build command per package"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)
    add_index_flag(parser)
    add_output_flag(parser, "Script to write (default: commands.path setting)")
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the commands instead of writing the script",
    )


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        ctx = load_context(args)
        settings = ctx.settings
        stage = ctx.pipeline.map_packages(
            lambda i: ctx.pipeline.build_command(
                i,
                name_field=settings.name_field,
                build_action=settings.build_action,
            ),
            selected_indexes(args),
        )
        if not stage.ok:
            return report_failures(formatter, stage)

        script = join_commands(stage.values())
        if formatter.json_mode:
            formatter.data({"commands": {str(i): stage.results[i] for i in sorted(stage.results)}})
            return 0
        if getattr(args, "stdout", False):
            sys.stdout.write(script)
            return 0

        out_path = ctx.output_path(getattr(args, "output", None), settings.commands_path)
        write_text(out_path, script)
    except (PkglockError, OSError) as exc:
        formatter.error(exc)
        return 1

    formatter.text(f"see {out_path}")
    return 0
