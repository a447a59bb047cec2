"""
pkglock debug rendered command.

SUMMARY: Print each package's rendered template values
"""

from __future__ import annotations

import argparse

from pkglock.cli import add_index_flag, add_standard_flags

from ._stage import run_stage

SUMMARY = "Print each package's rendered template values"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)
    add_index_flag(parser)


def main(args: argparse.Namespace) -> int:
    return run_stage(args, "rendered", lambda ctx: ctx.pipeline.rendered_templates)
