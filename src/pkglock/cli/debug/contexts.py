"""
pkglock debug contexts command.

SUMMARY: Print each package's defaults merged with its overrides
"""

from __future__ import annotations

import argparse

from pkglock.cli import add_index_flag, add_standard_flags

from ._stage import run_stage

SUMMARY = "Print each package's defaults merged with its overrides"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)
    add_index_flag(parser)


def main(args: argparse.Namespace) -> int:
    return run_stage(args, "context", lambda ctx: ctx.pipeline.raw_context)
