"""
pkglock debug packages command.

SUMMARY: Print each package record before layers are attached
"""

from __future__ import annotations

import argparse

from pkglock.cli import add_index_flag, add_standard_flags

from ._stage import run_stage

SUMMARY = "Print each package record before layers are attached"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)
    add_index_flag(parser)


def main(args: argparse.Namespace) -> int:
    return run_stage(args, "record", lambda ctx: ctx.pipeline.package_record)
