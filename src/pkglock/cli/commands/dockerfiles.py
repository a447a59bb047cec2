"""
pkglock dockerfiles command.

SUMMARY: Publish every package's layer Dockerfiles to the layer store
"""

from __future__ import annotations

import argparse

from pkglock.cli import OutputFormatter, add_index_flag, add_standard_flags
from pkglock.cli._utils import load_context, report_failures, selected_indexes
from pkglock.core.exceptions import PkglockError

SUMMARY = "Publish every package's layer Dockerfiles to the layer store"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)
    add_index_flag(parser)
    parser.add_argument("--store", type=str, help="Layer store directory (default: store.path setting)")


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        ctx = load_context(args)
        store = ctx.layer_store(getattr(args, "store", None))
        result = ctx.pipeline.run(store, selected_indexes(args))
    except (PkglockError, OSError) as exc:
        formatter.error(exc)
        return 1

    # Entries from packages that succeeded are complete and stay published.
    code = report_failures(formatter, result)
    if formatter.json_mode:
        formatter.data(
            {
                "store": str(store.root),
                "layers": [e.artifact.to_dict() for e in store.entries()],
            }
        )
    elif code == 0:
        formatter.text(f"Dockerfiles updated: {len(store)} layer(s) in {store.root}")
    return code
