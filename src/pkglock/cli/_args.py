"""Common CLI argument registration utilities."""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode."""
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON instead of YAML",
    )


def add_repo_root_flag(parser: argparse.ArgumentParser) -> None:
    """Add --repo-root flag; relative settings paths resolve against it."""
    parser.add_argument(
        "--repo-root",
        type=str,
        help="Directory holding the spec and pkglock settings (default: current directory)",
    )


def add_spec_flag(parser: argparse.ArgumentParser) -> None:
    """Add --spec flag to override the configured spec path."""
    parser.add_argument(
        "--spec",
        type=str,
        help="Spec file to expand (default: spec.path setting, packages.yml)",
    )


def add_index_flag(parser: argparse.ArgumentParser) -> None:
    """Add --index flag narrowing a command to selected packages."""
    parser.add_argument(
        "--index",
        type=int,
        action="append",
        dest="indexes",
        metavar="N",
        help="Only process package N (1-based); may be repeated",
    )


def add_output_flag(parser: argparse.ArgumentParser, help_text: str) -> None:
    parser.add_argument("--output", "-o", type=str, help=help_text)


def add_standard_flags(parser: argparse.ArgumentParser) -> None:
    """Flags every pipeline command accepts: --repo-root, --spec, --json."""
    add_repo_root_flag(parser)
    add_spec_flag(parser)
    add_json_flag(parser)


__all__ = [
    "add_index_flag",
    "add_json_flag",
    "add_output_flag",
    "add_repo_root_flag",
    "add_spec_flag",
    "add_standard_flags",
]
