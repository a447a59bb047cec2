"""
Auto-discovery CLI dispatcher for pkglock.

Scans subfolders for commands and automatically registers them.
Adding new commands = just add a .py file to the appropriate subfolder:

- ``cli/commands/<name>.py``  => ``pkglock <name>``
- ``cli/<domain>/<name>.py``  => ``pkglock <domain> <name>``

Each command module exposes ``SUMMARY``, ``register_args(parser)`` and
``main(args) -> int``.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from pkglock.cli._output import print_error
from pkglock.core.utils.stdlib_logging import configure_logging

logger = logging.getLogger(__name__)


def _command_info(module: Any, default_summary: str) -> dict[str, Any]:
    return {
        "module": module,
        "summary": getattr(module, "SUMMARY", default_summary),
        "register_args": getattr(module, "register_args", None),
        "main": getattr(module, "main", None),
    }


@lru_cache(maxsize=1)
def discover_domains() -> dict[str, Path]:
    """Discover CLI domain subfolders (e.g. ``debug``)."""
    cli_dir = Path(__file__).parent
    domains = {}
    for item in cli_dir.iterdir():
        if item.name == "commands":
            continue
        if item.is_dir() and not item.name.startswith("_"):
            has_commands = any(
                f.suffix == ".py" and not f.name.startswith("_")
                for f in item.iterdir()
            )
            if has_commands:
                domains[item.name] = item
    return domains


@lru_cache(maxsize=32)
def _discover(package: str) -> dict[str, dict[str, Any]]:
    directory = Path(__file__).parent / package
    commands: dict[str, dict[str, Any]] = {}
    if not directory.exists():
        return commands

    for item in sorted(directory.glob("*.py")):
        if item.name.startswith("_"):
            continue
        cmd_name = item.stem
        module = importlib.import_module(f"pkglock.cli.{package}.{cmd_name}")
        commands[cmd_name] = _command_info(module, cmd_name)
    return commands


def discover_root_commands() -> dict[str, dict[str, Any]]:
    """Discover top-level commands under cli/commands (no domain prefix)."""
    return _discover("commands")


def discover_commands(domain: str) -> dict[str, dict[str, Any]]:
    """Discover all commands in a domain subfolder."""
    return _discover(domain)


def _add_command(subparsers: Any, cmd_name: str, cmd_info: dict[str, Any]) -> None:
    primary_name = cmd_name.replace("_", "-")
    aliases = [cmd_name] if primary_name != cmd_name else []
    cmd_parser = subparsers.add_parser(primary_name, aliases=aliases, help=cmd_info["summary"])
    if cmd_info["register_args"]:
        cmd_info["register_args"](cmd_parser)
    if cmd_info["main"]:
        cmd_parser.set_defaults(_func=cmd_info["main"])


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with auto-discovered domains and commands."""
    parser = argparse.ArgumentParser(
        prog="pkglock",
        description="Expand packages.yml into packages.lock and layered Dockerfiles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Log progress to stderr (-v for INFO, -vv for DEBUG)",
    )

    subparsers = parser.add_subparsers(
        dest="domain",
        title="commands",
        metavar="<command>",
    )

    for cmd_name, cmd_info in sorted(discover_root_commands().items()):
        _add_command(subparsers, cmd_name, cmd_info)

    for domain_name in sorted(discover_domains().keys()):
        domain_commands = discover_commands(domain_name)
        if not domain_commands:
            continue
        domain_pkg = importlib.import_module(f"pkglock.cli.{domain_name}")
        summary = (domain_pkg.__doc__ or f"{domain_name} commands").strip().splitlines()[0]
        domain_parser = subparsers.add_parser(domain_name, help=summary)
        cmd_subparsers = domain_parser.add_subparsers(
            dest="command",
            title="commands",
            description=f"Available {domain_name} commands",
            metavar="<command>",
        )
        for cmd_name, cmd_info in sorted(domain_commands.items()):
            _add_command(cmd_subparsers, cmd_name, cmd_info)

    return parser


def _get_version() -> str:
    from pkglock import __version__

    return __version__


def _log_level(verbosity: int) -> str | None:
    if verbosity >= 2:
        return "DEBUG"
    if verbosity == 1:
        return "INFO"
    return None


def _configured_log_level(args: argparse.Namespace) -> str:
    """Level from -v flags, else the ``logging.level`` setting."""
    level = _log_level(int(getattr(args, "verbose", 0) or 0))
    if level is not None:
        return level
    try:
        from pkglock.cli._utils import get_repo_root
        from pkglock.core.config import ConfigManager

        cfg = ConfigManager(get_repo_root(args)).load_config(validate=False)
        return str((cfg.get("logging") or {}).get("level") or "WARNING")
    except (OSError, ValueError, yaml.YAMLError):
        # Settings problems are reported by the command itself.
        return "WARNING"


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the pkglock CLI.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.domain:
        parser.print_help()
        return 0

    func: Callable[[argparse.Namespace], int] | None = getattr(args, "_func", None)
    if func is None:
        # Domain given without a command: show the domain's help.
        domain_parser = parser._subparsers._group_actions[0].choices.get(args.domain)
        if domain_parser:
            domain_parser.print_help()
        return 1

    configure_logging(level=_configured_log_level(args))

    try:
        return int(func(args))
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        print_error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
