"""Trove CLI — trove resolve.

Entry point for the ``trove`` command-line interface.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path


def _source_arg(value: str) -> tuple[str, str]:
    """Parse a ``KEY=PATH`` source argument."""
    key, sep, path = value.partition("=")
    if not sep or not key or not path:
        msg = f"expected KEY=PATH, got {value!r}"
        raise argparse.ArgumentTypeError(msg)
    return key, path


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the trove CLI."""
    parser = argparse.ArgumentParser(
        prog="trove",
        description="Aggregate JSON, YAML and TOML data files into one metadata tree.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # trove resolve
    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Resolve all sources and print the metadata tree as JSON",
    )
    resolve_parser.add_argument("root", nargs="?", default=".", help="Project root directory")
    resolve_parser.add_argument(
        "--content-dir", default=None, help="Content directory relative to root",
    )
    resolve_parser.add_argument(
        "--source",
        action="append",
        type=_source_arg,
        default=[],
        metavar="KEY=PATH",
        help="Add a source (repeatable); merged over the config file",
    )
    resolve_parser.add_argument(
        "--timeout", type=float, default=None, help="Per-source timeout in seconds",
    )
    resolve_parser.add_argument(
        "--output", default=None, help="Write JSON to this file instead of stdout",
    )
    resolve_parser.add_argument(
        "--verbose", action="store_true", help="Print every resolved source",
    )

    return parser


def _get_version() -> str:
    """Get the package version."""
    from trove import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from trove._errors import TroveError
    from trove.app import aggregate

    if args.command == "resolve":
        overrides: dict[str, object] = {"sources": dict(args.source)}
        if args.content_dir is not None:
            overrides["content_dir"] = args.content_dir
        if args.timeout is not None:
            overrides["timeout"] = args.timeout
        if args.verbose:
            overrides["verbose"] = True

        try:
            tree = aggregate(args.root, **overrides)
        except TroveError as exc:
            print(f"trove: error: {exc}", file=sys.stderr)
            sys.exit(1)

        rendered = json.dumps(tree, indent=2, ensure_ascii=False, default=str)
        if args.output is None:
            print(rendered)
        else:
            Path(args.output).write_text(rendered + "\n", encoding="utf-8")


if __name__ == "__main__":
    main()
