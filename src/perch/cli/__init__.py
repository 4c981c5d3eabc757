"""Perch CLI — frame checks, routing-table generation, and lookups.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"
"""

import argparse
import logging
import sys

from perch.cli._options import add_frame_options


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = argparse.ArgumentParser(
        prog="perch",
        description="Perch — frame discovery and routing for server-rendered templates.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- perch check ------------------------------------------------------
    check_parser = subparsers.add_parser("check", help="Report frame id and prefix problems")
    add_frame_options(check_parser)
    check_parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors")
    check_parser.add_argument(
        "--fix",
        action="store_true",
        help="Rewrite frame prefix attributes in place, then check again",
    )

    # -- perch build ------------------------------------------------------
    build_parser = subparsers.add_parser("build", help="Generate the frame routing table")
    add_frame_options(build_parser)
    build_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Path of the generated Python lookup module",
    )
    build_parser.add_argument("--json", default=None, help="Also write the table as JSON")
    build_parser.add_argument(
        "--fragments",
        default=None,
        help="Directory to write per-frame fragment templates into",
    )
    build_parser.add_argument(
        "--route-to-fragments",
        action="store_true",
        help="Route frame ids to fragment templates instead of whole documents",
    )
    build_parser.add_argument(
        "--module-name",
        default="frame_routes",
        help="Name recorded in the generated module",
    )
    build_parser.add_argument(
        "--allow-errors",
        action="store_true",
        help="Write outputs even when frames have errors",
    )
    build_parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors")

    # -- perch resolve ----------------------------------------------------
    resolve_parser = subparsers.add_parser("resolve", help="Resolve a frame id to its template")
    add_frame_options(resolve_parser)
    resolve_parser.add_argument("frame_id", help="Frame id as sent by the client")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )

    if args.command == "check":
        from perch.cli._check import run_check

        run_check(args)
    elif args.command == "build":
        from perch.cli._build import run_build

        run_build(args)
    elif args.command == "resolve":
        from perch.cli._resolve import run_resolve

        run_resolve(args)
