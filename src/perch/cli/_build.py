"""``perch build`` — routing-table generation command.

Runs a full build and writes the generated module, JSON table, and
fragment templates that were asked for.  Refuses to write anything when
frames have errors unless ``--allow-errors`` is given.
"""

import argparse
import sys

from perch.cli._options import config_from_args
from perch.errors import PerchError
from perch.pipeline import build, write_outputs
from perch.reporting import format_report


def run_build(args: argparse.Namespace) -> None:
    """Build and write the frame routing outputs."""
    config = config_from_args(args)
    try:
        result = build(config)
    except (PerchError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    color = False if args.no_color else None
    print(format_report(result.report, title="perch build", color=color), file=sys.stderr)
    if not result.ok and not args.allow_errors:
        print("Error: frame errors found; no files written.", file=sys.stderr)
        raise SystemExit(1)

    if config.output_path is None and config.json_path is None and config.fragments_dir is None:
        # Nothing to write: print the module so it can be piped.
        from perch.codegen import render_module

        sys.stdout.write(render_module(result.table, module_name=config.module_name))
        return

    try:
        written = write_outputs(result, config)
    except (PerchError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    for path in written:
        print(f"  wrote {path}")
