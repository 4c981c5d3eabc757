"""``perch check`` — frame authoring validation command.

Scans a template directory and prints every diagnostic.  Exits with
code 1 if any frame has an error.  With ``--fix``, prefix attributes are
rewritten in the templates first and the report covers what is left.
"""

import argparse
import sys

from perch.cli._options import config_from_args
from perch.errors import PerchError
from perch.pipeline import build
from perch.reporting import format_report


def run_check(args: argparse.Namespace) -> None:
    """Validate the frames under ``args.template_dir``."""
    config = config_from_args(args)
    try:
        result = build(config)
        if args.fix and result.report.diagnostics:
            from perch.fixes import fix_documents

            fixed = fix_documents(result.report.diagnostics, config)
            for path, count in sorted(fixed.items()):
                print(f"  fixed {count} frame(s) in {path}")
            if fixed:
                result = build(config)
    except (PerchError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    color = False if args.no_color else None
    print(format_report(result.report, color=color))
    if not result.ok:
        raise SystemExit(1)
