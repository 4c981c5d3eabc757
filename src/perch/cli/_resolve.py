"""``perch resolve`` — look up one frame id against a template tree.

Prints the template reference and how it matched.  Exits with code 1
when no frame matches.
"""

import argparse
import sys

from perch.cli._options import config_from_args
from perch.errors import PerchError
from perch.pipeline import build


def run_resolve(args: argparse.Namespace) -> None:
    """Resolve ``args.frame_id`` and print the matching template."""
    try:
        result = build(config_from_args(args))
    except (PerchError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    found = result.table.match(args.frame_id)
    if found is None:
        print(f"Error: no frame matches {args.frame_id!r}", file=sys.stderr)
        raise SystemExit(1)

    if found.kind == "exact":
        print(f"{found.reference}  (exact)")
    else:
        print(f"{found.reference}  (prefix {found.key!r})")
