"""Shared argparse options that map onto FrameConfig fields."""

import argparse

from perch.config import FrameConfig

_DEFAULTS = FrameConfig()


def add_frame_options(parser: argparse.ArgumentParser) -> None:
    """Add the template directory and tag-surface options to *parser*."""
    parser.add_argument("template_dir", help="Template directory to scan")
    parser.add_argument(
        "--ext",
        action="append",
        dest="extensions",
        default=None,
        help=f"Template extension to scan (repeatable, default {_DEFAULTS.extensions[0]})",
    )
    parser.add_argument("--tag", default=_DEFAULTS.tag_name, help="Frame tag name")
    parser.add_argument("--id-attribute", default=_DEFAULTS.id_attribute, help="Frame id attribute")
    parser.add_argument(
        "--prefix-attribute",
        default=_DEFAULTS.prefix_attribute,
        help="Stable-prefix attribute",
    )
    parser.add_argument(
        "--marker",
        default=_DEFAULTS.expression_marker,
        help="Template expression marker character",
    )
    parser.add_argument("--workers", type=int, default=0, help="Scan threads (0=auto)")


def config_from_args(args: argparse.Namespace) -> FrameConfig:
    """Build a FrameConfig from parsed CLI arguments."""
    return FrameConfig(
        template_dir=args.template_dir,
        extensions=tuple(args.extensions) if args.extensions else _DEFAULTS.extensions,
        tag_name=args.tag,
        id_attribute=args.id_attribute,
        prefix_attribute=args.prefix_attribute,
        expression_marker=args.marker,
        module_name=getattr(args, "module_name", _DEFAULTS.module_name),
        output_path=getattr(args, "output", None),
        json_path=getattr(args, "json", None),
        fragments_dir=getattr(args, "fragments", None),
        route_to_fragments=getattr(args, "route_to_fragments", False),
        workers=args.workers,
    )
