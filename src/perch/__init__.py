"""Perch — frame discovery and routing for server-rendered templates.

Finds ``<turbo-frame>`` regions in templates, flags frame ids that can't
be routed, and builds a lookup table that maps an inbound frame id to
the template that renders it.

Basic usage::

    from perch import FrameConfig, build

    result = build(FrameConfig(template_dir="templates"))
    print(result.report.summary())
    result.table.resolve("cart-items")   # "cart/index.html"
    result.table.resolve("item_42")      # via the "item_" prefix

Hot reload::

    from perch import FrameRegistry

    registry = FrameRegistry(FrameConfig(template_dir="templates"))
    registry.load()
    registry.notify_changed(changed_paths)
"""

__version__ = "0.1.0"
__all__ = [
    "AnalysisReport",
    "BuildResult",
    "ConfigurationError",
    "DocumentFrameSet",
    "FrameConfig",
    "FrameRegion",
    "FrameRegistry",
    "FrameRouter",
    "PerchError",
    "RoutingTable",
    "aggregate",
    "analyze",
    "build",
    "scan",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "FrameConfig":
        from perch.config import FrameConfig

        return FrameConfig

    if name in ("FrameRegion", "DocumentFrameSet"):
        from perch.parsing import types as _types

        return getattr(_types, name)

    if name == "scan":
        from perch.parsing.scanner import scan

        return scan

    if name in ("AnalysisReport", "analyze"):
        from perch import diagnostics as _diagnostics

        return getattr(_diagnostics, name)

    if name in ("RoutingTable", "aggregate"):
        from perch.routing import table as _table

        return getattr(_table, name)

    if name == "FrameRouter":
        from perch.routing.resolver import FrameRouter

        return FrameRouter

    if name in ("BuildResult", "build"):
        from perch import pipeline as _pipeline

        return getattr(_pipeline, name)

    if name == "FrameRegistry":
        from perch.registry import FrameRegistry

        return FrameRegistry

    if name in ("PerchError", "ConfigurationError"):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
