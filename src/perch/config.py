"""Build configuration.

Every knob that shapes a build lives on one frozen FrameConfig.  Builds
validate it up front so a bad tag name fails before any file is read.
"""

from dataclasses import dataclass
from pathlib import Path

from perch.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class FrameConfig:
    """Frame discovery and routing configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = FrameConfig(template_dir="app/templates", output_path="frame_routes.py")
    """

    # Templates
    template_dir: str | Path = "templates"
    extensions: tuple[str, ...] = (".html",)

    # Tag surface
    tag_name: str = "turbo-frame"
    id_attribute: str = "id"
    prefix_attribute: str = "frame-prefix"
    expression_marker: str = "@"

    # Generated output
    module_name: str = "frame_routes"
    output_path: str | Path | None = None  # Generated lookup module
    json_path: str | Path | None = None  # Serialized routing table
    fragments_dir: str | Path | None = None  # Per-frame fragment templates
    route_to_fragments: bool = False  # Table values name fragments instead of documents

    # Scanning
    workers: int = 0  # 0 = auto-detect from CPU count


def validate_config(config: FrameConfig) -> None:
    """Raise ConfigurationError if *config* cannot drive a build."""
    if len(config.expression_marker) != 1:
        msg = (
            f"expression_marker must be a single character, "
            f"got {config.expression_marker!r}."
        )
        raise ConfigurationError(msg)

    for field_name in ("tag_name", "id_attribute", "prefix_attribute"):
        value = getattr(config, field_name)
        if not value or any(ch.isspace() for ch in value):
            msg = f"{field_name} must be a non-empty name without whitespace, got {value!r}."
            raise ConfigurationError(msg)

    if config.id_attribute == config.prefix_attribute:
        msg = "id_attribute and prefix_attribute must differ."
        raise ConfigurationError(msg)

    for ext in config.extensions:
        if not ext.startswith("."):
            msg = f"Template extension {ext!r} must start with '.'."
            raise ConfigurationError(msg)

    if not config.module_name.isidentifier():
        msg = f"module_name must be a Python identifier, got {config.module_name!r}."
        raise ConfigurationError(msg)

    if config.route_to_fragments and config.fragments_dir is None:
        msg = "route_to_fragments=True requires fragments_dir to be set."
        raise ConfigurationError(msg)

    if config.workers < 0:
        msg = f"workers must be >= 0, got {config.workers}."
        raise ConfigurationError(msg)
