"""Perch exception hierarchy.

Shared across discovery, build, codegen, and the CLI so every module
raises and catches the same types.  The scanner and the resolver never
raise: malformed markup becomes parse notes and a missed lookup is
``None``.
"""


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when a FrameConfig is invalid.

    Typically raised by ``validate_config()`` when a build starts.
    """


class DocumentError(PerchError):
    """Raised when a template document cannot be read."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read template {path!r}: {reason}")


class GenerationError(PerchError):
    """Raised when a fragment template cannot be generated for a region."""
