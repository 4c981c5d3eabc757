"""Frozen data types produced by the frame scanner."""

from dataclasses import dataclass
from enum import Enum

from perch.parsing.identifiers import DEFAULT_MARKER, static_portion


@dataclass(frozen=True, slots=True)
class TextSpan:
    """Half-open character range ``[start, end)`` in a document.

    ``line`` and ``column`` are 1-based and locate ``start``.
    """

    start: int
    end: int
    line: int
    column: int

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class FrameRegion:
    """One discovered frame tag and its inner markup.

    ``content`` is the verbatim text between the end of the opening tag
    and the start of the matching closing tag, so an outer region's
    content includes the markup of every region nested inside it.
    """

    identifier: str
    prefix: str | None
    content: str
    span: TextSpan
    start_line: int
    is_dynamic: bool
    marker: str = DEFAULT_MARKER

    @property
    def has_prefix(self) -> bool:
        return bool(self.prefix)

    @property
    def static_portion(self) -> str:
        """Identifier text before the first expression (whole id if static)."""
        if not self.is_dynamic:
            return self.identifier
        return static_portion(self.identifier, self.marker)


class ParseNoteKind(Enum):
    """Structural irregularities the scanner recovers from."""

    MISSING_IDENTIFIER = "missing-identifier"
    UNCLOSED_TAG = "unclosed-tag"
    STRAY_CLOSING_TAG = "stray-closing-tag"
    UNTERMINATED_TAG = "unterminated-tag"


@dataclass(frozen=True, slots=True)
class ParseNote:
    """A recovered parse irregularity. Never fatal."""

    kind: ParseNoteKind
    line: int
    message: str


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Regions that closed cleanly plus notes about everything that didn't."""

    regions: tuple[FrameRegion, ...] = ()
    notes: tuple[ParseNote, ...] = ()

    def __iter__(self):
        return iter(self.regions)

    def __len__(self) -> int:
        return len(self.regions)


@dataclass(frozen=True, slots=True)
class DocumentFrameSet:
    """A template document's identity paired with its scanned regions.

    ``path`` is where the document was read from; ``name`` is its
    logical template name (e.g. ``"cart/index.html"``).
    """

    path: str
    name: str
    regions: tuple[FrameRegion, ...] = ()
    notes: tuple[ParseNote, ...] = ()

    @property
    def has_frames(self) -> bool:
        return bool(self.regions)

    @property
    def static_regions(self) -> tuple[FrameRegion, ...]:
        return tuple(r for r in self.regions if not r.is_dynamic)

    @property
    def dynamic_regions(self) -> tuple[FrameRegion, ...]:
        return tuple(r for r in self.regions if r.is_dynamic)
