"""Single-pass frame-tag scanner.

Walks a template document once, jumping between ``<`` characters, and
tracks open frame tags on a stack.  Only one tag shape is understood
(``<turbo-frame ...>`` by default); everything else, including template
expressions and HTML comments, is opaque text.

Usage::

    result = scan(source)
    for region in result.regions:
        print(region.start_line, region.identifier, region.is_dynamic)

Regions are emitted when their closing tag is seen, so a nested region
appears before the region that contains it.  Unclosed tags, stray
closing tags, and frames without an id are recorded in
``result.notes`` and never raise.
"""

from dataclasses import dataclass

from perch.config import FrameConfig
from perch.parsing.identifiers import contains_expression
from perch.parsing.types import (
    FrameRegion,
    ParseNote,
    ParseNoteKind,
    ScanResult,
    TextSpan,
)

_DEFAULT_CONFIG = FrameConfig()


@dataclass(slots=True)
class _OpenFrame:
    """A frame tag whose closing tag has not been seen yet.

    ``identifier`` is ``None`` for tags that will be dropped; they stay
    on the stack so their closing tag pairs with the right opener.
    """

    identifier: str | None
    prefix: str | None
    line: int
    content_start: int
    content_line: int
    content_column: int


@dataclass(slots=True)
class _OpeningTag:
    attributes: dict[str, str]
    end: int  # Offset just past the closing ``>``
    self_closing: bool


class _LineIndex:
    """Offset → (line, column) lookup for a forward-moving scan."""

    __slots__ = ("_line", "_line_start", "_pos", "_text")

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0
        self._line = 1
        self._line_start = 0

    def locate(self, offset: int) -> tuple[int, int]:
        if offset < self._pos:
            self._pos = 0
            self._line = 1
            self._line_start = 0
        newlines = self._text.count("\n", self._pos, offset)
        if newlines:
            self._line += newlines
            self._line_start = self._text.rfind("\n", self._pos, offset) + 1
        self._pos = offset
        return self._line, offset - self._line_start + 1


def _matches_at(text: str, index: int, token: str) -> bool:
    """Case-insensitive ``text.startswith(token, index)``."""
    return text[index:index + len(token)].lower() == token


def _ends_tag_name(text: str, index: int) -> bool:
    """True if the tag name ends at *index* (so ``<turbo-frames>`` doesn't match)."""
    if index >= len(text):
        return True
    ch = text[index]
    return ch.isspace() or ch in "/>"


def _is_self_close(text: str, index: int) -> bool:
    return text[index] == "/" and index + 1 < len(text) and text[index + 1] == ">"


def _parse_opening_tag(text: str, index: int) -> _OpeningTag | None:
    """Parse an attribute list starting right after the tag name.

    Accepts double-quoted, single-quoted, unquoted, and bare attributes
    in any order across any number of lines.  The first occurrence of a
    repeated attribute wins.  Returns ``None`` if the text ends before
    the tag is terminated.
    """
    attributes: dict[str, str] = {}
    n = len(text)
    i = index

    while i < n:
        ch = text[i]
        if ch.isspace():
            i += 1
            continue
        if ch == ">":
            return _OpeningTag(attributes, i + 1, self_closing=False)
        if _is_self_close(text, i):
            return _OpeningTag(attributes, i + 2, self_closing=True)
        if ch == "/":
            i += 1
            continue

        start = i
        while (
            i < n
            and not text[i].isspace()
            and text[i] not in "=>"
            and not _is_self_close(text, i)
        ):
            i += 1
        name = text[start:i]

        j = i
        while j < n and text[j].isspace():
            j += 1

        if j < n and text[j] == "=":
            j += 1
            while j < n and text[j].isspace():
                j += 1
            if j >= n:
                return None
            quote = text[j]
            if quote in "\"'":
                close = text.find(quote, j + 1)
                if close == -1:
                    return None
                value = text[j + 1:close]
                i = close + 1
            else:
                value_start = j
                while (
                    j < n
                    and not text[j].isspace()
                    and text[j] != ">"
                    and not _is_self_close(text, j)
                ):
                    j += 1
                value = text[value_start:j]
                i = j
        else:
            # Bare attribute (no value)
            value = ""

        attributes.setdefault(name, value)

    return None


def _closing_tag_end(text: str, index: int) -> int:
    """Offset just past ``>`` of a closing tag, or -1 if it isn't one."""
    n = len(text)
    i = index
    while i < n and text[i].isspace():
        i += 1
    if i < n and text[i] == ">":
        return i + 1
    return -1


def scan(text: str, config: FrameConfig | None = None) -> ScanResult:
    """Scan *text* for frame regions.

    Args:
        text: Template document source.
        config: Tag name, attribute names, and expression marker to use.
            Defaults to ``FrameConfig()``.

    Returns:
        A :class:`ScanResult` with every fully closed region (in closing
        order) and the parse notes collected along the way.
    """
    cfg = config or _DEFAULT_CONFIG
    if not text:
        return ScanResult()

    tag = cfg.tag_name.lower()
    open_token = "<" + tag
    close_token = "</" + tag
    marker = cfg.expression_marker

    regions: list[FrameRegion] = []
    notes: list[ParseNote] = []
    stack: list[_OpenFrame] = []
    lines = _LineIndex(text)
    pos = 0

    while True:
        lt = text.find("<", pos)
        if lt == -1:
            break

        # -- closing tag ---------------------------------------------------
        if _matches_at(text, lt, close_token):
            name_end = lt + len(close_token)
            end = _closing_tag_end(text, name_end)
            if end == -1:
                pos = lt + 1
                continue
            if not stack:
                line, _ = lines.locate(lt)
                notes.append(ParseNote(
                    kind=ParseNoteKind.STRAY_CLOSING_TAG,
                    line=line,
                    message=f"</{cfg.tag_name}> on line {line} has no matching opening tag.",
                ))
                pos = end
                continue
            frame = stack.pop()
            if frame.identifier is not None:
                regions.append(FrameRegion(
                    identifier=frame.identifier,
                    prefix=frame.prefix,
                    content=text[frame.content_start:lt],
                    span=TextSpan(
                        start=frame.content_start,
                        end=lt,
                        line=frame.content_line,
                        column=frame.content_column,
                    ),
                    start_line=frame.line,
                    is_dynamic=contains_expression(frame.identifier, marker),
                    marker=marker,
                ))
            pos = end
            continue

        # -- opening tag ---------------------------------------------------
        if _matches_at(text, lt, open_token) and _ends_tag_name(text, lt + len(open_token)):
            line, _ = lines.locate(lt)
            opening = _parse_opening_tag(text, lt + len(open_token))
            if opening is None:
                notes.append(ParseNote(
                    kind=ParseNoteKind.UNTERMINATED_TAG,
                    line=line,
                    message=f"<{cfg.tag_name}> on line {line} is never terminated with '>'.",
                ))
                break

            identifier: str | None = opening.attributes.get(cfg.id_attribute)
            prefix = opening.attributes.get(cfg.prefix_attribute)
            if not identifier:
                notes.append(ParseNote(
                    kind=ParseNoteKind.MISSING_IDENTIFIER,
                    line=line,
                    message=(
                        f"<{cfg.tag_name}> on line {line} has no "
                        f"{cfg.id_attribute!r} attribute and was skipped."
                    ),
                ))
                identifier = None

            content_line, content_column = lines.locate(opening.end)
            if opening.self_closing:
                if identifier is not None:
                    regions.append(FrameRegion(
                        identifier=identifier,
                        prefix=prefix,
                        content="",
                        span=TextSpan(
                            start=opening.end,
                            end=opening.end,
                            line=content_line,
                            column=content_column,
                        ),
                        start_line=line,
                        is_dynamic=contains_expression(identifier, marker),
                        marker=marker,
                    ))
            else:
                stack.append(_OpenFrame(
                    identifier=identifier,
                    prefix=prefix,
                    line=line,
                    content_start=opening.end,
                    content_line=content_line,
                    content_column=content_column,
                ))
            pos = opening.end
            continue

        pos = lt + 1

    for frame in stack:
        label = frame.identifier if frame.identifier is not None else "(no id)"
        notes.append(ParseNote(
            kind=ParseNoteKind.UNCLOSED_TAG,
            line=frame.line,
            message=f"<{cfg.tag_name}> {label!r} on line {frame.line} is never closed.",
        ))

    return ScanResult(regions=tuple(regions), notes=tuple(notes))
