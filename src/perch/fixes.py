"""Source rewrites for frame diagnostics.

Each diagnostic's ``fix`` is applied to the frame tag it was reported
for: the tag that opens on the diagnostic's line and carries its frame
id.  Edits stay inside the opening tag and never add or remove lines,
so the line numbers of the remaining diagnostics stay valid while fixes
are applied one after another.

Usage::

    fixed = fix_documents(report.diagnostics, config)
    for path, count in fixed.items():
        print(f"fixed {count} frame(s) in {path}")
"""

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from perch.config import FrameConfig
from perch.diagnostics import FixAction, FrameDiagnostic
from perch.errors import DocumentError

logger = logging.getLogger("perch.fixes")


@dataclass(frozen=True, slots=True)
class _Attribute:
    name: str
    value: str
    start: int  # Offset of the attribute name
    end: int  # Offset just past the value (or the name, for bare attributes)


def _line_offset(text: str, line: int) -> int:
    offset = 0
    for _ in range(line - 1):
        offset = text.find("\n", offset)
        if offset == -1:
            return len(text)
        offset += 1
    return offset


def _tag_end(text: str, index: int) -> int:
    """Offset of the ``>`` that terminates the tag, skipping quoted values."""
    quote = ""
    for i in range(index, len(text)):
        ch = text[i]
        if quote:
            if ch == quote:
                quote = ""
        elif ch in "\"'":
            quote = ch
        elif ch == ">":
            return i
    return -1


def _attributes(text: str, start: int, end: int) -> Iterator[_Attribute]:
    """Attributes of an opening tag between *start* and its ``>`` at *end*."""
    i = start
    while i < end:
        if text[i].isspace() or text[i] == "/":
            i += 1
            continue
        name_start = i
        while i < end and not text[i].isspace() and text[i] not in "=/":
            i += 1
        name = text[name_start:i]

        j = i
        while j < end and text[j].isspace():
            j += 1
        if j >= end or text[j] != "=":
            yield _Attribute(name, "", name_start, i)
            continue

        j += 1
        while j < end and text[j].isspace():
            j += 1
        if j < end and text[j] in "\"'":
            close = text.find(text[j], j + 1, end)
            if close == -1:
                close = end
            value = text[j + 1:close]
            i = close + 1
        else:
            value_start = j
            while j < end and not text[j].isspace() and text[j] != "/":
                j += 1
            value = text[value_start:j]
            i = j
        yield _Attribute(name, value, name_start, i)


def _first(attributes: list[_Attribute], name: str) -> _Attribute | None:
    for attribute in attributes:
        if attribute.name == name:
            return attribute
    return None


def _quoted(value: str) -> str:
    quote = "'" if '"' in value else '"'
    return f"{quote}{value}{quote}"


def apply_fix(
    text: str,
    diagnostic: FrameDiagnostic,
    config: FrameConfig | None = None,
) -> str | None:
    """Return *text* with *diagnostic*'s fix applied, or ``None`` if its tag isn't found."""
    cfg = config or FrameConfig()
    line_start = _line_offset(text, diagnostic.line)
    line_end = text.find("\n", line_start)
    if line_end == -1:
        line_end = len(text)

    opening = re.compile("<" + re.escape(cfg.tag_name) + r"(?=[\s/>])", re.IGNORECASE)
    for tag in opening.finditer(text, line_start):
        if tag.start() >= line_end:
            break
        end = _tag_end(text, tag.end())
        if end == -1:
            return None
        attributes = list(_attributes(text, tag.end(), end))
        identifier = _first(attributes, cfg.id_attribute)
        if identifier is None or identifier.value != diagnostic.identifier:
            continue

        fix = diagnostic.fix
        prefix = _first(attributes, cfg.prefix_attribute)
        match fix.action:
            case FixAction.ADD_PREFIX:
                attribute = f" {cfg.prefix_attribute}={_quoted(fix.prefix or '')}"
                return text[:identifier.end] + attribute + text[identifier.end:]
            case FixAction.REPLACE_PREFIX:
                if prefix is None:
                    return None
                attribute = f"{cfg.prefix_attribute}={_quoted(fix.prefix or '')}"
                return text[:prefix.start] + attribute + text[prefix.end:]
            case FixAction.REMOVE_PREFIX:
                if prefix is None:
                    return None
                start = prefix.start
                while start > tag.end() and text[start - 1] in " \t":
                    start -= 1
                return text[:start] + text[prefix.end:]
    return None


def apply_fixes(
    text: str,
    diagnostics: Iterable[FrameDiagnostic],
    config: FrameConfig | None = None,
) -> tuple[str, int]:
    """Apply every fix that can be located. Returns the new text and the count applied."""
    applied = 0
    for diagnostic in diagnostics:
        fixed = apply_fix(text, diagnostic, config)
        if fixed is None:
            logger.warning(
                "%s:%d: could not locate frame %r to fix",
                diagnostic.document,
                diagnostic.line,
                diagnostic.identifier,
            )
            continue
        text = fixed
        applied += 1
    return text, applied


def fix_documents(
    diagnostics: Iterable[FrameDiagnostic],
    config: FrameConfig | None = None,
) -> dict[str, int]:
    """Rewrite the template files the diagnostics point at.

    Returns the number of fixes applied per document path.  Files where
    nothing could be applied are left untouched.

    Raises:
        DocumentError: If a template cannot be read or written.
    """
    by_document: dict[str, list[FrameDiagnostic]] = {}
    for diagnostic in diagnostics:
        by_document.setdefault(diagnostic.document, []).append(diagnostic)

    fixed: dict[str, int] = {}
    for document, pending in by_document.items():
        path = Path(document)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentError(document, str(exc)) from exc

        text, applied = apply_fixes(text, pending, config)
        if not applied:
            continue
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise DocumentError(document, str(exc)) from exc
        logger.debug("Applied %d fix(es) to %s", applied, document)
        fixed[document] = applied
    return fixed
