"""Filesystem template discovery.

Walks a template directory and loads every document with a watched
extension.  Each document's logical name is its path relative to the
template directory, with ``/`` separators (``"cart/index.html"``), and
is the default template reference for the frames it contains.

Directories starting with ``.`` or ``_`` are skipped.  Results are
sorted by logical name so every build processes documents in the same
order.
"""

from dataclasses import dataclass
from pathlib import Path

from perch.errors import DocumentError


@dataclass(frozen=True, slots=True)
class TemplateSource:
    """A loaded template document and its identity."""

    path: str
    name: str
    text: str


def discover_templates(
    template_dir: str | Path,
    extensions: tuple[str, ...] = (".html",),
) -> list[TemplateSource]:
    """Load every template under *template_dir*.

    Args:
        template_dir: Root template directory.
        extensions: File suffixes to load (case-insensitive).

    Returns:
        Sources sorted by logical name.

    Raises:
        FileNotFoundError: If *template_dir* is not a directory.
        DocumentError: If a template cannot be read as UTF-8.
    """
    root = Path(template_dir).resolve()
    if not root.is_dir():
        raise FileNotFoundError(f"Template directory not found: {root}")

    suffixes = {ext.lower() for ext in extensions}
    sources: list[TemplateSource] = []
    for file in _walk(root):
        if file.suffix.lower() not in suffixes:
            continue
        sources.append(load_template(file, root))

    sources.sort(key=lambda s: s.name)
    return sources


def load_template(file: Path, root: Path) -> TemplateSource:
    """Read one template document relative to *root*."""
    try:
        text = file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentError(str(file), str(exc)) from exc
    name = file.relative_to(root).as_posix()
    return TemplateSource(path=str(file), name=name, text=text)


def is_watched(path: str | Path, template_dir: str | Path, extensions: tuple[str, ...]) -> bool:
    """True if *path* is a template this build would load."""
    candidate = Path(path).resolve()
    root = Path(template_dir).resolve()
    if not candidate.is_relative_to(root):
        return False
    relative = candidate.relative_to(root)
    if any(part.startswith((".", "_")) for part in relative.parts[:-1]):
        return False
    return candidate.suffix.lower() in {ext.lower() for ext in extensions}


def _walk(directory: Path):
    for item in sorted(directory.iterdir()):
        if item.is_dir():
            if item.name.startswith((".", "_")):
                continue
            yield from _walk(item)
        elif item.is_file():
            yield item
