"""Per-frame fragment templates.

A frame request only needs the markup inside one frame, so each routable
region can be written out as its own small template::

    cart/index.html  <turbo-frame id="cart-items">      -> cart_index.cart-items.html
    products/list.html  id="item_@Model.Id" prefix item_ -> products_list.item__.html

Static fragments keep their literal id.  Dynamic fragments take the id
from the ``frame_id`` variable at render time, since the concrete value
is only known per request.
"""

import hashlib
from collections.abc import Iterable
from pathlib import PurePosixPath

from perch.config import FrameConfig
from perch.errors import GenerationError
from perch.parsing.types import DocumentFrameSet, FrameRegion
from perch.templating import create_environment, render_source

FRAME_ID_VARIABLE = "frame_id"

type FragmentKey = tuple[str, str, str]

_FRAGMENT_TEMPLATE = """\
{{ header }}
<{{ tag }} id="{{ frame_id }}">
{{ content }}
</{{ tag }}>
"""


def view_name(document_name: str) -> str:
    """Flatten a logical template name into a file-name stem.

    ``"cart/index.html"`` → ``"cart_index"``.
    """
    path = PurePosixPath(document_name.replace("\\", "/"))
    parts = [*path.parent.parts, path.stem]
    return "_".join(p for p in parts if p not in ("", ".", "/"))


def sanitize_for_file_name(value: str) -> str:
    """Keep letters, digits, ``_`` and ``-``; map ``:`` and ``/`` to ``_``."""
    chars: list[str] = []
    for ch in value:
        if ch.isalnum() or ch in "_-":
            chars.append(ch)
        elif ch in ":/":
            chars.append("_")
    return "".join(chars) or "frame"


def fragment_name(document: DocumentFrameSet, region: FrameRegion) -> str:
    """File name of the fragment template generated for *region*."""
    view = view_name(document.name)
    if not region.is_dynamic:
        return f"{view}.{sanitize_for_file_name(region.identifier)}.html"
    if not region.has_prefix:
        msg = f"Dynamic frame {region.identifier!r} has no prefix; it cannot be routed."
        raise GenerationError(msg)
    return f"{view}.{sanitize_for_file_name(region.prefix or '')}_.html"


def fragment_key(document: DocumentFrameSet, region: FrameRegion) -> FragmentKey:
    """What a fragment routes: ``(document, "exact", id)`` or ``(document, "prefix", prefix)``."""
    if region.is_dynamic:
        return (document.name, "prefix", region.prefix or "")
    return (document.name, "exact", region.identifier)


def _digest_name(name: str, key: FragmentKey) -> str:
    digest = hashlib.sha1("\0".join(key).encode("utf-8")).hexdigest()[:8]
    return f"{name.removesuffix('.html')}.{digest}.html"


def assign_fragment_names(documents: Iterable[DocumentFrameSet]) -> dict[FragmentKey, str]:
    """Collision-free fragment file name for every routable region.

    Sanitizing is lossy (``cart.items`` and ``cartitems`` both flatten to
    ``cartitems``), and a static ``item__`` reads the same as the prefix
    ``item_``.  Every key whose plain name is shared with another key
    gets a short digest of its raw id or prefix appended instead.  Names
    are compared case-insensitively so they stay distinct on
    case-insensitive filesystems.  The result depends only on the set of
    regions, not on the order they are visited in.
    """
    claims: dict[str, set[FragmentKey]] = {}
    plain: dict[FragmentKey, str] = {}
    for document in documents:
        for region in document.regions:
            if region.is_dynamic and not region.has_prefix:
                continue
            key = fragment_key(document, region)
            name = fragment_name(document, region)
            plain[key] = name
            claims.setdefault(name.casefold(), set()).add(key)

    names: dict[FragmentKey, str] = {}
    for key, name in plain.items():
        if len(claims[name.casefold()]) > 1:
            name = _digest_name(name, key)
        names[key] = name
    return names


def render_fragment(
    region: FrameRegion,
    config: FrameConfig | None = None,
    *,
    source_name: str = "",
) -> str:
    """Render the standalone template source for *region*.

    Raises:
        GenerationError: If *region* is dynamic without a prefix.
    """
    cfg = config or FrameConfig()
    if region.is_dynamic and not region.has_prefix:
        msg = f"Dynamic frame {region.identifier!r} has no prefix; it cannot be routed."
        raise GenerationError(msg)

    if region.is_dynamic:
        frame_id = "{{ " + FRAME_ID_VARIABLE + " }}"
    else:
        frame_id = region.identifier

    origin = f" from {source_name}:{region.start_line}" if source_name else ""
    return render_source(
        create_environment(),
        _FRAGMENT_TEMPLATE,
        {
            "header": "{# Generated by perch" + origin + ". Do not edit. #}",
            "tag": cfg.tag_name,
            "frame_id": frame_id,
            "content": region.content.strip(),
        },
    )
