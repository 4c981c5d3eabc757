"""Two-tier frame routing table: exact ids first, then stable prefixes.

Static frame ids go into the exact table.  Dynamic frame ids can only
be routed through the stable prefix their author declared::

    <turbo-frame id="cart-items">                          -> exact["cart-items"]
    <turbo-frame id="item_@Model.Id" frame-prefix="item_"> -> prefixes[("item_", ...)]

Lookups try the exact table, then scan prefixes in registration order.
The first matching prefix wins; there is no longest-match preference.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Literal

from perch.parsing.types import DocumentFrameSet, FrameRegion

type ReferenceFn = Callable[[DocumentFrameSet, FrameRegion], str]


@dataclass(frozen=True, slots=True)
class FrameMatch:
    """Result of a successful frame lookup."""

    frame_id: str
    reference: str
    kind: Literal["exact", "prefix"]
    key: str


@dataclass(frozen=True, slots=True)
class RoutingTable:
    """Immutable frame routing snapshot.

    ``exact`` maps static frame ids to template references.  ``prefixes``
    holds ``(prefix, reference)`` pairs, unique by prefix, in the order
    they were first registered.
    """

    exact: Mapping[str, str]
    prefixes: tuple[tuple[str, str], ...] = ()

    @classmethod
    def empty(cls) -> RoutingTable:
        return cls(exact=MappingProxyType({}), prefixes=())

    def __len__(self) -> int:
        return len(self.exact) + len(self.prefixes)

    def match(self, frame_id: str) -> FrameMatch | None:
        """Look up *frame_id*. Returns ``None`` on a miss, never raises."""
        reference = self.exact.get(frame_id)
        if reference is not None:
            return FrameMatch(frame_id, reference, "exact", frame_id)
        for prefix, reference in self.prefixes:
            if frame_id.startswith(prefix):
                return FrameMatch(frame_id, reference, "prefix", prefix)
        return None

    def resolve(self, frame_id: str) -> str | None:
        """Return the template reference for *frame_id*, or ``None``."""
        found = self.match(frame_id)
        return found.reference if found is not None else None

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form with exact ids sorted and prefixes in scan order."""
        return {
            "exact": {key: self.exact[key] for key in sorted(self.exact)},
            "prefixes": [[prefix, reference] for prefix, reference in self.prefixes],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RoutingTable:
        exact = {str(k): str(v) for k, v in dict(data.get("exact", {})).items()}
        prefixes: list[tuple[str, str]] = []
        seen: set[str] = set()
        for prefix, reference in data.get("prefixes", []):
            if prefix in seen:
                continue
            seen.add(prefix)
            prefixes.append((str(prefix), str(reference)))
        return cls(exact=MappingProxyType(exact), prefixes=tuple(prefixes))


def document_reference(document: DocumentFrameSet, region: FrameRegion) -> str:
    """Default template reference: the logical name of the frame's document."""
    return document.name


def aggregate(
    documents: Iterable[DocumentFrameSet],
    reference: ReferenceFn | None = None,
) -> RoutingTable:
    """Merge every document's regions into one routing table.

    - Static regions go into ``exact``; a later document overwrites an
      earlier one for the same id.
    - Dynamic regions with a prefix go into ``prefixes``; the first
      registration of a prefix wins and later ones are skipped.
    - Dynamic regions without a prefix are not routable and are skipped.

    Args:
        documents: Scanned documents, in processing order.
        reference: ``(document, region) -> str`` naming the template to
            render for a region.  Defaults to the document's name.
    """
    ref = reference or document_reference
    exact: dict[str, str] = {}
    prefixes: dict[str, str] = {}

    for document in documents:
        for region in document.regions:
            if not region.is_dynamic:
                exact[region.identifier] = ref(document, region)
            elif region.has_prefix:
                prefix = region.prefix or ""
                if prefix not in prefixes:
                    prefixes[prefix] = ref(document, region)

    return RoutingTable(
        exact=MappingProxyType(exact),
        prefixes=tuple(prefixes.items()),
    )
