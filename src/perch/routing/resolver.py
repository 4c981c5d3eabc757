"""Request-time frame resolution over swappable routing snapshots.

Readers grab the current table reference once and run the whole lookup
against it, so a concurrent ``swap()`` is seen either fully or not at
all.  Writers are serialized by a lock; readers never take it.

Usage::

    router = FrameRouter(table)
    reference = router.resolve(frame_id)  # None on a miss

    # After templates change:
    router.swap(new_table)
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from perch.routing.table import FrameMatch, RoutingTable

logger = logging.getLogger("perch.routing")


@dataclass(frozen=True, slots=True)
class _Snapshot:
    """A routing table tagged with the generation that produced it."""

    table: RoutingTable
    generation: int


class FrameRouter:
    """Thread-safe holder for the active RoutingTable."""

    __slots__ = ("_lock", "_snapshot")

    def __init__(self, table: RoutingTable | None = None) -> None:
        self._lock = threading.Lock()
        self._snapshot = _Snapshot(table or RoutingTable.empty(), 0)

    @property
    def table(self) -> RoutingTable:
        return self._snapshot.table

    @property
    def generation(self) -> int:
        """Number of swaps performed so far (0 for the initial table)."""
        return self._snapshot.generation

    def swap(self, table: RoutingTable) -> int:
        """Install *table* as the active snapshot. Returns the new generation."""
        with self._lock:
            generation = self._snapshot.generation + 1
            self._snapshot = _Snapshot(table, generation)
        logger.debug("Routing table generation %d installed (%d entries)", generation, len(table))
        return generation

    def match(self, frame_id: str) -> FrameMatch | None:
        """Look up *frame_id* in the current snapshot."""
        snapshot = self._snapshot
        found = snapshot.table.match(frame_id)
        if found is None:
            logger.debug("No frame route for %r (generation %d)", frame_id, snapshot.generation)
        return found

    def resolve(self, frame_id: str) -> str | None:
        """Return the template reference for *frame_id*, or ``None``."""
        found = self.match(frame_id)
        return found.reference if found is not None else None
