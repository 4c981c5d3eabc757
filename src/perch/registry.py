"""Hot-reloadable frame registry.

Owns a FrameRouter and rebuilds its table when templates change.  A
rebuild runs the whole pipeline and swaps the finished table in one
step; requests resolving during a rebuild keep using the previous
snapshot until the swap.

Usage::

    registry = FrameRegistry(FrameConfig(template_dir="templates"))
    registry.load()

    # From a file watcher:
    registry.notify_changed(["templates/cart/index.html"])

    # Per request:
    template = registry.resolve(request.headers.get("Turbo-Frame", ""))
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

from perch.config import FrameConfig
from perch.diagnostics import AnalysisReport
from perch.discovery import TemplateSource, is_watched
from perch.errors import PerchError
from perch.pipeline import BuildResult, build
from perch.routing.resolver import FrameRouter
from perch.routing.table import FrameMatch

logger = logging.getLogger("perch.registry")

type SourceLoader = Callable[[], Iterable[TemplateSource]]


class FrameRegistry:
    """Builds routing tables on demand and serves lookups from the latest one."""

    __slots__ = ("_config", "_loader", "_lock", "_result", "_router")

    def __init__(
        self,
        config: FrameConfig | None = None,
        *,
        loader: SourceLoader | None = None,
    ) -> None:
        self._config = config or FrameConfig()
        self._loader = loader
        self._lock = threading.Lock()
        self._result: BuildResult | None = None
        self._router = FrameRouter()

    @property
    def config(self) -> FrameConfig:
        return self._config

    @property
    def router(self) -> FrameRouter:
        return self._router

    @property
    def generation(self) -> int:
        return self._router.generation

    @property
    def report(self) -> AnalysisReport | None:
        """Analysis from the last successful build, if any."""
        result = self._result
        return result.report if result is not None else None

    def load(self) -> BuildResult:
        """Rebuild the routing table and swap it in.

        On failure the previous table stays in service and the error
        propagates to the caller.
        """
        with self._lock:
            try:
                sources = self._loader() if self._loader is not None else None
                result = build(self._config, sources)
            except (PerchError, OSError):
                logger.exception(
                    "Frame table rebuild failed; keeping generation %d",
                    self._router.generation,
                )
                raise
            self._result = result
            generation = self._router.swap(result.table)

        if not result.ok:
            logger.warning(
                "Generation %d built with %d frame error(s); affected frames are not routable",
                generation,
                len(result.report.errors),
            )
        return result

    def notify_changed(self, paths: Iterable[str | Path]) -> bool:
        """Rebuild if any of *paths* is a watched template.

        Always rebuilds when nothing has been loaded yet.  Returns True if
        a rebuild happened.
        """
        cfg = self._config
        changed = [p for p in paths if is_watched(p, cfg.template_dir, cfg.extensions)]
        if not changed and self._result is not None:
            return False
        if changed:
            logger.debug("Template change detected: %s", ", ".join(str(p) for p in changed))
        self.load()
        return True

    def match(self, frame_id: str) -> FrameMatch | None:
        return self._router.match(frame_id)

    def resolve(self, frame_id: str) -> str | None:
        """Return the template reference for *frame_id*, or ``None``."""
        return self._router.resolve(frame_id)
