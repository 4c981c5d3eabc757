"""Build pipeline — scan, diagnose, and aggregate a template tree.

Each document is scanned independently (the scanner is a pure function
of the document text), so scanning fans out over a thread pool.  The
results are put back in input order before analysis and aggregation so
the routing table never depends on thread scheduling.

Usage::

    result = build(FrameConfig(template_dir="templates"))
    if not result.ok:
        print(result.report.summary())
    write_outputs(result, config)
"""

import logging
import os
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from perch.codegen import dumps, render_module
from perch.config import FrameConfig, validate_config
from perch.diagnostics import AnalysisReport, analyze
from perch.discovery import TemplateSource, discover_templates
from perch.fragments import assign_fragment_names, fragment_key, render_fragment
from perch.parsing.scanner import scan
from perch.parsing.types import DocumentFrameSet
from perch.routing.table import ReferenceFn, RoutingTable, aggregate

logger = logging.getLogger("perch.build")


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Everything one build pass produced."""

    documents: tuple[DocumentFrameSet, ...]
    table: RoutingTable
    report: AnalysisReport

    @property
    def ok(self) -> bool:
        return self.report.ok


def scan_document(source: TemplateSource, config: FrameConfig) -> DocumentFrameSet:
    """Scan one loaded template into a DocumentFrameSet."""
    result = scan(source.text, config)
    for note in result.notes:
        logger.debug("%s:%d: %s", source.name, note.line, note.message)
    return DocumentFrameSet(
        path=source.path,
        name=source.name,
        regions=result.regions,
        notes=result.notes,
    )


def _worker_count(config: FrameConfig, jobs: int) -> int:
    workers = config.workers or os.cpu_count() or 1
    return max(1, min(workers, jobs))


def scan_documents(
    sources: Iterable[TemplateSource],
    config: FrameConfig,
) -> tuple[DocumentFrameSet, ...]:
    """Scan every source, in parallel when there is more than one."""
    pending = list(sources)
    workers = _worker_count(config, len(pending))
    if workers == 1:
        return tuple(scan_document(source, config) for source in pending)

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="perch-scan") as pool:
        return tuple(pool.map(lambda source: scan_document(source, config), pending))


def _reference_for(
    config: FrameConfig,
    documents: tuple[DocumentFrameSet, ...],
) -> ReferenceFn | None:
    if not config.route_to_fragments:
        return None
    names = assign_fragment_names(documents)
    return lambda document, region: names[fragment_key(document, region)]


def build(
    config: FrameConfig | None = None,
    sources: Iterable[TemplateSource] | None = None,
) -> BuildResult:
    """Run one full build pass.

    Args:
        config: Build configuration.  Validated before anything runs.
        sources: Pre-loaded documents.  When omitted, templates are
            discovered under ``config.template_dir``.

    Raises:
        ConfigurationError: If *config* is invalid.
        FileNotFoundError: If the template directory does not exist.
        DocumentError: If a template cannot be read.
    """
    cfg = config or FrameConfig()
    validate_config(cfg)

    if sources is None:
        sources = discover_templates(cfg.template_dir, cfg.extensions)

    documents = scan_documents(sources, cfg)
    report = analyze(documents)
    table = aggregate(documents, _reference_for(cfg, documents))

    logger.info(
        "Scanned %d templates: %d frames, %d exact routes, %d prefix routes, %d error(s)",
        report.documents_scanned,
        report.frames_found,
        len(table.exact),
        len(table.prefixes),
        len(report.errors),
    )
    return BuildResult(documents=documents, table=table, report=report)


def _fragment_sources(result: BuildResult, config: FrameConfig) -> dict[str, str]:
    """Fragment file name → template source, following the table's precedence."""
    names = assign_fragment_names(result.documents)
    fragments: dict[str, str] = {}
    for document in result.documents:
        for region in document.regions:
            if region.is_dynamic and not region.has_prefix:
                continue
            name = names[fragment_key(document, region)]
            if region.is_dynamic and name in fragments:
                continue
            fragments[name] = render_fragment(region, config, source_name=document.name)
    return fragments


def write_outputs(result: BuildResult, config: FrameConfig) -> list[Path]:
    """Write every output *config* asks for. Returns the written paths."""
    written: list[Path] = []

    if config.output_path is not None:
        path = Path(config.output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_module(result.table, module_name=config.module_name), encoding="utf-8")
        written.append(path)

    if config.json_path is not None:
        path = Path(config.json_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dumps(result.table), encoding="utf-8")
        written.append(path)

    if config.fragments_dir is not None:
        directory = Path(config.fragments_dir)
        directory.mkdir(parents=True, exist_ok=True)
        for name, source in sorted(_fragment_sources(result, config).items()):
            path = directory / name
            path.write_text(source, encoding="utf-8")
            written.append(path)

    for path in written:
        logger.debug("Wrote %s", path)
    return written
