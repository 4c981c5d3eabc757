"""Frame authoring diagnostics — build-time validation of frame ids and prefixes.

Checks every scanned frame region against one rule table:

=========  ==========  ============  ==========================
dynamic    has prefix  prefix valid  outcome
=========  ==========  ============  ==========================
no         no          —             ok
no         yes         —             unnecessary prefix (info)
yes        no          —             missing prefix (error)
yes        yes         yes           ok
yes        yes         no            mismatched prefix (error)
=========  ==========  ============  ==========================

Diagnostics never stop a build.  A dynamic frame without a prefix is
simply left out of the routing table.  Every diagnostic carries a
``fix``: add the inferred prefix, replace a mismatched one with it, or
remove an unnecessary one.  ``perch check --fix`` applies them.

Usage::

    report = analyze(documents)
    for diagnostic in report.diagnostics:
        print(f"{diagnostic.severity.value}: {diagnostic.message}")

    # Or via CLI:
    #   perch check templates/

"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from perch.parsing.types import DocumentFrameSet, FrameRegion

# ---------------------------------------------------------------------------
# Diagnostic types
# ---------------------------------------------------------------------------


class Severity(Enum):
    """Severity of a frame diagnostic."""

    ERROR = "error"
    INFO = "info"


class DiagnosticKind(Enum):
    """Outcome of classifying one frame region."""

    OK = ("FRAME000", None)
    MISSING_PREFIX = ("FRAME001", Severity.ERROR)
    MISMATCHED_PREFIX = ("FRAME002", Severity.ERROR)
    UNNECESSARY_PREFIX = ("FRAME003", Severity.INFO)

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def severity(self) -> Severity | None:
        return self.value[1]


DEFAULT_PREFIX = "frame_"


class FixAction(Enum):
    """Source edit that resolves a diagnostic."""

    ADD_PREFIX = "add-prefix"
    REPLACE_PREFIX = "replace-prefix"
    REMOVE_PREFIX = "remove-prefix"


@dataclass(frozen=True, slots=True)
class PrefixFix:
    """Suggested prefix attribute edit. ``prefix`` is ``None`` for removal."""

    action: FixAction
    prefix: str | None = None

    @property
    def description(self) -> str:
        match self.action:
            case FixAction.ADD_PREFIX:
                return f'add prefix "{self.prefix}"'
            case FixAction.REPLACE_PREFIX:
                return f'change prefix to "{self.prefix}"'
            case FixAction.REMOVE_PREFIX:
                return "remove the prefix"


def infer_prefix(static_portion: str) -> str:
    """Prefix to suggest for a dynamic id with the given static portion.

    Ids that start with an expression have nothing stable to route on,
    so they get ``DEFAULT_PREFIX``.
    """
    return static_portion or DEFAULT_PREFIX


@dataclass(frozen=True, slots=True)
class FrameDiagnostic:
    """A single authoring problem found in a template document."""

    kind: DiagnosticKind
    document: str
    line: int
    identifier: str
    prefix: str | None = None
    static_portion: str = ""

    def __post_init__(self) -> None:
        if self.kind is DiagnosticKind.OK:
            msg = f"Frame id {self.identifier!r} is ok; there is nothing to report."
            raise ValueError(msg)

    @property
    def severity(self) -> Severity:
        severity = self.kind.severity
        if severity is None:
            msg = f"{self.kind.name} has no severity."
            raise ValueError(msg)
        return severity

    @property
    def code(self) -> str:
        return self.kind.code

    @property
    def fix(self) -> PrefixFix:
        """The prefix edit that makes this frame routable or clean."""
        match self.kind:
            case DiagnosticKind.MISSING_PREFIX:
                return PrefixFix(FixAction.ADD_PREFIX, infer_prefix(self.static_portion))
            case DiagnosticKind.MISMATCHED_PREFIX:
                return PrefixFix(FixAction.REPLACE_PREFIX, infer_prefix(self.static_portion))
            case _:
                return PrefixFix(FixAction.REMOVE_PREFIX)

    @property
    def message(self) -> str:
        match self.kind:
            case DiagnosticKind.MISSING_PREFIX:
                return (
                    f'Dynamic frame id "{self.identifier}" needs a stable prefix '
                    f"attribute so requests for it can be routed."
                )
            case DiagnosticKind.MISMATCHED_PREFIX:
                return (
                    f'Prefix "{self.prefix}" does not match the static portion '
                    f'"{self.static_portion}" of frame id "{self.identifier}".'
                )
            case DiagnosticKind.UNNECESSARY_PREFIX:
                return (
                    f'Static frame id "{self.identifier}" does not need a prefix; '
                    f"it is routed by exact match."
                )
            case _:
                return f'Frame id "{self.identifier}" is ok.'


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def prefix_is_valid(region: FrameRegion) -> bool:
    """True if the region's declared prefix agrees with its static id text.

    A fully dynamic id (empty static portion) accepts any prefix.
    Otherwise the static portion must start with the prefix.
    Regions that are static or carry no prefix are trivially valid.
    """
    if not region.is_dynamic or not region.has_prefix:
        return True

    static = region.static_portion
    prefix = region.prefix or ""
    if not static:
        return True
    return static == prefix or static.startswith(prefix)


def classify(region: FrameRegion) -> DiagnosticKind:
    """Apply the rule table to one region."""
    if not region.is_dynamic:
        if region.has_prefix:
            return DiagnosticKind.UNNECESSARY_PREFIX
        return DiagnosticKind.OK
    if not region.has_prefix:
        return DiagnosticKind.MISSING_PREFIX
    if not prefix_is_valid(region):
        return DiagnosticKind.MISMATCHED_PREFIX
    return DiagnosticKind.OK


def diagnose(region: FrameRegion, document: str) -> FrameDiagnostic | None:
    """Return the diagnostic for *region*, or ``None`` when it is ok."""
    kind = classify(region)
    if kind is DiagnosticKind.OK:
        return None
    return FrameDiagnostic(
        kind=kind,
        document=document,
        line=region.start_line,
        identifier=region.identifier,
        prefix=region.prefix,
        static_portion=region.static_portion,
    )


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class AnalysisReport:
    """Result of analyzing every frame in a set of documents."""

    diagnostics: list[FrameDiagnostic] = field(default_factory=list)
    documents_scanned: int = 0
    frames_found: int = 0
    dynamic_frames: int = 0

    @property
    def errors(self) -> list[FrameDiagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def infos(self) -> list[FrameDiagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.INFO]

    @property
    def ok(self) -> bool:
        return not self.errors

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            f"Scanned {self.documents_scanned} templates, "
            f"found {self.frames_found} frames "
            f"({self.dynamic_frames} dynamic).",
        ]
        if not self.diagnostics:
            lines.append("No issues found.")
        elif self.ok:
            lines.append(f"No errors. {len(self.infos)} notice(s).")
        else:
            lines.append(f"{len(self.errors)} error(s), {len(self.infos)} notice(s).")
        for diagnostic in self.diagnostics:
            level = diagnostic.severity.value.upper()
            lines.append(
                f"  [{level}] {diagnostic.code} {diagnostic.message} "
                f"in {diagnostic.document}:{diagnostic.line} (fix: {diagnostic.fix.description})"
            )
        return "\n".join(lines)


def analyze(documents: Iterable[DocumentFrameSet]) -> AnalysisReport:
    """Diagnose every region of every document.

    Documents are reported in the order given; regions in scan order.
    """
    report = AnalysisReport()
    for document in documents:
        report.documents_scanned += 1
        for region in document.regions:
            report.frames_found += 1
            if region.is_dynamic:
                report.dynamic_frames += 1
            diagnostic = diagnose(region, document.path)
            if diagnostic is not None:
                report.diagnostics.append(diagnostic)
    return report
