"""Rich terminal formatting for frame analysis reports.

Produces structured, colored output for ``perch check`` and
``perch build``.  Respects TTY detection — no ANSI codes when piped or
redirected.

Example output (with color)::

    ── perch check ─────────────────────────────────────────────

      12 templates · 18 frames · 4 dynamic

      ✗  FRAME001 Dynamic frame id "item_@Model.Id" needs a stable prefix
         in templates/products/index.html:14

      ✗  1 error · 0 notices

    ─────────────────────────────────────────────────────────────

"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from perch.diagnostics import AnalysisReport, FrameDiagnostic, Severity

_W = 65


# ---------------------------------------------------------------------------
# ANSI helpers
# ---------------------------------------------------------------------------


def _use_color(stream: object | None = None) -> bool:
    """True if the output stream supports ANSI color."""
    s = stream or sys.stderr
    isatty = getattr(s, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except ValueError:
        # Closed stream
        return False


class _Palette:
    """ANSI escape sequences — empty strings when color is disabled."""

    __slots__ = ("bold", "cyan", "dim", "green", "red", "reset", "yellow")

    def __init__(self, *, enabled: bool) -> None:
        if enabled:
            self.reset = "\033[0m"
            self.bold = "\033[1m"
            self.dim = "\033[2m"
            self.red = "\033[31m"
            self.green = "\033[32m"
            self.yellow = "\033[33m"
            self.cyan = "\033[36m"
        else:
            self.reset = ""
            self.bold = ""
            self.dim = ""
            self.red = ""
            self.green = ""
            self.yellow = ""
            self.cyan = ""


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


# ---------------------------------------------------------------------------
# Diagnostic formatting
# ---------------------------------------------------------------------------


def _severity_icon(severity: Severity, c: _Palette) -> str:
    """Colored icon for a diagnostic severity."""
    from perch.diagnostics import Severity

    match severity:
        case Severity.ERROR:
            return f"{c.red}{c.bold}\u2717{c.reset}"  # ✗
        case Severity.INFO:
            return f"{c.dim}\u00b7{c.reset}"  # ·


def _format_diagnostic(diagnostic: FrameDiagnostic, c: _Palette) -> list[str]:
    """Format a single diagnostic as indented lines."""
    icon = _severity_icon(diagnostic.severity, c)
    return [
        f"  {icon}  {c.dim}{diagnostic.code}{c.reset} {c.bold}{diagnostic.message}{c.reset}",
        f"     {c.dim}in{c.reset} {c.cyan}{diagnostic.document}:{diagnostic.line}{c.reset}",
        f"     {c.dim}fix:{c.reset} {diagnostic.fix.description}",
    ]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def format_report(
    report: AnalysisReport,
    *,
    title: str = "perch check",
    color: bool | None = None,
) -> str:
    """Format an AnalysisReport for terminal display.

    Args:
        report: The analysis report to format.
        title: Banner title.
        color: Force color on/off.  ``None`` auto-detects from stderr.

    Returns:
        Multi-line string ready for ``sys.stderr.write()``.
    """
    use = color if color is not None else _use_color()
    c = _Palette(enabled=use)

    lines: list[str] = []
    rule_char = "─"

    # Header, built by hand so ANSI codes don't affect width
    pad = _W - len(title) - 4
    lines.append(
        f"  {c.dim}{rule_char * 2}{c.reset} {c.bold}{title}{c.reset} "
        f"{c.dim}{rule_char * max(pad, 1)}{c.reset}"
    )
    lines.append("")

    sep = f" {c.dim}·{c.reset} "
    stats = [
        f"{c.bold}{report.documents_scanned}{c.reset} {c.dim}templates{c.reset}",
        f"{c.bold}{report.frames_found}{c.reset} {c.dim}frames{c.reset}",
        f"{c.bold}{report.dynamic_frames}{c.reset} {c.dim}dynamic{c.reset}",
    ]
    lines.append(f"  {sep.join(stats)}")
    lines.append("")

    errors = report.errors
    infos = report.infos
    for group in (errors, infos):
        for diagnostic in group:
            lines.extend(_format_diagnostic(diagnostic, c))
            lines.append("")

    if not errors and not infos:
        lines.append(f"  {c.green}{c.bold}✓{c.reset}  {c.green}All clear{c.reset}")
    elif not errors:
        lines.append(
            f"  {c.green}{c.bold}✓{c.reset}  {c.green}No errors{c.reset}"
            f" {c.dim}· {_plural(len(infos), 'notice')}{c.reset}"
        )
    else:
        lines.append(
            f"  {c.red}{c.bold}✗{c.reset}  {c.red}{_plural(len(errors), 'error')}{c.reset}"
            f" {c.dim}· {_plural(len(infos), 'notice')}{c.reset}"
        )

    lines.append("")
    lines.append(f"  {c.dim}{rule_char * _W}{c.reset}")
    lines.append("")

    return "\n".join(lines)
