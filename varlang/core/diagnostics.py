"""
Diagnostic records produced while reading a VarLang line.

Neither the parsing engine wrapper nor the tree converter raise for bad input;
they append Diagnostics to a caller-supplied list and keep going.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .span import Span

# Diagnostic codes.
UNHANDLED_RULE = "UNHANDLED_RULE"
UNSUPPORTED_CONSTRUCT = "UNSUPPORTED_CONSTRUCT"
ILLEGAL_TERMINAL = "ILLEGAL_TERMINAL"
SYNTAX_ERROR = "SYNTAX_ERROR"


@dataclass
class Diagnostic:
    """Represents a front-end diagnostic (error/warning/etc.)."""

    message: str
    code: str | None = None
    # `parser` for engine-level failures, `convert` for the tree converter.
    phase: str | None = None
    severity: str = "error"
    span: Span = field(default_factory=Span)  # Span() denotes unknown.
    notes: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        # Accept raw lark positions (Token, Meta) or None and normalize them.
        if not isinstance(self.span, Span):
            self.span = Span.from_loc(self.span)

    @property
    def is_error(self) -> bool:
        return self.severity == "error"


def has_errors(diagnostics: list[Diagnostic]) -> bool:
    return any(d.is_error for d in diagnostics)


def render_diagnostic(diag: Diagnostic, source: str | Path) -> str:
    """Human-readable `source:line:column: severity: message` form."""
    return f"{source}:{diag.span.render()}: {diag.severity}: {diag.message}"


def diagnostic_to_json(diag: Diagnostic, source: str | Path, phase: Optional[str] = None) -> dict:
    """Render a Diagnostic to a structured JSON-friendly dict."""
    return {
        "phase": diag.phase or phase,
        "code": diag.code,
        "message": diag.message,
        "severity": diag.severity,
        "file": diag.span.file or str(source),
        "line": diag.span.line,
        "column": diag.span.column,
        "notes": list(diag.notes),
    }


__all__ = [
    "Diagnostic",
    "ILLEGAL_TERMINAL",
    "SYNTAX_ERROR",
    "UNHANDLED_RULE",
    "UNSUPPORTED_CONSTRUCT",
    "diagnostic_to_json",
    "has_errors",
    "render_diagnostic",
]
