"""
Source span representation used by diagnostics.

A Span carries best-effort line/column info taken from whatever the parsing
engine hands us (a lark Token, a Tree's meta, or an AST `Located`), and keeps
the original object in `raw` for renderers that want more.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
    """Represents a source span (best-effort file/line/column plus raw parser loc)."""

    file: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    end_line: Optional[int] = None
    end_column: Optional[int] = None
    raw: Any = None

    @classmethod
    def from_loc(cls, loc: Any) -> "Span":
        """
        Construct a Span from a lark Token, a lark Meta, or an AST location.

        If `loc` is already a Span it is returned unchanged. Objects without
        position info (e.g. the meta of a hand-built Tree) give an unknown span.
        """
        if loc is None:
            return cls()
        if isinstance(loc, cls):
            return loc
        return cls(
            file=getattr(loc, "file", None),
            line=getattr(loc, "line", None),
            column=getattr(loc, "column", None),
            end_line=getattr(loc, "end_line", None),
            end_column=getattr(loc, "end_column", None),
            raw=loc,
        )

    def render(self) -> str:
        """`line:column`, with `?` for unknown parts."""
        line = "?" if self.line is None else str(self.line)
        column = "?" if self.column is None else str(self.column)
        return f"{line}:{column}"


__all__ = ["Span"]
