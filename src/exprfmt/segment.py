from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias

from exprfmt.source import Source, SourceSpan

__all__ = ["Literal", "Placeholder", "Segment"]


@dataclass(frozen=True, slots=True)
class Literal:
    text: str  # escapes already collapsed
    source: Source | None = field(default=None, repr=False, compare=False)
    span: SourceSpan | None = field(default=None, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class Placeholder:
    spec: str | None
    expression: str
    source: Source | None = field(default=None, repr=False, compare=False)
    span: SourceSpan | None = field(default=None, repr=False, compare=False)  # includes {…}
    spec_span: SourceSpan | None = field(default=None, repr=False, compare=False)

    @property
    def raw(self) -> str:
        """The placeholder as written in its template, braces included."""
        if self.source is not None and self.span is not None:
            return self.source.slice(self.span)
        if self.spec is None:
            return "{" + self.expression + "}"
        sep = "" if self.spec.endswith("?") else " "
        return "{:" + self.spec + sep + self.expression + "}"

    def line_col(self) -> tuple[int, int, int, int]:
        """
        Returns (start_line, start_col, end_line, end_col), 1-indexed like editors.
        """
        if self.source is None or self.span is None:
            raise ValueError("Placeholder was not produced from a Source")
        sl, sc = self.source.pos_to_line_col(self.span.start)
        el, ec = self.source.pos_to_line_col(self.span.end)
        return (sl, sc, el, ec)


Segment: TypeAlias = Literal | Placeholder
