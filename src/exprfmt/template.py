from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Any, TextIO

from exprfmt.codegen import compile_segments, generate_source
from exprfmt.evaluate import ScopeLike, resolve_scope
from exprfmt.render import DefaultRenderer, Renderer
from exprfmt.scan import scan
from exprfmt.segment import Placeholder, Segment
from exprfmt.source import Source

_DEFAULT_RENDERER = DefaultRenderer()


@dataclass(frozen=True, slots=True)
class Template:
    """A scanned template: scan once, render any number of times."""

    source: Source
    segments: tuple[Segment, ...]

    @staticmethod
    def from_source(source: Source) -> Template:
        return Template(source=source, segments=scan(source))

    @staticmethod
    def from_string(text: str) -> Template:
        return Template.from_source(Source.from_string(text))

    @staticmethod
    def from_file(path: str | Path | PathLike[str], encoding: str = "utf-8") -> Template:
        return Template.from_source(Source.from_file(path, encoding=encoding))

    @property
    def placeholders(self) -> tuple[Placeholder, ...]:
        return tuple(s for s in self.segments if isinstance(s, Placeholder))

    def render(
        self,
        scope: ScopeLike | None = None,
        /,
        *,
        renderer: Renderer | None = None,
        **variables: Any,
    ) -> str:
        """Render against `scope` (the caller's frame if None), with `variables` on top."""
        sc = resolve_scope(scope, depth=1).overlay(variables)
        return (renderer or _DEFAULT_RENDERER).render_segments(self.segments, sc)

    def render_line(
        self,
        scope: ScopeLike | None = None,
        /,
        *,
        file: TextIO | None = None,
        renderer: Renderer | None = None,
        **variables: Any,
    ) -> None:
        sc = resolve_scope(scope, depth=1).overlay(variables)
        text = (renderer or _DEFAULT_RENDERER).render_segments(self.segments, sc)
        (sys.stdout if file is None else file).write(text + "\n")

    def to_source(self, formatter: str = "format_value") -> str:
        return generate_source(self.segments, formatter=formatter)

    def compile(self) -> Callable[..., str]:
        return compile_segments(self.segments)
