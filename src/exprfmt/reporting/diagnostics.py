"""
exprfmt diagnostics: the data model shared by exceptions and warnings, a rich
renderer that draws the template with carets under the offending placeholder,
brace or specifier, and a small Emitter that prints them.

    ERROR [unclosed-placeholder]: placeholder is never closed
    ╭─ <template>:1:8 ───────────────╮
    │ 1 | total: {price * {1 + tax}  │
    │            ^ never closed      │
    ╰────────────────────────────────╯
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from exprfmt.source import Source, SourceSpan

__all__ = [
    "Severity",
    "Related",
    "Diagnostic",
    "FrameConfig",
    "Theme",
    "Emitter",
    "render_diagnostic",
    "plain_text",
]


class Severity(StrEnum):
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Related:
    label: str
    span: SourceSpan
    source: Source


@dataclass(frozen=True, slots=True)
class Diagnostic:
    message: str
    severity: Severity
    span: SourceSpan
    source: Source
    code: str | None = None
    label: str | None = None  # short text printed after the carets
    notes: list[str] = field(default_factory=list)
    hint: str | None = None
    related: list[Related] = field(default_factory=list)

    def location(self) -> str:
        line, col = self.source.pos_to_line_col(self.span.start)
        return f"{self.source.label}:{line}:{col}"


def plain_text(d: Diagnostic) -> str:
    """One-line form used by exceptions and warnings outside of a rich Console."""
    code = f" [{d.code}]" if d.code else ""
    return f"{d.severity.upper()}{code}: {d.message} at {d.location()}"


@dataclass(frozen=True, slots=True)
class FrameConfig:
    context_lines: int = 1
    tab_width: int = 4
    show_line_numbers: bool = True
    max_related: int = 4


@dataclass(frozen=True, slots=True)
class Theme:
    warn: str = "bold yellow"
    error: str = "bold red"
    filename: str = "italic"
    gutter: str = "dim"
    caret: str = "bold red"
    label: str = "red"
    note_bullet: str = "dim"
    hint_label: str = "italic dim"

    def severity_style(self, sev: Severity) -> str:
        return self.error if sev is Severity.ERROR else self.warn


# ────────────────────────── Code frame ──────────────────────────


def _display_width(raw: str, tab_width: int) -> int:
    return len(raw.expandtabs(tab_width))


def _frame_lines(
    source: Source,
    span: SourceSpan,
    label: str | None,
    theme: Theme,
    cfg: FrameConfig,
) -> Iterator[Text]:
    first, first_col = source.pos_to_line_col(span.start)
    last, last_col = source.pos_to_line_col(span.end)
    # an end offset sitting at the start of a line belongs to the line before it
    if last > first and last_col == 1:
        last -= 1
        last_col = len(source.line(last)) + 1

    lo = max(1, first - cfg.context_lines)
    hi = min(source.line_count, last + cfg.context_lines)
    width = len(str(hi))
    pad = width + 3 if cfg.show_line_numbers else 0

    for line_no in range(lo, hi + 1):
        raw = source.line(line_no)
        code = Text(raw.expandtabs(cfg.tab_width))
        if cfg.show_line_numbers:
            yield Text.assemble((f"{line_no:>{width}}", theme.gutter), " | ", code)
        else:
            yield code

        if not first <= line_no <= last:
            continue
        start = _display_width(raw[: first_col - 1], cfg.tab_width) if line_no == first else 0
        end = (
            _display_width(raw[: last_col - 1], cfg.tab_width)
            if line_no == last
            else _display_width(raw, cfg.tab_width)
        )
        carets = Text(" " * (pad + start))
        carets.append("^" * max(1, end - start), style=theme.caret)
        if label and line_no == last:
            carets.append(f" {label}", style=theme.label)
        yield carets


def _code_frame(
    source: Source,
    span: SourceSpan,
    label: str | None,
    border: str,
    theme: Theme,
    cfg: FrameConfig,
) -> Panel:
    line, col = source.pos_to_line_col(span.start)
    title = Text.assemble((source.label, theme.filename), f":{line}:{col}")
    body = Text("\n").join(_frame_lines(source, span, label, theme, cfg))
    return Panel.fit(body, title=title, border_style=border, padding=(0, 1))


def render_diagnostic(
    d: Diagnostic,
    *,
    theme: Theme | None = None,
    cfg: FrameConfig | None = None,
) -> RenderableType:
    """Header, rule, main frame, related frames (capped), then notes and hint."""
    theme = theme or Theme()
    cfg = cfg or FrameConfig()
    style = theme.severity_style(d.severity)

    head = Text(d.severity.upper(), style=style)
    if d.code:
        head.append(f" [{d.code}]")
    head.append(f": {d.message}")

    parts: list[RenderableType] = [
        head,
        Rule(style=style),
        _code_frame(d.source, d.span, d.label, style, theme, cfg),
    ]

    shown = d.related[: cfg.max_related]
    for r in shown:
        parts.append(_code_frame(r.source, r.span, r.label, theme.gutter, theme, cfg))
    if len(d.related) > len(shown):
        hidden = len(d.related) - len(shown)
        parts.append(Text(f"... {hidden} more related locations", style=theme.gutter))

    trailer = Text()
    for note in d.notes:
        trailer.append("\n• ", style=theme.note_bullet)
        trailer.append(note)
    if d.hint:
        trailer.append("\nHint: ", style=theme.hint_label)
        trailer.append(d.hint)
    if trailer.plain:
        parts.append(trailer)

    return Group(*parts)


# ────────────────────────── Emitter ──────────────────────────


class Emitter:
    """
    Prints diagnostics on a Console. The warnings bridge and `exprfmt.pretty`
    each bind one to their Console.
    """

    def __init__(
        self,
        console: Console | None = None,
        theme: Theme | None = None,
        cfg: FrameConfig | None = None,
    ):
        self.console = console or Console(stderr=True)
        self.theme = theme or Theme()
        self.cfg = cfg or FrameConfig()

    def emit(self, d: Diagnostic) -> None:
        self.console.print(render_diagnostic(d, theme=self.theme, cfg=self.cfg))

    def report(
        self,
        severity: Severity,
        message: str,
        source: Source,
        span: SourceSpan,
        *,
        code: str | None = None,
        label: str | None = None,
        hint: str | None = None,
        notes: Iterable[str] = (),
        related: Iterable[Related] = (),
    ) -> Diagnostic:
        d = Diagnostic(
            message=message,
            severity=severity,
            span=span,
            source=source,
            code=code,
            label=label,
            notes=list(notes),
            hint=hint,
            related=list(related),
        )
        self.emit(d)
        return d

    def warn(self, message: str, source: Source, span: SourceSpan, **kw) -> Diagnostic:  # type: ignore[no-untyped-def]
        return self.report(Severity.WARN, message, source, span, **kw)

    def error(self, message: str, source: Source, span: SourceSpan, **kw) -> Diagnostic:  # type: ignore[no-untyped-def]
        return self.report(Severity.ERROR, message, source, span, **kw)
