"""
exprfmt exceptions: a base ExprFmtError that optionally wraps a Diagnostic and
renders using the same rich code-frame formatting.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Self

from rich.console import Console, ConsoleOptions, RenderResult
from rich.text import Text

from exprfmt.reporting.diagnostics import (
    Diagnostic,
    Related,
    Severity,
    plain_text,
    render_diagnostic,
)
from exprfmt.source import Source, SourceSpan

__all__ = [
    "ExprFmtError",
    "MalformedTemplateError",
    "EvaluationError",
    "FormatSpecError",
]


@dataclass(slots=True, eq=False)
class ExprFmtError(Exception):
    """
    Base exprfmt exception. Carries a Diagnostic when the failure can be tied to
    a location in a template; bare messages otherwise (e.g. `format_value`).
    """

    message: str
    diagnostic: Diagnostic | None = None

    @classmethod
    def at(
        cls,
        message: str,
        source: Source,
        span: SourceSpan,
        *,
        code: str,
        label: str | None = None,
        hint: str | None = None,
        notes: Iterable[str] = (),
        related: Iterable[Related] = (),
    ) -> Self:
        return cls(
            message,
            Diagnostic(
                message=message,
                severity=Severity.ERROR,
                span=span,
                source=source,
                code=code,
                label=label,
                notes=list(notes),
                hint=hint,
                related=list(related),
            ),
        )

    @property
    def code(self) -> str | None:
        return self.diagnostic.code if self.diagnostic is not None else None

    # Plain-text fallback (CI/log files; or if user didn't use Console)
    def __str__(self) -> str:
        if self.diagnostic is None:
            return self.message
        return plain_text(self.diagnostic)

    # Pretty rendering when printed via Rich Console
    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        _ = console
        _ = options
        if self.diagnostic is None:
            yield Text(f"ERROR: {self.message}", style="bold red")
        else:
            yield render_diagnostic(self.diagnostic)


class MalformedTemplateError(ExprFmtError):
    """Unbalanced braces, unclosed placeholders and other scanning faults."""


class EvaluationError(ExprFmtError):
    """An embedded expression failed to compile or raised while evaluating."""


class FormatSpecError(ExprFmtError):
    """A specifier is not valid for the grammar or for the value it formats."""
