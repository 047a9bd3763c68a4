"""
Opt-in bridge that routes exprfmt warnings to rich code-frame rendering.
This preserves Python's warnings semantics and filtering.

Do NOT install this at import time. Let scripts/CLIs opt in.
"""

from __future__ import annotations

import warnings
from collections.abc import Callable
from dataclasses import dataclass
from typing import TextIO

from rich.console import Console

from exprfmt.reporting.diagnostics import Diagnostic, Emitter, plain_text

__all__ = [
    "ExprFmtWarning",
    "PlaceholderWarning",
    "DiagnosticWarning",
    "AmbiguousSpecifierWarning",
    "install_warnings_bridge",
]


# ─────────── Warning categories (parity with exceptions) ───────────


class ExprFmtWarning(Warning):
    """Base exprfmt warning category."""


class PlaceholderWarning(ExprFmtWarning):
    """Warnings related to placeholder scanning."""


@dataclass(slots=True, eq=False)
class DiagnosticWarning(PlaceholderWarning):
    """
    A warning carrying a Diagnostic. Works fine without the bridge (plain text via __str__),
    and pretty-prints when the bridge is installed.
    """

    diagnostic: Diagnostic

    def __str__(self) -> str:
        return plain_text(self.diagnostic)


class AmbiguousSpecifierWarning(DiagnosticWarning):
    """A format specifier contained quotes or brackets before its separating space."""


# ─────────── Opt-in bridge ───────────

ShowWarning = Callable[..., None]


class _Bridge:
    """A `warnings.showwarning` replacement that remembers what it replaced."""

    def __init__(self, emitter: Emitter, previous: ShowWarning, only_exprfmt: bool) -> None:
        self.emitter = emitter
        self.previous = previous
        self.only_exprfmt = only_exprfmt

    def __call__(
        self,
        message: Warning | str,
        category: type[Warning],
        filename: str,
        lineno: int,
        file: TextIO | None = None,
        line: str | None = None,
    ) -> None:
        if isinstance(message, DiagnosticWarning):
            self.emitter.emit(message.diagnostic)
        elif self.only_exprfmt and not issubclass(category, ExprFmtWarning):
            self.previous(message, category, filename, lineno, file=file, line=line)
        else:
            self.emitter.console.print(
                f"[bold yellow]{category.__name__}[/]: {message} ({filename}:{lineno})",
                highlight=False,
            )


def install_warnings_bridge(
    *,
    emitter: Emitter | None = None,
    only_exprfmt: bool = True,
) -> Callable[[], None]:
    """
    Show exprfmt warnings as rich code frames; filtering still follows `warnings`.

    With `only_exprfmt=True` (default) other warnings go to the handler that was
    installed before. Returns `uninstall()`, which puts that handler back.
    """
    bridge = _Bridge(emitter or Emitter(Console(stderr=True)), warnings.showwarning, only_exprfmt)
    warnings.showwarning = bridge

    def uninstall() -> None:
        if warnings.showwarning is bridge:
            warnings.showwarning = bridge.previous

    return uninstall
