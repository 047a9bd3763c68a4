"""
Call-site interpolation: scan a template and render it against the caller.

    name = "world"
    ex_format("hello {name}!")          # 'hello world!'
    ex_println("{:>6 len(name)}")       # prints '     5'

Names resolve against the caller's globals and locals; an explicit `scope`
mapping and keyword variables are layered on top, in that order. A `Scope`
instance replaces the caller's frame entirely.

The template is scanned in full before any expression runs, so a malformed
template never evaluates anything. Printing variants render fully before
writing; a failure leaves the stream untouched.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from typing import Any, TextIO

from exprfmt.evaluate import Scope, ScopeLike
from exprfmt.render import render, render_to
from exprfmt.scan import scan
from exprfmt.source import Source

__all__ = ["ex_format", "ex_print", "ex_println", "ex_eprint", "ex_eprintln"]


def _scope_for(scope: ScopeLike | None, variables: Mapping[str, Any]) -> Scope:
    # frame 0: here, 1: the ex_* function, 2: its caller
    if isinstance(scope, Scope):
        base = scope
    else:
        base = Scope.from_frame(2)
        if scope is not None:
            base = base.overlay(scope)
    return base.overlay(variables)


def _emit(
    template: str | Source,
    scope: Scope,
    stream: TextIO,
    end: str,
) -> None:
    render_to(scan(template), scope, file=stream, end=end)


def ex_format(template: str | Source, /, scope: ScopeLike | None = None, **variables: Any) -> str:
    """Render `template` and return the text."""
    segments = scan(template)
    return render(segments, _scope_for(scope, variables))


def ex_print(template: str | Source, /, scope: ScopeLike | None = None, **variables: Any) -> None:
    """Render `template` to stdout, without a trailing newline."""
    _emit(template, _scope_for(scope, variables), sys.stdout, "")


def ex_println(template: str | Source, /, scope: ScopeLike | None = None, **variables: Any) -> None:
    _emit(template, _scope_for(scope, variables), sys.stdout, "\n")


def ex_eprint(template: str | Source, /, scope: ScopeLike | None = None, **variables: Any) -> None:
    """Render `template` to stderr, without a trailing newline."""
    _emit(template, _scope_for(scope, variables), sys.stderr, "")


def ex_eprintln(template: str | Source, /, scope: ScopeLike | None = None, **variables: Any) -> None:
    _emit(template, _scope_for(scope, variables), sys.stderr, "\n")
