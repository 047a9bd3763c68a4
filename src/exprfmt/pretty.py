"""
Script-friendly helpers for enabling diagnostics:
- `use_diagnostics(...)`: context manager that installs the warnings bridge (opt-in)
  and picks Rich color behavior from arguments or the environment.
- `run_with_diagnostics(...)`: decorator that wraps a function in the same context
  and pretty-prints ExprFmtError on the way out.
"""

from __future__ import annotations

import contextvars
import functools
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console

from exprfmt.errors import ExprFmtError
from exprfmt.reporting.diagnostics import Emitter
from exprfmt.reporting.warnings_bridge import install_warnings_bridge

__all__ = ["use_diagnostics", "print_exception", "run_with_diagnostics"]

COLOR_ENV = "EXPRFMT_COLOR"
PRETTY_WARNINGS_ENV = "EXPRFMT_PRETTY_WARNINGS"

_COLOR_MODES = {"auto", "always", "never"}

# Console of the innermost use_diagnostics() block, reused by print_exception().
_active_console: contextvars.ContextVar[Console | None] = contextvars.ContextVar(
    "_active_console", default=None
)


def _color_mode(color: str | None) -> str:
    mode = (color or os.getenv(COLOR_ENV) or "auto").lower()
    if mode not in _COLOR_MODES:
        raise ValueError(f"color must be one of {sorted(_COLOR_MODES)} (got {mode!r})")
    return mode


def _pretty_enabled(pretty: bool | str | None) -> bool:
    value = pretty if pretty is not None else os.getenv(PRETTY_WARNINGS_ENV, "auto")
    text = str(value).lower()
    if text in {"true", "1"}:
        return True
    if text == "auto":
        return sys.stderr.isatty() or sys.stdout.isatty()
    return False


def make_console(color: str | None = None) -> Console:
    mode = _color_mode(color)
    return Console(
        stderr=True,
        force_terminal=(mode == "always"),
        no_color=(mode == "never"),
    )


@contextmanager
def use_diagnostics(
    *,
    color: str | None = None,
    pretty: bool | str | None = None,
    only_exprfmt: bool = True,
) -> Iterator[Console]:
    """
    Enable Rich diagnostics for the enclosed block and yield its Console.

    Args:
      color: 'auto' | 'always' | 'never' | None (env EXPRFMT_COLOR or 'auto')
      pretty: True | False | 'auto' | None (env EXPRFMT_PRETTY_WARNINGS or 'auto')
      only_exprfmt: if True, only exprfmt warnings get prettified.

    pretty='auto' installs the warnings bridge only when a TTY is attached.
    """
    console = make_console(color)
    token = _active_console.set(console)

    uninstall = None
    try:
        if _pretty_enabled(pretty):
            uninstall = install_warnings_bridge(
                emitter=Emitter(console=console),
                only_exprfmt=only_exprfmt,
            )
        yield console
    finally:
        if uninstall:
            uninstall()
        _active_console.reset(token)


def print_exception(e: ExprFmtError, console: Console | None = None) -> None:
    """Pretty-print an ExprFmtError; uses the active Console if there is one."""
    (console or _active_console.get() or Console(stderr=True)).print(e)


def run_with_diagnostics(  # type: ignore
    *,
    color: str | None = None,
    pretty: bool | str | None = None,
    only_exprfmt: bool = True,
    exit_on_exception: bool = True,
):
    """
    Decorator: runs the function inside `use_diagnostics(...)`.
    If an ExprFmtError escapes, pretty-print it and (by default) exit 2.
    """
    def deco(fn):  # type: ignore
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):  # type: ignore
            with use_diagnostics(color=color, pretty=pretty, only_exprfmt=only_exprfmt):
                try:
                    return fn(*args, **kwargs)
                except ExprFmtError as e:
                    print_exception(e)
                    if exit_on_exception:
                        raise SystemExit(2) from e
                    raise
        return wrapper
    return deco
