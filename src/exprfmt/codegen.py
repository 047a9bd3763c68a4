"""
codegen – ahead-of-time alternative to the render loop.

Instead of evaluating placeholders one by one, a scanned template is turned into
a single Python expression, compiled once, and evaluated per call:

    "x = {:>4 x}!"  →  ''.join(('x = ', format_value((x
    ), '>4'), '!',))

Errors raised by the generated code are the raw Python exceptions; use the
render loop when per-placeholder diagnostics matter.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from exprfmt.errors import EvaluationError
from exprfmt.evaluate import ScopeLike, resolve_scope
from exprfmt.segment import Literal, Segment
from exprfmt.spec.format import format_value

__all__ = ["generate_source", "compile_segments"]

_FORMATTER_NAME = "__exprfmt_format_value__"


def generate_source(segments: Iterable[Segment], *, formatter: str = "format_value") -> str:
    """Emit a Python expression that rebuilds the rendered string.

    `formatter` is the name the expression calls as `formatter(value, spec)`;
    it must be bound to `exprfmt.format_value` (or compatible) where the code runs.
    """
    if not formatter.isidentifier():
        raise ValueError(f"formatter must be an identifier (got {formatter!r})")

    parts: list[str] = []
    for seg in segments:
        if isinstance(seg, Literal):
            parts.append(repr(seg.text))
        else:
            parts.append(f"{formatter}(({seg.expression}\n), {seg.spec!r})")

    if not parts:
        return "''"
    return "''.join((" + ", ".join(parts) + ",))"


def compile_segments(segments: Iterable[Segment]) -> Callable[..., str]:
    """Compile segments once; the returned callable takes an optional scope."""
    source = generate_source(segments, formatter=_FORMATTER_NAME)
    try:
        code = compile(source, "<exprfmt-codegen>", "eval")
    except SyntaxError as exc:
        raise EvaluationError(f"generated template code does not compile: {exc}") from exc

    def run(scope: ScopeLike | None = None) -> str:
        ns = resolve_scope(scope, depth=1).namespace()
        ns[_FORMATTER_NAME] = format_value
        return eval(code, ns)  # noqa: S307

    return run
