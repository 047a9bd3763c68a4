from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import Protocol, TextIO, runtime_checkable

from exprfmt.evaluate import Evaluator, PythonEvaluator, Scope, ScopeLike, resolve_scope
from exprfmt.segment import Literal, Segment
from exprfmt.spec.format import format_placeholder

__all__ = ["render", "render_to", "render_line", "Renderer", "DefaultRenderer"]

_DEFAULT_EVALUATOR = PythonEvaluator()


def _render_segments(
    segments: Iterable[Segment],
    scope: Scope,
    evaluator: Evaluator | None,
) -> str:
    ev = evaluator or _DEFAULT_EVALUATOR
    namespace: dict[str, object] | None = None

    chunks: list[str] = []
    for seg in segments:
        if isinstance(seg, Literal):
            chunks.append(seg.text)
        else:
            if namespace is None:
                namespace = scope.namespace()
            value = ev.evaluate(seg, namespace)
            chunks.append(format_placeholder(value, seg))

    return "".join(chunks)


# Public API

def render(
    segments: Iterable[Segment],
    scope: ScopeLike | None = None,
    *,
    evaluator: Evaluator | None = None,
) -> str:
    """Evaluate and format every placeholder in order and join the result.

    With `scope=None` expressions see the caller's globals and locals.
    """
    return _render_segments(segments, resolve_scope(scope, depth=1), evaluator)


def render_to(
    segments: Iterable[Segment],
    scope: ScopeLike | None = None,
    *,
    file: TextIO | None = None,
    end: str = "",
    evaluator: Evaluator | None = None,
) -> None:
    """Render fully, then write once to `file` (stdout by default)."""
    text = _render_segments(segments, resolve_scope(scope, depth=1), evaluator) + end
    (sys.stdout if file is None else file).write(text)


def render_line(
    segments: Iterable[Segment],
    scope: ScopeLike | None = None,
    *,
    file: TextIO | None = None,
    evaluator: Evaluator | None = None,
) -> None:
    render_to(
        segments,
        resolve_scope(scope, depth=1),
        file=file,
        end="\n",
        evaluator=evaluator,
    )


@runtime_checkable
class Renderer(Protocol):
    """Capability surface for turning scanned segments into rendered text."""
    def render_segments(self, segments: Iterable[Segment], scope: Scope) -> str:
        ...


class DefaultRenderer:
    """Default renderer that delegates to the module's render loop."""
    def __init__(self, evaluator: Evaluator | None = None) -> None:
        self.evaluator = evaluator or _DEFAULT_EVALUATOR

    def render_segments(self, segments: Iterable[Segment], scope: Scope) -> str:
        return _render_segments(segments, scope, self.evaluator)
