"""
Expression evaluation for placeholders.

Embedded expressions are Python source, compiled and evaluated against a Scope:
either the lexical environment of the code that called the public API
(captured from its frame) or an explicit mapping of names to values.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from types import CodeType
from typing import Any, Protocol, runtime_checkable

from exprfmt.errors import EvaluationError
from exprfmt.segment import Placeholder

__all__ = [
    "Scope",
    "ScopeLike",
    "Evaluator",
    "PythonEvaluator",
    "compile_expression",
    "resolve_scope",
]


@dataclass(frozen=True, slots=True)
class Scope:
    globals: Mapping[str, Any]
    locals: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> Scope:
        return cls({}, dict(mapping))

    @classmethod
    def from_frame(cls, depth: int = 0) -> Scope:
        """Capture the scope `depth` frames above the caller of this method."""
        # sys._getframe(1) is whoever called from_frame()
        frame = sys._getframe(depth + 1)
        try:
            return cls(frame.f_globals, dict(frame.f_locals))
        finally:
            del frame

    def overlay(self, mapping: Mapping[str, Any]) -> Scope:
        if not mapping:
            return self
        return Scope(self.globals, {**self.locals, **mapping})

    def namespace(self) -> dict[str, Any]:
        """
        Flatten into one dict for eval(). Locals go into the globals dict so that
        comprehensions and lambdas inside expressions can see them.
        """
        ns = dict(self.globals)
        ns.update(self.locals)
        return ns


ScopeLike = Scope | Mapping[str, Any]


def resolve_scope(scope: ScopeLike | None, depth: int = 0) -> Scope:
    """Normalize `scope`; None captures the frame `depth` levels above the caller."""
    if scope is None:
        return Scope.from_frame(depth + 1)
    if isinstance(scope, Scope):
        return scope
    return Scope.from_mapping(scope)


@lru_cache(maxsize=1024)
def compile_expression(expression: str) -> CodeType:
    # Parenthesized like CPython's own f-string expressions: allows line breaks
    # and a trailing comment inside the expression.
    return compile("(" + expression + "\n)", "<exprfmt>", "eval")


@runtime_checkable
class Evaluator(Protocol):
    """Turns a placeholder's expression into a value."""
    def evaluate(self, ph: Placeholder, namespace: dict[str, Any]) -> Any:
        ...


def _evaluation_error(ph: Placeholder, exc: Exception) -> EvaluationError:
    message = f"cannot evaluate {ph.expression!r}: {type(exc).__name__}: {exc}"
    if ph.source is None or ph.span is None:
        return EvaluationError(message)

    hint = None
    if isinstance(exc, NameError):
        hint = "names resolve against the calling scope and any variables passed in"
    return EvaluationError.at(
        message,
        ph.source,
        ph.span,
        code="evaluation-failed",
        label=f"raised {type(exc).__name__}",
        hint=hint,
    )


class PythonEvaluator:
    """Default evaluator: compile() + eval() with a per-expression code cache."""
    def evaluate(self, ph: Placeholder, namespace: dict[str, Any]) -> Any:
        try:
            code = compile_expression(ph.expression)
            return eval(code, namespace)  # noqa: S307
        except Exception as exc:
            raise _evaluation_error(ph, exc) from exc
