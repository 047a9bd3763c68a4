"""
Template scanner: splits a template into Literal and Placeholder segments.

Rules:
  • {{ and }} outside a placeholder collapse to a single literal brace
  • {expr} is a placeholder; braces inside expr are depth-tracked, so the body
    may itself contain dicts, sets or nested blocks
  • {:spec expr} carries a specifier, terminated by the first top-level space
    (or right after a trailing '?', e.g. {:?expr} or {:#?expr})
  • braces inside Python string literals and # comments do not count

The scanner never evaluates or validates expression text.
"""

from __future__ import annotations

import re
import warnings
from collections.abc import Iterator
from dataclasses import dataclass

from exprfmt.errors import MalformedTemplateError
from exprfmt.reporting.diagnostics import Diagnostic, Related, Severity
from exprfmt.reporting.warnings_bridge import AmbiguousSpecifierWarning
from exprfmt.segment import Literal, Placeholder, Segment
from exprfmt.source import Source, SourceSpan

__all__ = ["iter_segments", "scan"]

_BRACE_RE = re.compile(r"[{}]")

ALIGN_CHARS = frozenset("<^>=")
_OPENERS = {"(": ")", "[": "]", "{": "}"}
_QUOTES = frozenset("'\"")


@dataclass(frozen=True, slots=True)
class _SpecScan:
    text: str
    span: SourceSpan | None
    expr_start: int     # first index of the expression text
    separated: bool     # False when the body ended before a separator was seen


def _as_source(template: str | Source) -> Source:
    if isinstance(template, Source):
        return template
    return Source.from_string(template)


def _span(start: int, end: int) -> SourceSpan:
    return SourceSpan.from_ints(start, end)


def _skip_string(source: Source, pos: int) -> int:
    """Return the index just past the string literal whose opening quote is at `pos`."""
    text = source.contents
    n = len(text)
    q = text[pos]
    delim = q * 3 if text.startswith(q * 3, pos) else q
    j = pos + len(delim)
    while j < n:
        ch = text[j]
        if ch == "\\":
            # a backslash keeps the next char out of the terminator check, raw or not
            j += 2
            continue
        if text.startswith(delim, j):
            return j + len(delim)
        if ch == "\n" and len(delim) == 1:
            break
        j += 1

    end = min(j, n)
    raise MalformedTemplateError.at(
        "unterminated string literal in placeholder expression",
        source,
        _span(pos, max(end, pos + 1)),
        code="unterminated-string",
        label="unterminated",
    )


def _skip_comment(text: str, pos: int) -> int:
    line_end = text.find("\n", pos)
    return len(text) if line_end == -1 else line_end


def _warn_ambiguous(source: Source, span: SourceSpan) -> None:
    diag = Diagnostic(
        message="format specifier contains quotes or brackets before its separating space",
        severity=Severity.WARN,
        span=span,
        source=source,
        code="ambiguous-format-spec",
        hint="the specifier ends at the first space outside quotes and brackets",
    )
    warnings.warn(AmbiguousSpecifierWarning(diag), stacklevel=4)


def _scan_spec(source: Source, start: int) -> _SpecScan:
    """Scan a specifier starting right after the ':' at `start - 1`."""
    text = source.contents
    n = len(text)

    if start < n and text[start] == "?":
        return _SpecScan("?", _span(start, start + 1), start + 1, True)

    i = start
    if i + 1 < n and text[i + 1] in ALIGN_CHARS:
        # fill character: any char, including space, quotes and braces
        i += 2

    closers: list[str] = []
    quote: str | None = None
    ambiguous = False
    separated = False
    expr_start = n

    while i < n:
        ch = text[i]
        if quote is not None:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
            elif ch == "\n" or (ch == "}" and not closers):
                raise MalformedTemplateError.at(
                    "unterminated quote in format specifier",
                    source,
                    _span(start, max(i, start + 1)),
                    code="unterminated-string",
                    label="unterminated",
                    hint="a quote inside a specifier must be closed before the placeholder ends",
                )
            i += 1
            continue
        if ch in _QUOTES:
            quote = ch
            ambiguous = True
        elif ch in _OPENERS:
            closers.append(_OPENERS[ch])
            ambiguous = True
        elif closers and ch == closers[-1]:
            closers.pop()
        elif not closers and ch == "}":
            expr_start = i
            break
        elif not closers and ch == "?":
            i += 1
            expr_start = i
            separated = True
            break
        elif not closers and ch.isspace():
            expr_start = i + 1
            separated = True
            break
        i += 1

    spec_end = expr_start - 1 if separated and text[expr_start - 1].isspace() else min(i, n)
    spec_span = _span(start, spec_end) if spec_end > start else None
    if ambiguous and spec_span is not None:
        _warn_ambiguous(source, spec_span)
    return _SpecScan(text[start:spec_end], spec_span, min(expr_start, n), separated)


def _scan_placeholder(source: Source, open_pos: int) -> tuple[Placeholder, int]:
    """Scan the placeholder opened at `open_pos`; return it and the index past its '}'."""
    text = source.contents
    n = len(text)
    i = open_pos + 1

    spec: _SpecScan | None = None
    if i < n and text[i] == ":":
        spec = _scan_spec(source, i + 1)
        i = spec.expr_start

    expr_start = i
    opens = [open_pos]  # positions of unclosed '{', outermost first
    while i < n:
        ch = text[i]
        if ch == "{":
            opens.append(i)
        elif ch == "}":
            opens.pop()
            if not opens:
                break
        elif ch in _QUOTES:
            i = _skip_string(source, i)
            continue
        elif ch == "#":
            i = _skip_comment(text, i)
            continue
        i += 1
    else:
        related = []
        if opens[-1] != open_pos:
            related.append(
                Related("innermost unclosed '{' opened here", _span(opens[-1], opens[-1] + 1), source)
            )
        raise MalformedTemplateError.at(
            "placeholder is never closed",
            source,
            _span(open_pos, open_pos + 1),
            code="unclosed-placeholder",
            label="never closed",
            hint="write '{{' for a literal brace",
            related=related,
        )

    close_pos = i
    expression = text[expr_start:close_pos].strip()
    if not expression:
        if spec is not None and not spec.separated:
            raise MalformedTemplateError.at(
                "format specifier is not followed by an expression",
                source,
                _span(open_pos, close_pos + 1),
                code="missing-expression",
                hint="separate the specifier from the expression with a space, e.g. {:>5 value}",
            )
        raise MalformedTemplateError.at(
            "placeholder has an empty expression",
            source,
            _span(open_pos, close_pos + 1),
            code="empty-expression",
            hint="write '{{}}' for literal braces",
        )

    ph = Placeholder(
        spec=None if spec is None else spec.text,
        expression=expression,
        source=source,
        span=_span(open_pos, close_pos + 1),
        spec_span=None if spec is None else spec.span,
    )
    return ph, close_pos + 1


def iter_segments(template: str | Source) -> Iterator[Segment]:
    """Lazily yield the segments of `template`, left to right."""
    source = _as_source(template)
    text = source.contents
    n = len(text)

    chunks: list[str] = []
    lit_start = 0
    i = 0

    def _flush(end: int) -> Literal | None:
        nonlocal chunks
        if not chunks:
            return None
        lit = Literal("".join(chunks), source, _span(lit_start, end))
        chunks = []
        return lit

    while i < n:
        ch = text[i]
        if ch == "{":
            if text.startswith("{{", i):
                chunks.append("{")
                i += 2
                continue
            lit = _flush(i)
            if lit is not None:
                yield lit
            ph, i = _scan_placeholder(source, i)
            yield ph
            lit_start = i
            continue

        if ch == "}":
            if text.startswith("}}", i):
                chunks.append("}")
                i += 2
                continue
            raise MalformedTemplateError.at(
                "unmatched '}' in template",
                source,
                _span(i, i + 1),
                code="unmatched-close-brace",
                label="no matching '{'",
                hint="write '}}' for a literal brace",
            )

        m = _BRACE_RE.search(text, i)
        j = m.start() if m else n
        chunks.append(text[i:j])
        i = j

    lit = _flush(n)
    if lit is not None:
        yield lit


def scan(template: str | Source) -> tuple[Segment, ...]:
    """Scan `template` eagerly; raises MalformedTemplateError on the first fault."""
    return tuple(iter_segments(template))
