"""
exprfmt
=======

String templates with embedded Python expressions:

    >>> from exprfmt import ex_format
    >>> width = 6
    >>> ex_format("[{:>6 width * 7}]")
    '[    42]'

Unified import surface; the submodules hold the implementation.
"""

from __future__ import annotations

from exprfmt.codegen import compile_segments, generate_source
from exprfmt.errors import (
    EvaluationError,
    ExprFmtError,
    FormatSpecError,
    MalformedTemplateError,
)
from exprfmt.evaluate import Evaluator, PythonEvaluator, Scope
from exprfmt.interpolate import ex_eprint, ex_eprintln, ex_format, ex_print, ex_println
from exprfmt.render import DefaultRenderer, Renderer, render, render_line, render_to
from exprfmt.reporting.warnings_bridge import (
    AmbiguousSpecifierWarning,
    DiagnosticWarning,
    ExprFmtWarning,
    PlaceholderWarning,
)
from exprfmt.scan import iter_segments, scan
from exprfmt.segment import Literal, Placeholder, Segment
from exprfmt.source import Source, SourceSpan
from exprfmt.spec.format import format_value
from exprfmt.spec.model import FormatSpec
from exprfmt.spec.parse import parse_format_spec
from exprfmt.template import Template

__all__ = [
    "scan",
    "iter_segments",
    "Literal",
    "Placeholder",
    "Segment",
    "Source",
    "SourceSpan",
    "render",
    "render_to",
    "render_line",
    "Renderer",
    "DefaultRenderer",
    "Scope",
    "Evaluator",
    "PythonEvaluator",
    "FormatSpec",
    "parse_format_spec",
    "format_value",
    "Template",
    "ex_format",
    "ex_print",
    "ex_println",
    "ex_eprint",
    "ex_eprintln",
    "generate_source",
    "compile_segments",
    "ExprFmtError",
    "MalformedTemplateError",
    "EvaluationError",
    "FormatSpecError",
    "ExprFmtWarning",
    "PlaceholderWarning",
    "DiagnosticWarning",
    "AmbiguousSpecifierWarning",
]
