from __future__ import annotations

import io
from typing import Any

import pytest

from exprfmt.errors import EvaluationError, FormatSpecError, MalformedTemplateError
from exprfmt.evaluate import Evaluator, PythonEvaluator, Scope
from exprfmt.render import DefaultRenderer, Renderer, render, render_line, render_to
from exprfmt.scan import scan
from exprfmt.segment import Placeholder

MODULE_CONSTANT = "from module globals"


@pytest.mark.parametrize(
    "template,scope,expected",
    [
        ("lorem {arg[0]} dolor {arg[1]} amet", {"arg": ["ipsum", "sit"]}, "lorem ipsum dolor sit amet"),
        ("{{value}} = {value}", {"value": 10}, "{value} = 10"),
        ("{{{arg}}} {{{{ipsum}}}}", {"arg": "lorem"}, "{lorem} {{ipsum}}"),
        ('{:-<5 "x"}', {}, "x----"),
        ("{:.5 12.3}", {}, "12.30000"),
        ("{:#010x 27}", {}, "0x0000001b"),
        ("{:#x 27}", {}, "0x1b"),
        ("{:+ 5}", {}, "+5"),
        ("{:04 42}", {}, "0042"),
        ("{:>6 name}|{:<6 name}|{:^6 name}", {"name": "ab"}, "    ab|ab    |  ab  "),
        ("{: >4 n}", {"n": 1}, "   1"),
        ("{:'>4 n}", {"n": 1}, "'''1"),
        ('{:">4 n}', {"n": 1}, '"""1'),
        ("{ { 1 + 1 } }", {}, "{2}"),
        ('{"}" + "{"}', {}, "}{"),
        ("{x # trailing comment\n}", {"x": 3}, "3"),
        ("{sum(i for i in {1, 2, 3})}", {}, "6"),
        ("{:?s}", {"s": "q"}, "'q'"),
        ("{:x? 255}", {}, "ff"),
        ("{len(items)} items", {"items": [1, 2]}, "2 items"),
        ("{[k for k in d]}", {"d": {"a": 1}}, "['a']"),
        ("{a if a else b}", {"a": 0, "b": "fallback"}, "fallback"),
    ],
)
def test_render(template: str, scope: dict[str, Any], expected: str) -> None:
    assert render(scan(template), scope) == expected


@pytest.mark.parametrize("template", ["plain text", "{{", "}}", "a {{b}} {{{{c}}}} d", ""])
def test_escape_only_templates_round_trip(template: str) -> None:
    expected = template.replace("{{", "{").replace("}}", "}")
    assert render(scan(template), {}) == expected


def test_render_captures_caller_scope() -> None:
    local_value = 41
    assert render(scan("{local_value + 1} {MODULE_CONSTANT}")) == "42 from module globals"


def test_locals_shadow_globals() -> None:
    MODULE_CONSTANT = "local"  # noqa: N806
    assert render(scan("{MODULE_CONSTANT}")) == "local"


def test_comprehension_sees_captured_locals() -> None:
    factor = 3
    assert render(scan("{[factor * i for i in range(3)]}")) == "[0, 3, 6]"


def test_explicit_scope_object() -> None:
    scope = Scope({"g": 1}, {"l": 2})
    assert render(scan("{g + l}"), scope) == "3"


def test_evaluation_error_carries_diagnostic() -> None:
    with pytest.raises(EvaluationError) as ei:
        render(scan("ok {missing_name} {1}"), {})
    err = ei.value
    assert err.code == "evaluation-failed"
    assert isinstance(err.__cause__, NameError)
    assert err.diagnostic is not None
    assert err.diagnostic.hint is not None
    assert int(err.diagnostic.span.start) == 3


def test_syntax_error_in_expression() -> None:
    with pytest.raises(EvaluationError) as ei:
        render(scan("{1 +}"), {})
    assert isinstance(ei.value.__cause__, SyntaxError)


def test_first_error_wins() -> None:
    with pytest.raises(EvaluationError) as ei:
        render(scan("{1 / 0} {undefined}"), {})
    assert isinstance(ei.value.__cause__, ZeroDivisionError)


def test_expressions_run_left_to_right_once() -> None:
    calls: list[str] = []

    def tick(name: str) -> str:
        calls.append(name)
        return name

    assert render(scan("{tick('a')}{tick('b')}{tick('c')}"), {"tick": tick}) == "abc"
    assert calls == ["a", "b", "c"]


def test_format_error_from_render() -> None:
    with pytest.raises(FormatSpecError) as ei:
        render(scan("{:d s}"), {"s": "text"})
    assert ei.value.code == "invalid-format-spec"


def test_render_to_writes_once() -> None:
    class Recorder(io.StringIO):
        writes = 0

        def write(self, s: str) -> int:
            Recorder.writes += 1
            return super().write(s)

    out = Recorder()
    render_to(scan("a{x}b{x}c"), {"x": "-"}, file=out, end="!")
    assert out.getvalue() == "a-b-c!"
    assert Recorder.writes == 1


def test_render_to_writes_nothing_on_failure() -> None:
    out = io.StringIO()
    with pytest.raises(EvaluationError):
        render_to(scan("before {boom} after"), {}, file=out)
    assert out.getvalue() == ""


def test_render_to_defaults_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    value = 7
    render_to(scan("v={value}"))
    render_line(scan("[{value}]"))
    assert capsys.readouterr().out == "v=7[7]\n"


def test_malformed_template_never_evaluates() -> None:
    calls: list[int] = []
    with pytest.raises(MalformedTemplateError):
        render(scan("{calls.append(1)} }"), {"calls": calls})
    assert calls == []


def test_custom_evaluator() -> None:
    class Upper:
        def evaluate(self, ph: Placeholder, namespace: dict[str, Any]) -> Any:
            return ph.expression.upper()

    assert isinstance(Upper(), Evaluator)
    assert render(scan("{a} and {b}"), {}, evaluator=Upper()) == "A and B"


def test_default_renderer() -> None:
    r = DefaultRenderer()
    assert isinstance(r, Renderer)
    assert isinstance(r.evaluator, PythonEvaluator)
    assert r.render_segments(scan("{n * 2}"), Scope.from_mapping({"n": 4})) == "8"
