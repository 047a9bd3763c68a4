from __future__ import annotations

import io
import sys

import pytest

from exprfmt.errors import EvaluationError, MalformedTemplateError
from exprfmt.evaluate import Scope
from exprfmt.interpolate import ex_eprint, ex_eprintln, ex_format, ex_print, ex_println
from exprfmt.short import exep, exepl, exf, exp, expl

GLOBAL_NAME = "global"


def test_ex_format_sees_locals_and_globals() -> None:
    arg = ["ipsum", "sit"]
    assert ex_format("lorem {arg[0]} dolor {arg[1]} amet") == "lorem ipsum dolor sit amet"
    assert ex_format("{GLOBAL_NAME}") == "global"


def test_ex_format_inside_nested_function() -> None:
    outer = 10

    def inner() -> str:
        inner_value = outer + 1
        return ex_format("{inner_value}")

    assert inner() == "11"


def test_scope_mapping_and_variables_layer_on_the_caller() -> None:
    a = "frame"
    b = "frame"
    assert ex_format("{a} {b} {GLOBAL_NAME}", {"b": "mapping"}) == "frame mapping global"
    assert ex_format("{a} {b}", {"b": "mapping"}, a="kw", b="kw") == "kw kw"


def test_scope_object_replaces_caller_frame() -> None:
    hidden = "not visible"  # noqa: F841
    with pytest.raises(EvaluationError):
        ex_format("{hidden}", Scope.from_mapping({}))


def test_print_variants(capsys: pytest.CaptureFixture[str]) -> None:
    n = 3
    ex_print("a{n}")
    ex_println("b{n}")
    ex_eprint("c{n}")
    ex_eprintln("d{n}")
    captured = capsys.readouterr()
    assert captured.out == "a3b3\n"
    assert captured.err == "c3d3\n"


def test_short_names(capsys: pytest.CaptureFixture[str]) -> None:
    v = 1
    assert exf("{v}") == "1"
    exp("{v}")
    expl("{v}")
    exep("{v}")
    exepl("{v}")
    captured = capsys.readouterr()
    assert captured.out == "11\n"
    assert captured.err == "11\n"


def test_print_writes_nothing_on_error(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(EvaluationError):
        ex_println("before {1 / 0}")
    assert capsys.readouterr().out == ""


def test_malformed_template_evaluates_nothing() -> None:
    seen: list[int] = []
    with pytest.raises(MalformedTemplateError):
        ex_format("{seen.append(1)} {")
    assert seen == []


def test_stream_is_looked_up_at_call_time(monkeypatch: pytest.MonkeyPatch) -> None:
    buf = io.StringIO()
    monkeypatch.setattr(sys, "stdout", buf)
    ex_println("{2 + 2}")
    assert buf.getvalue() == "4\n"
