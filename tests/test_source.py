from __future__ import annotations

import pytest

from exprfmt.source import Source, SourceIndex, SourceSpan


def test_pos_to_line_col_basic():
    s = Source(None, "ab\nc\r\nd\n")
    # indexes: 0 1 2 3 4 5 6 7  (len=8)
    assert s.pos_to_line_col(0) == (1, 1)
    assert s.pos_to_line_col(2) == (1, 3)     # '\n' at end of line 1
    assert s.pos_to_line_col(3) == (2, 1)     # 'c'
    assert s.pos_to_line_col(5) == (2, 3)     # end of CRLF line
    assert s.pos_to_line_col(8) == (4, 1)     # caret at EOF (line 4 start)


def test_pos_to_line_col_accepts_source_index():
    s = Source.from_string("x\n{y}")
    assert s.pos_to_line_col(SourceIndex(3)) == (2, 2)


def test_pos_out_of_range():
    s = Source.from_string("abc")
    with pytest.raises(ValueError):
        s.pos_to_line_col(4)


def test_empty_source_is_allowed():
    s = Source.from_string("")
    assert s.contents == ""
    assert s.label == "<template>"
    assert s.pos_to_line_col(0) == (1, 1)


@pytest.mark.parametrize("start,end", [(0, 0), (3, 2), (-1, 2)])
def test_span_rejects_empty_or_inverted(start: int, end: int) -> None:
    with pytest.raises(ValueError):
        SourceSpan.from_ints(start, end)


def test_slice_and_len():
    s = Source.from_string("hello {name}")
    span = SourceSpan.from_ints(6, 12)
    assert s.slice(span) == "{name}"
    assert len(span) == 6


def test_slice_out_of_bounds():
    s = Source.from_string("abc")
    with pytest.raises(ValueError):
        s.slice(SourceSpan.from_ints(1, 10))


def test_from_file(tmp_path):
    p = tmp_path / "greeting.txt"
    p.write_text("hi {name}\n", encoding="utf-8")
    s = Source.from_file(p)
    assert s.file == p
    assert s.label == str(p)
    assert s.contents == "hi {name}\n"


def test_from_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        Source.from_file(tmp_path / "nope.txt")


def test_from_file_directory(tmp_path):
    with pytest.raises(IsADirectoryError):
        Source.from_file(tmp_path)


@pytest.mark.parametrize(
    "text,count,lines",
    [
        ("", 1, [""]),
        ("one", 1, ["one"]),
        ("one\n", 1, ["one"]),
        ("a\r\nb\rc", 3, ["a", "b", "c"]),
    ],
)
def test_lines(text: str, count: int, lines: list[str]) -> None:
    s = Source.from_string(text)
    assert s.line_count == count
    assert [s.line(i) for i in range(1, count + 1)] == lines


def test_end_of_last_line_stays_on_that_line():
    s = Source.from_string("x\n{y}")
    assert s.pos_to_line_col(5) == (2, 4)
