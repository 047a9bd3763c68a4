from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path


@dataclass(frozen=True, order=True, slots=True)
class SourceIndex:
    pos: int

    def __int__(self) -> int:
        return self.pos

    def __index__(self) -> int:
        return self.pos

    def __repr__(self) -> str:
        return f"SourceIndex({self.pos})"


@dataclass(frozen=True, slots=True)
class SourceSpan:
    '''0-indexed, [start, end) half-open interval into a template's text.'''
    start: SourceIndex  # inclusive
    end: SourceIndex    # exclusive

    def __post_init__(self) -> None:
        if self.start.pos < 0:
            raise ValueError(f"SourceSpan.start cannot be negative (got {self.start})")
        if self.end <= self.start:
            raise ValueError(f"SourceSpan.end ({self.end}) <= start ({self.start})")

    @classmethod
    def from_ints(cls, start: int, end: int) -> SourceSpan:
        return cls(SourceIndex(start), SourceIndex(end))

    def offsets(self) -> tuple[int, int]:
        return (self.start.pos, self.end.pos)

    def __len__(self) -> int:
        return self.end.pos - self.start.pos


def _line_starts(s: str) -> tuple[int, ...]:
    # offset of each line start; \n, \r\n and \r all count as breaks
    starts = [0]
    for part in s.splitlines(keepends=True):
        if part.splitlines()[0] != part:
            starts.append(starts[-1] + len(part))
    return tuple(starts)


@dataclass(frozen=True, slots=True)
class Source:
    """A template's text, optionally tied to the file it was read from.

    Empty contents are allowed: an empty template scans to no segments.
    """
    file: Path | None
    contents: str
    line_starts: tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "line_starts", _line_starts(self.contents))

    @classmethod
    def from_string(cls, text: str) -> Source:
        return cls(None, text)

    @classmethod
    def from_file(cls, path: str | Path | PathLike[str], encoding: str = "utf-8") -> Source:
        p = Path(path)
        if p.is_dir():
            raise IsADirectoryError(f"Expected a template file but found a directory: {p}")
        if not p.exists():
            raise FileNotFoundError(f"No such template file: {p}")
        return cls(p, p.read_text(encoding=encoding))

    @property
    def label(self) -> str:
        return str(self.file) if self.file is not None else "<template>"

    @property
    def line_count(self) -> int:
        n = len(self.line_starts)
        if n > 1 and self.line_starts[-1] == len(self.contents):
            n -= 1  # nothing after the final line break
        return n

    def line(self, line_no: int) -> str:
        """Text of 1-indexed line `line_no`, without its line break."""
        lo = self.line_starts[line_no - 1]
        hi = self.line_starts[line_no] if line_no < len(self.line_starts) else len(self.contents)
        return self.contents[lo:hi].rstrip("\r\n")

    def slice(self, span: SourceSpan) -> str:
        if span.end.pos > len(self.contents):
            raise ValueError(f"SourceSpan {span.offsets()} out of bounds for this Source")
        return self.contents[span.start.pos:span.end.pos]

    def pos_to_line_col(self, pos: SourceIndex | int) -> tuple[int, int]:
        '''returns 1-indexed (line, col), editor-style; accepts pos == len(contents).'''
        i = int(pos)
        if not 0 <= i <= len(self.contents):
            raise ValueError(f"pos {i} out of range [0, {len(self.contents)}]")
        line_idx = bisect.bisect_right(self.line_starts, i) - 1
        return (line_idx + 1, i - self.line_starts[line_idx] + 1)
