from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, NamedTuple, TypeVar

T = TypeVar("T")


class SourceFile:
    """A loaded, immutable program text."""

    __slots__ = ("name", "source")

    def __init__(self, name: str, source: str):
        self.name = name
        self.source = source

    def __repr__(self) -> str:
        return f"<SourceFile {self.name!r}>"

    def line_col(self, index: int) -> tuple[int, int]:
        before = self.source[:index]
        line = before.count("\n") + 1
        col = index - (before.rfind("\n") + 1) + 1
        return line, col

    def span(self, start: int, end: int) -> Span:
        return Span(self, start, end)

    def eof_span(self) -> Span:
        return Span(self, len(self.source), len(self.source))


@dataclass(frozen=True, eq=False)
class Span:
    file: SourceFile
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError("cannot have span that ends earlier than it starts")

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Span):
            return NotImplemented
        return self.file is other.file and self.start == other.start and self.end == other.end

    def __hash__(self) -> int:
        return hash((id(self.file), self.start, self.end))

    def __add__(self, other: Span) -> Span:
        if self.file is not other.file:
            raise ValueError("cannot join two spans from different files")
        return Span(self.file, min(self.start, other.start), max(self.end, other.end))

    @property
    def text(self) -> str:
        return self.file.source[self.start : self.end]

    def __str__(self) -> str:
        start_line, start_col = self.file.line_col(self.start)
        end_line, end_col = self.file.line_col(self.end)
        name = self.file.name
        if start_line == end_line:
            if start_col == end_col:
                return f"{name}:{start_line}:{start_col}"
            return f"{name}:{start_line}:{start_col}-{end_col}"
        return f"{name}:({start_line}:{start_col})-({end_line}:{end_col})"


class Located(NamedTuple, Generic[T]):
    span: Span
    value: T
