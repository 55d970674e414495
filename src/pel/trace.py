"""Records handed to the presentation layer at every suspension point."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional

from .scopes import Binding, ScopeSnapshot
from .source import Span
from .values import Value


class Color(NamedTuple):
    r: int
    g: int
    b: int

    @classmethod
    def rgb(cls, r: int, g: int, b: int) -> Color:
        return cls(r, g, b)


OPERAND_COLOR = Color.rgb(50, 50, 120)
DECLARATION_COLOR = Color.rgb(120, 90, 20)


@dataclass(frozen=True)
class Snapshot:
    """Interpreter state at the moment a record was produced."""

    scopes: tuple[ScopeSnapshot, ...]
    output: str

    def variables(self) -> list[tuple[str, Binding]]:
        """All bindings, outermost scope first, in declaration order."""
        return [item for scope in self.scopes for item in scope]

    def lookup(self, name: str) -> Optional[Binding]:
        for scope in reversed(self.scopes):
            for var_name, binding in scope:
                if var_name == name:
                    return binding
        return None

    def value_of(self, name: str) -> Optional[Value]:
        binding = self.lookup(name)
        return None if binding is None else binding.value


@dataclass(frozen=True)
class TraceRecord:
    message: str
    primary_highlight: Span
    secondary_highlights: tuple[tuple[Span, Color], ...]
    substitutions: tuple[tuple[Span, str], ...]
    snapshot: Snapshot

    def describe(self) -> str:
        lines = [f"{self.message} @ {self.primary_highlight}"]
        for span, text in self.substitutions:
            lines.append(f"    {span.text} => {text}")
        return "\n".join(lines)
