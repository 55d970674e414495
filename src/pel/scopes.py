from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from .source import Span
from .values import Value

ScopeSnapshot = tuple[tuple[str, "Binding"], ...]


@dataclass(frozen=True)
class Binding:
    """A variable entry; ``value is None`` means declared but uninitialized."""

    decl_span: Span
    value: Optional[Value]


class ScopeStack:
    """
    Nested lexical scopes as a flat list, innermost last.

    Lookups walk from the innermost scope outwards, so a name declared in an
    inner scope shadows the same name further out until that scope ends.
    """

    def __init__(self) -> None:
        self.scopes: list[Dict[str, Binding]] = []

    def __len__(self) -> int:
        return len(self.scopes)

    def __iter__(self) -> Iterator[Dict[str, Binding]]:
        return iter(self.scopes)

    def start_scope(self) -> None:
        self.scopes.append({})

    def end_scope(self) -> None:
        if not self.scopes:
            raise RuntimeError("end_scope() called with no open scope")
        self.scopes.pop()

    def define_var(self, name: str, decl_span: Span, value: Optional[Value]) -> None:
        if not self.scopes:
            raise RuntimeError("define var when there are no scopes to define in")
        self.scopes[-1][name] = Binding(decl_span, value)

    def lookup(self, name: str) -> Optional[Binding]:
        for scope in reversed(self.scopes):
            binding = scope.get(name)
            if binding is not None:
                return binding
        return None

    def lookup_mut(self, name: str) -> Optional[Dict[str, Binding]]:
        """Return the innermost scope mapping that holds ``name``, for writing."""
        for scope in reversed(self.scopes):
            if name in scope:
                return scope
        return None

    def assign(self, name: str, value: Value) -> bool:
        scope = self.lookup_mut(name)
        if scope is None:
            return False
        scope[name] = Binding(scope[name].decl_span, value)
        return True

    def snapshot(self) -> tuple[ScopeSnapshot, ...]:
        # Bindings and values are frozen, so copying the containers is enough.
        return tuple(tuple(scope.items()) for scope in self.scopes)
