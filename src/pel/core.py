from __future__ import annotations

from typing import Generator, Iterable, Iterator, Sequence

from .lang import Expr, Stmt
from .scopes import ScopeStack
from .source import Span
from .trace import Color, Snapshot, TraceRecord
from .values import Value

Trace = Iterator[TraceRecord]
Evaluation = Generator[TraceRecord, None, Value]


class InterpreterCore:
    def __init__(self, statements: Iterable[Stmt]):
        """
        statements:
          - the parsed program; it runs inside one outermost scope, as if it
            were a block
        """
        self.statements: tuple[Stmt, ...] = tuple(statements)
        self.scopes = ScopeStack()
        self.program_output = ""

    # ----- suspension -----

    def snapshot(self) -> Snapshot:
        return Snapshot(self.scopes.snapshot(), self.program_output)

    def trace(
        self,
        message: str,
        highlight: Span,
        secondary: Sequence[tuple[Span, Color]] = (),
        substitutions: Sequence[tuple[Span, str]] = (),
    ) -> TraceRecord:
        return TraceRecord(
            message=message,
            primary_highlight=highlight,
            secondary_highlights=tuple(secondary),
            substitutions=tuple(substitutions),
            snapshot=self.snapshot(),
        )

    def write_output(self, value: Value) -> None:
        self.program_output += value.display() + "\n"

    # ----- run -----

    def interpret(self) -> Trace:
        """
        Run the whole program as a generator of trace records.

        Every `yield` is a suspension point; errors surface as ExecutionError
        raised out of the generator.
        """
        yield from self.g_exec_scoped(self.statements)

    # ----- dispatch -----
    # Python generators, so any evaluation depth can pause at a `yield` and resume
    # exactly where it left off.

    def g_exec_scoped(self, stmts: Sequence[Stmt]) -> Trace:
        self.scopes.start_scope()
        try:
            for stmt in stmts:
                yield from self.g_exec_stmt(stmt)
        finally:
            self.scopes.end_scope()

    def g_exec_stmt(self, node: Stmt) -> Trace:
        m = getattr(self, f"g_exec_{node.__class__.__name__}", None)
        if m is None:
            raise NotImplementedError(f"Statement not supported: {node.__class__.__name__}")
        yield from m(node)

    def g_eval_expr(self, node: Expr) -> Evaluation:
        m = getattr(self, f"g_eval_{node.__class__.__name__}", None)
        if m is None:
            raise NotImplementedError(f"Expression not supported: {node.__class__.__name__}")
        val = yield from m(node)
        return val
