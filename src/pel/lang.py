"""AST node definitions produced by the parser and walked by the interpreter."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from .source import Located, Span
from .values import Value


class UnaryOperator(enum.Enum):
    NUMERIC_NEGATE = "-"
    LOGICAL_NEGATE = "!"

    def __str__(self) -> str:
        return self.value


class BinaryOperator(enum.Enum):
    EQUAL = "="
    NOT_EQUAL = "!="
    GREATER = ">"
    GREATER_EQUAL = ">="
    LESS = "<"
    LESS_EQUAL = "<="
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"

    def __str__(self) -> str:
        return self.value

    @property
    def is_comparison(self) -> bool:
        return self in _COMPARISONS


_COMPARISONS = frozenset(
    {
        BinaryOperator.EQUAL,
        BinaryOperator.NOT_EQUAL,
        BinaryOperator.GREATER,
        BinaryOperator.GREATER_EQUAL,
        BinaryOperator.LESS,
        BinaryOperator.LESS_EQUAL,
    }
)


class ShortCircuitOperator(enum.Enum):
    OR = "||"
    AND = "&&"

    def __str__(self) -> str:
        return self.value


# ----- expressions -----


@dataclass(frozen=True)
class Expr:
    span: Span


@dataclass(frozen=True)
class Var(Expr):
    name: str


@dataclass(frozen=True)
class Literal(Expr):
    value: Value


@dataclass(frozen=True)
class Parenthesized(Expr):
    inner: Expr


@dataclass(frozen=True)
class Call(Expr):
    callee: Expr
    arguments: tuple[Expr, ...]


@dataclass(frozen=True)
class ShortCircuit(Expr):
    left: Expr
    op: Located[ShortCircuitOperator]
    right: Expr


@dataclass(frozen=True)
class Binary(Expr):
    left: Expr
    op: Located[BinaryOperator]
    right: Expr


@dataclass(frozen=True)
class Unary(Expr):
    op: Located[UnaryOperator]
    operand: Expr


# ----- statements -----


@dataclass(frozen=True)
class Stmt:
    span: Span


@dataclass(frozen=True)
class Block(Stmt):
    statements: tuple[Stmt, ...]


@dataclass(frozen=True)
class ExprStmt(Stmt):
    expr: Expr


@dataclass(frozen=True)
class Print(Stmt):
    expr: Expr


@dataclass(frozen=True)
class VarDecl(Stmt):
    name: str
    initializer: Optional[Expr]


@dataclass(frozen=True)
class Assign(Stmt):
    name: str
    value: Expr


@dataclass(frozen=True)
class If(Stmt):
    keyword_span: Span
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@dataclass(frozen=True)
class While(Stmt):
    keyword_span: Span
    condition: Expr
    body: Stmt
