from __future__ import annotations

from typing import Optional

from .lang import BinaryOperator, ShortCircuitOperator, UnaryOperator
from .source import Span
from .values import Type


class PelError(Exception):
    """Base class for errors reported against a program's source."""

    def __init__(self, message: str, span: Optional[Span] = None):
        super().__init__(message)
        self.message = message
        self.span = span

    def __str__(self) -> str:
        return self.message


class ParseError(PelError):
    """Raised by the lexer and parser; parsing stops at the first one."""


class ExecutionError(PelError):
    """A runtime failure of the interpreted program.

    Subclasses keep their payload on attributes and build the message from it,
    so two errors with the same payload always render the same text.
    """

    span: Span

    @property
    def kind(self) -> str:
        return type(self).__name__


class VarUninitialized(ExecutionError):
    def __init__(self, span: Span, name: str):
        self.name = name
        super().__init__(f"variable '{name}' is uninitialized", span)


class VarDoesNotExist(ExecutionError):
    def __init__(self, span: Span, name: str):
        self.name = name
        super().__init__(f"variable '{name}' does not exist", span)


class InvalidTypeForShortCircuitOp(ExecutionError):
    def __init__(self, span: Span, op: ShortCircuitOperator, type_: Type):
        self.op = op
        self.type = type_
        super().__init__(f"invalid operand type for operator '{op}': expected bool, got {type_}", span)


class InvalidTypesForBinaryOp(ExecutionError):
    def __init__(self, span: Span, op: BinaryOperator, left: Type, right: Type):
        self.op = op
        self.left = left
        self.right = right
        super().__init__(f"invalid operand types for operator '{op}': {left} and {right}", span)


class InvalidTypeForUnaryOp(ExecutionError):
    def __init__(self, span: Span, op: UnaryOperator, type_: Type):
        self.op = op
        self.type = type_
        super().__init__(f"invalid operand type for operator '{op}': {type_}", span)


class ExpectedBool(ExecutionError):
    def __init__(self, span: Span, type_: Type):
        self.type = type_
        super().__init__(f"expected condition of type bool, got {type_}", span)


class DivisionByZero(ExecutionError):
    def __init__(self, span: Span, op: BinaryOperator):
        self.op = op
        super().__init__(f"division by zero in operator '{op}'", span)


class UnsupportedFeature(PelError, NotImplementedError):
    """A construct that parses but that the interpreter cannot run.

    The stepper treats it as an internal failure rather than a program error.
    """

    def __init__(self, span: Span, feature: str):
        self.feature = feature
        super().__init__(f"{feature} are not supported", span)


def format_error(error: PelError) -> str:
    if error.span is not None:
        return f"error at {error.span}: {error.message}"
    return f"error: {error.message}"
