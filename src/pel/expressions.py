from __future__ import annotations

import math
import operator
from typing import Any, Callable, Dict

from .core import Evaluation
from .errors import (
    DivisionByZero,
    InvalidTypeForShortCircuitOp,
    InvalidTypeForUnaryOp,
    InvalidTypesForBinaryOp,
    UnsupportedFeature,
    VarDoesNotExist,
    VarUninitialized,
)
from .lang import (
    Binary,
    BinaryOperator,
    Call,
    Literal,
    Parenthesized,
    ShortCircuit,
    ShortCircuitOperator,
    Unary,
    UnaryOperator,
    Var,
)
from .source import Span
from .trace import DECLARATION_COLOR, OPERAND_COLOR
from .values import Type, Value


def _truncating_divide(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _truncating_modulo(a: int, b: int) -> int:
    return a - b * _truncating_divide(a, b)


def _float_modulo(a: float, b: float) -> float:
    # fmod rejects an infinite dividend instead of returning NaN
    if math.isinf(a):
        return math.nan
    return math.fmod(a, b)


_COMPARISONS: Dict[BinaryOperator, Callable[[Any, Any], bool]] = {
    BinaryOperator.EQUAL: operator.eq,
    BinaryOperator.NOT_EQUAL: operator.ne,
    BinaryOperator.GREATER: operator.gt,
    BinaryOperator.GREATER_EQUAL: operator.ge,
    BinaryOperator.LESS: operator.lt,
    BinaryOperator.LESS_EQUAL: operator.le,
}

# (operator, operand type) -> implementation; a missing key is a type error
_ARITHMETIC: Dict[tuple[BinaryOperator, Type], Callable[[Any, Any], Any]] = {
    (BinaryOperator.ADD, Type.INT): operator.add,
    (BinaryOperator.ADD, Type.FLOAT): operator.add,
    (BinaryOperator.ADD, Type.STRING): operator.add,
    (BinaryOperator.SUBTRACT, Type.INT): operator.sub,
    (BinaryOperator.SUBTRACT, Type.FLOAT): operator.sub,
    (BinaryOperator.MULTIPLY, Type.INT): operator.mul,
    (BinaryOperator.MULTIPLY, Type.FLOAT): operator.mul,
    (BinaryOperator.DIVIDE, Type.INT): _truncating_divide,
    (BinaryOperator.DIVIDE, Type.FLOAT): operator.truediv,
    (BinaryOperator.MODULO, Type.INT): _truncating_modulo,
    (BinaryOperator.MODULO, Type.FLOAT): _float_modulo,
}

_DIVISIONS = frozenset({BinaryOperator.DIVIDE, BinaryOperator.MODULO})


class ExpressionMixin:
    def g_eval_Var(self, node: Var) -> Evaluation:
        binding = self.scopes.lookup(node.name)
        secondary = [] if binding is None else [(binding.decl_span, DECLARATION_COLOR)]
        yield self.trace(f"read variable '{node.name}'", node.span, secondary)

        if binding is None:
            raise VarDoesNotExist(node.span, node.name)
        if binding.value is None:
            raise VarUninitialized(node.span, node.name)
        return binding.value

    def g_eval_Literal(self, node: Literal) -> Evaluation:
        if False:
            yield None  # keeps it a generator; literals are not observable steps
        return node.value

    def g_eval_Parenthesized(self, node: Parenthesized) -> Evaluation:
        val = yield from self.g_eval_expr(node.inner)
        return val

    def g_eval_Call(self, node: Call) -> Evaluation:
        if False:
            yield None
        raise UnsupportedFeature(node.span, "function calls")

    def g_eval_ShortCircuit(self, node: ShortCircuit) -> Evaluation:
        op = node.op.value
        left = yield from self.g_eval_expr(node.left)
        if left.type is not Type.BOOL:
            raise InvalidTypeForShortCircuitOp(node.left.span, op, left.type)
        # `||` is decided by a true left side, `&&` by a false one
        if left.payload is (op is ShortCircuitOperator.OR):
            return left

        right = yield from self.g_eval_expr(node.right)
        if right.type is not Type.BOOL:
            raise InvalidTypeForShortCircuitOp(node.right.span, op, right.type)
        return right

    def g_eval_Binary(self, node: Binary) -> Evaluation:
        left = yield from self.g_eval_expr(node.left)
        right = yield from self.g_eval_expr(node.right)

        op_span, op = node.op
        yield self.trace(
            f"evaluate operation '{op}'",
            op_span,
            [(node.left.span, OPERAND_COLOR), (node.right.span, OPERAND_COLOR)],
            [(node.left.span, left.repr_text()), (node.right.span, right.repr_text())],
        )
        return self._apply_binop(op_span, op, left, right)

    def g_eval_Unary(self, node: Unary) -> Evaluation:
        operand = yield from self.g_eval_expr(node.operand)

        op_span, op = node.op
        yield self.trace(
            f"evaluate operation '{op}'",
            op_span,
            [(node.operand.span, OPERAND_COLOR)],
            [(node.operand.span, operand.repr_text())],
        )
        return self._apply_unaryop(op_span, op, operand)

    # ----- operators -----

    def _apply_binop(self, span: Span, op: BinaryOperator, left: Value, right: Value) -> Value:
        if left.type is not right.type:
            raise InvalidTypesForBinaryOp(span, op, left.type, right.type)

        if op.is_comparison:
            return Value(Type.BOOL, _COMPARISONS[op](left.payload, right.payload))

        fn = _ARITHMETIC.get((op, left.type))
        if fn is None:
            raise InvalidTypesForBinaryOp(span, op, left.type, right.type)
        if op in _DIVISIONS and right.payload == 0:
            raise DivisionByZero(span, op)
        return Value(left.type, fn(left.payload, right.payload))

    def _apply_unaryop(self, span: Span, op: UnaryOperator, operand: Value) -> Value:
        if op is UnaryOperator.NUMERIC_NEGATE and operand.type in (Type.INT, Type.FLOAT):
            return Value(operand.type, -operand.payload)
        if op is UnaryOperator.LOGICAL_NEGATE and operand.type is Type.BOOL:
            return Value(Type.BOOL, not operand.payload)
        raise InvalidTypeForUnaryOp(span, op, operand.type)
