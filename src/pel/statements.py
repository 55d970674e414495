from __future__ import annotations

from .core import Trace
from .errors import ExpectedBool, VarDoesNotExist
from .lang import Assign, Block, ExprStmt, If, Print, VarDecl, While
from .trace import DECLARATION_COLOR, OPERAND_COLOR
from .values import Type, Value


class StatementMixin:
    def _check_condition(self, node: If | While, value: Value) -> Trace:
        condition = node.condition
        yield self.trace(
            "check condition",
            node.keyword_span,
            [(condition.span, OPERAND_COLOR)],
            [(condition.span, value.repr_text())],
        )
        if value.type is not Type.BOOL:
            raise ExpectedBool(condition.span, value.type)

    def g_exec_Block(self, node: Block) -> Trace:
        yield from self.g_exec_scoped(node.statements)

    def g_exec_ExprStmt(self, node: ExprStmt) -> Trace:
        yield from self.g_eval_expr(node.expr)

    def g_exec_Print(self, node: Print) -> Trace:
        value = yield from self.g_eval_expr(node.expr)
        yield self.trace(
            f"print value '{value.display()}'",
            node.span,
            [(node.expr.span, OPERAND_COLOR)],
            [(node.expr.span, value.repr_text())],
        )
        self.write_output(value)

    def g_exec_VarDecl(self, node: VarDecl) -> Trace:
        if node.initializer is None:
            yield self.trace(f"make uninitialized variable '{node.name}'", node.span)
            self.scopes.define_var(node.name, node.span, None)
            return

        value = yield from self.g_eval_expr(node.initializer)
        yield self.trace(
            f"make variable '{node.name}' with initializer {value.repr_text()}",
            node.span,
            [(node.initializer.span, OPERAND_COLOR)],
            [(node.initializer.span, value.repr_text())],
        )
        self.scopes.define_var(node.name, node.span, value)

    def g_exec_Assign(self, node: Assign) -> Trace:
        value = yield from self.g_eval_expr(node.value)
        secondary = [(node.value.span, OPERAND_COLOR)]
        binding = self.scopes.lookup(node.name)
        if binding is not None:
            secondary.append((binding.decl_span, DECLARATION_COLOR))
        yield self.trace(
            f"assign variable '{node.name}' with value {value.repr_text()}",
            node.span,
            secondary,
            [(node.value.span, value.repr_text())],
        )
        if not self.scopes.assign(node.name, value):
            raise VarDoesNotExist(node.span, node.name)

    def g_exec_If(self, node: If) -> Trace:
        test = yield from self.g_eval_expr(node.condition)
        yield from self._check_condition(node, test)
        if test.payload:
            yield from self.g_exec_stmt(node.then_branch)
        elif node.else_branch is not None:
            yield from self.g_exec_stmt(node.else_branch)

    def g_exec_While(self, node: While) -> Trace:
        while True:
            test = yield from self.g_eval_expr(node.condition)
            yield from self._check_condition(node, test)
            if not test.payload:
                break
            yield from self.g_exec_stmt(node.body)
