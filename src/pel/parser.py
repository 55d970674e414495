"""Recursive-descent parser producing `pel.lang` nodes.

Precedence, lowest first: `||`, `&&`, equality, comparison, `+ -`, `* / %`,
unary `! -`, call, primary. Every binary level is left-associative.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .errors import ParseError
from .lang import (
    Assign,
    Binary,
    BinaryOperator,
    Block,
    Call,
    Expr,
    ExprStmt,
    If,
    Literal,
    Parenthesized,
    Print,
    ShortCircuit,
    ShortCircuitOperator,
    Stmt,
    Unary,
    UnaryOperator,
    Var,
    VarDecl,
    While,
)
from .lexer import Lexer, Token, TokenKind
from .source import Located, SourceFile, Span
from .values import Value


class AssignStatementType(enum.Enum):
    OPERATOR = "operator"  # x = value;
    KEYWORD = "keyword"  # assign value to x;
    ANY = "any"


class VariableDeclarationType(enum.Enum):
    VAR = "var"  # var x = value;
    MAKE = "make"  # make var x;
    ANY = "any"


@dataclass(frozen=True)
class SyntaxOptions:
    assign_type: AssignStatementType = AssignStatementType.ANY
    variable_decl_type: VariableDeclarationType = VariableDeclarationType.ANY

    def allows_assign(self, kind: AssignStatementType) -> bool:
        return self.assign_type in (kind, AssignStatementType.ANY)

    def allows_decl(self, kind: VariableDeclarationType) -> bool:
        return self.variable_decl_type in (kind, VariableDeclarationType.ANY)


_SHORT_CIRCUIT_LEVELS = (
    {TokenKind.DOUBLE_PIPE: ShortCircuitOperator.OR},
    {TokenKind.DOUBLE_AMPER: ShortCircuitOperator.AND},
)

_BINARY_LEVELS = (
    {
        TokenKind.BANG_EQUAL: BinaryOperator.NOT_EQUAL,
        TokenKind.DOUBLE_EQUAL: BinaryOperator.EQUAL,
    },
    {
        TokenKind.GREATER: BinaryOperator.GREATER,
        TokenKind.GREATER_EQUAL: BinaryOperator.GREATER_EQUAL,
        TokenKind.LESS: BinaryOperator.LESS,
        TokenKind.LESS_EQUAL: BinaryOperator.LESS_EQUAL,
    },
    {
        TokenKind.PLUS: BinaryOperator.ADD,
        TokenKind.MINUS: BinaryOperator.SUBTRACT,
    },
    {
        TokenKind.STAR: BinaryOperator.MULTIPLY,
        TokenKind.SLASH: BinaryOperator.DIVIDE,
        TokenKind.PERCENT: BinaryOperator.MODULO,
    },
)

_UNARY = {
    TokenKind.BANG: UnaryOperator.LOGICAL_NEGATE,
    TokenKind.MINUS: UnaryOperator.NUMERIC_NEGATE,
}

_UNSUPPORTED_STATEMENTS = {
    TokenKind.FOR: "'for' loops are not supported",
    TokenKind.BREAK: "'break' is not supported",
    TokenKind.CONTINUE: "'continue' is not supported",
    TokenKind.RETURN: "'return' is not supported",
    TokenKind.FN: "function definitions are not supported",
}


class Parser:
    def __init__(self, file: SourceFile, options: Optional[SyntaxOptions] = None):
        self.file = file
        self.options = options or SyntaxOptions()
        self.tokens = Lexer(file).tokenize()
        self.pos = 0

    # ----- token helpers -----

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def next(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.kind is not TokenKind.EOF:
            self.pos += 1
        return tok

    def at(self, *kinds: TokenKind) -> bool:
        return self.peek().kind in kinds

    def maybe_consume(self, kind: TokenKind) -> Optional[Token]:
        if self.at(kind):
            return self.next()
        return None

    def expect(self, kind: TokenKind, message: str) -> Token:
        tok = self.peek()
        if tok.kind is not kind:
            raise ParseError(message, tok.span)
        return self.next()

    def expect_semicolon(self, what: str) -> Span:
        return self.expect(TokenKind.SEMICOLON, f"expected ';' after {what}").span

    # ----- statements -----

    def parse_statements(self) -> List[Stmt]:
        statements: List[Stmt] = []
        while not self.at(TokenKind.EOF):
            statements.append(self.statement())
        return statements

    def statement(self) -> Stmt:
        tok = self.peek()
        kind = tok.kind
        if kind is TokenKind.OBRACE:
            return self.finish_block(self.next())
        if kind is TokenKind.IF:
            return self.if_statement(self.next())
        if kind is TokenKind.WHILE:
            return self.while_statement(self.next())
        if kind is TokenKind.PRINT:
            return self.print_statement(self.next())
        if kind is TokenKind.VAR and self.options.allows_decl(VariableDeclarationType.VAR):
            return self.var_statement(self.next())
        if kind is TokenKind.MAKE and self.options.allows_decl(VariableDeclarationType.MAKE):
            return self.make_var_statement(self.next())
        if kind is TokenKind.ASSIGN and self.options.allows_assign(AssignStatementType.KEYWORD):
            return self.assign_statement(self.next())
        if kind in _UNSUPPORTED_STATEMENTS:
            raise ParseError(_UNSUPPORTED_STATEMENTS[kind], tok.span)
        if kind in (TokenKind.VAR, TokenKind.MAKE, TokenKind.ASSIGN):
            raise ParseError(f"'{kind.value}' statements are disabled by the syntax options", tok.span)

        expr = self.expression()
        if self.at(TokenKind.EQUAL):
            eq = self.next()
            if not self.options.allows_assign(AssignStatementType.OPERATOR):
                raise ParseError("assignment with '=' is disabled by the syntax options", eq.span)
            value = self.expression()
            semi = self.expect_semicolon("assignment statement")
            return self.make_assignment(expr, value, expr.span + semi)

        semi = self.expect_semicolon("expression statement")
        return ExprStmt(expr.span + semi, expr)

    def finish_block(self, obrace: Token) -> Block:
        statements: List[Stmt] = []
        while not self.at(TokenKind.CBRACE, TokenKind.EOF):
            statements.append(self.statement())
        cbrace = self.expect(TokenKind.CBRACE, "expected '}' to close block")
        return Block(obrace.span + cbrace.span, tuple(statements))

    def if_statement(self, if_tok: Token) -> If:
        condition = self.expression()
        obrace = self.expect(TokenKind.OBRACE, "expected '{' after condition of 'if' statement")
        then_branch = self.finish_block(obrace)

        else_branch: Optional[Stmt] = None
        if self.maybe_consume(TokenKind.ELSE):
            nested_if = self.maybe_consume(TokenKind.IF)
            if nested_if is not None:
                else_branch = self.if_statement(nested_if)
            else:
                obrace = self.expect(TokenKind.OBRACE, "expected either 'if' or '{' after 'else'")
                else_branch = self.finish_block(obrace)

        last = else_branch if else_branch is not None else then_branch
        return If(if_tok.span + last.span, if_tok.span, condition, then_branch, else_branch)

    def while_statement(self, while_tok: Token) -> While:
        condition = self.expression()
        obrace = self.expect(TokenKind.OBRACE, "expected '{' after condition of 'while' loop")
        body = self.finish_block(obrace)
        return While(while_tok.span + body.span, while_tok.span, condition, body)

    def var_statement(self, var_tok: Token) -> VarDecl:
        name = self.expect(TokenKind.IDENTIFIER, "expected variable name after 'var'")
        initializer = self.expression() if self.maybe_consume(TokenKind.EQUAL) else None
        semi = self.expect_semicolon("'var' statement")
        return VarDecl(var_tok.span + semi, name.value, initializer)

    def make_var_statement(self, make_tok: Token) -> VarDecl:
        self.expect(TokenKind.VAR, "expected 'var' after 'make'")
        name = self.expect(TokenKind.IDENTIFIER, "expected variable name after 'var'")
        semi = self.expect_semicolon("'make var' statement")
        return VarDecl(make_tok.span + semi, name.value, None)

    def assign_statement(self, assign_tok: Token) -> Assign:
        value = self.expression()
        self.expect(TokenKind.TO, "expected 'to'")
        target = self.expression()
        semi = self.expect_semicolon("'assign' statement")
        return self.make_assignment(target, value, assign_tok.span + semi)

    def print_statement(self, print_tok: Token) -> Print:
        expr = self.expression()
        semi = self.expect_semicolon("'print' statement")
        return Print(print_tok.span + semi, expr)

    def make_assignment(self, target: Expr, value: Expr, span: Span) -> Assign:
        if not isinstance(target, Var):
            raise ParseError("invalid assignment target", target.span)
        return Assign(span, target.name, value)

    # ----- expressions -----

    def expression(self) -> Expr:
        return self._short_circuit(0)

    def _short_circuit(self, level: int) -> Expr:
        if level == len(_SHORT_CIRCUIT_LEVELS):
            return self._binary(0)
        return self._left_assoc(
            _SHORT_CIRCUIT_LEVELS[level],
            lambda: self._short_circuit(level + 1),
            ShortCircuit,
        )

    def _binary(self, level: int) -> Expr:
        if level == len(_BINARY_LEVELS):
            return self.unary()
        return self._left_assoc(_BINARY_LEVELS[level], lambda: self._binary(level + 1), Binary)

    def _left_assoc(self, operators: Dict[TokenKind, enum.Enum], operand: Callable[[], Expr], node_type) -> Expr:
        left = operand()
        while self.peek().kind in operators:
            tok = self.next()
            right = operand()
            left = node_type(left.span + right.span, left, Located(tok.span, operators[tok.kind]), right)
        return left

    def unary(self) -> Expr:
        op = _UNARY.get(self.peek().kind)
        if op is not None:
            tok = self.next()
            operand = self.unary()
            return Unary(tok.span + operand.span, Located(tok.span, op), operand)
        return self.call()

    def call(self) -> Expr:
        expr = self.primary()
        while self.maybe_consume(TokenKind.OPAREN):
            arguments: List[Expr] = []
            if not self.at(TokenKind.CPAREN):
                arguments.append(self.expression())
                while self.maybe_consume(TokenKind.COMMA):
                    arguments.append(self.expression())
            cparen = self.expect(TokenKind.CPAREN, "expected ')' after arguments")
            expr = Call(expr.span + cparen.span, expr, tuple(arguments))
        return expr

    def primary(self) -> Expr:
        tok = self.next()
        kind = tok.kind
        if kind is TokenKind.IDENTIFIER:
            return Var(tok.span, tok.value)
        if kind in (TokenKind.INT, TokenKind.FLOAT, TokenKind.STRING, TokenKind.BOOL):
            return Literal(tok.span, Value.from_python(tok.value))
        if kind is TokenKind.OPAREN:
            inner = self.expression()
            cparen = self.expect(TokenKind.CPAREN, "expected ')' to close parenthesized expression")
            return Parenthesized(tok.span + cparen.span, inner)
        raise ParseError("expected expression", tok.span)


def parse_statements(file: SourceFile, options: Optional[SyntaxOptions] = None) -> List[Stmt]:
    return Parser(file, options).parse_statements()


def parse_expr(file: SourceFile) -> Expr:
    parser = Parser(file)
    expr = parser.expression()
    tok = parser.peek()
    if tok.kind is not TokenKind.EOF:
        raise ParseError("extraneous input", tok.span)
    return expr
