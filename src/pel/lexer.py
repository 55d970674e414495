from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, List

from .errors import ParseError
from .source import SourceFile, Span
from .values import decimal_to_int


class TokenKind(enum.Enum):
    OPAREN = "("
    CPAREN = ")"
    OBRACK = "["
    CBRACK = "]"
    OBRACE = "{"
    CBRACE = "}"
    SEMICOLON = ";"
    PERIOD = "."
    COMMA = ","
    EQUAL = "="

    BANG = "!"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    PERCENT = "%"
    PIPE = "|"
    AMPER = "&"

    DOUBLE_PIPE = "||"
    DOUBLE_AMPER = "&&"

    PLUS_EQUAL = "+="
    MINUS_EQUAL = "-="
    STAR_EQUAL = "*="
    SLASH_EQUAL = "/="
    PERCENT_EQUAL = "%="

    BANG_EQUAL = "!="
    DOUBLE_EQUAL = "=="
    GREATER = ">"
    GREATER_EQUAL = ">="
    LESS = "<"
    LESS_EQUAL = "<="

    IDENTIFIER = "identifier"
    INT = "integer literal"
    FLOAT = "float literal"
    STRING = "string literal"
    BOOL = "bool literal"

    IF = "if"
    ELSE = "else"
    FOR = "for"
    WHILE = "while"
    BREAK = "break"
    CONTINUE = "continue"
    VAR = "var"
    RETURN = "return"
    FN = "fn"
    ASSIGN = "assign"
    TO = "to"
    PRINT = "print"
    MAKE = "make"

    EOF = "end of file"


KEYWORDS = {
    kind.value: kind
    for kind in (
        TokenKind.IF,
        TokenKind.ELSE,
        TokenKind.FOR,
        TokenKind.WHILE,
        TokenKind.BREAK,
        TokenKind.CONTINUE,
        TokenKind.VAR,
        TokenKind.RETURN,
        TokenKind.FN,
        TokenKind.ASSIGN,
        TokenKind.TO,
        TokenKind.PRINT,
        TokenKind.MAKE,
    )
}

SINGLE_CHAR = {
    "(": TokenKind.OPAREN,
    ")": TokenKind.CPAREN,
    "[": TokenKind.OBRACK,
    "]": TokenKind.CBRACK,
    "{": TokenKind.OBRACE,
    "}": TokenKind.CBRACE,
    ";": TokenKind.SEMICOLON,
    ".": TokenKind.PERIOD,
    ",": TokenKind.COMMA,
}

# first char -> (kind alone, second char, kind of the pair)
PAIRED = {
    "=": (TokenKind.EQUAL, "=", TokenKind.DOUBLE_EQUAL),
    "!": (TokenKind.BANG, "=", TokenKind.BANG_EQUAL),
    "+": (TokenKind.PLUS, "=", TokenKind.PLUS_EQUAL),
    "-": (TokenKind.MINUS, "=", TokenKind.MINUS_EQUAL),
    "*": (TokenKind.STAR, "=", TokenKind.STAR_EQUAL),
    "/": (TokenKind.SLASH, "=", TokenKind.SLASH_EQUAL),
    "%": (TokenKind.PERCENT, "=", TokenKind.PERCENT_EQUAL),
    "|": (TokenKind.PIPE, "|", TokenKind.DOUBLE_PIPE),
    "&": (TokenKind.AMPER, "&", TokenKind.DOUBLE_AMPER),
    ">": (TokenKind.GREATER, "=", TokenKind.GREATER_EQUAL),
    "<": (TokenKind.LESS, "=", TokenKind.LESS_EQUAL),
}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    span: Span
    value: Any = None


class Lexer:
    def __init__(self, file: SourceFile):
        self.file = file
        self.text = file.source
        self.index = 0

    def _peek(self, offset: int = 0) -> str:
        i = self.index + offset
        return self.text[i] if i < len(self.text) else ""

    def _span_from(self, start: int) -> Span:
        return self.file.span(start, self.index)

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.kind is TokenKind.EOF:
                return tokens

    def next_token(self) -> Token:
        text = self.text
        n = len(text)
        while self.index < n:
            start = self.index
            ch = text[start]

            if ch in " \t\r\n":
                self.index += 1
                continue
            if ch == "/" and self._peek(1) == "/":
                while self.index < n and text[self.index] != "\n":
                    self.index += 1
                continue

            self.index += 1
            if ch == '"':
                return self._string(start)
            if ch in SINGLE_CHAR:
                return Token(SINGLE_CHAR[ch], self._span_from(start))
            if ch in PAIRED:
                alone, second, paired = PAIRED[ch]
                if self._peek() == second:
                    self.index += 1
                    return Token(paired, self._span_from(start))
                return Token(alone, self._span_from(start))
            if ch.isascii() and ch.isdigit():
                return self._number(start)
            if (ch.isascii() and ch.isalpha()) or ch == "_":
                return self._identifier(start)

            span = self._span_from(start)
            if ch.isascii():
                raise ParseError(f"bad character '{ch}'", span)
            raise ParseError(f"bad non-ascii character '{ch}'", span)

        return Token(TokenKind.EOF, self.file.eof_span())

    def _string(self, start: int) -> Token:
        end = self.text.find('"', self.index)
        if end == -1:
            self.index = len(self.text)
            raise ParseError("unterminated string literal", self._span_from(start))
        self.index = end + 1
        return Token(TokenKind.STRING, self._span_from(start), self.text[start + 1 : end])

    def _digits(self) -> None:
        while self._peek().isascii() and self._peek().isdigit():
            self.index += 1

    def _number(self, start: int) -> Token:
        self._digits()
        if self._peek() == ".":
            self.index += 1
            self._digits()
            lexeme = self.text[start : self.index]
            return Token(TokenKind.FLOAT, self._span_from(start), float(lexeme))
        lexeme = self.text[start : self.index]
        return Token(TokenKind.INT, self._span_from(start), decimal_to_int(lexeme))

    def _identifier(self, start: int) -> Token:
        while True:
            c = self._peek()
            if not (c == "_" or (c.isascii() and c.isalnum())):
                break
            self.index += 1
        word = self.text[start : self.index]
        span = self._span_from(start)
        if word in ("true", "false"):
            return Token(TokenKind.BOOL, span, word == "true")
        kind = KEYWORDS.get(word)
        if kind is not None:
            return Token(kind, span)
        return Token(TokenKind.IDENTIFIER, span, word)
