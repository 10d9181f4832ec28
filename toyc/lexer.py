"""Tokenizer for the ToyC language."""

from __future__ import annotations

import enum
import string
from dataclasses import dataclass
from typing import Iterator


class TokenType(enum.Enum):
    """Kinds of token produced by the lexer."""

    INT = enum.auto()
    VOID = enum.auto()
    IF = enum.auto()
    ELSE = enum.auto()
    WHILE = enum.auto()
    RETURN = enum.auto()
    BREAK = enum.auto()
    CONTINUE = enum.auto()
    ID = enum.auto()
    NUMBER = enum.auto()
    PLUS = enum.auto()
    MINUS = enum.auto()
    TIMES = enum.auto()
    DIV = enum.auto()
    MOD = enum.auto()
    ASSIGN = enum.auto()
    EQ = enum.auto()
    NE = enum.auto()
    LT = enum.auto()
    LE = enum.auto()
    GT = enum.auto()
    GE = enum.auto()
    AND = enum.auto()
    OR = enum.auto()
    NOT = enum.auto()
    LPAREN = enum.auto()
    RPAREN = enum.auto()
    LBRACE = enum.auto()
    RBRACE = enum.auto()
    SEMI = enum.auto()
    COMMA = enum.auto()
    END = enum.auto()
    UNKNOWN = enum.auto()


@dataclass(frozen=True)
class Token:
    """A lexical token with its source text and line number."""

    type: TokenType
    lexeme: str
    line: int


_KEYWORDS = {
    "int": TokenType.INT,
    "void": TokenType.VOID,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "while": TokenType.WHILE,
    "return": TokenType.RETURN,
    "break": TokenType.BREAK,
    "continue": TokenType.CONTINUE,
}

_SINGLE = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.TIMES,
    "/": TokenType.DIV,
    "%": TokenType.MOD,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ";": TokenType.SEMI,
    ",": TokenType.COMMA,
}

# first char -> (single-char type or None, two-char type); second char is always the given one
_DOUBLE = {
    "=": ("=", TokenType.ASSIGN, TokenType.EQ),
    "<": ("=", TokenType.LT, TokenType.LE),
    ">": ("=", TokenType.GT, TokenType.GE),
    "!": ("=", TokenType.NOT, TokenType.NE),
    "&": ("&", None, TokenType.AND),
    "|": ("|", None, TokenType.OR),
}

_SPACE = " \t\n\v\f\r"
_ALPHA = string.ascii_letters
_DIGITS = string.digits
_EOF = "\0"


class Lexer:
    """Scans ToyC source text into tokens, skipping whitespace and comments."""

    def __init__(self, source: str) -> None:
        self._src = source
        self._pos = 0
        self.line = 1

    def _peek(self, offset: int = 0) -> str:
        index = self._pos + offset
        return self._src[index] if index < len(self._src) else _EOF

    def _advance(self) -> str:
        c = self._peek()
        self._pos += 1
        return c

    def _skip_whitespace(self) -> None:
        while self._peek() in _SPACE and self._peek() != _EOF:
            if self._peek() == "\n":
                self.line += 1
            self._advance()

    def _skip_trivia(self) -> None:
        while True:
            self._skip_whitespace()
            if self._peek() == "/" and self._peek(1) == "/":
                self._pos += 2
                while self._peek() not in ("\n", _EOF):
                    self._advance()
                continue
            if self._peek() == "/" and self._peek(1) == "*":
                self._pos += 2
                while not (self._peek() == "*" and self._peek(1) == "/"):
                    c = self._peek()
                    if c == "\n":
                        self.line += 1
                    if c == _EOF:
                        break
                    self._advance()
                if self._peek() != _EOF:
                    self._pos += 2
                continue
            return

    def _scan_while(self, start: int, allowed: str) -> str:
        while self._peek() != _EOF and self._peek() in allowed:
            self._advance()
        return self._src[start:self._pos]

    def next_token(self) -> Token:
        """Return the next token; END is returned at (and after) end of input."""
        self._skip_trivia()
        c = self._advance()
        if c == _EOF:
            return Token(TokenType.END, "", self.line)
        if c in _SINGLE:
            return Token(_SINGLE[c], c, self.line)
        if c in _DOUBLE:
            second, single_type, double_type = _DOUBLE[c]
            if self._peek() == second:
                self._advance()
                return Token(double_type, c + second, self.line)
            if single_type is not None:
                return Token(single_type, c, self.line)
            return Token(TokenType.UNKNOWN, c, self.line)
        if c in _ALPHA or c == "_":
            lexeme = self._scan_while(self._pos - 1, _ALPHA + _DIGITS + "_")
            return Token(_KEYWORDS.get(lexeme, TokenType.ID), lexeme, self.line)
        if c in _DIGITS:
            lexeme = self._scan_while(self._pos - 1, _DIGITS)
            return Token(TokenType.NUMBER, lexeme, self.line)
        return Token(TokenType.UNKNOWN, c, self.line)

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens up to and including the END token."""
        while True:
            token = self.next_token()
            yield token
            if token.type is TokenType.END:
                return


def tokenize(source: str) -> list[Token]:
    """Tokenize a whole source string; the list ends with an END token."""
    return list(Lexer(source))