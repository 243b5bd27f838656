"""calcjit Lexer — Tokenizer with offset/line/column tracking.

Produces a lazy stream of tokens from expression source text. The stream
always ends with exactly one EOF token.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional

from calcjit.errors import (
    SourceLocation, LexError, unexpected_character, malformed_number,
)

logger = logging.getLogger(__name__)


class TokenType(Enum):
    # Literals
    NUMBER = auto()

    # Operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()

    # Delimiters
    LPAREN = auto()
    RPAREN = auto()

    # Special
    EOF = auto()


SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
}

# ASCII only, so every offset we report is also a UTF-8 byte offset.
WHITESPACE = frozenset(" \t\r\n\f\v")
DIGITS = frozenset("0123456789")


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    location: SourceLocation

    @property
    def number(self) -> float:
        if self.type != TokenType.NUMBER:
            raise ValueError(f"{self.describe()} is not a number")
        return float(self.value)

    def describe(self) -> str:
        """Human-readable name used in parse diagnostics."""
        if self.type == TokenType.NUMBER:
            return f"number {self.value}"
        if self.type == TokenType.EOF:
            return "end of input"
        return f"'{self.value}'"

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.location})"


class Lexer:
    """Tokenizer for arithmetic expressions.

    Iterating a Lexer yields tokens on demand. A Lexer can be iterated only
    once; create a new one to lex the same text again.
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self._consumed = False

    def _loc(self) -> SourceLocation:
        return SourceLocation(self.pos, self.line, self.column)

    def _peek(self) -> Optional[str]:
        if self.pos < len(self.source):
            return self.source[self.pos]
        return None

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.source) and self.source[self.pos] in WHITESPACE:
            self._advance()

    def _read_number(self) -> Token:
        loc = self._loc()
        value = ""
        while self.pos < len(self.source) and (
            self.source[self.pos] in DIGITS or self.source[self.pos] == "."
        ):
            if self.source[self.pos] == "." and "." in value:
                raise LexError(malformed_number(value, ".", self._loc()))
            value += self._advance()
        if value == ".":
            raise LexError(malformed_number(value, ".", loc))
        return Token(TokenType.NUMBER, value, loc)

    def __iter__(self) -> Iterator[Token]:
        if self._consumed:
            raise RuntimeError("Lexer token stream has already been consumed")
        self._consumed = True
        return self._tokens()

    def _tokens(self) -> Iterator[Token]:
        count = 0
        while True:
            self._skip_whitespace()
            ch = self._peek()
            if ch is None:
                break

            loc = self._loc()
            if ch in DIGITS or ch == ".":
                yield self._read_number()
            elif ch in SINGLE_CHAR_TOKENS:
                self._advance()
                yield Token(SINGLE_CHAR_TOKENS[ch], ch, loc)
            else:
                raise LexError(unexpected_character(ch, loc))
            count += 1

        logger.debug("lexed %d tokens from %d characters", count, len(self.source))
        yield Token(TokenType.EOF, "", self._loc())


def tokenize(source: str) -> list[Token]:
    """Convenience function to tokenize source text into a list."""
    return list(Lexer(source))
