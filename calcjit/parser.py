"""calcjit Parser — operator-precedence parser.

Grammar, lowest to highest precedence:

    expr    := term (('+' | '-') term)*
    term    := factor (('*' | '/') factor)*
    factor  := '-' factor | NUMBER | '(' expr ')'

Binary operators are left-associative. The token stream is consumed lazily
with a single token of lookahead. Pending operators and open parentheses
live on an explicit stack, so nesting depth is bounded only by memory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Union

from calcjit.lexer import Lexer, Token, TokenType
from calcjit.ast_nodes import (
    Expr, NumberLiteral, UnaryExpr, BinaryExpr, Grouping,
    BinaryOperator, UnaryOperator,
)
from calcjit.errors import (
    SourceLocation, ParseError,
    unexpected_token, unmatched_paren, empty_expression, trailing_input,
)

logger = logging.getLogger(__name__)


_BINARY_OPERATORS: dict[TokenType, BinaryOperator] = {
    TokenType.PLUS: BinaryOperator.ADD,
    TokenType.MINUS: BinaryOperator.SUB,
    TokenType.STAR: BinaryOperator.MUL,
    TokenType.SLASH: BinaryOperator.DIV,
}

_OPERAND_EXPECTED = "a number, '(' or '-'"


@dataclass
class _Negation:
    location: SourceLocation


@dataclass
class _OpenParen:
    location: SourceLocation


_Pending = Union[BinaryOperator, _Negation, _OpenParen]


class Parser:
    """Parser producing a single expression tree."""

    def __init__(self, tokens: Iterable[Token]):
        self._tokens: Iterator[Token] = iter(tokens)
        self._current = self._next_token()
        self._operands: list[Expr] = []
        self._pending: list[_Pending] = []

    def _next_token(self) -> Token:
        tok = next(self._tokens, None)
        if tok is None:
            raise ValueError("token stream ended without an EOF token")
        return tok

    def _peek(self) -> TokenType:
        return self._current.type

    def _loc(self) -> SourceLocation:
        return self._current.location

    def _advance(self) -> Token:
        tok = self._current
        if tok.type != TokenType.EOF:
            self._current = self._next_token()
        return tok

    # -------------------------------------------------------------------
    # Top-level
    # -------------------------------------------------------------------

    def parse(self) -> Expr:
        if self._peek() == TokenType.EOF:
            raise ParseError(empty_expression(self._loc()))

        while True:
            self._parse_operand()
            if self._parse_operator():
                break

        return self._operands.pop()

    # -------------------------------------------------------------------
    # Operand position: prefix '-', '(' and numbers
    # -------------------------------------------------------------------

    def _parse_operand(self) -> None:
        while True:
            tt = self._peek()
            if tt == TokenType.MINUS:
                self._pending.append(_Negation(self._advance().location))
            elif tt == TokenType.LPAREN:
                self._pending.append(_OpenParen(self._advance().location))
            elif tt == TokenType.NUMBER:
                tok = self._advance()
                self._operands.append(NumberLiteral(value=tok.number, location=tok.location))
                return
            else:
                raise ParseError(unexpected_token(
                    self._current.describe(), _OPERAND_EXPECTED, self._loc(),
                ))

    # -------------------------------------------------------------------
    # Operator position: binary operators, ')' and end of input
    # -------------------------------------------------------------------

    def _parse_operator(self) -> bool:
        """Consume what follows an operand. Returns True once the input is complete."""
        while True:
            tt = self._peek()

            if tt in _BINARY_OPERATORS:
                op = _BINARY_OPERATORS[self._advance().type]
                self._reduce_while(lambda top: isinstance(top, _Negation) or (
                    isinstance(top, BinaryOperator) and top.precedence >= op.precedence
                ))
                self._pending.append(op)
                return False

            if tt == TokenType.RPAREN:
                self._reduce_while(lambda top: not isinstance(top, _OpenParen))
                if not self._pending:
                    raise ParseError(trailing_input(self._current.describe(), self._loc()))
                self._advance()
                open_paren = self._pending.pop()
                inner = self._operands.pop()
                self._operands.append(Grouping(inner=inner, location=open_paren.location))
                continue

            open_paren = self._innermost_open_paren()
            if tt == TokenType.EOF:
                if open_paren is not None:
                    raise ParseError(unmatched_paren(open_paren.location, self._loc()))
                self._reduce_while(lambda top: True)
                return True

            if open_paren is not None:
                raise ParseError(unexpected_token(self._current.describe(), "')'", self._loc()))
            raise ParseError(trailing_input(self._current.describe(), self._loc()))

    def _innermost_open_paren(self) -> Optional[_OpenParen]:
        for pending in reversed(self._pending):
            if isinstance(pending, _OpenParen):
                return pending
        return None

    def _reduce_while(self, predicate) -> None:
        """Apply pending operators from the top of the stack while ``predicate`` holds."""
        while self._pending and not isinstance(self._pending[-1], _OpenParen) \
                and predicate(self._pending[-1]):
            pending = self._pending.pop()
            if isinstance(pending, _Negation):
                operand = self._operands.pop()
                self._operands.append(UnaryExpr(
                    op=UnaryOperator.NEG, operand=operand, location=pending.location,
                ))
            else:
                right = self._operands.pop()
                left = self._operands.pop()
                self._operands.append(BinaryExpr(
                    op=pending, left=left, right=right, location=left.location,
                ))


def parse(source: str) -> Expr:
    """Convenience function: lex and parse source text into an expression tree."""
    root = Parser(Lexer(source)).parse()
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("parsed %s", root.render())
    return root
