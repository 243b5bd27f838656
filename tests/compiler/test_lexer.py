"""Lexer tests — tokens, locations, and lexical errors."""

import pytest

from calcjit.lexer import Lexer, TokenType, tokenize
from calcjit.errors import LexError, ErrorKind


def types(source):
    return [t.type for t in tokenize(source)]


class TestTokens:
    """Every lexical category produces the right token."""

    def test_operators_and_parens(self):
        assert types("+-*/()") == [
            TokenType.PLUS, TokenType.MINUS, TokenType.STAR, TokenType.SLASH,
            TokenType.LPAREN, TokenType.RPAREN, TokenType.EOF,
        ]

    def test_integer_literal(self):
        tokens = tokenize("42")
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == "42"
        assert tokens[0].number == 42.0

    def test_decimal_literal(self):
        assert tokenize("3.25")[0].number == 3.25

    def test_leading_and_trailing_point(self):
        assert tokenize(".5")[0].number == 0.5
        assert tokenize("5.")[0].number == 5.0

    def test_whitespace_is_skipped(self):
        assert types(" \t1 \n+\r\n 2 ") == [
            TokenType.NUMBER, TokenType.PLUS, TokenType.NUMBER, TokenType.EOF,
        ]

    def test_empty_source_is_just_eof(self):
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF

    def test_adjacent_tokens_without_spaces(self):
        assert [t.value for t in tokenize("(1+2)*3")] == ["(", "1", "+", "2", ")", "*", "3", ""]

    def test_number_on_non_number_token_raises(self):
        with pytest.raises(ValueError):
            tokenize("+")[0].number


class TestLocations:
    """Tokens carry offset, line and column."""

    def test_offsets(self):
        tokens = tokenize("10 + 2")
        assert [t.location.offset for t in tokens] == [0, 3, 5, 6]

    def test_line_and_column(self):
        tokens = tokenize("1 +\n  2")
        two = tokens[2]
        assert two.location.line == 2
        assert two.location.column == 3
        assert two.location.offset == 6


class TestLaziness:
    """The lexer yields tokens on demand and is not restartable."""

    def test_error_only_when_reached(self):
        stream = iter(Lexer("1 $"))
        first = next(stream)
        assert first.type == TokenType.NUMBER
        with pytest.raises(LexError):
            next(stream)

    def test_second_iteration_rejected(self):
        lexer = Lexer("1")
        list(lexer)
        with pytest.raises(RuntimeError):
            iter(lexer)


class TestLexErrors:
    """Unexpected characters and malformed numbers."""

    def test_unexpected_character(self):
        with pytest.raises(LexError) as exc:
            tokenize("1 $ 2")
        err = exc.value
        assert err.kind == ErrorKind.UNEXPECTED_CHARACTER
        assert err.character == "$"
        assert err.offset == 2

    def test_letters_are_rejected(self):
        with pytest.raises(LexError) as exc:
            tokenize("2 * x")
        assert exc.value.character == "x"
        assert exc.value.offset == 4

    def test_non_ascii_is_rejected(self):
        with pytest.raises(LexError) as exc:
            tokenize("1\u00a0+ 2")
        assert exc.value.offset == 1
        assert exc.value.character == "\u00a0"

    def test_two_decimal_points(self):
        with pytest.raises(LexError) as exc:
            tokenize("1 + 1.2.3")
        err = exc.value
        assert err.kind == ErrorKind.MALFORMED_NUMBER
        assert err.offset == 7
        assert err.character == "."
        assert err.to_dict()["details"]["lexeme"] == "1.2"

    def test_adjacent_decimal_points(self):
        with pytest.raises(LexError) as exc:
            tokenize("1..2")
        assert exc.value.kind == ErrorKind.MALFORMED_NUMBER
        assert exc.value.offset == 2
        assert exc.value.location.column == 3
        assert exc.value.to_dict()["details"]["lexeme"] == "1."

    def test_bare_point(self):
        with pytest.raises(LexError) as exc:
            tokenize(" . ")
        assert exc.value.kind == ErrorKind.MALFORMED_NUMBER
        assert exc.value.character == "."
        assert exc.value.offset == 1

    def test_error_json_has_location(self):
        with pytest.raises(LexError) as exc:
            tokenize("#")
        d = exc.value.to_dict()
        assert d["kind"] == "unexpected_character"
        assert d["location"] == {"offset": 0, "line": 1, "column": 1}
