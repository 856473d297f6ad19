"""Tests for the sqlexpr lexer.

Tests cover:
- Keywords, identifiers and operators
- String literals with doubled-quote escaping
- Numeric literals: decimal, float, exponent, hex, octal, long suffix
- Comments and whitespace
- Error positions and messages
"""

import pytest

from sqlexpr import Lexer, LexerError, ParseError, Token, TokenType, tokenize


def types_of(source: str) -> list[TokenType]:
    return [t.type for t in tokenize(source)[:-1]]  # Exclude EOF


# =============================================================================
# Keywords, identifiers and operators
# =============================================================================


class TestLexerBasics:
    """Tests for fixed tokens and identifiers."""

    def test_tokenize_simple_comparison(self):
        tokens = Lexer("age >= 18").tokenize()

        assert tokens[0] == Token(TokenType.IDENTIFIER, "age", 0, 1, 1)
        assert tokens[1] == Token(TokenType.GTE, None, 4, 1, 5)
        assert tokens[2] == Token(TokenType.INTEGER, 18, 7, 1, 8)
        assert tokens[3] == Token(TokenType.EOF, None, 9, 1, 10)

    def test_keywords_are_case_insensitive(self):
        assert types_of("and Or NOT between Like escape in IS true False null") == [
            TokenType.AND,
            TokenType.OR,
            TokenType.NOT,
            TokenType.BETWEEN,
            TokenType.LIKE,
            TokenType.ESCAPE,
            TokenType.IN,
            TokenType.IS,
            TokenType.TRUE,
            TokenType.FALSE,
            TokenType.NULL,
        ]

    def test_identifiers(self):
        tokens = tokenize("status _private $ref var123 andrew")

        assert [t.value for t in tokens[:-1]] == ["status", "_private", "$ref", "var123", "andrew"]
        assert all(t.type == TokenType.IDENTIFIER for t in tokens[:-1])

    def test_comparison_operators(self):
        assert types_of("= <> != > >= < <=") == [
            TokenType.EQ,
            TokenType.NEQ,
            TokenType.NEQ,
            TokenType.GT,
            TokenType.GTE,
            TokenType.LT,
            TokenType.LTE,
        ]

    def test_operators_without_spaces(self):
        assert types_of("a<>b") == [TokenType.IDENTIFIER, TokenType.NEQ, TokenType.IDENTIFIER]
        assert types_of("a<=b") == [TokenType.IDENTIFIER, TokenType.LTE, TokenType.IDENTIFIER]
        assert types_of("a>=-1") == [
            TokenType.IDENTIFIER,
            TokenType.GTE,
            TokenType.MINUS,
            TokenType.INTEGER,
        ]

    def test_arithmetic_and_punctuation(self):
        assert types_of("+ - * / % ( ) ,") == [
            TokenType.PLUS,
            TokenType.MINUS,
            TokenType.MULTIPLY,
            TokenType.DIVIDE,
            TokenType.MODULO,
            TokenType.LPAREN,
            TokenType.RPAREN,
            TokenType.COMMA,
        ]

    def test_empty_input_is_just_eof(self):
        tokens = tokenize("")
        assert tokens == [Token(TokenType.EOF, None, 0, 1, 1)]

    def test_next_token_is_incremental(self):
        lexer = Lexer("x = 1")

        assert lexer.next_token().type == TokenType.IDENTIFIER
        assert lexer.next_token().type == TokenType.EQ
        assert lexer.next_token().value == 1
        assert lexer.next_token().type == TokenType.EOF
        assert lexer.next_token().type == TokenType.EOF

    def test_iteration_ends_with_eof(self):
        tokens = list(Lexer("a OR b"))
        assert tokens[-1].type == TokenType.EOF
        assert len(tokens) == 4

    def test_line_and_column_tracking(self):
        tokens = tokenize("a = 1\n  AND b = 2")

        and_token = tokens[3]
        assert and_token.type == TokenType.AND
        assert and_token.line == 2
        assert and_token.column == 3
        assert and_token.position == 8


# =============================================================================
# String literals
# =============================================================================


class TestStringLiterals:
    def test_simple_string(self):
        tokens = tokenize("'hello world'")
        assert tokens[0] == Token(TokenType.STRING, "hello world", 0, 1, 1)

    def test_doubled_quote_is_literal_quote(self):
        tokens = tokenize("'it''s'")
        assert tokens[0].value == "it's"

    def test_empty_string(self):
        assert tokenize("''")[0].value == ""

    def test_string_keeps_keywords_and_comment_markers(self):
        assert tokenize("'AND -- /* x */'")[0].value == "AND -- /* x */"

    def test_unterminated_string(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("name = 'abc")

        err = exc_info.value
        assert err.message == "Unterminated string literal"
        assert err.position == 7
        assert "name = 'abc" in str(err)


# =============================================================================
# Numeric literals
# =============================================================================


class TestNumericLiterals:
    def test_integer(self):
        assert tokenize("42")[0] == Token(TokenType.INTEGER, 42, 0, 1, 1)

    def test_float(self):
        token = tokenize("3.14")[0]
        assert token.type == TokenType.FLOAT
        assert token.value == 3.14

    def test_leading_dot_float(self):
        token = tokenize(".5")[0]
        assert token.type == TokenType.FLOAT
        assert token.value == 0.5

    def test_exponent_forms(self):
        values = [t.value for t in tokenize("1e3 2.5E-2 7e+1")[:-1]]
        assert values == [1000.0, 0.025, 70.0]
        assert all(t.type == TokenType.FLOAT for t in tokenize("1e3 2.5E-2 7e+1")[:-1])

    def test_hexadecimal(self):
        tokens = tokenize("0x1F 0XfF")
        assert tokens[0] == Token(TokenType.INTEGER, 31, 0, 1, 1)
        assert tokens[1].value == 255

    def test_octal(self):
        assert tokenize("017")[0].value == 15

    def test_octal_stops_at_eight(self):
        tokens = tokenize("018")
        assert [t.value for t in tokens[:-1]] == [1, 8]

    def test_long_suffix(self):
        tokens = tokenize("100L 5l")
        assert [(t.type, t.value) for t in tokens[:-1]] == [
            (TokenType.INTEGER, 100),
            (TokenType.INTEGER, 5),
        ]

    def test_long_suffix_not_taken_by_float(self):
        assert types_of("1.5L") == [TokenType.FLOAT, TokenType.IDENTIFIER]

    def test_dot_without_digit_is_not_part_of_number(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("5.")
        assert exc_info.value.position == 1

    def test_max_int64(self):
        assert tokenize("9223372036854775807")[0].value == 2**63 - 1

    def test_integer_overflow(self):
        with pytest.raises(LexerError, match="Invalid integer literal"):
            tokenize("9223372036854775808")

    def test_hex_overflow(self):
        with pytest.raises(LexerError, match="Invalid hexadecimal literal"):
            tokenize("0x10000000000000000")

    def test_hex_without_digits(self):
        with pytest.raises(LexerError, match="no digits after 0x"):
            tokenize("0x")

    def test_exponent_without_digits(self):
        with pytest.raises(LexerError, match="no exponent digits"):
            tokenize("1e+")


# =============================================================================
# Comments and whitespace
# =============================================================================


class TestTrivia:
    def test_line_comment(self):
        assert types_of("a = 1 -- trailing remark\nOR b") == [
            TokenType.IDENTIFIER,
            TokenType.EQ,
            TokenType.INTEGER,
            TokenType.OR,
            TokenType.IDENTIFIER,
        ]

    def test_line_comment_at_end_of_input(self):
        assert types_of("flag -- no newline") == [TokenType.IDENTIFIER]

    def test_block_comment(self):
        assert types_of("a /* multi\nline */ = 1") == [
            TokenType.IDENTIFIER,
            TokenType.EQ,
            TokenType.INTEGER,
        ]

    def test_unterminated_block_comment(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("a = 1 /* never closed")

        assert exc_info.value.message == "Unterminated block comment"
        assert exc_info.value.position == 6

    def test_whitespace_variants(self):
        assert types_of(" \t\r\n a \n") == [TokenType.IDENTIFIER]


# =============================================================================
# Errors
# =============================================================================


class TestLexerErrors:
    def test_unexpected_character(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("status @ value")

        err = exc_info.value
        assert err.message == "Unexpected character: '@'"
        assert err.position == 7
        assert err.column == 8

    def test_bang_must_be_followed_by_equals(self):
        with pytest.raises(LexerError, match="Unexpected character: '!'"):
            tokenize("a ! b")

    def test_error_message_includes_position_and_input(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("x = #")

        text = str(exc_info.value)
        assert "at position 4" in text
        assert "line 1, column 5" in text
        assert text.endswith("in:\n  x = #")

    def test_lexer_error_is_parse_error(self):
        with pytest.raises(ParseError):
            tokenize("a ^ b")
