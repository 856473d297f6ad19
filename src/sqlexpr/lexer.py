"""Lexer/tokenizer for sqlexpr.

Converts expression strings into a stream of tokens for the parser.

Token types:
- Keywords: AND, OR, NOT, BETWEEN, LIKE, ESCAPE, IN, IS, TRUE, FALSE, NULL
  (matched case-insensitively)
- Literals: IDENTIFIER, STRING, INTEGER, FLOAT
- Operators: comparison and arithmetic
- Punctuation: LPAREN, RPAREN, COMMA

Whitespace, ``-- line`` comments and ``/* block */`` comments are skipped.
Strings use single quotes with SQL doubling ('it''s') as the only escape.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from sqlexpr.errors import LexerError
from sqlexpr.types import fits_int64

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Types of tokens in the expression language."""

    # Keywords
    AND = auto()
    OR = auto()
    NOT = auto()
    BETWEEN = auto()
    LIKE = auto()
    ESCAPE = auto()
    IN = auto()
    IS = auto()
    TRUE = auto()
    FALSE = auto()
    NULL = auto()

    # Comparison operators
    EQ = auto()          # =
    NEQ = auto()         # <> or !=
    GT = auto()          # >
    GTE = auto()         # >=
    LT = auto()          # <
    LTE = auto()         # <=

    # Arithmetic operators
    PLUS = auto()        # +
    MINUS = auto()       # -
    MULTIPLY = auto()    # *
    DIVIDE = auto()      # /
    MODULO = auto()      # %

    # Punctuation
    LPAREN = auto()      # (
    RPAREN = auto()      # )
    COMMA = auto()       # ,

    # Payload-bearing literals
    IDENTIFIER = auto()
    STRING = auto()
    INTEGER = auto()
    FLOAT = auto()

    # End of input
    EOF = auto()


@dataclass(frozen=True)
class Token:
    """A single token from the lexer.

    Attributes:
        type: The token type
        value: Identifier name, string contents, int or float payload;
            None for keywords, operators and punctuation
        position: Character position in the source string
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    type: TokenType
    value: str | int | float | None
    position: int
    line: int = 1
    column: int = 1

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, pos={self.position})"

    def describe(self) -> str:
        """Describe the token for error messages."""
        if self.type == TokenType.IDENTIFIER:
            return f"identifier '{self.value}'"
        if self.type == TokenType.STRING:
            return f"string '{self.value}'"
        if self.type == TokenType.INTEGER:
            return f"integer {self.value}"
        if self.type == TokenType.FLOAT:
            return f"float {self.value}"
        if self.type == TokenType.EOF:
            return "end of input"
        return TOKEN_TEXT[self.type]


# Keywords that map to specific token types (keys are upper-cased)
KEYWORDS = {
    "AND": TokenType.AND,
    "OR": TokenType.OR,
    "NOT": TokenType.NOT,
    "BETWEEN": TokenType.BETWEEN,
    "LIKE": TokenType.LIKE,
    "ESCAPE": TokenType.ESCAPE,
    "IN": TokenType.IN,
    "IS": TokenType.IS,
    "TRUE": TokenType.TRUE,
    "FALSE": TokenType.FALSE,
    "NULL": TokenType.NULL,
}

# Canonical spelling of fixed tokens, used in diagnostics
TOKEN_TEXT = {
    **{token_type: keyword for keyword, token_type in KEYWORDS.items()},
    TokenType.EQ: "=",
    TokenType.NEQ: "<>",
    TokenType.GT: ">",
    TokenType.GTE: ">=",
    TokenType.LT: "<",
    TokenType.LTE: "<=",
    TokenType.PLUS: "+",
    TokenType.MINUS: "-",
    TokenType.MULTIPLY: "*",
    TokenType.DIVIDE: "/",
    TokenType.MODULO: "%",
    TokenType.LPAREN: "(",
    TokenType.RPAREN: ")",
    TokenType.COMMA: ",",
}

SINGLE_CHAR_TOKENS = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.MULTIPLY,
    "/": TokenType.DIVIDE,
    "%": TokenType.MODULO,
    "=": TokenType.EQ,
}

_DIGITS = "0123456789"
_HEX_DIGITS_RE = re.compile(r"[0-9a-fA-F]+")
_OCTAL_DIGITS_RE = re.compile(r"[0-7]+")
_DECIMAL_DIGITS_RE = re.compile(r"[0-9]*")


def _is_identifier_start(ch: str) -> bool:
    return ch.isalpha() or ch in "_$"


def _is_identifier_part(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"


class Lexer:
    """Tokenizer for the expression language.

    Tokens are produced lazily, one per ``next_token`` call.

    Usage:
        lexer = Lexer("status = 'active' AND count > 0")
        for token in lexer:
            print(token)
    """

    def __init__(self, source: str):
        self.source = source
        self.position = 0
        self.line = 1
        self.column = 1

    def __iter__(self) -> Iterator[Token]:
        """Iterate over all tokens in the source, ending with EOF."""
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                break

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source and return list of tokens."""
        tokens = list(self)
        logger.debug("Tokenized %d characters into %d tokens", len(self.source), len(tokens))
        return tokens

    def next_token(self) -> Token:
        """Get the next token from the source.

        Raises:
            LexerError: On unexpected characters, malformed numbers, or
                unterminated strings and block comments
        """
        self._skip_trivia()

        if self.position >= len(self.source):
            return Token(TokenType.EOF, None, self.position, self.line, self.column)

        start, line, column = self.position, self.line, self.column
        ch = self.source[self.position]

        if ch in SINGLE_CHAR_TOKENS:
            self._advance(1)
            return Token(SINGLE_CHAR_TOKENS[ch], None, start, line, column)

        if ch == "!":
            if self._peek() == "=":
                self._advance(2)
                return Token(TokenType.NEQ, None, start, line, column)
            raise self._error(f"Unexpected character: '{ch}'")

        if ch == "<":
            self._advance(1)
            if self._current_char() == ">":
                self._advance(1)
                return Token(TokenType.NEQ, None, start, line, column)
            if self._current_char() == "=":
                self._advance(1)
                return Token(TokenType.LTE, None, start, line, column)
            return Token(TokenType.LT, None, start, line, column)

        if ch == ">":
            self._advance(1)
            if self._current_char() == "=":
                self._advance(1)
                return Token(TokenType.GTE, None, start, line, column)
            return Token(TokenType.GT, None, start, line, column)

        if ch == "'":
            value = self._read_string()
            return Token(TokenType.STRING, value, start, line, column)

        if ch == ".":
            if self._peek() in _DIGITS:
                return self._read_number(start, line, column)
            raise self._error(f"Unexpected character: '{ch}'")

        if _is_identifier_start(ch):
            end = self.position
            while end < len(self.source) and _is_identifier_part(self.source[end]):
                end += 1
            word = self.source[self.position:end]
            self._advance(len(word))
            keyword_type = KEYWORDS.get(word.upper())
            if keyword_type is not None:
                return Token(keyword_type, None, start, line, column)
            return Token(TokenType.IDENTIFIER, word, start, line, column)

        if ch in _DIGITS:
            return self._read_number(start, line, column)

        raise self._error(f"Unexpected character: '{ch}'")

    # -------------------------------------------------------------------------
    # Helper methods
    # -------------------------------------------------------------------------

    def _current_char(self) -> str:
        if self.position < len(self.source):
            return self.source[self.position]
        return "\0"

    def _peek(self, offset: int = 1) -> str:
        pos = self.position + offset
        if pos < len(self.source):
            return self.source[pos]
        return "\0"

    def _advance(self, count: int) -> None:
        """Advance position by count characters, updating line/column."""
        for _ in range(count):
            if self.position < len(self.source):
                if self.source[self.position] == "\n":
                    self.line += 1
                    self.column = 1
                else:
                    self.column += 1
                self.position += 1

    def _error(self, message: str) -> LexerError:
        return LexerError(message, self.position, self.source, self.line, self.column)

    def _skip_trivia(self) -> None:
        """Skip whitespace and comments."""
        while self.position < len(self.source):
            ch = self.source[self.position]
            if ch.isspace():
                self._advance(1)
            elif ch == "-" and self._peek() == "-":
                end = self.source.find("\n", self.position)
                self._advance((len(self.source) if end == -1 else end + 1) - self.position)
            elif ch == "/" and self._peek() == "*":
                end = self.source.find("*/", self.position + 2)
                if end == -1:
                    raise self._error("Unterminated block comment")
                self._advance(end + 2 - self.position)
            else:
                break

    def _read_string(self) -> str:
        """Read a single-quoted string; '' inside the string is a literal quote."""
        result = []
        start, line, column = self.position, self.line, self.column
        self._advance(1)  # opening quote

        while self.position < len(self.source):
            ch = self.source[self.position]
            if ch == "'":
                if self._peek() == "'":
                    result.append("'")
                    self._advance(2)
                    continue
                self._advance(1)  # closing quote
                return "".join(result)
            result.append(ch)
            self._advance(1)

        raise LexerError("Unterminated string literal", start, self.source, line, column)

    def _read_digits(self, pattern: re.Pattern[str]) -> str:
        match = pattern.match(self.source, self.position)
        digits = match.group() if match else ""
        self._advance(len(digits))
        return digits

    def _read_number(self, start: int, line: int, column: int) -> Token:
        """Read a numeric literal (decimal, hex, octal, long suffix, or float)."""
        ch = self._current_char()
        nxt = self._peek()

        if ch == "0" and nxt in ("x", "X"):
            self._advance(2)
            digits = self._read_digits(_HEX_DIGITS_RE)
            if not digits:
                raise self._error("Invalid hexadecimal literal: no digits after 0x")
            value = int(digits, 16)
            if not fits_int64(value):
                raise self._error(
                    "Invalid hexadecimal literal: number too large to fit in 64-bit integer"
                )
            return Token(TokenType.INTEGER, value, start, line, column)

        if ch == "0" and nxt in _DIGITS:
            # Octal digits stop at the first 8 or 9
            digits = self._read_digits(_OCTAL_DIGITS_RE)
            value = int(digits, 8)
            if not fits_int64(value):
                raise self._error(
                    "Invalid octal literal: number too large to fit in 64-bit integer"
                )
            return Token(TokenType.INTEGER, value, start, line, column)

        text = self._read_digits(_DECIMAL_DIGITS_RE)
        is_float = False

        if self._current_char() == "." and (
            self._peek() in _DIGITS or self._peek() in "eE"
        ):
            is_float = True
            self._advance(1)
            text = (text or "0") + "." + self._read_digits(_DECIMAL_DIGITS_RE)

        if self._current_char() in "eE":
            is_float = True
            self._advance(1)
            exponent = ""
            if self._current_char() in "+-":
                exponent = self._current_char()
                self._advance(1)
            digits = self._read_digits(_DECIMAL_DIGITS_RE)
            if not digits:
                raise self._error(f"Invalid float literal: '{text}e{exponent}' has no exponent digits")
            text = f"{text}e{exponent}{digits}"

        if is_float:
            return Token(TokenType.FLOAT, float(text), start, line, column)

        # Long suffix is accepted and ignored: there is a single integer type
        if self._current_char() in "lL":
            self._advance(1)

        value = int(text)
        if not fits_int64(value):
            raise self._error("Invalid integer literal: number too large to fit in 64-bit integer")
        return Token(TokenType.INTEGER, value, start, line, column)


def tokenize(source: str) -> list[Token]:
    """Convenience function to tokenize an expression string.

    Raises:
        LexerError: If the source contains an invalid token
    """
    return Lexer(source).tokenize()
