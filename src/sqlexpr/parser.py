"""Parser for the sqlexpr boolean expression language.

Converts a stream of tokens into a typed syntax tree.
Uses recursive descent over a fully materialized token list so that the
cursor can be saved and restored for backtracking.

Grammar (lowest to highest precedence):

    BooleanExpr := AndExpr (OR AndExpr)*
    AndExpr     := Term (AND Term)*
    Term        := NOT Term | '(' BooleanExpr ')' | TRUE | FALSE
                 | Identifier | RelationalExpr
    Relational  := ValueExpr ( (= | <> | !=) ValueExpr
                             | (> | >= | < | <=) ValueExpr
                             | [NOT] LIKE string [ESCAPE string]
                             | [NOT] BETWEEN ValueExpr AND ValueExpr
                             | [NOT] IN '(' literal (, literal)* ')'
                             | IS [NOT] NULL )
    ValueExpr   := MultExpr ((+ | -) MultExpr)*
    MultExpr    := Unary ((* | / | %) Unary)*
    Unary       := (+ | -) Unary | Primary
    Primary     := literal | Identifier | '(' ValueExpr ')'

BETWEEN bounds and IN lists are validated while parsing; violations are
ParseErrors, never deferred to evaluation.
"""

import logging

from sqlexpr.errors import ParseError
from sqlexpr.lexer import TOKEN_TEXT, Lexer, Token, TokenType
from sqlexpr.nodes import (
    AndExpr,
    ArithmeticOp,
    Between,
    BinaryOp,
    BooleanExpr,
    BooleanLiteral,
    BooleanVariable,
    Comparison,
    ComparisonOp,
    Equality,
    EqualityOp,
    In,
    IsNull,
    Like,
    Literal,
    NotExpr,
    OrExpr,
    Relational,
    RelationalExpr,
    UnaryOp,
    UnaryOperator,
    ValueExpr,
    Variable,
)
from sqlexpr.types import ValueKind, ValueLiteral

logger = logging.getLogger(__name__)


# Tokens that, following an identifier, mean the identifier is a value operand
_VALUE_CONTINUATION = frozenset({
    TokenType.EQ,
    TokenType.NEQ,
    TokenType.GT,
    TokenType.GTE,
    TokenType.LT,
    TokenType.LTE,
    TokenType.LIKE,
    TokenType.BETWEEN,
    TokenType.IN,
    TokenType.IS,
    TokenType.NOT,
    TokenType.PLUS,
    TokenType.MINUS,
    TokenType.MULTIPLY,
    TokenType.DIVIDE,
    TokenType.MODULO,
})

_EQUALITY_OPS = {
    TokenType.EQ: EqualityOp.EQUAL,
    TokenType.NEQ: EqualityOp.NOT_EQUAL,
}

_COMPARISON_OPS = {
    TokenType.GT: ComparisonOp.GREATER_THAN,
    TokenType.GTE: ComparisonOp.GREATER_OR_EQUAL,
    TokenType.LT: ComparisonOp.LESS_THAN,
    TokenType.LTE: ComparisonOp.LESS_OR_EQUAL,
}

_ADDITIVE_OPS = {
    TokenType.PLUS: ArithmeticOp.ADD,
    TokenType.MINUS: ArithmeticOp.SUBTRACT,
}

_MULTIPLICATIVE_OPS = {
    TokenType.MULTIPLY: ArithmeticOp.MULTIPLY,
    TokenType.DIVIDE: ArithmeticOp.DIVIDE,
    TokenType.MODULO: ArithmeticOp.MODULO,
}


def _literal_from_token(token: Token) -> ValueLiteral | None:
    """Map a literal token to a ValueLiteral, or None if it is not a literal."""
    if token.type == TokenType.INTEGER:
        return ValueLiteral.integer(token.value)
    if token.type == TokenType.FLOAT:
        return ValueLiteral.float_(token.value)
    if token.type == TokenType.STRING:
        return ValueLiteral.string(token.value)
    if token.type == TokenType.NULL:
        return ValueLiteral.null()
    if token.type == TokenType.TRUE:
        return ValueLiteral.boolean(True)
    if token.type == TokenType.FALSE:
        return ValueLiteral.boolean(False)
    return None


def _format_bound(literal: ValueLiteral) -> str:
    if literal.kind is ValueKind.STRING:
        return f"'{literal.value}'"
    return str(literal.value)


class Parser:
    """Recursive descent parser for the boolean expression language.

    Usage:
        parser = Parser("status = 'active' AND count > 0")
        tree = parser.parse()
    """

    def __init__(self, source: str):
        self.source = source
        self.lexer = Lexer(source)
        self.tokens = self.lexer.tokenize()
        self.position = 0

    def parse(self) -> BooleanExpr:
        """Parse the expression and return the root BooleanExpr.

        Raises:
            ParseError: On any grammar or static type violation, or if
                tokens remain after a complete expression
        """
        if self.tokens[0].type == TokenType.EOF:
            raise self._error("Empty expression", self.tokens[0])

        try:
            expr = self._parse_or()
        except RecursionError:
            raise self._error("Expression is nested too deeply") from None

        if not self._is_at_end():
            raise self._error(f"Unexpected token {self._current().describe()}")

        return expr

    # -------------------------------------------------------------------------
    # Helper methods
    # -------------------------------------------------------------------------

    def _current(self) -> Token:
        """Get current token."""
        if self.position >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[self.position]

    def _peek(self, offset: int = 1) -> Token:
        """Peek at a token without consuming it."""
        pos = self.position + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[pos]

    def _is_at_end(self) -> bool:
        return self._current().type == TokenType.EOF

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._current()
        if self.position < len(self.tokens):
            self.position += 1
        return token

    def _match(self, *types: TokenType) -> bool:
        """Check if current token matches any of the given types."""
        return self._current().type in types

    def _consume(self, token_type: TokenType) -> Token:
        """Consume a token of the expected type, or raise error."""
        if self._current().type == token_type:
            return self._advance()
        raise self._error(
            f"Expected {TOKEN_TEXT[token_type]}, got {self._current().describe()}"
        )

    def _error(self, message: str, token: Token | None = None) -> ParseError:
        token = token or self._current()
        return ParseError(message, token.position, self.source, token.line, token.column)

    # -------------------------------------------------------------------------
    # Boolean layer
    # -------------------------------------------------------------------------

    def _parse_or(self) -> BooleanExpr:
        """Parse OR expression (lowest precedence)."""
        left = self._parse_and()

        while self._match(TokenType.OR):
            self._advance()
            right = self._parse_and()
            left = OrExpr(left, right)

        return left

    def _parse_and(self) -> BooleanExpr:
        """Parse AND expression."""
        left = self._parse_term()

        while self._match(TokenType.AND):
            self._advance()
            right = self._parse_term()
            left = AndExpr(left, right)

        return left

    def _parse_term(self) -> BooleanExpr:
        """Parse a boolean term.

        A leading '(' is ambiguous: it may open a boolean group such as
        ``(x > 5 AND y < 10)`` or a value operand such as ``(x + y) > 10``.
        The boolean reading is tried first and only kept if it ends exactly
        at the matching ')'; otherwise the cursor is restored to the '(' and
        the whole term is re-read as a relational expression.
        """
        token = self._current()

        if token.type == TokenType.NOT:
            self._advance()
            return NotExpr(self._parse_term())

        if token.type == TokenType.LPAREN:
            return self._parse_parenthesized_term()

        if token.type == TokenType.TRUE:
            self._advance()
            return BooleanLiteral(True)

        if token.type == TokenType.FALSE:
            self._advance()
            return BooleanLiteral(False)

        if token.type == TokenType.IDENTIFIER and self._peek().type not in _VALUE_CONTINUATION:
            self._advance()
            return BooleanVariable(token.value)

        return Relational(self._parse_relational())

    def _parse_parenthesized_term(self) -> BooleanExpr:
        start = self.position
        self._advance()  # consume '('

        try:
            expr = self._parse_or()
        except ParseError as e:
            boolean_error = e
        else:
            if self._match(TokenType.RPAREN):
                self._advance()
                return expr
            boolean_error = None

        logger.debug(
            "Backtracking to token %d: parenthesized group is a value operand",
            start,
        )
        self.position = start
        try:
            return Relational(self._parse_relational())
        except ParseError as e:
            # Report whichever reading got further into the input
            if boolean_error is not None and boolean_error.position > e.position:
                raise boolean_error from None
            raise

    # -------------------------------------------------------------------------
    # Relational layer
    # -------------------------------------------------------------------------

    def _parse_relational(self) -> RelationalExpr:
        """Parse a value expression followed by exactly one relational operator."""
        left = self._parse_additive()
        token = self._current()

        if token.type in _EQUALITY_OPS:
            self._advance()
            return Equality(left, _EQUALITY_OPS[token.type], self._parse_additive())

        if token.type in _COMPARISON_OPS:
            self._advance()
            return Comparison(left, _COMPARISON_OPS[token.type], self._parse_additive())

        if token.type == TokenType.IS:
            self._advance()
            negated = False
            if self._match(TokenType.NOT):
                self._advance()
                negated = True
            self._consume(TokenType.NULL)
            return IsNull(left, negated)

        if token.type == TokenType.NOT:
            self._advance()
            if not self._match(TokenType.LIKE, TokenType.BETWEEN, TokenType.IN):
                raise self._error(
                    f"Expected LIKE, BETWEEN, or IN after NOT, got {self._current().describe()}"
                )
            return self._parse_negatable(left, negated=True)

        if token.type in (TokenType.LIKE, TokenType.BETWEEN, TokenType.IN):
            return self._parse_negatable(left, negated=False)

        raise self._error(f"Expected relational operator, got {token.describe()}")

    def _parse_negatable(self, left: ValueExpr, negated: bool) -> RelationalExpr:
        """Parse LIKE, BETWEEN or IN (the current token), optionally negated."""
        keyword = self._advance()

        if keyword.type == TokenType.LIKE:
            pattern = self._expect_string_literal()
            escape = None
            if self._match(TokenType.ESCAPE):
                self._advance()
                escape = self._expect_string_literal()
            return Like(left, pattern, escape, negated)

        if keyword.type == TokenType.BETWEEN:
            lower, upper = self._parse_between_bounds(negated)
            return Between(left, Literal(lower), Literal(upper), negated)

        return In(left, self._parse_in_list(), negated)

    def _expect_string_literal(self) -> str:
        token = self._current()
        if token.type != TokenType.STRING:
            raise self._error(f"Expected string literal, got {token.describe()}")
        self._advance()
        return token.value

    # -------------------------------------------------------------------------
    # Static validation: BETWEEN and IN
    # -------------------------------------------------------------------------

    def _parse_between_bounds(self, negated: bool) -> tuple[ValueLiteral, ValueLiteral]:
        """Parse and validate ``lower AND upper`` after BETWEEN.

        Each bound must reduce to a literal (a single unary sign is folded
        in); NULL and boolean bounds are rejected, the bounds must be both
        numeric or both string, and lower must not exceed upper.
        """
        operator = "NOT BETWEEN" if negated else "BETWEEN"

        lower_token = self._current()
        lower_expr = self._parse_additive()
        self._consume(TokenType.AND)
        upper_token = self._current()
        upper_expr = self._parse_additive()

        lower = self._extract_literal(lower_expr, lower_token)
        upper = self._extract_literal(upper_expr, upper_token)

        for literal, name, token in ((lower, "lower", lower_token), (upper, "upper", upper_token)):
            if literal.kind is ValueKind.NULL:
                raise self._error(f"NULL is not allowed as {name} bound in {operator}", token)
        for literal, name, token in ((lower, "lower", lower_token), (upper, "upper", upper_token)):
            if literal.kind is ValueKind.BOOLEAN:
                raise self._error(
                    f"Boolean literals are not allowed as {name} bound in {operator}", token
                )

        compatible = (lower.kind.is_numeric and upper.kind.is_numeric) or (
            lower.kind is ValueKind.STRING and upper.kind is ValueKind.STRING
        )
        if not compatible:
            raise self._error(
                f"{operator} bounds must be both numeric or both string, "
                f"found {lower.type_name} and {upper.type_name}",
                lower_token,
            )

        if lower.value > upper.value:
            raise self._error(
                f"{operator} lower bound ({_format_bound(lower)}) must be less than "
                f"or equal to upper bound ({_format_bound(upper)})",
                lower_token,
            )

        return lower, upper

    def _extract_literal(self, expr: ValueExpr, token: Token) -> ValueLiteral:
        """Reduce a BETWEEN bound to a literal, folding one unary sign."""
        if isinstance(expr, Literal):
            return expr.value

        if isinstance(expr, UnaryOp) and isinstance(expr.operand, Literal):
            literal = expr.operand.value
            if expr.op is UnaryOperator.PLUS:
                return literal
            if literal.kind is ValueKind.INTEGER:
                return ValueLiteral.integer(-literal.value)
            if literal.kind is ValueKind.FLOAT:
                return ValueLiteral.float_(-literal.value)
            raise self._error(
                "Unary minus can only be applied to numeric literals in BETWEEN bounds", token
            )

        if isinstance(expr, Variable):
            raise self._error("Variables are not allowed here, only literal values", token)

        raise self._error("Complex expressions are not allowed here, only literal values", token)

    def _parse_in_list(self) -> tuple[ValueLiteral, ...]:
        """Parse ``'(' literal (',' literal)* ')'`` with one exact element type."""
        self._consume(TokenType.LPAREN)

        first = self._expect_in_element()
        values = [first]

        while self._match(TokenType.COMMA):
            self._advance()
            token = self._current()
            value = self._expect_in_element()
            if value.kind is not first.kind:
                raise self._error(
                    "IN list values must all be the same type, "
                    f"found {first.type_name} and {value.type_name}",
                    token,
                )
            values.append(value)

        self._consume(TokenType.RPAREN)
        return tuple(values)

    def _expect_in_element(self) -> ValueLiteral:
        token = self._current()
        value = self._expect_value_literal()
        if value.kind is ValueKind.NULL:
            raise self._error("NULL is not allowed in IN list", token)
        if value.kind is ValueKind.BOOLEAN:
            raise self._error("Boolean literals are not allowed in IN list", token)
        return value

    def _expect_value_literal(self) -> ValueLiteral:
        """Read one literal token, allowing a leading '-' on numbers."""
        negative = False
        if self._match(TokenType.MINUS):
            self._advance()
            negative = True

        token = self._current()
        literal = _literal_from_token(token)
        if literal is None:
            raise self._error(f"Expected literal value, got {token.describe()}")

        if negative:
            if literal.kind is ValueKind.STRING:
                raise self._error("Cannot apply unary minus to string literal")
            if literal.kind is ValueKind.NULL:
                raise self._error("Cannot apply unary minus to NULL")
            if literal.kind is ValueKind.BOOLEAN:
                raise self._error("Cannot apply unary minus to boolean")
            literal = ValueLiteral(literal.kind, -literal.value)

        self._advance()
        return literal

    # -------------------------------------------------------------------------
    # Value layer
    # -------------------------------------------------------------------------

    def _parse_additive(self) -> ValueExpr:
        """Parse additive expression (+, -)."""
        left = self._parse_multiplicative()

        while self._current().type in _ADDITIVE_OPS:
            op = _ADDITIVE_OPS[self._advance().type]
            right = self._parse_multiplicative()
            left = BinaryOp(op, left, right)

        return left

    def _parse_multiplicative(self) -> ValueExpr:
        """Parse multiplicative expression (*, /, %)."""
        left = self._parse_unary()

        while self._current().type in _MULTIPLICATIVE_OPS:
            op = _MULTIPLICATIVE_OPS[self._advance().type]
            right = self._parse_unary()
            left = BinaryOp(op, left, right)

        return left

    def _parse_unary(self) -> ValueExpr:
        """Parse unary plus/minus."""
        if self._match(TokenType.PLUS):
            self._advance()
            return UnaryOp(UnaryOperator.PLUS, self._parse_unary())

        if self._match(TokenType.MINUS):
            self._advance()
            return UnaryOp(UnaryOperator.MINUS, self._parse_unary())

        return self._parse_primary()

    def _parse_primary(self) -> ValueExpr:
        """Parse a literal, a variable, or a parenthesized value expression."""
        token = self._current()

        literal = _literal_from_token(token)
        if literal is not None:
            self._advance()
            return Literal(literal)

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            return Variable(token.value)

        if token.type == TokenType.LPAREN:
            self._advance()
            expr = self._parse_additive()
            self._consume(TokenType.RPAREN)
            return expr

        raise self._error(f"Expected value expression, got {token.describe()}")


def parse(source: str) -> BooleanExpr:
    """Convenience function to parse an expression string.

    Args:
        source: The expression string

    Returns:
        The root BooleanExpr

    Raises:
        ParseError: If the expression is malformed or fails static validation
    """
    return Parser(source).parse()
