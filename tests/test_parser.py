"""Tests for the sqlexpr parser: grammar, precedence and disambiguation."""

import pytest

from sqlexpr import (
    AndExpr,
    ArithmeticOp,
    Between,
    BinaryOp,
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
    ParseError,
    Parser,
    Relational,
    UnaryOp,
    UnaryOperator,
    ValueLiteral,
    Variable,
    parse,
)


def relational(source: str):
    """Parse and unwrap a top-level Relational node."""
    expr = parse(source)
    assert isinstance(expr, Relational)
    return expr.expr


# =============================================================================
# Boolean layer
# =============================================================================


class TestBooleanExpressions:
    def test_and_binds_tighter_than_or(self):
        expr = parse("a = 1 OR b = 2 AND c = 3")

        assert isinstance(expr, OrExpr)
        assert isinstance(expr.left, Relational)
        assert isinstance(expr.right, AndExpr)

    def test_or_is_left_associative(self):
        expr = parse("a OR b OR c")

        assert expr == OrExpr(
            OrExpr(BooleanVariable("a"), BooleanVariable("b")),
            BooleanVariable("c"),
        )

    def test_not_applies_to_term(self):
        expr = parse("NOT a AND b")

        assert expr == AndExpr(NotExpr(BooleanVariable("a")), BooleanVariable("b"))

    def test_double_not(self):
        assert parse("NOT NOT flag") == NotExpr(NotExpr(BooleanVariable("flag")))

    def test_boolean_literals(self):
        assert parse("TRUE") == BooleanLiteral(True)
        assert parse("false OR TRUE") == OrExpr(BooleanLiteral(False), BooleanLiteral(True))

    def test_bare_identifier_is_boolean_variable(self):
        assert parse("is_active") == BooleanVariable("is_active")

    def test_not_over_relational(self):
        expr = parse("NOT age > 18")

        assert isinstance(expr, NotExpr)
        assert isinstance(expr.operand, Relational)
        assert isinstance(expr.operand.expr, Comparison)

    def test_parenthesized_boolean_group(self):
        expr = parse("(a = 1 OR b = 2) AND c = 3")

        assert isinstance(expr, AndExpr)
        assert isinstance(expr.left, OrExpr)

    def test_nested_boolean_groups(self):
        expr = parse("((flag))")
        assert expr == BooleanVariable("flag")


# =============================================================================
# Parenthesis disambiguation
# =============================================================================


class TestParenthesisBacktracking:
    def test_parenthesized_value_operand(self):
        rel = relational("(x + y) > 10")

        assert rel == Comparison(
            BinaryOp(ArithmeticOp.ADD, Variable("x"), Variable("y")),
            ComparisonOp.GREATER_THAN,
            Literal(ValueLiteral.integer(10)),
        )

    def test_parenthesized_values_on_both_sides(self):
        rel = relational("(a + b) > (c - d)")

        assert isinstance(rel.left, BinaryOp)
        assert isinstance(rel.right, BinaryOp)
        assert rel.right.op is ArithmeticOp.SUBTRACT

    def test_group_followed_by_arithmetic(self):
        rel = relational("(a * 2) + 1 = 7")

        assert rel.op is EqualityOp.EQUAL
        assert rel.left == BinaryOp(
            ArithmeticOp.ADD,
            BinaryOp(ArithmeticOp.MULTIPLY, Variable("a"), Literal(ValueLiteral.integer(2))),
            Literal(ValueLiteral.integer(1)),
        )

    def test_nested_value_parentheses(self):
        rel = relational("((a + b) * c) >= 0")

        assert rel.left.op is ArithmeticOp.MULTIPLY
        assert rel.left.left.op is ArithmeticOp.ADD

    def test_boolean_group_inside_and(self):
        expr = parse("x > 0 AND (y < 10 OR z IS NULL)")

        assert isinstance(expr, AndExpr)
        assert isinstance(expr.right, OrExpr)

    def test_better_error_wins_after_backtracking(self):
        # The boolean reading reaches the bound check; the value reading
        # stops earlier at BETWEEN, so the bound error is reported.
        with pytest.raises(ParseError) as exc_info:
            parse("(x BETWEEN 10 AND 5)")

        assert "lower bound (10)" in exc_info.value.message

    def test_value_reading_error_reported_when_it_gets_further(self):
        with pytest.raises(ParseError) as exc_info:
            parse("(a + b) >")

        assert exc_info.value.message == "Expected value expression, got end of input"


# =============================================================================
# Relational layer
# =============================================================================


class TestRelationalExpressions:
    def test_equality_operators(self):
        assert relational("a = 1").op is EqualityOp.EQUAL
        assert relational("a <> 1").op is EqualityOp.NOT_EQUAL
        assert relational("a != 1").op is EqualityOp.NOT_EQUAL

    def test_comparison_operators(self):
        assert relational("a > 1").op is ComparisonOp.GREATER_THAN
        assert relational("a >= 1").op is ComparisonOp.GREATER_OR_EQUAL
        assert relational("a < 1").op is ComparisonOp.LESS_THAN
        assert relational("a <= 1").op is ComparisonOp.LESS_OR_EQUAL

    def test_literal_on_left(self):
        rel = relational("5 < x")
        assert rel.left == Literal(ValueLiteral.integer(5))

    def test_like(self):
        assert relational("name LIKE 'J%'") == Like(Variable("name"), "J%")

    def test_like_with_escape(self):
        assert relational("code LIKE 'a!_%' ESCAPE '!'") == Like(Variable("code"), "a!_%", "!")

    def test_not_like(self):
        rel = relational("name NOT LIKE '%test%'")
        assert rel.negated is True

    def test_between(self):
        rel = relational("age BETWEEN 18 AND 65")

        assert rel == Between(
            Variable("age"),
            Literal(ValueLiteral.integer(18)),
            Literal(ValueLiteral.integer(65)),
        )

    def test_between_followed_by_and(self):
        expr = parse("age BETWEEN 18 AND 65 AND active")

        assert isinstance(expr, AndExpr)
        assert isinstance(expr.left.expr, Between)
        assert expr.right == BooleanVariable("active")

    def test_between_folds_signed_bounds(self):
        rel = relational("t NOT BETWEEN -10 AND +2.5")

        assert rel.negated is True
        assert rel.lower == Literal(ValueLiteral.integer(-10))
        assert rel.upper == Literal(ValueLiteral.float_(2.5))

    def test_in_list(self):
        rel = relational("status IN ('active', 'pending')")

        assert rel == In(
            Variable("status"),
            (ValueLiteral.string("active"), ValueLiteral.string("pending")),
        )

    def test_not_in_with_negative_numbers(self):
        rel = relational("code NOT IN (-1, 0, 1)")

        assert rel.negated is True
        assert [v.value for v in rel.values] == [-1, 0, 1]

    def test_is_null(self):
        assert relational("value IS NULL") == IsNull(Variable("value"))
        assert relational("value IS NOT NULL") == IsNull(Variable("value"), negated=True)

    def test_comparison_against_null_literal_parses(self):
        rel = relational("x = NULL")
        assert rel.right == Literal(ValueLiteral.null())

    def test_boolean_literal_on_right(self):
        rel = relational("flag = TRUE")
        assert rel.right == Literal(ValueLiteral.boolean(True))


# =============================================================================
# Value layer
# =============================================================================


class TestValueExpressions:
    def test_multiplication_binds_tighter(self):
        rel = relational("a + b * c = 0")

        assert rel.left.op is ArithmeticOp.ADD
        assert rel.left.right.op is ArithmeticOp.MULTIPLY

    def test_subtraction_is_left_associative(self):
        rel = relational("a - b - c = 0")

        assert rel.left.left.op is ArithmeticOp.SUBTRACT
        assert rel.left.right == Variable("c")

    def test_divide_and_modulo(self):
        rel = relational("a / 2 % 3 = 0")

        assert rel.left.op is ArithmeticOp.MODULO
        assert rel.left.left.op is ArithmeticOp.DIVIDE

    def test_unary_operators(self):
        rel = relational("-x < +5")

        assert rel.left == UnaryOp(UnaryOperator.MINUS, Variable("x"))
        assert rel.right == UnaryOp(UnaryOperator.PLUS, Literal(ValueLiteral.integer(5)))

    def test_double_unary_minus(self):
        rel = relational("- -x > 0")
        assert rel.left == UnaryOp(UnaryOperator.MINUS, UnaryOp(UnaryOperator.MINUS, Variable("x")))

    def test_literal_kinds(self):
        assert relational("x = 1.5").right == Literal(ValueLiteral.float_(1.5))
        assert relational("x = 'a'").right == Literal(ValueLiteral.string("a"))
        assert relational("x = 0x10").right == Literal(ValueLiteral.integer(16))


# =============================================================================
# Grammar errors
# =============================================================================


class TestParseErrors:
    def test_bare_value_is_rejected(self):
        with pytest.raises(ParseError, match="Expected relational operator"):
            parse("42")

    def test_bare_arithmetic_is_rejected(self):
        with pytest.raises(ParseError, match="Expected relational operator"):
            parse("1 + 2")

    def test_empty_expression(self):
        with pytest.raises(ParseError, match="Empty expression"):
            parse("")

    def test_comment_only_expression(self):
        with pytest.raises(ParseError, match="Empty expression"):
            parse("-- nothing here")

    def test_missing_right_operand(self):
        with pytest.raises(ParseError) as exc_info:
            parse("status =")

        assert exc_info.value.message == "Expected value expression, got end of input"
        assert exc_info.value.position == 8

    def test_trailing_tokens(self):
        with pytest.raises(ParseError) as exc_info:
            parse("a = 1 b")

        assert exc_info.value.message == "Unexpected token identifier 'b'"
        assert exc_info.value.position == 6

    def test_unclosed_group(self):
        with pytest.raises(ParseError):
            parse("(a = 1")

    def test_not_must_precede_like_between_or_in(self):
        with pytest.raises(ParseError, match="Expected LIKE, BETWEEN, or IN after NOT"):
            parse("a NOT = 1")

    def test_is_must_be_followed_by_null(self):
        with pytest.raises(ParseError, match="Expected NULL, got integer 1"):
            parse("a IS 1")

    def test_error_embeds_source(self):
        with pytest.raises(ParseError) as exc_info:
            parse("x >")

        assert exc_info.value.source == "x >"
        assert str(exc_info.value).endswith("in:\n  x >")

    def test_lexer_errors_surface_as_parse_errors(self):
        with pytest.raises(ParseError, match="Unterminated string literal"):
            parse("name = 'abc")

    def test_parser_object_api(self):
        parser = Parser("a = 1")
        assert isinstance(parser.parse(), Relational)

    def test_deep_nesting_is_a_parse_error(self):
        source = "(" * 5000 + "a" + ")" * 5000
        with pytest.raises(ParseError, match="nested too deeply"):
            parse(source)
