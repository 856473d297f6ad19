"""AST node types for sqlexpr.

The tree has three families, mirroring the grammar:

- BooleanExpr: the only valid top-level type (OR/AND/NOT, TRUE/FALSE,
  boolean variables, and wrapped relational expressions)
- RelationalExpr: the bridge that turns values into booleans
  (=, <>, <, LIKE, BETWEEN, IN, IS NULL)
- ValueExpr: arithmetic over literals and variables, which may only
  appear as operands of a RelationalExpr

All nodes are frozen; a parsed tree is never mutated.
"""

from dataclasses import dataclass
from enum import Enum

from sqlexpr.types import ValueLiteral


class _Node:
    def __str__(self) -> str:
        from sqlexpr.rendering import to_sql

        return to_sql(self)


# -----------------------------------------------------------------------------
# Operators
# -----------------------------------------------------------------------------


class EqualityOp(Enum):
    EQUAL = "="
    NOT_EQUAL = "<>"


class ComparisonOp(Enum):
    GREATER_THAN = ">"
    GREATER_OR_EQUAL = ">="
    LESS_THAN = "<"
    LESS_OR_EQUAL = "<="


class ArithmeticOp(Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"


class UnaryOperator(Enum):
    PLUS = "+"
    MINUS = "-"


# -----------------------------------------------------------------------------
# Value expressions
# -----------------------------------------------------------------------------


class ValueExpr(_Node):
    """Base class for value (scalar) expressions."""


@dataclass(frozen=True)
class BinaryOp(ValueExpr):
    """Arithmetic binary operation (e.g., a + b, price * 2)."""
    op: ArithmeticOp
    left: ValueExpr
    right: ValueExpr


@dataclass(frozen=True)
class UnaryOp(ValueExpr):
    """Unary plus or minus."""
    op: UnaryOperator
    operand: ValueExpr


@dataclass(frozen=True)
class Literal(ValueExpr):
    value: ValueLiteral


@dataclass(frozen=True)
class Variable(ValueExpr):
    """A variable used as a value operand."""
    name: str


# -----------------------------------------------------------------------------
# Relational expressions
# -----------------------------------------------------------------------------


class RelationalExpr(_Node):
    """Base class for expressions that compare values and yield a boolean."""


@dataclass(frozen=True)
class Equality(RelationalExpr):
    left: ValueExpr
    op: EqualityOp
    right: ValueExpr


@dataclass(frozen=True)
class Comparison(RelationalExpr):
    left: ValueExpr
    op: ComparisonOp
    right: ValueExpr


@dataclass(frozen=True)
class Like(RelationalExpr):
    """[NOT] LIKE with an optional ESCAPE clause."""
    expr: ValueExpr
    pattern: str
    escape: str | None = None
    negated: bool = False


@dataclass(frozen=True)
class Between(RelationalExpr):
    """[NOT] BETWEEN; bounds are always Literal nodes after parsing."""
    expr: ValueExpr
    lower: ValueExpr
    upper: ValueExpr
    negated: bool = False


@dataclass(frozen=True)
class In(RelationalExpr):
    """[NOT] IN over a non-empty list of same-kind literals."""
    expr: ValueExpr
    values: tuple[ValueLiteral, ...]
    negated: bool = False


@dataclass(frozen=True)
class IsNull(RelationalExpr):
    expr: ValueExpr
    negated: bool = False


# -----------------------------------------------------------------------------
# Boolean expressions
# -----------------------------------------------------------------------------


class BooleanExpr(_Node):
    """Base class for boolean expressions (the root type of every parse)."""


@dataclass(frozen=True)
class OrExpr(BooleanExpr):
    left: BooleanExpr
    right: BooleanExpr


@dataclass(frozen=True)
class AndExpr(BooleanExpr):
    left: BooleanExpr
    right: BooleanExpr


@dataclass(frozen=True)
class NotExpr(BooleanExpr):
    operand: BooleanExpr


@dataclass(frozen=True)
class BooleanLiteral(BooleanExpr):
    value: bool


@dataclass(frozen=True)
class BooleanVariable(BooleanExpr):
    """A bare variable in boolean position; must be bound to a boolean."""
    name: str


@dataclass(frozen=True)
class Relational(BooleanExpr):
    expr: RelationalExpr
