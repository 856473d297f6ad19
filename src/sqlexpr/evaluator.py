"""Evaluator for the sqlexpr boolean expression language.

Walks a parsed tree and computes a boolean result against caller-supplied
variable bindings.

Semantics in brief:
- AND/OR short-circuit, so an unevaluated branch can never raise
- NULL is only legal under IS [NOT] NULL; anywhere else it is an error
- Integer arithmetic wraps at 64 bits; any float operand makes the result
  a float; division always produces a float
- Integer/float mixing is allowed wherever numbers are compared
"""

import functools
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Mapping

from sqlexpr.errors import (
    DivisionByZeroError,
    EvalParseError,
    EvalTypeError,
    NullInOperationError,
    ParseError,
    UnboundVariableError,
)
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
    UnaryOp,
    UnaryOperator,
    Variable,
)
from sqlexpr.parser import parse
from sqlexpr.types import RuntimeValue, ValueKind, ValueLiteral, wrap_int64

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubValue:
    """Unified runtime shape for literal constants and bound values."""

    kind: ValueKind
    value: int | float | str | bool | None = None

    @classmethod
    def from_literal(cls, literal: ValueLiteral) -> "SubValue":
        return cls(literal.kind, literal.value)

    @classmethod
    def from_runtime(cls, value: RuntimeValue) -> "SubValue":
        return cls(value.kind, value.value)

    @property
    def type_name(self) -> str:
        return self.kind.value

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    @property
    def is_numeric(self) -> bool:
        return self.kind.is_numeric


@dataclass
class EvaluationContext:
    """Context for expression evaluation.

    Attributes:
        bindings: Variable name to value; plain Python scalars are
            normalized to RuntimeValue on construction
        source: The original expression text, quoted in division by
            zero errors (the tree's rendering is used when absent)
    """

    bindings: Mapping[str, Any] = field(default_factory=dict)
    source: str | None = None

    def __post_init__(self) -> None:
        self.bindings = {name: RuntimeValue.of(value) for name, value in self.bindings.items()}


_ARITHMETIC_NAMES = {
    ArithmeticOp.ADD: "addition",
    ArithmeticOp.SUBTRACT: "subtraction",
    ArithmeticOp.MULTIPLY: "multiplication",
    ArithmeticOp.DIVIDE: "division",
    ArithmeticOp.MODULO: "modulo",
}

_COMPARATORS = {
    ComparisonOp.GREATER_THAN: lambda a, b: a > b,
    ComparisonOp.GREATER_OR_EQUAL: lambda a, b: a >= b,
    ComparisonOp.LESS_THAN: lambda a, b: a < b,
    ComparisonOp.LESS_OR_EQUAL: lambda a, b: a <= b,
}


@functools.lru_cache(maxsize=256)
def _compile_like(pattern: str, escape: str | None) -> re.Pattern[str]:
    """Translate a LIKE pattern into a compiled whole-string regex.

    ``%`` matches any run of characters, ``_`` exactly one. The first
    character of ``escape`` (if any) makes the following pattern character
    literal; a trailing escape character is dropped.
    """
    escape_char = escape[0] if escape else None
    parts = []
    chars = iter(pattern)
    for ch in chars:
        if ch == escape_char:
            escaped = next(chars, None)
            if escaped is not None:
                parts.append(re.escape(escaped))
        elif ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("".join(parts), re.DOTALL)


def _truncated_remainder(a: int, b: int) -> int:
    """Integer remainder whose sign follows the dividend."""
    remainder = abs(a) % abs(b)
    return -remainder if a < 0 else remainder


class Evaluator:
    """Evaluates a parsed tree against a context.

    Usage:
        ctx = EvaluationContext({"age": 30, "status": "active"})
        evaluator = Evaluator(ctx)
        result = evaluator.evaluate(parse("age > 18 AND status = 'active'"))
    """

    def __init__(self, context: EvaluationContext):
        self.context = context
        self._root: BooleanExpr | None = None

    def evaluate(self, expr: BooleanExpr) -> bool:
        """Evaluate a boolean tree and return the result.

        Raises:
            EvaluationError: The first failure encountered; evaluation
                stops there
        """
        self._root = expr
        try:
            result = self._eval(expr)
        except RecursionError:
            raise EvalParseError(
                ParseError("Expression is nested too deeply", 0, self.context.source or "")
            ) from None
        logger.debug("Evaluated %s -> %s", type(expr).__name__, result)
        return result

    def _eval(self, node: Any) -> Any:
        method_name = f"_eval_{type(node).__name__.lower()}"
        method = getattr(self, method_name, None)

        if method is None:
            raise TypeError(f"Unknown node type: {type(node).__name__}")

        return method(node)

    def _expression_text(self) -> str:
        if self.context.source is not None:
            return self.context.source
        from sqlexpr.rendering import to_sql

        return to_sql(self._root) if self._root is not None else ""

    def _lookup(self, name: str) -> RuntimeValue:
        try:
            return self.context.bindings[name]
        except KeyError:
            raise UnboundVariableError(name) from None

    # -------------------------------------------------------------------------
    # Boolean nodes
    # -------------------------------------------------------------------------

    def _eval_orexpr(self, node: OrExpr) -> bool:
        return self._eval(node.left) or self._eval(node.right)

    def _eval_andexpr(self, node: AndExpr) -> bool:
        return self._eval(node.left) and self._eval(node.right)

    def _eval_notexpr(self, node: NotExpr) -> bool:
        return not self._eval(node.operand)

    def _eval_booleanliteral(self, node: BooleanLiteral) -> bool:
        return node.value

    def _eval_booleanvariable(self, node: BooleanVariable) -> bool:
        value = self._lookup(node.name)
        if value.kind is not ValueKind.BOOLEAN:
            raise EvalTypeError(
                "boolean variable", "boolean", value.type_name, f"variable '{node.name}'"
            )
        return value.value

    def _eval_relational(self, node: Relational) -> bool:
        return self._eval(node.expr)

    # -------------------------------------------------------------------------
    # Relational nodes
    # -------------------------------------------------------------------------

    def _eval_equality(self, node: Equality) -> bool:
        left = self._eval(node.left)
        right = self._eval(node.right)
        operation = node.op.name

        if left.is_null or right.is_null:
            raise NullInOperationError(
                operation, "cannot compare NULL values (use IS NULL instead)"
            )

        if left.is_numeric and right.is_numeric:
            if left.kind is right.kind:
                equal = left.value == right.value
            else:
                equal = float(left.value) == float(right.value)
        elif left.kind is right.kind:
            equal = left.value == right.value
        else:
            raise EvalTypeError(
                operation,
                "matching types",
                f"{left.type_name} vs {right.type_name}",
                "equality comparison",
            )

        return equal if node.op is EqualityOp.EQUAL else not equal

    def _eval_comparison(self, node: Comparison) -> bool:
        left = self._eval(node.left)
        right = self._eval(node.right)
        operation = node.op.name
        compare = _COMPARATORS[node.op]

        if left.is_null or right.is_null:
            raise NullInOperationError(operation, "cannot compare NULL values")

        if left.is_numeric and right.is_numeric:
            if left.kind is right.kind:
                return compare(left.value, right.value)
            return compare(float(left.value), float(right.value))

        if left.kind is ValueKind.STRING and right.kind is ValueKind.STRING:
            return compare(left.value, right.value)

        if ValueKind.BOOLEAN in (left.kind, right.kind):
            raise EvalTypeError(operation, "numeric or string", "boolean", "comparison operand")

        raise EvalTypeError(
            operation,
            "matching types",
            f"{left.type_name} vs {right.type_name}",
            "comparison",
        )

    def _eval_like(self, node: Like) -> bool:
        value = self._eval(node.expr)

        if value.is_null:
            raise NullInOperationError("LIKE", "cannot apply LIKE to NULL")
        if value.kind is not ValueKind.STRING:
            raise EvalTypeError("LIKE", "string", value.type_name, "left operand")

        regex = _compile_like(node.pattern, node.escape)
        matched = regex.fullmatch(value.value) is not None
        return not matched if node.negated else matched

    def _eval_between(self, node: Between) -> bool:
        value = self._eval(node.expr)
        lower = self._eval(node.lower)
        upper = self._eval(node.upper)

        if value.is_null or lower.is_null or upper.is_null:
            raise NullInOperationError("BETWEEN", "cannot use NULL in BETWEEN")

        if value.kind is lower.kind is upper.kind and value.kind in (
            ValueKind.INTEGER,
            ValueKind.FLOAT,
            ValueKind.STRING,
        ):
            in_range = lower.value <= value.value <= upper.value
        else:
            v, lo, hi = (self._to_float(x) for x in (value, lower, upper))
            in_range = lo <= v <= hi

        return not in_range if node.negated else in_range

    def _eval_in(self, node: In) -> bool:
        value = self._eval(node.expr)

        if value.is_null:
            raise NullInOperationError("IN", "cannot use NULL in IN")

        if node.values:
            first = SubValue.from_literal(node.values[0])
            compatible = (value.is_numeric and first.is_numeric) or value.kind is first.kind
            if not compatible:
                raise EvalTypeError(
                    "IN",
                    first.type_name,
                    value.type_name,
                    "left operand type doesn't match list element types",
                )

        found = any(self._in_matches(value, SubValue.from_literal(v)) for v in node.values)
        return not found if node.negated else found

    def _eval_isnull(self, node: IsNull) -> bool:
        is_null = self._eval(node.expr).is_null
        return not is_null if node.negated else is_null

    @staticmethod
    def _in_matches(value: SubValue, candidate: SubValue) -> bool:
        if value.is_numeric and candidate.is_numeric:
            if value.kind is candidate.kind:
                return value.value == candidate.value
            return float(value.value) == float(candidate.value)
        return value.kind is candidate.kind and value.value == candidate.value

    @staticmethod
    def _to_float(value: SubValue) -> float:
        if not value.is_numeric:
            raise EvalTypeError("numeric comparison", "numeric", value.type_name, "operand")
        return float(value.value)

    # -------------------------------------------------------------------------
    # Value nodes
    # -------------------------------------------------------------------------

    def _eval_literal(self, node: Literal) -> SubValue:
        return SubValue.from_literal(node.value)

    def _eval_variable(self, node: Variable) -> SubValue:
        return SubValue.from_runtime(self._lookup(node.name))

    def _eval_unaryop(self, node: UnaryOp) -> SubValue:
        operand = self._eval(node.operand)
        operation = "unary plus" if node.op is UnaryOperator.PLUS else "unary minus"

        if operand.is_null:
            raise NullInOperationError(operation, f"cannot apply {operation} to NULL")
        if not operand.is_numeric:
            raise EvalTypeError(operation, "numeric", operand.type_name, "operand")

        if node.op is UnaryOperator.PLUS:
            return operand
        if operand.kind is ValueKind.INTEGER:
            return SubValue(ValueKind.INTEGER, wrap_int64(-operand.value))
        return SubValue(ValueKind.FLOAT, -operand.value)

    def _eval_binaryop(self, node: BinaryOp) -> SubValue:
        left = self._eval(node.left)
        right = self._eval(node.right)
        operation = _ARITHMETIC_NAMES[node.op]

        if left.is_null or right.is_null:
            raise NullInOperationError(operation, f"cannot apply {operation} to NULL values")

        if node.op is ArithmeticOp.DIVIDE:
            return self._divide(left, right)

        if not (left.is_numeric and right.is_numeric):
            raise EvalTypeError(
                operation,
                "numeric types",
                f"{left.type_name} and {right.type_name}",
                "arithmetic operation",
            )

        if node.op is ArithmeticOp.MODULO:
            return self._modulo(left, right)

        a, b = left.value, right.value
        if left.kind is ValueKind.INTEGER and right.kind is ValueKind.INTEGER:
            if node.op is ArithmeticOp.ADD:
                result = a + b
            elif node.op is ArithmeticOp.SUBTRACT:
                result = a - b
            else:
                result = a * b
            return SubValue(ValueKind.INTEGER, wrap_int64(result))

        a, b = float(a), float(b)
        if node.op is ArithmeticOp.ADD:
            return SubValue(ValueKind.FLOAT, a + b)
        if node.op is ArithmeticOp.SUBTRACT:
            return SubValue(ValueKind.FLOAT, a - b)
        return SubValue(ValueKind.FLOAT, a * b)

    def _divide(self, left: SubValue, right: SubValue) -> SubValue:
        if not left.is_numeric:
            raise EvalTypeError("division", "numeric", left.type_name, "left operand")
        if not right.is_numeric:
            raise EvalTypeError("division", "numeric", right.type_name, "right operand")

        divisor = float(right.value)
        if divisor == 0.0:
            raise DivisionByZeroError(self._expression_text())
        return SubValue(ValueKind.FLOAT, float(left.value) / divisor)

    def _modulo(self, left: SubValue, right: SubValue) -> SubValue:
        if right.value == 0:
            raise DivisionByZeroError(self._expression_text())
        if left.kind is ValueKind.INTEGER and right.kind is ValueKind.INTEGER:
            return SubValue(ValueKind.INTEGER, _truncated_remainder(left.value, right.value))
        return SubValue(ValueKind.FLOAT, math.fmod(float(left.value), float(right.value)))


# -----------------------------------------------------------------------------
# Convenience functions
# -----------------------------------------------------------------------------


def evaluate(source: str, bindings: Mapping[str, Any] | None = None) -> bool:
    """Parse and evaluate an expression string against variable bindings.

    This is the main entry point for expression evaluation.

    Args:
        source: The expression string to evaluate
        bindings: Variable name to RuntimeValue (or plain Python scalar)

    Returns:
        The boolean result

    Raises:
        EvaluationError: EvalParseError if the source does not parse,
            otherwise the first evaluation failure

    Example:
        result = evaluate("status = 'active' AND count > 0",
                          {"status": "active", "count": 5})
        # result = True
    """
    try:
        expr = parse(source)
    except ParseError as e:
        raise EvalParseError(e) from e

    ctx = EvaluationContext(bindings or {}, source)
    return Evaluator(ctx).evaluate(expr)


