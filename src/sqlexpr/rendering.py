"""Render syntax trees back to text.

- to_sql: source-like text that re-parses to an equivalent tree
- format_tree: an indented structural dump for debugging
- render: picks one of the two from an explicit ``pretty`` flag
"""

import math

from sqlexpr.nodes import (
    AndExpr,
    ArithmeticOp,
    Between,
    BinaryOp,
    BooleanLiteral,
    BooleanVariable,
    Comparison,
    Equality,
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
from sqlexpr.types import ValueKind, ValueLiteral

INDENT = "   "

_ARITHMETIC_LABELS = {
    ArithmeticOp.ADD: "Add",
    ArithmeticOp.SUBTRACT: "Subtract",
    ArithmeticOp.MULTIPLY: "Multiply",
    ArithmeticOp.DIVIDE: "Divide",
    ArithmeticOp.MODULO: "Modulo",
}


def quote_string(value: str) -> str:
    """Quote a string literal, doubling embedded single quotes."""
    return "'" + value.replace("'", "''") + "'"


def literal_to_sql(literal: ValueLiteral) -> str:
    if literal.kind is ValueKind.STRING:
        return quote_string(literal.value)
    if literal.kind is ValueKind.NULL:
        return "NULL"
    if literal.kind is ValueKind.BOOLEAN:
        return "TRUE" if literal.value else "FALSE"
    # Overflowing float literals lex to infinity; keep them lexable
    if literal.kind is ValueKind.FLOAT and math.isinf(literal.value):
        return "-1e999" if literal.value < 0 else "1e999"
    return repr(literal.value)


def _not(negated: bool) -> str:
    return "NOT " if negated else ""


def to_sql(node) -> str:
    """Render any tree node as expression text.

    Boolean and arithmetic binary nodes are always parenthesized, so the
    output never depends on precedence to re-parse correctly.
    """
    if isinstance(node, OrExpr):
        return f"({to_sql(node.left)} OR {to_sql(node.right)})"
    if isinstance(node, AndExpr):
        return f"({to_sql(node.left)} AND {to_sql(node.right)})"
    if isinstance(node, NotExpr):
        return f"NOT {to_sql(node.operand)}"
    if isinstance(node, BooleanLiteral):
        return "TRUE" if node.value else "FALSE"
    if isinstance(node, BooleanVariable):
        return node.name
    if isinstance(node, Relational):
        return to_sql(node.expr)

    if isinstance(node, (Equality, Comparison)):
        return f"{to_sql(node.left)} {node.op.value} {to_sql(node.right)}"
    if isinstance(node, Like):
        text = f"{to_sql(node.expr)} {_not(node.negated)}LIKE {quote_string(node.pattern)}"
        if node.escape is not None:
            text += f" ESCAPE {quote_string(node.escape)}"
        return text
    if isinstance(node, Between):
        return (
            f"{to_sql(node.expr)} {_not(node.negated)}BETWEEN "
            f"{to_sql(node.lower)} AND {to_sql(node.upper)}"
        )
    if isinstance(node, In):
        values = ", ".join(literal_to_sql(v) for v in node.values)
        return f"{to_sql(node.expr)} {_not(node.negated)}IN ({values})"
    if isinstance(node, IsNull):
        return f"{to_sql(node.expr)} IS {_not(node.negated)}NULL"

    if isinstance(node, BinaryOp):
        return f"({to_sql(node.left)} {node.op.value} {to_sql(node.right)})"
    if isinstance(node, UnaryOp):
        operand = to_sql(node.operand)
        # "--" would start a line comment
        if operand[:1] in ("-", "+"):
            operand = f"({operand})"
        return f"{node.op.value}{operand}"
    if isinstance(node, Literal):
        return literal_to_sql(node.value)
    if isinstance(node, Variable):
        return node.name

    raise TypeError(f"Cannot render {type(node).__name__}")


def _literal_repr(literal: ValueLiteral) -> str:
    return f"{literal.kind.name.title()}({literal_to_sql(literal)})"


def _tree_lines(node, depth: int) -> list[str]:
    prefix = INDENT * depth

    if isinstance(node, OrExpr):
        children, label = (node.left, node.right), "Or"
    elif isinstance(node, AndExpr):
        children, label = (node.left, node.right), "And"
    elif isinstance(node, NotExpr):
        children, label = (node.operand,), "Not"
    elif isinstance(node, BooleanLiteral):
        children, label = (), f"BooleanLiteral: {node.value}"
    elif isinstance(node, BooleanVariable):
        children, label = (), f"Variable: {node.name}"
    elif isinstance(node, Relational):
        children, label = (node.expr,), "Relational"
    elif isinstance(node, Equality):
        children, label = (node.left, node.right), f"Equality: {node.op.name}"
    elif isinstance(node, Comparison):
        children, label = (node.left, node.right), f"Comparison: {node.op.name}"
    elif isinstance(node, Like):
        children = (node.expr,)
        escape = quote_string(node.escape) if node.escape is not None else None
        label = (
            f"Like: negated={node.negated}, pattern={quote_string(node.pattern)}, "
            f"escape={escape}"
        )
    elif isinstance(node, Between):
        children, label = (node.expr, node.lower, node.upper), f"Between: negated={node.negated}"
    elif isinstance(node, In):
        values = ", ".join(_literal_repr(v) for v in node.values)
        children, label = (node.expr,), f"In: negated={node.negated}, values=[{values}]"
    elif isinstance(node, IsNull):
        children, label = (node.expr,), f"IsNull: negated={node.negated}"
    elif isinstance(node, BinaryOp):
        children, label = (node.left, node.right), _ARITHMETIC_LABELS[node.op]
    elif isinstance(node, UnaryOp):
        label = "UnaryPlus" if node.op is UnaryOperator.PLUS else "UnaryMinus"
        children = (node.operand,)
    elif isinstance(node, Literal):
        children, label = (), f"Literal: {_literal_repr(node.value)}"
    elif isinstance(node, Variable):
        children, label = (), f"Variable: {node.name}"
    else:
        raise TypeError(f"Cannot render {type(node).__name__}")

    lines = [prefix + label]
    for child in children:
        lines.extend(_tree_lines(child, depth + 1))
    return lines


def format_tree(node) -> str:
    """Return an indented, one-node-per-line dump of a tree."""
    return "\n".join(_tree_lines(node, 0))


def render(node, pretty: bool = False) -> str:
    """Render a tree as a structural dump if ``pretty``, else as expression text."""
    if pretty:
        return format_tree(node)
    return to_sql(node)
