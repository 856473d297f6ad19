"""SQL-like boolean expression engine.

This package provides:
- Lexer: Tokenizes expression strings
- Parser: Produces a typed syntax tree, validating BETWEEN and IN statically
- Evaluator: Evaluates a tree against caller-supplied variable bindings
- Rendering: Turns trees back into text or an indented dump
"""

from sqlexpr.errors import (
    DivisionByZeroError,
    EvalErrorKind,
    EvalParseError,
    EvalTypeError,
    EvaluationError,
    InvalidLiteralError,
    LexerError,
    NullInOperationError,
    ParseError,
    UnboundVariableError,
)
from sqlexpr.evaluator import EvaluationContext, Evaluator, SubValue, evaluate
from sqlexpr.lexer import Lexer, Token, TokenType, tokenize
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
from sqlexpr.parser import Parser, parse
from sqlexpr.rendering import format_tree, render, to_sql
from sqlexpr.types import RuntimeValue, ValueKind, ValueLiteral

__all__ = [
    # Errors
    "DivisionByZeroError",
    "EvalErrorKind",
    "EvalParseError",
    "EvalTypeError",
    "EvaluationError",
    "InvalidLiteralError",
    "LexerError",
    "NullInOperationError",
    "ParseError",
    "UnboundVariableError",
    # Evaluator
    "EvaluationContext",
    "Evaluator",
    "SubValue",
    "evaluate",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # Nodes
    "AndExpr",
    "ArithmeticOp",
    "Between",
    "BinaryOp",
    "BooleanExpr",
    "BooleanLiteral",
    "BooleanVariable",
    "Comparison",
    "ComparisonOp",
    "Equality",
    "EqualityOp",
    "In",
    "IsNull",
    "Like",
    "Literal",
    "NotExpr",
    "OrExpr",
    "Relational",
    "RelationalExpr",
    "UnaryOp",
    "UnaryOperator",
    "ValueExpr",
    "Variable",
    # Parser
    "Parser",
    "parse",
    # Rendering
    "format_tree",
    "render",
    "to_sql",
    # Types
    "RuntimeValue",
    "ValueKind",
    "ValueLiteral",
]
