"""Exceptions raised by the sqlexpr lexer, parser and evaluator.

Parsing has a single failure kind, ``ParseError``; the lexer raises a
subclass of it so callers of ``parse`` only ever catch one type.

Evaluation failures form a closed taxonomy rooted at ``EvaluationError``.
Every subclass carries structured attributes plus a ``kind`` tag so hosts
can branch on the failure without inspecting message text.
"""

from enum import Enum


class ParseError(Exception):
    """Error while turning source text into a syntax tree.

    Attributes:
        message: Human-readable description without location details
        position: Character offset of the offending token or character
        source: The complete original input
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    def __init__(
        self,
        message: str,
        position: int,
        source: str,
        line: int = 1,
        column: int = 1,
    ):
        self.message = message
        self.position = position
        self.source = source
        self.line = line
        self.column = column
        super().__init__(
            f"{message} at position {position} (line {line}, column {column}) in:\n  {source}"
        )


class LexerError(ParseError):
    """Error during lexical analysis."""


class EvalErrorKind(Enum):
    """Programmatic tag for each evaluation failure."""

    PARSE = "parse"
    UNBOUND_VARIABLE = "unbound_variable"
    TYPE_ERROR = "type_error"
    NULL_IN_OPERATION = "null_in_operation"
    DIVISION_BY_ZERO = "division_by_zero"
    INVALID_LITERAL = "invalid_literal"


class EvaluationError(Exception):
    """Base class for every failure raised by ``evaluate``."""

    kind: EvalErrorKind


class EvalParseError(EvaluationError):
    """The expression could not be parsed, so nothing was evaluated.

    Attributes:
        parse_error: The underlying ParseError
    """

    kind = EvalErrorKind.PARSE

    def __init__(self, parse_error: ParseError):
        self.parse_error = parse_error
        super().__init__(f"Parse error: {parse_error}")


class UnboundVariableError(EvaluationError):
    """A referenced variable has no entry in the bindings."""

    kind = EvalErrorKind.UNBOUND_VARIABLE

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unbound variable '{name}' - not found in bindings")


class EvalTypeError(EvaluationError):
    """An operand had the wrong type for the operation.

    Attributes:
        operation: The operation being performed (e.g. "addition", "LIKE")
        expected: Description of the accepted type(s)
        actual: Description of what was found
        context: Which operand or construct was involved
    """

    kind = EvalErrorKind.TYPE_ERROR

    def __init__(self, operation: str, expected: str, actual: str, context: str):
        self.operation = operation
        self.expected = expected
        self.actual = actual
        self.context = context
        super().__init__(
            f"Type error in {operation}: expected {expected}, got {actual} "
            f"(context: {context})"
        )


class NullInOperationError(EvaluationError):
    """NULL reached an operation other than IS [NOT] NULL."""

    kind = EvalErrorKind.NULL_IN_OPERATION

    def __init__(self, operation: str, context: str):
        self.operation = operation
        self.context = context
        super().__init__(
            f"NULL value in {operation} operation (context: {context}). "
            "NULL is only allowed in IS NULL/IS NOT NULL"
        )


class DivisionByZeroError(EvaluationError):
    """Division or modulo by zero.

    Attributes:
        expression: The full expression text being evaluated
    """

    kind = EvalErrorKind.DIVISION_BY_ZERO

    def __init__(self, expression: str):
        self.expression = expression
        super().__init__(f"Division by zero in expression: {expression}")


class InvalidLiteralError(EvaluationError):
    """A literal could not be turned into a usable runtime form.

    Reserved: literals are validated by the lexer and parser, and LIKE
    patterns are escaped before compiling, so evaluation never raises it.
    """

    kind = EvalErrorKind.INVALID_LITERAL

    def __init__(self, literal: str, literal_type: str, error: str):
        self.literal = literal
        self.literal_type = literal_type
        self.error = error
        super().__init__(f"Invalid {literal_type} literal '{literal}': {error}")
