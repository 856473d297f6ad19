"""Value types shared by the parser and evaluator.

- ValueKind: the closed set of scalar kinds
- ValueLiteral: a constant that appeared in source text
- RuntimeValue: a caller-supplied binding value

ValueLiteral and RuntimeValue have the same shape but are kept apart so
the evaluator's public input contract does not depend on how the parser
represents constants.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def wrap_int64(value: int) -> int:
    """Wrap an arbitrary int into the signed 64-bit range (two's complement)."""
    return ((value - INT64_MIN) % 2**64) + INT64_MIN


def fits_int64(value: int) -> bool:
    return INT64_MIN <= value <= INT64_MAX


class ValueKind(Enum):
    """Scalar kinds; the value is the name used in diagnostics."""

    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    BOOLEAN = "boolean"
    NULL = "NULL"

    @property
    def is_numeric(self) -> bool:
        return self in (ValueKind.INTEGER, ValueKind.FLOAT)


_PYTHON_TYPES: dict[ValueKind, tuple[type, ...]] = {
    ValueKind.INTEGER: (int,),
    ValueKind.FLOAT: (float,),
    ValueKind.STRING: (str,),
    ValueKind.BOOLEAN: (bool,),
    ValueKind.NULL: (type(None),),
}


def _check_payload(owner: str, kind: ValueKind, value: Any) -> None:
    expected = _PYTHON_TYPES[kind]
    if not isinstance(value, expected) or (
        kind is ValueKind.INTEGER and isinstance(value, bool)
    ):
        raise TypeError(
            f"{owner} of kind {kind.name} cannot hold {type(value).__name__} {value!r}"
        )
    if kind is ValueKind.INTEGER and not fits_int64(value):
        raise ValueError(f"{owner} integer {value} does not fit in 64 bits")


@dataclass(frozen=True)
class ValueLiteral:
    """A literal constant from source text (also the element type of IN lists)."""

    kind: ValueKind
    value: int | float | str | bool | None = None

    def __post_init__(self) -> None:
        _check_payload("ValueLiteral", self.kind, self.value)

    @classmethod
    def integer(cls, value: int) -> "ValueLiteral":
        return cls(ValueKind.INTEGER, value)

    @classmethod
    def float_(cls, value: float) -> "ValueLiteral":
        return cls(ValueKind.FLOAT, value)

    @classmethod
    def string(cls, value: str) -> "ValueLiteral":
        return cls(ValueKind.STRING, value)

    @classmethod
    def boolean(cls, value: bool) -> "ValueLiteral":
        return cls(ValueKind.BOOLEAN, value)

    @classmethod
    def null(cls) -> "ValueLiteral":
        return cls(ValueKind.NULL, None)

    @property
    def type_name(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class RuntimeValue:
    """A value bound to a variable name by the caller.

    Usage:
        bindings = {
            "age": RuntimeValue.integer(42),
            "name": RuntimeValue.of("John"),
            "deleted_at": RuntimeValue.null(),
        }
    """

    kind: ValueKind
    value: int | float | str | bool | None = None

    def __post_init__(self) -> None:
        _check_payload("RuntimeValue", self.kind, self.value)

    @classmethod
    def integer(cls, value: int) -> "RuntimeValue":
        return cls(ValueKind.INTEGER, value)

    @classmethod
    def float_(cls, value: float) -> "RuntimeValue":
        return cls(ValueKind.FLOAT, float(value))

    @classmethod
    def string(cls, value: str) -> "RuntimeValue":
        return cls(ValueKind.STRING, value)

    @classmethod
    def boolean(cls, value: bool) -> "RuntimeValue":
        return cls(ValueKind.BOOLEAN, value)

    @classmethod
    def null(cls) -> "RuntimeValue":
        return cls(ValueKind.NULL, None)

    @classmethod
    def of(cls, value: Any) -> "RuntimeValue":
        """Convert a plain Python scalar into a RuntimeValue.

        bool is checked before int since bool is an int subclass.

        Raises:
            TypeError: For values that are not None/bool/int/float/str
        """
        if isinstance(value, RuntimeValue):
            return value
        if value is None:
            return cls.null()
        if isinstance(value, bool):
            return cls.boolean(value)
        if isinstance(value, int):
            return cls.integer(value)
        if isinstance(value, float):
            return cls.float_(value)
        if isinstance(value, str):
            return cls.string(value)
        raise TypeError(f"Unsupported binding value type: {type(value).__name__}")

    @property
    def type_name(self) -> str:
        return self.kind.value
