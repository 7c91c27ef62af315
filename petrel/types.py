"""Type definitions and helpers for Petrel.

This module defines the static type names and the runtime value model used
by the analyzer and the interpreter. Runtime values are small frozen
dataclasses tagged by their Python class, so two values compare equal only
when both their kind and their content match. There is exactly one implicit
conversion in the language, int to float widening, provided by `widen`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


@dataclass(frozen=True)
class TypeSpec:
    """Represents a Petrel type specification.

    `kind` is one of 'int', 'float', 'bool', 'char', 'string' or 'void'.
    `void` only ever appears as a function return type.
    """
    kind: str

    def __repr__(self) -> str:
        return self.kind

    def __str__(self) -> str:
        return self.kind

    @property
    def is_numeric(self) -> bool:
        return self.kind in ('int', 'float')

    # Convenience constructors
    @staticmethod
    def integer() -> 'TypeSpec':
        return TypeSpec('int')

    @staticmethod
    def float_() -> 'TypeSpec':
        return TypeSpec('float')

    @staticmethod
    def boolean() -> 'TypeSpec':
        return TypeSpec('bool')

    @staticmethod
    def char() -> 'TypeSpec':
        return TypeSpec('char')

    @staticmethod
    def string() -> 'TypeSpec':
        return TypeSpec('string')

    @staticmethod
    def void() -> 'TypeSpec':
        return TypeSpec('void')


VALUE_TYPE_NAMES = ('int', 'float', 'bool', 'char', 'string')
RETURN_TYPE_NAMES = VALUE_TYPE_NAMES + ('void',)


def wrap_int64(n: int) -> int:
    """Wrap an arbitrary Python integer into the signed 64-bit range."""
    n &= 0xFFFFFFFFFFFFFFFF
    if n > INT64_MAX:
        n -= 1 << 64
    return n


@dataclass(frozen=True)
class IntVal:
    value: int

    @property
    def type(self) -> TypeSpec:
        return TypeSpec.integer()


@dataclass(frozen=True)
class FloatVal:
    value: float

    @property
    def type(self) -> TypeSpec:
        return TypeSpec.float_()


@dataclass(frozen=True)
class BoolVal:
    value: bool

    @property
    def type(self) -> TypeSpec:
        return TypeSpec.boolean()


@dataclass(frozen=True)
class CharVal:
    """A single character. The null character stands for an empty read."""
    value: str

    @property
    def type(self) -> TypeSpec:
        return TypeSpec.char()


@dataclass(frozen=True)
class StrVal:
    value: str

    @property
    def type(self) -> TypeSpec:
        return TypeSpec.string()


Value = Union[IntVal, FloatVal, BoolVal, CharVal, StrVal]


def is_compatible(expected: TypeSpec, actual: TypeSpec) -> bool:
    """Return True if a value of type `actual` may be stored where `expected` is declared.

    Types are compatible when identical, or when an int flows into a float
    slot. There is no narrowing and no other implicit conversion.
    """
    if expected == actual:
        return True
    return expected.kind == 'float' and actual.kind == 'int'


def widen(value: Value, target: TypeSpec) -> Value:
    """Apply int to float widening when `target` is float; otherwise return `value` unchanged."""
    if target.kind == 'float' and isinstance(value, IntVal):
        return FloatVal(float(value.value))
    return value


def to_string(value: Optional[Value]) -> str:
    """Convert a Petrel value to its textual form for printing."""
    if isinstance(value, BoolVal):
        return 'true' if value.value else 'false'
    if isinstance(value, IntVal):
        return str(value.value)
    if isinstance(value, FloatVal):
        # Use repr for a concise round-trip representation
        return repr(value.value)
    if isinstance(value, (CharVal, StrVal)):
        return value.value
    if value is None:
        return ''
    raise TypeError(f"not a Petrel value: {value!r}")


def parse_input(text: str, spec: TypeSpec) -> Value:
    """Parse one line of user input according to a declared type.

    Raises ValueError if the text cannot be read as the requested type. The
    caller is expected to turn that into a Petrel runtime error.
    """
    kind = spec.kind
    if kind == 'int':
        try:
            n = int(text.strip(), 10)
        except ValueError:
            raise ValueError(f"cannot parse int from {text!r}")
        if n < INT64_MIN or n > INT64_MAX:
            raise ValueError(f"int out of range: {text!r}")
        return IntVal(n)
    if kind == 'float':
        try:
            return FloatVal(float(text.strip()))
        except ValueError:
            raise ValueError(f"cannot parse float from {text!r}")
    if kind == 'bool':
        lowered = text.strip().lower()
        if lowered == 'true':
            return BoolVal(True)
        if lowered == 'false':
            return BoolVal(False)
        raise ValueError(f"cannot parse bool from {text!r}")
    if kind == 'char':
        return CharVal(text[0] if text else '\0')
    if kind == 'string':
        return StrVal(text)
    raise ValueError(f"cannot read a value of type {spec}")
