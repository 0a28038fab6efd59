"""Conversion between record fields and their text form on the stream."""

from __future__ import annotations

import json
import math
import operator
import re
import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from functools import partial
from typing import Any, Callable


class SerializationError(ValueError):
    """A value could not be converted to or from its stream form."""


class NoKey:
    """Marker for records that carry no key."""

    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NoKey)

    def __hash__(self) -> int:
        return hash(NoKey)

    def __repr__(self) -> str:
        return "NoKey()"


class Serializer(ABC):
    """Turns values into bytes and back."""

    @abstractmethod
    def serialize(self, value: Any) -> bytes:
        """Return the stream form of ``value``."""

    @abstractmethod
    def deserialize(self, data: bytes) -> Any:
        """Return the value held by ``data``."""


def _text(data: bytes) -> str:
    return data.decode("utf-8", "replace")


def _syntax_error(kind: str, data: bytes) -> SerializationError:
    return SerializationError(f"cannot parse {_text(data)!r} as {kind}: invalid syntax")


def _range_error(kind: str, data: bytes) -> SerializationError:
    return SerializationError(f"cannot parse {_text(data)!r} as {kind}: value out of range")


_INT_RE = re.compile(rb"[+-]?[0-9]+")
_UINT_RE = re.compile(rb"[0-9]+")
_INT_BITS = (8, 16, 32, 64)
_MAX_DIGITS = 20

_DEC = rb"(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
_HEX = rb"0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+"
_FLOAT_PREFIX = re.compile(
    rb"(?:[+-]?(?:" + _HEX + rb"|" + _DEC + rb"|(?i:infinity|inf))|(?i:nan))"
)


def _as_int(value: Any) -> int:
    try:
        return operator.index(value)
    except TypeError:
        raise SerializationError(f"not an integer: {value!r}") from None


def _parse_integer(data: bytes, pattern: re.Pattern[bytes], kind: str,
                   low: int, high: int) -> int:
    data = bytes(data)
    if not pattern.fullmatch(data):
        raise _syntax_error(kind, data)
    if len(data.lstrip(b"+-").lstrip(b"0")) > _MAX_DIGITS:
        raise _range_error(kind, data)
    number = int(data)
    if not low <= number <= high:
        raise _range_error(kind, data)
    return number


@dataclass(frozen=True)
class IntSerializer(Serializer):
    """Signed integers of a fixed width written in base 10."""

    bits: int = 64

    def __post_init__(self) -> None:
        if self.bits not in _INT_BITS:
            raise ValueError(f"unsupported integer size: {self.bits}")

    @property
    def _kind(self) -> str:
        return f"int{self.bits}"

    @property
    def _bounds(self) -> tuple[int, int]:
        limit = 1 << (self.bits - 1)
        return -limit, limit - 1

    def serialize(self, value: Any) -> bytes:
        number = _as_int(value)
        low, high = self._bounds
        if not low <= number <= high:
            raise SerializationError(f"{number} is out of range for {self._kind}")
        return str(number).encode("ascii")

    def deserialize(self, data: bytes) -> int:
        low, high = self._bounds
        return _parse_integer(data, _INT_RE, self._kind, low, high)


@dataclass(frozen=True)
class UintSerializer(Serializer):
    """Unsigned integers of a fixed width written in base 10."""

    bits: int = 64

    def __post_init__(self) -> None:
        if self.bits not in _INT_BITS:
            raise ValueError(f"unsupported integer size: {self.bits}")

    @property
    def _kind(self) -> str:
        return f"uint{self.bits}"

    def serialize(self, value: Any) -> bytes:
        number = _as_int(value)
        if not 0 <= number < (1 << self.bits):
            raise SerializationError(f"{number} is out of range for {self._kind}")
        return str(number).encode("ascii")

    def deserialize(self, data: bytes) -> int:
        return _parse_integer(data, _UINT_RE, self._kind, 0, (1 << self.bits) - 1)


def _round32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _shortest32(value: float) -> str:
    for precision in range(1, 10):
        text = f"{value:.{precision}g}"
        if _round32(float(text)) == value:
            return text
    return repr(value)


def _format_float(value: float, bits: int) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if bits == 32:
        try:
            value = _round32(value)
        except OverflowError:
            raise SerializationError(f"{value!r} is out of range for float32") from None
        digits = _shortest32(value)
    else:
        digits = repr(value)
    return format(Decimal(digits).normalize(), "f")


def _float_token(token: bytes, bits: int, kind: str, data: bytes) -> float:
    """Convert a token matched by the float pattern to a float of ``bits``."""
    body = token.lstrip(b"+-")
    special = body[:1] in (b"i", b"I", b"n", b"N")
    text = token.decode("ascii")
    try:
        if body[:2].lower() == b"0x":
            value = float.fromhex(text)
        else:
            value = float(text)
    except OverflowError:
        raise _range_error(kind, data) from None
    if math.isinf(value) and not special:
        raise _range_error(kind, data)
    if bits == 32:
        try:
            value = _round32(value)
        except OverflowError:
            raise _range_error(kind, data) from None
    return value


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise SerializationError(f"not a float: {value!r}") from None


@dataclass(frozen=True)
class FloatSerializer(Serializer):
    """Floating point numbers in plain decimal notation, shortest form."""

    bits: int = 64

    def __post_init__(self) -> None:
        if self.bits not in (32, 64):
            raise ValueError(f"unsupported float size: {self.bits}")

    def serialize(self, value: Any) -> bytes:
        return _format_float(_as_float(value), self.bits).encode("ascii")

    def deserialize(self, data: bytes) -> float:
        data = bytes(data)
        kind = f"float{self.bits}"
        match = _FLOAT_PREFIX.fullmatch(data)
        if match is None:
            raise _syntax_error(kind, data)
        return _float_token(match.group(), self.bits, kind, data)


_TRUE_SPELLINGS = frozenset({b"1", b"t", b"T", b"TRUE", b"true", b"True"})
_FALSE_SPELLINGS = frozenset({b"0", b"f", b"F", b"FALSE", b"false", b"False"})


class BoolSerializer(Serializer):
    """Booleans written as ``true`` or ``false``."""

    def serialize(self, value: Any) -> bytes:
        return b"true" if value else b"false"

    def deserialize(self, data: bytes) -> bool:
        data = bytes(data)
        if data in _TRUE_SPELLINGS:
            return True
        if data in _FALSE_SPELLINGS:
            return False
        raise _syntax_error("bool", data)


@dataclass(frozen=True)
class ComplexSerializer(Serializer):
    """Complex numbers written as ``(real+imagi)``."""

    bits: int = 128

    def __post_init__(self) -> None:
        if self.bits not in (64, 128):
            raise ValueError(f"unsupported complex size: {self.bits}")

    def serialize(self, value: Any) -> bytes:
        try:
            number = complex(value)
        except (TypeError, ValueError):
            raise SerializationError(f"not a complex number: {value!r}") from None
        half = self.bits // 2
        real = _format_float(number.real, half)
        imag = _format_float(number.imag, half)
        if imag[0] not in "+-":
            imag = "+" + imag
        return f"({real}{imag}i)".encode("ascii")

    def deserialize(self, data: bytes) -> complex:
        data = bytes(data)
        kind = f"complex{self.bits}"
        half = self.bits // 2
        rest = data
        if len(rest) >= 2 and rest[:1] == b"(" and rest[-1:] == b")":
            rest = rest[1:-1]

        match = _FLOAT_PREFIX.match(rest)
        if match is None:
            raise _syntax_error(kind, data)
        first = _float_token(match.group(), half, kind, data)
        rest = rest[match.end():]
        if not rest:
            return complex(first, 0.0)

        head = rest[:1]
        if head == b"+":
            if len(rest) > 1 and rest[1:2] != b"+":
                rest = rest[1:]
        elif head == b"i" and len(rest) == 1:
            return complex(0.0, first)
        elif head != b"-":
            raise _syntax_error(kind, data)

        match = _FLOAT_PREFIX.match(rest)
        if match is None:
            raise _syntax_error(kind, data)
        second = _float_token(match.group(), half, kind, data)
        if rest[match.end():] != b"i":
            raise _syntax_error(kind, data)
        return complex(first, second)


class StringSerializer(Serializer):
    """Text written as-is; undecodable bytes survive a round trip."""

    def serialize(self, value: str) -> bytes:
        return value.encode("utf-8", "surrogateescape")

    def deserialize(self, data: bytes) -> str:
        return bytes(data).decode("utf-8", "surrogateescape")


_HTML_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON value: {name}")


@dataclass(frozen=True)
class JsonSerializer(Serializer):
    """Compact JSON; ``expected`` restricts the type of decoded values."""

    expected: type | None = None

    def serialize(self, value: Any) -> bytes:
        try:
            text = json.dumps(
                value,
                sort_keys=True,
                separators=(",", ":"),
                ensure_ascii=False,
                allow_nan=False,
            )
        except (TypeError, ValueError) as error:
            raise SerializationError(str(error)) from error
        for raw, escaped in _HTML_ESCAPES:
            text = text.replace(raw, escaped)
        return text.encode("utf-8")

    def deserialize(self, data: bytes) -> Any:
        text = bytes(data).decode("utf-8", "replace")
        try:
            value = json.loads(text, parse_constant=_reject_constant)
        except ValueError as error:
            raise SerializationError(str(error)) from error
        if (self.expected is not None and value is not None
                and not isinstance(value, self.expected)):
            raise SerializationError(
                f"cannot decode {type(value).__name__} into {self.expected.__name__}"
            )
        return value


_FACTORIES: dict[str, Callable[[], Serializer]] = {
    "bool": BoolSerializer,
    "string": StringSerializer,
    "int": partial(IntSerializer, 64),
    "int8": partial(IntSerializer, 8),
    "int16": partial(IntSerializer, 16),
    "int32": partial(IntSerializer, 32),
    "int64": partial(IntSerializer, 64),
    "uint": partial(UintSerializer, 64),
    "uint8": partial(UintSerializer, 8),
    "uint16": partial(UintSerializer, 16),
    "uint32": partial(UintSerializer, 32),
    "uint64": partial(UintSerializer, 64),
    "float32": partial(FloatSerializer, 32),
    "float64": partial(FloatSerializer, 64),
    "complex64": partial(ComplexSerializer, 64),
    "complex128": partial(ComplexSerializer, 128),
    "map": partial(JsonSerializer, dict),
    "array": partial(JsonSerializer, list),
    "json": JsonSerializer,
}


def serializer_for(type_name: str) -> Serializer:
    """Return the serializer for a type name such as ``int8`` or ``map``."""
    try:
        factory = _FACTORIES[type_name]
    except KeyError:
        raise ValueError(f"not support type {type_name}") from None
    return factory()