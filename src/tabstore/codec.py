"""
Byte encodings for row fields.

Quantitative fields hold one value of the configured numeric representation,
a single struct format code packed little-endian with standard sizes.
Categorical fields hold text encoded to bytes and zero-padded to the column
width. Decoding stops at the first NUL byte, so a value that was stored with
an embedded NUL displays truncated.
"""

import math
import numbers
import struct
from dataclasses import dataclass
from decimal import Decimal

from tabstore.classify import is_integer, is_number
from tabstore.errors import ConfigError, FieldTooLongError, MalformedRecordError, SizeMismatchError


INTEGER_FORMATS = frozenset("bBhHiIlLqQ")
REAL_FORMATS = frozenset("fd")
NUMERIC_FORMATS = INTEGER_FORMATS | REAL_FORMATS


@dataclass(frozen=True)
class NumericCodec:
    """
    Packs and parses values of one quantitative numeric representation.

    Properties:
        fmt: struct format code, one of b B h H i I l L q Q f d
    """

    fmt: str = "d"

    def __post_init__(self):
        if self.fmt not in NUMERIC_FORMATS:
            raise ConfigError(
                f"Unsupported quantitative format {self.fmt!r}; "
                f"expected one of {''.join(sorted(NUMERIC_FORMATS))}"
            )

    @property
    def is_integral(self) -> bool:
        return self.fmt in INTEGER_FORMATS

    @property
    def size(self) -> int:
        return struct.calcsize("<" + self.fmt)

    def pack(self, value) -> bytes:
        """
        Pack one number.

        Integer formats take ints, or floats with no fractional part; any
        other value raises MalformedRecordError rather than being truncated.
        """
        if self.is_integral:
            if isinstance(value, float) and value.is_integer():
                value = int(value)
            elif not isinstance(value, numbers.Integral):
                raise MalformedRecordError(
                    f"Value {value!r} is not an integer for format {self.fmt!r}"
                )
        try:
            value = int(value) if self.is_integral else float(value)
            return struct.pack("<" + self.fmt, value)
        except (struct.error, TypeError, ValueError, OverflowError) as e:
            raise MalformedRecordError(f"Value {value!r} does not fit format {self.fmt!r}: {e}")

    def unpack(self, raw: bytes):
        if len(raw) != self.size:
            raise SizeMismatchError(
                f"Cannot read {len(raw)} bytes as format {self.fmt!r} ({self.size} bytes)"
            )
        return struct.unpack("<" + self.fmt, raw)[0]

    def parse(self, token: str):
        """Parse a text token into a Python number for this format."""
        if self.is_integral:
            if not is_integer(token):
                raise MalformedRecordError(f"Expected an integer, got {token!r}")
            return int(token)
        if not is_number(token):
            raise MalformedRecordError(f"Expected a number, got {token!r}")
        return float(token)

    def format(self, value) -> str:
        """Canonical text form; parsing it back yields the same packed bytes."""
        if self.is_integral:
            return str(int(value))
        value = float(value)
        negative_zero = value == 0 and math.copysign(1.0, value) < 0
        if math.isfinite(value) and value.is_integer() and not negative_zero:
            return str(int(value))
        text = repr(value)
        if "e" in text:
            # Positional notation only; the importer does not accept exponents.
            text = format(Decimal(text), "f")
        return text


def encode_text(text: str, width: int, encoding: str = "utf-8") -> bytes:
    """Encode text and zero-pad it to exactly width bytes."""
    raw = text.encode(encoding)
    if len(raw) > width:
        raise FieldTooLongError(
            f"Value {text!r} needs {len(raw)} bytes but the column is {width} bytes wide"
        )
    return raw.ljust(width, b"\0")


def decode_text(raw: bytes, encoding: str = "utf-8", errors: str = "strict") -> str:
    """Decode a zero-padded field up to its first NUL byte."""
    end = raw.find(b"\0")
    if end != -1:
        raw = raw[:end]
    return raw.decode(encoding, errors)


__all__ = [
    "INTEGER_FORMATS",
    "REAL_FORMATS",
    "NUMERIC_FORMATS",
    "NumericCodec",
    "encode_text",
    "decode_text",
]
