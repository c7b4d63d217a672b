"""Validator catalog: codecs between literal text and stored column bytes."""

from __future__ import annotations

import re
import struct
import uuid as uuid_module
from enum import Enum
from typing import Any

from cassandra_cli.errors import LiteralTypeError, SchemaError

MARSHAL_PACKAGE = "org.apache.cassandra.db.marshal."

LONG_MIN = -(1 << 63)
LONG_MAX = (1 << 63) - 1

_INTEGER_RE = re.compile(r"^-?[0-9]+$")
_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")

# Decimal text is converted in chunks, below the interpreter's int/str digit limit
_DIGIT_CHUNK = 1000
_CHUNK_BASE = 10 ** _DIGIT_CHUNK


class Validator(Enum):
    """The closed set of column validators known to the interpreter."""

    UTF8 = "UTF8Type"
    LONG = "LongType"
    INTEGER = "IntegerType"
    LEXICAL_UUID = "LexicalUUIDType"
    TIME_UUID = "TimeUUIDType"
    COUNTER = "CounterColumnType"
    BYTES = "BytesType"

    @property
    def class_name(self) -> str:
        """Return the validator class name as stored in schema definitions."""
        return self.value

    @property
    def function_name(self) -> str:
        """Return the lowercase name used in casts and assume statements."""
        return _FUNCTION_NAMES[self]

    @property
    def is_counter(self) -> bool:
        return self is Validator.COUNTER

    def encode(self, text: str) -> bytes:
        """Convert literal text to the stored byte form."""
        if self is Validator.UTF8:
            return text.encode("utf-8")
        if self is Validator.BYTES:
            return _hex_to_bytes(text)
        if self is Validator.LONG:
            return _encode_long(_parse_integer(text, self))
        if self is Validator.INTEGER:
            return _encode_integer(_parse_integer(text, self))
        if self is Validator.LEXICAL_UUID:
            return _parse_uuid(text, self).bytes
        if self is Validator.TIME_UUID:
            if text.lower() == "now":
                return uuid_module.uuid1().bytes
            value = _parse_uuid(text, self)
            if value.version != 1:
                raise LiteralTypeError(f"Unsupported UUID version {value.version} for TimeUUIDType: {text}")
            return value.bytes
        raise LiteralTypeError(
            "Counter columns can not be assigned directly, use incr/decr instead"
        )

    def decode(self, data: bytes) -> str:
        """Render stored bytes as display text."""
        if self is Validator.UTF8:
            try:
                return data.decode("utf-8")
            except UnicodeDecodeError:
                raise LiteralTypeError(f"Value 0x{data.hex()} is not valid UTF-8") from None
        if self is Validator.BYTES:
            return data.hex()
        if self in (Validator.LONG, Validator.COUNTER):
            if not data:
                return ""
            if len(data) != 8:
                raise LiteralTypeError(f"A long is exactly 8 bytes, got {len(data)}")
            return str(struct.unpack(">q", data)[0])
        if self is Validator.INTEGER:
            if not data:
                return ""
            return _format_integer(int.from_bytes(data, "big", signed=True))
        # UUID validators
        if not data:
            return ""
        if len(data) != 16:
            raise LiteralTypeError(f"UUIDs must be exactly 16 bytes, got {len(data)}")
        return str(uuid_module.UUID(bytes=data))

    def generate(self) -> bytes:
        """Produce a fresh value for a zero-argument cast like ``timeuuid()``."""
        if self is Validator.TIME_UUID:
            return uuid_module.uuid1().bytes
        if self is Validator.LEXICAL_UUID:
            return uuid_module.uuid4().bytes
        raise LiteralTypeError(f"{self.function_name}() requires an argument")

    def sort_key(self, data: bytes) -> Any:
        """Return a key that orders stored bytes the way the validator compares them."""
        if self in (Validator.LONG, Validator.COUNTER) and len(data) == 8:
            return (0, struct.unpack(">q", data)[0])
        if self is Validator.INTEGER and data:
            return (0, int.from_bytes(data, "big", signed=True))
        if self is Validator.TIME_UUID and len(data) == 16:
            return (0, uuid_module.UUID(bytes=data).time, data)
        return (1, data)


_FUNCTION_NAMES: dict[Validator, str] = {
    Validator.UTF8: "utf8",
    Validator.LONG: "long",
    Validator.INTEGER: "integer",
    Validator.LEXICAL_UUID: "lexicaluuid",
    Validator.TIME_UUID: "timeuuid",
    Validator.COUNTER: "counter",
    Validator.BYTES: "bytes",
}


def _parse_integer(text: str, validator: Validator) -> int:
    text = text.strip()
    if not _INTEGER_RE.match(text):
        raise LiteralTypeError(f"'{_clip(text)}' is not a valid {validator.class_name} literal")
    negative = text.startswith("-")
    digits = text.lstrip("-")
    value = 0
    try:
        for start in range(0, len(digits), _DIGIT_CHUNK):
            chunk = digits[start:start + _DIGIT_CHUNK]
            value = value * 10 ** len(chunk) + int(chunk)
    except ValueError as e:
        raise LiteralTypeError(f"'{_clip(text)}' is not a valid {validator.class_name} literal: {e}") from None
    return -value if negative else value


def _format_integer(value: int) -> str:
    """Decimal text of an int of any size."""
    sign = "-" if value < 0 else ""
    value = abs(value)
    chunks = []
    while value >= _CHUNK_BASE:
        value, chunk = divmod(value, _CHUNK_BASE)
        chunks.append(str(chunk).zfill(_DIGIT_CHUNK))
    chunks.append(str(value))
    return sign + "".join(reversed(chunks))


def _clip(text: str, width: int = 40) -> str:
    return text if len(text) <= width else text[:width] + "..."


def _encode_long(value: int) -> bytes:
    if not LONG_MIN <= value <= LONG_MAX:
        raise LiteralTypeError(f"{_clip(_format_integer(value))} is out of range for LongType")
    return struct.pack(">q", value)


def _encode_integer(value: int) -> bytes:
    """Minimal big-endian two's complement, one byte for zero."""
    magnitude = value if value >= 0 else ~value
    length = magnitude.bit_length() // 8 + 1
    return value.to_bytes(length, "big", signed=True)


def _parse_uuid(text: str, validator: Validator) -> uuid_module.UUID:
    try:
        return uuid_module.UUID(text.strip())
    except ValueError:
        raise LiteralTypeError(f"'{text}' is not a valid {validator.class_name} literal") from None


def _hex_to_bytes(text: str) -> bytes:
    if not _HEX_RE.match(text):
        raise LiteralTypeError(f"cannot parse '{text}' as hex bytes")
    if len(text) % 2 == 1:
        text = "0" + text
    return bytes.fromhex(text)


class ValidatorRegistry:
    """Name lookup over the validator catalog.

    Accepts class names (``LongType``), fully qualified class names and
    function names (``long``), all case-insensitive. Unknown names raise
    ``SchemaError``; there is no fallback.
    """

    def __init__(self) -> None:
        self._names: dict[str, Validator] = {}
        for validator in Validator:
            self._names[validator.class_name.lower()] = validator
            self._names[validator.function_name] = validator
            self._names[(MARSHAL_PACKAGE + validator.class_name).lower()] = validator

    def get(self, name: str) -> Validator | None:
        """Look up a validator, returning None if the name is unknown."""
        return self._names.get(name.strip().strip("'\"").lower())

    def get_or_raise(self, name: str) -> Validator:
        """Look up a validator, raising SchemaError if the name is unknown."""
        validator = self.get(name)
        if validator is None:
            raise SchemaError(f"Unknown validator type '{name}', use one of: {', '.join(self.list_names())}")
        return validator

    def list_names(self) -> list[str]:
        return [validator.function_name for validator in Validator]

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None


REGISTRY = ValidatorRegistry()
