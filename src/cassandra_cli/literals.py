"""Literal resolution: turning statement tokens into typed column bytes and back.

Precedence for any literal position, and for displaying fetched bytes:

1. an explicit cast wrapping the literal, e.g. ``long(15)``
2. the column_metadata entry for that exact column (values only)
3. the column family default declared at creation
4. a session ``assume`` override
5. the global default: UTF8 for keys and values, Bytes for column names
"""

from __future__ import annotations

from cassandra_cli.errors import LiteralTypeError, SchemaError
from cassandra_cli.parsing.cli_parser import FunctionCall, Literal, Value
from cassandra_cli.schema import CfDef
from cassandra_cli.types import REGISTRY, Validator, ValidatorRegistry

ASSUME_KINDS = ("keys", "comparator", "sub_comparator", "validator")

KEY_DEFAULT = Validator.UTF8
NAME_DEFAULT = Validator.BYTES
VALUE_DEFAULT = Validator.UTF8


def check_assume_kind(kind: str) -> str:
    kind = kind.lower()
    if kind not in ASSUME_KINDS:
        raise SchemaError(f"'{kind}' is not a valid assumption, use one of: {', '.join(ASSUME_KINDS)}")
    return kind


def resolve_value(value: Value, validator: Validator, registry: ValidatorRegistry = REGISTRY) -> bytes:
    """Encode a literal, letting an explicit cast override ``validator``."""
    if isinstance(value, FunctionCall):
        cast = registry.get_or_raise(value.name)
        if value.arg is None:
            return cast.generate()
        return cast.encode(value.arg)
    return validator.encode(value.text)


class LiteralResolver:
    """Resolves validators for one column family, given the session's assumptions."""

    def __init__(self, cf_def: CfDef, assumptions: dict[str, Validator] | None = None,
                 registry: ValidatorRegistry = REGISTRY) -> None:
        self.cf_def = cf_def
        self.assumptions = assumptions or {}
        self.registry = registry

    def _declared(self, class_name: str | None) -> Validator | None:
        if class_name is None:
            return None
        return self.registry.get_or_raise(class_name)

    def _pick(self, declared: str | None, kind: str, default: Validator) -> Validator:
        validator = self._declared(declared)
        if validator is not None:
            return validator
        return self.assumptions.get(kind, default)

    # --- validator lookup ---

    def key_validator(self) -> Validator:
        return self._key_validator()[0]

    def comparator(self) -> Validator:
        """Validator for column names (super column names in a super CF)."""
        return self._pick(self.cf_def.comparator_type, "comparator", NAME_DEFAULT)

    def subcomparator(self) -> Validator:
        """Validator for sub-column names in a super CF."""
        return self._pick(self.cf_def.subcomparator_type, "sub_comparator", NAME_DEFAULT)

    def column_name_validator(self) -> Validator:
        """Validator for the innermost column name (the one carrying a value)."""
        return self.subcomparator() if self.cf_def.is_super else self.comparator()

    def _value_validator(self, column_name: bytes | None) -> tuple[Validator, bool]:
        """Return (validator, is_global_default) for a column's value."""
        if column_name is not None:
            column_def = self.cf_def.get_column(column_name)
            if column_def is not None:
                return self.registry.get_or_raise(column_def.validation_class), False
        declared = self._declared(self.cf_def.default_validation_class)
        if declared is not None:
            return declared, False
        if "validator" in self.assumptions:
            return self.assumptions["validator"], False
        return VALUE_DEFAULT, True

    def value_validator(self, column_name: bytes | None) -> Validator:
        return self._value_validator(column_name)[0]

    # --- encoding ---

    def encode_key(self, value: Value) -> bytes:
        return resolve_value(value, self.key_validator(), self.registry)

    def encode_super_column(self, value: Value) -> bytes:
        return resolve_value(value, self.comparator(), self.registry)

    def encode_column(self, value: Value) -> bytes:
        return resolve_value(value, self.column_name_validator(), self.registry)

    def encode_value(self, value: Value, column_name: bytes) -> bytes:
        validator = self.value_validator(column_name)
        if validator.is_counter:
            raise LiteralTypeError(
                f"Column family {self.cf_def.name} holds counters, use incr/decr instead of set"
            )
        return resolve_value(value, validator, self.registry)

    # --- display ---

    def _key_validator(self) -> tuple[Validator, bool]:
        """Return (validator, is_global_default) for row keys."""
        declared = self._declared(self.cf_def.key_validation_class)
        if declared is not None:
            return declared, False
        if "keys" in self.assumptions:
            return self.assumptions["keys"], False
        return KEY_DEFAULT, True

    def display_key(self, key: bytes) -> str:
        validator, is_default = self._key_validator()
        return _decode(validator, key, is_default)

    def display_super_column(self, name: bytes) -> str:
        return self.comparator().decode(name)

    def display_column(self, name: bytes) -> str:
        return self.column_name_validator().decode(name)

    def display_value(self, value: bytes, column_name: bytes, as_type: Validator | None = None) -> str:
        if as_type is not None:
            return as_type.decode(value)
        validator, is_default = self._value_validator(column_name)
        return _decode(validator, value, is_default)


def _decode(validator: Validator, data: bytes, is_default: bool) -> str:
    """Decode for display; bytes the global default can't read are shown as hex."""
    if is_default:
        try:
            return validator.decode(data)
        except LiteralTypeError:
            return Validator.BYTES.decode(data)
    return validator.decode(data)


def literal_text(value: Value) -> str:
    """Source text of a literal, for messages."""
    if isinstance(value, Literal):
        return value.text
    return f"{value.name}({value.arg or ''})"
