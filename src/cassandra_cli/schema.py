"""Keyspace and column family definitions as exchanged with the store."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

from cassandra_cli.errors import SchemaError

STANDARD = "Standard"
SUPER = "Super"

SIMPLE_STRATEGY = "org.apache.cassandra.locator.SimpleStrategy"

KEYS_INDEX = "KEYS"


@dataclass
class ColumnDef:
    """Per-column metadata: validation class and optional secondary index."""

    name: bytes
    validation_class: str
    index_type: str | None = None
    index_name: str | None = None

    @property
    def is_indexed(self) -> bool:
        return self.index_type is not None


@dataclass
class CfDef:
    """A column family definition.

    Validator fields are None when they were not declared at creation;
    literal resolution then falls through to session assumptions and the
    global defaults.
    """

    keyspace: str
    name: str
    column_type: str = STANDARD
    comparator_type: str | None = None
    subcomparator_type: str | None = None
    key_validation_class: str | None = None
    default_validation_class: str | None = None
    comment: str | None = None
    column_metadata: list[ColumnDef] = field(default_factory=list)
    options: dict[str, str] = field(default_factory=dict)

    @property
    def is_super(self) -> bool:
        return self.column_type == SUPER

    def get_column(self, name: bytes) -> ColumnDef | None:
        """Return metadata for a column name (in stored byte form)."""
        for column_def in self.column_metadata:
            if column_def.name == name:
                return column_def
        return None

    def copy(self) -> CfDef:
        return copy.deepcopy(self)


@dataclass
class KsDef:
    """A keyspace definition with its column families."""

    name: str
    strategy_class: str = SIMPLE_STRATEGY
    strategy_options: dict[str, str] = field(default_factory=lambda: {"replication_factor": "1"})
    durable_writes: bool = True
    cf_defs: list[CfDef] = field(default_factory=list)

    def find_cf(self, name: str) -> CfDef | None:
        """Find a column family by name, ignoring case."""
        lowered = name.lower()
        for cf_def in self.cf_defs:
            if cf_def.name.lower() == lowered:
                return cf_def
        return None

    def get_cf(self, name: str) -> CfDef:
        """Find a column family by name, ignoring case, raising if absent."""
        cf_def = self.find_cf(name)
        if cf_def is None:
            raise SchemaError(f"Column family '{name}' not found in keyspace '{self.name}'")
        return cf_def

    def copy(self) -> KsDef:
        return copy.deepcopy(self)


def find_keyspace(keyspaces: list[KsDef], name: str) -> KsDef | None:
    """Find a keyspace by name, ignoring case."""
    lowered = name.lower()
    for ks_def in keyspaces:
        if ks_def.name.lower() == lowered:
            return ks_def
    return None
