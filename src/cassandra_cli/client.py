"""RPC client contract and the records exchanged over it.

The interpreter reaches the store only through ``RpcClient``. Any method
may raise ``RpcError`` for a transport failure or a server-side rejection.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from cassandra_cli.schema import CfDef, KsDef


@dataclass
class ColumnPath:
    """Address of a row, super column or column within a column family."""

    column_family: str
    key: bytes
    super_column: bytes | None = None
    column: bytes | None = None


@dataclass
class Column:
    name: bytes
    value: bytes
    timestamp: int
    ttl: int | None = None


@dataclass
class CounterColumn:
    name: bytes
    value: int


@dataclass
class SuperColumn:
    name: bytes
    columns: list[Column | CounterColumn] = field(default_factory=list)


Cell = Column | CounterColumn | SuperColumn


@dataclass
class KeySlice:
    """A row returned by a range or index scan."""

    key: bytes
    columns: list[Cell] = field(default_factory=list)


@dataclass
class KeyRange:
    """Row key bounds for a range scan; empty bytes means unbounded."""

    start_key: bytes = b""
    end_key: bytes = b""
    count: int = 100


@dataclass
class IndexExpression:
    """One ``column op value`` term of an index clause."""

    column_name: bytes
    op: str  # eq, gt, gte, lt, lte
    value: bytes


class RpcClient(ABC):
    """The narrow interface the interpreter uses to reach the store."""

    @abstractmethod
    def connect(self, host: str, port: int) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    @property
    @abstractmethod
    def connected(self) -> bool: ...

    @abstractmethod
    def set_keyspace(self, keyspace: str) -> None: ...

    # --- data ---

    @abstractmethod
    def insert_column(self, path: ColumnPath, value: bytes, ttl: int | None = None) -> None: ...

    @abstractmethod
    def get_column(self, path: ColumnPath) -> Cell | None: ...

    @abstractmethod
    def get_row(self, column_family: str, key: bytes, super_column: bytes | None = None,
                count: int = 100) -> list[Cell]: ...

    @abstractmethod
    def get_slice(self, column_family: str, key_range: KeyRange) -> list[KeySlice]: ...

    @abstractmethod
    def get_indexed_slices(self, column_family: str, expressions: list[IndexExpression],
                           count: int = 100) -> list[KeySlice]: ...

    @abstractmethod
    def remove_column(self, path: ColumnPath) -> None: ...

    @abstractmethod
    def add_to_counter(self, path: ColumnPath, delta: int) -> None: ...

    @abstractmethod
    def truncate(self, column_family: str) -> None: ...

    # --- schema mutations, each returning a schema version token ---

    @abstractmethod
    def create_keyspace(self, ks_def: KsDef) -> str: ...

    @abstractmethod
    def update_keyspace(self, ks_def: KsDef) -> str: ...

    @abstractmethod
    def drop_keyspace(self, name: str) -> str: ...

    @abstractmethod
    def create_column_family(self, cf_def: CfDef) -> str: ...

    @abstractmethod
    def update_column_family(self, cf_def: CfDef) -> str: ...

    @abstractmethod
    def drop_column_family(self, name: str) -> str: ...

    @abstractmethod
    def drop_index(self, column_family: str, column: bytes) -> str: ...

    # --- introspection ---

    @abstractmethod
    def describe_schema(self) -> list[KsDef]: ...

    @abstractmethod
    def describe_keyspace(self, name: str) -> KsDef | None: ...

    @abstractmethod
    def describe_cluster_name(self) -> str: ...

    @abstractmethod
    def describe_version(self) -> str: ...

    @abstractmethod
    def describe_schema_versions(self) -> dict[str, list[str]]: ...

    @abstractmethod
    def describe_partitioner(self) -> str: ...

    @abstractmethod
    def describe_snitch(self) -> str: ...
