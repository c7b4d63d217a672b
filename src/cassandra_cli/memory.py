"""In-process store implementing the RPC client contract.

Storage layout:

``_data`` maps keyspace names to keyspace-dicts, keyspace-dicts map column
family names to cf-dicts, and cf-dicts map row keys to row-dicts.

Row-dicts map column names to ``Column``/``CounterColumn`` records in a
standard column family, or super column names to super-column-dicts
(column name -> record) in a super column family.

Keys are ordered by the column family's key validator (an order-preserving
partitioner) and column names by its comparator.
"""

from __future__ import annotations

import hashlib
import logging
import time

from cassandra_cli.client import (
    Cell,
    Column,
    ColumnPath,
    CounterColumn,
    IndexExpression,
    KeyRange,
    KeySlice,
    RpcClient,
    SuperColumn,
)
from cassandra_cli.errors import RpcError
from cassandra_cli.schema import KEYS_INDEX, CfDef, KsDef, find_keyspace
from cassandra_cli.types import REGISTRY, Validator

logger = logging.getLogger(__name__)

API_VERSION = "19.10.0"
DEFAULT_CLUSTER_NAME = "Test Cluster"
PARTITIONER = "org.apache.cassandra.dht.ByteOrderedPartitioner"
SNITCH = "org.apache.cassandra.locator.SimpleSnitch"
LOCAL_ADDRESS = "127.0.0.1"

_COMPARE_OPS = {
    "eq": lambda a, b: a == b,
    "gt": lambda a, b: a > b,
    "gte": lambda a, b: a >= b,
    "lt": lambda a, b: a < b,
    "lte": lambda a, b: a <= b,
}


def now_micros() -> int:
    return int(time.time() * 1_000_000)


def make_version_code(info: bytes) -> str:
    """Hash schema bytes into an 8-4-4-4-12 hex token."""
    digits = hashlib.md5(info).hexdigest()
    return "-".join(digits[n:n + s] for (n, s) in [(0, 8), (8, 4), (12, 4), (16, 4), (20, 12)])


def _validator_for(name: str | None) -> Validator:
    if name is None:
        return Validator.BYTES
    return REGISTRY.get(name) or Validator.BYTES


def _is_live(cell: Column | CounterColumn, now: int) -> bool:
    if isinstance(cell, Column) and cell.ttl:
        return now < cell.timestamp + cell.ttl * 1_000_000
    return True


class MemoryClient(RpcClient):
    """A single-node store kept in memory, reachable through the RPC contract."""

    def __init__(self, cluster_name: str = DEFAULT_CLUSTER_NAME) -> None:
        self.cluster_name = cluster_name
        self.host: str | None = None
        self.port: int | None = None
        self._connected = False
        self._keyspace: str | None = None
        self._keyspaces: dict[str, KsDef] = {"system": KsDef(
            "system",
            strategy_class="org.apache.cassandra.locator.LocalStrategy",
            strategy_options={},
        )}
        self._data: dict[str, dict[str, dict[bytes, dict]]] = {}
        self._generation = 0

    # --- connection ---

    def connect(self, host: str, port: int) -> None:
        logger.debug("connect(%s, %d)", host, port)
        self.host = host
        self.port = port
        self._connected = True

    def close(self) -> None:
        logger.debug("close()")
        self._connected = False
        self._keyspace = None

    @property
    def connected(self) -> bool:
        return self._connected

    def set_keyspace(self, keyspace: str) -> None:
        self._require_connected()
        ks_def = find_keyspace(list(self._keyspaces.values()), keyspace)
        if ks_def is None:
            raise RpcError(f"Keyspace {keyspace} does not exist")
        self._keyspace = ks_def.name

    # --- lookup helpers ---

    def _require_connected(self) -> None:
        if not self._connected:
            raise RpcError("Not connected to a server")

    def _current_keyspace(self) -> KsDef:
        self._require_connected()
        if self._keyspace is None:
            raise RpcError("You have not set a keyspace for this session")
        return self._keyspaces[self._keyspace]

    def _lookup_cf(self, name: str) -> CfDef:
        ks_def = self._current_keyspace()
        for cf_def in ks_def.cf_defs:
            if cf_def.name == name:
                return cf_def
        raise RpcError(f"unconfigured columnfamily {name}")

    def _cf_data(self, cf_def: CfDef) -> dict[bytes, dict]:
        return self._data.setdefault(cf_def.keyspace, {}).setdefault(cf_def.name, {})

    def _lookup_parent(self, path: ColumnPath, make: bool = False) -> tuple[CfDef, dict | None]:
        """Return the dict holding the columns addressed by ``path``."""
        cf_def = self._lookup_cf(path.column_family)
        if cf_def.is_super and path.column is not None and path.super_column is None:
            raise RpcError(f"supercolumn parameter is not optional for super CF {cf_def.name}")
        if not cf_def.is_super and path.super_column is not None:
            raise RpcError(f"supercolumn parameter is invalid for standard CF {cf_def.name}")
        data = self._cf_data(cf_def)
        row = data.get(path.key)
        if row is None:
            if not make:
                return cf_def, None
            row = data[path.key] = {}
        if path.super_column is None:
            return cf_def, row
        super_column = row.get(path.super_column)
        if super_column is None:
            if not make:
                return cf_def, None
            super_column = row[path.super_column] = {}
        return cf_def, super_column

    @staticmethod
    def _is_counter_cf(cf_def: CfDef, column: bytes | None) -> bool:
        if column is not None:
            column_def = cf_def.get_column(column)
            if column_def is not None:
                return _validator_for(column_def.validation_class).is_counter
        return _validator_for(cf_def.default_validation_class).is_counter

    @staticmethod
    def _sorted_cells(columns: dict, validator: Validator, now: int) -> list[Column | CounterColumn]:
        return [
            cell for _, cell in sorted(columns.items(), key=lambda item: validator.sort_key(item[0]))
            if _is_live(cell, now)
        ]

    def _pack_row(self, cf_def: CfDef, row: dict, count: int | None = None) -> list[Cell]:
        now = now_micros()
        comparator = _validator_for(cf_def.comparator_type)
        if not cf_def.is_super:
            cells: list[Cell] = list(self._sorted_cells(row, comparator, now))
        else:
            subcomparator = _validator_for(cf_def.subcomparator_type)
            cells = []
            for name in sorted(row, key=comparator.sort_key):
                columns = self._sorted_cells(row[name], subcomparator, now)
                if columns:
                    cells.append(SuperColumn(name=name, columns=columns))
        if count is not None:
            cells = cells[:count]
        return cells

    # --- data ---

    def insert_column(self, path: ColumnPath, value: bytes, ttl: int | None = None) -> None:
        if not path.column:
            raise RpcError("invalid column name")
        if ttl is not None and ttl <= 0:
            raise RpcError(f"ttl must be positive, got {ttl}")
        cf_def = self._lookup_cf(path.column_family)
        if self._is_counter_cf(cf_def, path.column):
            raise RpcError(f"invalid operation for commutative columnfamily {cf_def.name}")
        _, parent = self._lookup_parent(path, make=True)
        parent[path.column] = Column(name=path.column, value=value, timestamp=now_micros(), ttl=ttl)

    def get_column(self, path: ColumnPath) -> Cell | None:
        cf_def, parent = self._lookup_parent(path)
        if parent is None:
            return None
        if path.column is None:
            # A whole super column
            if path.super_column is None:
                raise RpcError("column parameter is not optional")
            columns = self._sorted_cells(parent, _validator_for(cf_def.subcomparator_type), now_micros())
            return SuperColumn(name=path.super_column, columns=columns) if columns else None
        cell = parent.get(path.column)
        if cell is None or not _is_live(cell, now_micros()):
            return None
        return cell

    def get_row(self, column_family: str, key: bytes, super_column: bytes | None = None,
                count: int = 100) -> list[Cell]:
        path = ColumnPath(column_family=column_family, key=key, super_column=super_column)
        cf_def, parent = self._lookup_parent(path)
        if parent is None:
            return []
        if super_column is not None:
            subcomparator = _validator_for(cf_def.subcomparator_type)
            return list(self._sorted_cells(parent, subcomparator, now_micros()))[:count]
        return self._pack_row(cf_def, parent, count)

    def get_slice(self, column_family: str, key_range: KeyRange) -> list[KeySlice]:
        cf_def = self._lookup_cf(column_family)
        data = self._cf_data(cf_def)
        key_validator = _validator_for(cf_def.key_validation_class)
        start = key_validator.sort_key(key_range.start_key) if key_range.start_key else None
        end = key_validator.sort_key(key_range.end_key) if key_range.end_key else None
        out = []
        for key in sorted(data, key=key_validator.sort_key):
            if start is not None and key_validator.sort_key(key) < start:
                continue
            if end is not None and key_validator.sort_key(key) > end:
                break
            cells = self._pack_row(cf_def, data[key])
            if not cells:
                continue
            out.append(KeySlice(key=key, columns=cells))
            if len(out) >= key_range.count:
                break
        return out

    def get_indexed_slices(self, column_family: str, expressions: list[IndexExpression],
                           count: int = 100) -> list[KeySlice]:
        cf_def = self._lookup_cf(column_family)
        if cf_def.is_super:
            raise RpcError("Secondary indexes are not supported on super column families")
        has_indexed_eq = False
        for expr in expressions:
            column_def = cf_def.get_column(expr.column_name)
            if expr.op == "eq" and column_def is not None and column_def.index_type == KEYS_INDEX:
                has_indexed_eq = True
        if not has_indexed_eq:
            raise RpcError("No indexed columns present in index clause with operator EQ")

        now = now_micros()
        out = []
        data = self._cf_data(cf_def)
        for key in sorted(data, key=_validator_for(cf_def.key_validation_class).sort_key):
            row = data[key]
            if all(self._matches(cf_def, row, expr, now) for expr in expressions):
                out.append(KeySlice(key=key, columns=self._pack_row(cf_def, row)))
                if len(out) >= count:
                    break
        return out

    @staticmethod
    def _matches(cf_def: CfDef, row: dict, expr: IndexExpression, now: int) -> bool:
        cell = row.get(expr.column_name)
        if cell is None or not _is_live(cell, now) or not isinstance(cell, Column):
            return False
        column_def = cf_def.get_column(expr.column_name)
        validator = _validator_for(column_def.validation_class if column_def else cf_def.default_validation_class)
        return _COMPARE_OPS[expr.op](validator.sort_key(cell.value), validator.sort_key(expr.value))

    def remove_column(self, path: ColumnPath) -> None:
        cf_def = self._lookup_cf(path.column_family)
        data = self._cf_data(cf_def)
        if path.super_column is None and path.column is None:
            data.pop(path.key, None)
            return
        if path.column is None:
            row = data.get(path.key)
            if row is not None:
                row.pop(path.super_column, None)
            return
        _, parent = self._lookup_parent(path)
        if parent is not None:
            parent.pop(path.column, None)

    def add_to_counter(self, path: ColumnPath, delta: int) -> None:
        if not path.column:
            raise RpcError("invalid column name")
        cf_def = self._lookup_cf(path.column_family)
        if not self._is_counter_cf(cf_def, path.column):
            raise RpcError(f"invalid operation for non commutative columnfamily {cf_def.name}")
        _, parent = self._lookup_parent(path, make=True)
        current = parent.get(path.column)
        total = (current.value if isinstance(current, CounterColumn) else 0) + delta
        parent[path.column] = CounterColumn(name=path.column, value=total)

    def truncate(self, column_family: str) -> None:
        cf_def = self._lookup_cf(column_family)
        self._cf_data(cf_def).clear()

    # --- schema ---

    def schema_code(self) -> str:
        self._generation += 1
        serialized = repr((self._generation, sorted(
            (repr(ks_def) for ks_def in self._keyspaces.values())
        )))
        return make_version_code(serialized.encode("utf-8"))

    def create_keyspace(self, ks_def: KsDef) -> str:
        self._require_connected()
        if find_keyspace(list(self._keyspaces.values()), ks_def.name) is not None:
            raise RpcError(f"Keyspace {ks_def.name} already exists")
        ks_def = ks_def.copy()
        for cf_def in ks_def.cf_defs:
            cf_def.keyspace = ks_def.name
        self._keyspaces[ks_def.name] = ks_def
        logger.debug("created keyspace %s", ks_def.name)
        return self.schema_code()

    def update_keyspace(self, ks_def: KsDef) -> str:
        self._require_connected()
        if ks_def.name not in self._keyspaces:
            raise RpcError(f"Keyspace {ks_def.name} does not exist")
        old = self._keyspaces[ks_def.name]
        updated = ks_def.copy()
        # column families are not changed through a keyspace update
        updated.cf_defs = old.cf_defs
        self._keyspaces[ks_def.name] = updated
        logger.debug("updated keyspace %s", ks_def.name)
        return self.schema_code()

    def drop_keyspace(self, name: str) -> str:
        self._require_connected()
        if name not in self._keyspaces:
            raise RpcError(f"Keyspace {name} does not exist")
        del self._keyspaces[name]
        self._data.pop(name, None)
        if self._keyspace == name:
            self._keyspace = None
        logger.debug("dropped keyspace %s", name)
        return self.schema_code()

    def create_column_family(self, cf_def: CfDef) -> str:
        ks_def = self._current_keyspace()
        if ks_def.find_cf(cf_def.name) is not None:
            raise RpcError(f"{cf_def.name} already exists in keyspace {ks_def.name}")
        cf_def = cf_def.copy()
        cf_def.keyspace = ks_def.name
        ks_def.cf_defs.append(cf_def)
        logger.debug("created column family %s.%s", ks_def.name, cf_def.name)
        return self.schema_code()

    def update_column_family(self, cf_def: CfDef) -> str:
        old = self._lookup_cf(cf_def.name)
        for attr in ("column_type", "comparator_type", "subcomparator_type"):
            if getattr(cf_def, attr) != getattr(old, attr):
                raise RpcError(f"can't change {attr}")
        ks_def = self._current_keyspace()
        ks_def.cf_defs = [cf_def.copy() if c.name == old.name else c for c in ks_def.cf_defs]
        logger.debug("updated column family %s.%s", ks_def.name, cf_def.name)
        return self.schema_code()

    def drop_column_family(self, name: str) -> str:
        ks_def = self._current_keyspace()
        remaining = [cf_def for cf_def in ks_def.cf_defs if cf_def.name != name]
        if len(remaining) == len(ks_def.cf_defs):
            raise RpcError(f"CF is not defined in that keyspace: {name}")
        ks_def.cf_defs = remaining
        self._data.get(ks_def.name, {}).pop(name, None)
        logger.debug("dropped column family %s.%s", ks_def.name, name)
        return self.schema_code()

    def drop_index(self, column_family: str, column: bytes) -> str:
        cf_def = self._lookup_cf(column_family)
        column_def = cf_def.get_column(column)
        if column_def is None or not column_def.is_indexed:
            raise RpcError(f"No index found on column 0x{column.hex()} of {column_family}")
        column_def.index_type = None
        column_def.index_name = None
        logger.debug("dropped index on %s.%s", column_family, column.hex())
        return self.schema_code()

    # --- introspection ---

    def describe_schema(self) -> list[KsDef]:
        self._require_connected()
        return [ks_def.copy() for ks_def in sorted(self._keyspaces.values(), key=lambda k: k.name)]

    def describe_keyspace(self, name: str) -> KsDef | None:
        self._require_connected()
        ks_def = find_keyspace(list(self._keyspaces.values()), name)
        return ks_def.copy() if ks_def is not None else None

    def describe_cluster_name(self) -> str:
        self._require_connected()
        return self.cluster_name

    def describe_version(self) -> str:
        self._require_connected()
        return API_VERSION

    def describe_schema_versions(self) -> dict[str, list[str]]:
        self._require_connected()
        serialized = repr(sorted(repr(ks_def) for ks_def in self._keyspaces.values()))
        return {make_version_code(serialized.encode("utf-8")): [LOCAL_ADDRESS]}

    def describe_partitioner(self) -> str:
        return PARTITIONER

    def describe_snitch(self) -> str:
        return SNITCH
