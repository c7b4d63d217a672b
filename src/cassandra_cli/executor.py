"""Command dispatcher: executes parsed commands against the RPC client."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from cassandra_cli import help as cli_help
from cassandra_cli.client import (
    Cell,
    Column,
    ColumnPath,
    CounterColumn,
    IndexExpression,
    KeyRange,
    KeySlice,
    SuperColumn,
)
from cassandra_cli.errors import ParseError, SchemaError, StateError
from cassandra_cli.literals import LiteralResolver, check_assume_kind, literal_text, resolve_value
from cassandra_cli.parsing.cli_parser import (
    AssumeCommand,
    ColumnRef,
    Command,
    ConnectCommand,
    CountCommand,
    CreateColumnFamilyCommand,
    CreateKeyspaceCommand,
    DecrCommand,
    DelCommand,
    DescribeCommand,
    DropColumnFamilyCommand,
    DropIndexCommand,
    DropKeyspaceCommand,
    ExitCommand,
    GetCommand,
    GetWhereCommand,
    HelpCommand,
    IncrCommand,
    ListCommand,
    SetCommand,
    ShowCommand,
    TruncateCommand,
    UpdateColumnFamilyCommand,
    UpdateKeyspaceCommand,
    UseCommand,
)
from cassandra_cli.schema import KEYS_INDEX, STANDARD, SUPER, CfDef, ColumnDef, KsDef, find_keyspace
from cassandra_cli.types import REGISTRY

if TYPE_CHECKING:
    from cassandra_cli.session import Session

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 100
DEFAULT_GET_LIMIT = 1_000_000

# Column family tuning attributes passed through to the store as-is
CF_OPTIONS = frozenset({
    "rows_cached",
    "keys_cached",
    "read_repair_chance",
    "gc_grace",
    "min_compaction_threshold",
    "max_compaction_threshold",
    "replicate_on_write",
    "memtable_throughput",
    "memtable_operations",
    "memtable_flush_after",
})

COLUMN_DEF_KEYS = frozenset({"column_name", "validation_class", "index_type", "index_name"})


# --- outcomes ---


@dataclass
class DisplayCell:
    """A column rendered to display text."""

    name: str
    value: str
    timestamp: int | None = None
    ttl: int | None = None
    counter: bool = False


@dataclass
class DisplaySuperColumn:
    name: str
    cells: list[DisplayCell] = field(default_factory=list)


@dataclass
class DisplayRow:
    key: str
    cells: list[DisplayCell | DisplaySuperColumn] = field(default_factory=list)


@dataclass
class Outcome:
    """Result of executing a command."""

    pass


@dataclass
class UseOutcome(Outcome):
    keyspace: str = ""


@dataclass
class SchemaOutcome(Outcome):
    """A schema mutation, carrying the new schema version token."""

    version: str = ""


@dataclass
class AssumeOutcome(Outcome):
    column_family: str = ""


@dataclass
class InsertOutcome(Outcome):
    pass


@dataclass
class CounterOutcome(Outcome):
    decrement: bool = False


@dataclass
class ColumnOutcome(Outcome):
    cell: DisplayCell | None = None


@dataclass
class NotFoundOutcome(Outcome):
    pass


@dataclass
class CellsOutcome(Outcome):
    """Columns (or super columns) of a single row."""

    cells: list[DisplayCell | DisplaySuperColumn] = field(default_factory=list)


@dataclass
class RowsOutcome(Outcome):
    """Rows returned by a range or index scan."""

    rows: list[DisplayRow] = field(default_factory=list)


@dataclass
class RemoveOutcome(Outcome):
    what: str = "column"


@dataclass
class CountOutcome(Outcome):
    count: int = 0


@dataclass
class TruncateOutcome(Outcome):
    column_family: str = ""


@dataclass
class ClusterOutcome(Outcome):
    snitch: str = ""
    partitioner: str = ""
    schema_versions: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class KeyspacesOutcome(Outcome):
    keyspaces: list[KsDef] = field(default_factory=list)


@dataclass
class TextOutcome(Outcome):
    text: str = ""


@dataclass
class ExitOutcome(Outcome):
    pass


def _parse_bool(name: str, value: Any) -> bool:
    text = str(value).lower()
    if text in ("true", "1"):
        return True
    if text in ("false", "0"):
        return False
    raise SchemaError(f"Attribute '{name}' expects true or false, got '{value}'")


def _flatten_options(name: str, value: Any) -> dict[str, str]:
    """Merge ``[{a:1, b:2}, {c:3}]`` (or a single hash) into one string map."""
    items = value if isinstance(value, list) else [value]
    options: dict[str, str] = {}
    for item in items:
        if not isinstance(item, dict):
            raise SchemaError(f"Attribute '{name}' expects a list of {{key:value}} hashes")
        for key, val in item.items():
            options[str(key)] = str(val)
    return options


class CommandExecutor:
    """Executes CLI commands for a session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    @property
    def client(self):
        return self.session.client

    def execute(self, command: Command) -> Outcome:
        """Execute a command and return its outcome."""
        logger.debug("executing %r", command)
        if isinstance(command, HelpCommand):
            return self._execute_help(command)
        elif isinstance(command, ConnectCommand):
            return self._execute_connect(command)
        elif isinstance(command, ExitCommand):
            self.session.close()
            return ExitOutcome()

        self.session.require_connected()
        if isinstance(command, UseCommand):
            return self._execute_use(command)
        elif isinstance(command, CreateKeyspaceCommand):
            return self._execute_create_keyspace(command)
        elif isinstance(command, UpdateKeyspaceCommand):
            return self._execute_update_keyspace(command)
        elif isinstance(command, DropKeyspaceCommand):
            return self._execute_drop_keyspace(command)
        elif isinstance(command, DescribeCommand):
            return self._execute_describe(command)
        elif isinstance(command, ShowCommand):
            return self._execute_show(command)

        self.session.require_keyspace()
        if isinstance(command, CreateColumnFamilyCommand):
            return self._execute_create_column_family(command)
        elif isinstance(command, UpdateColumnFamilyCommand):
            return self._execute_update_column_family(command)
        elif isinstance(command, DropColumnFamilyCommand):
            return self._execute_drop_column_family(command)
        elif isinstance(command, DropIndexCommand):
            return self._execute_drop_index(command)
        elif isinstance(command, AssumeCommand):
            return self._execute_assume(command)
        elif isinstance(command, SetCommand):
            return self._execute_set(command)
        elif isinstance(command, GetCommand):
            return self._execute_get(command)
        elif isinstance(command, GetWhereCommand):
            return self._execute_get_where(command)
        elif isinstance(command, DelCommand):
            return self._execute_del(command)
        elif isinstance(command, (IncrCommand, DecrCommand)):
            return self._execute_counter(command)
        elif isinstance(command, CountCommand):
            return self._execute_count(command)
        elif isinstance(command, ListCommand):
            return self._execute_list(command)
        elif isinstance(command, TruncateCommand):
            return self._execute_truncate(command)
        else:
            raise ValueError(f"Unknown command type: {type(command)}")

    # --- schema lookup ---

    def _keyspace_def(self) -> KsDef:
        keyspace = self.session.require_keyspace()
        ks_def = self.client.describe_keyspace(keyspace)
        if ks_def is None:
            raise SchemaError(f"Keyspace '{keyspace}' no longer exists")
        return ks_def

    def _resolver(self, column_family: str) -> LiteralResolver:
        ks_def = self._keyspace_def()
        cf_def = ks_def.get_cf(column_family)
        return LiteralResolver(cf_def, self.session.assumptions_for(ks_def.name, cf_def.name))

    def _column_path(self, ref: ColumnRef, resolver: LiteralResolver) -> ColumnPath:
        """Encode CF[key][...] into a ColumnPath against the CF's validators."""
        cf_def = resolver.cf_def
        path = ColumnPath(column_family=cf_def.name, key=resolver.encode_key(ref.key))
        if cf_def.is_super:
            if ref.columns:
                path.super_column = resolver.encode_super_column(ref.columns[0])
            if len(ref.columns) > 1:
                path.column = resolver.encode_column(ref.columns[1])
        else:
            if len(ref.columns) > 1:
                raise SchemaError(f"{cf_def.name} is not a super column family, only one column may be given")
            if ref.columns:
                path.column = resolver.encode_column(ref.columns[0])
        return path

    @staticmethod
    def _require_column(path: ColumnPath, cf_def: CfDef) -> None:
        if path.column is None:
            if cf_def.is_super:
                raise SchemaError(f"{cf_def.name} is a super column family, use {cf_def.name}[key][super][column]")
            raise SchemaError(f"A column name is required, use {cf_def.name}[key][column]")

    # --- display helpers ---

    @staticmethod
    def _display_cell(cell: Column | CounterColumn, resolver: LiteralResolver, as_type=None) -> DisplayCell:
        name = resolver.display_column(cell.name)
        if isinstance(cell, CounterColumn):
            return DisplayCell(name=name, value=str(cell.value), counter=True)
        return DisplayCell(
            name=name,
            value=resolver.display_value(cell.value, cell.name, as_type),
            timestamp=cell.timestamp,
            ttl=cell.ttl,
        )

    def _display_cells(self, cells: list[Cell], resolver: LiteralResolver,
                       as_type=None) -> list[DisplayCell | DisplaySuperColumn]:
        out: list[DisplayCell | DisplaySuperColumn] = []
        for cell in cells:
            if isinstance(cell, SuperColumn):
                out.append(DisplaySuperColumn(
                    name=resolver.display_super_column(cell.name),
                    cells=[self._display_cell(c, resolver, as_type) for c in cell.columns],
                ))
            else:
                out.append(self._display_cell(cell, resolver, as_type))
        return out

    def _display_rows(self, slices: list[KeySlice], resolver: LiteralResolver) -> RowsOutcome:
        return RowsOutcome(rows=[
            DisplayRow(key=resolver.display_key(s.key), cells=self._display_cells(s.columns, resolver))
            for s in slices
        ])

    # --- session commands ---

    def _execute_help(self, command: HelpCommand) -> TextOutcome:
        text = cli_help.help_text(command.topic)
        if text is None:
            topic = " ".join(command.topic)
            raise ParseError(f"No help for '{topic}'", topic)
        return TextOutcome(text=text)

    def _execute_connect(self, command: ConnectCommand) -> TextOutcome:
        self.session.connect(command.host, command.port)
        cluster = self.client.describe_cluster_name()
        return TextOutcome(text=f'Connected to: "{cluster}" on {command.host}/{command.port}')

    def _execute_use(self, command: UseCommand) -> UseOutcome:
        ks_def = find_keyspace(self.client.describe_schema(), command.keyspace)
        if ks_def is None:
            raise StateError(f"Keyspace {command.keyspace} not found.")
        self.client.set_keyspace(ks_def.name)
        self.session.keyspace = ks_def.name
        return UseOutcome(keyspace=ks_def.name)

    def _execute_assume(self, command: AssumeCommand) -> AssumeOutcome:
        ks_def = self._keyspace_def()
        cf_def = ks_def.get_cf(command.column_family)
        kind = check_assume_kind(command.kind)
        validator = REGISTRY.get_or_raise(command.type_name)
        self.session.add_assumption(ks_def.name, cf_def.name, kind, validator)
        return AssumeOutcome(column_family=cf_def.name)

    # --- keyspace schema ---

    def _apply_keyspace_properties(self, ks_def: KsDef, properties: dict[str, Any]) -> KsDef:
        for name, value in properties.items():
            if name == "placement_strategy":
                ks_def.strategy_class = str(value)
            elif name == "strategy_options":
                ks_def.strategy_options = _flatten_options(name, value)
            elif name == "replication_factor":
                ks_def.strategy_options["replication_factor"] = str(self._parse_int(name, value))
            elif name == "durable_writes":
                ks_def.durable_writes = _parse_bool(name, value)
            else:
                raise SchemaError(f"Unknown keyspace attribute '{name}'")
        return ks_def

    @staticmethod
    def _parse_int(name: str, value: Any) -> int:
        try:
            return int(str(value))
        except ValueError:
            raise SchemaError(f"Attribute '{name}' expects an integer, got '{value}'") from None

    def _execute_create_keyspace(self, command: CreateKeyspaceCommand) -> SchemaOutcome:
        if find_keyspace(self.client.describe_schema(), command.name) is not None:
            raise SchemaError(f"Keyspace '{command.name}' already exists")
        ks_def = self._apply_keyspace_properties(KsDef(name=command.name), command.properties)
        return SchemaOutcome(version=self.client.create_keyspace(ks_def))

    def _execute_update_keyspace(self, command: UpdateKeyspaceCommand) -> SchemaOutcome:
        existing = find_keyspace(self.client.describe_schema(), command.name)
        if existing is None:
            raise SchemaError(f"Keyspace '{command.name}' not found")
        ks_def = self._apply_keyspace_properties(existing.copy(), command.properties)
        return SchemaOutcome(version=self.client.update_keyspace(ks_def))

    def _execute_drop_keyspace(self, command: DropKeyspaceCommand) -> SchemaOutcome:
        existing = find_keyspace(self.client.describe_schema(), command.name)
        if existing is None:
            raise SchemaError(f"Keyspace '{command.name}' not found")
        version = self.client.drop_keyspace(existing.name)
        if self.session.keyspace == existing.name:
            self.session.keyspace = None
        return SchemaOutcome(version=version)

    # --- column family schema ---

    def _apply_cf_properties(self, cf_def: CfDef, properties: dict[str, Any]) -> CfDef:
        metadata = None
        for name, value in properties.items():
            if name == "column_type":
                column_type = str(value).capitalize()
                if column_type not in (STANDARD, SUPER):
                    raise SchemaError(f"column_type must be Standard or Super, got '{value}'")
                cf_def.column_type = column_type
            elif name == "comparator":
                cf_def.comparator_type = REGISTRY.get_or_raise(str(value)).class_name
            elif name == "subcomparator":
                cf_def.subcomparator_type = REGISTRY.get_or_raise(str(value)).class_name
            elif name == "default_validation_class":
                cf_def.default_validation_class = REGISTRY.get_or_raise(str(value)).class_name
            elif name == "key_validation_class":
                cf_def.key_validation_class = REGISTRY.get_or_raise(str(value)).class_name
            elif name == "comment":
                cf_def.comment = str(value)
            elif name == "column_metadata":
                metadata = value
            elif name in CF_OPTIONS:
                cf_def.options[name] = str(value)
            else:
                raise SchemaError(f"Unknown column family attribute '{name}'")

        if cf_def.subcomparator_type is not None and not cf_def.is_super:
            raise SchemaError("subcomparator is only valid for super column families")
        if metadata is not None:
            # Names are encoded with the (sub)comparator, so apply after it is known
            cf_def.column_metadata = self._column_defs(cf_def, metadata)
        return cf_def

    def _column_defs(self, cf_def: CfDef, metadata: Any) -> list[ColumnDef]:
        if not isinstance(metadata, list):
            raise SchemaError("column_metadata expects a list of {column_name:..., validation_class:...} hashes")
        name_validator = LiteralResolver(cf_def).column_name_validator()
        column_defs = []
        for entry in metadata:
            if not isinstance(entry, dict):
                raise SchemaError("column_metadata entries must be {key:value} hashes")
            attrs = {str(k).lower(): str(v) for k, v in entry.items()}
            unknown = set(attrs) - COLUMN_DEF_KEYS
            if unknown:
                raise SchemaError(f"Unknown column_metadata attribute '{sorted(unknown)[0]}'")
            if "column_name" not in attrs or "validation_class" not in attrs:
                raise SchemaError("column_metadata entries need column_name and validation_class")

            index_type = attrs.get("index_type")
            if index_type is not None:
                if index_type.upper() not in ("0", KEYS_INDEX):
                    raise SchemaError(f"Unsupported index_type '{index_type}', only KEYS (0) is supported")
                index_type = KEYS_INDEX
            column_defs.append(ColumnDef(
                name=name_validator.encode(attrs["column_name"]),
                validation_class=REGISTRY.get_or_raise(attrs["validation_class"]).class_name,
                index_type=index_type,
                index_name=attrs.get("index_name"),
            ))
        return column_defs

    def _execute_create_column_family(self, command: CreateColumnFamilyCommand) -> SchemaOutcome:
        ks_def = self._keyspace_def()
        if ks_def.find_cf(command.name) is not None:
            raise SchemaError(f"Column family '{command.name}' already exists in keyspace '{ks_def.name}'")
        cf_def = self._apply_cf_properties(CfDef(keyspace=ks_def.name, name=command.name), command.properties)
        return SchemaOutcome(version=self.client.create_column_family(cf_def))

    def _execute_update_column_family(self, command: UpdateColumnFamilyCommand) -> SchemaOutcome:
        cf_def = self._keyspace_def().get_cf(command.name).copy()
        cf_def = self._apply_cf_properties(cf_def, command.properties)
        return SchemaOutcome(version=self.client.update_column_family(cf_def))

    def _execute_drop_column_family(self, command: DropColumnFamilyCommand) -> SchemaOutcome:
        cf_def = self._keyspace_def().get_cf(command.name)
        return SchemaOutcome(version=self.client.drop_column_family(cf_def.name))

    def _execute_drop_index(self, command: DropIndexCommand) -> SchemaOutcome:
        resolver = self._resolver(command.column_family)
        cf_def = resolver.cf_def
        name = resolver.encode_column(command.column)
        column_def = cf_def.get_column(name)
        if column_def is None or not column_def.is_indexed:
            raise SchemaError(f"No index found on {cf_def.name}.{literal_text(command.column)}")
        return SchemaOutcome(version=self.client.drop_index(cf_def.name, name))

    # --- data ---

    def _execute_set(self, command: SetCommand) -> InsertOutcome:
        resolver = self._resolver(command.path.column_family)
        path = self._column_path(command.path, resolver)
        self._require_column(path, resolver.cf_def)
        value = resolver.encode_value(command.value, path.column)
        self.client.insert_column(path, value, command.ttl)
        return InsertOutcome()

    def _execute_get(self, command: GetCommand) -> Outcome:
        resolver = self._resolver(command.path.column_family)
        as_type = REGISTRY.get_or_raise(command.as_type) if command.as_type else None
        path = self._column_path(command.path, resolver)

        if path.column is None:
            cells = self.client.get_row(
                path.column_family, path.key, path.super_column, count=command.limit or DEFAULT_GET_LIMIT,
            )
            return CellsOutcome(cells=self._display_cells(cells, resolver, as_type))

        cell = self.client.get_column(path)
        if cell is None:
            return NotFoundOutcome()
        return ColumnOutcome(cell=self._display_cell(cell, resolver, as_type))

    def _execute_get_where(self, command: GetWhereCommand) -> RowsOutcome:
        resolver = self._resolver(command.column_family)
        expressions = []
        for condition in command.conditions:
            column = resolver.encode_column(condition.column)
            value = resolve_value(condition.value, resolver.value_validator(column))
            expressions.append(IndexExpression(column_name=column, op=condition.operator, value=value))
        slices = self.client.get_indexed_slices(
            resolver.cf_def.name, expressions, count=command.limit or DEFAULT_LIST_LIMIT,
        )
        return self._display_rows(slices, resolver)

    def _execute_del(self, command: DelCommand) -> RemoveOutcome:
        resolver = self._resolver(command.path.column_family)
        path = self._column_path(command.path, resolver)
        self.client.remove_column(path)
        if path.column is not None:
            return RemoveOutcome(what="column")
        if path.super_column is not None:
            return RemoveOutcome(what="super column")
        return RemoveOutcome(what="row")

    def _execute_counter(self, command: IncrCommand | DecrCommand) -> CounterOutcome:
        resolver = self._resolver(command.path.column_family)
        path = self._column_path(command.path, resolver)
        self._require_column(path, resolver.cf_def)
        decrement = isinstance(command, DecrCommand)
        delta = -command.by if decrement else command.by
        self.client.add_to_counter(path, delta)
        return CounterOutcome(decrement=decrement)

    def _execute_count(self, command: CountCommand) -> CountOutcome:
        resolver = self._resolver(command.path.column_family)
        path = self._column_path(command.path, resolver)
        if path.column is not None:
            raise SchemaError("count takes a row or a super column, not a single column")
        cells = self.client.get_row(path.column_family, path.key, path.super_column, count=DEFAULT_GET_LIMIT)
        return CountOutcome(count=len(cells))

    def _execute_list(self, command: ListCommand) -> RowsOutcome:
        resolver = self._resolver(command.column_family)
        key_range = KeyRange(
            start_key=resolver.encode_key(command.start) if command.start is not None else b"",
            end_key=resolver.encode_key(command.end) if command.end is not None else b"",
            count=command.limit or DEFAULT_LIST_LIMIT,
        )
        slices = self.client.get_slice(resolver.cf_def.name, key_range)
        return self._display_rows(slices, resolver)

    def _execute_truncate(self, command: TruncateCommand) -> TruncateOutcome:
        cf_def = self._keyspace_def().get_cf(command.column_family)
        self.client.truncate(cf_def.name)
        return TruncateOutcome(column_family=cf_def.name)

    # --- informational ---

    def _execute_describe(self, command: DescribeCommand) -> Outcome:
        if command.target == "cluster":
            return ClusterOutcome(
                snitch=self.client.describe_snitch(),
                partitioner=self.client.describe_partitioner(),
                schema_versions=self.client.describe_schema_versions(),
            )
        name = command.name or self.session.require_keyspace()
        ks_def = self.client.describe_keyspace(name)
        if ks_def is None:
            raise SchemaError(f"Keyspace '{name}' not found")
        return KeyspacesOutcome(keyspaces=[ks_def])

    def _execute_show(self, command: ShowCommand) -> Outcome:
        if command.what == "cluster name":
            return TextOutcome(text=self.client.describe_cluster_name())
        elif command.what == "api version":
            return TextOutcome(text=self.client.describe_version())
        return KeyspacesOutcome(keyspaces=self.client.describe_schema())
