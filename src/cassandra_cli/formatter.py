"""Rendering of command outcomes and errors as output text."""

from __future__ import annotations

import os

from cassandra_cli.errors import CliError, LiteralTypeError
from cassandra_cli.executor import (
    AssumeOutcome,
    CellsOutcome,
    ClusterOutcome,
    ColumnOutcome,
    CountOutcome,
    CounterOutcome,
    DisplayCell,
    DisplaySuperColumn,
    ExitOutcome,
    InsertOutcome,
    KeyspacesOutcome,
    NotFoundOutcome,
    Outcome,
    RemoveOutcome,
    RowsOutcome,
    SchemaOutcome,
    TextOutcome,
    TruncateOutcome,
    UseOutcome,
)
from cassandra_cli.literals import LiteralResolver
from cassandra_cli.schema import CfDef, KsDef
from cassandra_cli.types import Validator

ROW_SEPARATOR = "-------------------"
SUB_COLUMN_INDENT = "     "


def format_cell(cell: DisplayCell) -> str:
    """Render one column as ``(column=..., value=..., timestamp=...)``."""
    if cell.counter:
        return f"(counter={cell.name}, value={cell.value})"
    text = f"(column={cell.name}, value={cell.value}, timestamp={cell.timestamp}"
    if cell.ttl:
        text += f", ttl={cell.ttl}"
    return text + ")"


class OutputFormatter:
    """Formats outcomes into the exact text shown to the user."""

    def __init__(self, linesep: str = os.linesep) -> None:
        self.linesep = linesep

    def _block(self, lines: list[str]) -> str:
        return "".join(line + self.linesep for line in lines)

    def format(self, outcome: Outcome) -> str:
        """Render an outcome; every line ends with the line separator."""
        return self._block(self.lines(outcome))

    def format_error(self, error: Exception) -> str:
        """Render an error as a single line, e.g. ``Schema error: ...``.

        Errors outside the ``CliError`` taxonomy are reported as ``Error: ...``.
        """
        kind = error.kind if isinstance(error, CliError) else "error"
        message = str(error).replace("\r", "\\r").replace("\n", "\\n")
        return f"{kind.capitalize()}: {message}{self.linesep}"

    def lines(self, outcome: Outcome) -> list[str]:
        if isinstance(outcome, InsertOutcome):
            return ["Value inserted."]
        elif isinstance(outcome, CounterOutcome):
            return ["Value decremented." if outcome.decrement else "Value incremented."]
        elif isinstance(outcome, NotFoundOutcome):
            return ["Value was not found"]
        elif isinstance(outcome, ColumnOutcome):
            return [f"=> {format_cell(outcome.cell)}"]
        elif isinstance(outcome, CellsOutcome):
            lines = self._cell_lines(outcome.cells)
            lines.append(f"Returned {len(outcome.cells)} results.")
            return lines
        elif isinstance(outcome, RowsOutcome):
            return self._row_lines(outcome)
        elif isinstance(outcome, SchemaOutcome):
            return [outcome.version]
        elif isinstance(outcome, UseOutcome):
            return [f"Authenticated to keyspace: {outcome.keyspace}"]
        elif isinstance(outcome, AssumeOutcome):
            return [f"Assumption for column family '{outcome.column_family}' added successfully."]
        elif isinstance(outcome, TruncateOutcome):
            return [f"{outcome.column_family} truncated."]
        elif isinstance(outcome, RemoveOutcome):
            return [f"{outcome.what} removed."]
        elif isinstance(outcome, CountOutcome):
            return [f"{outcome.count} columns"]
        elif isinstance(outcome, ClusterOutcome):
            return self._cluster_lines(outcome)
        elif isinstance(outcome, KeyspacesOutcome):
            lines = []
            for ks_def in outcome.keyspaces:
                lines.extend(self._keyspace_lines(ks_def))
            return lines
        elif isinstance(outcome, TextOutcome):
            return outcome.text.split("\n")
        elif isinstance(outcome, ExitOutcome):
            return []
        else:
            raise ValueError(f"Unknown outcome type: {type(outcome)}")

    # --- data ---

    def _cell_lines(self, cells: list[DisplayCell | DisplaySuperColumn]) -> list[str]:
        lines = []
        for cell in cells:
            if isinstance(cell, DisplaySuperColumn):
                text = f"=> (super_column={cell.name},"
                for sub in cell.cells:
                    text += f"{self.linesep}{SUB_COLUMN_INDENT}{format_cell(sub)}"
                lines.append(text + ")")
            else:
                lines.append(f"=> {format_cell(cell)}")
        return lines

    def _row_lines(self, outcome: RowsOutcome) -> list[str]:
        lines = []
        for row in outcome.rows:
            lines.append(ROW_SEPARATOR)
            lines.append(f"RowKey: {row.key}")
            lines.extend(self._cell_lines(row.cells))
        count = len(outcome.rows)
        lines.append("")
        lines.append(f"{count} Row{'' if count == 1 else 's'} Returned.")
        return lines

    # --- describe ---

    @staticmethod
    def _cluster_lines(outcome: ClusterOutcome) -> list[str]:
        lines = [
            "Cluster Information:",
            f"   Snitch: {outcome.snitch}",
            f"   Partitioner: {outcome.partitioner}",
            "   Schema versions: ",
        ]
        for version, hosts in outcome.schema_versions.items():
            lines.append(f"\t{version}: [{', '.join(hosts)}]")
        return lines

    def _keyspace_lines(self, ks_def: KsDef) -> list[str]:
        options = ", ".join(f"{k}:{v}" for k, v in ks_def.strategy_options.items())
        lines = [
            f"Keyspace: {ks_def.name}:",
            f"  Replication Strategy: {ks_def.strategy_class}",
            f"  Durable Writes: {str(ks_def.durable_writes).lower()}",
            f"    Options: [{options}]",
            "  Column Families:",
        ]
        for cf_def in ks_def.cf_defs:
            lines.extend(self._column_family_lines(cf_def))
        return lines

    @staticmethod
    def _column_family_lines(cf_def: CfDef) -> list[str]:
        resolver = LiteralResolver(cf_def)
        sorted_by = resolver.comparator().class_name
        if cf_def.is_super:
            sorted_by += f"/{resolver.subcomparator().class_name}"
        lines = [
            f"    ColumnFamily: {cf_def.name}{' (Super)' if cf_def.is_super else ''}",
            f"      Key Validation Class: {resolver.key_validator().class_name}",
            f"      Default column value validator: {resolver.value_validator(None).class_name}",
            f"      Columns sorted by: {sorted_by}",
        ]
        if cf_def.comment:
            lines.append(f"      Comment: {cf_def.comment}")
        for name, value in sorted(cf_def.options.items()):
            lines.append(f"      {name}: {value}")
        if cf_def.column_metadata:
            lines.append("      Column Metadata:")
            for column_def in cf_def.column_metadata:
                try:
                    name = resolver.display_column(column_def.name)
                except LiteralTypeError:
                    name = Validator.BYTES.decode(column_def.name)
                lines.append(f"        Column Name: {name}")
                lines.append(f"          Validation Class: {column_def.validation_class}")
                if column_def.is_indexed:
                    lines.append(f"          Index Name: {column_def.index_name or ''}")
                    lines.append(f"          Index Type: {column_def.index_type}")
        return lines
