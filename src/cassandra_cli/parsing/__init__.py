"""Parsing module for the CLI statement language."""

from cassandra_cli.parsing.cli_parser import (
    ColumnRef,
    Command,
    CliParser,
    FunctionCall,
    Literal,
)

__all__ = [
    "CliParser",
    "ColumnRef",
    "Command",
    "FunctionCall",
    "Literal",
]
