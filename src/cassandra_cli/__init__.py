"""Cassandra CLI - a command-line interpreter for column family stores."""

from cassandra_cli.client import RpcClient
from cassandra_cli.errors import (
    CliError,
    LiteralTypeError,
    ParseError,
    RpcError,
    SchemaError,
    StateError,
)
from cassandra_cli.memory import MemoryClient
from cassandra_cli.parsing import CliParser
from cassandra_cli.session import Session, StatementResult
from cassandra_cli.types import REGISTRY, Validator, ValidatorRegistry

__version__ = "0.8.0"

__all__ = [
    # Main API
    "Session",
    "StatementResult",
    "CliParser",
    # Clients
    "RpcClient",
    "MemoryClient",
    # Validators
    "Validator",
    "ValidatorRegistry",
    "REGISTRY",
    # Errors
    "CliError",
    "ParseError",
    "SchemaError",
    "LiteralTypeError",
    "RpcError",
    "StateError",
]
