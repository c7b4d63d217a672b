"""Error taxonomy for the command-line interpreter.

Every error raised while processing a statement derives from ``CliError``;
the session catches them at the statement boundary and reports the message
on the error sink.
"""

from __future__ import annotations


class CliError(Exception):
    """Base class for statement-level failures."""

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ParseError(CliError):
    """Malformed statement text."""

    kind = "syntax error"

    def __init__(self, message: str, fragment: str | None = None) -> None:
        super().__init__(message)
        self.fragment = fragment


class SchemaError(CliError):
    """Unknown keyspace, column family, column or validator, or a duplicate create."""

    kind = "schema error"


class LiteralTypeError(CliError):
    """A literal (or stored value) that the resolved validator cannot accept."""

    kind = "type error"


class RpcError(CliError):
    """Transport failure or an application-level rejection by the server."""

    kind = "rpc error"


class StateError(CliError):
    """The session is not in a state that accepts the command."""

    kind = "state error"
