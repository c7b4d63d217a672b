"""Interpreter session: parse, execute and report one statement at a time."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import TextIO

from cassandra_cli.client import RpcClient
from cassandra_cli.errors import CliError, StateError
from cassandra_cli.executor import CommandExecutor, ExitOutcome, Outcome
from cassandra_cli.formatter import OutputFormatter
from cassandra_cli.parsing import CliParser
from cassandra_cli.types import Validator

logger = logging.getLogger(__name__)


@dataclass
class StatementResult:
    """What happened to one statement: an outcome or an error, never both."""

    statement: str
    outcome: Outcome | None = None
    error: Exception | None = None
    text: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def exit_requested(self) -> bool:
        return isinstance(self.outcome, ExitOutcome)


class Session:
    """Holds the RPC client, the current keyspace and session-local assumptions.

    Results are written to ``out``, errors to ``err``. A failing statement
    writes one message to ``err`` and leaves the session as it was.
    """

    def __init__(self, client: RpcClient, out: TextIO | None = None, err: TextIO | None = None,
                 linesep: str = os.linesep) -> None:
        self.client = client
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.keyspace: str | None = None
        self.host: str | None = None
        self.port: int | None = None
        # (keyspace, column family) -> assume kind -> validator
        self._assumptions: dict[tuple[str, str], dict[str, Validator]] = {}
        self.parser = CliParser()
        self.executor = CommandExecutor(self)
        self.formatter = OutputFormatter(linesep)

    # --- lifecycle ---

    def connect(self, host: str, port: int) -> None:
        """Connect (or reconnect) the client; the keyspace selection is reset.

        If the connection attempt fails the session ends up disconnected
        with no keyspace selected.
        """
        if self.client.connected:
            self.client.close()
        try:
            self.client.connect(host, port)
        except Exception:
            self.keyspace = None
            self._assumptions.clear()
            raise
        self.host, self.port = host, port
        self.keyspace = None
        logger.info("connected to %s/%d", host, port)

    def close(self) -> None:
        """Release the client and drop all session state."""
        if self.client.connected:
            self.client.close()
            logger.info("disconnected from %s/%s", self.host, self.port)
        self.keyspace = None
        self._assumptions.clear()

    @property
    def connected(self) -> bool:
        return self.client.connected

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --- state checks ---

    def require_connected(self) -> None:
        if not self.client.connected:
            raise StateError("Not connected to a cassandra instance.")

    def require_keyspace(self) -> str:
        self.require_connected()
        if self.keyspace is None:
            raise StateError("Not authenticated to a working keyspace.")
        return self.keyspace

    # --- assumptions ---

    def assumptions_for(self, keyspace: str, column_family: str) -> dict[str, Validator]:
        return dict(self._assumptions.get((keyspace, column_family), {}))

    def add_assumption(self, keyspace: str, column_family: str, kind: str, validator: Validator) -> None:
        self._assumptions.setdefault((keyspace, column_family), {})[kind] = validator
        logger.debug("assume %s.%s %s as %s", keyspace, column_family, kind, validator.class_name)

    # --- statements ---

    def execute(self, statement: str) -> StatementResult:
        """Parse, execute and render a statement without writing to the sinks."""
        try:
            command = self.parser.parse(statement)
            outcome = self.executor.execute(command)
            text = self.formatter.format(outcome)
        except CliError as e:
            logger.debug("statement failed: %s", statement, exc_info=True)
            return StatementResult(statement, error=e, text=self.formatter.format_error(e))
        except Exception as e:
            # Anything outside the error taxonomy still ends at the statement
            logger.debug("unexpected failure processing statement: %s", statement, exc_info=True)
            return StatementResult(statement, error=e, text=self.formatter.format_error(e))
        return StatementResult(statement, outcome=outcome, text=text)

    def process_statement(self, statement: str) -> StatementResult:
        """Execute a statement and write its result to the output or error sink."""
        result = self.execute(statement)
        sink = self.out if result.ok else self.err
        if result.text:
            sink.write(result.text)
            sink.flush()
        return result
