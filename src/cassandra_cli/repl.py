"""Command-line entry point and interactive loop."""

from __future__ import annotations

import argparse
import logging
import readline  # noqa: F401 - enables line editing in input()
import sys
from pathlib import Path

from cassandra_cli.errors import CliError
from cassandra_cli.escape import escape
from cassandra_cli.memory import MemoryClient
from cassandra_cli.session import Session

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 9160

HISTORY_FILE = Path.home() / ".cassandra-cli_history"

# Statements accepted without a terminating semicolon at the prompt
_BARE_STATEMENTS = ("help", "?", "exit", "quit")


def _strip_comments(content: str) -> str:
    """Drop lines starting with --."""
    return "\n".join(line for line in content.split("\n") if not line.strip().startswith("--"))


def split_statements(content: str) -> list[str]:
    """Split content into statements on semicolons outside quoted strings.

    The terminating semicolon is kept so each statement can be echoed as
    written. Lines starting with ``--`` are comments.
    """
    return _split(content)[0]


def _split(content: str) -> tuple[list[str], bool]:
    """Return the statements and whether the input ends inside a quoted string."""
    content = _strip_comments(content)
    statements = []
    current: list[str] = []
    quote: str | None = None
    escape_next = False

    for ch in content:
        current.append(ch)
        if escape_next:
            escape_next = False
        elif quote is not None:
            if ch == "\\":
                escape_next = True
            elif ch == quote:
                quote = None
        elif ch in "'\"":
            quote = ch
        elif ch == ";":
            stmt = "".join(current).strip()
            if stmt != ";":
                statements.append(stmt)
            current = []

    stmt = "".join(current).strip()
    if stmt:
        statements.append(stmt)
    return statements, quote is not None


def is_complete(buffer: str) -> bool:
    """Check whether the buffered input holds a full statement."""
    stripped = buffer.strip()
    if not stripped:
        return False
    if stripped.lower() in _BARE_STATEMENTS:
        return True
    statements, in_quote = _split(stripped)
    return not in_quote and bool(statements) and statements[-1].endswith(";")


def prompt(session: Session) -> str:
    return f"[default@{session.keyspace or 'unknown'}] "


def run_statements(session: Session, statements: list[str], verbose: bool = False,
                   batch: bool = False) -> int:
    """Process statements in order.

    Returns 0 when all succeed, 1 otherwise. In batch mode processing stops
    at the first failure.
    """
    status = 0
    for statement in statements:
        if verbose:
            for i, line in enumerate(statement.split("\n")):
                prefix = prompt(session) if i == 0 else "...\t"
                session.out.write(f"{prefix}{line}\n")
        result = session.process_statement(statement)
        if not result.ok:
            status = 1
            if batch:
                break
        if result.exit_requested:
            break
    return status


def run_file(session: Session, file_path: Path, verbose: bool = False, batch: bool = False) -> int:
    """Execute statements from a file."""
    try:
        content = file_path.read_text()
    except OSError as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        return 1

    statements = split_statements(content)
    if not statements:
        print("No statements found in file", file=sys.stderr)
        return 1
    return run_statements(session, statements, verbose=verbose, batch=batch)


def run_repl(session: Session) -> int:
    """Run the interactive loop until exit, quit or end of input."""
    print("Welcome to the Cassandra CLI.\n")
    print("Type 'help;' or '?' for help.")
    print("Type 'quit;' or 'exit;' to quit.\n")

    try:
        readline.read_history_file(HISTORY_FILE)
    except (FileNotFoundError, OSError):
        pass

    buffer = ""
    try:
        while True:
            try:
                line = input(prompt(session) if not buffer else "...\t")
            except EOFError:
                print()
                break
            except KeyboardInterrupt:
                print()
                buffer = ""
                continue

            buffer = f"{buffer}\n{line}" if buffer else line
            if not buffer.strip():
                buffer = ""
                continue
            if not is_complete(buffer):
                continue

            statements = split_statements(buffer)
            buffer = ""
            result = None
            for statement in statements:
                result = session.process_statement(statement)
                if result.exit_requested:
                    break
            if result is not None and result.exit_requested:
                break
    finally:
        try:
            readline.write_history_file(HISTORY_FILE)
        except OSError:
            pass
        session.close()

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        prog="cassandra-cli",
        description="Command-line interface for a column family store",
    )
    arg_parser.add_argument(
        "--host", "-H",
        default=DEFAULT_HOST,
        help=f"Host to connect to (default: {DEFAULT_HOST})",
    )
    arg_parser.add_argument(
        "--port", "-p",
        type=int,
        default=DEFAULT_PORT,
        help=f"RPC port to connect to (default: {DEFAULT_PORT})",
    )
    arg_parser.add_argument(
        "-k", "--keyspace",
        help="Keyspace to use after connecting",
    )
    arg_parser.add_argument(
        "-c", "--command",
        type=str,
        help="Execute the given statements and exit",
    )
    arg_parser.add_argument(
        "-f", "--file",
        type=Path,
        help="Execute statements from a file and exit",
    )
    arg_parser.add_argument(
        "-B", "--batch",
        action="store_true",
        help="Stop at the first failing statement (for -f/--file and -c/--command)",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print each statement before executing (for -f/--file)",
    )
    arg_parser.add_argument(
        "--debug",
        action="store_true",
        help="Log client calls and print tracebacks of failing statements",
    )

    args = arg_parser.parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    session = Session(MemoryClient())
    try:
        session.connect(args.host, args.port)
    except CliError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.keyspace:
        result = session.process_statement(f"use '{escape(args.keyspace)}';")
        if not result.ok:
            session.close()
            return 1

    if args.file:
        if not args.file.exists():
            print(f"Error: File not found: {args.file}", file=sys.stderr)
            return 1
        with session:
            return run_file(session, args.file, args.verbose, args.batch)

    if args.command:
        with session:
            return run_statements(session, split_statements(args.command), args.verbose, args.batch)

    if not sys.stdin.isatty():
        with session:
            return run_statements(session, split_statements(sys.stdin.read()), args.verbose, args.batch)

    return run_repl(session)


if __name__ == "__main__":
    sys.exit(main())
