"""Tests for the command-line entry point."""

import io
import os
from pathlib import Path

import pytest

from cassandra_cli.memory import MemoryClient
from cassandra_cli.repl import is_complete, main, run_file, run_statements, split_statements
from cassandra_cli.session import Session


@pytest.fixture
def session():
    session = Session(MemoryClient(), out=io.StringIO(), err=io.StringIO())
    session.connect("localhost", 9160)
    return session


class TestHelperFunctions:
    """Tests for statement splitting and completion."""

    def test_split_on_semicolons(self):
        assert split_statements("use Ks; get CF[a][b];") == ["use Ks;", "get CF[a][b];"]

    def test_split_keeps_quoted_semicolons(self):
        assert split_statements("set CF[a][b] = 'x;y'; get CF[a][b];") == [
            "set CF[a][b] = 'x;y';",
            "get CF[a][b];",
        ]

    def test_split_handles_escaped_quotes(self):
        assert split_statements("set CF['k\\';'][b] = v; list CF;") == [
            "set CF['k\\';'][b] = v;",
            "list CF;",
        ]

    def test_split_skips_comments(self):
        content = "-- a comment; with a semicolon\nuse Ks;\n  -- another\nlist CF;"
        assert split_statements(content) == ["use Ks;", "list CF;"]

    def test_split_trailing_statement_without_semicolon(self):
        assert split_statements("use Ks; show keyspaces") == ["use Ks;", "show keyspaces"]

    def test_split_ignores_empty_statements(self):
        assert split_statements(";; use Ks;;") == ["use Ks;"]

    def test_is_complete(self):
        assert is_complete("use Ks;")
        assert not is_complete("create column family CF1")
        assert is_complete("create column family CF1\n with comparator=UTF8Type;")
        assert not is_complete("set CF[a][b] = 'x;")
        assert is_complete("help")
        assert is_complete("?")
        assert not is_complete("   ")


class TestRunStatements:
    def test_runs_in_order(self, session):
        status = run_statements(session, ["create keyspace Ks;", "use Ks;", "create column family CF;"])
        assert status == 0
        assert session.keyspace == "Ks"

    def test_continues_after_error(self, session):
        status = run_statements(session, ["use Nope;", "create keyspace Ks;"])
        assert status == 1
        assert session.client.describe_keyspace("Ks") is not None

    def test_batch_stops_at_first_error(self, session):
        status = run_statements(session, ["use Nope;", "create keyspace Ks;"], batch=True)
        assert status == 1
        assert session.client.describe_keyspace("Ks") is None

    def test_stops_at_exit(self, session):
        run_statements(session, ["exit;", "create keyspace Ks;"])
        assert not session.connected

    def test_verbose_echo(self, session):
        run_statements(session, ["show cluster name;"], verbose=True)
        out = session.out.getvalue()
        assert out.startswith("[default@unknown] show cluster name;")


class TestRunFile:
    """Tests for file execution."""

    def test_run_file(self, session, tmp_path: Path):
        script = tmp_path / "schema.txt"
        script.write_text(
            "-- Create a keyspace\n"
            "create keyspace Ks;\n"
            "use Ks;\n"
            "create column family Users with comparator = UTF8Type\n"
            "    and column_metadata = [{column_name: age, validation_class: LongType}];\n"
            "set Users[jsmith][age] = 42;\n"
            "get Users[jsmith][age];\n"
        )

        assert run_file(session, script) == 0
        out = session.out.getvalue()
        assert "Value inserted." + os.linesep in out
        assert "=> (column=age, value=42, timestamp=" in out

    def test_run_file_empty(self, session, tmp_path: Path):
        script = tmp_path / "empty.txt"
        script.write_text("-- nothing here\n")
        assert run_file(session, script) == 1

    def test_run_file_missing(self, session, tmp_path: Path):
        assert run_file(session, tmp_path / "missing.txt") == 1


class TestMain:
    def test_command(self, capsys):
        assert main(["-c", "create keyspace Ks; use Ks; show cluster name;"]) == 0
        out = capsys.readouterr().out
        assert "Authenticated to keyspace: Ks" in out
        assert "Test Cluster" in out

    def test_command_error_status(self, capsys):
        assert main(["-c", "use Nope;"]) == 1
        assert "Keyspace Nope not found." in capsys.readouterr().err

    def test_unknown_keyspace_option(self, capsys):
        assert main(["-k", "Nope", "-c", "show keyspaces;"]) == 1

    def test_file(self, tmp_path: Path, capsys):
        script = tmp_path / "script.txt"
        script.write_text("create keyspace Ks;\nuse Ks;\ncreate column family CF;\nset CF[a][00] = v;\n")
        assert main(["-f", str(script), "--batch"]) == 0
        assert "Value inserted." in capsys.readouterr().out

    def test_file_not_found(self, tmp_path: Path, capsys):
        assert main(["-f", str(tmp_path / "nope.txt")]) == 1
        assert "File not found" in capsys.readouterr().err
