"""Parser for the column family command language."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import ply.yacc as yacc

from cassandra_cli.errors import ParseError
from cassandra_cli.escape import escape
from cassandra_cli.parsing.cli_lexer import CliLexer


@dataclass
class Literal:
    """A bare or quoted literal token, resolved later against a validator."""

    text: str


@dataclass
class FunctionCall:
    """A typed cast like long(15), or a generator like timeuuid()."""

    name: str
    arg: str | None = None


Value = Literal | FunctionCall


@dataclass
class ColumnRef:
    """CF[key][col] or CF[key][super][col]; ``columns`` may hold zero to two specs."""

    column_family: str
    key: Value
    columns: list[Value] = field(default_factory=list)


@dataclass
class Condition:
    """A ``column op value`` term of a get ... where clause."""

    column: Value
    operator: str  # eq, gt, gte, lt, lte
    value: Value


@dataclass
class UseCommand:
    keyspace: str


@dataclass
class CreateKeyspaceCommand:
    name: str
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass
class UpdateKeyspaceCommand:
    name: str
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass
class DropKeyspaceCommand:
    name: str


@dataclass
class CreateColumnFamilyCommand:
    name: str
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass
class UpdateColumnFamilyCommand:
    name: str
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass
class DropColumnFamilyCommand:
    name: str


@dataclass
class DropIndexCommand:
    column_family: str
    column: Value


@dataclass
class AssumeCommand:
    """assume <cf> (keys|comparator|sub_comparator|validator) as <type>."""

    column_family: str
    kind: str
    type_name: str


@dataclass
class SetCommand:
    path: ColumnRef
    value: Value
    ttl: int | None = None


@dataclass
class GetCommand:
    path: ColumnRef
    as_type: str | None = None
    limit: int | None = None


@dataclass
class GetWhereCommand:
    column_family: str
    conditions: list[Condition] = field(default_factory=list)
    limit: int | None = None


@dataclass
class DelCommand:
    path: ColumnRef


@dataclass
class IncrCommand:
    path: ColumnRef
    by: int = 1


@dataclass
class DecrCommand:
    path: ColumnRef
    by: int = 1


@dataclass
class CountCommand:
    path: ColumnRef


@dataclass
class ListCommand:
    column_family: str
    start: Value | None = None
    end: Value | None = None
    limit: int | None = None


@dataclass
class TruncateCommand:
    column_family: str


@dataclass
class DescribeCommand:
    """describe cluster, or describe [keyspace] [<name>] (current keyspace when unnamed)."""

    target: str  # "cluster" or "keyspace"
    name: str | None = None


@dataclass
class ShowCommand:
    what: str  # "cluster name", "api version" or "keyspaces"


@dataclass
class HelpCommand:
    topic: list[str] = field(default_factory=list)


@dataclass
class ConnectCommand:
    host: str
    port: int


@dataclass
class ExitCommand:
    pass


Command = UseCommand | CreateKeyspaceCommand | UpdateKeyspaceCommand | DropKeyspaceCommand | CreateColumnFamilyCommand | UpdateColumnFamilyCommand | DropColumnFamilyCommand | DropIndexCommand | AssumeCommand | SetCommand | GetCommand | GetWhereCommand | DelCommand | IncrCommand | DecrCommand | CountCommand | ListCommand | TruncateCommand | DescribeCommand | ShowCommand | HelpCommand | ConnectCommand | ExitCommand


SHOW_TARGETS = ("cluster name", "api version", "keyspaces")


def _parse_int(text: str, what: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise ParseError(f"Expected an integer for {what}, got '{text}'", text) from None


class CliParser:
    """Parser for CLI statements."""

    tokens = CliLexer.tokens

    def __init__(self) -> None:
        self.lexer = CliLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore
        self._data = ""

    def p_statement(self, p: yacc.YaccProduction) -> None:
        """statement : command SEMICOLON
                     | command"""
        p[0] = p[1]

    # --- keyspace selection and connection ---

    def p_command_use(self, p: yacc.YaccProduction) -> None:
        """command : USE word
                   | USE STRING"""
        p[0] = UseCommand(keyspace=p[2])

    def p_command_connect(self, p: yacc.YaccProduction) -> None:
        """command : CONNECT host SLASH word"""
        p[0] = ConnectCommand(host=p[2], port=_parse_int(p[4], "port"))

    def p_host_single(self, p: yacc.YaccProduction) -> None:
        """host : word"""
        p[0] = p[1]

    def p_host_dotted(self, p: yacc.YaccProduction) -> None:
        """host : host DOT word"""
        p[0] = f"{p[1]}.{p[3]}"

    def p_command_exit(self, p: yacc.YaccProduction) -> None:
        """command : EXIT
                   | QUIT"""
        p[0] = ExitCommand()

    # --- schema ---

    def p_command_create_keyspace(self, p: yacc.YaccProduction) -> None:
        """command : CREATE KEYSPACE word with_clause"""
        p[0] = CreateKeyspaceCommand(name=p[3], properties=p[4])

    def p_command_update_keyspace(self, p: yacc.YaccProduction) -> None:
        """command : UPDATE KEYSPACE word with_clause"""
        p[0] = UpdateKeyspaceCommand(name=p[3], properties=p[4])

    def p_command_drop_keyspace(self, p: yacc.YaccProduction) -> None:
        """command : DROP KEYSPACE word"""
        p[0] = DropKeyspaceCommand(name=p[3])

    def p_command_create_column_family(self, p: yacc.YaccProduction) -> None:
        """command : CREATE COLUMN FAMILY word with_clause"""
        p[0] = CreateColumnFamilyCommand(name=p[4], properties=p[5])

    def p_command_update_column_family(self, p: yacc.YaccProduction) -> None:
        """command : UPDATE COLUMN FAMILY word with_clause"""
        p[0] = UpdateColumnFamilyCommand(name=p[4], properties=p[5])

    def p_command_drop_column_family(self, p: yacc.YaccProduction) -> None:
        """command : DROP COLUMN FAMILY word"""
        p[0] = DropColumnFamilyCommand(name=p[4])

    def p_command_drop_index(self, p: yacc.YaccProduction) -> None:
        """command : DROP INDEX ON word DOT literal"""
        p[0] = DropIndexCommand(column_family=p[4], column=p[6])

    def p_with_clause_empty(self, p: yacc.YaccProduction) -> None:
        """with_clause : """
        p[0] = {}

    def p_with_clause(self, p: yacc.YaccProduction) -> None:
        """with_clause : WITH property_list"""
        p[0] = p[2]

    def p_property_list_single(self, p: yacc.YaccProduction) -> None:
        """property_list : property"""
        p[0] = dict([p[1]])

    def p_property_list_multiple(self, p: yacc.YaccProduction) -> None:
        """property_list : property_list AND property"""
        name, value = p[3]
        if name in p[1]:
            raise ParseError(f"Attribute '{name}' given more than once", name)
        p[1][name] = value
        p[0] = p[1]

    def p_property(self, p: yacc.YaccProduction) -> None:
        """property : word EQ property_value"""
        p[0] = (p[1].lower(), p[3])

    def p_property_value_scalar(self, p: yacc.YaccProduction) -> None:
        """property_value : word
                          | STRING"""
        p[0] = p[1]

    def p_property_value_decimal(self, p: yacc.YaccProduction) -> None:
        """property_value : word DOT word"""
        p[0] = f"{p[1]}.{p[3]}"

    def p_property_value_array_empty(self, p: yacc.YaccProduction) -> None:
        """property_value : LBRACKET RBRACKET"""
        p[0] = []

    def p_property_value_array(self, p: yacc.YaccProduction) -> None:
        """property_value : LBRACKET array_items RBRACKET"""
        p[0] = p[2]

    def p_property_value_hash(self, p: yacc.YaccProduction) -> None:
        """property_value : hash"""
        p[0] = [p[1]]

    def p_array_items_single(self, p: yacc.YaccProduction) -> None:
        """array_items : array_item"""
        p[0] = [p[1]]

    def p_array_items_multiple(self, p: yacc.YaccProduction) -> None:
        """array_items : array_items COMMA array_item"""
        p[0] = p[1] + [p[3]]

    def p_array_item(self, p: yacc.YaccProduction) -> None:
        """array_item : hash
                      | word
                      | STRING"""
        p[0] = p[1]

    def p_hash_empty(self, p: yacc.YaccProduction) -> None:
        """hash : LBRACE RBRACE"""
        p[0] = {}

    def p_hash(self, p: yacc.YaccProduction) -> None:
        """hash : LBRACE hash_items RBRACE"""
        p[0] = dict(p[2])

    def p_hash_items_single(self, p: yacc.YaccProduction) -> None:
        """hash_items : hash_pair"""
        p[0] = [p[1]]

    def p_hash_items_multiple(self, p: yacc.YaccProduction) -> None:
        """hash_items : hash_items COMMA hash_pair"""
        p[0] = p[1] + [p[3]]

    def p_hash_pair(self, p: yacc.YaccProduction) -> None:
        """hash_pair : hash_atom COLON hash_atom"""
        p[0] = (p[1], p[3])

    def p_hash_atom(self, p: yacc.YaccProduction) -> None:
        """hash_atom : word
                     | STRING"""
        p[0] = p[1]

    def p_hash_atom_decimal(self, p: yacc.YaccProduction) -> None:
        """hash_atom : word DOT word"""
        p[0] = f"{p[1]}.{p[3]}"

    # --- assume ---

    def p_command_assume(self, p: yacc.YaccProduction) -> None:
        """command : ASSUME word word AS word"""
        p[0] = AssumeCommand(column_family=p[2], kind=p[3].lower(), type_name=p[5])

    # --- data ---

    def p_command_set(self, p: yacc.YaccProduction) -> None:
        """command : SET column_ref EQ literal ttl_clause"""
        p[0] = SetCommand(path=p[2], value=p[4], ttl=p[5])

    def p_ttl_clause_empty(self, p: yacc.YaccProduction) -> None:
        """ttl_clause : """
        p[0] = None

    def p_ttl_clause(self, p: yacc.YaccProduction) -> None:
        """ttl_clause : WITH word EQ word"""
        if p[2].lower() != "ttl":
            raise ParseError(f"Unknown set option '{p[2]}', expected ttl", p[2])
        p[0] = _parse_int(p[4], "ttl")

    def p_command_get(self, p: yacc.YaccProduction) -> None:
        """command : GET column_ref as_clause limit_clause"""
        p[0] = GetCommand(path=p[2], as_type=p[3], limit=p[4])

    def p_command_get_where(self, p: yacc.YaccProduction) -> None:
        """command : GET word WHERE condition_list limit_clause"""
        p[0] = GetWhereCommand(column_family=p[2], conditions=p[4], limit=p[5])

    def p_as_clause_empty(self, p: yacc.YaccProduction) -> None:
        """as_clause : """
        p[0] = None

    def p_as_clause(self, p: yacc.YaccProduction) -> None:
        """as_clause : AS word"""
        p[0] = p[2]

    def p_condition_list_single(self, p: yacc.YaccProduction) -> None:
        """condition_list : condition"""
        p[0] = [p[1]]

    def p_condition_list_multiple(self, p: yacc.YaccProduction) -> None:
        """condition_list : condition_list AND condition"""
        p[0] = p[1] + [p[3]]

    def p_condition(self, p: yacc.YaccProduction) -> None:
        """condition : literal EQ literal
                     | literal GT literal
                     | literal GTE literal
                     | literal LT literal
                     | literal LTE literal"""
        op_map = {"=": "eq", ">": "gt", ">=": "gte", "<": "lt", "<=": "lte"}
        p[0] = Condition(column=p[1], operator=op_map[p[2]], value=p[3])

    def p_command_del(self, p: yacc.YaccProduction) -> None:
        """command : DEL column_ref"""
        p[0] = DelCommand(path=p[2])

    def p_command_incr(self, p: yacc.YaccProduction) -> None:
        """command : INCR column_ref by_clause"""
        p[0] = IncrCommand(path=p[2], by=p[3])

    def p_command_decr(self, p: yacc.YaccProduction) -> None:
        """command : DECR column_ref by_clause"""
        p[0] = DecrCommand(path=p[2], by=p[3])

    def p_by_clause_empty(self, p: yacc.YaccProduction) -> None:
        """by_clause : """
        p[0] = 1

    def p_by_clause(self, p: yacc.YaccProduction) -> None:
        """by_clause : BY word"""
        p[0] = _parse_int(p[2], "by")

    def p_command_count(self, p: yacc.YaccProduction) -> None:
        """command : COUNT column_ref"""
        p[0] = CountCommand(path=p[2])

    def p_command_list(self, p: yacc.YaccProduction) -> None:
        """command : LIST word range_clause limit_clause"""
        start, end = p[3]
        p[0] = ListCommand(column_family=p[2], start=start, end=end, limit=p[4])

    def p_range_clause_empty(self, p: yacc.YaccProduction) -> None:
        """range_clause : """
        p[0] = (None, None)

    def p_range_clause(self, p: yacc.YaccProduction) -> None:
        """range_clause : LBRACKET range_bound COLON range_bound RBRACKET"""
        p[0] = (p[2], p[4])

    def p_range_bound_empty(self, p: yacc.YaccProduction) -> None:
        """range_bound : """
        p[0] = None

    def p_range_bound(self, p: yacc.YaccProduction) -> None:
        """range_bound : literal"""
        p[0] = p[1]

    def p_limit_clause_empty(self, p: yacc.YaccProduction) -> None:
        """limit_clause : """
        p[0] = None

    def p_limit_clause(self, p: yacc.YaccProduction) -> None:
        """limit_clause : LIMIT word"""
        limit = _parse_int(p[2], "limit")
        if limit <= 0:
            raise ParseError(f"limit must be positive, got {limit}", p[2])
        p[0] = limit

    def p_command_truncate(self, p: yacc.YaccProduction) -> None:
        """command : TRUNCATE word"""
        p[0] = TruncateCommand(column_family=p[2])

    # --- addressing and literals ---

    def p_column_ref(self, p: yacc.YaccProduction) -> None:
        """column_ref : word bracket_list"""
        key, *columns = p[2]
        if len(columns) > 2:
            raise ParseError(f"Too many column specifications for '{p[1]}'", p[1])
        p[0] = ColumnRef(column_family=p[1], key=key, columns=columns)

    def p_bracket_list_single(self, p: yacc.YaccProduction) -> None:
        """bracket_list : LBRACKET literal RBRACKET"""
        p[0] = [p[2]]

    def p_bracket_list_multiple(self, p: yacc.YaccProduction) -> None:
        """bracket_list : bracket_list LBRACKET literal RBRACKET"""
        p[0] = p[1] + [p[3]]

    def p_literal_word(self, p: yacc.YaccProduction) -> None:
        """literal : word
                   | STRING"""
        p[0] = Literal(text=p[1])

    def p_literal_generator(self, p: yacc.YaccProduction) -> None:
        """literal : word LPAREN RPAREN"""
        p[0] = FunctionCall(name=p[1])

    def p_literal_cast(self, p: yacc.YaccProduction) -> None:
        """literal : word LPAREN word RPAREN
                   | word LPAREN STRING RPAREN"""
        p[0] = FunctionCall(name=p[1], arg=p[3])

    # --- informational ---

    def p_command_describe(self, p: yacc.YaccProduction) -> None:
        """command : DESCRIBE
                   | DESCRIBE word_list"""
        words = p[2] if len(p) > 2 else []
        lowered = [w.lower() for w in words]
        if lowered == ["cluster"]:
            p[0] = DescribeCommand(target="cluster")
        elif not words or lowered == ["keyspace"]:
            p[0] = DescribeCommand(target="keyspace")
        elif len(words) == 2 and lowered[0] == "keyspace":
            p[0] = DescribeCommand(target="keyspace", name=words[1])
        elif len(words) == 1:
            p[0] = DescribeCommand(target="keyspace", name=words[0])
        else:
            text = " ".join(words)
            raise ParseError(f"Unknown describe target '{text}'", text)

    def p_command_show(self, p: yacc.YaccProduction) -> None:
        """command : SHOW word_list"""
        what = " ".join(w.lower() for w in p[2])
        if what not in SHOW_TARGETS:
            raise ParseError(f"Unknown show target '{what}'", what)
        p[0] = ShowCommand(what=what)

    def p_command_help(self, p: yacc.YaccProduction) -> None:
        """command : HELP
                   | HELP word_list
                   | QUESTION"""
        words = p[2] if len(p) > 2 else []
        p[0] = HelpCommand(topic=[w.lower() for w in words])

    def p_word_list_single(self, p: yacc.YaccProduction) -> None:
        """word_list : word"""
        p[0] = [p[1]]

    def p_word_list_multiple(self, p: yacc.YaccProduction) -> None:
        """word_list : word_list word"""
        p[0] = p[1] + [p[2]]

    def p_word(self, p: yacc.YaccProduction) -> None:
        """word : WORD
                | USE
                | CREATE
                | UPDATE
                | DROP
                | KEYSPACE
                | COLUMN
                | FAMILY
                | WITH
                | AND
                | ASSUME
                | AS
                | SET
                | GET
                | WHERE
                | DEL
                | INCR
                | DECR
                | BY
                | COUNT
                | LIST
                | LIMIT
                | TRUNCATE
                | INDEX
                | ON
                | DESCRIBE
                | SHOW
                | HELP
                | CONNECT
                | EXIT
                | QUIT"""
        p[0] = p[1]

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            fragment = self._data[p.lexpos:p.lexpos + 20]
            raise ParseError(f"Syntax error at '{escape(str(p.value))}' (position {p.lexpos})", fragment)
        else:
            fragment = self._data[-20:]
            raise ParseError(f"Syntax error at end of input: '{escape(fragment)}'", fragment)

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, start="statement", **kwargs)

    def parse(self, data: str) -> Command:
        """Parse a single statement."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        self._data = data
        if not data.strip().rstrip(";").strip():
            raise ParseError("Empty statement", data)
        return self.parser.parse(data, lexer=self.lexer.lexer)
