"""Tests for the CLI statement lexer and parser."""

import pytest

from cassandra_cli.errors import ParseError
from cassandra_cli.parsing.cli_lexer import CliLexer
from cassandra_cli.parsing.cli_parser import (
    AssumeCommand,
    CliParser,
    ColumnRef,
    Condition,
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
    FunctionCall,
    GetCommand,
    GetWhereCommand,
    HelpCommand,
    IncrCommand,
    ListCommand,
    Literal,
    SetCommand,
    ShowCommand,
    TruncateCommand,
    UpdateColumnFamilyCommand,
    UpdateKeyspaceCommand,
    UseCommand,
)


@pytest.fixture
def parser():
    return CliParser()


class TestCliLexer:
    """Tests for the statement lexer."""

    def test_tokenize_set(self):
        lexer = CliLexer()
        lexer.build()

        tokens = lexer.tokenize("set CF1[hello][world] = 15;")
        token_types = [t.type for t in tokens]

        assert token_types == [
            "SET", "WORD", "LBRACKET", "WORD", "RBRACKET", "LBRACKET", "WORD", "RBRACKET",
            "EQ", "WORD", "SEMICOLON",
        ]

    def test_keywords_case_insensitive(self):
        lexer = CliLexer()
        lexer.build()

        tokens = lexer.tokenize("HELP Create column FAMILY")
        assert [t.type for t in tokens] == ["HELP", "CREATE", "COLUMN", "FAMILY"]

    def test_quoted_strings_unescaped(self):
        lexer = CliLexer()
        lexer.build()

        tokens = lexer.tokenize("'k\\'ey' \"a\\tb\"")
        assert [t.type for t in tokens] == ["STRING", "STRING"]
        assert tokens[0].value == "k'ey"
        assert tokens[1].value == "a\tb"

    def test_comparison_operators(self):
        lexer = CliLexer()
        lexer.build()

        tokens = lexer.tokenize("= > >= < <=")
        assert [t.type for t in tokens] == ["EQ", "GT", "GTE", "LT", "LTE"]

    def test_negative_numbers_are_words(self):
        lexer = CliLexer()
        lexer.build()

        tokens = lexer.tokenize("-31337")
        assert [(t.type, t.value) for t in tokens] == [("WORD", "-31337")]

    def test_unterminated_string(self):
        lexer = CliLexer()
        lexer.build()

        with pytest.raises(ParseError, match="Unterminated"):
            lexer.tokenize("set CF1[hello][world] = 'oops")

    def test_illegal_character(self):
        lexer = CliLexer()
        lexer.build()

        with pytest.raises(ParseError, match="Illegal character"):
            lexer.tokenize("get CF1[a] & b")


class TestKeyspaceStatements:
    """Tests for connection and keyspace statements."""

    def test_use(self, parser):
        assert parser.parse("use TestKeySpace;") == UseCommand(keyspace="TestKeySpace")

    def test_use_quoted(self, parser):
        assert parser.parse("use 'Key Space';") == UseCommand(keyspace="Key Space")

    def test_connect(self, parser):
        assert parser.parse("connect 127.0.0.1/9160;") == ConnectCommand(host="127.0.0.1", port=9160)
        assert parser.parse("connect localhost/9170") == ConnectCommand(host="localhost", port=9170)

    def test_connect_bad_port(self, parser):
        with pytest.raises(ParseError):
            parser.parse("connect localhost/abc;")

    def test_create_keyspace_plain(self, parser):
        assert parser.parse("create keyspace TESTIN;") == CreateKeyspaceCommand(name="TESTIN")

    def test_update_keyspace_properties(self, parser):
        command = parser.parse(
            "update keyspace TestKeySpace with placement_strategy="
            "'org.apache.cassandra.locator.LocalStrategy' and durable_writes = false;"
        )
        assert isinstance(command, UpdateKeyspaceCommand)
        assert command.properties == {
            "placement_strategy": "org.apache.cassandra.locator.LocalStrategy",
            "durable_writes": "false",
        }

    def test_strategy_options_hash_list(self, parser):
        command = parser.parse("update keyspace TestKeySpace with strategy_options=[{DC1:3, DC2:4, DC5:1}];")
        assert command.properties == {"strategy_options": [{"DC1": "3", "DC2": "4", "DC5": "1"}]}

    def test_drop_keyspace(self, parser):
        assert parser.parse("drop keyspace tesTIN;") == DropKeyspaceCommand(name="tesTIN")

    def test_duplicate_attribute(self, parser):
        with pytest.raises(ParseError, match="more than once"):
            parser.parse("create keyspace K with durable_writes=true and durable_writes=false;")


class TestColumnFamilyStatements:
    """Tests for column family schema statements."""

    def test_create_with_metadata(self, parser):
        command = parser.parse(
            "create column family CF1 with comparator=UTF8Type and column_metadata=["
            "{ column_name:world, validation_class:IntegerType, index_type:0, index_name:IdxName }, "
            "{ column_name:world2, validation_class:LongType, index_type:KEYS, index_name:LongIdxName}];"
        )
        assert isinstance(command, CreateColumnFamilyCommand)
        assert command.name == "CF1"
        assert command.properties["comparator"] == "UTF8Type"
        assert command.properties["column_metadata"] == [
            {"column_name": "world", "validation_class": "IntegerType", "index_type": "0", "index_name": "IdxName"},
            {"column_name": "world2", "validation_class": "LongType", "index_type": "KEYS",
             "index_name": "LongIdxName"},
        ]

    def test_create_with_quoted_values_and_upper_and(self, parser):
        command = parser.parse(
            "create column family myCF with column_type='Super' and comparator='UTF8Type' AND subcomparator='UTF8Type';"
        )
        assert command.properties == {
            "column_type": "Super",
            "comparator": "UTF8Type",
            "subcomparator": "UTF8Type",
        }

    def test_create_without_attributes(self, parser):
        assert parser.parse("create column family CF7;") == CreateColumnFamilyCommand(name="CF7")

    def test_decimal_attribute(self, parser):
        command = parser.parse("update column family CF1 with read_repair_chance=0.5;")
        assert isinstance(command, UpdateColumnFamilyCommand)
        assert command.properties == {"read_repair_chance": "0.5"}

    def test_drop_column_family(self, parser):
        assert parser.parse("drop column family cF8;") == DropColumnFamilyCommand(name="cF8")

    def test_drop_index(self, parser):
        assert parser.parse("drop index on CF1.world2;") == DropIndexCommand(
            column_family="CF1", column=Literal("world2"),
        )

    def test_assume(self, parser):
        assert parser.parse("assume CF1 SUB_COMPARATOR as integer;") == AssumeCommand(
            column_family="CF1", kind="sub_comparator", type_name="integer",
        )


class TestDataStatements:
    """Tests for set/get/del/incr/decr/count/list/truncate."""

    def test_set(self, parser):
        command = parser.parse("set CF1[hello][world] = 123848374878933948398384;")
        assert command == SetCommand(
            path=ColumnRef("CF1", Literal("hello"), [Literal("world")]),
            value=Literal("123848374878933948398384"),
        )

    def test_set_escaped_key(self, parser):
        command = parser.parse("set CF1['k\\'ey'][VALUE] = 'VAL\\'';")
        assert command.path.key == Literal("k'ey")
        assert command.value == Literal("VAL'")

    def test_set_cast_and_ttl(self, parser):
        command = parser.parse("set sCf1['hello'][1][9999] = long(938) with ttl = 30;")
        assert command.path.columns == [Literal("1"), Literal("9999")]
        assert command.value == FunctionCall("long", "938")
        assert command.ttl == 30

    def test_set_generator(self, parser):
        command = parser.parse("set CF7[1][timeuuid()] = utf8(test1);")
        assert command.path.columns == [FunctionCall("timeuuid")]
        assert command.value == FunctionCall("utf8", "test1")

    def test_set_unknown_option(self, parser):
        with pytest.raises(ParseError):
            parser.parse("set CF1[a][b] = c with color = 3;")

    def test_get_as(self, parser):
        command = parser.parse("get CF4['hello'][9999] as Long;")
        assert command == GetCommand(
            path=ColumnRef("CF4", Literal("hello"), [Literal("9999")]), as_type="Long",
        )

    def test_get_row_limit(self, parser):
        command = parser.parse("get CF1[hello] limit 5")
        assert command.path.columns == []
        assert command.limit == 5

    def test_get_where(self, parser):
        command = parser.parse("get CF1 where world2 = long(15) and world > 3 limit 10;")
        assert command == GetWhereCommand(
            column_family="CF1",
            conditions=[
                Condition(Literal("world2"), "eq", FunctionCall("long", "15")),
                Condition(Literal("world"), "gt", Literal("3")),
            ],
            limit=10,
        )

    def test_too_many_columns(self, parser):
        with pytest.raises(ParseError):
            parser.parse("get CF1[a][b][c][d];")

    def test_del(self, parser):
        assert parser.parse("del SCF1['hello'][9999];") == DelCommand(
            ColumnRef("SCF1", Literal("hello"), [Literal("9999")]),
        )

    def test_incr_decr(self, parser):
        assert parser.parse("incr Counter1['hello']['cassandra'];").by == 1
        assert parser.parse("incr Counter1['hello']['cassandra'] by -2;").by == -2
        command = parser.parse("decr Counter1['hello']['cassandra'] by 3;")
        assert isinstance(command, DecrCommand)
        assert command.by == 3
        assert isinstance(parser.parse("incr C[k][c] by 3;"), IncrCommand)

    def test_bad_by_value(self, parser):
        with pytest.raises(ParseError, match="integer"):
            parser.parse("incr C[k][c] by many;")

    def test_count(self, parser):
        assert parser.parse("count CF1[hello];") == CountCommand(ColumnRef("CF1", Literal("hello")))

    @pytest.mark.parametrize("text,start,end,limit", [
        ("list CF3;", None, None, None),
        ("list CF3[:];", None, None, None),
        ("list CF3[h:];", Literal("h"), None, None),
        ("list CF3 limit 10;", None, None, 10),
        ("list CF3[h:] limit 10;", Literal("h"), None, 10),
        ("list CF3[a:z];", Literal("a"), Literal("z"), None),
    ])
    def test_list(self, parser, text, start, end, limit):
        assert parser.parse(text) == ListCommand("CF3", start, end, limit)

    def test_list_limit_must_be_positive(self, parser):
        with pytest.raises(ParseError):
            parser.parse("list CF3 limit 0;")

    def test_truncate(self, parser):
        assert parser.parse("truncate CF1;") == TruncateCommand("CF1")

    def test_keyword_as_column_name(self, parser):
        command = parser.parse("set CF1[key][count] = list;")
        assert command.path.columns == [Literal("count")]
        assert command.value == Literal("list")


class TestInformationalStatements:
    """Tests for describe/show/help/exit."""

    def test_describe_cluster(self, parser):
        assert parser.parse("describe cluster;") == DescribeCommand(target="cluster")

    @pytest.mark.parametrize("text,name", [
        ("describe;", None),
        ("describe keyspace;", None),
        ("describe keyspace Ks1;", "Ks1"),
        ("describe Ks1;", "Ks1"),
    ])
    def test_describe_keyspace(self, parser, text, name):
        assert parser.parse(text) == DescribeCommand(target="keyspace", name=name)

    @pytest.mark.parametrize("text,what", [
        ("show cluster name", "cluster name"),
        ("SHOW API VERSION;", "api version"),
        ("show keyspaces;", "keyspaces"),
    ])
    def test_show(self, parser, text, what):
        assert parser.parse(text) == ShowCommand(what=what)

    def test_show_unknown(self, parser):
        with pytest.raises(ParseError):
            parser.parse("show tables;")

    def test_help(self, parser):
        assert parser.parse("HELP") == HelpCommand()
        assert parser.parse("?") == HelpCommand()
        assert parser.parse("HELP CREATE column FAMILY") == HelpCommand(["create", "column", "family"])

    def test_exit_quit(self, parser):
        assert parser.parse("exit;") == ExitCommand()
        assert parser.parse("QUIT") == ExitCommand()


class TestParseErrors:
    def test_empty_statement(self, parser):
        with pytest.raises(ParseError):
            parser.parse("   ;")

    def test_unknown_keyword(self, parser):
        with pytest.raises(ParseError) as exc_info:
            parser.parse("select * from CF1;")
        assert exc_info.value.fragment

    def test_unbalanced_bracket(self, parser):
        with pytest.raises(ParseError):
            parser.parse("get CF1[hello;")

    def test_parser_reusable_after_error(self, parser):
        with pytest.raises(ParseError):
            parser.parse("get CF1[hello;")
        assert parser.parse("use Ks;") == UseCommand("Ks")
