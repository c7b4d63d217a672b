"""Tests for literal escaping."""

from cassandra_cli.escape import escape, unescape


ESCAPED = (
    "backspace \\b tab \\t linefeed \\n form feed \\f carriage return \\r "
    "double quote \\\" single quote \\' backslash \\\\"
)
UNESCAPED = (
    "backspace \b tab \t linefeed \n form feed \f carriage return \r "
    "double quote \" single quote ' backslash \\"
)


class TestEscape:
    """Tests for escape/unescape."""

    def test_unescape_strips_surrounding_quotes(self):
        assert unescape("'" + ESCAPED + "'") == UNESCAPED

    def test_unescape_without_quotes(self):
        assert unescape(ESCAPED) == UNESCAPED

    def test_escape(self):
        assert escape(UNESCAPED) == ESCAPED

    def test_round_trip(self):
        text = "it's a \"test\"\n\twith \\ everything"
        assert unescape(escape(text)) == text

    def test_unknown_escape_kept_verbatim(self):
        assert unescape("a\\qb") == "a\\qb"

    def test_trailing_backslash_kept(self):
        assert unescape("abc\\") == "abc\\"

    def test_single_quote_alone_not_stripped(self):
        assert unescape("'") == "'"

    def test_only_one_layer_of_quotes_stripped(self):
        assert unescape("''x''") == "'x'"

    def test_plain_text_unchanged(self):
        assert escape("hello world") == "hello world"
        assert unescape("hello world") == "hello world"
