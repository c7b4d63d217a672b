"""Lexer for the column family command language."""

import ply.lex as lex

from cassandra_cli.errors import ParseError
from cassandra_cli.escape import escape, unescape


class CliLexer:
    """Lexer for tokenizing CLI statements."""

    # Reserved keywords
    reserved = {
        "use": "USE",
        "create": "CREATE",
        "update": "UPDATE",
        "drop": "DROP",
        "keyspace": "KEYSPACE",
        "column": "COLUMN",
        "family": "FAMILY",
        "with": "WITH",
        "and": "AND",
        "assume": "ASSUME",
        "as": "AS",
        "set": "SET",
        "get": "GET",
        "where": "WHERE",
        "del": "DEL",
        "incr": "INCR",
        "decr": "DECR",
        "by": "BY",
        "count": "COUNT",
        "list": "LIST",
        "limit": "LIMIT",
        "truncate": "TRUNCATE",
        "index": "INDEX",
        "on": "ON",
        "describe": "DESCRIBE",
        "show": "SHOW",
        "help": "HELP",
        "connect": "CONNECT",
        "exit": "EXIT",
        "quit": "QUIT",
    }

    # Token list
    tokens = [
        "WORD",
        "STRING",
        "LBRACKET",
        "RBRACKET",
        "LPAREN",
        "RPAREN",
        "LBRACE",
        "RBRACE",
        "COLON",
        "COMMA",
        "DOT",
        "SLASH",
        "SEMICOLON",
        "QUESTION",
        "EQ",
        "GTE",
        "GT",
        "LTE",
        "LT",
    ] + list(reserved.values())

    t_LBRACKET = r"\["
    t_RBRACKET = r"\]"
    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_LBRACE = r"\{"
    t_RBRACE = r"\}"
    t_COLON = r":"
    t_COMMA = r","
    t_DOT = r"\."
    t_SLASH = r"/"
    t_SEMICOLON = r";"
    t_QUESTION = r"\?"
    t_EQ = r"="
    t_GTE = r">="
    t_GT = r">"
    t_LTE = r"<="
    t_LT = r"<"

    t_ignore = " \t\r"

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore

    def t_SINGLE_QUOTED(self, t: lex.LexToken) -> lex.LexToken:
        r"'([^'\\]|\\.)*'"
        t.type = "STRING"
        t.value = unescape(t.value)
        return t

    def t_DOUBLE_QUOTED(self, t: lex.LexToken) -> lex.LexToken:
        r'"([^"\\]|\\.)*"'
        t.type = "STRING"
        t.value = unescape(t.value[1:-1])
        return t

    def t_WORD(self, t: lex.LexToken) -> lex.LexToken:
        r"[A-Za-z0-9_\-]+"
        # Keywords are case-insensitive
        t.type = self.reserved.get(t.value.lower(), "WORD")
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        fragment = t.value[:20]
        if t.value[0] in "'\"":
            raise ParseError(f"Unterminated string literal at position {t.lexpos}: {escape(fragment)}", fragment)
        raise ParseError(f"Illegal character '{escape(t.value[0])}' at position {t.lexpos}", fragment)

    # --- Lexer methods ---

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
