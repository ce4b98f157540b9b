"""Lexer for TypeScript-style entity sources."""

from __future__ import annotations

import ply.lex as lex

from schema_marshal.core.exceptions import ParseError


class EntityLexer:
    """Tokenizes entity class sources.

    Only the shapes the entity reader cares about get their own token type;
    every other operator character becomes an OTHER token. Token values keep
    the raw source text, so ``lexpos`` plus ``len(value)`` spans the token.
    """

    reserved = {
        "class": "CLASS",
        "true": "TRUE",
        "false": "FALSE",
        "null": "NULL",
        "undefined": "UNDEFINED",
    }

    tokens = [
        "IDENTIFIER",
        "STRING",
        "NUMBER",
        "AT",
        "ARROW",
        "LBRACE",
        "RBRACE",
        "LBRACKET",
        "RBRACKET",
        "LPAREN",
        "RPAREN",
        "COLON",
        "SEMI",
        "COMMA",
        "DOT",
        "EQUALS",
        "OTHER",
    ] + list(reserved.values())

    # Simple tokens
    t_AT = r"@"
    t_ARROW = r"=>"
    t_LBRACE = r"\{"
    t_RBRACE = r"\}"
    t_LBRACKET = r"\["
    t_RBRACKET = r"\]"
    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_COLON = r":"
    t_SEMI = r";"
    t_COMMA = r","
    t_DOT = r"\."
    t_EQUALS = r"="
    t_OTHER = r"[-+*/%!?&|^~<>\#\\]"

    t_ignore = " \t\r\f\v"

    def __init__(self) -> None:
        self.lexer: lex.Lexer = lex.lex(module=self)

    def t_COMMENT(self, t: lex.LexToken) -> None:
        r"//[^\n]*|/\*(?:.|\n)*?\*/"
        t.lexer.lineno += t.value.count("\n")

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r"'(?:[^'\\\n]|\\.)*'|\"(?:[^\"\\\n]|\\.)*\"|`(?:[^`\\]|\\.|\n)*`"
        t.lexer.lineno += t.value.count("\n")
        return t

    def t_NUMBER(self, t: lex.LexToken) -> lex.LexToken:
        r"\d+(?:\.\d+)?(?:[eE][+-]?\d+)?"
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[A-Za-z_$][A-Za-z0-9_$]*"
        t.type = self.reserved.get(t.value, "IDENTIFIER")
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        raise ParseError(
            "<source>", f"Illegal character '{t.value[0]}'", line=t.lineno
        )

    def tokenize(self, source: str) -> list[lex.LexToken]:
        """Return every token of ``source``; line numbers start at 1."""
        self.lexer.lineno = 1
        self.lexer.input(source)
        return list(iter(self.lexer.token, None))
