"""Lexer for the Lemon language.

Tokens are produced one at a time on demand. Newlines are not tokens:
a newline (or the end of input) that follows a token able to end a
statement is turned into a synthesized SEMICOLON, every other newline
is skipped.
"""

from __future__ import annotations

from collections.abc import Iterator

from lemon.source import Span
from lemon.tokens import (
    SEMICOLON_INSERTED_AFTER,
    SINGLE_CHAR_TOKENS,
    Token,
    TokenKind,
    lookup_ident,
)


def _is_letter(ch: str) -> bool:
    return ch == "_" or "a" <= ch <= "z" or "A" <= ch <= "Z"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class Lexer:
    """Tokenizes Lemon source code.

    A lexer is a single-use, pull-based sequence: call ``next_token()``
    repeatedly, or iterate over it. After the EOF token has been produced
    every further call returns EOF again.
    """

    def __init__(self, source: str, filename: str = "<stdin>") -> None:
        self.source = source
        self.filename = filename
        self.pos = 0
        self.read_pos = 0
        self.ch = "\0"
        self.line = 1
        self.col = 1
        self.prev_token: Token | None = None
        self._read_char()

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next_token()
            yield tok
            if tok.kind == TokenKind.EOF:
                return

    def lex(self) -> list[Token]:
        """Drain the lexer and return every token, EOF included."""
        return list(self)

    # ── Helpers ───────────────────────────────────────────────────

    def _at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _read_char(self) -> None:
        # Move line/col past the character we are leaving.
        if self.read_pos > 0 and not self._at_end():
            if self.ch == "\n":
                self.line += 1
                self.col = 1
            else:
                self.col += 1
        self.pos = self.read_pos
        if self.read_pos >= len(self.source):
            self.ch = "\0"
        else:
            self.ch = self.source[self.read_pos]
            self.read_pos += 1

    def _peek_char(self) -> str:
        if self.read_pos >= len(self.source):
            return "\0"
        return self.source[self.read_pos]

    def _emit(self, kind: TokenKind, literal: str, line: int, col: int) -> Token:
        end_col = col + max(len(literal), 1) - 1
        tok = Token(kind, literal, Span(self.filename, line, col, line, end_col))
        self.prev_token = tok
        return tok

    def _skip_whitespace(self) -> None:
        """Skip spaces, tabs and carriage returns (but not newlines)."""
        while not self._at_end() and self.ch in (" ", "\t", "\r"):
            self._read_char()

    def _should_insert_semicolon(self) -> bool:
        if self.prev_token is None:
            return False
        return self.prev_token.kind in SEMICOLON_INSERTED_AFTER

    # ── Tokens ───────────────────────────────────────────────────

    def next_token(self) -> Token:
        """Return the next token, inserting statement terminators as needed."""
        self._skip_whitespace()
        while not self._at_end() and self.ch == "\n":
            if self._should_insert_semicolon():
                tok = self._emit(TokenKind.SEMICOLON, ";", self.line, self.col)
                self._read_char()
                return tok
            self._read_char()
            self._skip_whitespace()

        line, col = self.line, self.col

        if self._at_end():
            if self._should_insert_semicolon():
                return self._emit(TokenKind.SEMICOLON, ";", line, col)
            return self._emit(TokenKind.EOF, "", line, col)

        if _is_letter(self.ch):
            return self._lex_identifier()
        if _is_digit(self.ch):
            return self._lex_number()
        return self._lex_operator_or_punct()

    def _lex_identifier(self) -> Token:
        line, col = self.line, self.col
        start = self.pos
        while not self._at_end() and _is_letter(self.ch):
            self._read_char()
        word = self.source[start:self.pos]
        return self._emit(lookup_ident(word), word, line, col)

    def _lex_number(self) -> Token:
        line, col = self.line, self.col
        start = self.pos
        while not self._at_end() and _is_digit(self.ch):
            self._read_char()

        if not self._at_end() and self.ch == ".":
            self._read_char()  # .
            while not self._at_end() and _is_digit(self.ch):
                self._read_char()
            return self._emit(TokenKind.FLOAT, self.source[start:self.pos], line, col)
        return self._emit(TokenKind.INT, self.source[start:self.pos], line, col)

    def _lex_operator_or_punct(self) -> Token:
        line, col = self.line, self.col
        ch = self.ch

        # Two-character operators
        if ch in ("=", "!") and self._peek_char() == "=":
            self._read_char()
            self._read_char()
            kind = TokenKind.EQ if ch == "=" else TokenKind.NOT_EQ
            return self._emit(kind, ch + "=", line, col)

        self._read_char()
        match ch:
            case "=":
                return self._emit(TokenKind.ASSIGN, ch, line, col)
            case "!":
                return self._emit(TokenKind.BANG, ch, line, col)
            case _ if ch in SINGLE_CHAR_TOKENS:
                return self._emit(SINGLE_CHAR_TOKENS[ch], ch, line, col)
            case _:
                return self._emit(TokenKind.ILLEGAL, ch, line, col)
