"""Token kinds and token representation for the Lemon lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lemon.source import Span


class TokenKind(Enum):
    # Special
    EOF = auto()
    ILLEGAL = auto()

    # Identifiers and literals
    IDENT = auto()
    INT = auto()
    FLOAT = auto()

    # Keywords
    TRUE = auto()
    FALSE = auto()
    RETURN = auto()
    IF = auto()
    ELSE = auto()

    # Operators
    ASSIGN = auto()
    EQ = auto()
    BANG = auto()
    NOT_EQ = auto()
    PLUS = auto()
    MINUS = auto()
    ASTERISK = auto()
    SLASH = auto()
    LT = auto()
    GT = auto()

    # Delimiters
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    COMMA = auto()

    # Statement terminator
    SEMICOLON = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    literal: str
    span: Span


KEYWORDS: dict[str, TokenKind] = {
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
    "return": TokenKind.RETURN,
    "if": TokenKind.IF,
    "else": TokenKind.ELSE,
}

# Single-character operators and delimiters. `=` and `!` are absent because
# they may start a two-character operator.
SINGLE_CHAR_TOKENS: dict[str, TokenKind] = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.ASTERISK,
    "/": TokenKind.SLASH,
    "<": TokenKind.LT,
    ">": TokenKind.GT,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
}

# A newline or end of input after one of these kinds closes the statement.
SEMICOLON_INSERTED_AFTER: frozenset[TokenKind] = frozenset({
    TokenKind.IDENT,
    TokenKind.INT,
    TokenKind.FLOAT,
    TokenKind.TRUE,
    TokenKind.FALSE,
    TokenKind.RETURN,
    TokenKind.RPAREN,
})


def lookup_ident(word: str) -> TokenKind:
    """Classify an identifier-shaped word as a keyword or IDENT."""
    return KEYWORDS.get(word, TokenKind.IDENT)
