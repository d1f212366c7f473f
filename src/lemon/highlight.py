"""Pygments lexer for the Lemon language."""

from pygments.lexer import RegexLexer, words
from pygments.token import (
    Error,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    Text,
)


class LemonLexer(RegexLexer):
    """Pygments lexer for the Lemon language."""

    name = "Lemon"
    aliases = ["lemon"]
    filenames = ["*.lm"]
    mimetypes = ["text/x-lemon"]

    tokens = {
        "root": [
            # Whitespace
            (r"\s+", Text),
            # Control-flow keywords
            (
                words(("if", "else", "return"), prefix=r"\b", suffix=r"\b"),
                Keyword,
            ),
            # Boolean constants
            (r"\b(true|false)\b", Keyword.Constant),
            # Numbers (float before integer)
            (r"[0-9]+\.[0-9]*", Number.Float),
            (r"[0-9]+", Number.Integer),
            # Operators (two-char before single-char)
            (r"==|!=", Operator),
            (r"[+\-*/<>!=]", Operator),
            # Identifiers
            (r"[A-Za-z_]+", Name),
            # Punctuation
            (r"[(),;{}]", Punctuation),
            # Anything else is illegal in Lemon source
            (r".", Error),
        ],
    }
