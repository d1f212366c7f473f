"""Tests for the Lemon lexer."""

from __future__ import annotations

import pytest

from lemon.lexer import Lexer
from lemon.tokens import TokenKind


def lex(source: str) -> list[tuple[TokenKind, str]]:
    """Helper: lex source and return (kind, literal) pairs, excluding EOF."""
    tokens = Lexer(source).lex()
    return [(t.kind, t.literal) for t in tokens if t.kind != TokenKind.EOF]


def kinds(source: str) -> list[TokenKind]:
    """Helper: lex source and return just the token kinds, excluding EOF."""
    tokens = Lexer(source).lex()
    return [t.kind for t in tokens if t.kind != TokenKind.EOF]


class TestLexerBasic:
    def test_empty_source(self):
        tokens = Lexer("").lex()
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.EOF
        assert tokens[0].literal == ""

    def test_whitespace_only(self):
        assert kinds("  \t\n\n  \r\n") == []

    def test_identifier(self):
        assert lex("five") == [
            (TokenKind.IDENT, "five"),
            (TokenKind.SEMICOLON, ";"),
        ]

    def test_underscore_identifier(self):
        assert lex("_my_var")[0] == (TokenKind.IDENT, "_my_var")

    def test_digits_end_identifier(self):
        assert lex("x1") == [
            (TokenKind.IDENT, "x"),
            (TokenKind.INT, "1"),
            (TokenKind.SEMICOLON, ";"),
        ]

    def test_keywords(self):
        assert kinds("true false return if else") == [
            TokenKind.TRUE,
            TokenKind.FALSE,
            TokenKind.RETURN,
            TokenKind.IF,
            TokenKind.ELSE,
        ]

    def test_keyword_prefix_is_identifier(self):
        assert lex("iffy")[0] == (TokenKind.IDENT, "iffy")
        assert lex("returned")[0] == (TokenKind.IDENT, "returned")

    def test_keywords_are_case_sensitive(self):
        assert lex("True")[0] == (TokenKind.IDENT, "True")


class TestLexerNumbers:
    def test_integer(self):
        assert lex("42")[0] == (TokenKind.INT, "42")

    def test_float(self):
        assert lex("3.14")[0] == (TokenKind.FLOAT, "3.14")

    def test_float_without_fraction_digits(self):
        assert lex("5.")[0] == (TokenKind.FLOAT, "5.")

    def test_second_dot_is_illegal(self):
        assert lex("1.2.3") == [
            (TokenKind.FLOAT, "1.2"),
            (TokenKind.ILLEGAL, "."),
            (TokenKind.INT, "3"),
            (TokenKind.SEMICOLON, ";"),
        ]

    def test_leading_dot_is_illegal(self):
        assert lex(".5")[:2] == [
            (TokenKind.ILLEGAL, "."),
            (TokenKind.INT, "5"),
        ]

    def test_integer_literal_is_not_range_checked(self):
        big = "99999999999999999999999"
        assert lex(big)[0] == (TokenKind.INT, big)


class TestLexerOperators:
    def test_single_char_tokens(self):
        assert kinds("=+(){},;") == [
            TokenKind.ASSIGN,
            TokenKind.PLUS,
            TokenKind.LPAREN,
            TokenKind.RPAREN,
            TokenKind.LBRACE,
            TokenKind.RBRACE,
            TokenKind.COMMA,
            TokenKind.SEMICOLON,
        ]

    def test_operators(self):
        assert lex("! - / * < >") == [
            (TokenKind.BANG, "!"),
            (TokenKind.MINUS, "-"),
            (TokenKind.SLASH, "/"),
            (TokenKind.ASTERISK, "*"),
            (TokenKind.LT, "<"),
            (TokenKind.GT, ">"),
        ]

    def test_two_char_operators(self):
        assert lex("10 == 10") == [
            (TokenKind.INT, "10"),
            (TokenKind.EQ, "=="),
            (TokenKind.INT, "10"),
            (TokenKind.SEMICOLON, ";"),
        ]
        assert lex("10 != 9")[1] == (TokenKind.NOT_EQ, "!=")

    def test_two_char_operators_without_spaces(self):
        assert kinds("a==b") == [
            TokenKind.IDENT, TokenKind.EQ, TokenKind.IDENT, TokenKind.SEMICOLON,
        ]

    def test_assign_then_bang(self):
        assert kinds("=!") == [TokenKind.ASSIGN, TokenKind.BANG]

    def test_bang_bang_eq(self):
        assert kinds("!!=") == [TokenKind.BANG, TokenKind.NOT_EQ]

    def test_explicit_semicolon(self):
        assert lex("x;") == [
            (TokenKind.IDENT, "x"),
            (TokenKind.SEMICOLON, ";"),
        ]

    @pytest.mark.parametrize("ch", ["@", "#", "$", "&", "|", "[", "]", ":", '"'])
    def test_illegal_character(self, ch):
        assert lex(ch) == [(TokenKind.ILLEGAL, ch)]

    def test_non_ascii_is_illegal(self):
        assert lex("é") == [(TokenKind.ILLEGAL, "é")]

    def test_nul_is_illegal_not_end_of_input(self):
        assert lex("a\0b") == [
            (TokenKind.IDENT, "a"),
            (TokenKind.ILLEGAL, "\0"),
            (TokenKind.IDENT, "b"),
            (TokenKind.SEMICOLON, ";"),
        ]

    def test_illegal_does_not_stop_lexing(self):
        assert kinds("1 @ 2") == [
            TokenKind.INT, TokenKind.ILLEGAL, TokenKind.INT, TokenKind.SEMICOLON,
        ]


class TestSemicolonInsertion:
    @pytest.mark.parametrize("source", ["x", "5", "1.5", "true", "false", "return", "(x)"])
    def test_inserted_at_end_of_input(self, source):
        assert kinds(source)[-1] == TokenKind.SEMICOLON

    @pytest.mark.parametrize("source", ["x +", "!", "{", "}", "if", "else", ",", "=="])
    def test_not_inserted_at_end_of_input(self, source):
        assert TokenKind.SEMICOLON not in kinds(source)

    def test_inserted_at_newline(self):
        assert lex("a\nb") == [
            (TokenKind.IDENT, "a"),
            (TokenKind.SEMICOLON, ";"),
            (TokenKind.IDENT, "b"),
            (TokenKind.SEMICOLON, ";"),
        ]

    def test_not_inserted_after_operator(self):
        assert kinds("a +\nb") == [
            TokenKind.IDENT, TokenKind.PLUS, TokenKind.IDENT, TokenKind.SEMICOLON,
        ]

    def test_not_inserted_after_closing_brace(self):
        assert kinds("{\n}\n") == [TokenKind.LBRACE, TokenKind.RBRACE]

    def test_inserted_after_closing_paren(self):
        assert kinds("f(x)\n") == [
            TokenKind.IDENT,
            TokenKind.LPAREN,
            TokenKind.IDENT,
            TokenKind.RPAREN,
            TokenKind.SEMICOLON,
        ]

    def test_inserted_after_return(self):
        assert kinds("return\n") == [TokenKind.RETURN, TokenKind.SEMICOLON]

    def test_leading_newlines_skipped(self):
        assert kinds("\n\n\nx") == [TokenKind.IDENT, TokenKind.SEMICOLON]

    def test_blank_lines_insert_once(self):
        assert kinds("x \t\n\n\ny") == [
            TokenKind.IDENT, TokenKind.SEMICOLON, TokenKind.IDENT, TokenKind.SEMICOLON,
        ]

    def test_blank_lines_after_operator(self):
        assert kinds("1 +\n\n 2") == [
            TokenKind.INT, TokenKind.PLUS, TokenKind.INT, TokenKind.SEMICOLON,
        ]

    def test_crlf_line_endings(self):
        assert kinds("x\r\ny\r\n") == [
            TokenKind.IDENT, TokenKind.SEMICOLON, TokenKind.IDENT, TokenKind.SEMICOLON,
        ]

    def test_no_double_semicolon_after_explicit(self):
        assert kinds("x;\n") == [TokenKind.IDENT, TokenKind.SEMICOLON]

    def test_indented_returns(self):
        source = "\n\treturn 5\n\treturn 10\n\treturn 993322"
        assert kinds(source) == [
            TokenKind.RETURN, TokenKind.INT, TokenKind.SEMICOLON,
            TokenKind.RETURN, TokenKind.INT, TokenKind.SEMICOLON,
            TokenKind.RETURN, TokenKind.INT, TokenKind.SEMICOLON,
        ]


class TestLexerStream:
    def test_eof_repeats(self):
        lexer = Lexer("x")
        assert lexer.next_token().kind == TokenKind.IDENT
        assert lexer.next_token().kind == TokenKind.SEMICOLON
        for _ in range(3):
            assert lexer.next_token().kind == TokenKind.EOF

    def test_iteration_stops_after_eof(self):
        tokens = list(Lexer("a"))
        assert [t.kind for t in tokens] == [
            TokenKind.IDENT, TokenKind.SEMICOLON, TokenKind.EOF,
        ]

    def test_lex_ends_with_eof(self):
        tokens = Lexer("1 + 2").lex()
        assert tokens[-1].kind == TokenKind.EOF
        assert sum(1 for t in tokens if t.kind == TokenKind.EOF) == 1


class TestLexerSpans:
    def test_identifier_span(self):
        tok = Lexer("ab", "t.lm").next_token()
        assert tok.span.file == "t.lm"
        assert (tok.span.start_line, tok.span.start_col) == (1, 1)
        assert (tok.span.end_line, tok.span.end_col) == (1, 2)

    def test_spans_across_lines(self):
        tokens = Lexer("ab\n  cd").lex()
        ab, semi, cd = tokens[0], tokens[1], tokens[2]
        assert (ab.span.start_line, ab.span.start_col) == (1, 1)
        assert (semi.span.start_line, semi.span.start_col) == (1, 3)
        assert (cd.span.start_line, cd.span.start_col) == (2, 3)
        assert cd.span.end_col == 4

    def test_two_char_operator_span(self):
        tokens = Lexer("a == b").lex()
        eq = tokens[1]
        assert eq.kind == TokenKind.EQ
        assert (eq.span.start_col, eq.span.end_col) == (3, 4)

    def test_illegal_span(self):
        tokens = Lexer("1 @ 2").lex()
        assert tokens[1].span.start_col == 3
        assert tokens[1].span.end_col == 3

    def test_span_str(self):
        tok = Lexer("\n  x", "f.lm").next_token()
        assert str(tok.span) == "f.lm:2:3"
