"""Parser for the Lemon language.

Pulls tokens from a Lexer with a two-token window (current and peek) and
builds the AST. Expressions are parsed with a Pratt parser driven by
per-token-kind prefix and infix handlers; statements are dispatched on the
current token.

Errors never raise. Every problem is appended to ``Parser.errors`` (and a
matching ``Diagnostic`` to ``Parser.diagnostics``) and parsing carries on;
productions that cannot build a node return ``None``.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import IntEnum

from lemon.ast_nodes import (
    BlockStatement,
    BooleanLiteral,
    Expression,
    ExpressionStatement,
    FloatLiteral,
    IdentifierLiteral,
    IfStatement,
    InfixExpression,
    IntegerLiteral,
    PrefixExpression,
    Program,
    ReturnStatement,
    Statement,
)
from lemon.errors import CompileError, Diagnostic, DiagnosticLabel, Severity
from lemon.lexer import Lexer
from lemon.source import Span
from lemon.tokens import Token, TokenKind

PrefixParseFn = Callable[[], Expression | None]
InfixParseFn = Callable[[Expression | None], Expression | None]

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

# Grouping, prefix operands, right operands, blocks and else-if links each
# open one level.
MAX_NESTING_DEPTH = 100


class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2       # == !=
    LESSGREATER = 3  # < >
    SUM = 4          # + -
    PRODUCT = 5      # * /
    PREFIX = 6       # -x !x
    CALL = 7         # reserved


PRECEDENCES: dict[TokenKind, Precedence] = {
    TokenKind.EQ: Precedence.EQUALS,
    TokenKind.NOT_EQ: Precedence.EQUALS,
    TokenKind.LT: Precedence.LESSGREATER,
    TokenKind.GT: Precedence.LESSGREATER,
    TokenKind.PLUS: Precedence.SUM,
    TokenKind.MINUS: Precedence.SUM,
    TokenKind.ASTERISK: Precedence.PRODUCT,
    TokenKind.SLASH: Precedence.PRODUCT,
}


class _NestingTooDeep(Exception):
    """Unwinds the current statement once MAX_NESTING_DEPTH is exceeded."""


class Parser:
    """Parses the tokens of one Lexer into a Lemon Program."""

    def __init__(self, lexer: Lexer) -> None:
        self.lexer = lexer
        self.errors: list[str] = []
        self.diagnostics: list[Diagnostic] = []

        self.prefix_parse_fns: dict[TokenKind, PrefixParseFn] = {}
        self.infix_parse_fns: dict[TokenKind, InfixParseFn] = {}
        self._depth = 0

        self.cur_token: Token = lexer.next_token()
        self.peek_token: Token = lexer.next_token()

        self.register_prefix(TokenKind.IDENT, self._parse_identifier)
        self.register_prefix(TokenKind.INT, self._parse_integer_literal)
        self.register_prefix(TokenKind.FLOAT, self._parse_float_literal)
        self.register_prefix(TokenKind.TRUE, self._parse_boolean_literal)
        self.register_prefix(TokenKind.FALSE, self._parse_boolean_literal)
        self.register_prefix(TokenKind.BANG, self._parse_prefix_expression)
        self.register_prefix(TokenKind.MINUS, self._parse_prefix_expression)
        self.register_prefix(TokenKind.LPAREN, self._parse_grouped_expression)

        for kind in PRECEDENCES:
            self.register_infix(kind, self._parse_infix_expression)

    def register_prefix(self, kind: TokenKind, fn: PrefixParseFn) -> None:
        self.prefix_parse_fns[kind] = fn

    def register_infix(self, kind: TokenKind, fn: InfixParseFn) -> None:
        self.infix_parse_fns[kind] = fn

    # ── Token access ─────────────────────────────────────────────

    def _advance(self) -> None:
        self.cur_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def _cur_is(self, kind: TokenKind) -> bool:
        return self.cur_token.kind == kind

    def _peek_is(self, kind: TokenKind) -> bool:
        return self.peek_token.kind == kind

    def _expect_peek(self, kind: TokenKind) -> bool:
        """Advance if the next token has the given kind, else record an error."""
        if self._peek_is(kind):
            self._advance()
            return True
        self._error(
            f"expected next token to be {kind.name}, "
            f"got {self.peek_token.kind.name} instead",
            self.peek_token.span,
        )
        return False

    def _peek_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.peek_token.kind, Precedence.LOWEST)

    def _cur_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.cur_token.kind, Precedence.LOWEST)

    @contextmanager
    def _nested(self) -> Iterator[None]:
        if self._depth >= MAX_NESTING_DEPTH:
            raise _NestingTooDeep
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1

    def _skip_statement(self) -> None:
        while not self._cur_is(TokenKind.SEMICOLON) and not self._cur_is(TokenKind.EOF):
            self._advance()

    def _error(self, message: str, span: Span, notes: list[str] | None = None) -> None:
        self.errors.append(message)
        self.diagnostics.append(
            Diagnostic(
                severity=Severity.ERROR,
                code="E200",
                message=message,
                labels=[DiagnosticLabel(span=span, message="")],
                notes=notes or [],
            )
        )

    # ── Program and statements ───────────────────────────────────

    def parse_program(self) -> Program:
        """Parse statements until EOF."""
        statements: list[Statement] = []
        while not self._cur_is(TokenKind.EOF):
            try:
                stmt = self.parse_statement()
            except _NestingTooDeep:
                self._error(
                    "expression nested too deeply",
                    self.cur_token.span,
                    [f"at most {MAX_NESTING_DEPTH} nested levels are supported"],
                )
                self._skip_statement()
                stmt = None
            if stmt is not None:
                statements.append(stmt)
            self._advance()
        return Program(statements)

    def parse_statement(self) -> Statement | None:
        match self.cur_token.kind:
            case TokenKind.IF:
                return self.parse_if_statement()
            case TokenKind.RETURN:
                return self.parse_return_statement()
            case _:
                return self.parse_expression_statement()

    def parse_expression_statement(self) -> ExpressionStatement | None:
        tok = self.cur_token
        expression = self.parse_expression(Precedence.LOWEST)
        if self._peek_is(TokenKind.SEMICOLON):
            self._advance()
        if expression is None:
            return None
        return ExpressionStatement(tok, expression)

    def parse_return_statement(self) -> ReturnStatement:
        tok = self.cur_token
        self._advance()
        # A bare `return` has no value syntax; whatever follows is parsed
        # as the value and reports its own error.
        value = self.parse_expression(Precedence.LOWEST)
        if self._peek_is(TokenKind.SEMICOLON):
            self._advance()
        return ReturnStatement(tok, value)

    def parse_if_statement(self) -> IfStatement | None:
        tok = self.cur_token
        self._advance()
        condition = self.parse_expression(Precedence.LOWEST)

        if not self._expect_peek(TokenKind.LBRACE):
            return None
        consequence = self.parse_block_statement()

        alternate: BlockStatement | IfStatement | None = None
        if self._peek_is(TokenKind.ELSE):
            self._advance()
            if self._peek_is(TokenKind.LBRACE):
                self._advance()
                alternate = self.parse_block_statement()
            elif self._peek_is(TokenKind.IF):
                self._advance()
                with self._nested():
                    alternate = self.parse_if_statement()
            else:
                self._error(
                    "expected either a block statement or an if statement after else",
                    self.peek_token.span,
                )
                return None

        return IfStatement(tok, condition, consequence, alternate)

    def parse_block_statement(self) -> BlockStatement:
        """Parse statements up to the closing brace; current token is '{'."""
        tok = self.cur_token
        statements: list[Statement] = []
        with self._nested():
            self._advance()
            while not self._cur_is(TokenKind.RBRACE) and not self._cur_is(TokenKind.EOF):
                stmt = self.parse_statement()
                if stmt is not None:
                    statements.append(stmt)
                self._advance()
        return BlockStatement(tok, statements)

    # ── Pratt expression parser ──────────────────────────────────

    def parse_expression(self, precedence: Precedence) -> Expression | None:
        """Parse an expression whose operators bind tighter than ``precedence``.

        Each call opens one nesting level; past MAX_NESTING_DEPTH levels the
        enclosing statement is abandoned and ``parse_program`` records
        ``expression nested too deeply``.
        """
        with self._nested():
            prefix = self.prefix_parse_fns.get(self.cur_token.kind)
            if prefix is None:
                self._no_prefix_parse_fn_error(self.cur_token)
                return None
            left = prefix()

            while (
                not self._peek_is(TokenKind.SEMICOLON)
                and precedence < self._peek_precedence()
            ):
                infix = self.infix_parse_fns.get(self.peek_token.kind)
                if infix is None:
                    return left
                self._advance()
                left = infix(left)

            return left

    def _no_prefix_parse_fn_error(self, tok: Token) -> None:
        notes = []
        if tok.kind == TokenKind.ILLEGAL:
            notes.append(f"{tok.literal!r} is not a valid character in Lemon source")
        self._error(
            f"no prefix parse function for {tok.literal!r} [{tok.kind.name}]",
            tok.span,
            notes,
        )

    def _parse_identifier(self) -> Expression:
        return IdentifierLiteral(self.cur_token, self.cur_token.literal)

    def _parse_integer_literal(self) -> Expression | None:
        tok = self.cur_token
        try:
            value = int(tok.literal, 10)
        except ValueError:
            value = None
        if value is None or not _INT64_MIN <= value <= _INT64_MAX:
            self._error(f"could not parse {tok.literal!r} as integer", tok.span)
            return None
        return IntegerLiteral(tok, value)

    def _parse_float_literal(self) -> Expression | None:
        tok = self.cur_token
        try:
            value = float(tok.literal)
        except ValueError:
            value = math.nan
        if not math.isfinite(value):
            self._error(f"could not parse {tok.literal!r} as float", tok.span)
            return None
        return FloatLiteral(tok, value)

    def _parse_boolean_literal(self) -> Expression:
        return BooleanLiteral(self.cur_token, self._cur_is(TokenKind.TRUE))

    def _parse_prefix_expression(self) -> Expression:
        tok = self.cur_token
        self._advance()
        operand = self.parse_expression(Precedence.PREFIX)
        return PrefixExpression(tok, tok.literal, operand)

    def _parse_grouped_expression(self) -> Expression | None:
        self._advance()
        expression = self.parse_expression(Precedence.LOWEST)
        if not self._expect_peek(TokenKind.RPAREN):
            return None
        return expression

    def _parse_infix_expression(self, left: Expression | None) -> Expression:
        tok = self.cur_token
        precedence = self._cur_precedence()
        self._advance()
        right = self.parse_expression(precedence)
        return InfixExpression(tok, left, tok.literal, right)


# ── Entry points ─────────────────────────────────────────────────


def parse(source: str, filename: str = "<stdin>") -> tuple[Program, list[str]]:
    """Lex and parse ``source``; return the program and the parser errors."""
    parser = Parser(Lexer(source, filename))
    program = parser.parse_program()
    return program, parser.errors


def parse_strict(source: str, filename: str = "<stdin>") -> Program:
    """Like ``parse`` but raise CompileError when any error was recorded."""
    parser = Parser(Lexer(source, filename))
    program = parser.parse_program()
    if parser.diagnostics:
        raise CompileError(parser.diagnostics)
    return program
