"""Shared test helpers for the Lemon test suite."""

from __future__ import annotations

from lemon.ast_nodes import Program
from lemon.lexer import Lexer
from lemon.parser import Parser


def parse_ok(source: str) -> Program:
    """Parse source, asserting the parser recorded no errors."""
    parser = Parser(Lexer(source, "<test>"))
    program = parser.parse_program()
    assert not parser.errors, f"Unexpected errors: {parser.errors}"
    return program


def parse_errors(source: str) -> list[str]:
    """Parse source and return the recorded error messages."""
    parser = Parser(Lexer(source, "<test>"))
    parser.parse_program()
    return parser.errors


def canonical(source: str) -> str:
    """Parse source without errors and return its canonical rendering."""
    return str(parse_ok(source))
