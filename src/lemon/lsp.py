"""Lemon language server: a pygls-based LSP for .lm files.

Publishes parser diagnostics, shows token hovers and formats documents
via stdio transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from lemon import __version__
from lemon.ast_nodes import Program, Statement
from lemon.errors import CompileError, Diagnostic, Severity
from lemon.formatter import LemonFormatter
from lemon.lexer import Lexer
from lemon.parser import Parser, parse_strict
from lemon.source import Span
from lemon.tokens import Token, TokenKind

# ── Conversion helpers ────────────────────────────────────────────

_SEVERITY_MAP = {
    Severity.ERROR: lsp.DiagnosticSeverity.Error,
    Severity.WARNING: lsp.DiagnosticSeverity.Warning,
    Severity.NOTE: lsp.DiagnosticSeverity.Information,
}


def span_to_range(span: Span) -> lsp.Range:
    """Convert a 1-indexed Lemon Span to a 0-indexed LSP Range."""
    return lsp.Range(
        start=lsp.Position(line=span.start_line - 1, character=span.start_col - 1),
        end=lsp.Position(line=span.end_line - 1, character=span.end_col),
    )


def _compile_diag(d: Diagnostic) -> lsp.Diagnostic:
    """Convert a lemon Diagnostic to an LSP Diagnostic."""
    span_range = lsp.Range(start=lsp.Position(0, 0), end=lsp.Position(0, 0))
    if d.labels:
        span_range = span_to_range(d.labels[0].span)
    return lsp.Diagnostic(
        range=span_range,
        severity=_SEVERITY_MAP.get(d.severity, lsp.DiagnosticSeverity.Error),
        source="lemon",
        code=d.code,
        message=f"[{d.code}] {d.message}",
    )


@dataclass
class DocumentState:
    """Cached analysis results for a single open document."""

    source: str = ""
    tokens: list[Token] = field(default_factory=list)
    program: Program | None = None
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)


# ── Server ────────────────────────────────────────────────────────

server = LanguageServer(
    "lemon-lsp", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)
_state: dict[str, DocumentState] = {}


def _analyze(uri: str, source: str) -> DocumentState:
    """Run Lexer → Parser, cache results, return state."""
    ds = DocumentState(source=source)
    ds.tokens = Lexer(source, uri).lex()
    parser = Parser(Lexer(source, uri))
    ds.program = parser.parse_program()
    ds.diagnostics = [_compile_diag(d) for d in parser.diagnostics]
    _state[uri] = ds
    return ds


def _token_at(tokens: list[Token], line: int, character: int) -> Token | None:
    """Find the source token covering a 0-indexed position."""
    for tok in tokens:
        if tok.kind in (TokenKind.EOF, TokenKind.SEMICOLON):
            continue
        span = tok.span
        if span.start_line - 1 != line:
            continue
        if span.start_col - 1 <= character < span.end_col:
            return tok
    return None


def _statement_at(program: Program, tok: Token) -> Statement | None:
    """Return the top-level statement that starts at the given token."""
    for stmt in program.statements:
        if stmt.token.span == tok.span:
            return stmt
    return None


# ── LSP Feature Handlers ─────────────────────────────────────────


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
    uri = params.text_document.uri
    ds = _analyze(uri, params.text_document.text)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    # Full sync: take the last content change
    source = params.content_changes[-1].text if params.content_changes else ""
    ds = _analyze(uri, source)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
    _state.pop(params.text_document.uri, None)


@server.feature(lsp.TEXT_DOCUMENT_HOVER)
def hover(params: lsp.HoverParams) -> lsp.Hover | None:
    ds = _state.get(params.text_document.uri)
    if ds is None:
        return None
    return _hover_for(ds, params.position.line, params.position.character)


def _hover_for(ds: DocumentState, line: int, character: int) -> lsp.Hover | None:
    tok = _token_at(ds.tokens, line, character)
    if tok is None:
        return None

    content = f"**{tok.kind.name}** `{tok.literal}`"
    if ds.program is not None:
        stmt = _statement_at(ds.program, tok)
        if stmt is not None:
            content += f"\n\n```\n{stmt}\n```"
    return lsp.Hover(
        contents=lsp.MarkupContent(kind=lsp.MarkupKind.Markdown, value=content),
        range=span_to_range(tok.span),
    )


@server.feature(lsp.TEXT_DOCUMENT_FORMATTING)
def formatting(params: lsp.DocumentFormattingParams) -> list[lsp.TextEdit] | None:
    ds = _state.get(params.text_document.uri)
    if ds is None:
        return None
    return _format_edits(ds.source, params.options.tab_size)


def _format_edits(source: str, indent: int = 4) -> list[lsp.TextEdit] | None:
    """Whole-document edit, or None when the source does not parse."""
    try:
        program = parse_strict(source)
    except CompileError:
        return None

    formatted = LemonFormatter(indent=indent).format(program)
    if formatted == source:
        return []
    lines = source.splitlines()
    return [lsp.TextEdit(
        range=lsp.Range(
            start=lsp.Position(line=0, character=0),
            end=lsp.Position(line=len(lines), character=0),
        ),
        new_text=formatted,
    )]


# ── Entry point ──────────────────────────────────────────────────


def main() -> None:
    """Start the Lemon language server on stdio."""
    server.start_io()
