"""Lemon front-end CLI."""

from __future__ import annotations

from pathlib import Path

import click

from lemon import __version__
from lemon.ast_nodes import Program
from lemon.config import LemonConfig, resolve_config
from lemon.errors import Diagnostic, DiagnosticRenderer
from lemon.lexer import Lexer
from lemon.parser import Parser
from lemon.source import SourceFile

SOURCE_SUFFIX = ".lm"


def _parse_source(source: SourceFile) -> tuple[Program, list[Diagnostic]]:
    """Lex and parse a source file. Returns (program, diagnostics)."""
    parser = Parser(Lexer(source.content, source.name))
    program = parser.parse_program()
    return program, parser.diagnostics


def _report(
    diagnostics: list[Diagnostic], source: SourceFile, config: LemonConfig,
) -> None:
    """Render diagnostics to stderr, honouring output.max_errors."""
    renderer = DiagnosticRenderer(color=config.output.color, sources=[source])
    shown = diagnostics
    if config.output.max_errors > 0:
        shown = diagnostics[:config.output.max_errors]
    for diag in shown:
        click.echo(renderer.render(diag), err=True)
    hidden = len(diagnostics) - len(shown)
    if hidden:
        click.echo(f"... and {hidden} more error(s)", err=True)


def _source_files(target: Path) -> list[Path]:
    if target.is_dir():
        return sorted(target.rglob(f"*{SOURCE_SUFFIX}"))
    return [target]


@click.group()
@click.version_option(__version__, prog_name="lemon")
def main() -> None:
    """The Lemon language front-end: lexer, parser and tools."""


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def tokens(file: str) -> None:
    """Print the token stream of a Lemon source file."""
    source = SourceFile.from_path(Path(file))
    for tok in Lexer(source.content, source.name):
        span = tok.span
        click.echo(f"{tok.kind.name:<10} {tok.literal!r:<12} {span.start_line}:{span.start_col}")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def parse(file: str) -> None:
    """Print the canonical (fully parenthesized) form of a Lemon file."""
    config = resolve_config(Path(file))
    source = SourceFile.from_path(Path(file))
    program, diagnostics = _parse_source(source)
    if diagnostics:
        _report(diagnostics, source, config)
        raise SystemExit(1)
    click.echo(str(program))


@main.command()
@click.argument("path", default=".", type=click.Path(exists=True))
def check(path: str) -> None:
    """Parse Lemon files and report every syntax error."""
    config = resolve_config(Path(path))
    files = _source_files(Path(path))
    if not files:
        click.echo(f"warning: no {SOURCE_SUFFIX} files found", err=True)
        return

    error_count = 0
    for lm_file in files:
        source = SourceFile.from_path(lm_file)
        _, diagnostics = _parse_source(source)
        if diagnostics:
            error_count += len(diagnostics)
            _report(diagnostics, source, config)

    if error_count:
        click.echo(f"checked {len(files)} file(s): {error_count} error(s)", err=True)
        raise SystemExit(1)
    click.echo(f"checked {len(files)} file(s): no errors")


@main.command(name="format")
@click.argument("path", default=".", type=click.Path(exists=True))
@click.option("--check", is_flag=True, help="Check formatting without modifying files.")
@click.option("--stdin", "use_stdin", is_flag=True, help="Read from stdin, write to stdout.")
def format_cmd(path: str, check: bool, use_stdin: bool) -> None:
    """Format Lemon source files."""
    import sys

    from lemon.formatter import LemonFormatter

    config = resolve_config(Path(path))
    formatter = LemonFormatter(indent=config.format.indent)

    if use_stdin:
        source = SourceFile(sys.stdin.read(), "<stdin>")
        program, diagnostics = _parse_source(source)
        if diagnostics:
            _report(diagnostics, source, config)
            raise SystemExit(1)
        formatted = formatter.format(program)
        if check:
            if formatted != source.content:
                raise SystemExit(1)
        else:
            sys.stdout.write(formatted)
        return

    files = _source_files(Path(path))
    if not files:
        click.echo(f"no {SOURCE_SUFFIX} files found", err=True)
        return

    needs_formatting = False
    for lm_file in files:
        source = SourceFile.from_path(lm_file)
        program, diagnostics = _parse_source(source)
        if diagnostics:
            _report(diagnostics, source, config)
            continue

        formatted = formatter.format(program)
        if formatted != source.content:
            if check:
                click.echo(f"would reformat {source.name}")
                needs_formatting = True
            else:
                lm_file.write_text(formatted)
                click.echo(f"formatted {source.name}")

    if check and needs_formatting:
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def view(file: str) -> None:
    """View the AST of a Lemon source file."""
    config = resolve_config(Path(file))
    source = SourceFile.from_path(Path(file))
    program, diagnostics = _parse_source(source)
    if diagnostics:
        _report(diagnostics, source, config)
        raise SystemExit(1)

    _dump_ast(program, 0)


@main.command()
def lsp() -> None:
    """Start the Lemon language server."""
    from lemon.lsp import main as lsp_main

    lsp_main()


def _dump_ast(node: object, depth: int) -> None:
    """Print a readable AST dump.

    Walks with an explicit stack of ``(line, None)`` and ``(node, depth)``
    entries so long operator chains do not exhaust the call stack.
    """
    stack: list[tuple[object, int | None]] = [(node, depth)]
    while stack:
        item, item_depth = stack.pop()
        if item_depth is None:
            click.echo(item)
            continue

        indent = "  " * item_depth
        name = type(item).__name__
        if not hasattr(item, "__dataclass_fields__"):
            click.echo(f"{indent}{name}: {item!r}")
            continue

        click.echo(f"{indent}{name}")
        pending: list[tuple[object, int | None]] = []
        for field_name in item.__dataclass_fields__:  # type: ignore[attr-defined]
            if field_name == "token":
                continue
            value = getattr(item, field_name)
            if isinstance(value, list):
                if value:
                    pending.append((f"{indent}  {field_name}:", None))
                    pending.extend((child, item_depth + 2) for child in value)
                else:
                    pending.append((f"{indent}  {field_name}: []", None))
            elif hasattr(value, "__dataclass_fields__"):
                pending.append((f"{indent}  {field_name}:", None))
                pending.append((value, item_depth + 2))
            elif value is not None:
                pending.append((f"{indent}  {field_name}: {value!r}", None))
        stack.extend(reversed(pending))
