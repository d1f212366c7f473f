"""AST-walking pretty-printer for Lemon source code.

Unlike the canonical rendering (``str(node)``), which parenthesizes every
operator and glues statements together, the formatter emits one statement
per line, indents blocks and keeps only the parentheses the parsed
structure needs.
"""

from __future__ import annotations

from lemon.ast_nodes import (
    BlockStatement,
    BooleanLiteral,
    ExpressionStatement,
    FloatLiteral,
    IdentifierLiteral,
    IfStatement,
    InfixExpression,
    IntegerLiteral,
    PrefixExpression,
    Program,
    ReturnStatement,
)
from lemon.parser import PRECEDENCES, Precedence


class LemonFormatter:
    """Format a parsed Lemon Program back to readable source text."""

    def __init__(self, indent: int = 4) -> None:
        self.indent = indent

    # ── Public API ─────────────────────────────────────────────

    def format(self, program: Program) -> str:
        """Format a program; the result ends with a newline unless empty."""
        lines = [self._format_stmt(stmt) for stmt in program.statements]
        if not lines:
            return ""
        return "\n".join(lines) + "\n"

    # ── Statements ─────────────────────────────────────────────

    def _format_stmt(self, stmt: object) -> str:
        if isinstance(stmt, ExpressionStatement):
            return self._format_expr(stmt.expression)
        if isinstance(stmt, ReturnStatement):
            if stmt.return_value is None:
                return "return"
            return f"return {self._format_expr(stmt.return_value)}"
        if isinstance(stmt, IfStatement):
            return self._format_if(stmt)
        if isinstance(stmt, BlockStatement):
            return self._format_block(stmt)
        raise TypeError(f"cannot format statement node {type(stmt).__name__}")

    def _format_if(self, stmt: IfStatement) -> str:
        out = f"if {self._format_expr(stmt.condition)} {self._format_block(stmt.consequence)}"
        if isinstance(stmt.alternate, BlockStatement):
            out += f" else {self._format_block(stmt.alternate)}"
        elif isinstance(stmt.alternate, IfStatement):
            out += f" else {self._format_if(stmt.alternate)}"
        return out

    def _format_block(self, block: BlockStatement) -> str:
        if not block.statements:
            return "{}"
        body = "\n".join(self._format_stmt(s) for s in block.statements)
        return "{\n" + self._indent(body) + "\n}"

    # ── Expressions ────────────────────────────────────────────

    def _format_expr(self, expr: object, parent_prec: int = 0) -> str:
        """Format an expression with an explicit stack.

        Pending nodes are ``(node, parent_prec)`` pairs and plain strings are
        text already decided. A binary child is parenthesized when it binds
        looser than its parent; operators are left-associative, so an
        equal-precedence right operand keeps its parentheses.
        """
        parts: list[str] = []
        stack: list[str | tuple[object, int]] = [(expr, parent_prec)]
        while stack:
            item = stack.pop()
            if isinstance(item, str):
                parts.append(item)
                continue
            node, context_prec = item
            if node is None:
                continue
            if isinstance(node, (IdentifierLiteral, IntegerLiteral, FloatLiteral, BooleanLiteral)):
                parts.append(node.token_literal())
            elif isinstance(node, PrefixExpression):
                parts.append(node.operator)
                stack.append((node.operand, Precedence.PREFIX))
            elif isinstance(node, InfixExpression):
                prec = PRECEDENCES.get(node.token.kind, Precedence.LOWEST)
                wrap = prec < context_prec
                if wrap:
                    stack.append(")")
                stack.append((node.right, prec + 1))
                stack.append(f" {node.operator} ")
                stack.append((node.left, prec))
                if wrap:
                    stack.append("(")
            else:
                raise TypeError(f"cannot format expression node {type(node).__name__}")
        return "".join(parts)

    # ── Helpers ────────────────────────────────────────────────

    def _indent(self, text: str) -> str:
        prefix = " " * self.indent
        return "\n".join(prefix + line if line else line for line in text.splitlines())
