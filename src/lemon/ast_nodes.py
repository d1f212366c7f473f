"""AST node definitions for the Lemon language.

``str(node)`` is the canonical rendering: prefix and infix expressions are
fully parenthesized and statement sequences are concatenated without a
separator, so ``-a * b`` renders as ``((-a) * b)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from lemon.tokens import Token

# ── Expressions ──────────────────────────────────────────────────


@dataclass(frozen=True)
class IdentifierLiteral:
    token: Token
    value: str

    def token_literal(self) -> str:
        return self.token.literal

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class IntegerLiteral:
    token: Token
    value: int

    def token_literal(self) -> str:
        return self.token.literal

    def __str__(self) -> str:
        return self.token.literal


@dataclass(frozen=True)
class FloatLiteral:
    token: Token
    value: float

    def token_literal(self) -> str:
        return self.token.literal

    def __str__(self) -> str:
        return self.token.literal


@dataclass(frozen=True)
class BooleanLiteral:
    token: Token
    value: bool

    def token_literal(self) -> str:
        return self.token.literal

    def __str__(self) -> str:
        return self.token.literal


@dataclass(frozen=True)
class PrefixExpression:
    token: Token  # the operator token
    operator: str
    operand: Expression | None

    def token_literal(self) -> str:
        return self.token.literal

    def __str__(self) -> str:
        return _render_expression(self)


@dataclass(frozen=True)
class InfixExpression:
    token: Token  # the operator token
    left: Expression | None
    operator: str
    right: Expression | None

    def token_literal(self) -> str:
        return self.token.literal

    def __str__(self) -> str:
        return _render_expression(self)


Expression = Union[
    IdentifierLiteral, IntegerLiteral, FloatLiteral, BooleanLiteral,
    PrefixExpression, InfixExpression,
]


# ── Statements ───────────────────────────────────────────────────


@dataclass(frozen=True)
class ExpressionStatement:
    token: Token  # first token of the expression
    expression: Expression

    def token_literal(self) -> str:
        return self.token.literal

    def __str__(self) -> str:
        return str(self.expression)


@dataclass(frozen=True)
class ReturnStatement:
    token: Token  # the 'return' token
    return_value: Expression | None

    def token_literal(self) -> str:
        return self.token.literal

    def __str__(self) -> str:
        return f"{self.token_literal()} {_render(self.return_value)};"


@dataclass(frozen=True)
class BlockStatement:
    token: Token  # the '{' token
    statements: list[Statement]

    def token_literal(self) -> str:
        return self.token.literal

    def __str__(self) -> str:
        return "".join(str(s) for s in self.statements)


@dataclass(frozen=True)
class IfStatement:
    token: Token  # the 'if' token
    condition: Expression | None
    consequence: BlockStatement
    alternate: BlockStatement | IfStatement | None

    def token_literal(self) -> str:
        return self.token.literal

    def __str__(self) -> str:
        out = f"if {_render(self.condition)} {{{self.consequence}}}"
        if isinstance(self.alternate, BlockStatement):
            out += f" else {{{self.alternate}}}"
        elif self.alternate is not None:
            out += f" else {self.alternate}"
        return out


Statement = Union[ExpressionStatement, ReturnStatement, BlockStatement, IfStatement]


@dataclass(frozen=True)
class Program:
    statements: list[Statement]

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ""

    def __str__(self) -> str:
        return "".join(str(s) for s in self.statements)


Node = Union[Program, Statement, Expression]


def _render(node: Node | None) -> str:
    return "" if node is None else str(node)


def _render_expression(expr: PrefixExpression | InfixExpression) -> str:
    """Render an operator expression with an explicit stack.

    Left-deep chains such as ``1 + 1 + ... + 1`` grow without bound, so
    operands are not rendered by recursing through ``__str__``.
    """
    parts: list[str] = []
    # Text pieces and pending nodes, popped in output order.
    stack: list[str | Expression | None] = [expr]
    while stack:
        item = stack.pop()
        if item is None:
            continue
        if isinstance(item, str):
            parts.append(item)
        elif isinstance(item, InfixExpression):
            stack.extend((")", item.right, f" {item.operator} ", item.left, "("))
        elif isinstance(item, PrefixExpression):
            stack.extend((")", item.operand, f"({item.operator}"))
        else:
            parts.append(str(item))
    return "".join(parts)
