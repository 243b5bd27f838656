"""calcjit AST node definitions.

A single expression tree: number literals, unary negation, binary
arithmetic and parenthesized groupings. Each node owns its children.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from calcjit.errors import SourceLocation


class BinaryOperator(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    @property
    def precedence(self) -> int:
        if self in (BinaryOperator.ADD, BinaryOperator.SUB):
            return 1
        return 2


class UnaryOperator(Enum):
    NEG = "-"


def _format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

@dataclass
class Expr:
    location: Optional[SourceLocation] = None

    def render(self) -> str:
        """Render fully parenthesized. Groupings render as their inner node."""
        out: list[str] = []
        stack: list[Union[Expr, str]] = [self]
        while stack:
            item = stack.pop()
            if isinstance(item, str):
                out.append(item)
            elif isinstance(item, NumberLiteral):
                out.append(_format_number(item.value))
            elif isinstance(item, Grouping):
                stack.append(item.inner)
            elif isinstance(item, UnaryExpr):
                stack.extend([")", item.operand, f"({item.op.value}"])
            elif isinstance(item, BinaryExpr):
                stack.extend([")", item.right, f" {item.op.value} ", item.left, "("])
            else:
                raise TypeError(f"Unsupported node: {item.__class__.__name__}")
        return "".join(out)


@dataclass
class NumberLiteral(Expr):
    value: float = 0.0


@dataclass
class UnaryExpr(Expr):
    op: UnaryOperator = UnaryOperator.NEG
    operand: Expr = field(default_factory=Expr)


@dataclass
class BinaryExpr(Expr):
    op: BinaryOperator = BinaryOperator.ADD
    left: Expr = field(default_factory=Expr)
    right: Expr = field(default_factory=Expr)


@dataclass
class Grouping(Expr):
    """A parenthesized subexpression. Evaluates to ``inner``."""
    inner: Expr = field(default_factory=Expr)
