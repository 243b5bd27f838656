"""calcjit CodeGen — lowers the expression tree to a flat IR function.

Operands are lowered before their operator (post-order). Groupings emit
nothing of their own. The function ends with one RETURN of the root value.
Lowering never fails for a tree the parser can produce.
"""

from __future__ import annotations

import logging
from typing import Optional

from calcjit.ast_nodes import (
    Expr, NumberLiteral, UnaryExpr, BinaryExpr, Grouping,
    BinaryOperator, UnaryOperator,
)
from calcjit.ir import IRFunction, IRNode, IROpKind

logger = logging.getLogger(__name__)

DEFAULT_ENTRY_NAME = "calcjit_expr"

_BINARY_OPS: dict[BinaryOperator, IROpKind] = {
    BinaryOperator.ADD: IROpKind.ADD,
    BinaryOperator.SUB: IROpKind.SUB,
    BinaryOperator.MUL: IROpKind.MUL,
    BinaryOperator.DIV: IROpKind.DIV,
}

_UNARY_OPS: dict[UnaryOperator, IROpKind] = {
    UnaryOperator.NEG: IROpKind.NEG,
}


class CodeGen:
    """Lowers an expression tree to flat IR."""

    def __init__(self):
        self._next_id = 0
        self._nodes: list[IRNode] = []

    def _new_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        return nid

    def _emit(self, op: IROpKind, inputs: tuple[int, ...] = (),
              value: Optional[float] = None) -> IRNode:
        node = IRNode(id=self._new_id(), op=op, inputs=inputs, value=value)
        self._nodes.append(node)
        return node

    def lower_function(self, root: Expr, name: str = DEFAULT_ENTRY_NAME) -> IRFunction:
        self._next_id = 0
        self._nodes = []

        result = self._lower_expr(root)
        self._emit(IROpKind.RETURN, inputs=(result,))

        func = IRFunction(name=name, nodes=list(self._nodes))
        logger.debug("lowered %s to %d IR nodes", name, len(func.nodes))
        return func

    def _lower_expr(self, root: Expr) -> int:
        """Lower ``root`` and return the id of the node holding its value.

        Walks the tree with an explicit stack. An entry whose flag is set has
        had its operands lowered already, and their ids are on ``results``.
        """
        results: list[int] = []
        stack: list[tuple[Expr, bool]] = [(root, False)]
        while stack:
            expr, operands_done = stack.pop()

            if isinstance(expr, NumberLiteral):
                results.append(self._emit(IROpKind.CONST, value=float(expr.value)).id)

            elif isinstance(expr, Grouping):
                stack.append((expr.inner, False))

            elif isinstance(expr, UnaryExpr):
                if operands_done:
                    operand = results.pop()
                    results.append(self._emit(_UNARY_OPS[expr.op], inputs=(operand,)).id)
                else:
                    stack.append((expr, True))
                    stack.append((expr.operand, False))

            elif isinstance(expr, BinaryExpr):
                if operands_done:
                    right = results.pop()
                    left = results.pop()
                    results.append(self._emit(_BINARY_OPS[expr.op], inputs=(left, right)).id)
                else:
                    stack.append((expr, True))
                    stack.append((expr.right, False))
                    stack.append((expr.left, False))

            else:
                raise TypeError(f"Unsupported node: {expr.__class__.__name__}")

        return results.pop()


def lower(root: Expr, name: str = DEFAULT_ENTRY_NAME) -> IRFunction:
    """Lower an expression tree to a flat IR function."""
    return CodeGen().lower_function(root, name=name)
