"""calcjit Flat IR — a straight-line instruction sequence.

Each node is one operation over the results of earlier nodes, referenced by
id. Nodes appear in evaluation (post-)order and the last node is the single
RETURN. Every value is an IEEE-754 double.
JSON-serializable for inspection.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class IROpKind(Enum):
    CONST = "const"

    # Arithmetic
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    NEG = "neg"

    RETURN = "return"


BINARY_OPS = frozenset({IROpKind.ADD, IROpKind.SUB, IROpKind.MUL, IROpKind.DIV})


@dataclass(frozen=True)
class IRNode:
    """A single instruction in the flat IR."""
    id: int
    op: IROpKind
    inputs: tuple[int, ...] = ()
    value: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "op": self.op.value,
        }
        if self.inputs:
            d["inputs"] = list(self.inputs)
        if self.value is not None:
            d["value"] = self.value
        return d


@dataclass
class IRFunction:
    """A nullary function returning a double."""
    name: str
    nodes: list[IRNode] = field(default_factory=list)

    @property
    def result(self) -> IRNode:
        return self.nodes[-1]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "return_type": "Float",
            "nodes": [n.to_dict() for n in self.nodes],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
