"""calcjit Emit — flat IR → LLVM IR via llvmlite.

All arithmetic is done in ``double``. Division follows IEEE-754: dividing by
zero yields +/-inf, and 0/0 yields nan. No optimization happens here; the
target machine's default lowering is the only optimization applied.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from llvmlite import ir as llvm_ir
from llvmlite import binding as llvm_binding

from calcjit.ir import IRFunction, IRNode, IROpKind, BINARY_OPS
from calcjit.errors import JitError

logger = logging.getLogger(__name__)

DOUBLE = llvm_ir.DoubleType()


class LLVMEmitter:
    """Emits an LLVM module holding one nullary ``double`` function."""

    def __init__(self, module_name: str = "calcjit"):
        self.module_name = module_name
        self.module: Optional[llvm_ir.Module] = None
        self._builder: Optional[llvm_ir.IRBuilder] = None
        self._values: dict[int, Any] = {}

    def emit_function(self, func: IRFunction) -> str:
        """Emit LLVM IR for ``func``. Returns the module as LLVM IR text."""
        self.module = llvm_ir.Module(name=self.module_name)
        self.module.triple = llvm_binding.get_default_triple()

        fn_type = llvm_ir.FunctionType(DOUBLE, [])
        llvm_func = llvm_ir.Function(self.module, fn_type, name=func.name)

        block = llvm_func.append_basic_block(name="entry")
        self._builder = llvm_ir.IRBuilder(block)
        self._values = {}

        for node in func.nodes:
            self._emit_node(node)

        if not self._builder.block.is_terminated:
            raise JitError(f"IR function '{func.name}' does not end with a return")

        return str(self.module)

    def _emit_node(self, node: IRNode) -> None:
        if node.op == IROpKind.CONST:
            self._values[node.id] = llvm_ir.Constant(DOUBLE, node.value)

        elif node.op in BINARY_OPS:
            self._emit_arithmetic(node)

        elif node.op == IROpKind.NEG:
            operand = self._get_value(node.inputs[0])
            self._values[node.id] = self._builder.fneg(operand, name=f"neg.{node.id}")

        elif node.op == IROpKind.RETURN:
            self._builder.ret(self._get_value(node.inputs[0]))

    def _emit_arithmetic(self, node: IRNode) -> None:
        left = self._get_value(node.inputs[0])
        right = self._get_value(node.inputs[1])
        name = f"op.{node.id}"

        if node.op == IROpKind.ADD:
            self._values[node.id] = self._builder.fadd(left, right, name=name)
        elif node.op == IROpKind.SUB:
            self._values[node.id] = self._builder.fsub(left, right, name=name)
        elif node.op == IROpKind.MUL:
            self._values[node.id] = self._builder.fmul(left, right, name=name)
        elif node.op == IROpKind.DIV:
            self._values[node.id] = self._builder.fdiv(left, right, name=name)

    def _get_value(self, node_id: int) -> Any:
        try:
            return self._values[node_id]
        except KeyError:
            raise JitError(f"IR node {node_id} is used before it is defined",
                           details={"node_id": node_id}) from None


# ---------------------------------------------------------------------------
# Native compilation
# ---------------------------------------------------------------------------

def initialize_llvm() -> None:
    """Initialize the native target. Safe to call more than once."""
    llvm_binding.initialize_native_target()
    llvm_binding.initialize_native_asmprinter()


def parse_module(llvm_ir_str: str, verify: bool = True) -> Any:
    """Parse LLVM IR text into a module reference, optionally verifying it."""
    try:
        mod = llvm_binding.parse_assembly(llvm_ir_str)
        if verify:
            mod.verify()
    except RuntimeError as e:
        raise JitError(f"LLVM rejected the generated module: {e}") from e
    return mod


def create_target_machine(opt_level: int = 0) -> Any:
    target = llvm_binding.Target.from_default_triple()
    return target.create_target_machine(opt=opt_level)


def compile_to_assembly(llvm_ir_str: str, opt_level: int = 0) -> str:
    """Compile LLVM IR text to native assembly text."""
    initialize_llvm()
    mod = parse_module(llvm_ir_str)
    return create_target_machine(opt_level).emit_assembly(mod)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def emit(func: IRFunction, module_name: str = "calcjit") -> str:
    """Emit LLVM IR text from a flat IR function."""
    llvm_ir_str = LLVMEmitter(module_name).emit_function(func)
    logger.debug("emitted %d bytes of LLVM IR for %s", len(llvm_ir_str), func.name)
    return llvm_ir_str
