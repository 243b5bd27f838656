"""calcjit JIT Engine — MCJIT compilation and invocation.

A JitEngine owns one LLVM execution engine and at most one compiled
function. Use it as a context manager so the native code pages are released
on every exit path:

    with JitEngine(config) as engine:
        engine.compile(ir_function)
        value = engine.invoke()

The native entry point never leaves the engine. It is called at most once
and is dropped as soon as it returns, or when the engine is closed.
"""

from __future__ import annotations

import ctypes
import logging
from typing import Any, Optional

from llvmlite import binding as llvm_binding

from calcjit.config import JitConfig
from calcjit.emit import emit, initialize_llvm, parse_module, create_target_machine
from calcjit.errors import JitError
from calcjit.ir import IRFunction

logger = logging.getLogger(__name__)

_ENTRY_SIGNATURE = ctypes.CFUNCTYPE(ctypes.c_double)


class JitEngine:
    """Compiles one IR function to native code and calls it."""

    def __init__(self, config: Optional[JitConfig] = None):
        self.config = config or JitConfig()
        self.llvm_ir: Optional[str] = None
        self._engine: Optional[Any] = None
        self._entry: Optional[Any] = None
        self._invoked = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def open(self) -> None:
        if self._closed:
            raise JitError("JIT engine has been closed")
        if self._engine is not None:
            return
        initialize_llvm()
        target_machine = create_target_machine(self.config.opt_level)
        backing_mod = llvm_binding.parse_assembly("")
        self._engine = llvm_binding.create_mcjit_compiler(backing_mod, target_machine)
        logger.debug("opened MCJIT engine (opt_level=%d)", self.config.opt_level)

    def compile(self, func: IRFunction) -> None:
        """Compile ``func`` to native code. Takes ownership of ``func``."""
        if self._entry is not None or self._invoked:
            raise JitError("JIT engine already holds a compiled function")
        self.open()

        llvm_ir_str = emit(func, module_name=self.config.module_name)
        mod = parse_module(llvm_ir_str, verify=self.config.verify)
        self._engine.add_module(mod)
        self._engine.finalize_object()

        addr = self._engine.get_function_address(func.name)
        if not addr:
            raise JitError(f"Compiled function '{func.name}' was not found",
                           details={"entry_name": func.name})
        self._entry = _ENTRY_SIGNATURE(addr)
        self.llvm_ir = llvm_ir_str
        logger.debug("compiled %s at 0x%x", func.name, addr)

    def invoke(self) -> float:
        """Call the compiled function once and return its value."""
        if self._closed:
            raise JitError("JIT engine has been closed")
        if self._invoked:
            raise JitError("Compiled function has already been invoked")
        if self._entry is None:
            raise JitError("No function has been compiled")
        entry, self._entry = self._entry, None
        self._invoked = True
        return float(entry())

    def close(self) -> None:
        """Release the execution engine and its native code."""
        self._entry = None
        if self._engine is not None:
            self._engine.close()
            self._engine = None
            logger.debug("closed MCJIT engine")
        self._closed = True

    def __enter__(self) -> JitEngine:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
