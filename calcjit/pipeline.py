"""calcjit pipeline — source text to native result.

    text → tokens → expression tree → IR function → native result

Every stage raises on its first error (LexError, ParseError, JitError);
nothing is recovered and nothing is printed.
"""

from __future__ import annotations

import logging
from typing import Optional

from calcjit.codegen import lower
from calcjit.config import JitConfig
from calcjit.ir import IRFunction
from calcjit.jit import JitEngine
from calcjit.parser import parse

logger = logging.getLogger(__name__)


def compile_source(source: str, config: Optional[JitConfig] = None) -> IRFunction:
    """Lex, parse and lower ``source`` to an IR function."""
    config = config or JitConfig()
    return lower(parse(source), name=config.entry_name)


def evaluate(source: str, config: Optional[JitConfig] = None) -> float:
    """Compile ``source`` to native code, run it once, and return the value.

    Each call uses its own JIT engine, which is torn down before returning.
    """
    config = config or JitConfig()
    func = compile_source(source, config)
    with JitEngine(config) as engine:
        engine.compile(func)
        result = engine.invoke()
    logger.debug("evaluated %r = %r", source, result)
    return result
