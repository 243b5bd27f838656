"""calcjit — JIT compiler for arithmetic expressions."""

__version__ = "0.1.0"

from calcjit.lexer import Lexer, Token, TokenType, tokenize
from calcjit.parser import Parser, parse
from calcjit.ast_nodes import (
    Expr, NumberLiteral, UnaryExpr, BinaryExpr, Grouping,
    BinaryOperator, UnaryOperator,
)
from calcjit.ir import IRFunction, IRNode, IROpKind
from calcjit.codegen import CodeGen, lower
from calcjit.emit import emit, compile_to_assembly
from calcjit.jit import JitEngine
from calcjit.config import JitConfig, load_config
from calcjit.errors import (
    ErrorKind, Diagnostic, SourceLocation,
    CompileError, LexError, ParseError, JitError, ConfigError,
)
from calcjit.pipeline import compile_source, evaluate
