"""Structured error objects for the calcjit pipeline.

Every failure carries a machine-readable ``Diagnostic`` so the caller can
render its own message and choose an exit code. Nothing here prints.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    # Lexing
    UNEXPECTED_CHARACTER = "unexpected_character"
    MALFORMED_NUMBER = "malformed_number"

    # Parsing
    UNEXPECTED_TOKEN = "unexpected_token"
    UNMATCHED_PAREN = "unmatched_paren"
    EMPTY_EXPRESSION = "empty_expression"
    TRAILING_INPUT = "trailing_input"

    # Configuration / backend
    CONFIG_ERROR = "config_error"
    INTERNAL_ERROR = "internal_error"


@dataclass
class SourceLocation:
    offset: int
    line: int = 1
    column: int = 1

    def __str__(self) -> str:
        return f"{self.line}:{self.column} (offset {self.offset})"


@dataclass
class Diagnostic:
    kind: ErrorKind
    message: str
    location: Optional[SourceLocation] = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.location:
            d["location"] = {
                "offset": self.location.offset,
                "line": self.location.line,
                "column": self.location.column,
            }
        if self.details:
            d["details"] = self.details
        return d

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __str__(self) -> str:
        loc = f" at {self.location}" if self.location else ""
        return f"[{self.kind.value}]{loc}: {self.message}"


# ---------------------------------------------------------------------------
# Diagnostic constructors
# ---------------------------------------------------------------------------

def unexpected_character(char: str, location: SourceLocation) -> Diagnostic:
    return Diagnostic(
        kind=ErrorKind.UNEXPECTED_CHARACTER,
        message=f"Unexpected character {char!r}",
        location=location,
        details={"character": char, "offset": location.offset},
    )


def malformed_number(lexeme: str, char: str, location: SourceLocation) -> Diagnostic:
    return Diagnostic(
        kind=ErrorKind.MALFORMED_NUMBER,
        message=f"Unexpected {char!r} in numeric literal {lexeme!r}",
        location=location,
        details={"character": char, "lexeme": lexeme, "offset": location.offset},
    )


def unexpected_token(found: str, expected: str, location: SourceLocation) -> Diagnostic:
    return Diagnostic(
        kind=ErrorKind.UNEXPECTED_TOKEN,
        message=f"Expected {expected}, found {found}",
        location=location,
        details={"found": found, "expected": expected},
    )


def unmatched_paren(open_location: SourceLocation, location: SourceLocation) -> Diagnostic:
    return Diagnostic(
        kind=ErrorKind.UNMATCHED_PAREN,
        message=f"Missing ')' to close '(' opened at {open_location}",
        location=location,
        details={"open_offset": open_location.offset},
    )


def empty_expression(location: SourceLocation) -> Diagnostic:
    return Diagnostic(
        kind=ErrorKind.EMPTY_EXPRESSION,
        message="Expected an expression, found end of input",
        location=location,
    )


def trailing_input(found: str, location: SourceLocation) -> Diagnostic:
    return Diagnostic(
        kind=ErrorKind.TRAILING_INPUT,
        message=f"Unexpected {found} after complete expression",
        location=location,
        details={"found": found},
    )


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class CompileError(Exception):
    """Exception wrapping a single Diagnostic."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(str(diagnostic))

    @property
    def kind(self) -> ErrorKind:
        return self.diagnostic.kind

    @property
    def location(self) -> Optional[SourceLocation]:
        return self.diagnostic.location

    def to_dict(self) -> dict[str, Any]:
        return self.diagnostic.to_dict()

    def to_json(self, indent: int = 2) -> str:
        return self.diagnostic.to_json(indent=indent)


class LexError(CompileError):
    """Raised by the lexer for an unexpected character or a malformed number."""

    @property
    def offset(self) -> int:
        return self.diagnostic.location.offset

    @property
    def character(self) -> str:
        return self.diagnostic.details["character"]


class ParseError(CompileError):
    """Raised by the parser. ``kind`` says which grammar rule was violated."""


class JitError(CompileError):
    """Raised when the LLVM backend cannot build or run the compiled function."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(Diagnostic(
            kind=ErrorKind.INTERNAL_ERROR,
            message=message,
            details=details or {},
        ))


class ConfigError(CompileError):
    """Raised for an invalid configuration value."""

    def __init__(self, message: str, key: str):
        super().__init__(Diagnostic(
            kind=ErrorKind.CONFIG_ERROR,
            message=message,
            details={"key": key},
        ))
