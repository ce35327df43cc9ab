"""Compiler diagnostics.

Every failure the compiler can report is a ``CompileError`` carrying a
diagnostic kind, a message and, where one is known, the source position.
Nothing below the command-line layer terminates the process; the CLI turns
any ``CompileError`` into exit status 1.
"""

from __future__ import annotations
from typing import Optional


# Diagnostic kinds
INPUT_IO = "input-io"
UNRECOGNIZED_CHARACTER = "unrecognized-character"
SYNTAX = "syntax"
SEMANTIC = "semantic"
OUTPUT_IO = "output-io"
RESOURCE_LIMIT = "resource-limit"


class CompileError(Exception):
    kind = SYNTAX

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        kind: Optional[str] = None,
    ):
        self.message = message
        self.line = line
        self.column = column
        if kind is not None:
            self.kind = kind
        super().__init__(self._format())

    def _format(self) -> str:
        if self.line is None:
            return self.message
        if self.column is None:
            return f"line {self.line}: {self.message}"
        return f"line {self.line}, col {self.column}: {self.message}"


class InputError(CompileError):
    kind = INPUT_IO


class LexError(CompileError):
    kind = UNRECOGNIZED_CHARACTER


class ParseError(CompileError):
    kind = SYNTAX


class DuplicateStageError(CompileError):
    kind = SEMANTIC


class TranspileError(CompileError):
    kind = RESOURCE_LIMIT


class OutputError(CompileError):
    kind = OUTPUT_IO
