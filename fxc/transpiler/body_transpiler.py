"""Rewrites a standalone-shader body token stream into GLSL statements.

The transpiler reads tokens from the parser until it reaches the brace that
closes the function at nesting depth zero, and leaves that brace unconsumed.
Spacing is rebuilt from the kinds of adjacent tokens; source whitespace and
comments are not carried over.
"""

from __future__ import annotations

from loguru import logger

from fxc.errors import ParseError, TranspileError, SEMANTIC
from fxc.parser.ast_nodes import Stage
from fxc.parser.lexer import Token, EOF, IDENT, WORD_KINDS

DEFAULT_MAX_BODY_SIZE = 4090

_OPERATORS = frozenset({"EQUAL", "PLUS", "MINUS", "ASTERISK", "SLASH", "LT", "GT"})

# `+=` and friends arrive as two tokens; the `=` stays glued to the operator.
_COMPOUND_PREFIXES = frozenset({"PLUS", "MINUS", "ASTERISK", "SLASH"})

_STATEMENT_BREAK = "\n    "


def needs_space(prev: str | None, cur: str) -> bool:
    """Whether a space goes between a token of kind ``prev`` and one of kind ``cur``."""
    if prev is None:
        return False
    if cur == "EQUAL" and prev in _COMPOUND_PREFIXES:
        return False
    if cur in _OPERATORS or prev in _OPERATORS:
        return True
    if prev in WORD_KINDS and cur in WORD_KINDS:
        return True
    return prev == "COMMA"


class BodyTranspiler:
    def __init__(self, parser, stage: Stage, max_size: int = DEFAULT_MAX_BODY_SIZE):
        self.parser = parser
        self.stage = stage
        self.max_size = max_size
        self._parts: list[str] = []
        self._size = 0
        self._prev: str | None = None

    def run(self) -> str:
        p = self.parser
        depth = 0
        while p.current.kind != EOF:
            tok = p.current
            if tok.kind == "LBRACE":
                depth += 1
                self._emit("{", tok)
                p.advance()
            elif tok.kind == "RBRACE":
                if depth == 0:
                    break
                depth -= 1
                self._emit("}", tok)
                p.advance()
            elif tok.kind == "OUT":
                self._out_declaration()
            else:
                if needs_space(self._prev, tok.kind):
                    self._emit(" ", tok)
                self._emit(tok.text, tok)
                if tok.kind == "SEMICOLON":
                    self._emit(_STATEMENT_BREAK, tok)
                self._prev = tok.kind
                p.advance()
        return "".join(self._parts)

    def _out_declaration(self) -> None:
        p = self.parser
        p.advance()
        type_tok = p.current
        if not type_tok.is_type:
            raise ParseError(
                f"expected type after 'out' (got {type_tok.describe()})",
                type_tok.line, type_tok.column, kind=SEMANTIC,
            )
        p.advance()

        if self.stage is Stage.VERTEX:
            name_tok = p.current
            if name_tok.kind != IDENT:
                raise ParseError(
                    "expected identifier after type in out declaration "
                    f"(got {name_tok.describe()})",
                    name_tok.line, name_tok.column,
                )
            p.advance()
            self._skip_semantic()
            self._emit(f"out {type_tok.text} {name_tok.text};\n", type_tok)
            logger.debug(f"Varying output '{name_tok.text}' ({type_tok.text})")
        else:
            # Fragment output is always the generated `fragColor`.
            if p.current.kind == IDENT:
                p.advance()
            self._skip_semantic()

        p.match("SEMICOLON")

    def _skip_semantic(self) -> None:
        p = self.parser
        if p.match("COLON") and p.current.kind == IDENT:
            p.advance()

    def _emit(self, text: str, tok: Token) -> None:
        self._parts.append(text)
        self._size += len(text)
        if self.max_size and self._size >= self.max_size:
            raise TranspileError(
                f"function body too large (limit {self.max_size} characters)",
                tok.line, tok.column,
            )


def transpile_body(parser, stage: Stage, max_size: int = DEFAULT_MAX_BODY_SIZE) -> str:
    """Transpile the body the parser is positioned in; returns the GLSL text."""
    return BodyTranspiler(parser, stage, max_size).run()
