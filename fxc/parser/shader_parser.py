"""Recursive-descent parser for FX sources.

Two surface grammars share the uniform/input productions:

* the block syntax, ``shader NAME { uniform ...; input ...; void vertex() {...} }``,
  whose function bodies are captured verbatim;
* the standalone syntax, ``vertex_shader [NAME](params) { ... }`` at top level,
  whose bodies go through the body transpiler and which receive a copy of every
  top-level uniform/input declared before them.

Block-syntax productions report a missing token by recording a diagnostic and
returning ``None``; ``parse_shader_file`` turns that into a ``ParseError``.
Standalone-syntax productions raise as soon as something is wrong.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Optional

from loguru import logger

from fxc.errors import CompileError, ParseError, SEMANTIC
from fxc.parser.ast_nodes import (
    ShaderDef, UniformDecl, InputDecl, FunctionDecl, OutputBinding,
    SourceLocation, Stage,
)
from fxc.parser.lexer import Lexer, Token, EOF, IDENT
from fxc.transpiler.body_transpiler import DEFAULT_MAX_BODY_SIZE, transpile_body

# Legacy function names that select a stage
_STAGE_FUNCTIONS = {
    "vertex": Stage.VERTEX,
    "fragment": Stage.FRAGMENT,
}

_STANDALONE_STAGES = {
    "VERTEX_SHADER": Stage.VERTEX,
    "FRAGMENT_SHADER": Stage.FRAGMENT,
}

# Types accepted for a block-syntax fragment output binding
_OUTPUT_TYPES = frozenset({"FLOAT", "VEC2", "VEC3", "VEC4", "MAT4"})


def _loc(tok: Token) -> SourceLocation:
    return SourceLocation(tok.line, tok.column)


class ShaderParser:
    def __init__(self, source: str, max_body_size: int = DEFAULT_MAX_BODY_SIZE):
        self.source = source
        self.lexer = Lexer(source)
        self.max_body_size = max_body_size
        self.diagnostics: list[CompileError] = []
        self.current: Token = self.lexer.next()

    # --- Token helpers ---

    def advance(self) -> Token:
        tok = self.current
        self.current = self.lexer.next()
        return tok

    def match(self, kind: str) -> bool:
        if self.current.kind == kind:
            self.advance()
            return True
        return False

    def expect(self, kind: str, what: str) -> Optional[Token]:
        """Consume a token of ``kind`` or record a diagnostic and return None."""
        tok = self.current
        if tok.kind == kind:
            self.advance()
            return tok
        return self._report(f"expected {what} (got {tok.describe()})", tok)

    def require(self, kind: str, what: str) -> Token:
        """Consume a token of ``kind`` or raise."""
        tok = self.current
        if tok.kind != kind:
            raise ParseError(f"expected {what} (got {tok.describe()})", tok.line, tok.column)
        self.advance()
        return tok

    def _report(self, message: str, tok: Token, kind: Optional[str] = None) -> None:
        err = ParseError(message, tok.line, tok.column, kind=kind)
        self.diagnostics.append(err)
        logger.error(f"Parse error: {err}")
        return None

    # --- Shared productions ---

    def parse_uniform(self) -> Optional[UniformDecl]:
        return self._parse_declaration("UNIFORM", "uniform", UniformDecl)

    def parse_input(self) -> Optional[InputDecl]:
        return self._parse_declaration("INPUT", "input", InputDecl)

    def _parse_declaration(self, kind: str, keyword: str, node_cls):
        if self.expect(kind, f"'{keyword}'") is None:
            return None
        type_tok = self.current
        if not type_tok.is_type:
            return self._report(
                f"expected type after '{keyword}' (got {type_tok.describe()})",
                type_tok, kind=SEMANTIC,
            )
        self.advance()
        name_tok = self.current
        if name_tok.kind != IDENT:
            return self._report(
                f"expected identifier after type in {keyword} declaration "
                f"(got {name_tok.describe()})",
                name_tok,
            )
        self.advance()
        if self.expect("SEMICOLON", "';'") is None:
            return None
        return node_cls(type_tok.text, name_tok.text)

    # --- Block syntax ---

    def parse_shader(self) -> Optional[ShaderDef]:
        start = self.current
        if self.expect("SHADER", "'shader'") is None:
            return None
        name_tok = self.expect(IDENT, "shader name")
        if name_tok is None or self.expect("LBRACE", "'{'") is None:
            return None
        logger.debug(f"Parsing shader block '{name_tok.text}' at line {start.line}")

        shader = ShaderDef(name_tok.text, loc=_loc(start))
        while self.current.kind not in ("RBRACE", EOF):
            kind = self.current.kind
            if kind == "UNIFORM":
                member = self.parse_uniform()
                target = shader.uniforms
            elif kind == "INPUT":
                member = self.parse_input()
                target = shader.inputs
            elif kind == "VOID":
                member = self._parse_function()
                target = shader.functions
            else:
                tok = self.current
                raise ParseError(
                    f"unexpected token {tok.describe()} in shader block '{shader.name}'",
                    tok.line, tok.column,
                )
            if member is None:
                return None
            target.append(member)

        if self.expect("RBRACE", "'}'") is None:
            return None
        return shader

    def _parse_function(self) -> Optional[FunctionDecl]:
        start = self.current
        if self.expect("VOID", "'void'") is None:
            return None
        name_tok = self.expect(IDENT, "function name")
        if name_tok is None:
            return None
        stage = _STAGE_FUNCTIONS.get(name_tok.text, Stage.OTHER)
        logger.debug(f"Function '{name_tok.text}' ({stage.value}) at line {start.line}")

        if self.expect("LPAREN", "'('") is None:
            return None
        output = None
        if stage is Stage.FRAGMENT and self.match("OUT"):
            type_tok = self.current
            if type_tok.kind not in _OUTPUT_TYPES:
                return self._report(
                    f"expected type after 'out' in fragment() (got {type_tok.describe()})",
                    type_tok, kind=SEMANTIC,
                )
            self.advance()
            out_name = self.expect(IDENT, "output parameter name")
            if out_name is None:
                return None
            output = OutputBinding(type_tok.text, out_name.text)
        if self.expect("RPAREN", "')'") is None or self.expect("LBRACE", "'{'") is None:
            return None

        body = self._capture_body()
        if self.expect("RBRACE", "'}'") is None:
            return None
        return FunctionDecl(name_tok.text, stage, body, output=output, loc=_loc(start))

    def _capture_body(self) -> str:
        """Return the raw source up to the brace closing the current block."""
        begin = self.current.start
        depth = 0
        while self.current.kind != EOF:
            kind = self.current.kind
            if kind == "LBRACE":
                depth += 1
            elif kind == "RBRACE":
                if depth == 0:
                    break
                depth -= 1
            self.advance()
        return self.source[begin:self.current.start]

    # --- Standalone syntax ---

    def parse_standalone_shader(
        self,
        pending_uniforms: list[UniformDecl],
        pending_inputs: list[InputDecl],
    ) -> ShaderDef:
        start = self.advance()
        stage = _STANDALONE_STAGES[start.kind]
        name = stage.value
        if self.current.kind == IDENT:
            name = self.advance().text
        logger.debug(f"Parsing standalone {start.text} '{name}' at line {start.line}")

        self.require("LPAREN", "'('")
        self._parse_parameters()
        self.require("RPAREN", "')'")
        self.require("LBRACE", "'{'")
        body = transpile_body(self, stage, self.max_body_size)
        self.require("RBRACE", "'}'")

        fn = FunctionDecl(name, stage, body, transpiled=True, loc=_loc(start))
        return ShaderDef(
            name,
            uniforms=[replace(u) for u in pending_uniforms],
            inputs=[replace(i) for i in pending_inputs],
            functions=[fn],
            loc=_loc(start),
        )

    def _parse_parameters(self) -> None:
        # Parameters are checked for shape only; attribute data comes from
        # `input` declarations.
        while self.current.kind not in ("RPAREN", EOF):
            tok = self.current
            if not (tok.is_type or tok.kind == IDENT):
                raise ParseError(
                    f"expected parameter type (got {tok.describe()})", tok.line, tok.column
                )
            self.advance()
            self.require(IDENT, "parameter name")
            if self.match("COLON"):
                self.require(IDENT, "semantic")
            if self.match("COMMA"):
                continue
            if self.current.kind != "RPAREN":
                tok = self.current
                raise ParseError(
                    f"expected ',' or ')' in parameter list (got {tok.describe()})",
                    tok.line, tok.column,
                )

    # --- Entry point ---

    def parse_shader_file(self) -> list[ShaderDef]:
        shaders: list[ShaderDef] = []
        pending_uniforms: list[UniformDecl] = []
        pending_inputs: list[InputDecl] = []

        while self.current.kind != EOF:
            kind = self.current.kind
            if kind == "SHADER":
                node = self.parse_shader()
                if node is not None:
                    shaders.append(node)
            elif kind == "UNIFORM":
                node = self.parse_uniform()
                if node is not None:
                    pending_uniforms.append(node)
            elif kind == "INPUT":
                node = self.parse_input()
                if node is not None:
                    pending_inputs.append(node)
            elif kind in _STANDALONE_STAGES:
                node = self.parse_standalone_shader(pending_uniforms, pending_inputs)
                shaders.append(node)
            else:
                tok = self.current
                raise ParseError(f"unexpected token {tok.describe()}", tok.line, tok.column)
            if node is None:
                raise self.diagnostics[-1]

        logger.debug(f"Parsed {len(shaders)} shader definition(s)")
        return shaders


def parse_fx(source: str, max_body_size: int = DEFAULT_MAX_BODY_SIZE) -> list[ShaderDef]:
    """Parse FX source text into its shader definitions."""
    return ShaderParser(source, max_body_size).parse_shader_file()
