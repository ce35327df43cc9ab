"""On-demand tokenizer for FX source text."""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from fxc.errors import LexError

_GRAMMAR_PATH = Path(__file__).parent.parent / "grammar" / "fx_tokens.lark"

_lexer = Lark(
    _GRAMMAR_PATH.read_text(encoding="utf-8"),
    parser=None,
    lexer="basic",
)

EOF = "EOF"
IDENT = "IDENT"
NUMBER = "NUMBER"

# Literal text -> token kind for fixed words. Anything else lexed as a
# word stays IDENT.
KEYWORDS: dict[str, str] = {
    "shader": "SHADER",
    "uniform": "UNIFORM",
    "input": "INPUT",
    "void": "VOID",
    "out": "OUT",
    "vertex_shader": "VERTEX_SHADER",
    "fragment_shader": "FRAGMENT_SHADER",
    "float": "FLOAT",
    "vec2": "VEC2",
    "vec3": "VEC3",
    "vec4": "VEC4",
    "mat4": "MAT4",
    "sampler2D": "SAMPLER2D",
    "samplerCube": "SAMPLERCUBE",
}

TYPE_KINDS = frozenset({
    "FLOAT", "VEC2", "VEC3", "VEC4", "MAT4", "SAMPLER2D", "SAMPLERCUBE",
})

KEYWORD_KINDS = frozenset(KEYWORDS.values()) - TYPE_KINDS

# Tokens that read as words: adjacent words need a separating space.
# NUMBER is included so `return 1.0` is not glued into `return1.0`.
WORD_KINDS = frozenset({IDENT, NUMBER}) | frozenset(KEYWORDS.values())


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    line: int
    column: int
    start: int
    end: int

    @property
    def is_type(self) -> bool:
        return self.kind in TYPE_KINDS

    def describe(self) -> str:
        if self.kind == EOF:
            return "end of input"
        return f"'{self.text}'"


class Lexer:
    """Pulls tokens one at a time; returns EOF forever once input runs out."""

    def __init__(self, source: str):
        self.source = source
        self._stream = _lexer.lex(source)
        self._eof: Token | None = None

    def next(self) -> Token:
        if self._eof is not None:
            return self._eof
        try:
            tok = next(self._stream)
        except StopIteration:
            self._eof = self._end_token()
            return self._eof
        except UnexpectedCharacters as e:
            raise LexError(
                f"unrecognized character {e.char!r}", e.line, e.column
            ) from None
        return _classify(tok)

    def _end_token(self) -> Token:
        pos = len(self.source)
        line = self.source.count("\n") + 1
        column = pos - (self.source.rfind("\n") + 1) + 1
        return Token(EOF, "", line, column, pos, pos)


def _classify(tok) -> Token:
    text = str(tok)
    kind = tok.type
    if kind == IDENT:
        kind = KEYWORDS.get(text, IDENT)
    return Token(kind, text, tok.line, tok.column, tok.start_pos, tok.end_pos)


def tokenize(source: str) -> Iterator[Token]:
    """Yield every token of ``source``, excluding the final EOF."""
    lexer = Lexer(source)
    while True:
        tok = lexer.next()
        if tok.kind == EOF:
            return
        yield tok
