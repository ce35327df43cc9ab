"""AST node definitions for FX shader sources."""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


@dataclass
class SourceLocation:
    line: int
    column: int


class Stage(str, Enum):
    VERTEX = "vertex"
    FRAGMENT = "fragment"
    OTHER = "other"


# --- Declarations ---

@dataclass
class UniformDecl:
    type_name: str
    name: str


@dataclass
class InputDecl:
    type_name: str
    name: str


@dataclass
class OutputBinding:
    type_name: str
    name: str


# --- Functions ---

@dataclass
class FunctionDecl:
    name: str
    stage: Stage
    body: str
    output: Optional[OutputBinding] = None
    transpiled: bool = False
    loc: Optional[SourceLocation] = field(default=None, compare=False)


# --- Shader definitions ---

@dataclass
class ShaderDef:
    name: str
    uniforms: list[UniformDecl] = field(default_factory=list)
    inputs: list[InputDecl] = field(default_factory=list)
    functions: list[FunctionDecl] = field(default_factory=list)
    loc: Optional[SourceLocation] = field(default=None, compare=False)
