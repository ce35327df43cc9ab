"""GLSL 330 source emitter for vertex and fragment stages."""

from __future__ import annotations
from typing import Optional

from loguru import logger

from fxc.errors import DuplicateStageError
from fxc.parser.ast_nodes import ShaderDef, FunctionDecl, Stage

GLSL_HEADER = "#version 330 core\nprecision highp float;\n\n"

# Varyings the fragment stage reads. The vertex body is expected to write
# these names; nothing checks that it does.
FRAGMENT_VARYINGS = (
    ("vec3", "v_normal"),
    ("vec3", "v_position"),
    ("vec2", "v_texCoord"),
)

FRAGMENT_OUTPUT = "out vec4 fragColor;\n\n"

# Stage -> artifact suffix
STAGE_SUFFIXES = {
    Stage.VERTEX: "vert.glsl",
    Stage.FRAGMENT: "frag.glsl",
}


def select_stage_functions(
    shader: ShaderDef, strict: bool = False
) -> tuple[Optional[FunctionDecl], Optional[FunctionDecl]]:
    """Pick the vertex and fragment function of ``shader``.

    Every function of a stage replaces the previous pick, so the last one in
    declaration order is used. With ``strict`` a second function for the
    same stage raises ``DuplicateStageError`` instead.
    """
    picked: dict[Stage, FunctionDecl] = {}
    for fn in shader.functions:
        if fn.stage not in STAGE_SUFFIXES:
            continue
        previous = picked.get(fn.stage)
        if previous is not None:
            loc = fn.loc
            msg = (
                f"shader '{shader.name}' has more than one {fn.stage.value} "
                f"function ('{previous.name}' and '{fn.name}')"
            )
            if strict:
                raise DuplicateStageError(
                    msg, loc.line if loc else None, loc.column if loc else None
                )
            logger.warning(f"{msg}; using the last one")
        picked[fn.stage] = fn

    vertex_fn = picked.get(Stage.VERTEX)
    fragment_fn = picked.get(Stage.FRAGMENT)
    logger.debug(
        f"Shader '{shader.name}': vertex={vertex_fn.name if vertex_fn else 'none'}, "
        f"fragment={fragment_fn.name if fragment_fn else 'none'}"
    )
    return vertex_fn, fragment_fn


def _uniform_lines(shader: ShaderDef) -> list[str]:
    lines = [f"uniform {u.type_name} {u.name};\n" for u in shader.uniforms]
    if lines:
        lines.append("\n")
    return lines


def _attribute_lines(shader: ShaderDef) -> list[str]:
    lines = [
        f"layout(location = {location}) in {inp.type_name} {inp.name};\n"
        for location, inp in enumerate(shader.inputs)
    ]
    if lines:
        lines.append("\n")
    return lines


def _varying_lines() -> list[str]:
    lines = [f"in {type_name} {name};\n" for type_name, name in FRAGMENT_VARYINGS]
    lines.append("\n")
    return lines


def _main(fn: FunctionDecl) -> str:
    return f"void main() {{\n{fn.body}}}\n"


def generate_vertex_glsl(shader: ShaderDef, fn: FunctionDecl) -> str:
    parts = [GLSL_HEADER]
    parts += _uniform_lines(shader)
    parts += _attribute_lines(shader)
    parts.append(_main(fn))
    return "".join(parts)


def generate_fragment_glsl(shader: ShaderDef, fn: FunctionDecl) -> str:
    parts = [GLSL_HEADER]
    parts += _uniform_lines(shader)
    parts += _varying_lines()
    parts.append(FRAGMENT_OUTPUT)
    parts.append(_main(fn))
    return "".join(parts)


def generate_glsl(shader: ShaderDef, strict: bool = False) -> dict[str, str]:
    """Return ``{suffix: source}`` for each stage ``shader`` has a function for."""
    vertex_fn, fragment_fn = select_stage_functions(shader, strict=strict)
    sources: dict[str, str] = {}
    if vertex_fn is not None:
        sources[STAGE_SUFFIXES[Stage.VERTEX]] = generate_vertex_glsl(shader, vertex_fn)
    if fragment_fn is not None:
        sources[STAGE_SUFFIXES[Stage.FRAGMENT]] = generate_fragment_glsl(shader, fragment_fn)
    return sources
