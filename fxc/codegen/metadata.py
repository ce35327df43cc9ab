"""Reflection metadata emitter.

Writes the line-oriented ``.meta`` sidecar that the runtime loader reads to
look up uniform and attribute locations after linking:

    shader NAME
    uniforms 0
    uniform TYPE NAME
    inputs 0
    input TYPE NAME

The loader only looks at the ``uniform `` and ``input `` lines. The count
lines have always carried a literal ``0``; ``counts=True`` writes the real
list lengths instead.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from fxc.parser.ast_nodes import ShaderDef

META_SUFFIX = "meta"


@dataclass
class ShaderMetadata:
    name: str = ""
    uniform_count: int = 0
    input_count: int = 0
    uniforms: list[tuple[str, str]] = field(default_factory=list)
    inputs: list[tuple[str, str]] = field(default_factory=list)


def generate_metadata(shader: ShaderDef, counts: bool = False) -> str:
    """Render the ``.meta`` text for one shader definition."""
    lines = [f"shader {shader.name}"]
    lines.append(f"uniforms {len(shader.uniforms) if counts else 0}")
    for u in shader.uniforms:
        lines.append(f"uniform {u.type_name} {u.name}")
    lines.append(f"inputs {len(shader.inputs) if counts else 0}")
    for inp in shader.inputs:
        lines.append(f"input {inp.type_name} {inp.name}")
    return "\n".join(lines) + "\n"


def parse_metadata(text: str) -> ShaderMetadata:
    """Read ``.meta`` text back. Unknown or malformed lines are skipped."""
    meta = ShaderMetadata()
    for line in text.splitlines():
        words = line.split()
        if len(words) < 2:
            continue
        key = words[0]
        if key == "shader":
            meta.name = words[1]
        elif key == "uniforms" and words[1].isdigit():
            meta.uniform_count = int(words[1])
        elif key == "inputs" and words[1].isdigit():
            meta.input_count = int(words[1])
        elif key == "uniform" and len(words) >= 3:
            meta.uniforms.append((words[1], words[2]))
        elif key == "input" and len(words) >= 3:
            meta.inputs.append((words[1], words[2]))
    return meta
