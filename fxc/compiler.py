"""Top-level compiler orchestration."""

from __future__ import annotations
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from fxc.errors import InputError, OutputError, ParseError
from fxc.parser.shader_parser import parse_fx
from fxc.parser.lexer import tokenize
from fxc.transpiler.body_transpiler import DEFAULT_MAX_BODY_SIZE
from fxc.codegen.glsl_emitter import generate_glsl
from fxc.codegen.metadata import generate_metadata, META_SUFFIX


@dataclass
class CompileOptions:
    output_dir: Path | None = None
    emit_meta: bool = True
    meta_counts: bool = False
    strict_stages: bool = False
    max_body_size: int = DEFAULT_MAX_BODY_SIZE
    dump_ast: bool = False
    dump_tokens: bool = False


def artifact_prefix(input_path: Path, shader_name: str, output_dir: Path | None = None) -> str:
    """``P_S`` for input path ``P`` and shader ``S``, optionally moved to ``output_dir``."""
    base = output_dir / input_path.name if output_dir is not None else input_path
    return f"{base}_{shader_name}"


def render_artifacts(
    source: str, input_path: Path, options: CompileOptions | None = None
) -> dict[Path, str]:
    """Parse ``source`` and render every artifact in memory, keyed by output path."""
    options = options or CompileOptions()
    shaders = parse_fx(source, max_body_size=options.max_body_size)
    if not shaders:
        raise ParseError("no shader definitions found")

    artifacts: dict[Path, str] = {}
    for shader in shaders:
        logger.info(f"Generating shader: {shader.name}")
        prefix = artifact_prefix(input_path, shader.name, options.output_dir)
        outputs = generate_glsl(shader, strict=options.strict_stages)
        if options.emit_meta:
            outputs[META_SUFFIX] = generate_metadata(shader, counts=options.meta_counts)
        for suffix, text in outputs.items():
            path = Path(f"{prefix}.{suffix}")
            if path in artifacts:
                logger.warning(f"Shader '{shader.name}' overwrites {path}")
            artifacts[path] = text
    return artifacts


def write_artifacts(artifacts: dict[Path, str], output_dir: Path | None = None) -> list[Path]:
    """Write all artifacts.

    Each artifact is first written to a temporary file next to its target.
    Targets are only replaced once every temporary file has been written, so
    a failed write leaves existing outputs untouched.
    """
    staged: list[tuple[Path, Path]] = []
    path = output_dir
    try:
        if output_dir is not None:
            output_dir.mkdir(parents=True, exist_ok=True)
        for path, text in artifacts.items():
            with tempfile.NamedTemporaryFile(
                mode="w", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp",
                delete=False, encoding="utf-8", newline="\n",
            ) as f:
                staged.append((Path(f.name), path))
                f.write(text)
        for tmp, path in staged:
            os.replace(tmp, path)
    except OSError as e:
        raise OutputError(f"could not write {path}: {e.strerror or e}") from e
    finally:
        for tmp, _ in staged:
            tmp.unlink(missing_ok=True)

    written = [target for _, target in staged]
    for path in written:
        print(f"Wrote {path}")
    return written


def compile_source(
    source: str,
    input_path: Path,
    options: CompileOptions | None = None,
) -> list[Path]:
    options = options or CompileOptions()

    if options.dump_tokens:
        _dump_tokens(source)
        return []

    if options.dump_ast:
        _dump_ast(parse_fx(source, max_body_size=options.max_body_size))
        return []

    artifacts = render_artifacts(source, input_path, options)
    return write_artifacts(artifacts, options.output_dir)


def compile_file(input_path: Path, options: CompileOptions | None = None) -> list[Path]:
    logger.info(f"Compiling shader: {input_path}")
    try:
        # newline="" keeps CRLF line endings in verbatim bodies
        with open(input_path, encoding="utf-8", newline="") as f:
            source = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"could not read {input_path}: {getattr(e, 'strerror', None) or e}") from e

    written = compile_source(source, input_path, options)
    logger.info("Compilation completed successfully")
    return written


def _dump_tokens(source: str) -> None:
    for tok in tokenize(source):
        print(f"{tok.line}:{tok.column} {tok.kind} {tok.text!r}")


def _dump_ast(shaders):
    import dataclasses, json

    def _ser(obj):
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            d = {"_type": type(obj).__name__}
            d.update(dataclasses.asdict(obj))
            return d
        if isinstance(obj, list):
            return [_ser(x) for x in obj]
        return obj

    print(json.dumps(_ser(shaders), indent=2, default=str))
