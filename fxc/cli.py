"""Command-line interface for the FX shader compiler."""

import argparse
import sys
from pathlib import Path

from loguru import logger

from fxc.compiler import CompileOptions, compile_file
from fxc.errors import CompileError
from fxc.transpiler.body_transpiler import DEFAULT_MAX_BODY_SIZE

EXIT_FAILURE = 1


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = "DEBUG" if verbose else "ERROR" if quiet else "INFO"
    logger.remove()
    logger.add(sys.stderr, level=level, format="[{level}] {message}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="fxc",
        description="FX shader compiler — compiles .fx files to GLSL stages and .meta reflection files",
    )
    parser.add_argument("input", nargs="?", help="Input .fx file")
    parser.add_argument(
        "-o", "--output-dir", type=Path, default=None,
        help="Output directory (default: next to the input file)",
    )
    parser.add_argument(
        "--no-meta", action="store_true", help="Skip .meta reflection emission",
    )
    parser.add_argument(
        "--meta-counts", action="store_true",
        help="Write real uniform/input counts in .meta files instead of 0",
    )
    parser.add_argument(
        "--strict-stages", action="store_true",
        help="Reject shaders with more than one vertex or fragment function",
    )
    parser.add_argument(
        "--max-body-size", type=int, default=DEFAULT_MAX_BODY_SIZE, metavar="N",
        help=f"Transpiled body size limit in characters, 0 for none (default: {DEFAULT_MAX_BODY_SIZE})",
    )
    parser.add_argument(
        "--dump-ast", action="store_true", help="Dump the AST and exit"
    )
    parser.add_argument(
        "--dump-tokens", action="store_true", help="Dump the token stream and exit"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug diagnostics"
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Log errors only"
    )
    parser.add_argument(
        "--version", action="version", version="fxc 0.1.0"
    )

    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse reports usage errors with status 2
        if e.code:
            sys.exit(EXIT_FAILURE)
        raise
    _configure_logging(args.verbose, args.quiet)

    if args.input is None:
        parser.print_usage(sys.stderr)
        print("Error: no input file given", file=sys.stderr)
        sys.exit(EXIT_FAILURE)

    if args.max_body_size < 0:
        print("Error: --max-body-size must be >= 0", file=sys.stderr)
        sys.exit(EXIT_FAILURE)

    options = CompileOptions(
        output_dir=args.output_dir,
        emit_meta=not args.no_meta,
        meta_counts=args.meta_counts,
        strict_stages=args.strict_stages,
        max_body_size=args.max_body_size,
        dump_ast=args.dump_ast,
        dump_tokens=args.dump_tokens,
    )

    try:
        compile_file(Path(args.input), options)
    except CompileError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_FAILURE)
