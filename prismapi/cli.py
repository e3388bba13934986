# File: prismapi/cli.py
"""
prismapi - Command-Line Interface
===================================

Built with the standard-library ``argparse`` module.

Usage examples::

    # Locate the schema automatically, write to ./src/generated
    prismapi generate

    # Explicit schema file (or folder of fragments) and output directory
    prismapi g -s prisma/schema.prisma -o ./app/generated

    # Debug logging
    prismapi --log-level debug generate
    PRISMAPI_LOG_LEVEL=debug prismapi generate

    # Show version
    python -m prismapi --version

Exit codes:
    0 — success
    1 — schema error (not found, no fragments, malformed, unparsable)
    2 — generation error
    3 — output error
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Dict, List, NoReturn, Optional, Sequence

from pydantic import ValidationError

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("prismapi")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_SCHEMA_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_OUTPUT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4

LOG_LEVEL_ENV_VAR: str = "PRISMAPI_LOG_LEVEL"

# ``silent`` sits above CRITICAL so nothing passes the handler.
LOG_LEVELS: Dict[str, int] = {
    "silent": logging.CRITICAL + 10,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _resolve_log_level(args: argparse.Namespace) -> str:
    """
    Pick the effective level name.

    Precedence: ``PRISMAPI_LOG_LEVEL`` > ``--silent`` > ``--log-level`` >
    ``-v`` count > ``warning``.  Unknown env values are ignored.
    """
    env_value: str = os.environ.get(LOG_LEVEL_ENV_VAR, "").strip().lower()
    if env_value in LOG_LEVELS:
        return env_value
    if getattr(args, "silent", False):
        return "silent"
    explicit: Optional[str] = getattr(args, "log_level", None)
    if explicit is not None:
        return explicit
    verbosity: int = getattr(args, "verbose", 0) or 0
    if verbosity >= 2:
        return "debug"
    if verbosity >= 1:
        return "info"
    return "warning"


def _setup_logging(level_name: str) -> None:
    """Configure the ``prismapi`` logger hierarchy for CLI use."""
    level: int = LOG_LEVELS[level_name]

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("prismapi")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


class _ArgumentParser(argparse.ArgumentParser):
    """``ArgumentParser`` whose usage errors exit with ``EXIT_INPUT_ERROR``."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(EXIT_INPUT_ERROR, f"{self.prog}: error: {message}\n")


def _logging_options() -> argparse.ArgumentParser:
    # Defaults are suppressed so the options work before and after the
    # sub-command without one position resetting the other.
    common = argparse.ArgumentParser(add_help=False)
    group = common.add_argument_group("logging")
    group.add_argument(
        "--log-level",
        choices=list(LOG_LEVELS),
        default=argparse.SUPPRESS,
        help=f"Log level (default: warning). {LOG_LEVEL_ENV_VAR} takes precedence.",
    )
    group.add_argument(
        "--silent",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Suppress logging and the summary report.",
    )
    group.add_argument(
        "-v", "--verbose",
        action="count",
        default=argparse.SUPPRESS,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    return common


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from prismapi import __version__

    common: argparse.ArgumentParser = _logging_options()
    parser: argparse.ArgumentParser = _ArgumentParser(
        prog="prismapi",
        description=(
            "prismapi — FastAPI code generator for Prisma schemas.\n\n"
            "Reads a Prisma schema (single file or folder of fragments) and "
            "writes Pydantic schemas, data-access functions, request handlers "
            "and routers for every model."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s generate\n"
            "  %(prog)s g -s prisma/schema.prisma -o ./src/generated\n"
            "  %(prog)s --log-level debug generate\n"
        ),
        parents=[common],
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"prismapi v{__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    generate = subparsers.add_parser(
        "generate",
        aliases=["g"],
        help="Generate the API package from a Prisma schema.",
        parents=[common],
    )
    generate.add_argument(
        "-s", "--schema",
        type=str,
        default=None,
        metavar="PATH",
        help=(
            "Schema file or folder of .prisma fragments. Located automatically "
            "(package manifest, prisma/schema.prisma, schema.prisma, "
            "prisma/schema/) when omitted."
        ),
    )
    generate.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help="Output directory (default: ./src/generated).",
    )
    return parser


# ---------------------------------------------------------------------------
# Generate command
# ---------------------------------------------------------------------------


def _run_generate(args: argparse.Namespace, *, show_summary: bool) -> int:
    """Run the full generation pipeline and map failures to exit codes."""
    from prismapi.config import GeneratorConfig
    from prismapi.errors import (
        GenerationError,
        MalformedSchemaError,
        NoSchemaFilesError,
        OutputWriteError,
        SchemaNotFoundError,
        SchemaParseError,
    )
    from prismapi.generator import APIGenerator, GenerationReport

    overrides: Dict[str, object] = {}
    if args.schema is not None:
        overrides["schema_path"] = args.schema
    if args.output is not None:
        overrides["output_dir"] = args.output

    try:
        config = GeneratorConfig(**overrides)
    except ValidationError as exc:
        logger.error("Invalid arguments: %s", exc)
        return EXIT_INPUT_ERROR

    logger.info("Schema:  %s", config.schema_location or "(auto)")
    logger.info("Output:  %s", config.output_path)

    generator = APIGenerator(config)
    try:
        report: GenerationReport = generator.generate()
    except (
        SchemaNotFoundError,
        NoSchemaFilesError,
        MalformedSchemaError,
        SchemaParseError,
    ) as exc:
        logger.error("Schema error: %s", exc)
        return EXIT_SCHEMA_ERROR
    except GenerationError as exc:
        logger.error("Generation error: %s", exc)
        return EXIT_GENERATION_ERROR
    except OutputWriteError as exc:
        logger.error("Output error: %s", exc)
        return EXIT_OUTPUT_ERROR

    if show_summary:
        print(report.summary())
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Parse *argv* (defaults to ``sys.argv[1:]``), run the command and return
    the exit code.
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    level_name: str = _resolve_log_level(args)
    _setup_logging(level_name)

    if args.command is None:
        parser.print_usage(sys.stderr)
        logger.error("No command given. Use 'generate' (or 'g').")
        return EXIT_INPUT_ERROR

    exit_code: int = _run_generate(args, show_summary=level_name != "silent")
    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)
    return exit_code


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """Console-script entry point: run ``main`` and exit with its code."""
    sys.exit(main(argv))


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "main",
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_SCHEMA_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_OUTPUT_ERROR",
    "EXIT_INPUT_ERROR",
    "LOG_LEVEL_ENV_VAR",
]

logger.debug("prismapi.cli loaded.")
