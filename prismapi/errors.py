# File: prismapi/errors.py
"""
prismapi - Exception Hierarchy
================================
Every fatal condition raised by the pipeline derives from ``PrismapiError``
so callers (the CLI in particular) can map failures to exit codes with a
single ``except`` ladder.

Each error carries a human-readable message plus, where relevant, the
offending ``path`` and the underlying ``cause``.  The cause is also chained
with ``raise ... from`` at the raise site so tracebacks stay intact.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("prismapi.errors")

PathLike = Union[str, Path]


class PrismapiError(Exception):
    """Base class for every error raised by prismapi."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[PathLike] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.path: Optional[Path] = Path(path) if path is not None else None
        self.cause: Optional[BaseException] = cause

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


# ---------------------------------------------------------------------------
# Schema discovery & parsing
# ---------------------------------------------------------------------------


class SchemaNotFoundError(PrismapiError):
    """No schema exists at the explicit path or at any probed location."""

    def __init__(self, candidates: Sequence[PathLike], message: Optional[str] = None) -> None:
        self.candidates: List[Path] = [Path(c) for c in candidates]
        if message is None:
            probed: str = ", ".join(str(c) for c in self.candidates) or "<none>"
            message = f"Could not find a Prisma schema. Looked in: {probed}"
        super().__init__(message)


class NoSchemaFilesError(PrismapiError):
    """A schema directory contains no ``.prisma`` fragments."""


class MalformedSchemaError(PrismapiError):
    """The merged schema document lacks a required top-level block."""

    def __init__(self, block: str, *, path: Optional[PathLike] = None) -> None:
        self.block: str = block
        super().__init__(
            f"Schema is missing a '{block}' block; "
            "combined schema files must declare a datasource and a generator",
            path=path,
        )


class SchemaParseError(PrismapiError):
    """Reading or compiling the schema failed."""


class SchemaCompilerError(PrismapiError):
    """The schema compiler rejected the document."""

    def __init__(self, message: str, *, line: Optional[int] = None) -> None:
        self.line: Optional[int] = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


# ---------------------------------------------------------------------------
# Generation & output
# ---------------------------------------------------------------------------


class GenerationError(PrismapiError):
    """A model could not be rendered."""

    def __init__(
        self,
        message: str,
        *,
        model: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.model: Optional[str] = model
        super().__init__(message, cause=cause)


class OutputWriteError(PrismapiError):
    """Creating, removing or writing into the output tree failed."""


# ---------------------------------------------------------------------------
# Warning categories
# ---------------------------------------------------------------------------


class UnsupportedFieldTypeWarning(UserWarning):
    """A field's type has no mapping and was degraded to a permissive type."""


__all__: List[str] = [
    "PrismapiError",
    "SchemaNotFoundError",
    "NoSchemaFilesError",
    "MalformedSchemaError",
    "SchemaParseError",
    "SchemaCompilerError",
    "GenerationError",
    "OutputWriteError",
    "UnsupportedFieldTypeWarning",
]

logger.debug("prismapi.errors loaded.")
