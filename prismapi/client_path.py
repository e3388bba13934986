# File: prismapi/client_path.py
"""
prismapi - Prisma Client Import Path
======================================
Works out where the generated Prisma Client lives so generated modules can
import ``Prisma``, the model enums and the client errors from it.

The ``output`` setting of the schema's ``generator client`` block is read
straight from the raw text (fragments recombined), resolved against the
schema's directory and made relative to the project root.  Anything that
goes wrong, including an absent ``output``, yields ``DEFAULT_CLIENT_PATH``.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from prismapi.errors import PrismapiError
from prismapi.locator import find_schema, read_schema_source
from prismapi.utils import join_path_for_import, normalize_path

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("prismapi.client_path")

DEFAULT_CLIENT_PATH: str = "prisma"
CLIENT_MODULE_NAME: str = "client"

_GENERATOR_CLIENT_RE: re.Pattern[str] = re.compile(
    r"generator\s+client\s*{[^}]*}", re.DOTALL
)
_OUTPUT_RE: re.Pattern[str] = re.compile(r"output\s*=\s*[\"'](.+?)[\"']")


@dataclass(frozen=True, slots=True)
class ClientImport:
    """Dotted import locations of the generated client."""

    client_module: str
    package: str

    @property
    def enums_module(self) -> str:
        return f"{self.package}.enums"

    @property
    def models_module(self) -> str:
        return f"{self.package}.models"

    @property
    def errors_module(self) -> str:
        return f"{self.package}.errors"


def _client_path_from_source(source: str, schema_path: Path, root: Path) -> str:
    block = _GENERATOR_CLIENT_RE.search(source)
    if block is None:
        logger.debug("No 'generator client' block; using default client path")
        return DEFAULT_CLIENT_PATH
    output = _OUTPUT_RE.search(block.group(0))
    if output is None:
        logger.debug("Generator block has no output; using default client path")
        return DEFAULT_CLIENT_PATH

    declared: str = output.group(1)
    if declared.startswith("./"):
        declared = declared[2:]
    schema_dir: Path = schema_path if schema_path.is_dir() else schema_path.parent
    absolute: str = os.path.normpath(os.path.join(str(schema_dir), declared))
    relative: str = normalize_path(os.path.relpath(absolute, str(root)))

    if "/" not in relative:
        return relative
    return join_path_for_import(relative, CLIENT_MODULE_NAME)


def resolve_client_path(
    schema_path: Union[str, Path, None] = None,
    *,
    project_root: Union[str, Path, None] = None,
) -> str:
    """
    Slash-separated location of the generated client, relative to the
    project root.  Never raises: every failure falls back to
    ``DEFAULT_CLIENT_PATH``.
    """
    root: Path = Path(project_root) if project_root is not None else Path.cwd()
    try:
        located: Path = find_schema(schema_path, project_root=root)
        source: str = read_schema_source(located)
        resolved: str = _client_path_from_source(source, located, root)
    except (PrismapiError, OSError, ValueError) as exc:
        logger.debug("Falling back to default client path: %s", exc)
        return DEFAULT_CLIENT_PATH
    logger.debug("Resolved Prisma client path: %s", resolved)
    return resolved


def client_import_for(path: Optional[str]) -> ClientImport:
    """
    Convert a slash path from ``resolve_client_path`` into dotted imports.

    ``"prisma/generated/db/client"`` → module ``prisma.generated.db.client``
    in package ``prisma.generated.db``.  Paths that cannot be spelled as a
    Python import fall back to the default client.
    """
    segments: List[str] = [
        s for s in normalize_path(path or DEFAULT_CLIENT_PATH).split("/") if s not in ("", ".")
    ]
    if not segments or not all(s.isidentifier() for s in segments):
        logger.warning(
            "Client path '%s' is not importable; using '%s'", path, DEFAULT_CLIENT_PATH
        )
        segments = [DEFAULT_CLIENT_PATH]

    module: str = ".".join(segments)
    if len(segments) > 1 and segments[-1] == CLIENT_MODULE_NAME:
        package: str = ".".join(segments[:-1])
    else:
        package = module
    return ClientImport(client_module=module, package=package)


__all__: List[str] = [
    "DEFAULT_CLIENT_PATH",
    "ClientImport",
    "resolve_client_path",
    "client_import_for",
]

logger.debug("prismapi.client_path loaded.")
