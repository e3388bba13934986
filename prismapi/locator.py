# File: prismapi/locator.py
"""
prismapi - Schema Locator
===========================
Finds the Prisma schema for a project and reads it as one logical document.

Resolution order when no explicit path is given (first existing wins):

1. Manifest hint: ``[tool.prisma] schema`` in ``pyproject.toml``, then
   ``prisma.schema`` in ``package.json``.
2. ``prisma/schema.prisma``
3. ``schema.prisma``
4. ``prisma/schema/`` when it holds at least one ``.prisma`` file.

A schema may be a single file or a directory of ``.prisma`` fragments; in
the latter case ``read_schema_source`` concatenates the fragments in sorted
order so the parser and the client-path resolver see the same text.
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from prismapi.errors import SchemaNotFoundError
from prismapi.utils import read_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("prismapi.locator")

SCHEMA_EXTENSION: str = ".prisma"

_DEFAULT_CANDIDATES: Tuple[Path, ...] = (
    Path("prisma") / "schema.prisma",
    Path("schema.prisma"),
)
_DEFAULT_SCHEMA_DIR: Path = Path("prisma") / "schema"


# ---------------------------------------------------------------------------
# Manifest hints
# ---------------------------------------------------------------------------


def _pyproject_hint(root: Path) -> Optional[str]:
    manifest: Path = root / "pyproject.toml"
    if not manifest.is_file():
        return None
    try:
        with manifest.open("rb") as f:
            data: Dict[str, Any] = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.debug("Ignoring unreadable %s: %s", manifest, exc)
        return None
    hint: Any = data.get("tool", {}).get("prisma", {}).get("schema")
    return hint if isinstance(hint, str) and hint else None


def _package_json_hint(root: Path) -> Optional[str]:
    manifest: Path = root / "package.json"
    if not manifest.is_file():
        return None
    try:
        data: Any = json.loads(read_file(manifest))
    except (OSError, ValueError) as exc:
        logger.debug("Ignoring unreadable %s: %s", manifest, exc)
        return None
    if not isinstance(data, dict):
        return None
    prisma: Any = data.get("prisma")
    hint: Any = prisma.get("schema") if isinstance(prisma, dict) else None
    return hint if isinstance(hint, str) and hint else None


def manifest_hint(root: Path) -> Optional[Path]:
    """Schema path declared in the project manifest, resolved against *root*."""
    for reader in (_pyproject_hint, _package_json_hint):
        hint: Optional[str] = reader(root)
        if hint:
            logger.debug("Manifest hint from %s: %s", reader.__name__, hint)
            return root / hint
    return None


# ---------------------------------------------------------------------------
# Fragments
# ---------------------------------------------------------------------------


def list_schema_fragments(directory: Path) -> List[Path]:
    """Sorted ``.prisma`` files directly inside *directory*."""
    return sorted(
        p
        for p in directory.iterdir()
        if p.is_file() and p.suffix == SCHEMA_EXTENSION
    )


def _has_fragments(directory: Path) -> bool:
    return directory.is_dir() and bool(list_schema_fragments(directory))


def combine_fragments(fragments: List[str]) -> str:
    """Join fragment texts, each wrapped in blank lines."""
    return "".join(f"\n{text}\n" for text in fragments)


def read_schema_source(path: Path) -> str:
    """
    Return the logical schema document at *path*.

    Files are read as-is; directories yield their fragments concatenated
    in sorted order.  An empty directory yields an empty string.
    """
    if path.is_dir():
        return combine_fragments([read_file(p) for p in list_schema_fragments(path)])
    return read_file(path)


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def find_schema(
    explicit: Union[str, Path, None] = None,
    *,
    project_root: Union[str, Path, None] = None,
) -> Path:
    """
    Locate the schema file or directory.

    Raises:
        SchemaNotFoundError: when the explicit path does not exist, or when no
            candidate location does.
    """
    root: Path = Path(project_root) if project_root is not None else Path.cwd()

    if explicit is not None:
        candidate: Path = Path(explicit)
        if not candidate.is_absolute():
            candidate = root / candidate
        if candidate.exists():
            logger.debug("Using explicit schema path %s", candidate)
            return candidate
        raise SchemaNotFoundError(
            [candidate], f"Schema path does not exist: {candidate}"
        )

    probed: List[Path] = []

    hinted: Optional[Path] = manifest_hint(root)
    if hinted is not None:
        probed.append(hinted)
        if hinted.exists():
            logger.debug("Found schema via manifest hint: %s", hinted)
            return hinted

    for relative in _DEFAULT_CANDIDATES:
        candidate = root / relative
        probed.append(candidate)
        if candidate.is_file():
            logger.debug("Found schema at %s", candidate)
            return candidate

    schema_dir: Path = root / _DEFAULT_SCHEMA_DIR
    probed.append(schema_dir)
    if _has_fragments(schema_dir):
        logger.debug("Found schema directory %s", schema_dir)
        return schema_dir

    raise SchemaNotFoundError(probed)


__all__: List[str] = [
    "SCHEMA_EXTENSION",
    "find_schema",
    "manifest_hint",
    "list_schema_fragments",
    "combine_fragments",
    "read_schema_source",
]

logger.debug("prismapi.locator loaded.")
