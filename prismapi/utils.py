# File: prismapi/utils.py
"""
prismapi - Utility Functions & Helpers
========================================
String transformation, path normalisation, file I/O and code-formatting
utilities used throughout the generation pipeline.

Performance strategy:
- ALL string-conversion functions are decorated with ``@lru_cache(maxsize=None)``
  so repeated calls (every generator re-derives names from the same handful
  of model names) are amortised to O(1) after first invocation.
- File I/O helpers use atomic rename for safety.
- No external dependencies beyond the Python standard library.
"""

from __future__ import annotations

import functools
import hashlib
import keyword
import logging
import os
import re
import shutil
import tempfile
import time
from pathlib import Path
from typing import Dict, List, Optional, Set

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("prismapi.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (compiled once at module load)
# ---------------------------------------------------------------------------

_SEPARATOR_RUN_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]+(.)")
_CAMEL_TO_SNAKE_RE1: re.Pattern[str] = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_TO_SNAKE_RE2: re.Pattern[str] = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]")
_MULTI_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"_{2,}")
_LEADING_TRAILING_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"^_+|_+$")


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


def _upper_after_separators(name: str) -> str:
    return _SEPARATOR_RUN_RE.sub(lambda m: m.group(1).upper(), name)


@functools.lru_cache(maxsize=None)
def to_pascal_case(name: str) -> str:
    """
    Convert a declared name to PascalCase.

    Separator runs are dropped and the character after them upper-cased;
    everything else keeps its original casing.

    Examples:
        >>> to_pascal_case("user_profile")
        'UserProfile'
        >>> to_pascal_case("LogEntry")
        'LogEntry'
        >>> to_pascal_case("order-item")
        'OrderItem'
    """
    if not name:
        return ""
    s: str = _upper_after_separators(name)
    return s[:1].upper() + s[1:]


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """
    Convert a declared name to camelCase.

    Examples:
        >>> to_camel_case("LogEntry")
        'logEntry'
        >>> to_camel_case("user_profile")
        'userProfile'
    """
    if not name:
        return ""
    s: str = _upper_after_separators(name)
    return s[:1].lower() + s[1:]


@functools.lru_cache(maxsize=None)
def to_snake_case(name: str) -> str:
    """
    Convert any string to snake_case.

    Examples:
        >>> to_snake_case("UserProfile")
        'user_profile'
        >>> to_snake_case("getHTTPResponse")
        'get_http_response'
        >>> to_snake_case("already_snake")
        'already_snake'
    """
    if not name:
        return ""
    s: str = _CAMEL_TO_SNAKE_RE1.sub(r"\1_\2", name)
    s = _CAMEL_TO_SNAKE_RE2.sub(r"\1_\2", s)
    s = _NON_ALPHANUM_RE.sub("_", s)
    s = _MULTI_UNDERSCORE_RE.sub("_", s)
    s = _LEADING_TRAILING_UNDERSCORE_RE.sub("", s)
    return s.lower()


@functools.lru_cache(maxsize=None)
def to_plural(name: str) -> str:
    """
    Naive English pluralisation sufficient for route summaries.

    Handles common suffixes. For production i18n, use a dedicated library.
    """
    if not name:
        return ""

    lower: str = name.lower()

    irregulars: Dict[str, str] = {
        "person": "people",
        "child": "children",
        "man": "men",
        "woman": "women",
        "datum": "data",
        "index": "indices",
        "status": "statuses",
        "address": "addresses",
    }

    if lower in irregulars:
        plural: str = irregulars[lower]
        if name[0].isupper():
            return plural[0].upper() + plural[1:]
        return plural

    if lower.endswith(("sh", "ch", "x", "z", "ss", "s")):
        return name + "es"
    if lower.endswith("y") and len(name) > 1 and lower[-2] not in "aeiou":
        return name[:-1] + "ies"

    return name + "s"


@functools.lru_cache(maxsize=None)
def safe_identifier(name: str) -> str:
    """
    Make *name* usable as a Python identifier and module name, keeping its case.

    - Prefixes with underscore if it starts with a digit
    - Appends underscore if it is a Python keyword (``class`` → ``class_``,
      ``None`` → ``None_``)

    First call: O(n).  Subsequent: O(1).
    """
    if not name:
        return "_unnamed"
    result: str = f"_{name}" if name[0].isdigit() else name
    if keyword.iskeyword(result):
        result = f"{result}_"
    return result


# ---------------------------------------------------------------------------
# Import-path helpers
# ---------------------------------------------------------------------------


def normalize_path(path: str) -> str:
    """Convert Windows backslashes to forward slashes."""
    return path.replace("\\", "/")


def join_path_for_import(*segments: str) -> str:
    """
    Join path segments with forward slashes, whatever the host OS.

    Empty segments are kept, so ``("prisma", "", "client")`` gives
    ``"prisma//client"``.
    """
    return "/".join(segments)


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path*.

    When *atomic* is True, writes to a temporary file first then renames;
    this prevents partial writes on crash.

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")

    if atomic:
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(encoded)
            os.replace(tmp_path, str(path))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


def read_file(path: Path) -> str:
    """Read a file and return its content as a string."""
    return path.read_text(encoding="utf-8")


def clean_directory(path: Path) -> None:
    """Remove *path* entirely (if present) and recreate it empty."""
    if path.exists():
        shutil.rmtree(path)
        logger.debug("Removed directory: %s", path)
    path.mkdir(parents=True, exist_ok=True)


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string. O(n)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string. O(n)."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling generation steps.

    Usage:
        with Timer("parse schema") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Import statement builder
# ---------------------------------------------------------------------------


def build_import_block(imports: Dict[str, Set[str]]) -> str:
    """
    Build a sorted, de-duplicated import block from a mapping of
    module → set of names.

    Example:
        >>> build_import_block({"typing": {"List", "Optional"}, "datetime": {"datetime"}})
        'from datetime import datetime\\nfrom typing import List, Optional'
    """
    lines: List[str] = []
    for module in sorted(imports.keys()):
        names: List[str] = sorted(imports[module])
        if names:
            lines.append(f"from {module} import {', '.join(names)}")
        else:
            lines.append(f"import {module}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "to_pascal_case",
    "to_camel_case",
    "to_snake_case",
    "to_plural",
    "safe_identifier",
    "normalize_path",
    "join_path_for_import",
    "ensure_directory",
    "write_file",
    "read_file",
    "clean_directory",
    "sha256_hex",
    "count_lines",
    "Timer",
    "build_import_block",
]

logger.debug("prismapi.utils loaded — %d public symbols.", len(__all__))
