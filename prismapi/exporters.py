# File: prismapi/exporters.py
"""
prismapi - Output Writer (File-System Manager)
================================================

Responsible for:
    1. Refusing an output directory that is, or contains, a protected path
       (the project root, the schema), before anything is removed.
    2. Removing and recreating the output directory (generation is not
       incremental, so stale entity packages must not survive).
    3. Writing generated files atomically (write-to-temp then rename).
    4. Recording a checksum per file so callers can compare runs.

Everything here runs only after every file has been rendered in memory;
a failure while rendering therefore never reaches the file system.  A
failure while writing is raised as ``OutputWriteError`` and the previous
output is not restored.

Complexity: O(F) where F = total number of output files.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Sequence

from prismapi.errors import OutputWriteError
from prismapi.utils import Timer, clean_directory, count_lines, ensure_directory, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("prismapi.exporters")


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str


@dataclass(slots=True)
class ExportManifest:
    """
    Every file written by one export, in write order.

    Kept in memory only; it carries no timestamps so two runs over the same
    schema produce equal manifests.
    """

    output_directory: str = ""
    files: List[FileRecord] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    @property
    def total_lines(self) -> int:
        return sum(f.line_count for f in self.files)

    def checksums(self) -> Dict[str, str]:
        """relative_path → sha256."""
        return {f.relative_path: f.sha256 for f in self.files}

    def to_dict(self) -> Dict[str, Any]:
        """Convert manifest to a JSON-serialisable dictionary."""
        return {
            "output_directory": self.output_directory,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "total_lines": self.total_lines,
            "files": [
                {
                    "relative_path": f.relative_path,
                    "size_bytes": f.size_bytes,
                    "line_count": f.line_count,
                    "sha256": f.sha256,
                }
                for f in self.files
            ],
        }

    def to_json(self, indent_size: int = 2) -> str:
        """Serialise manifest to pretty-printed JSON."""
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


# ---------------------------------------------------------------------------
# OutputWriter class
# ---------------------------------------------------------------------------


class OutputWriter:
    """
    Writes a rendered file map under one output directory.

    Usage::

        writer = OutputWriter(Path("./src/generated"))
        manifest = writer.export({"user/schema.py": "...", ...})

    Paths passed as ``protected_paths`` must lie outside the output
    directory; ``export`` raises ``OutputWriteError`` otherwise.

    Thread-safety: NOT thread-safe.  Use one writer per output directory.
    """

    def __init__(
        self,
        output_dir: Path,
        *,
        clean_before_export: bool = True,
        atomic_writes: bool = True,
        protected_paths: Sequence[Path] = (),
    ) -> None:
        self._output_dir: Path = output_dir.resolve()
        self._protected: List[Path] = [p.resolve() for p in protected_paths]
        self._clean_before_export: bool = clean_before_export
        self._atomic_writes: bool = atomic_writes
        logger.debug(
            "OutputWriter initialised: output_dir=%s, clean=%s, atomic=%s.",
            self._output_dir,
            self._clean_before_export,
            self._atomic_writes,
        )

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def export(self, generated_files: Dict[str, str]) -> ExportManifest:
        """
        Prepare the output directory once, then write every file in the
        mapping's order.

        Raises:
            OutputWriteError: on any file-system failure.
        """
        manifest = ExportManifest(output_directory=str(self._output_dir))
        with Timer("export") as timer:
            self._check_not_protected()
            self._prepare_output_dir()
            for rel_path, content in generated_files.items():
                manifest.files.append(self._write_single_file(rel_path, content))

        logger.info(
            "Wrote %d files (%d bytes) to %s in %.3fs.",
            manifest.total_files,
            manifest.total_bytes,
            self._output_dir,
            timer.elapsed,
        )
        return manifest

    # -----------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------

    def _check_not_protected(self) -> None:
        """Refuse an output directory that is, or contains, a protected path."""
        for protected in self._protected:
            if protected == self._output_dir or self._output_dir in protected.parents:
                raise OutputWriteError(
                    f"Refusing to write into {self._output_dir}: it is or contains {protected}. "
                    "Choose a dedicated output directory.",
                    path=self._output_dir,
                )

    def _prepare_output_dir(self) -> None:
        try:
            if self._clean_before_export:
                logger.info("Cleaning output directory: %s", self._output_dir)
                clean_directory(self._output_dir)
            else:
                ensure_directory(self._output_dir)
        except OSError as exc:
            raise OutputWriteError(
                f"Could not prepare output directory: {exc}",
                path=self._output_dir,
                cause=exc,
            ) from exc

    def _write_single_file(self, rel_path: str, content: str) -> FileRecord:
        full_path: Path = self._output_dir / rel_path
        try:
            size_bytes: int = write_file(full_path, content, atomic=self._atomic_writes)
        except OSError as exc:
            raise OutputWriteError(
                f"Failed to write {rel_path}: {exc}", path=full_path, cause=exc
            ) from exc

        return FileRecord(
            relative_path=rel_path,
            absolute_path=str(full_path),
            size_bytes=size_bytes,
            line_count=count_lines(content),
            sha256=sha256_hex(content),
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "OutputWriter",
    "ExportManifest",
    "FileRecord",
]

logger.debug("prismapi.exporters loaded.")
