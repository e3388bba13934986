# File: prismapi/config.py
"""
prismapi - Generator Configuration
====================================
A single Pydantic model holding every knob of a generation run.  The CLI
builds one from its arguments; library users construct it directly.

Relative paths (``output_dir``, ``schema_path``) are interpreted against
``project_root``, which defaults to the current working directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger: logging.Logger = logging.getLogger("prismapi.config")

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)

DEFAULT_OUTPUT_DIR: str = "./src/generated"


class GeneratorConfig(BaseModel):
    """Master configuration for ``APIGenerator``."""

    model_config = _SHARED_CONFIG

    # -- Input --------------------------------------------------------------
    schema_path: Optional[str] = Field(
        default=None,
        description="Explicit schema file or directory; located automatically when None.",
    )
    project_root: str = Field(
        default_factory=lambda: str(Path.cwd()),
        description="Directory that relative paths and the client path resolve against.",
    )

    # -- Output -------------------------------------------------------------
    output_dir: str = Field(
        default=DEFAULT_OUTPUT_DIR, description="Root directory for generated code."
    )
    client_path: Optional[str] = Field(
        default=None,
        description="Override for the Prisma client location (slash-separated).",
    )
    clean_output: bool = Field(
        default=True,
        description="Remove the output directory before writing. Generation is "
        "not incremental; disabling this can leave stale entity packages behind.",
    )
    atomic_writes: bool = Field(
        default=True, description="Write through a temp file + rename."
    )

    # -- Code style ---------------------------------------------------------
    generate_docstrings: bool = Field(
        default=True, description="Add module docstrings to generated files."
    )

    @field_validator("output_dir")
    @classmethod
    def _output_dir_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("output_dir must not be blank.")
        return v

    # -- Helpers ------------------------------------------------------------

    @property
    def root(self) -> Path:
        return Path(self.project_root)

    def resolve(self, path: str) -> Path:
        """Resolve *path* against ``project_root`` unless it is absolute."""
        candidate = Path(path)
        return candidate if candidate.is_absolute() else self.root / candidate

    @property
    def output_path(self) -> Path:
        return self.resolve(self.output_dir)

    @property
    def schema_location(self) -> Optional[Path]:
        return self.resolve(self.schema_path) if self.schema_path else None


__all__: List[str] = ["GeneratorConfig", "DEFAULT_OUTPUT_DIR"]
