# File: prismapi/generator.py
"""
prismapi - Master Generation Pipeline (Orchestrator)
======================================================

Connects every phase together:

    Schema Location → Parsing → Template Generation → Aggregation → Export

Workflow::

    1. Locate the schema (explicit path, manifest hint or default locations).
    2. Parse it into a frozen ``ParsedSchema`` (parser.py).
    3. Resolve the Prisma client import path (client_path.py).
    4. Render every model, in declaration order, into memory (templates.py).
    5. Render the middleware package and the root index.
    6. Hand the complete file map to ``OutputWriter`` (exporters.py).
    7. Return a ``GenerationReport`` with metrics, diagnostics and status.

States::

    IDLE → LOCATED → PARSED → GENERATING → AGGREGATING → DONE
                  ↘        ↘            ↘             ↘
                                  FAILED

Error handling strategy:
    - Nothing touches the output directory until every file has been
      rendered; locate, parse and render failures leave it as it was.
    - Failures are raised as typed ``PrismapiError`` subclasses, never
      swallowed.  The generator (and its last report) move to ``FAILED``.
    - A render failure is reported as ``GenerationError`` naming the model.
    - Non-fatal findings are collected in ``report.diagnostics``.

Complexity: O(M × F) where M = models, F = fields per model.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

from prismapi.client_path import DEFAULT_CLIENT_PATH, client_import_for, resolve_client_path
from prismapi.compiler import SchemaCompiler
from prismapi.config import GeneratorConfig
from prismapi.diagnostics import Diagnostics
from prismapi.errors import GenerationError, PrismapiError
from prismapi.exporters import ExportManifest, FileRecord, OutputWriter
from prismapi.locator import find_schema
from prismapi.models import ParsedSchema
from prismapi.parser import ParseResult, parse_prisma_schema
from prismapi.templates import TemplateGenerator
from prismapi.utils import Timer

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("prismapi.generator")


class GenerationState(str, Enum):
    IDLE = "idle"
    LOCATED = "located"
    PARSED = "parsed"
    GENERATING = "generating"
    AGGREGATING = "aggregating"
    DONE = "done"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``APIGenerator.generate()``.

    On failure the same object (available as ``APIGenerator.last_report``)
    holds ``state == FAILED`` and the error message.
    """

    success: bool = False
    state: GenerationState = GenerationState.IDLE
    schema_path: str = ""
    client_path: str = ""
    output_directory: str = ""

    models: List[str] = field(default_factory=list)
    files: List[FileRecord] = field(default_factory=list)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    manifest: Optional[ExportManifest] = None
    error: str = ""
    total_elapsed_seconds: float = 0.0

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_lines(self) -> int:
        return sum(f.line_count for f in self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        lines.append(f"{'='*60}")
        lines.append("  prismapi — Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:           {status} ({self.state.value})")
        lines.append(f"  Schema:           {self.schema_path or '-'}")
        lines.append(f"  Prisma client:    {self.client_path or '-'}")
        lines.append(f"  Output:           {self.output_directory}")
        lines.append(f"  Models:           {len(self.models)}")
        lines.append(f"  Files generated:  {self.total_files}")
        lines.append(f"  Total lines:      {self.total_lines:,}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─'*60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        warnings = self.diagnostics.warnings
        if warnings:
            lines.append(f"{'─'*60}")
            lines.append(f"  Warnings ({len(warnings)}):")
            for item in warnings:
                lines.append(f"    ⚠ [{item.code}] {item.message}")

        if self.error:
            lines.append(f"{'─'*60}")
            lines.append(f"  Error: {self.error}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# APIGenerator: master orchestrator
# ---------------------------------------------------------------------------


class APIGenerator:
    """
    Master pipeline orchestrator.

    Usage::

        generator = APIGenerator(GeneratorConfig(output_dir="./src/generated"))
        report = generator.generate()
        print(report.summary())

    The generator is reusable: create once, call ``generate()`` many times.
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        *,
        compiler: Optional[SchemaCompiler] = None,
    ) -> None:
        self._config: GeneratorConfig = config or GeneratorConfig()
        self._compiler: Optional[SchemaCompiler] = compiler
        self._state: GenerationState = GenerationState.IDLE
        self._last_report: Optional[GenerationReport] = None
        if not self._config.clean_output:
            logger.warning(
                "clean_output is disabled; files of removed models will be left behind."
            )
        logger.debug(
            "APIGenerator initialised: output=%s, root=%s.",
            self._config.output_path,
            self._config.root,
        )

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    @property
    def state(self) -> GenerationState:
        return self._state

    @property
    def last_report(self) -> Optional[GenerationReport]:
        return self._last_report

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def generate(self, schema_path: Union[str, Path, None] = None) -> GenerationReport:
        """
        Full pipeline: locate → parse → generate → aggregate → export.

        Raises:
            SchemaNotFoundError, NoSchemaFilesError, MalformedSchemaError,
            SchemaParseError: before the output directory is touched.
            GenerationError: a model could not be rendered; output untouched.
            OutputWriteError: writing failed; prior output is not restored.
        """
        report: GenerationReport = self._begin()
        explicit: Union[str, Path, None] = (
            schema_path if schema_path is not None else self._config.schema_location
        )

        total = Timer("total")
        try:
            with total:
                with Timer("locate") as t:
                    located: Path = find_schema(explicit, project_root=self._config.root)
                report.schema_path = str(located)
                self._record(report, "Locate Schema", t.elapsed, str(located))
                self._transition(report, GenerationState.LOCATED)

                with Timer("parse") as t:
                    parsed: ParseResult = parse_prisma_schema(
                        located, project_root=self._config.root, compiler=self._compiler
                    )
                report.diagnostics.merge(parsed.diagnostics)
                self._record(
                    report,
                    "Parse Schema",
                    t.elapsed,
                    f"{len(parsed.schema.models)} models, {len(parsed.schema.enums)} enums",
                )
                self._transition(report, GenerationState.PARSED)

                client_path: str = self._config.client_path or resolve_client_path(
                    located, project_root=self._config.root
                )
                self._run(parsed.schema, client_path, report)
        except PrismapiError as exc:
            report.total_elapsed_seconds = total.elapsed
            self._fail(report, exc)
            raise

        report.total_elapsed_seconds = total.elapsed
        return report

    def generate_from_schema(
        self,
        schema: ParsedSchema,
        client_path: Optional[str] = None,
    ) -> GenerationReport:
        """
        Generate from an already-parsed schema, skipping locate and parse.

        The client path defaults to the configured override, else to the
        default Prisma client package.
        """
        report: GenerationReport = self._begin()
        self._transition(report, GenerationState.PARSED)
        total = Timer("total")
        try:
            with total:
                self._run(
                    schema,
                    client_path or self._config.client_path or DEFAULT_CLIENT_PATH,
                    report,
                )
        except PrismapiError as exc:
            report.total_elapsed_seconds = total.elapsed
            self._fail(report, exc)
            raise

        report.total_elapsed_seconds = total.elapsed
        return report

    # -----------------------------------------------------------------
    # Pipeline
    # -----------------------------------------------------------------

    def _run(self, schema: ParsedSchema, client_path: str, report: GenerationReport) -> None:
        report.client_path = client_path
        templates = TemplateGenerator(self._config, client_import_for(client_path))

        # --- Render models (memory only) ---
        self._transition(report, GenerationState.GENERATING)
        files: Dict[str, str] = {}
        with Timer("generate") as t:
            for model in schema.models:
                try:
                    files.update(
                        templates.generate_all_for_model(
                            model, schema.enums, report.diagnostics
                        )
                    )
                except PrismapiError:
                    raise
                except Exception as exc:
                    raise GenerationError(
                        f"Failed to generate code for model '{model.name}': {exc}",
                        model=model.name,
                        cause=exc,
                    ) from exc
                report.models.append(model.name)
        self._record(
            report, "Code Generation", t.elapsed, f"{len(schema.models)} models, {len(files)} files"
        )

        # --- Render aggregation modules ---
        self._transition(report, GenerationState.AGGREGATING)
        with Timer("aggregate") as t:
            files["middleware/client.py"] = templates.generate_client_middleware()
            files["middleware/__init__.py"] = templates.generate_middleware_index()
            files["__init__.py"] = templates.generate_root_index(schema.models)
        self._record(report, "Aggregation", t.elapsed, "middleware, root index")

        # --- Write ---
        protected: List[Path] = [self._config.root]
        if report.schema_path:
            protected.append(Path(report.schema_path))
        with Timer("export") as t:
            writer = OutputWriter(
                self._config.output_path,
                clean_before_export=self._config.clean_output,
                atomic_writes=self._config.atomic_writes,
                protected_paths=protected,
            )
            manifest: ExportManifest = writer.export(files)
        report.manifest = manifest
        report.files = list(manifest.files)
        self._record(
            report,
            "Export to Filesystem",
            t.elapsed,
            f"{manifest.total_files} files, {manifest.total_bytes:,} bytes",
        )

        report.success = True
        self._transition(report, GenerationState.DONE)
        logger.info(
            "Generated %d models into %s (%d warnings).",
            len(report.models),
            report.output_directory,
            report.diagnostics.warning_count,
        )

    # -----------------------------------------------------------------
    # Internal: state & report bookkeeping
    # -----------------------------------------------------------------

    def _begin(self) -> GenerationReport:
        self._state = GenerationState.IDLE
        report = GenerationReport(output_directory=str(self._config.output_path))
        self._last_report = report
        return report

    def _transition(self, report: GenerationReport, state: GenerationState) -> None:
        logger.debug("State %s → %s", self._state.value, state.value)
        self._state = state
        report.state = state

    def _fail(self, report: GenerationReport, exc: PrismapiError) -> None:
        logger.error("Generation failed in state '%s': %s", self._state.value, exc)
        report.success = False
        report.error = str(exc)
        self._transition(report, GenerationState.FAILED)

    @staticmethod
    def _record(report: GenerationReport, name: str, elapsed: float, detail: str) -> None:
        report.step_metrics.append(
            GenerationStepMetric(step_name=name, success=True, elapsed_seconds=elapsed, detail=detail)
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "APIGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "GenerationState",
]

logger.debug("prismapi.generator loaded.")
