# File: prismapi/__init__.py
"""
prismapi — FastAPI Code Generator for Prisma Schemas
======================================================

Reads a Prisma schema (one ``schema.prisma`` or a folder of ``.prisma``
fragments) and writes, for every model, a Python package with Pydantic V2
validation schemas, Prisma Client Python data-access functions, FastAPI
request handlers and an ``APIRouter``; plus a client-injection middleware
and a root index that mounts every router.

Architecture overview::

    cli.py ──▶ generator.APIGenerator
                    │
                    ├─ locator.find_schema          schema.prisma or prisma/schema/*.prisma
                    ├─ parser.parse_prisma_schema   compiler.PrismaSchemaCompiler → ParsedSchema
                    ├─ client_path.resolve_client_path
                    ├─ templates.TemplateGenerator  one package per model, in memory
                    └─ exporters.OutputWriter       clean once, then write

Usage::

    # As a library
    from prismapi import APIGenerator, GeneratorConfig
    report = APIGenerator(GeneratorConfig(output_dir="./src/generated")).generate()

    # From the command line
    prismapi generate -s prisma/schema.prisma -o ./src/generated

Public API:
    - APIGenerator        — Master orchestrator
    - GeneratorConfig     — Generation settings model
    - parse_prisma_schema — Locate + parse into the frozen IR
    - ParsedSchema        — Intermediate representation
    - TemplateGenerator   — Code template engine
    - OutputWriter        — File-system writer
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from prismapi.client_path import ClientImport, client_import_for, resolve_client_path
from prismapi.config import GeneratorConfig
from prismapi.diagnostics import Diagnostic, Diagnostics
from prismapi.errors import (
    GenerationError,
    MalformedSchemaError,
    NoSchemaFilesError,
    OutputWriteError,
    PrismapiError,
    SchemaCompilerError,
    SchemaNotFoundError,
    SchemaParseError,
    UnsupportedFieldTypeWarning,
)
from prismapi.exporters import ExportManifest, FileRecord, OutputWriter
from prismapi.generator import (
    APIGenerator,
    GenerationReport,
    GenerationState,
    GenerationStepMetric,
)
from prismapi.locator import find_schema
from prismapi.models import (
    FieldKind,
    FieldType,
    ParsedEnum,
    ParsedField,
    ParsedModel,
    ParsedRelationInfo,
    ParsedSchema,
)
from prismapi.parser import (
    ParseResult,
    parse_prisma_schema,
    parse_schema_folder,
    parse_schema_source,
    parse_single_schema_file,
)
from prismapi.templates import TemplateGenerator
from prismapi.utils import Timer, to_camel_case, to_pascal_case, to_plural, to_snake_case

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Core orchestrator
    "APIGenerator",
    "GenerationReport",
    "GenerationState",
    "GenerationStepMetric",
    "GeneratorConfig",
    # IR
    "FieldKind",
    "FieldType",
    "ParsedEnum",
    "ParsedField",
    "ParsedModel",
    "ParsedRelationInfo",
    "ParsedSchema",
    # Parsing
    "ParseResult",
    "find_schema",
    "parse_prisma_schema",
    "parse_schema_folder",
    "parse_schema_source",
    "parse_single_schema_file",
    "ClientImport",
    "client_import_for",
    "resolve_client_path",
    # Diagnostics & errors
    "Diagnostic",
    "Diagnostics",
    "PrismapiError",
    "SchemaNotFoundError",
    "NoSchemaFilesError",
    "MalformedSchemaError",
    "SchemaParseError",
    "SchemaCompilerError",
    "GenerationError",
    "OutputWriteError",
    "UnsupportedFieldTypeWarning",
    # Templates & export
    "TemplateGenerator",
    "OutputWriter",
    "ExportManifest",
    "FileRecord",
    # Utilities
    "Timer",
    "to_camel_case",
    "to_pascal_case",
    "to_plural",
    "to_snake_case",
]
