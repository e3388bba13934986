# File: prismapi/parser.py
"""
prismapi - Schema Parser
==========================
Reads a Prisma schema (single file or directory of fragments), hands the
text to a ``SchemaCompiler`` and lowers the resulting DMMF document into the
frozen IR of ``prismapi.models``.

Failure policy:
- Locator errors, ``NoSchemaFilesError`` and ``MalformedSchemaError``
  propagate as themselves.
- ``OSError``, ``SchemaCompilerError`` and IR validation failures are
  wrapped into ``SchemaParseError`` with the original as ``cause``.
- No partial IR is ever returned.

Non-fatal conditions (unmapped scalar types) are recorded in the
``Diagnostics`` returned alongside the schema.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from prismapi.compiler import (
    DMMFDocument,
    DMMFField,
    PrismaSchemaCompiler,
    SchemaCompiler,
)
from prismapi.diagnostics import UNSUPPORTED_FIELD_TYPE, Diagnostics
from prismapi.errors import (
    MalformedSchemaError,
    NoSchemaFilesError,
    SchemaCompilerError,
    SchemaParseError,
    UnsupportedFieldTypeWarning,
)
from prismapi.locator import combine_fragments, find_schema, list_schema_fragments
from prismapi.models import (
    FieldKind,
    FieldType,
    ParsedEnum,
    ParsedField,
    ParsedModel,
    ParsedRelationInfo,
    ParsedSchema,
)
from prismapi.utils import Timer, read_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("prismapi.parser")

# ---------------------------------------------------------------------------
# Type mapping (O(1) lookup)
# ---------------------------------------------------------------------------

_SCALAR_TYPE_MAP: Dict[str, FieldType] = {
    "String": FieldType.STRING,
    "UUID": FieldType.STRING,
    "Char": FieldType.STRING,
    "Text": FieldType.STRING,
    "VarChar": FieldType.STRING,
    "Int": FieldType.NUMBER,
    "BigInt": FieldType.NUMBER,
    "Float": FieldType.NUMBER,
    "Decimal": FieldType.NUMBER,
    "Boolean": FieldType.BOOLEAN,
    "DateTime": FieldType.DATE,
    "Date": FieldType.DATE,
    "Time": FieldType.DATE,
    "Json": FieldType.JSON,
}

_REQUIRED_BLOCKS = ("datasource", "generator")


@dataclass(slots=True)
class ParseResult:
    """Output of a parse run."""

    schema: ParsedSchema
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    source_path: Optional[Path] = None


# ---------------------------------------------------------------------------
# Lowering
# ---------------------------------------------------------------------------


def map_prisma_type_to_field_type(
    prisma_type: str,
    kind: Union[FieldKind, str],
    diagnostics: Optional[Diagnostics] = None,
    *,
    field_name: Optional[str] = None,
    model_name: Optional[str] = None,
) -> FieldType:
    """
    Collapse a Prisma type onto a canonical ``FieldType``.

    Object fields become ``relation`` and enum fields ``enum`` regardless of
    the type name.  Scalar names without a mapping (``Bytes``,
    ``Unsupported``, ...) become ``unsupported`` and record an
    ``unsupported-field-type`` warning.
    """
    kind_value: str = kind.value if isinstance(kind, FieldKind) else kind
    if kind_value == FieldKind.OBJECT.value:
        return FieldType.RELATION
    if kind_value == FieldKind.ENUM.value:
        return FieldType.ENUM

    mapped: Optional[FieldType] = _SCALAR_TYPE_MAP.get(prisma_type)
    if mapped is not None:
        return mapped

    qualified: str = f"{model_name}.{field_name}" if model_name else (field_name or "")
    subject: str = f"field '{qualified}'" if qualified else "a field"
    message: str = (
        f"Unsupported Prisma type '{prisma_type}' on {subject}; "
        "it will be treated as Any."
    )
    if diagnostics is not None:
        diagnostics.add_warning(
            UNSUPPORTED_FIELD_TYPE,
            message,
            {"model": model_name, "field": field_name, "type": prisma_type},
            category=UnsupportedFieldTypeWarning,
        )
    else:
        logger.warning("%s", message)
    return FieldType.UNSUPPORTED


def map_dmmf_field(
    dmmf_field: DMMFField,
    diagnostics: Optional[Diagnostics] = None,
    *,
    model_name: Optional[str] = None,
) -> ParsedField:
    """
    Lower one DMMF field; every object field receives relation info.

    The compiler's ``unsupported`` kind is lowered to a ``scalar`` field of
    type ``unsupported``.
    """
    kind: FieldKind = (
        FieldKind.SCALAR if dmmf_field.kind == "unsupported" else FieldKind(dmmf_field.kind)
    )
    relation_info: Optional[ParsedRelationInfo] = None
    if kind == FieldKind.OBJECT:
        relation_info = ParsedRelationInfo(
            related_model_name=dmmf_field.type,
            relation_name=dmmf_field.relation_name,
        )
    return ParsedField(
        name=dmmf_field.name,
        type=map_prisma_type_to_field_type(
            dmmf_field.type,
            kind,
            diagnostics,
            field_name=dmmf_field.name,
            model_name=model_name,
        ),
        kind=kind,
        enum_name=dmmf_field.type if kind == FieldKind.ENUM else None,
        is_list=dmmf_field.is_list,
        is_required=dmmf_field.is_required,
        is_unique=dmmf_field.is_unique,
        is_id=dmmf_field.is_id,
        has_default_value=dmmf_field.has_default_value,
        is_updated_at=dmmf_field.is_updated_at,
        relation_info=relation_info,
    )


def map_dmmf_to_parsed_schema(
    document: DMMFDocument, diagnostics: Optional[Diagnostics] = None
) -> ParsedSchema:
    """Lower a whole DMMF document, preserving declaration order."""
    models: List[ParsedModel] = [
        ParsedModel(
            name=m.name,
            db_name=m.db_name,
            fields=[map_dmmf_field(f, diagnostics, model_name=m.name) for f in m.fields],
        )
        for m in document.datamodel.models
    ]
    enums: List[ParsedEnum] = [
        ParsedEnum(name=e.name, values=[v.name for v in e.values])
        for e in document.datamodel.enums
    ]
    return ParsedSchema(models=models, enums=enums)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def parse_schema_source(
    source: str,
    *,
    compiler: Optional[SchemaCompiler] = None,
    source_path: Optional[Path] = None,
) -> ParseResult:
    """Compile and lower schema text already in memory."""
    active: SchemaCompiler = compiler if compiler is not None else PrismaSchemaCompiler()
    diagnostics = Diagnostics()

    with Timer("compile schema"):
        try:
            document: DMMFDocument = active.compile(source)
        except SchemaCompilerError as exc:
            raise SchemaParseError(
                f"Failed to compile Prisma schema: {exc}", path=source_path, cause=exc
            ) from exc

    try:
        schema: ParsedSchema = map_dmmf_to_parsed_schema(document, diagnostics)
    except ValidationError as exc:
        raise SchemaParseError(
            f"Compiled schema is not a valid data model: {exc}",
            path=source_path,
            cause=exc,
        ) from exc

    logger.info(
        "Parsed %d models and %d enums%s",
        len(schema.models),
        len(schema.enums),
        f" from {source_path}" if source_path else "",
    )
    return ParseResult(schema=schema, diagnostics=diagnostics, source_path=source_path)


def parse_single_schema_file(
    path: Path, *, compiler: Optional[SchemaCompiler] = None
) -> ParseResult:
    """Parse one ``.prisma`` file."""
    try:
        source: str = read_file(path)
    except OSError as exc:
        raise SchemaParseError(
            f"Could not read schema file: {exc}", path=path, cause=exc
        ) from exc
    return parse_schema_source(source, compiler=compiler, source_path=path)


def parse_schema_folder(
    directory: Path, *, compiler: Optional[SchemaCompiler] = None
) -> ParseResult:
    """
    Parse a directory of ``.prisma`` fragments as one document.

    Raises:
        NoSchemaFilesError: the directory holds no ``.prisma`` file.
        MalformedSchemaError: the combined text has no datasource or
            generator block.
    """
    try:
        fragments: List[Path] = list_schema_fragments(directory)
        if not fragments:
            raise NoSchemaFilesError(
                "No .prisma files found in schema directory", path=directory
            )
        logger.debug("Combining %d schema fragments from %s", len(fragments), directory)
        source: str = combine_fragments([read_file(p) for p in fragments])
    except OSError as exc:
        raise SchemaParseError(
            f"Could not read schema directory: {exc}", path=directory, cause=exc
        ) from exc

    for block in _REQUIRED_BLOCKS:
        if block not in source:
            raise MalformedSchemaError(block, path=directory)

    return parse_schema_source(source, compiler=compiler, source_path=directory)


def parse_prisma_schema(
    schema_path: Union[str, Path, None] = None,
    *,
    project_root: Union[str, Path, None] = None,
    compiler: Optional[SchemaCompiler] = None,
) -> ParseResult:
    """
    Locate (when *schema_path* is None) and parse the project's schema.

    Directory schemas go through ``parse_schema_folder``; files through
    ``parse_single_schema_file``.
    """
    path: Path = find_schema(schema_path, project_root=project_root)
    try:
        is_directory: bool = path.is_dir()
    except OSError as exc:
        raise SchemaParseError(
            f"Could not stat schema path: {exc}", path=path, cause=exc
        ) from exc

    if is_directory:
        return parse_schema_folder(path, compiler=compiler)
    return parse_single_schema_file(path, compiler=compiler)


__all__: List[str] = [
    "ParseResult",
    "map_prisma_type_to_field_type",
    "map_dmmf_field",
    "map_dmmf_to_parsed_schema",
    "parse_schema_source",
    "parse_single_schema_file",
    "parse_schema_folder",
    "parse_prisma_schema",
]

logger.debug("prismapi.parser loaded — %d public symbols.", len(__all__))
