# File: prismapi/compiler.py
"""
prismapi - Prisma Schema Compiler
===================================
Turns Prisma Schema Language text into a DMMF-shaped document (the "data
model meta format" Prisma tooling exchanges).  The parser consumes this
document only through the ``SchemaCompiler`` protocol, so a different
compiler (for instance one shelling out to the Prisma engines) can be
swapped in without touching the rest of the pipeline.

The built-in ``PrismaSchemaCompiler`` is a two-pass, line-oriented parser:

1. **Block scan**: comments are stripped and the document is split into
   top-level blocks (``datasource``, ``generator``, ``model``, ``view``,
   ``enum``, ``type``).
2. **Field resolution**: once every block name is known, each field's type
   is classified as scalar, enum, object (model or composite type) or
   unsupported, and its attributes are read.

Only the attributes the generator cares about are interpreted: ``@id``,
``@unique``, ``@default``, ``@updatedAt``, ``@map``, ``@relation`` and the
block attributes ``@@map`` / ``@@id``.  Everything else (native type
attributes, indexes, ...) is accepted and ignored.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Protocol, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field

from prismapi.errors import SchemaCompilerError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("prismapi.compiler")

# ---------------------------------------------------------------------------
# DMMF document models
# ---------------------------------------------------------------------------


def _camel_alias(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


_DMMF_CONFIG: ConfigDict = ConfigDict(
    populate_by_name=True,
    frozen=True,
    extra="forbid",
    alias_generator=_camel_alias,
)


class DMMFField(BaseModel):
    model_config = _DMMF_CONFIG

    name: str
    kind: str  # "scalar" | "enum" | "object" | "unsupported"
    type: str
    is_list: bool = False
    is_required: bool = True
    is_unique: bool = False
    is_id: bool = False
    has_default_value: bool = False
    is_updated_at: bool = False
    relation_name: Optional[str] = None
    db_name: Optional[str] = None


class DMMFModel(BaseModel):
    model_config = _DMMF_CONFIG

    name: str
    db_name: Optional[str] = None
    fields: List[DMMFField] = Field(default_factory=list)
    primary_key: Optional[List[str]] = None


class DMMFEnumValue(BaseModel):
    model_config = _DMMF_CONFIG

    name: str
    db_name: Optional[str] = None


class DMMFEnum(BaseModel):
    model_config = _DMMF_CONFIG

    name: str
    values: List[DMMFEnumValue] = Field(default_factory=list)
    db_name: Optional[str] = None


class DMMFDatamodel(BaseModel):
    model_config = _DMMF_CONFIG

    models: List[DMMFModel] = Field(default_factory=list)
    enums: List[DMMFEnum] = Field(default_factory=list)
    types: List[DMMFModel] = Field(default_factory=list)


class DMMFConfigBlock(BaseModel):
    """A ``datasource`` or ``generator`` block with its raw properties."""

    model_config = _DMMF_CONFIG

    name: str
    properties: Dict[str, str] = Field(default_factory=dict)


class DMMFDocument(BaseModel):
    model_config = _DMMF_CONFIG

    datamodel: DMMFDatamodel = Field(default_factory=DMMFDatamodel)
    datasources: List[DMMFConfigBlock] = Field(default_factory=list)
    generators: List[DMMFConfigBlock] = Field(default_factory=list)

    def generator(self, name: str) -> Optional[DMMFConfigBlock]:
        for block in self.generators:
            if block.name == name:
                return block
        return None


# ---------------------------------------------------------------------------
# Compiler protocol
# ---------------------------------------------------------------------------


class SchemaCompiler(Protocol):
    """Anything that can turn schema text into a DMMF document."""

    def compile(self, source: str) -> DMMFDocument:
        ...


# ---------------------------------------------------------------------------
# Lexical helpers
# ---------------------------------------------------------------------------

SCALAR_TYPES: FrozenSet[str] = frozenset(
    {
        "String",
        "Boolean",
        "Int",
        "BigInt",
        "Float",
        "Decimal",
        "DateTime",
        "Json",
        "Bytes",
    }
)

_BLOCK_KEYWORDS: FrozenSet[str] = frozenset(
    {"datasource", "generator", "model", "view", "enum", "type"}
)

_BLOCK_HEADER_RE: re.Pattern[str] = re.compile(r"^(\w+)\s+(\w+)\s*\{\s*(\}?)\s*$")
_FIELD_RE: re.Pattern[str] = re.compile(
    r"^(?P<name>\w+)\s+"
    r"(?P<type>\w+)(?P<args>\(\s*\"[^\"]*\"\s*\))?"
    r"(?P<list>\[\])?(?P<optional>\?)?"
    r"(?P<rest>(?:\s.*)?)$"
)
_ENUM_VALUE_RE: re.Pattern[str] = re.compile(r"^(?P<name>\w+)(?P<rest>(?:\s.*)?)$")
_CONFIG_LINE_RE: re.Pattern[str] = re.compile(r"^(?P<key>\w+)\s*=\s*(?P<value>.+)$")
_STRING_LITERAL_RE: re.Pattern[str] = re.compile(r'^"((?:[^"\\]|\\.)*)"$')
_FIRST_STRING_ARG_RE: re.Pattern[str] = re.compile(r'^\s*"([^"]*)"')
_NAMED_STRING_ARG_RE: re.Pattern[str] = re.compile(r'\bname\s*:\s*"([^"]*)"')
_FIELD_LIST_RE: re.Pattern[str] = re.compile(r"\[([^\]]*)\]")


def strip_comment(line: str) -> str:
    """Drop a trailing ``//`` (or ``///``) comment, ignoring ``//`` inside strings."""
    in_string: bool = False
    escaped: bool = False
    for i, ch in enumerate(line):
        if escaped:
            escaped = False
            continue
        if ch == "\\" and in_string:
            escaped = True
        elif ch == '"':
            in_string = not in_string
        elif ch == "/" and not in_string and line[i + 1 : i + 2] == "/":
            return line[:i]
    return line


def split_attributes(text: str) -> List[Tuple[str, Optional[str]]]:
    """
    Split the attribute tail of a field line into ``(name, args)`` pairs.

    ``@default("a@b.c") @db.VarChar(255)`` →
    ``[("default", '"a@b.c"'), ("db.VarChar", "255")]``.  Parentheses are
    balanced and string literals are skipped, so ``@`` inside arguments is
    never mistaken for a new attribute.
    """
    attrs: List[Tuple[str, Optional[str]]] = []
    i: int = 0
    n: int = len(text)
    while i < n:
        if text[i] != "@":
            i += 1
            continue
        j: int = i + 1
        while j < n and (text[j].isalnum() or text[j] in "_."):
            j += 1
        name: str = text[i + 1 : j]
        args: Optional[str] = None
        if j < n and text[j] == "(":
            depth: int = 0
            in_string: bool = False
            k: int = j
            while k < n:
                ch: str = text[k]
                if in_string:
                    if ch == "\\":
                        k += 1
                    elif ch == '"':
                        in_string = False
                elif ch == '"':
                    in_string = True
                elif ch == "(":
                    depth += 1
                elif ch == ")":
                    depth -= 1
                    if depth == 0:
                        break
                k += 1
            if depth != 0:
                raise ValueError(f"Unbalanced parentheses in attribute '@{name}'")
            args = text[j + 1 : k]
            j = k + 1
        attrs.append((name, args))
        i = j
    return attrs


def _unquote(value: str) -> str:
    match = _STRING_LITERAL_RE.match(value.strip())
    return match.group(1) if match else value.strip()


def _string_arg(args: Optional[str]) -> Optional[str]:
    if not args:
        return None
    match = _FIRST_STRING_ARG_RE.match(args) or _NAMED_STRING_ARG_RE.search(args)
    return match.group(1) if match else None


def implicit_relation_name(model_a: str, model_b: str) -> str:
    """Prisma's default relation name: both model names sorted, joined by ``To``."""
    first, second = sorted((model_a, model_b))
    return f"{first}To{second}"


# ---------------------------------------------------------------------------
# Block scan
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class _Line:
    number: int
    text: str


@dataclass(slots=True)
class _Block:
    keyword: str
    name: str
    line: int
    body: List[_Line] = field(default_factory=list)


def _scan_blocks(source: str) -> List[_Block]:
    blocks: List[_Block] = []
    current: Optional[_Block] = None

    for number, raw in enumerate(source.splitlines(), start=1):
        text: str = strip_comment(raw).strip()
        if not text:
            continue

        if current is not None:
            if text == "}":
                blocks.append(current)
                current = None
            elif text.endswith("{"):
                raise SchemaCompilerError(
                    f"Block '{current.name}' opened on line {current.line} "
                    "is not closed before a new block starts",
                    line=number,
                )
            else:
                current.body.append(_Line(number, text))
            continue

        header = _BLOCK_HEADER_RE.match(text)
        if header is None:
            raise SchemaCompilerError(
                f"Unexpected content outside of a block: '{text}'", line=number
            )
        keyword, name, closed = header.group(1), header.group(2), header.group(3)
        if keyword not in _BLOCK_KEYWORDS:
            raise SchemaCompilerError(f"Unknown block type '{keyword}'", line=number)
        block = _Block(keyword, name, number)
        if closed:
            blocks.append(block)
        else:
            current = block

    if current is not None:
        raise SchemaCompilerError(
            f"Block '{current.name}' is never closed", line=current.line
        )
    return blocks


# ---------------------------------------------------------------------------
# Compiler
# ---------------------------------------------------------------------------


class PrismaSchemaCompiler:
    """
    Default schema compiler.

    Stateless: a single instance may compile any number of documents.
    """

    def compile(self, source: str) -> DMMFDocument:
        blocks: List[_Block] = _scan_blocks(source)
        self._check_unique_names(blocks)

        model_names: FrozenSet[str] = frozenset(
            b.name for b in blocks if b.keyword in ("model", "view")
        )
        enum_names: FrozenSet[str] = frozenset(b.name for b in blocks if b.keyword == "enum")
        type_names: FrozenSet[str] = frozenset(b.name for b in blocks if b.keyword == "type")

        models: List[DMMFModel] = []
        enums: List[DMMFEnum] = []
        types: List[DMMFModel] = []
        datasources: List[DMMFConfigBlock] = []
        generators: List[DMMFConfigBlock] = []

        for block in blocks:
            if block.keyword == "datasource":
                datasources.append(self._compile_config(block))
            elif block.keyword == "generator":
                generators.append(self._compile_config(block))
            elif block.keyword == "enum":
                enums.append(self._compile_enum(block))
            else:
                compiled: DMMFModel = self._compile_model(
                    block, model_names, enum_names, type_names
                )
                if block.keyword == "type":
                    types.append(compiled)
                else:
                    models.append(compiled)

        logger.debug(
            "Compiled schema: %d models, %d enums, %d composite types, "
            "%d datasources, %d generators",
            len(models),
            len(enums),
            len(types),
            len(datasources),
            len(generators),
        )
        return DMMFDocument(
            datamodel=DMMFDatamodel(models=models, enums=enums, types=types),
            datasources=datasources,
            generators=generators,
        )

    # -- Blocks -------------------------------------------------------------

    @staticmethod
    def _check_unique_names(blocks: List[_Block]) -> None:
        seen: Dict[str, _Block] = {}
        for block in blocks:
            if block.keyword in ("datasource", "generator"):
                continue
            previous: Optional[_Block] = seen.get(block.name)
            if previous is not None:
                raise SchemaCompilerError(
                    f"The {block.keyword} '{block.name}' cannot be defined because "
                    f"a {previous.keyword} with that name already exists "
                    f"(line {previous.line})",
                    line=block.line,
                )
            seen[block.name] = block

    @staticmethod
    def _compile_config(block: _Block) -> DMMFConfigBlock:
        properties: Dict[str, str] = {}
        for line in block.body:
            match = _CONFIG_LINE_RE.match(line.text)
            if match is None:
                raise SchemaCompilerError(
                    f"Invalid property in {block.keyword} '{block.name}': '{line.text}'",
                    line=line.number,
                )
            properties[match.group("key")] = _unquote(match.group("value"))
        return DMMFConfigBlock(name=block.name, properties=properties)

    def _compile_enum(self, block: _Block) -> DMMFEnum:
        values: List[DMMFEnumValue] = []
        db_name: Optional[str] = None
        seen: Set[str] = set()
        for line in block.body:
            if line.text.startswith("@@"):
                for name, args in self._attributes(line, line.text[1:]):
                    if name == "map":
                        db_name = _string_arg(args)
                continue
            match = _ENUM_VALUE_RE.match(line.text)
            if match is None:
                raise SchemaCompilerError(
                    f"Invalid value in enum '{block.name}': '{line.text}'",
                    line=line.number,
                )
            value: str = match.group("name")
            if value in seen:
                raise SchemaCompilerError(
                    f"Value '{value}' is already defined on enum '{block.name}'",
                    line=line.number,
                )
            seen.add(value)
            mapped: Optional[str] = None
            for name, args in self._attributes(line, match.group("rest")):
                if name == "map":
                    mapped = _string_arg(args)
            values.append(DMMFEnumValue(name=value, db_name=mapped))
        if not values:
            raise SchemaCompilerError(
                f"Enum '{block.name}' must declare at least one value", line=block.line
            )
        return DMMFEnum(name=block.name, values=values, db_name=db_name)

    def _compile_model(
        self,
        block: _Block,
        model_names: FrozenSet[str],
        enum_names: FrozenSet[str],
        type_names: FrozenSet[str],
    ) -> DMMFModel:
        fields: List[DMMFField] = []
        db_name: Optional[str] = None
        primary_key: Optional[List[str]] = None
        seen: Dict[str, int] = {}

        for line in block.body:
            if line.text.startswith("@@"):
                for name, args in self._attributes(line, line.text[1:]):
                    if name == "map":
                        db_name = _string_arg(args)
                    elif name == "id" and args:
                        fields_match = _FIELD_LIST_RE.search(args)
                        if fields_match:
                            primary_key = [
                                part.strip().split("(")[0]
                                for part in fields_match.group(1).split(",")
                                if part.strip()
                            ]
                continue

            match = _FIELD_RE.match(line.text)
            if match is None:
                raise SchemaCompilerError(
                    f"Invalid field definition in {block.keyword} '{block.name}': "
                    f"'{line.text}'",
                    line=line.number,
                )
            field_name: str = match.group("name")
            if field_name in seen:
                raise SchemaCompilerError(
                    f"Field '{field_name}' is already defined on "
                    f"{block.keyword} '{block.name}' (line {seen[field_name]})",
                    line=line.number,
                )
            seen[field_name] = line.number
            fields.append(
                self._compile_field(
                    block, line, match, model_names, enum_names, type_names
                )
            )

        if not fields:
            raise SchemaCompilerError(
                f"{block.keyword.capitalize()} '{block.name}' declares no fields",
                line=block.line,
            )
        id_fields: List[str] = [f.name for f in fields if f.is_id]
        if len(id_fields) > 1:
            raise SchemaCompilerError(
                f"{block.keyword.capitalize()} '{block.name}' has more than one "
                f"@id field: {id_fields}",
                line=block.line,
            )
        return DMMFModel(
            name=block.name, db_name=db_name, fields=fields, primary_key=primary_key
        )

    def _compile_field(
        self,
        block: _Block,
        line: _Line,
        match: re.Match[str],
        model_names: FrozenSet[str],
        enum_names: FrozenSet[str],
        type_names: FrozenSet[str],
    ) -> DMMFField:
        field_name: str = match.group("name")
        type_name: str = match.group("type")
        is_list: bool = match.group("list") is not None
        is_optional: bool = match.group("optional") is not None

        if is_list and is_optional:
            raise SchemaCompilerError(
                f"Field '{field_name}' on '{block.name}': optional lists are not supported",
                line=line.number,
            )
        if match.group("args") is not None and type_name != "Unsupported":
            raise SchemaCompilerError(
                f"Field '{field_name}' on '{block.name}': only Unsupported types "
                "take an argument",
                line=line.number,
            )

        relation_name: Optional[str] = None
        if type_name == "Unsupported":
            kind = "unsupported"
        elif type_name in SCALAR_TYPES:
            kind = "scalar"
        elif type_name in enum_names:
            kind = "enum"
        elif type_name in model_names:
            kind = "object"
            relation_name = implicit_relation_name(block.name, type_name)
        elif type_name in type_names:
            kind = "object"
        else:
            raise SchemaCompilerError(
                f"Type '{type_name}' of field '{field_name}' on '{block.name}' is "
                "neither a built-in type, nor refers to another model, "
                "composite type, or enum",
                line=line.number,
            )

        is_id = is_unique = has_default = is_updated_at = False
        db_name: Optional[str] = None
        for name, args in self._attributes(line, match.group("rest")):
            if name == "id":
                is_id = True
            elif name == "unique":
                is_unique = True
            elif name == "default":
                has_default = True
            elif name == "updatedAt":
                is_updated_at = True
            elif name == "map":
                db_name = _string_arg(args)
            elif name == "relation" and kind == "object" and type_name in model_names:
                explicit: Optional[str] = _string_arg(args)
                if explicit:
                    relation_name = explicit

        return DMMFField(
            name=field_name,
            kind=kind,
            type=type_name,
            is_list=is_list,
            is_required=not is_optional,
            is_unique=is_unique,
            is_id=is_id,
            has_default_value=has_default,
            is_updated_at=is_updated_at,
            relation_name=relation_name,
            db_name=db_name,
        )

    @staticmethod
    def _attributes(line: _Line, text: str) -> List[Tuple[str, Optional[str]]]:
        try:
            return split_attributes(text)
        except ValueError as exc:
            raise SchemaCompilerError(str(exc), line=line.number) from exc


__all__: List[str] = [
    "DMMFField",
    "DMMFModel",
    "DMMFEnumValue",
    "DMMFEnum",
    "DMMFDatamodel",
    "DMMFConfigBlock",
    "DMMFDocument",
    "SchemaCompiler",
    "PrismaSchemaCompiler",
    "SCALAR_TYPES",
    "strip_comment",
    "split_attributes",
    "implicit_relation_name",
]

logger.debug("prismapi.compiler loaded — %d public symbols.", len(__all__))
