# File: prismapi/models.py
"""
prismapi - Intermediate Representation
========================================
Pydantic V2 models describing a parsed Prisma schema.  These models are the
single source of truth for the pipeline:
Schema Location → Compilation → Lowering → Code Generation → Export.

Every IR model is frozen: once the parser has produced a ``ParsedSchema`` no
later stage can mutate it.  Relations are stored by *name* only; resolving a
relation target goes through ``ParsedSchema.related_model`` so the IR never
contains object cycles.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("prismapi.models")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class FieldType(str, Enum):
    """Canonical field type every Prisma type is collapsed onto."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    JSON = "json"
    ENUM = "enum"
    RELATION = "relation"
    UNSUPPORTED = "unsupported"


class FieldKind(str, Enum):
    """How a field is stored.  The compiler's ``unsupported`` kind lowers to ``scalar``."""

    SCALAR = "scalar"
    ENUM = "enum"
    OBJECT = "object"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_IR_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    frozen=True,
    extra="forbid",
)


def _camel_alias(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------


class ParsedRelationInfo(BaseModel):
    """Target of a relation field, by name."""

    model_config = ConfigDict(**_IR_CONFIG, alias_generator=_camel_alias)

    related_model_name: str = Field(..., min_length=1)
    relation_name: Optional[str] = Field(
        default=None,
        description="Relation name; None when the compiler reports none.",
    )


class ParsedField(BaseModel):
    """
    A single field of a model.

    ``is_unique`` is False for the identifier field: the compiler reports
    identity and uniqueness separately.
    """

    model_config = ConfigDict(**_IR_CONFIG, alias_generator=_camel_alias)

    name: str = Field(..., min_length=1)
    type: FieldType
    kind: FieldKind
    enum_name: Optional[str] = None
    is_list: bool = False
    is_required: bool = True
    is_unique: bool = False
    is_id: bool = False
    has_default_value: bool = False
    is_updated_at: bool = False
    relation_info: Optional[ParsedRelationInfo] = None

    @model_validator(mode="after")
    def _check_kind_consistency(self) -> "ParsedField":
        if self.kind == FieldKind.OBJECT:
            if self.type != FieldType.RELATION:
                raise ValueError(
                    f"Field '{self.name}' is an object field but has type "
                    f"'{self.type.value}' instead of 'relation'."
                )
            if self.relation_info is None:
                raise ValueError(
                    f"Field '{self.name}' is an object field without relation info."
                )
        if self.kind == FieldKind.ENUM and not self.enum_name:
            raise ValueError(f"Enum field '{self.name}' has no enum_name.")
        return self

    @property
    def is_relation(self) -> bool:
        return self.kind == FieldKind.OBJECT

    def __repr__(self) -> str:
        flags: List[str] = []
        if self.is_id:
            flags.append("id")
        if self.is_list:
            flags.append("list")
        if not self.is_required:
            flags.append("optional")
        suffix: str = f" [{', '.join(flags)}]" if flags else ""
        return f"<Field {self.name}: {self.type.value}{suffix}>"


# ---------------------------------------------------------------------------
# Models & enums
# ---------------------------------------------------------------------------


class ParsedModel(BaseModel):
    """One persisted entity."""

    model_config = ConfigDict(**_IR_CONFIG, alias_generator=_camel_alias)

    name: str = Field(..., min_length=1)
    db_name: Optional[str] = None
    fields: List[ParsedField] = Field(..., min_length=1)

    @field_validator("fields")
    @classmethod
    def _unique_field_names(cls, v: List[ParsedField]) -> List[ParsedField]:
        names: List[str] = [f.name for f in v]
        if len(names) != len(set(names)):
            dupes: List[str] = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"Duplicate field names: {dupes}")
        return v

    @field_validator("fields")
    @classmethod
    def _at_most_one_id(cls, v: List[ParsedField]) -> List[ParsedField]:
        ids: List[str] = [f.name for f in v if f.is_id]
        if len(ids) > 1:
            raise ValueError(f"More than one identifier field: {ids}")
        return v

    @property
    def id_field(self) -> Optional[ParsedField]:
        """The identifier field, if the model declares one."""
        for f in self.fields:
            if f.is_id:
                return f
        return None

    @property
    def scalar_fields(self) -> List[ParsedField]:
        return [f for f in self.fields if not f.is_relation]

    def __repr__(self) -> str:
        return f"<Model {self.name} ({len(self.fields)} fields)>"


class ParsedEnum(BaseModel):
    """A declared enumeration."""

    model_config = _IR_CONFIG

    name: str = Field(..., min_length=1)
    values: List[str] = Field(..., min_length=1)

    @field_validator("values")
    @classmethod
    def _unique_values(cls, v: List[str]) -> List[str]:
        if len(v) != len(set(v)):
            dupes: List[str] = [x for x in v if v.count(x) > 1]
            raise ValueError(f"Duplicate enum values detected: {dupes}")
        return v


# ---------------------------------------------------------------------------
# Schema: top-level container
# ---------------------------------------------------------------------------


class ParsedSchema(BaseModel):
    """
    The root model: every model and enum of the schema, in declaration order.

    Invariant: ``_model_map`` and ``_enum_map`` are lookup caches built once
    from ``models`` / ``enums`` upon construction.
    """

    model_config = _IR_CONFIG

    models: List[ParsedModel] = Field(default_factory=list)
    enums: List[ParsedEnum] = Field(default_factory=list)

    _model_map: Dict[str, ParsedModel] = PrivateAttr(default_factory=dict)
    _enum_map: Dict[str, ParsedEnum] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _validate_unique_names(self) -> "ParsedSchema":
        for label, names in (
            ("model", [m.name for m in self.models]),
            ("enum", [e.name for e in self.enums]),
        ):
            if len(names) != len(set(names)):
                dupes: List[str] = sorted({n for n in names if names.count(n) > 1})
                raise ValueError(f"Duplicate {label} names: {dupes}")
        return self

    def model_post_init(self, __context: Any) -> None:
        self._model_map = {m.name: m for m in self.models}
        self._enum_map = {e.name: e for e in self.enums}

    def get_model(self, name: str) -> Optional[ParsedModel]:
        """O(1) model lookup."""
        return self._model_map.get(name)

    def get_enum(self, name: str) -> Optional[ParsedEnum]:
        """O(1) enum lookup."""
        return self._enum_map.get(name)

    def related_model(self, field: ParsedField) -> Optional[ParsedModel]:
        """Resolve the target of a relation field, or None when undeclared."""
        if field.relation_info is None:
            return None
        return self.get_model(field.relation_info.related_model_name)

    @property
    def model_names(self) -> List[str]:
        return [m.name for m in self.models]

    @property
    def enum_names(self) -> List[str]:
        return [e.name for e in self.enums]

    def __repr__(self) -> str:
        return f"<Schema {len(self.models)} models, {len(self.enums)} enums>"


__all__: List[str] = [
    "FieldType",
    "FieldKind",
    "ParsedRelationInfo",
    "ParsedField",
    "ParsedModel",
    "ParsedEnum",
    "ParsedSchema",
]

logger.debug("prismapi.models loaded — %d public symbols.", len(__all__))
