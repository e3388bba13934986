# File: prismapi/templates.py
"""
prismapi - Code Template Engine
=================================
Pure-Python code generation engine.

This module transforms ``ParsedModel`` instances into Python source code
strings for the generated API package:
    1. Pydantic V2 validation schemas (base / create / update)
    2. Type aliases over those schemas
    3. Data-access functions over Prisma Client Python
    4. FastAPI request handlers
    5. Route tables (``APIRouter``)
    6. The Prisma client injection middleware
    7. Per-entity and root aggregation modules

**Performance contract:**
    - All string assembly uses ``List[str]`` + ``"\\n".join()`` pattern.
    - No ``str += str`` concatenation anywhere.
    - Template methods never touch the file system.

**Quality contract:**
    - Every generated file parses as Python 3 and ends with a newline.
    - Output is a pure function of the model, the schema and the config:
      regenerating an unchanged schema yields byte-identical text.
"""

from __future__ import annotations

import keyword
import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

from prismapi.client_path import ClientImport, client_import_for
from prismapi.config import GeneratorConfig
from prismapi.diagnostics import (
    MISSING_ENUM,
    MISSING_ENUM_NAME,
    OPTIONAL_ID,
    UNSUPPORTED_FIELD_TYPE,
    Diagnostics,
)
from prismapi.errors import UnsupportedFieldTypeWarning
from prismapi.models import FieldType, ParsedEnum, ParsedField, ParsedModel
from prismapi.names import EntityNames, build_entity_names
from prismapi.utils import build_import_block, to_plural

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("prismapi.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_INDENT: str = "    "

# Canonical field type → annotation.  ``enum`` and ``unsupported`` are
# resolved separately; ``relation`` fields are never rendered.
_SCALAR_ANNOTATIONS: Dict[FieldType, str] = {
    FieldType.STRING: "str",
    FieldType.NUMBER: "Union[int, float]",
    FieldType.BOOLEAN: "bool",
    FieldType.DATE: "datetime",
    FieldType.JSON: "Any",
}

_GERUNDS: Dict[str, str] = {
    "list": "listing",
    "create": "creating",
    "get": "getting",
    "update": "updating",
    "delete": "deleting",
}

DB_CONNECTION_ERROR: str = "Database connection error. Please try again later."

# Controller-local alias of the entity types module.
_TYPES_MODULE: str = "_types"

GENERATED_NOTICE: str = "Generated by prismapi. Do not edit by hand; changes are lost on regeneration."

# Relative file names of one entity package, in generation order.
ENTITY_FILES: Tuple[str, ...] = (
    "schema.py",
    "types.py",
    "service.py",
    "controller.py",
    "routes.py",
    "__init__.py",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _attribute_name(field_name: str) -> Tuple[str, Optional[str]]:
    """
    Python attribute for a schema field, plus the alias when they differ.

    Keywords and names in Pydantic's ``model_`` namespace get a trailing
    underscore and keep the declared name as alias.
    """
    if keyword.iskeyword(field_name) or field_name.startswith("model_"):
        return f"{field_name}_", field_name
    return field_name, None


def _render_field(
    attr: str, alias: Optional[str], annotation: str, optional: bool
) -> str:
    if optional:
        annotation = f"Optional[{annotation}]"
        if alias is not None:
            return f'{_INDENT}{attr}: {annotation} = Field(default=None, alias="{alias}")'
        return f"{_INDENT}{attr}: {annotation} = None"
    if alias is not None:
        return f'{_INDENT}{attr}: {annotation} = Field(alias="{alias}")'
    return f"{_INDENT}{attr}: {annotation}"


# ---------------------------------------------------------------------------
# TemplateGenerator class
# ---------------------------------------------------------------------------


class TemplateGenerator:
    """
    Stateless code-generation engine.

    Accepts ``ParsedModel`` instances and produces Python source code
    strings.  Each ``generate_*`` method returns a complete, self-contained
    file content string; non-fatal findings are recorded in the
    ``Diagnostics`` passed in.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        client_import: Optional[ClientImport] = None,
    ) -> None:
        self._config: GeneratorConfig = config
        self._client: ClientImport = client_import or client_import_for(None)
        self._indent: str = _INDENT
        self._double_indent: str = _INDENT * 2
        logger.debug(
            "TemplateGenerator initialised (client=%s).", self._client.client_module
        )

    # -- Shared pieces ------------------------------------------------------

    def _header(self, title: str) -> List[str]:
        if not self._config.generate_docstrings:
            return []
        return ['"""', title, "", GENERATED_NOTICE, '"""', ""]

    @staticmethod
    def _finish(lines: List[str]) -> str:
        while lines and lines[-1] == "":
            lines.pop()
        return "\n".join(lines) + "\n"

    def _docstring(self, text: str, indent: str = _INDENT) -> List[str]:
        if not self._config.generate_docstrings:
            return []
        return [f'{indent}"""{text}"""']

    # ===================================================================
    # 1. Validation schemas
    # ===================================================================

    def _field_annotation(
        self,
        model: ParsedModel,
        field: ParsedField,
        enum_names: Set[str],
        imports: Dict[str, Set[str]],
        diagnostics: Diagnostics,
    ) -> str:
        """Annotation for one non-relation field; records any diagnostics."""
        field_type: FieldType = field.type
        qualified: str = f"{model.name}.{field.name}"

        if field_type == FieldType.ENUM:
            if not field.enum_name:
                diagnostics.add_warning(
                    MISSING_ENUM_NAME,
                    f"Enum field {qualified} has no enum name; rendered as str.",
                    {"model": model.name, "field": field.name},
                )
                inner: str = "str"
            elif field.enum_name not in enum_names:
                diagnostics.add_warning(
                    MISSING_ENUM,
                    f"Field {qualified} refers to an enum {field.enum_name} "
                    "not found in the schema's enums list; rendered as str.",
                    {"model": model.name, "field": field.name, "enum": field.enum_name},
                )
                inner = "str"
            else:
                imports.setdefault(self._client.enums_module, set()).add(field.enum_name)
                inner = field.enum_name
        elif field_type == FieldType.UNSUPPORTED:
            # reported once per field, whether lowering or rendering sees it first
            if not diagnostics.has(UNSUPPORTED_FIELD_TYPE, model=model.name, field=field.name):
                diagnostics.add_warning(
                    UNSUPPORTED_FIELD_TYPE,
                    f"Field {qualified} has an unsupported type; rendered as Any.",
                    {"model": model.name, "field": field.name},
                    category=UnsupportedFieldTypeWarning,
                )
            imports.setdefault("typing", set()).add("Any")
            inner = "Any"
        elif field_type == FieldType.STRING and "email" in field.name.lower():
            imports.setdefault("pydantic", set()).add("EmailStr")
            inner = "EmailStr"
        elif field_type == FieldType.NUMBER and field.is_id:
            inner = "int"
        else:
            inner = _SCALAR_ANNOTATIONS[field_type]
            if field_type == FieldType.NUMBER:
                imports.setdefault("typing", set()).add("Union")
            elif field_type == FieldType.DATE:
                imports.setdefault("datetime", set()).add("datetime")
            elif field_type == FieldType.JSON:
                imports.setdefault("typing", set()).add("Any")

        if field.is_list:
            imports.setdefault("typing", set()).add("List")
            return f"List[{inner}]"
        return inner

    def generate_schema(
        self,
        model: ParsedModel,
        enums: Sequence[ParsedEnum],
        diagnostics: Diagnostics,
        names: Optional[EntityNames] = None,
    ) -> str:
        """
        Generate the Pydantic schemas of one model:
        - {Model}Schema         every scalar field (response shape)
        - Create{Model}Schema   without identifier, defaulted and updatedAt fields
        - Update{Model}Schema   all fields optional, without identifier and updatedAt
        """
        names = names or build_entity_names(model)
        enum_names: Set[str] = {e.name for e in enums}
        imports: Dict[str, Set[str]] = {"pydantic": {"BaseModel", "ConfigDict"}}

        id_field: Optional[ParsedField] = model.id_field
        if id_field is not None and not id_field.is_required:
            diagnostics.add_warning(
                OPTIONAL_ID,
                f"Identifier {model.name}.{id_field.name} is optional; "
                "it is treated as required.",
                {"model": model.name, "field": id_field.name},
            )

        # (attribute, alias, annotation, field) for every rendered field
        rendered: List[Tuple[str, Optional[str], str, ParsedField]] = []
        needs_field: bool = False
        for field in model.fields:
            if field.is_relation:
                continue
            attr, alias = _attribute_name(field.name)
            needs_field = needs_field or alias is not None
            annotation: str = self._field_annotation(
                model, field, enum_names, imports, diagnostics
            )
            rendered.append((attr, alias, annotation, field))

        base_has_optional: bool = any(
            not f.is_required and not f.is_id for _, _, _, f in rendered
        )
        update_has_fields: bool = any(
            not f.is_id and not f.is_updated_at for _, _, _, f in rendered
        )
        has_optional: bool = base_has_optional or update_has_fields
        if has_optional:
            imports.setdefault("typing", set()).add("Optional")
        if needs_field:
            imports["pydantic"].add("Field")

        lines: List[str] = self._header(f"Validation schemas for {names.pascal}.")
        lines.append(build_import_block(imports))
        lines.append("")
        lines.append("")

        config_line: str = (
            f"{self._indent}model_config = ConfigDict("
            "from_attributes=True, populate_by_name=True, protected_namespaces=())"
        )

        # --- Base schema ---
        lines.append(f"class {names.schema_class}(BaseModel):")
        lines.extend(self._docstring(f"{names.pascal} as returned by the API."))
        lines.append(config_line)
        lines.append("")
        for attr, alias, annotation, field in rendered:
            optional: bool = not field.is_required and not field.is_id
            lines.append(_render_field(attr, alias, annotation, optional))
        lines.append("")
        lines.append("")

        # --- Create schema ---
        lines.append(f"class {names.create_schema_class}(BaseModel):")
        lines.extend(self._docstring(f"Payload for creating a {names.pascal}."))
        lines.append(config_line)
        lines.append("")
        for attr, alias, annotation, field in rendered:
            if field.is_id or field.has_default_value or field.is_updated_at:
                continue
            lines.append(_render_field(attr, alias, annotation, not field.is_required))
        lines.append("")
        lines.append("")

        # --- Update schema ---
        lines.append(f"class {names.update_schema_class}(BaseModel):")
        lines.extend(
            self._docstring(f"Payload for updating a {names.pascal}. All fields optional.")
        )
        lines.append(config_line)
        lines.append("")
        for attr, alias, annotation, field in rendered:
            if field.is_id or field.is_updated_at:
                continue
            lines.append(_render_field(attr, alias, annotation, True))

        content: str = self._finish(lines)
        logger.debug(
            "Generated schemas for '%s': %d lines.", model.name, content.count("\n")
        )
        return content

    # ===================================================================
    # 2. Type aliases
    # ===================================================================

    def generate_types(self, model: ParsedModel, names: EntityNames) -> str:
        """Generate ``TypeAlias`` declarations over the schema classes."""
        lines: List[str] = self._header(f"Type aliases for {names.pascal}.")
        lines.append("import typing")
        lines.append("")
        lines.append(
            f"from .schema import {', '.join(sorted([names.create_schema_class, names.schema_class, names.update_schema_class]))}"
        )
        lines.append("")
        lines.append(f"{names.type_alias}: typing.TypeAlias = {names.schema_class}")
        lines.append(f"{names.create_input_alias}: typing.TypeAlias = {names.create_schema_class}")
        lines.append(f"{names.update_input_alias}: typing.TypeAlias = {names.update_schema_class}")
        lines.append("")
        lines.append("__all__ = [")
        for alias in (names.type_alias, names.create_input_alias, names.update_input_alias):
            lines.append(f'{self._indent}"{alias}",')
        lines.append("]")
        return self._finish(lines)

    # ===================================================================
    # 3. Data access
    # ===================================================================

    def generate_service(self, model: ParsedModel, names: EntityNames) -> str:
        """
        Generate the data-access functions of one model.

        ``find_many`` and ``create`` always exist; ``find_by_id``, ``update``
        and ``delete`` only when the model has an identifier.
        """
        ind, ind2 = self._indent, self._double_indent
        id_field: Optional[ParsedField] = model.id_field
        record: str = f"{names.pascal}Record"
        pascal: str = names.pascal

        imports: Dict[str, Set[str]] = {
            "fastapi": {"Request"},
            "typing": {"List"},
            self._client.client_module: {"Prisma"},
            self._client.models_module: {f"{model.name} as {record}"},
        }
        if id_field is not None:
            imports["typing"].add("Optional")
            imports[self._client.errors_module] = {"RecordNotFoundError"}

        lines: List[str] = self._header(f"Data access for {pascal}.")
        lines.append("import logging")
        lines.append("")
        lines.append(build_import_block(imports))
        lines.append("")
        lines.append("from ..middleware import get_prisma")
        lines.append(
            f"from .types import {names.create_input_alias}, {names.update_input_alias}"
            if id_field is not None
            else f"from .types import {names.create_input_alias}"
        )
        lines.append("")
        lines.append("logger = logging.getLogger(__name__)")
        lines.append("")
        lines.append("")

        # --- Client lookup ---
        lines.append("def get_client(request: Request) -> Prisma:")
        lines.extend(
            self._docstring(
                "Return the request's Prisma client; raises PrismaClientNotFoundError "
                "when the middleware is not installed."
            )
        )
        lines.append(f"{ind}return get_prisma(request)")
        lines.append("")
        lines.append("")

        accessor: str = f"client.{names.accessor}"

        # --- Find many ---
        lines.append(f"async def {names.find_many_fn}(request: Request) -> List[{record}]:")
        lines.extend(self._docstring(f"Fetch every {pascal} record."))
        lines.append(f"{ind}client = get_client(request)")
        lines.append(f"{ind}try:")
        lines.append(f"{ind2}return await {accessor}.find_many()")
        lines.append(f"{ind}except Exception as exc:")
        lines.append(f'{ind2}logger.error("Error fetching {pascal} records: %s", exc)')
        lines.append(
            f'{ind2}raise RuntimeError("Could not fetch {to_plural(pascal)}") from exc'
        )
        lines.append("")
        lines.append("")

        # --- Create ---
        lines.append(
            f"async def {names.create_fn}(request: Request, data: {names.create_input_alias}) -> {record}:"
        )
        lines.extend(self._docstring(f"Create a {pascal} record."))
        lines.append(f"{ind}client = get_client(request)")
        lines.append(f"{ind}try:")
        lines.append(
            f"{ind2}return await {accessor}.create("
            "data=data.model_dump(exclude_unset=True, by_alias=True))"
        )
        lines.append(f"{ind}except Exception as exc:")
        lines.append(f'{ind2}logger.error("Error creating {pascal}: %s", exc)')
        lines.append(f'{ind2}raise RuntimeError("Could not create {pascal}") from exc')

        if id_field is not None:
            where: str = f'where={{"{id_field.name}": id}}'
            id_type: str = names.id_type

            # --- Find by id ---
            lines.append("")
            lines.append("")
            lines.append(
                f"async def {names.find_by_id_fn}(request: Request, id: {id_type}) -> Optional[{record}]:"
            )
            lines.extend(
                self._docstring(f"Fetch one {pascal} by identifier, or None when absent.")
            )
            lines.append(f"{ind}client = get_client(request)")
            lines.append(f"{ind}try:")
            lines.append(f"{ind2}return await {accessor}.find_unique({where})")
            lines.append(f"{ind}except Exception as exc:")
            lines.append(f'{ind2}logger.error("Error fetching {pascal} %s: %s", id, exc)')
            lines.append(
                f'{ind2}raise RuntimeError("Could not fetch {pascal} by ID") from exc'
            )

            # --- Update / delete ---
            for fn, verb, args, call in (
                (
                    names.update_fn,
                    "update",
                    f"id: {id_type}, data: {names.update_input_alias}",
                    f"{accessor}.update({where}, "
                    "data=data.model_dump(exclude_unset=True, by_alias=True))",
                ),
                (names.delete_fn, "delete", f"id: {id_type}", f"{accessor}.delete({where})"),
            ):
                lines.append("")
                lines.append("")
                lines.append(
                    f"async def {fn}(request: Request, {args}) -> Optional[{record}]:"
                )
                lines.extend(
                    self._docstring(
                        f"{verb.capitalize()} one {pascal}; None or RecordNotFoundError "
                        "when it does not exist."
                    )
                )
                lines.append(f"{ind}client = get_client(request)")
                lines.append(f"{ind}try:")
                lines.append(f"{ind2}return await {call}")
                lines.append(f"{ind}except RecordNotFoundError:")
                lines.append(f"{ind2}raise")
                lines.append(f"{ind}except Exception as exc:")
                lines.append(
                    f'{ind2}logger.error("Error {_GERUNDS[verb]} {pascal} %s: %s", id, exc)'
                )
                lines.append(
                    f'{ind2}raise RuntimeError("Could not {verb} {pascal}") from exc'
                )

        return self._finish(lines)

    # ===================================================================
    # 4. Request handlers
    # ===================================================================

    def _handler(
        self,
        names: EntityNames,
        handler: str,
        service_fn: str,
        verb: str,
        params: str,
        call_args: str,
        return_type: str,
        with_id: bool,
        not_found_on_none: bool,
    ) -> List[str]:
        ind, ind2 = self._indent, self._double_indent
        pascal: str = names.pascal
        log_id: str = " %s" if with_id else ""
        log_args: str = ", id" if with_id else ""
        gerund: str = _GERUNDS[verb]

        lines: List[str] = [f"async def {handler}({params}) -> {return_type}:"]
        lines.extend(self._docstring(f"Handle {verb} {pascal}."))
        lines.append(f"{ind}try:")
        lines.append(f"{ind2}result = await service.{service_fn}({call_args})")
        if with_id:
            lines.append(f"{ind}except RecordNotFoundError as exc:")
            lines.append(
                f'{ind2}logger.error("Error {gerund} {pascal}{log_id}: record not found"{log_args})'
            )
            lines.append(
                f'{ind2}raise HTTPException(status_code=404, detail="{pascal} not found") from exc'
            )
        lines.append(f"{ind}except PrismaClientNotFoundError as exc:")
        lines.append(f'{ind2}logger.error("%s", exc)')
        lines.append(
            f"{ind2}raise HTTPException(status_code=500, detail=DB_CONNECTION_ERROR) from exc"
        )
        lines.append(f"{ind}except Exception as exc:")
        lines.append(
            f'{ind2}logger.error("Error {gerund} {pascal}{log_id}: %s"{log_args}, exc)'
        )
        lines.append(
            f'{ind2}raise HTTPException(status_code=500, detail="Failed to {verb} {pascal}") from exc'
        )
        if not_found_on_none:
            lines.append(f"{ind}if result is None:")
            lines.append(
                f'{ind2}raise HTTPException(status_code=404, detail="{pascal} not found")'
            )
        lines.append(f"{ind}return result")
        return lines

    def generate_controller(self, model: ParsedModel, names: EntityNames) -> str:
        """Generate FastAPI handlers mirroring the service functions."""
        has_id: bool = names.has_id
        id_type: str = names.id_type

        imports: Dict[str, Set[str]] = {
            "fastapi": {"HTTPException", "Request"},
            "typing": {"List"},
        }
        if has_id:
            imports[self._client.errors_module] = {"RecordNotFoundError"}
        response: str = f"{_TYPES_MODULE}.{names.type_alias}"

        lines: List[str] = self._header(f"Request handlers for {names.pascal}.")
        lines.append("import logging")
        lines.append("")
        lines.append(build_import_block(imports))
        lines.append("")
        lines.append("from ..middleware import PrismaClientNotFoundError")
        lines.append("from . import service")
        lines.append(f"from . import types as {_TYPES_MODULE}")
        lines.append("")
        lines.append("logger = logging.getLogger(__name__)")
        lines.append("")
        lines.append(f'DB_CONNECTION_ERROR = "{DB_CONNECTION_ERROR}"')
        lines.append("")
        lines.append("")

        lines.extend(
            self._handler(
                names,
                names.list_handler,
                names.find_many_fn,
                "list",
                "request: Request",
                "request",
                f"List[{response}]",
                with_id=False,
                not_found_on_none=False,
            )
        )
        lines.append("")
        lines.append("")
        lines.extend(
            self._handler(
                names,
                names.create_handler,
                names.create_fn,
                "create",
                f"request: Request, data: {_TYPES_MODULE}.{names.create_input_alias}",
                "request, data",
                response,
                with_id=False,
                not_found_on_none=False,
            )
        )

        if has_id:
            for handler, service_fn, verb, params, call_args in (
                (
                    names.get_by_id_handler,
                    names.find_by_id_fn,
                    "get",
                    f"request: Request, id: {id_type}",
                    "request, id",
                ),
                (
                    names.update_handler,
                    names.update_fn,
                    "update",
                    f"request: Request, id: {id_type}, data: {_TYPES_MODULE}.{names.update_input_alias}",
                    "request, id, data",
                ),
                (
                    names.delete_handler,
                    names.delete_fn,
                    "delete",
                    f"request: Request, id: {id_type}",
                    "request, id",
                ),
            ):
                lines.append("")
                lines.append("")
                lines.extend(
                    self._handler(
                        names,
                        handler,
                        service_fn,
                        verb,
                        params,
                        call_args,
                        response,
                        with_id=True,
                        not_found_on_none=True,
                    )
                )

        return self._finish(lines)

    # ===================================================================
    # 5. Route table
    # ===================================================================

    def _route(
        self,
        router: str,
        path: str,
        handler: str,
        method: str,
        response_model: str,
        summary: str,
        status_code: Optional[int] = None,
        not_found: Optional[str] = None,
    ) -> List[str]:
        ind: str = self._indent
        lines: List[str] = [
            f"{router}.add_api_route(",
            f'{ind}"{path}",',
            f"{ind}controller.{handler},",
            f'{ind}methods=["{method}"],',
            f"{ind}response_model={response_model},",
        ]
        if status_code is not None:
            lines.append(f"{ind}status_code={status_code},")
        lines.append(f'{ind}summary="{summary}",')
        if not_found is not None:
            lines.append(f'{ind}responses={{404: {{"description": "{not_found}"}}}},')
        lines.append(")")
        return lines

    def generate_routes(self, model: ParsedModel, names: EntityNames) -> str:
        """Generate the entity's ``APIRouter`` and bind every handler to it."""
        router: str = names.router_var
        lower: str = model.name.lower()
        plural_lower: str = to_plural(lower)
        not_found: str = f"{names.pascal} not found"

        lines: List[str] = self._header(f"Routes for {names.pascal}.")
        lines.append("from typing import List")
        lines.append("")
        lines.append("from fastapi import APIRouter")
        lines.append("")
        lines.append("from . import controller")
        lines.append(f"from .schema import {names.schema_class}")
        lines.append("")
        lines.append(f'{router} = APIRouter(tags=["{names.pascal}"])')
        lines.append("")
        lines.extend(
            self._route(
                router,
                "/",
                names.list_handler,
                "GET",
                f"List[{names.schema_class}]",
                f"List all {plural_lower}",
            )
        )
        lines.extend(
            self._route(
                router,
                "/",
                names.create_handler,
                "POST",
                names.schema_class,
                f"Create a new {lower}",
                status_code=201,
            )
        )
        if names.has_id:
            for handler, method, summary in (
                (names.get_by_id_handler, "GET", f"Get a {lower} by ID"),
                (names.update_handler, "PATCH", f"Update a {lower}"),
                (names.delete_handler, "DELETE", f"Delete a {lower}"),
            ):
                lines.extend(
                    self._route(
                        router,
                        "/{id}",
                        handler,
                        method,
                        names.schema_class,
                        summary,
                        not_found=not_found,
                    )
                )
        return self._finish(lines)

    # ===================================================================
    # 6. Middleware
    # ===================================================================

    def generate_client_middleware(self) -> str:
        """Generate the middleware that puts a shared Prisma client on each request."""
        ind, ind2 = self._indent, self._double_indent
        lines: List[str] = self._header("Prisma client injection middleware.")
        lines.append("import logging")
        lines.append("from typing import Awaitable, Callable, Optional")
        lines.append("")
        lines.append("from fastapi import FastAPI, Request, Response")
        lines.append("")
        lines.append(f"from {self._client.client_module} import Prisma")
        lines.append("")
        lines.append("logger = logging.getLogger(__name__)")
        lines.append("")
        lines.append("_client: Optional[Prisma] = None")
        lines.append("")
        lines.append("")
        lines.append("class PrismaClientNotFoundError(RuntimeError):")
        lines.extend(self._docstring("No Prisma client is attached to the request."))
        lines.append("")
        lines.append(f"{ind}def __init__(self) -> None:")
        lines.append(f"{ind2}super().__init__(")
        lines.append(
            f'{ind2}{ind}"Prisma client not found in request state. "'
        )
        lines.append(f'{ind2}{ind}"Make sure to use the Prisma middleware."')
        lines.append(f"{ind2})")
        lines.append("")
        lines.append("")
        lines.append("def get_client_instance() -> Prisma:")
        lines.extend(self._docstring("Return the process-wide client, creating it on first use."))
        lines.append(f"{ind}global _client")
        lines.append(f"{ind}if _client is None:")
        lines.append(f"{ind2}_client = Prisma()")
        lines.append(f"{ind}return _client")
        lines.append("")
        lines.append("")
        lines.append(
            "def create_prisma_middleware(app: FastAPI, client: Optional[Prisma] = None) -> None:"
        )
        lines.extend(
            self._docstring(
                "Install an HTTP middleware exposing *client* (or the shared one) "
                "as ``request.state.prisma``."
            )
        )
        lines.append(f"{ind}global _client")
        lines.append(f"{ind}if client is not None:")
        lines.append(f"{ind2}_client = client")
        lines.append(f"{ind}prisma = get_client_instance()")
        lines.append("")
        lines.append(f'{ind}@app.middleware("http")')
        lines.append(f"{ind}async def prisma_middleware(")
        lines.append(
            f"{ind2}request: Request, call_next: Callable[[Request], Awaitable[Response]]"
        )
        lines.append(f"{ind}) -> Response:")
        lines.append(f"{ind2}if not prisma.is_connected():")
        lines.append(f"{ind2}{ind}await prisma.connect()")
        lines.append(f"{ind2}request.state.prisma = prisma")
        lines.append(f"{ind2}return await call_next(request)")
        lines.append("")
        lines.append("")
        lines.append("def get_prisma(request: Request) -> Prisma:")
        lines.extend(self._docstring("Return the client attached by the middleware."))
        lines.append(f'{ind}client = getattr(request.state, "prisma", None)')
        lines.append(f"{ind}if client is None:")
        lines.append(f"{ind2}raise PrismaClientNotFoundError()")
        lines.append(f"{ind}return client")
        lines.append("")
        lines.append("")
        lines.append("async def connect_prisma() -> Prisma:")
        lines.extend(self._docstring("Connect the shared client, e.g. on application startup."))
        lines.append(f"{ind}client = get_client_instance()")
        lines.append(f"{ind}if not client.is_connected():")
        lines.append(f"{ind2}await client.connect()")
        lines.append(f"{ind}return client")
        lines.append("")
        lines.append("")
        lines.append("async def disconnect_prisma() -> None:")
        lines.extend(self._docstring("Disconnect and drop the shared client."))
        lines.append(f"{ind}global _client")
        lines.append(f"{ind}if _client is not None and _client.is_connected():")
        lines.append(f"{ind2}await _client.disconnect()")
        lines.append(f'{ind2}logger.info("Prisma client disconnected")')
        lines.append(f"{ind}_client = None")
        return self._finish(lines)

    def generate_middleware_index(self) -> str:
        exported: List[str] = [
            "PrismaClientNotFoundError",
            "connect_prisma",
            "create_prisma_middleware",
            "disconnect_prisma",
            "get_prisma",
        ]
        lines: List[str] = self._header("Middleware package.")
        lines.append("from .client import (")
        for name in exported:
            lines.append(f"{self._indent}{name},")
        lines.append(")")
        lines.append("")
        lines.append("__all__ = [")
        for name in exported:
            lines.append(f'{self._indent}"{name}",')
        lines.append("]")
        return self._finish(lines)

    # ===================================================================
    # 7. Aggregation
    # ===================================================================

    def generate_model_index(self, model: ParsedModel, names: EntityNames) -> str:
        """Per-entity ``__init__.py`` re-exporting the router and the type aliases."""
        lines: List[str] = self._header(f"{names.pascal} API package.")
        lines.append(f"from . import types as {names.types_alias}")
        lines.append(f"from .routes import {names.router_var}")
        lines.append("")
        lines.append(f'__all__ = ["{names.router_var}", "{names.types_alias}"]')
        return self._finish(lines)

    def generate_root_index(self, models: Sequence[ParsedModel]) -> str:
        """
        Root ``__init__.py``: imports every entity router in declaration
        order and exposes them as ``routes`` keyed by camel-case name.
        """
        ind: str = self._indent
        all_names: List[EntityNames] = [build_entity_names(m) for m in models]

        lines: List[str] = self._header("Generated API routes.")
        lines.append("from typing import Dict")
        lines.append("")
        lines.append("from fastapi import APIRouter, FastAPI")
        lines.append("")
        for names in all_names:
            lines.append(f"from .{names.package} import {names.router_var}")
        if all_names:
            lines.append("")
        lines.append("routes: Dict[str, APIRouter] = {")
        for names in all_names:
            lines.append(f'{ind}"{names.camel}": {names.router_var},')
        lines.append("}")
        lines.append("")
        lines.append("")
        lines.append('def include_all_routes(app: FastAPI, prefix: str = "") -> None:')
        lines.extend(self._docstring("Mount every entity router under ``<prefix>/<name>``."))
        lines.append(f"{ind}for name, router in routes.items():")
        lines.append(f'{ind}{ind}app.include_router(router, prefix=f"{{prefix}}/{{name}}")')
        lines.append("")
        lines.append("")
        lines.append("__all__ = [")
        for name in ["include_all_routes", "routes"] + [n.router_var for n in all_names]:
            lines.append(f'{ind}"{name}",')
        lines.append("]")
        return self._finish(lines)

    # ===================================================================
    # 8. Aggregate generation (all files for one model)
    # ===================================================================

    def generate_all_for_model(
        self,
        model: ParsedModel,
        enums: Sequence[ParsedEnum],
        diagnostics: Diagnostics,
    ) -> Dict[str, str]:
        """
        Generate every file of one entity package.

        Returns a dict of relative_path → file_content in the order
        schema, types, service, controller, routes, index.
        """
        names: EntityNames = build_entity_names(model)
        contents: Tuple[str, ...] = (
            self.generate_schema(model, enums, diagnostics, names),
            self.generate_types(model, names),
            self.generate_service(model, names),
            self.generate_controller(model, names),
            self.generate_routes(model, names),
            self.generate_model_index(model, names),
        )
        result: Dict[str, str] = {
            f"{names.package}/{file_name}": content
            for file_name, content in zip(ENTITY_FILES, contents)
        }
        logger.debug(
            "Generated all files for model '%s': %d files.", model.name, len(result)
        )
        return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "TemplateGenerator",
    "ENTITY_FILES",
    "DB_CONNECTION_ERROR",
]

logger.debug("prismapi.templates loaded.")
