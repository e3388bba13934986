# File: prismapi/names.py
"""
prismapi - Entity Naming
==========================
All identifiers emitted for one model, derived once from its declared name
and handed to every template generator.  Templates never re-derive names
themselves, so the schema, service, controller, routes and index modules of
an entity always agree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from prismapi.models import FieldType, ParsedModel
from prismapi.utils import (
    safe_identifier,
    to_camel_case,
    to_pascal_case,
    to_plural,
    to_snake_case,
)

logger: logging.Logger = logging.getLogger("prismapi.names")

# Top-level output packages that are not entities.
_RESERVED_PACKAGES: frozenset = frozenset({"middleware"})


def _package_name(camel: str) -> str:
    package: str = safe_identifier(camel)
    return f"{package}_" if package in _RESERVED_PACKAGES else package


@dataclass(frozen=True, slots=True)
class EntityNames:
    pascal: str
    camel: str  # key of the root ``routes`` dict
    package: str  # entity package directory and module name
    snake: str
    plural: str
    accessor: str  # attribute of the Prisma client, e.g. ``client.logentry``

    # Pydantic classes (schema.py)
    schema_class: str
    create_schema_class: str
    update_schema_class: str

    # Type aliases (types.py)
    type_alias: str
    create_input_alias: str
    update_input_alias: str

    # Data-access functions (service.py)
    find_many_fn: str
    create_fn: str
    find_by_id_fn: str
    update_fn: str
    delete_fn: str

    # Request handlers (controller.py)
    list_handler: str
    create_handler: str
    get_by_id_handler: str
    update_handler: str
    delete_handler: str

    # Aggregation
    router_var: str
    types_alias: str

    has_id: bool
    id_type: str  # "int" | "str"


def build_entity_names(model: ParsedModel) -> EntityNames:
    """Collect every identifier the generated code uses for *model*."""
    pascal: str = to_pascal_case(model.name)
    camel: str = to_camel_case(model.name)
    snake: str = to_snake_case(model.name)

    id_field = model.id_field
    id_type: str = "int" if id_field is not None and id_field.type == FieldType.NUMBER else "str"

    names = EntityNames(
        pascal=pascal,
        camel=camel,
        package=_package_name(camel),
        snake=snake,
        plural=to_plural(pascal),
        accessor=model.name.lower(),
        schema_class=f"{pascal}Schema",
        create_schema_class=f"Create{pascal}Schema",
        update_schema_class=f"Update{pascal}Schema",
        type_alias=safe_identifier(pascal),
        create_input_alias=f"Create{pascal}Input",
        update_input_alias=f"Update{pascal}Input",
        find_many_fn=f"find_many_{snake}",
        create_fn=f"create_{snake}",
        find_by_id_fn=f"find_{snake}_by_id",
        update_fn=f"update_{snake}",
        delete_fn=f"delete_{snake}",
        list_handler=f"list_{snake}",
        create_handler=f"create_{snake}",
        get_by_id_handler=f"get_{snake}_by_id",
        update_handler=f"update_{snake}",
        delete_handler=f"delete_{snake}",
        router_var=f"{snake}_routes",
        types_alias=f"{snake}_types",
        has_id=id_field is not None,
        id_type=id_type,
    )
    logger.debug("Entity names for %s: camel=%s snake=%s", model.name, camel, snake)
    return names


__all__: List[str] = ["EntityNames", "build_entity_names"]
