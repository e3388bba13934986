"""
tests/test_compiler.py
Unit tests for prismapi.compiler (Prisma schema text → DMMF document).
"""

from __future__ import annotations

import textwrap
from typing import Dict

import pytest

from conftest import BLOG_SCHEMA, DATASOURCE_BLOCK, GENERATOR_BLOCK
from prismapi.compiler import (
    DMMFDocument,
    DMMFField,
    DMMFModel,
    PrismaSchemaCompiler,
    implicit_relation_name,
    split_attributes,
    strip_comment,
)
from prismapi.errors import PrismapiError, SchemaCompilerError


def _compile(body: str) -> DMMFDocument:
    source = "\n".join([DATASOURCE_BLOCK, GENERATOR_BLOCK, textwrap.dedent(body)])
    return PrismaSchemaCompiler().compile(source)


def _fields(model: DMMFModel) -> Dict[str, DMMFField]:
    return {f.name: f for f in model.fields}


@pytest.fixture()
def blog_document() -> DMMFDocument:
    return PrismaSchemaCompiler().compile(BLOG_SCHEMA)


# ===========================================================================
# Lexical helpers
# ===========================================================================


class TestLexicalHelpers:
    def test_strip_comment(self) -> None:
        assert strip_comment("name String // the name") == "name String "
        assert strip_comment("/// doc comment") == ""
        assert strip_comment('url = "http://example.com"') == 'url = "http://example.com"'

    def test_split_attributes(self) -> None:
        attrs = split_attributes('@id @default(autoincrement()) @db.VarChar(255)')
        assert attrs == [
            ("id", None),
            ("default", "autoincrement()"),
            ("db.VarChar", "255"),
        ]

    def test_split_attributes_ignores_at_sign_inside_strings(self) -> None:
        attrs = split_attributes('@default("a@b.c") @unique')
        assert attrs == [("default", '"a@b.c"'), ("unique", None)]

    def test_split_attributes_rejects_unbalanced_parentheses(self) -> None:
        with pytest.raises(ValueError):
            split_attributes("@default(now()")

    def test_implicit_relation_name_is_order_independent(self) -> None:
        assert implicit_relation_name("User", "Post") == "PostToUser"
        assert implicit_relation_name("Post", "User") == "PostToUser"


# ===========================================================================
# Blocks
# ===========================================================================


class TestBlocks:
    def test_declaration_order_preserved(self, blog_document: DMMFDocument) -> None:
        assert [m.name for m in blog_document.datamodel.models] == ["User", "Post", "LogEntry"]
        assert [e.name for e in blog_document.datamodel.enums] == ["Role"]

    def test_config_blocks(self, blog_document: DMMFDocument) -> None:
        client = blog_document.generator("client")
        assert client is not None
        assert client.properties["provider"] == "prisma-client-py"
        assert blog_document.generator("missing") is None
        assert blog_document.datasources[0].properties["provider"] == "postgresql"

    def test_block_map_attribute(self, blog_document: DMMFDocument) -> None:
        post = blog_document.datamodel.models[1]
        assert post.db_name == "posts"
        assert blog_document.datamodel.models[0].db_name is None

    def test_compound_id(self) -> None:
        doc = _compile(
            """
            model Membership {
              userId Int
              teamId Int
              @@id([userId, teamId])
            }
            """
        )
        model = doc.datamodel.models[0]
        assert model.primary_key == ["userId", "teamId"]
        assert not any(f.is_id for f in model.fields)

    def test_enum_values_and_map(self) -> None:
        doc = _compile(
            """
            enum Status {
              ACTIVE   @map("active")
              INACTIVE
              @@map("status")
            }
            """
        )
        enum = doc.datamodel.enums[0]
        assert [v.name for v in enum.values] == ["ACTIVE", "INACTIVE"]
        assert enum.values[0].db_name == "active"
        assert enum.db_name == "status"

    def test_composite_type_is_collected_separately(self) -> None:
        doc = _compile(
            """
            type Address {
              street String
              city   String
            }

            model Customer {
              id      Int     @id
              address Address
            }
            """
        )
        assert [t.name for t in doc.datamodel.types] == ["Address"]
        address = _fields(doc.datamodel.models[0])["address"]
        assert address.kind == "object"
        assert address.relation_name is None

    def test_dmmf_dumps_with_camel_case_keys(self, blog_document: DMMFDocument) -> None:
        dumped = blog_document.model_dump(by_alias=True)
        user_fields = dumped["datamodel"]["models"][0]["fields"]
        assert "isList" in user_fields[0]
        assert "hasDefaultValue" in user_fields[0]


# ===========================================================================
# Fields
# ===========================================================================


class TestFields:
    def test_user_fields(self, blog_document: DMMFDocument) -> None:
        fields = _fields(blog_document.datamodel.models[0])
        assert fields["id"].is_id and fields["id"].has_default_value
        assert fields["id"].kind == "scalar"
        assert fields["email"].is_unique and not fields["email"].is_id
        assert not fields["name"].is_required
        assert fields["role"].kind == "enum"
        assert fields["role"].type == "Role"
        assert fields["role"].has_default_value
        assert fields["updatedAt"].is_updated_at
        assert fields["posts"].kind == "object" and fields["posts"].is_list

    def test_implicit_relation_names_agree_on_both_sides(
        self, blog_document: DMMFDocument
    ) -> None:
        user = _fields(blog_document.datamodel.models[0])
        post = _fields(blog_document.datamodel.models[1])
        assert user["posts"].relation_name == "PostToUser"
        assert post["author"].relation_name == "PostToUser"

    def test_explicit_relation_name(self) -> None:
        doc = _compile(
            """
            model User {
              id      Int    @id
              written Post[] @relation("Writer")
              edited  Post[] @relation(name: "Editor")
            }

            model Post {
              id       Int  @id
              writer   User @relation("Writer", fields: [writerId], references: [id])
              writerId Int
              editor   User @relation(name: "Editor", fields: [editorId], references: [id])
              editorId Int
            }
            """
        )
        user = _fields(doc.datamodel.models[0])
        post = _fields(doc.datamodel.models[1])
        assert user["written"].relation_name == "Writer"
        assert user["edited"].relation_name == "Editor"
        assert post["writer"].relation_name == "Writer"
        assert post["editor"].relation_name == "Editor"

    def test_unsupported_type(self) -> None:
        doc = _compile(
            """
            model Place {
              id       Int                     @id
              location Unsupported("geometry")?
            }
            """
        )
        location = _fields(doc.datamodel.models[0])["location"]
        assert location.kind == "unsupported"
        assert location.type == "Unsupported"
        assert not location.is_required

    def test_field_map_attribute(self) -> None:
        doc = _compile(
            """
            model Item {
              id        Int    @id
              createdBy String @map("created_by")
            }
            """
        )
        assert _fields(doc.datamodel.models[0])["createdBy"].db_name == "created_by"


# ===========================================================================
# Errors
# ===========================================================================


class TestCompilerErrors:
    @pytest.mark.parametrize(
        "body, fragment",
        [
            ("model User {\n  id Int @id\n", "never closed"),
            ("model User {\n  id Int @id\nmodel Post {\n}\n", "not closed"),
            ("stray text\n", "Unexpected content"),
            ("table User {\n  id Int\n}\n", "Unknown block type"),
            ("model User {\n  id Int @id\n}\nmodel User {\n  id Int @id\n}\n", "already exists"),
            ("model User {\n  id Int @id\n  id Int\n}\n", "already defined"),
            ("model User {\n  id Int @id\n  data Blob\n}\n", "neither a built-in type"),
            ("model User {\n  id Int @id\n  tags String[]?\n}\n", "optional lists"),
            ("model User {\n  id Int @id\n  key Int @id\n}\n", "more than one @id"),
            ("model User {\n}\n", "declares no fields"),
            ("enum Role {\n}\n", "at least one value"),
            ("enum Role {\n  A\n  A\n}\n", "already defined"),
            ("model User {\n  id Int @id @default(now()\n}\n", "Unbalanced"),
        ],
    )
    def test_invalid_schema(self, body: str, fragment: str) -> None:
        with pytest.raises(SchemaCompilerError) as exc_info:
            _compile(body)
        assert fragment in str(exc_info.value)

    def test_error_carries_line_number(self) -> None:
        source = "model User {\n  id Int @id\n  data Blob\n}\n"
        with pytest.raises(SchemaCompilerError) as exc_info:
            PrismaSchemaCompiler().compile(source)
        assert exc_info.value.line == 3
        assert str(exc_info.value).startswith("line 3:")
        assert isinstance(exc_info.value, PrismapiError)
