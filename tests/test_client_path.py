"""
tests/test_client_path.py
Tests for prismapi.client_path (generated client location → imports).
"""

from __future__ import annotations

import pathlib

import pytest

from conftest import BLOG_FRAGMENTS, BLOG_SCHEMA, GENERATOR_BLOCK, write_fragment_project, write_schema_project
from prismapi.client_path import DEFAULT_CLIENT_PATH, client_import_for, resolve_client_path


def _with_output(output: str) -> str:
    generator = GENERATOR_BLOCK.replace(
        'provider = "prisma-client-py"',
        f'provider = "prisma-client-py"\n  output   = "{output}"',
    )
    return BLOG_SCHEMA.replace(GENERATOR_BLOCK, generator)


class TestResolveClientPath:
    def test_no_output_uses_default(self, project_root: pathlib.Path) -> None:
        assert resolve_client_path(project_root=project_root) == DEFAULT_CLIENT_PATH

    def test_nested_output_gets_client_suffix(self, tmp_path: pathlib.Path) -> None:
        write_schema_project(tmp_path, _with_output("./generated/db"))
        assert resolve_client_path(project_root=tmp_path) == "prisma/generated/db/client"

    def test_output_without_dot_slash(self, tmp_path: pathlib.Path) -> None:
        write_schema_project(tmp_path, _with_output("generated/db"))
        assert resolve_client_path(project_root=tmp_path) == "prisma/generated/db/client"

    def test_single_segment_output_is_returned_as_is(self, tmp_path: pathlib.Path) -> None:
        write_schema_project(tmp_path, _with_output("../db"))
        assert resolve_client_path(project_root=tmp_path) == "db"

    def test_explicit_schema_path(self, tmp_path: pathlib.Path) -> None:
        schema = tmp_path / "config" / "app.prisma"
        schema.parent.mkdir()
        schema.write_text(_with_output("./client_out"), encoding="utf-8")
        resolved = resolve_client_path("config/app.prisma", project_root=tmp_path)
        assert resolved == "config/client_out/client"

    def test_fragment_directory(self, tmp_path: pathlib.Path) -> None:
        fragments = dict(BLOG_FRAGMENTS)
        fragments["a_base.prisma"] = fragments["a_base.prisma"].replace(
            'provider = "prisma-client-py"',
            'provider = "prisma-client-py"\n  output = "../../generated"',
        )
        write_fragment_project(tmp_path, fragments)
        assert resolve_client_path(project_root=tmp_path) == "generated"

    def test_missing_schema_falls_back(self, tmp_path: pathlib.Path) -> None:
        assert resolve_client_path(project_root=tmp_path) == DEFAULT_CLIENT_PATH

    def test_other_generator_blocks_are_ignored(self, tmp_path: pathlib.Path) -> None:
        schema = BLOG_SCHEMA + '\ngenerator docs {\n  provider = "docs"\n  output = "./docs"\n}\n'
        write_schema_project(tmp_path, schema)
        assert resolve_client_path(project_root=tmp_path) == DEFAULT_CLIENT_PATH


class TestClientImport:
    def test_default(self) -> None:
        imports = client_import_for(None)
        assert imports.client_module == "prisma"
        assert imports.enums_module == "prisma.enums"
        assert imports.models_module == "prisma.models"
        assert imports.errors_module == "prisma.errors"

    def test_nested_client_module(self) -> None:
        imports = client_import_for("prisma/generated/db/client")
        assert imports.client_module == "prisma.generated.db.client"
        assert imports.package == "prisma.generated.db"
        assert imports.enums_module == "prisma.generated.db.enums"

    def test_single_segment(self) -> None:
        imports = client_import_for("db")
        assert imports.client_module == "db"
        assert imports.package == "db"

    @pytest.mark.parametrize("path", ["../outside/client", "my-client/client", "1st/client"])
    def test_unimportable_path_falls_back(self, path: str) -> None:
        assert client_import_for(path) == client_import_for(DEFAULT_CLIENT_PATH)
