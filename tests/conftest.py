"""
tests/conftest.py
Shared fixtures for the prismapi test suite.

No external mocking libraries are used; real file I/O is performed inside
temporary directories managed by pytest's tmp_path fixture.
"""

from __future__ import annotations

import ast
import logging
import pathlib
import textwrap
from typing import Dict, Iterator

import pytest

from prismapi.config import GeneratorConfig
from prismapi.models import ParsedSchema
from prismapi.parser import parse_schema_source


# ---------------------------------------------------------------------------
# Schema texts
# ---------------------------------------------------------------------------

DATASOURCE_BLOCK: str = textwrap.dedent(
    """\
    datasource db {
      provider = "postgresql"
      url      = env("DATABASE_URL")
    }
    """
)

GENERATOR_BLOCK: str = textwrap.dedent(
    """\
    generator client {
      provider = "prisma-client-py"
    }
    """
)

ENUM_BLOCK: str = textwrap.dedent(
    """\
    /// Access level of a user
    enum Role {
      USER
      ADMIN
    }
    """
)

USER_MODEL: str = textwrap.dedent(
    """\
    model User {
      id        Int      @id @default(autoincrement())
      email     String   @unique
      name      String?  // display name
      role      Role     @default(USER)
      posts     Post[]
      createdAt DateTime @default(now())
      updatedAt DateTime @updatedAt
    }
    """
)

POST_MODEL: str = textwrap.dedent(
    """\
    model Post {
      id        String   @id @default(uuid())
      title     String
      content   String?
      published Boolean  @default(false)
      tags      String[]
      views     Float
      metadata  Json?
      author    User     @relation(fields: [authorId], references: [id])
      authorId  Int

      @@map("posts")
    }
    """
)

LOG_ENTRY_MODEL: str = textwrap.dedent(
    """\
    model LogEntry {
      message String
      level   String
      payload Bytes?
    }
    """
)

BLOG_SCHEMA: str = "\n".join(
    [DATASOURCE_BLOCK, GENERATOR_BLOCK, ENUM_BLOCK, USER_MODEL, POST_MODEL, LOG_ENTRY_MODEL]
)

# Fragment file name → content; sorted file order equals BLOG_SCHEMA order.
BLOG_FRAGMENTS: Dict[str, str] = {
    "a_base.prisma": "\n".join([DATASOURCE_BLOCK, GENERATOR_BLOCK, ENUM_BLOCK]),
    "b_user.prisma": USER_MODEL,
    "c_post.prisma": POST_MODEL,
    "d_log.prisma": LOG_ENTRY_MODEL,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def is_valid_python(code: str) -> bool:
    """Return True when *code* parses as Python 3."""
    try:
        ast.parse(code)
    except SyntaxError:
        return False
    return True


def write_schema_project(root: pathlib.Path, schema: str = BLOG_SCHEMA) -> pathlib.Path:
    """Create ``<root>/prisma/schema.prisma`` and return its path."""
    path = root / "prisma" / "schema.prisma"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(schema, encoding="utf-8")
    return path


def write_fragment_project(
    root: pathlib.Path, fragments: Dict[str, str] = BLOG_FRAGMENTS
) -> pathlib.Path:
    """Create ``<root>/prisma/schema/*.prisma`` and return the directory."""
    directory = root / "prisma" / "schema"
    directory.mkdir(parents=True, exist_ok=True)
    for name, content in fragments.items():
        (directory / name).write_text(content, encoding="utf-8")
    return directory


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def blog_schema_text() -> str:
    return BLOG_SCHEMA


@pytest.fixture()
def parsed_blog_schema() -> ParsedSchema:
    """The blog schema parsed with the built-in compiler."""
    return parse_schema_source(BLOG_SCHEMA).schema


@pytest.fixture()
def project_root(tmp_path: pathlib.Path) -> pathlib.Path:
    """A project with the blog schema at the default location."""
    root = tmp_path / "project"
    root.mkdir()
    write_schema_project(root)
    return root


@pytest.fixture()
def fragment_root(tmp_path: pathlib.Path) -> pathlib.Path:
    """A project whose schema is split across ``prisma/schema/`` fragments."""
    root = tmp_path / "fragments"
    root.mkdir()
    write_fragment_project(root)
    return root


@pytest.fixture()
def generator_config(project_root: pathlib.Path) -> GeneratorConfig:
    return GeneratorConfig(project_root=str(project_root), output_dir="src/generated")


@pytest.fixture(autouse=True)
def _restore_prismapi_logger() -> Iterator[None]:
    """The CLI reconfigures the ``prismapi`` logger; undo it after each test."""
    package_logger = logging.getLogger("prismapi")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate
    yield
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate
