"""
tests/test_cli.py
Tests for prismapi.cli (argument parsing, log levels and exit codes).
"""

from __future__ import annotations

import argparse
import logging
import pathlib

import pytest

from conftest import BLOG_SCHEMA, write_schema_project
from prismapi import __version__
from prismapi.cli import (
    EXIT_GENERATION_ERROR,
    EXIT_INPUT_ERROR,
    EXIT_OUTPUT_ERROR,
    EXIT_SCHEMA_ERROR,
    EXIT_SUCCESS,
    LOG_LEVEL_ENV_VAR,
    _resolve_log_level,
    main,
)
from prismapi.errors import GenerationError
from prismapi.generator import APIGenerator


@pytest.fixture(autouse=True)
def _no_env_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(LOG_LEVEL_ENV_VAR, raising=False)


class TestMain:
    def test_generate_in_project(
        self,
        project_root: pathlib.Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.chdir(project_root)
        assert main(["generate"]) == EXIT_SUCCESS
        assert (project_root / "src" / "generated" / "__init__.py").is_file()
        assert "Generation Report" in capsys.readouterr().out

    def test_short_alias_and_options(
        self, tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        schema = tmp_path / "blog.prisma"
        schema.write_text(BLOG_SCHEMA, encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        assert main(["g", "-s", "blog.prisma", "-o", "api"]) == EXIT_SUCCESS
        assert (tmp_path / "api" / "post" / "service.py").is_file()

    def test_silent_suppresses_summary(
        self,
        project_root: pathlib.Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.chdir(project_root)
        assert main(["--silent", "generate"]) == EXIT_SUCCESS
        assert capsys.readouterr().out == ""

    def test_missing_schema(self, tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert main(["generate"]) == EXIT_SCHEMA_ERROR

    def test_broken_schema(self, tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> None:
        write_schema_project(tmp_path, "model Broken {\n")
        monkeypatch.chdir(tmp_path)
        assert main(["generate"]) == EXIT_SCHEMA_ERROR

    def test_generation_error(
        self, project_root: pathlib.Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def failing(self: APIGenerator, schema_path: object = None) -> None:
            raise GenerationError("boom", model="User")

        monkeypatch.setattr(APIGenerator, "generate", failing)
        monkeypatch.chdir(project_root)
        assert main(["generate"]) == EXIT_GENERATION_ERROR

    def test_output_error(self, project_root: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (project_root / "taken").write_text("file", encoding="utf-8")
        monkeypatch.chdir(project_root)
        assert main(["generate", "-o", "taken"]) == EXIT_OUTPUT_ERROR

    def test_project_root_as_output_is_refused(
        self, project_root: pathlib.Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(project_root)
        assert main(["g", "-o", "."]) == EXIT_OUTPUT_ERROR
        assert (project_root / "prisma" / "schema.prisma").is_file()

    def test_blank_output_is_input_error(
        self, project_root: pathlib.Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(project_root)
        assert main(["generate", "-o", "  "]) == EXIT_INPUT_ERROR

    def test_no_command(self) -> None:
        assert main([]) == EXIT_INPUT_ERROR

    def test_unknown_option_exits_with_input_error(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["generate", "--bogus"])
        assert exc_info.value.code == EXIT_INPUT_ERROR

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestLogLevel:
    @pytest.mark.parametrize(
        "argv, expected",
        [
            ([], "warning"),
            (["-v"], "info"),
            (["-vv"], "debug"),
            (["--log-level", "error"], "error"),
            (["--silent"], "silent"),
            (["--silent", "--log-level", "debug"], "silent"),
            (["generate", "--log-level", "debug"], "debug"),
            (["-v", "generate", "-v"], "info"),
        ],
    )
    def test_resolution(self, argv: list, expected: str) -> None:
        from prismapi.cli import _build_parser

        args = _build_parser().parse_args(argv)
        assert _resolve_log_level(args) == expected

    def test_env_var_takes_precedence(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "DEBUG")
        assert _resolve_log_level(argparse.Namespace(silent=True)) == "debug"

    def test_unknown_env_value_is_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "loud")
        assert _resolve_log_level(argparse.Namespace(verbose=1)) == "info"

    def test_logger_configured(
        self, project_root: pathlib.Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(project_root)
        main(["--log-level", "debug", "generate"])
        package_logger = logging.getLogger("prismapi")
        assert package_logger.level == logging.DEBUG
        assert package_logger.propagate is False
        assert len(package_logger.handlers) == 1
