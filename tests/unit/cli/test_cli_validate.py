"""Tests for the mobinstall validate command."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

from click.testing import CliRunner

from mobinstall_cli.commands.validate import validate
from mobinstall_cli.main import cli


class TestValidateCommand:
    """Tests for validate command."""

    def test_valid_file(self, cli_runner: CliRunner, build_yaml: Path) -> None:
        result = cli_runner.invoke(validate, ["--file", str(build_yaml)])
        assert result.exit_code == 0
        assert "valid" in result.output.lower()
        assert "6 split apks" in result.output

    def test_missing_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(validate, ["--file", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 2
        assert "not found" in result.output.lower()

    def test_default_path(self, isolated_runner: CliRunner) -> None:
        result = isolated_runner.invoke(validate)
        assert result.exit_code == 2
        assert "not found" in result.output.lower()

    def test_through_main_group(self, cli_runner: CliRunner, build_yaml: Path) -> None:
        result = cli_runner.invoke(cli, ["validate", "-f", str(build_yaml)])
        assert result.exit_code == 0


class TestValidateErrors:
    """Tests for invalid build descriptions."""

    def test_yaml_syntax_error(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        bad_yaml = tmp_path / "build.yaml"
        bad_yaml.write_text("label: [unclosed\n")
        result = cli_runner.invoke(validate, ["--file", str(bad_yaml)])
        assert result.exit_code == 1
        assert "yaml" in result.output.lower()

    def test_missing_required_field(
        self,
        cli_runner: CliRunner,
        build_yaml_data: dict[str, Any],
        write_build_yaml: Callable[[dict[str, Any]], Path],
    ) -> None:
        del build_yaml_data["signing_key"]
        result = cli_runner.invoke(validate, ["--file", str(write_build_yaml(build_yaml_data))])
        assert result.exit_code == 1
        assert "signing_key" in result.output

    def test_configuration_errors_reported_together(
        self,
        cli_runner: CliRunner,
        build_yaml_data: dict[str, Any],
        write_build_yaml: Callable[[dict[str, Any]], Path],
    ) -> None:
        del build_yaml_data["manifest"]
        del build_yaml_data["stub_application"]
        result = cli_runner.invoke(validate, ["--file", str(write_build_yaml(build_yaml_data))])
        assert result.exit_code == 1
        assert "2 configuration error(s)" in result.output
        assert "Stub application cannot be found" in result.output

    def test_missing_tool(
        self,
        cli_runner: CliRunner,
        build_yaml_data: dict[str, Any],
        write_build_yaml: Callable[[dict[str, Any]], Path],
    ) -> None:
        del build_yaml_data["toolchain"]["apksigner"]
        result = cli_runner.invoke(validate, ["--file", str(write_build_yaml(build_yaml_data))])
        assert result.exit_code == 1
        assert "apksigner" in result.output
