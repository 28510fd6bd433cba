"""Shared test fixtures for mobinstall-cli tests."""

from __future__ import annotations

from collections.abc import Generator

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """CliRunner whose working directory is a fresh temporary directory."""
    with cli_runner.isolated_filesystem():
        yield cli_runner
