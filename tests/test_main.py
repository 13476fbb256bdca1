"""
Tests for the command-line interface.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator
from unittest.mock import patch

import pytest
import yaml
from typer.testing import CliRunner

from ignition.main import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup() -> Iterator[None]:
    with patch('ignition.main.setup_logging'):
        yield


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    config: Dict[str, Any] = {
        "database": {"host": "localhost", "port": 5432},
        "dev": {"database": {"host": "dev-db"}},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return path


class TestShowCommand:
    """Test cases for the show command."""

    def test_show_default(self, runner: CliRunner, config_file: Path,
                          monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("env", raising=False)

        result = runner.invoke(cli, ["show", str(config_file)])

        assert result.exit_code == 0
        assert yaml.safe_load(result.output)["database"]["host"] == "localhost"

    def test_show_with_env_option(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli, ["show", str(config_file), "--env", "dev", "--format", "json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["database"] == {"host": "dev-db", "port": 5432}

    def test_show_env_from_process(self, runner: CliRunner, config_file: Path,
                                   monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("env", "dev")

        result = runner.invoke(cli, ["show", str(config_file)])

        assert result.exit_code == 0
        assert yaml.safe_load(result.output)["database"]["host"] == "dev-db"

    def test_show_unknown_env(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli, ["show", str(config_file), "--env", "nope"])

        assert result.exit_code == 1
        assert "nope" in result.output


class TestValidateCommand:
    """Test cases for the validate command."""

    def test_valid(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli, ["validate", str(config_file), "-e", "dev"])

        assert result.exit_code == 0
        assert "Environment: dev" in result.output

    def test_missing_file(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["validate", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "Configuration validation failed" in result.output
