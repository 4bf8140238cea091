"""Unit tests for the repo_keeper.main CLI module."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from repo_keeper.exceptions import ProvisioningError
from repo_keeper.main import cli
from repo_keeper.models.domain import Repository

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("repo_keeper.main.configure_logging"):
        yield


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "repo-keeper.yaml"
    path.write_text(
        """
source:
  onedev:
    - url: https://onedev.example.com/
      token: source-token
destination:
  onedev:
    - url: https://mirror.example.com/
      token: dest-token
"""
    )
    return path


# =============================================================================
# Tests
# =============================================================================


class TestCliConfig:
    def test_missing_config(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["--config", str(tmp_path / "nope.yaml"), "discover"])

        assert result.exit_code == 1
        assert "Configuration file not found" in result.output

    def test_invalid_config(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("- a list\n")

        result = cli_runner.invoke(cli, ["--config", str(path), "discover"])

        assert result.exit_code == 1
        assert "mapping at the top level" in result.output


class TestDiscoverCommand:
    def test_prints_json_lines(self, cli_runner: CliRunner, config_file: Path) -> None:
        repo = Repository(
            name="tool",
            url="https://onedev.example.com/tool",
            ssh_url="ssh://onedev.example.com/tool",
            token="source-token",
            default_branch="main",
            owner="alice",
            hoster="onedev.example.com",
        )

        with patch("repo_keeper.main.discover", new=AsyncMock(return_value=([repo], True))) as mock_discover:
            result = cli_runner.invoke(cli, ["--config", str(config_file), "discover"])

        assert result.exit_code == 0
        line = json.loads(result.output.strip())
        assert line["name"] == "tool"
        assert "token" not in line
        sources = mock_discover.call_args.args[0]
        assert sources[0].url == "https://onedev.example.com/"

    def test_no_sources(self, cli_runner: CliRunner, config_file: Path) -> None:
        with patch("repo_keeper.main.discover", new=AsyncMock(return_value=([], False))):
            result = cli_runner.invoke(cli, ["--config", str(config_file), "discover"])

        assert result.exit_code == 1
        assert "No OneDev sources configured" in result.output


class TestProvisionCommand:
    def test_prints_clone_url(self, cli_runner: CliRunner, config_file: Path) -> None:
        mock = AsyncMock(return_value="https://mirror.example.com/alice/foo")

        with patch("repo_keeper.main.get_or_create", new=mock):
            result = cli_runner.invoke(cli, ["--config", str(config_file), "provision", "--name", "foo"])

        assert result.exit_code == 0
        assert result.output.strip() == "https://mirror.example.com/alice/foo"
        destination, repo = mock.call_args.args
        assert destination.url == "https://mirror.example.com/"
        assert repo.name == "foo"

    def test_bad_destination_index(self, cli_runner: CliRunner, config_file: Path) -> None:
        result = cli_runner.invoke(
            cli, ["--config", str(config_file), "provision", "--name", "foo", "--destination", "3"]
        )

        assert result.exit_code == 1
        assert "No OneDev destination at index 3" in result.output

    def test_provisioning_error(self, cli_runner: CliRunner, config_file: Path) -> None:
        error = ProvisioningError("Cannot create project", repository="foo", stage="create")

        with patch("repo_keeper.main.get_or_create", new=AsyncMock(side_effect=error)):
            result = cli_runner.invoke(cli, ["--config", str(config_file), "provision", "--name", "foo"])

        assert result.exit_code == 1
        assert "Cannot create project" in result.output
