"""Tests for repo_keeper/providers/auth.py - credential selection."""

from pathlib import Path

import pytest

from repo_keeper.config.settings import OneDevDestinationConfig, OneDevSourceConfig
from repo_keeper.enums import AuthMode
from repo_keeper.exceptions import ConfigurationError
from repo_keeper.providers.auth import effective_password, select_credentials


class TestSelectCredentials:
    """Token > basic > anonymous, always exactly one mode."""

    def test_token_wins(self) -> None:
        credentials = select_credentials(OneDevSourceConfig(token="t", username="alice", password="pw"))

        assert credentials.mode is AuthMode.TOKEN
        assert credentials.token == "t"

    def test_token_file(self, tmp_path: Path) -> None:
        token_file = tmp_path / "token"
        token_file.write_text("file-token\n")

        credentials = select_credentials(OneDevDestinationConfig(token_file=str(token_file)))

        assert credentials.mode is AuthMode.TOKEN
        assert credentials.token == "file-token"

    def test_basic(self) -> None:
        credentials = select_credentials(OneDevSourceConfig(username="alice", password="pw"))

        assert credentials.mode is AuthMode.BASIC
        assert (credentials.username, credentials.password) == ("alice", "pw")

    def test_anonymous(self) -> None:
        assert select_credentials(OneDevSourceConfig()).mode is AuthMode.ANONYMOUS

    def test_username_without_password_is_anonymous(self) -> None:
        assert select_credentials(OneDevSourceConfig(username="alice")).mode is AuthMode.ANONYMOUS

    def test_repr_hides_secrets(self) -> None:
        credentials = select_credentials(OneDevSourceConfig(username="alice", password="hunter2"))

        assert "hunter2" not in repr(credentials)

    def test_unreadable_token_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            select_credentials(OneDevSourceConfig(token_file=str(tmp_path / "missing")))


class TestEffectivePassword:
    def test_password(self) -> None:
        assert effective_password(OneDevSourceConfig(password="pw", token="t")) == "pw"

    def test_backfilled_from_token(self) -> None:
        assert effective_password(OneDevSourceConfig(token="t")) == "t"

    def test_empty(self) -> None:
        assert effective_password(OneDevSourceConfig()) == ""
