"""
Configuration system using Pydantic for type-safe settings management.

This module provides the configuration classes for OneDev sources and
destinations and the top-level settings object loaded from YAML.
"""

from __future__ import annotations

import os
import re
from datetime import timedelta
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from repo_keeper.exceptions import ConfigurationError
from repo_keeper.utils.durations import parse_duration

DEFAULT_ONEDEV_URL = "https://code.onedev.io/"

ENV_REFERENCE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


class FilterSettings(BaseModel):
    """Repository filters applied during discovery."""

    exclude_forks: bool = Field(default=False, description="Skip projects forked from another project")
    last_activity: str = Field(
        default="",
        description="Skip projects whose latest default-branch commit is older than this (e.g. 1y, 30d)",
    )

    def parse_duration(self) -> timedelta:
        """Parse last_activity into a timedelta.

        Returns:
            Parsed duration; zero disables the activity filter

        Raises:
            ConfigurationError: If last_activity is not a valid duration
        """
        return parse_duration(self.last_activity)


class OneDevConnectionConfig(BaseModel):
    """Connection and credential fields shared by sources and destinations."""

    url: str = Field(default=DEFAULT_ONEDEV_URL, description="Base URL of the OneDev instance")
    token: SecretStr | None = Field(default=None, description="Personal access token")
    token_file: str | None = Field(default=None, description="File containing the access token")
    username: str = Field(default="", description="Username for basic authentication")
    password: SecretStr | None = Field(default=None, description="Password for basic authentication")

    def get_token(self) -> str:
        """Return the configured token, reading token_file if no token is set.

        Raises:
            ConfigurationError: If token_file cannot be read
        """
        if self.token is not None and self.token.get_secret_value():
            return self.token.get_secret_value()
        if self.token_file:
            try:
                return Path(self.token_file).expanduser().read_text().strip()
            except OSError as e:
                raise ConfigurationError(f"Cannot read token file: {self.token_file}") from e
        return ""


class OneDevSourceConfig(OneDevConnectionConfig):
    """A OneDev instance to discover repositories from."""

    user: str = Field(default="", description="Owner to discover; the authenticated user if empty")
    filter: FilterSettings = Field(default_factory=FilterSettings)
    include: list[str] = Field(default_factory=list, description="Only these repository names")
    exclude: list[str] = Field(default_factory=list, description="Repository names to drop from include")
    include_orgs: list[str] = Field(default_factory=list, description="Organizations to discover")
    exclude_orgs: list[str] = Field(default_factory=list, description="Organizations never expanded")
    workers: int = Field(default=1, ge=1, le=32, description="Concurrent per-project lookups")


class OneDevDestinationConfig(OneDevConnectionConfig):
    """A OneDev instance to mirror repositories into."""

    pass


class SourceConfig(BaseModel):
    """Configured sources, grouped by hoster."""

    onedev: list[OneDevSourceConfig] = Field(default_factory=list)


class DestinationConfig(BaseModel):
    """Configured destinations, grouped by hoster."""

    onedev: list[OneDevDestinationConfig] = Field(default_factory=list)


class KeeperSettings(BaseSettings):
    """Main repo-keeper settings.

    Combines all configured sources and destinations and provides loading
    from YAML files with environment variable interpolation.
    """

    model_config = SettingsConfigDict(
        env_prefix="REPO_KEEPER_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    source: SourceConfig = Field(default_factory=SourceConfig)
    destination: DestinationConfig = Field(default_factory=DestinationConfig)

    @classmethod
    def from_yaml(cls, config_path: str) -> KeeperSettings:
        """Load sources and destinations from a YAML file.

        ``${VAR}`` and ``${VAR:-default}`` references are expanded from the
        environment before parsing, so tokens can stay out of the file.

        Raises:
            ConfigurationError: If the file is missing, unreadable, not a YAML
                mapping, references an unset variable or fails validation
        """
        path = Path(config_path)
        try:
            raw = path.read_text()
        except FileNotFoundError as e:
            raise ConfigurationError(f"Configuration file not found: {config_path}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            data = yaml.safe_load(cls._interpolate_env_vars(raw))
        except KeyError as e:
            raise ConfigurationError(f"Environment variable {e.args[0]} is not set") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping at the top level")

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Expand environment references outside of comment lines.

        Raises:
            KeyError: With the variable name, if a reference without a
                default names an unset variable
        """

        def expand(match: re.Match[str]) -> str:
            name, default = match.group(1), match.group(2)
            value = os.environ.get(name, default)
            if value is None:
                raise KeyError(name)
            return value

        return "\n".join(
            line if line.lstrip().startswith("#") else ENV_REFERENCE.sub(expand, line)
            for line in content.split("\n")
        )
