"""Configuration models for repo-keeper."""

from repo_keeper.config.settings import (
    DEFAULT_ONEDEV_URL,
    FilterSettings,
    KeeperSettings,
    OneDevDestinationConfig,
    OneDevSourceConfig,
)

__all__ = [
    "DEFAULT_ONEDEV_URL",
    "FilterSettings",
    "KeeperSettings",
    "OneDevDestinationConfig",
    "OneDevSourceConfig",
]
