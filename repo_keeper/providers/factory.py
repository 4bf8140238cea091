"""Client factory for OneDev connectors."""

from collections.abc import Callable

import structlog

from repo_keeper.config.settings import DEFAULT_ONEDEV_URL
from repo_keeper.providers.auth import Credentials
from repo_keeper.providers.base import OneDevAPI
from repo_keeper.providers.onedev_rest import OneDevRestProvider

log = structlog.get_logger(__name__)

ClientFactory = Callable[[str, Credentials], OneDevAPI]


def create_client(base_url: str, credentials: Credentials) -> OneDevAPI:
    """Create a REST client for a OneDev instance.

    Args:
        base_url: Instance base URL; the public instance if empty
        credentials: Output of select_credentials

    Returns:
        An unopened client, to be used as an async context manager
    """
    url = base_url or DEFAULT_ONEDEV_URL
    log.debug("creating_onedev_client", base_url=url, auth=str(credentials.mode))
    return OneDevRestProvider(base_url=url, credentials=credentials)
