"""Provider implementations for hosting backends.

Key Components:
    - OneDevAPI: Abstract remote capability used by the OneDev connector
    - OneDevRestProvider: OneDev REST API implementation
    - select_credentials: Token > basic > anonymous credential selection
    - create_client: Default client factory

Example:
    >>> from repo_keeper.providers import create_client, select_credentials
    >>> client = create_client(config.url, select_credentials(config))
    >>> async with client:
    ...     me = await client.who_am_i()
"""

from repo_keeper.providers.auth import Credentials, select_credentials
from repo_keeper.providers.base import OneDevAPI
from repo_keeper.providers.factory import ClientFactory, create_client
from repo_keeper.providers.onedev_rest import OneDevRestProvider

__all__ = [
    "ClientFactory",
    "Credentials",
    "OneDevAPI",
    "OneDevRestProvider",
    "create_client",
    "select_credentials",
]
