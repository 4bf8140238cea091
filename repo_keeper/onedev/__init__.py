"""OneDev connector: repository discovery and mirror provisioning.

Example:
    >>> from repo_keeper.onedev import discover, get_or_create
    >>> repos, attempted = await discover(settings.source.onedev)
    >>> url = await get_or_create(settings.destination.onedev[0], repos[0])
"""

from repo_keeper.onedev.discovery import SourceDiscovery, discover
from repo_keeper.onedev.provisioner import get_or_create

__all__ = [
    "SourceDiscovery",
    "discover",
    "get_or_create",
]
