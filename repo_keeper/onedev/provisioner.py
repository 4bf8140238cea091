"""Idempotent provisioning of mirror projects on a OneDev destination."""

import structlog

from repo_keeper.config.settings import DEFAULT_ONEDEV_URL, OneDevDestinationConfig
from repo_keeper.exceptions import ConfigurationError, OneDevAPIError, ProvisioningError
from repo_keeper.models.domain import Repository
from repo_keeper.providers import queries
from repo_keeper.providers.auth import select_credentials
from repo_keeper.providers.base import OneDevAPI
from repo_keeper.providers.factory import ClientFactory, create_client

log = structlog.get_logger(__name__)

STAGE = "onedev"
SEARCH_PAGE_SIZE = 100


async def get_or_create(
    destination: OneDevDestinationConfig,
    repo: Repository,
    client_factory: ClientFactory = create_client,
) -> str:
    """Locate or create the mirror project for ``repo`` on ``destination``.

    The project lives under the namespace project named after the
    authenticated user (or at the root when no such namespace exists).
    Calling this twice for the same repository returns the same URL and
    creates the project at most once.

    Args:
        destination: Destination OneDev instance
        repo: Repository to mirror
        client_factory: Builds a client from a base URL and credentials

    Returns:
        HTTP clone URL of the existing or newly created project

    Raises:
        ProvisioningError: If identity resolution, the search, the creation
            or the final clone URL lookup fails
    """
    url = destination.url or DEFAULT_ONEDEV_URL

    try:
        credentials = select_credentials(destination)
    except ConfigurationError as e:
        raise ProvisioningError(e.message, repository=repo.name, stage="credentials") from e

    async with client_factory(url, credentials) as client:
        try:
            user = await client.who_am_i()
        except OneDevAPIError as e:
            raise ProvisioningError(f"Cannot resolve user on {url}", repository=repo.name, stage="whoami") from e

        existing = await _find_project(
            client, queries.name_is_child_of(repo.name, user.name), repo.name, "search", last=False
        )
        if existing is not None:
            log.info("onedev_mirror_exists", stage=STAGE, url=url, repository=repo.name, project_id=existing)
            return await _clone_url(client, existing, repo.name)

        namespace = await _find_project(client, queries.name_is(user.name), user.name, "namespace", last=True)
        parent_id = namespace or 0

        try:
            project_id = await client.create_project(repo.name, parent_id=parent_id, code_management=True)
        except OneDevAPIError as e:
            raise ProvisioningError(
                f"Cannot create project on {url}", repository=repo.name, stage="create"
            ) from e

        log.info("onedev_mirror_created", stage=STAGE, url=url, repository=repo.name, parent_id=parent_id)
        return await _clone_url(client, project_id, repo.name)


async def _find_project(client: OneDevAPI, query: str, name: str, stage: str, last: bool) -> int | None:
    """Id of a project matching ``query`` whose name is exactly ``name``.

    The first exact match wins, or the last one when ``last`` is set.
    """
    try:
        projects = await client.list_projects(query, offset=0, count=SEARCH_PAGE_SIZE)
    except OneDevAPIError as e:
        raise ProvisioningError(f"Project search failed: {query}", repository=name, stage=stage) from e

    found: int | None = None
    for project in projects:
        if project.name == name:
            found = project.id
            if not last:
                break
    return found


async def _clone_url(client: OneDevAPI, project_id: int, name: str) -> str:
    try:
        urls = await client.get_clone_urls(project_id)
    except OneDevAPIError as e:
        raise ProvisioningError(f"Cannot get clone URL of project {project_id}", repository=name, stage="clone_url") from e
    return urls.http
