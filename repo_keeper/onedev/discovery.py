"""Repository discovery for OneDev sources.

For each configured source the pipeline:

1. Selects credentials and resolves the target user (``who_am_i`` when no
   user is configured; failure skips the source).
2. Lists the projects owned by that user, page by page.
3. Filters them (forks, include/exclude names) and enriches each survivor
   with clone URLs, default branch and last activity; stale projects are
   dropped.
4. Optionally expands the user's group memberships into organizations.
5. Lists the children of every organization and enriches them (fork filter
   only, no activity filter).

Lookup failures on a single project are logged and degrade that project
only; they never abort the run.
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Sequence
from datetime import datetime, timedelta, timezone
from typing import TypeVar
from urllib.parse import urlparse

import structlog

from repo_keeper.config.settings import DEFAULT_ONEDEV_URL, OneDevSourceConfig
from repo_keeper.exceptions import ConfigurationError, OneDevAPIError
from repo_keeper.models.domain import CloneUrls, Project, Repository, User
from repo_keeper.providers import queries
from repo_keeper.providers.auth import effective_password, select_credentials
from repo_keeper.providers.base import OneDevAPI
from repo_keeper.providers.factory import ClientFactory, create_client

log = structlog.get_logger(__name__)

STAGE = "onedev"
PAGE_SIZE = 100
FALLBACK_BRANCH = "main"

T = TypeVar("T")
R = TypeVar("R")


def get_host(url: str) -> str:
    """Return the host (with port, if any) of a base URL."""
    return urlparse(url).netloc


async def list_all_projects(client: OneDevAPI, query: str, url: str, page_size: int = PAGE_SIZE) -> list[Project]:
    """Fetch every page of a project query.

    Stops at the first page shorter than ``page_size``. A failing page is
    logged and the projects gathered so far are returned.
    """
    projects: list[Project] = []
    offset = 0
    while True:
        try:
            page = await client.list_projects(query, offset=offset, count=page_size)
        except OneDevAPIError as e:
            log.error("onedev_list_projects_failed", stage=STAGE, url=url, query=query, offset=offset, error=str(e))
            break
        projects.extend(page)
        if len(page) < page_size:
            break
        offset += page_size
    return projects


async def fetch_clone_urls(client: OneDevAPI, project: Project, url: str) -> CloneUrls | None:
    """Clone URLs of a project, or None when they cannot be fetched."""
    try:
        return await client.get_clone_urls(project.id)
    except OneDevAPIError as e:
        log.error("onedev_clone_urls_failed", stage=STAGE, url=url, project=project.name, error=str(e))
        return None


async def resolve_default_branch(client: OneDevAPI, project: Project, url: str) -> str:
    """Default branch of a project, falling back to ``main``."""
    try:
        return await client.get_default_branch(project.id)
    except OneDevAPIError as e:
        log.error(
            "onedev_default_branch_failed",
            stage=STAGE,
            url=url,
            project=project.name,
            fallback=FALLBACK_BRANCH,
            error=str(e),
        )
        return FALLBACK_BRANCH


async def last_activity(client: OneDevAPI, project: Project, branch: str, url: str) -> datetime | None:
    """Author time of the newest commit on ``branch``, or None if unknown."""
    try:
        commit_ids = await client.list_commits(project.id, queries.on_branch(branch), count=1)
    except OneDevAPIError as e:
        log.error("onedev_list_commits_failed", stage=STAGE, url=url, project=project.name, branch=branch, error=str(e))
        return None
    if not commit_ids:
        return None

    try:
        commit = await client.get_commit(project.id, commit_ids[0])
    except OneDevAPIError as e:
        log.error("onedev_latest_commit_failed", stage=STAGE, url=url, project=project.name, branch=branch, error=str(e))
        return None
    return commit.authored_at


async def run_bounded(items: Sequence[T], func: Callable[[T], Awaitable[R]], workers: int = 1) -> list[R]:
    """Apply ``func`` to every item, at most ``workers`` at a time.

    Results keep the order of ``items``. With one worker the calls are made
    strictly one after another.
    """
    if workers <= 1:
        return [await func(item) for item in items]

    semaphore = asyncio.Semaphore(workers)

    async def run(item: T) -> R:
        async with semaphore:
            return await func(item)

    return list(await asyncio.gather(*(run(item) for item in items)))


class SourceDiscovery:
    """Discovery run for a single OneDev source entry.

    Works on its own copy of the configuration; ``user`` and
    ``include_orgs`` of that copy are filled in during the run and the copy
    is attached to every descriptor as its origin.
    """

    def __init__(self, config: OneDevSourceConfig, client_factory: ClientFactory = create_client):
        self.source = config.model_copy(deep=True)
        if not self.source.url:
            self.source.url = DEFAULT_ONEDEV_URL
        self.url = self.source.url
        self.hoster = get_host(self.url)
        self.client_factory = client_factory
        self.token = ""

        self.include = set(self.source.include)
        self.exclude = set(self.source.exclude)
        self.exclude_orgs = set(self.source.exclude_orgs)

        try:
            self.max_age = self.source.filter.parse_duration()
        except ConfigurationError as e:
            log.error("onedev_filter_duration_invalid", stage=STAGE, url=self.url, error=e.message)
            self.max_age = timedelta(0)

    async def run(self) -> list[Repository]:
        """Discover the repositories of this source.

        Returns an empty list when the source has to be skipped.
        """
        try:
            credentials = select_credentials(self.source)
            password = effective_password(self.source)
        except ConfigurationError as e:
            log.error("onedev_credentials_invalid", stage=STAGE, url=self.url, error=e.message)
            return []
        self.token = credentials.token

        async with self.client_factory(self.url, credentials) as client:
            me: User | None = None
            if not self.source.user:
                try:
                    me = await client.who_am_i()
                except OneDevAPIError as e:
                    log.error("onedev_user_not_found", stage=STAGE, url=self.url, error=str(e))
                    return []
                self.source.user = me.name

            log.info("onedev_grabbing_repositories", stage=STAGE, url=self.url, user=self.source.user)

            repos = await self._personal_repositories(client)

            if self.source.username and password and not self.source.include_orgs and me is not None:
                self.source.include_orgs.extend(await self._member_organizations(client, me))

            for org in self.source.include_orgs:
                repos.extend(await self._organization_repositories(client, org))

        return repos

    def _keep_personal(self, project: Project) -> bool:
        if self.source.filter.exclude_forks and project.is_fork:
            return False
        if self.include:
            if project.name not in self.include:
                return False
            if project.name in self.exclude:
                return False
        return True

    async def _personal_repositories(self, client: OneDevAPI) -> list[Repository]:
        projects = await list_all_projects(client, queries.owned_by(self.source.user), self.url)
        candidates = [project for project in projects if self._keep_personal(project)]

        async def describe(project: Project) -> Repository | None:
            return await self._describe(client, project, owner=self.source.user, check_activity=True)

        results = await run_bounded(candidates, describe, self.source.workers)
        return [repo for repo in results if repo is not None]

    async def _member_organizations(self, client: OneDevAPI, me: User) -> list[str]:
        try:
            memberships = await client.list_memberships(me.id)
        except OneDevAPIError as e:
            log.error("onedev_memberships_failed", stage=STAGE, url=self.url, user=me.name, error=str(e))
            return []

        orgs: list[str] = []
        for membership in memberships:
            try:
                group = await client.get_group(membership.group_id)
            except OneDevAPIError as e:
                log.error("onedev_group_failed", stage=STAGE, url=self.url, group_id=membership.group_id, error=str(e))
                continue
            if group.name not in self.exclude_orgs:
                orgs.append(group.name)
        return orgs

    async def _organization_repositories(self, client: OneDevAPI, org: str) -> list[Repository]:
        projects = await list_all_projects(client, queries.children_of(org), self.url)
        candidates = [p for p in projects if not (self.source.filter.exclude_forks and p.is_fork)]

        async def describe(project: Project) -> Repository | None:
            return await self._describe(client, project, owner=org, check_activity=False)

        results = await run_bounded(candidates, describe, self.source.workers)
        return [repo for repo in results if repo is not None]

    async def _describe(
        self,
        client: OneDevAPI,
        project: Project,
        owner: str,
        check_activity: bool,
    ) -> Repository | None:
        urls = await fetch_clone_urls(client, project, self.url)
        if urls is None:
            return None

        branch = await resolve_default_branch(client, project, self.url)

        if check_activity:
            active_at = await last_activity(client, project, branch, self.url)
            if self._is_stale(active_at):
                log.debug("onedev_project_inactive", stage=STAGE, url=self.url, project=project.name)
                return None

        return Repository(
            name=project.name,
            url=urls.http,
            ssh_url=urls.ssh,
            token=self.token,
            default_branch=branch,
            owner=owner,
            hoster=self.hoster,
            description=project.description,
            origin=self.source,
        )

    def _is_stale(self, active_at: datetime | None) -> bool:
        if active_at is None or not self.max_age:
            return False
        return datetime.now(timezone.utc) - active_at > self.max_age


async def discover(
    sources: Iterable[OneDevSourceConfig],
    client_factory: ClientFactory = create_client,
) -> tuple[list[Repository], bool]:
    """Discover repositories across all configured OneDev sources.

    Args:
        sources: Configured OneDev source entries
        client_factory: Builds a client from a base URL and credentials

    Returns:
        The discovered repositories in discovery order, and whether at least
        one source entry was processed
    """
    attempted = False
    repos: list[Repository] = []

    for config in sources:
        attempted = True
        repos.extend(await SourceDiscovery(config, client_factory).run())

    return repos, attempted
