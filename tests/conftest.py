"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from repo_keeper.config.settings import OneDevDestinationConfig, OneDevSourceConfig
from repo_keeper.exceptions import OneDevAPIError
from repo_keeper.models.domain import CloneUrls, Commit, Group, Membership, Project, User
from repo_keeper.providers import queries
from repo_keeper.providers.auth import Credentials
from repo_keeper.providers.base import OneDevAPI


def micros_ago(days: float) -> int:
    """Epoch timestamp in microseconds, ``days`` before now."""
    moment = datetime.now(timezone.utc) - timedelta(days=days)
    return int(moment.timestamp() * 1_000_000)


class FakeOneDev(OneDevAPI):
    """In-memory OneDev backend.

    Project queries are answered from ``query_results`` keyed by the exact
    query string. Missing clone URLs, branches, groups and users raise
    OneDevAPIError like a failing server would.
    """

    def __init__(self, me: User | None = None) -> None:
        self.me = me
        self.query_results: dict[str, list[Project]] = {}
        self.failing_queries: set[str] = set()
        self.clone_urls: dict[int, CloneUrls] = {}
        self.branches: dict[int, str] = {}
        self.commits: dict[int, Commit] = {}
        self.failing_commits: set[int] = set()
        self.memberships: list[Membership] | None = []
        self.groups: dict[int, Group] = {}
        self.fail_create = False
        self.created: list[dict] = []
        self.calls: list[tuple] = []
        self.credentials: list[Credentials] = []
        self.urls: list[str] = []
        self._next_id = 1000

    def add_project(
        self,
        query: str,
        project: Project,
        branch: str | None = "main",
        last_commit_days: float | None = None,
    ) -> Project:
        self.query_results.setdefault(query, []).append(project)
        self.clone_urls[project.id] = CloneUrls(
            http=f"https://onedev.test/{project.name}",
            ssh=f"ssh://onedev.test:6611/{project.name}",
        )
        if branch is not None:
            self.branches[project.id] = branch
        if last_commit_days is not None:
            self.commits[project.id] = Commit(hash=f"c{project.id}", author_when=micros_ago(last_commit_days))
        return project

    def factory(self, url: str, credentials: Credentials) -> "FakeOneDev":
        self.urls.append(url)
        self.credentials.append(credentials)
        return self

    async def who_am_i(self) -> User:
        self.calls.append(("who_am_i",))
        if self.me is None:
            raise OneDevAPIError("Unauthorized", status_code=401)
        return self.me

    async def list_projects(self, query: str, offset: int = 0, count: int = 100) -> list[Project]:
        self.calls.append(("list_projects", query, offset, count))
        if query in self.failing_queries:
            raise OneDevAPIError("search failed", status_code=500)
        return list(self.query_results.get(query, [])[offset : offset + count])

    async def get_clone_urls(self, project_id: int) -> CloneUrls:
        self.calls.append(("get_clone_urls", project_id))
        if project_id not in self.clone_urls:
            raise OneDevAPIError("not found", status_code=404)
        return self.clone_urls[project_id]

    async def get_default_branch(self, project_id: int) -> str:
        self.calls.append(("get_default_branch", project_id))
        if project_id not in self.branches:
            raise OneDevAPIError("no default branch", status_code=404)
        return self.branches[project_id]

    async def list_commits(self, project_id: int, query: str, count: int = 1) -> list[str]:
        self.calls.append(("list_commits", project_id, query, count))
        if project_id not in self.commits:
            return []
        return [self.commits[project_id].hash]

    async def get_commit(self, project_id: int, commit_id: str) -> Commit:
        self.calls.append(("get_commit", project_id, commit_id))
        if project_id in self.failing_commits:
            raise OneDevAPIError("commit lookup failed", status_code=500)
        return self.commits[project_id]

    async def list_memberships(self, user_id: int) -> list[Membership]:
        self.calls.append(("list_memberships", user_id))
        if self.memberships is None:
            raise OneDevAPIError("forbidden", status_code=403)
        return [m for m in self.memberships if m.user_id == user_id]

    async def get_group(self, group_id: int) -> Group:
        self.calls.append(("get_group", group_id))
        if group_id not in self.groups:
            raise OneDevAPIError("group not found", status_code=404)
        return self.groups[group_id]

    async def create_project(self, name: str, parent_id: int = 0, code_management: bool = True) -> int:
        self.calls.append(("create_project", name, parent_id, code_management))
        if self.fail_create:
            raise OneDevAPIError("create failed", status_code=500)
        self._next_id += 1
        project = Project(id=self._next_id, name=name, parent_id=parent_id)
        self.created.append({"name": name, "parent_id": parent_id, "code_management": code_management})
        if self.me is not None:
            self.add_project(queries.name_is_child_of(name, self.me.name), project)
        else:
            self.clone_urls[project.id] = CloneUrls(http=f"https://onedev.test/{name}")
        return project.id

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)


@pytest.fixture
def alice() -> User:
    return User(id=7, name="alice")


@pytest.fixture
def fake(alice: User) -> FakeOneDev:
    return FakeOneDev(me=alice)


@pytest.fixture
def source() -> OneDevSourceConfig:
    return OneDevSourceConfig(url="https://onedev.test/", token="tok-123")


@pytest.fixture
def destination() -> OneDevDestinationConfig:
    return OneDevDestinationConfig(url="https://mirror.test/", token="dest-token")
