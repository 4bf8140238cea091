"""
Abstract base class for the OneDev remote capability.

Connectors depend only on this interface; the REST implementation lives in
onedev_rest and tests substitute an in-memory fake.
"""

from abc import ABC, abstractmethod
from typing import Any

from repo_keeper.models.domain import CloneUrls, Commit, Group, Membership, Project, User


class OneDevAPI(ABC):
    """Remote operations the OneDev connector needs.

    Every method performs exactly one request/response exchange and raises
    OneDevAPIError on failure. Implementations are async context managers so
    that callers scope the underlying connection to one pipeline run.
    """

    async def __aenter__(self) -> "OneDevAPI":
        return self

    async def __aexit__(self, *args: Any) -> None:
        return None

    @abstractmethod
    async def who_am_i(self) -> User:
        """Return the authenticated user.

        Raises:
            OneDevAPIError: If the request fails (e.g. anonymous access).
        """
        pass

    @abstractmethod
    async def list_projects(self, query: str, offset: int = 0, count: int = 100) -> list[Project]:
        """List projects matching a OneDev project query.

        Args:
            query: Query in OneDev's search grammar (empty lists all visible
                projects). Built with the helpers in providers.queries.
            offset: Index of the first project to return
            count: Maximum number of projects to return

        Returns:
            One page of projects; an empty list past the last page.
        """
        pass

    @abstractmethod
    async def get_clone_urls(self, project_id: int) -> CloneUrls:
        """Return the HTTP and SSH clone URLs of a project."""
        pass

    @abstractmethod
    async def get_default_branch(self, project_id: int) -> str:
        """Return the default branch name of a project."""
        pass

    @abstractmethod
    async def list_commits(self, project_id: int, query: str, count: int = 1) -> list[str]:
        """List commit hashes matching a commit query, newest first."""
        pass

    @abstractmethod
    async def get_commit(self, project_id: int, commit_id: str) -> Commit:
        """Return a single commit."""
        pass

    @abstractmethod
    async def list_memberships(self, user_id: int) -> list[Membership]:
        """Return the group memberships of a user."""
        pass

    @abstractmethod
    async def get_group(self, group_id: int) -> Group:
        """Return a group by id."""
        pass

    @abstractmethod
    async def create_project(self, name: str, parent_id: int = 0, code_management: bool = True) -> int:
        """Create a project and return its id.

        Args:
            name: Project name
            parent_id: Id of the namespace project; 0 creates a root project
            code_management: Whether the project hosts a git repository
        """
        pass
