"""OneDev provider implementation using direct REST API calls."""

from collections.abc import Callable
from typing import Any, TypeVar

import httpx
import structlog

from repo_keeper.enums import AuthMode
from repo_keeper.exceptions import OneDevAPIError
from repo_keeper.models.domain import CloneUrls, Commit, Group, Membership, Project, User
from repo_keeper.providers.auth import Credentials
from repo_keeper.providers.base import OneDevAPI

log = structlog.get_logger(__name__)

T = TypeVar("T")

MALFORMED_PAYLOAD = (AttributeError, KeyError, TypeError, ValueError)


def _required(data: dict[str, Any], key: str) -> Any:
    """Return data[key], treating an explicit null like a missing field."""
    value = data[key]
    if value is None:
        raise KeyError(key)
    return value


class OneDevRestProvider(OneDevAPI):
    """OneDev implementation using the ``/~api`` REST endpoints."""

    def __init__(
        self,
        base_url: str,
        credentials: Credentials,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize OneDev provider.

        Args:
            base_url: OneDev base URL (e.g., https://code.onedev.io/)
            credentials: Selected authentication material
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.api_base = f"{self.base_url}/~api"
        self.credentials = credentials
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the HTTP client with the selected authentication."""
        headers = {"Accept": "application/json"}
        auth: httpx.Auth | None = None

        if self.credentials.mode is AuthMode.TOKEN:
            headers["Authorization"] = f"Bearer {self.credentials.token}"
        elif self.credentials.mode is AuthMode.BASIC:
            auth = httpx.BasicAuth(self.credentials.username, self.credentials.password)

        self._client = httpx.AsyncClient(
            base_url=self.api_base,
            headers=headers,
            auth=auth,
            timeout=self.timeout,
            transport=self._transport,
        )
        log.debug("onedev_client_created", base_url=self.base_url, auth=str(self.credentials.mode))

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "OneDevRestProvider":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.disconnect()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send one request and translate every failure into OneDevAPIError."""
        if self._client is None:
            await self.connect()
        assert self._client is not None

        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise OneDevAPIError(
                f"OneDev request {method} {path} failed",
                status_code=e.response.status_code,
                response_text=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise OneDevAPIError(f"OneDev request {method} {path} failed: {e}") from e
        return response

    async def _get_json(self, path: str, **kwargs: Any) -> Any:
        response = await self._request("GET", path, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise OneDevAPIError(
                f"OneDev returned invalid JSON for GET {path}",
                status_code=response.status_code,
                response_text=response.text,
            ) from e

    async def _get_parsed(self, path: str, parse: Callable[[Any], T], **kwargs: Any) -> T:
        """GET ``path`` and turn the JSON payload into a domain object.

        A payload of the wrong shape (null body, missing or null fields)
        is reported as OneDevAPIError like any other failed request.
        """
        data = await self._get_json(path, **kwargs)
        try:
            return parse(data)
        except MALFORMED_PAYLOAD as e:
            raise OneDevAPIError(
                f"OneDev returned an unexpected payload for GET {path}: {e!r}",
                response_text=repr(data),
            ) from e

    async def who_am_i(self) -> User:
        return await self._get_parsed("/users/me", self._parse_user)

    async def list_projects(self, query: str, offset: int = 0, count: int = 100) -> list[Project]:
        log.debug("list_projects", query=query, offset=offset, count=count)
        return await self._get_parsed(
            "/projects",
            lambda data: [self._parse_project(item) for item in data],
            params={"query": query, "offset": offset, "count": count},
        )

    async def get_clone_urls(self, project_id: int) -> CloneUrls:
        return await self._get_parsed(f"/projects/{project_id}/clone-url", self._parse_clone_urls)

    async def get_default_branch(self, project_id: int) -> str:
        response = await self._request("GET", f"/repositories/{project_id}/default-branch")
        # Some OneDev versions answer with a bare string instead of JSON
        try:
            branch = response.json()
        except ValueError:
            branch = response.text
        if not isinstance(branch, str) or not branch.strip():
            raise OneDevAPIError(f"Project {project_id} has no default branch")
        return branch.strip()

    async def list_commits(self, project_id: int, query: str, count: int = 1) -> list[str]:
        return await self._get_parsed(
            f"/repositories/{project_id}/commits",
            lambda data: [str(commit_id) for commit_id in data],
            params={"query": query, "count": count},
        )

    async def get_commit(self, project_id: int, commit_id: str) -> Commit:
        return await self._get_parsed(
            f"/repositories/{project_id}/commits/{commit_id}",
            lambda data: self._parse_commit(data, commit_id),
        )

    async def list_memberships(self, user_id: int) -> list[Membership]:
        return await self._get_parsed(
            f"/users/{user_id}/memberships",
            lambda data: [self._parse_membership(item) for item in data],
        )

    async def get_group(self, group_id: int) -> Group:
        return await self._get_parsed(f"/groups/{group_id}", self._parse_group)

    async def create_project(self, name: str, parent_id: int = 0, code_management: bool = True) -> int:
        log.info("create_project", name=name, parent_id=parent_id)

        payload: dict[str, Any] = {"name": name, "codeManagement": code_management}
        if parent_id:
            payload["parentId"] = parent_id

        response = await self._request("POST", "/projects", json=payload)
        try:
            return int(response.json())
        except (TypeError, ValueError) as e:
            raise OneDevAPIError(
                "OneDev returned no project id",
                status_code=response.status_code,
                response_text=response.text,
            ) from e

    def _parse_project(self, data: dict[str, Any]) -> Project:
        """Parse a OneDev project payload.

        Field mappings:
            - data["id"] -> id
            - data["name"] -> name
            - data["description"] -> description (empty string if null)
            - data["parentId"] -> parent_id (0 for root projects)
            - data["forkedFromId"] -> forked_from_id (0 when not a fork)
        """
        return Project(
            id=int(_required(data, "id")),
            name=str(_required(data, "name")),
            description=data.get("description") or "",
            parent_id=data.get("parentId") or 0,
            forked_from_id=data.get("forkedFromId") or 0,
        )

    def _parse_user(self, data: dict[str, Any]) -> User:
        return User(
            id=int(_required(data, "id")),
            name=str(_required(data, "name")),
            full_name=data.get("fullName") or "",
        )

    def _parse_clone_urls(self, data: dict[str, Any]) -> CloneUrls:
        return CloneUrls(http=str(_required(data, "http")), ssh=data.get("ssh") or "")

    def _parse_commit(self, data: dict[str, Any], commit_id: str) -> Commit:
        """Parse a OneDev commit payload.

        Field mappings:
            - data["hash"] -> hash (the requested id if absent)
            - data["author"]["when"] -> author_when (required; microseconds)
        """
        when = _required(_required(data, "author"), "when")
        return Commit(hash=data.get("hash") or commit_id, author_when=int(when))

    def _parse_membership(self, data: dict[str, Any]) -> Membership:
        return Membership(
            id=int(_required(data, "id")),
            user_id=int(_required(data, "userId")),
            group_id=int(_required(data, "groupId")),
        )

    def _parse_group(self, data: dict[str, Any]) -> Group:
        return Group(id=int(_required(data, "id")), name=str(_required(data, "name")))
