"""
Domain models for repo-keeper.

The Repository descriptor is what connectors hand to the mirroring
transport. The remaining classes are the normalized form of OneDev REST
payloads, converted by the provider layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class Repository:
    """A discovered repository, ready to be cloned or mirrored.

    Attributes:
        name: Repository (project) name
        url: HTTP clone URL
        ssh_url: SSH clone URL
        token: Token carried along for authenticated cloning
        default_branch: Default branch name
        owner: Owning user or organization name
        hoster: Host part of the source base URL
        description: Human description of the project
        origin: Source configuration the repository was discovered from
    """

    name: str
    url: str
    ssh_url: str
    token: str
    default_branch: str
    owner: str
    hoster: str
    description: str = ""
    origin: Any = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict[str, str]:
        """Serialize without credentials or the origin back-reference."""
        return {
            "name": self.name,
            "url": self.url,
            "ssh_url": self.ssh_url,
            "default_branch": self.default_branch,
            "owner": self.owner,
            "hoster": self.hoster,
            "description": self.description,
        }


@dataclass
class Project:
    """A OneDev project.

    ``parent_id`` places the project under a namespace project;
    a non-zero ``forked_from_id`` marks a fork.
    """

    id: int
    name: str
    description: str = ""
    parent_id: int = 0
    forked_from_id: int = 0

    @property
    def is_fork(self) -> bool:
        return self.forked_from_id != 0


@dataclass
class User:
    """A OneDev user account."""

    id: int
    name: str
    full_name: str = ""


@dataclass
class Group:
    """A OneDev group."""

    id: int
    name: str


@dataclass
class Membership:
    """Links a user to a group."""

    id: int
    user_id: int
    group_id: int


@dataclass
class CloneUrls:
    """HTTP and SSH clone URLs of a project."""

    http: str
    ssh: str = ""


@dataclass
class Commit:
    """A commit; only the author timestamp is of interest here."""

    hash: str
    author_when: int
    """Author timestamp in microseconds since the epoch."""

    @property
    def authored_at(self) -> datetime:
        return datetime.fromtimestamp(self.author_when / 1_000_000, tz=timezone.utc)
