"""Domain models for repo-keeper."""

from repo_keeper.models.domain import (
    CloneUrls,
    Commit,
    Group,
    Membership,
    Project,
    Repository,
    User,
)

__all__ = [
    "CloneUrls",
    "Commit",
    "Group",
    "Membership",
    "Project",
    "Repository",
    "User",
]
