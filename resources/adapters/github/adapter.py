"""Transport-agnostic GitHub adapter protocol and DTOs."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict


class GithubAdapterError(Exception):
    """Base exception for GitHub adapter failures."""


class GithubAdapterDependencyError(GithubAdapterError):
    """Dependency-level adapter failure (network/upstream unavailable)."""


class GithubAdapterNotFoundError(GithubAdapterError):
    """Requested GitHub user or repository does not exist."""


class SocialAccount(BaseModel):
    """One social account entry listed on a GitHub profile."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    provider: str
    url: str


class RepositoryMetadata(BaseModel):
    """Public metadata of one GitHub repository."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    full_name: str
    description: str = ""
    html_url: str


@runtime_checkable
class GithubAdapter(Protocol):
    """Protocol for the GitHub lookups used by identity and entitlement checks."""

    def list_social_accounts(self, *, username: str) -> list[SocialAccount]:
        """Return social accounts publicly listed on one GitHub profile."""

    def count_merged_pull_requests(self, *, repository: str, author: str) -> int:
        """Return how many merged pull requests ``author`` has in ``repository``."""

    def get_repository(self, *, repository: str) -> RepositoryMetadata:
        """Return metadata for one ``owner/name`` repository."""
