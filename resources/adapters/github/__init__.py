"""GitHub adapter resource package."""

from resources.adapters.github.adapter import (
    GithubAdapter,
    GithubAdapterDependencyError,
    GithubAdapterError,
    GithubAdapterNotFoundError,
    RepositoryMetadata,
    SocialAccount,
)
from resources.adapters.github.component import RESOURCE_COMPONENT_ID
from resources.adapters.github.config import (
    GithubAdapterSettings,
    resolve_github_adapter_settings,
)
from resources.adapters.github.github_adapter import HttpGithubAdapter

__all__ = [
    "GithubAdapter",
    "GithubAdapterDependencyError",
    "GithubAdapterError",
    "GithubAdapterNotFoundError",
    "GithubAdapterSettings",
    "HttpGithubAdapter",
    "RESOURCE_COMPONENT_ID",
    "RepositoryMetadata",
    "SocialAccount",
    "resolve_github_adapter_settings",
]
