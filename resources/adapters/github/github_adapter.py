"""GitHub adapter implementation over the REST API."""

from __future__ import annotations

from collections.abc import Callable
from time import sleep
from typing import Any
from urllib.parse import quote

import httpx

from packages.labeler_shared.http import (
    HttpClient,
    HttpJsonDecodeError,
    HttpRequestError,
    HttpStatusError,
    with_retries,
)
from packages.labeler_shared.logging import get_logger, public_api_instrumented
from resources.adapters.github.adapter import (
    GithubAdapter,
    GithubAdapterDependencyError,
    GithubAdapterNotFoundError,
    RepositoryMetadata,
    SocialAccount,
)
from resources.adapters.github.component import RESOURCE_COMPONENT_ID
from resources.adapters.github.config import GithubAdapterSettings

_LOGGER = get_logger(__name__)


class HttpGithubAdapter(GithubAdapter):
    """GitHub adapter backed by ``api.github.com`` REST endpoints."""

    def __init__(
        self,
        *,
        settings: GithubAdapterSettings,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._retry_policy = settings.retry_policy()
        self._sleep: Callable[[float], None] = sleep
        self._client = HttpClient(
            base_url=settings.base_url,
            timeout_seconds=settings.timeout_seconds,
            headers=_headers(settings),
            transport=transport,
        )

    def close(self) -> None:
        """Release pooled HTTP connections."""
        self._client.close()

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=RESOURCE_COMPONENT_ID,
        id_fields=("username",),
    )
    def list_social_accounts(self, *, username: str) -> list[SocialAccount]:
        """Return social accounts publicly listed on one GitHub profile."""
        login = username.strip()
        path = f"/users/{quote(login, safe='')}/social_accounts"
        payload = self._get_json(path, what=f"social accounts for '{login}'")
        if not isinstance(payload, list):
            raise GithubAdapterDependencyError(
                "github social accounts response must be a JSON array"
            )
        accounts: list[SocialAccount] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            accounts.append(
                SocialAccount(
                    provider=str(item.get("provider", "")),
                    url=str(item.get("url", "")),
                )
            )
        return accounts

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=RESOURCE_COMPONENT_ID,
        id_fields=("repository", "author"),
    )
    def count_merged_pull_requests(self, *, repository: str, author: str) -> int:
        """Return how many merged pull requests ``author`` has in ``repository``."""
        query = f"repo:{repository.strip()} author:{author.strip()} is:merged"
        payload = self._get_json(
            "/search/issues",
            what=f"merged pull requests in '{repository}'",
            params={"q": query, "per_page": "1"},
        )
        if not isinstance(payload, dict):
            raise GithubAdapterDependencyError(
                "github search response must be a JSON object"
            )
        total = payload.get("total_count")
        if isinstance(total, int):
            return total
        items = payload.get("items")
        return len(items) if isinstance(items, list) else 0

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=RESOURCE_COMPONENT_ID,
        id_fields=("repository",),
    )
    def get_repository(self, *, repository: str) -> RepositoryMetadata:
        """Return metadata for one ``owner/name`` repository."""
        owner, _, name = repository.strip().partition("/")
        path = f"/repos/{quote(owner, safe='')}/{quote(name, safe='')}"
        payload = self._get_json(path, what=f"repository '{repository}'")
        if not isinstance(payload, dict):
            raise GithubAdapterDependencyError(
                "github repository response must be a JSON object"
            )
        return RepositoryMetadata(
            full_name=str(payload.get("full_name") or repository),
            description=str(payload.get("description") or ""),
            html_url=str(payload.get("html_url") or ""),
        )

    def _get_json(
        self,
        path: str,
        *,
        what: str,
        params: dict[str, str] | None = None,
    ) -> Any:
        """GET one JSON document with bounded retries and typed failures."""
        try:
            return with_retries(
                lambda: self._client.get_json(path, params=params),
                policy=self._retry_policy,
                sleep_fn=self._sleep,
            )
        except HttpStatusError as exc:
            if exc.status_code == 404:
                raise GithubAdapterNotFoundError(f"github {what} not found") from None
            raise GithubAdapterDependencyError(
                f"github lookup of {what} failed with status {exc.status_code}"
            ) from None
        except HttpRequestError as exc:
            raise GithubAdapterDependencyError(
                str(exc) or f"github lookup of {what} unavailable"
            ) from None
        except HttpJsonDecodeError as exc:
            raise GithubAdapterDependencyError(
                f"github response JSON invalid: {exc}"
            ) from None


def _headers(settings: GithubAdapterSettings) -> dict[str, str]:
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": settings.api_version,
        "User-Agent": "github-labeler",
    }
    if settings.token:
        headers["Authorization"] = f"Bearer {settings.token}"
    return headers
