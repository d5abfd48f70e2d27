"""Behavior tests for Entitlement Service ownership and contribution policy."""

from __future__ import annotations

from packages.labeler_shared.envelope import EnvelopeKind, new_meta
from packages.labeler_shared.errors import codes
from resources.adapters.github import (
    GithubAdapterDependencyError,
    GithubAdapterNotFoundError,
    RepositoryMetadata,
)
from services.action.entitlement.domain import LABEL_IDENTIFIER_TOO_LONG, GrantReason
from services.action.entitlement.implementation import DefaultEntitlementService


class _FakeGithubAdapter:
    """GitHub double with canned merge counts and repository metadata."""

    def __init__(self) -> None:
        self.merged: dict[tuple[str, str], int] = {}
        self.repositories: dict[str, RepositoryMetadata] = {}
        self.search_error: Exception | None = None
        self.search_calls: list[tuple[str, str]] = []

    def count_merged_pull_requests(self, *, repository: str, author: str) -> int:
        self.search_calls.append((repository, author))
        if self.search_error is not None:
            raise self.search_error
        return self.merged.get((repository, author), 0)

    def get_repository(self, *, repository: str) -> RepositoryMetadata:
        if repository not in self.repositories:
            raise GithubAdapterNotFoundError(repository)
        return self.repositories[repository]


def _meta():
    return new_meta(
        kind=EnvelopeKind.COMMAND, source="test", principal="did:plc:alice"
    )


def _service() -> tuple[DefaultEntitlementService, _FakeGithubAdapter]:
    github = _FakeGithubAdapter()
    github.repositories["alice/cool-repo"] = RepositoryMetadata(
        full_name="alice/cool-repo",
        description="A cool repo",
        html_url="https://github.com/alice/cool-repo",
    )
    github.repositories["bob/cool-repo"] = RepositoryMetadata(
        full_name="bob/cool-repo",
        description="",
        html_url="https://github.com/bob/cool-repo",
    )
    return DefaultEntitlementService(github=github), github


def test_owner_is_granted_without_contribution_lookup() -> None:
    """Owning the repository should grant with no pull-request search."""
    service, github = _service()

    result = service.evaluate(
        meta=_meta(), verified_handle="alice", claim="alice/cool-repo"
    )

    assert result.ok
    assert result.payload is not None
    assert result.payload.reason is GrantReason.OWNERSHIP
    assert result.payload.identifier == "alice-cool-repo"
    assert result.payload.label_name == "alice/cool-repo"
    assert result.payload.label_description == (
        "A cool repo\nhttps://github.com/alice/cool-repo"
    )
    assert github.search_calls == []


def test_ownership_comparison_ignores_case() -> None:
    """GitHub logins are case-insensitive."""
    service, github = _service()
    github.repositories["Alice/cool-repo"] = RepositoryMetadata(
        full_name="alice/cool-repo", html_url="https://github.com/alice/cool-repo"
    )

    result = service.evaluate(
        meta=_meta(), verified_handle="alice", claim="Alice/cool-repo"
    )

    assert result.ok
    assert result.payload is not None
    assert result.payload.reason is GrantReason.OWNERSHIP
    assert result.payload.label_name == "alice/cool-repo"
    assert github.search_calls == []


def test_contributor_with_merged_pr_is_granted() -> None:
    """A merged pull request should grant through contribution."""
    service, github = _service()
    github.merged[("bob/cool-repo", "alice")] = 3

    result = service.evaluate(
        meta=_meta(), verified_handle="alice", claim="bob/cool-repo"
    )

    assert result.ok
    assert result.payload is not None
    assert result.payload.reason is GrantReason.CONTRIBUTION
    assert result.payload.merged_pull_requests == 3
    assert result.payload.label_description == "\nhttps://github.com/bob/cool-repo"


def test_no_merged_pr_is_no_contribution() -> None:
    """Zero merged pull requests should deny with NO_CONTRIBUTION."""
    service, github = _service()

    result = service.evaluate(
        meta=_meta(), verified_handle="alice", claim="bob/cool-repo"
    )

    assert result.error_codes == [codes.NO_CONTRIBUTION]
    assert github.search_calls == [("bob/cool-repo", "alice")]


def test_search_failure_is_lookup_failure() -> None:
    """A failed search should surface as LOOKUP_FAILURE."""
    service, github = _service()
    github.search_error = GithubAdapterDependencyError("rate limited")

    result = service.evaluate(
        meta=_meta(), verified_handle="alice", claim="bob/cool-repo"
    )

    assert result.error_codes == [codes.LOOKUP_FAILURE]


def test_metadata_failure_is_lookup_failure() -> None:
    """A grant without repository metadata is not returned."""
    service, _ = _service()

    result = service.evaluate(
        meta=_meta(), verified_handle="alice", claim="alice/missing"
    )

    assert result.error_codes == [codes.LOOKUP_FAILURE]


def test_malformed_claim_is_rejected_before_lookups() -> None:
    """A claim without ``owner/name`` shape should be MALFORMED_INPUT."""
    service, github = _service()

    for claim in ("cool-repo", "bob/", "/cool-repo", "bob/cool repo"):
        result = service.evaluate(meta=_meta(), verified_handle="alice", claim=claim)
        assert result.error_codes == [codes.MALFORMED_INPUT], claim

    assert github.search_calls == []


def test_digits_in_repository_name_are_spelled_out() -> None:
    """Identifiers derived from names with digits stay in the label alphabet."""
    service, github = _service()
    github.repositories["alice/repo2"] = RepositoryMetadata(
        full_name="alice/repo2", html_url="https://github.com/alice/repo2"
    )

    result = service.evaluate(meta=_meta(), verified_handle="alice", claim="alice/repo2")

    assert result.payload is not None
    assert result.payload.identifier == "alice-repotwo"


def test_overlong_identifier_is_malformed_before_lookups() -> None:
    """Claims expanding past 100 identifier characters never reach GitHub."""
    service, github = _service()
    claim = "a" * 39 + "/" + "r0" * 50

    result = service.evaluate(meta=_meta(), verified_handle="alice", claim=claim)

    assert result.error_codes == [codes.MALFORMED_INPUT]
    assert result.errors[0].metadata["reason"] == LABEL_IDENTIFIER_TOO_LONG
    assert result.errors[0].metadata["max_length"] == "100"
    assert github.search_calls == []


def test_overlong_canonical_name_is_malformed() -> None:
    """A renamed repository whose canonical name is too long is refused."""
    service, github = _service()
    long_name = "alice/" + "r0" * 50
    github.repositories["alice/short"] = RepositoryMetadata(
        full_name=long_name, html_url=f"https://github.com/{long_name}"
    )

    result = service.evaluate(meta=_meta(), verified_handle="alice", claim="alice/short")

    assert result.error_codes == [codes.MALFORMED_INPUT]
    assert result.errors[0].metadata["repository"] == long_name
