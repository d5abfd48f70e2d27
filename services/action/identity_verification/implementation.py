"""Concrete Identity Verification Service implementation."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from packages.labeler_shared.envelope import (
    Envelope,
    EnvelopeMeta,
    failure,
    success,
    validate_meta,
)
from packages.labeler_shared.errors import (
    ErrorDetail,
    codes,
    lookup_failure,
    policy_error,
    validation_error,
)
from packages.labeler_shared.logging import get_logger, public_api_instrumented
from resources.adapters.bluesky import BlueskyAdapter
from resources.adapters.github import GithubAdapter, GithubAdapterNotFoundError
from services.action.identity_verification.component import SERVICE_COMPONENT_ID
from services.action.identity_verification.config import (
    IdentityVerificationSettings,
)
from services.action.identity_verification.domain import VerificationClaim
from services.action.identity_verification.service import (
    IdentityVerificationService,
)
from services.action.identity_verification.validation import VerifyRequest

_LOGGER = get_logger(__name__)


class DefaultIdentityVerificationService(IdentityVerificationService):
    """Bidirectional attestation between a GitHub profile and a Bluesky DID.

    The claimed GitHub profile must list a Bluesky account, and that account
    must resolve to the DID that sent the claim. Lookups are not retried here;
    the adapters own retry policy.
    """

    def __init__(
        self,
        *,
        settings: IdentityVerificationSettings,
        github: GithubAdapter,
        bluesky: BlueskyAdapter,
    ) -> None:
        self._settings = settings
        self._github = github
        self._bluesky = bluesky

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=("claimed_handle", "sender_did"),
    )
    def verify(
        self,
        *,
        meta: EnvelopeMeta,
        claimed_handle: str,
        sender_did: str,
    ) -> Envelope[VerificationClaim]:
        """Verify that ``sender_did`` is the Bluesky account ``claimed_handle`` lists."""
        request, errors = self._validate_request(
            meta=meta, claimed_handle=claimed_handle, sender_did=sender_did
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None

        try:
            accounts = self._github.list_social_accounts(
                username=request.claimed_handle
            )
        except GithubAdapterNotFoundError:
            return self._not_linked(meta=meta, handle=request.claimed_handle)
        except Exception as exc:  # noqa: BLE001
            return self._lookup_failure(meta=meta, what="github profile", exc=exc)

        actor = self._bluesky_actor(
            [(account.provider, account.url) for account in accounts]
        )
        if actor is None:
            return self._not_linked(meta=meta, handle=request.claimed_handle)

        try:
            profile = self._bluesky.get_profile(actor=actor)
        except Exception as exc:  # noqa: BLE001
            return self._lookup_failure(meta=meta, what="bluesky profile", exc=exc)

        if profile.did != request.sender_did:
            _LOGGER.info(
                "GitHub %s lists %s, which is not the sender %s",
                request.claimed_handle,
                profile.did,
                request.sender_did,
            )
            return failure(
                meta=meta,
                errors=[
                    policy_error(
                        "bluesky account listed on the GitHub profile is not the sender",
                        code=codes.IDENTITY_MISMATCH,
                        metadata={
                            "claimed_handle": request.claimed_handle,
                            "listed_handle": profile.handle,
                        },
                    )
                ],
            )

        return success(
            meta=meta,
            payload=VerificationClaim(
                claimed_handle=request.claimed_handle,
                subject=request.sender_did,
                bluesky_handle=profile.handle,
                verified_at=datetime.now(UTC),
            ),
        )

    def _bluesky_actor(self, accounts: list[tuple[str, str]]) -> str | None:
        """Return the actor of the first Bluesky entry, stripped of its URL prefix."""
        for provider, url in accounts:
            if provider.strip().lower() != self._settings.social_provider:
                continue
            actor = url.strip().removeprefix(self._settings.profile_url_prefix)
            actor = actor.strip("/")
            if actor:
                return actor
        return None

    def _not_linked(self, *, meta: EnvelopeMeta, handle: str) -> Envelope[Any]:
        return failure(
            meta=meta,
            errors=[
                policy_error(
                    "GitHub profile does not list a Bluesky account",
                    code=codes.NOT_LINKED,
                    metadata={"claimed_handle": handle},
                )
            ],
        )

    def _lookup_failure(
        self, *, meta: EnvelopeMeta, what: str, exc: Exception
    ) -> Envelope[Any]:
        _LOGGER.warning(
            "%s lookup failed: exception_type=%s",
            what,
            type(exc).__name__,
            exc_info=exc,
        )
        return failure(
            meta=meta,
            errors=[
                lookup_failure(
                    f"{what} lookup failed",
                    metadata={"exception_type": type(exc).__name__},
                )
            ],
        )

    def _validate_request(
        self,
        *,
        meta: EnvelopeMeta,
        claimed_handle: str,
        sender_did: str,
    ) -> tuple[VerifyRequest | None, list[ErrorDetail]]:
        """Validate metadata, mapping a bad handle to ``MALFORMED_INPUT``."""
        errors = validate_meta(meta)
        if errors:
            return None, errors
        try:
            request = VerifyRequest.model_validate(
                {"claimed_handle": claimed_handle, "sender_did": sender_did}
            )
        except ValidationError as exc:
            details: list[ErrorDetail] = []
            for err in exc.errors():
                field = ".".join(str(p) for p in err["loc"])
                details.append(
                    validation_error(
                        f"request validation failed: {err['msg']}",
                        code=(
                            codes.MALFORMED_INPUT
                            if field == "claimed_handle"
                            else codes.INVALID_ARGUMENT
                        ),
                        metadata={"field": field},
                    )
                )
            return None, details
        return request, []
