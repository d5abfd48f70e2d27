"""Concrete Entitlement Service implementation."""

from __future__ import annotations

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
from packages.labeler_shared.label_identifiers import (
    MAX_LABEL_IDENTIFIER_LENGTH,
    is_label_identifier,
    normalize_label_identifier,
)
from packages.labeler_shared.logging import get_logger, public_api_instrumented
from resources.adapters.github import GithubAdapter
from services.action.entitlement.component import SERVICE_COMPONENT_ID
from services.action.entitlement.domain import (
    LABEL_IDENTIFIER_TOO_LONG,
    EntitlementDecision,
    GrantReason,
)
from services.action.entitlement.service import EntitlementService
from services.action.entitlement.validation import EvaluateRequest

_LOGGER = get_logger(__name__)


class DefaultEntitlementService(EntitlementService):
    """Ownership first, then merged pull requests, then repository metadata."""

    def __init__(self, *, github: GithubAdapter) -> None:
        self._github = github

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=("verified_handle", "claim"),
    )
    def evaluate(
        self,
        *,
        meta: EnvelopeMeta,
        verified_handle: str,
        claim: str,
    ) -> Envelope[EntitlementDecision]:
        """Grant on ownership or a merged contribution to ``claim``.

        Owners skip the pull-request search. Logins compare case-insensitively.
        A grant is only returned once repository metadata has been fetched,
        since the label name and description come from it.
        """
        request, errors = self._validate_request(
            meta=meta, verified_handle=verified_handle, claim=claim
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None
        if not is_label_identifier(normalize_label_identifier(request.claim)):
            return self._identifier_too_long(meta=meta, repository=request.claim)

        merged = 0
        if request.owner.casefold() == request.verified_handle.casefold():
            reason = GrantReason.OWNERSHIP
        else:
            try:
                merged = self._github.count_merged_pull_requests(
                    repository=request.claim, author=request.verified_handle
                )
            except Exception as exc:  # noqa: BLE001
                return self._lookup_failure(
                    meta=meta, what="merged pull request search", exc=exc
                )
            if merged < 1:
                return failure(
                    meta=meta,
                    errors=[
                        policy_error(
                            "no merged pull requests to the repository",
                            code=codes.NO_CONTRIBUTION,
                            metadata={
                                "repository": request.claim,
                                "author": request.verified_handle,
                            },
                        )
                    ],
                )
            reason = GrantReason.CONTRIBUTION

        try:
            metadata = self._github.get_repository(repository=request.claim)
        except Exception as exc:  # noqa: BLE001
            return self._lookup_failure(meta=meta, what="repository metadata", exc=exc)

        label_name = metadata.full_name or request.claim
        identifier = normalize_label_identifier(label_name)
        if not is_label_identifier(identifier):
            return self._identifier_too_long(meta=meta, repository=label_name)
        return success(
            meta=meta,
            payload=EntitlementDecision(
                granted=True,
                reason=reason,
                repository=request.claim,
                identifier=identifier,
                label_name=label_name,
                label_description=f"{metadata.description}\n{metadata.html_url}",
                html_url=metadata.html_url,
                merged_pull_requests=merged,
            ),
        )

    def _identifier_too_long(
        self, *, meta: EnvelopeMeta, repository: str
    ) -> Envelope[Any]:
        return failure(
            meta=meta,
            errors=[
                validation_error(
                    "repository name is too long for a label identifier",
                    code=codes.MALFORMED_INPUT,
                    metadata={
                        "field": "claim",
                        "reason": LABEL_IDENTIFIER_TOO_LONG,
                        "repository": repository,
                        "max_length": str(MAX_LABEL_IDENTIFIER_LENGTH),
                    },
                )
            ],
        )

    def _lookup_failure(
        self, *, meta: EnvelopeMeta, what: str, exc: Exception
    ) -> Envelope[Any]:
        _LOGGER.warning(
            "%s failed: exception_type=%s",
            what,
            type(exc).__name__,
            exc_info=exc,
        )
        return failure(
            meta=meta,
            errors=[
                lookup_failure(
                    f"{what} failed",
                    metadata={"exception_type": type(exc).__name__},
                )
            ],
        )

    def _validate_request(
        self,
        *,
        meta: EnvelopeMeta,
        verified_handle: str,
        claim: str,
    ) -> tuple[EvaluateRequest | None, list[ErrorDetail]]:
        """Validate metadata, mapping a bad claim to ``MALFORMED_INPUT``."""
        errors = validate_meta(meta)
        if errors:
            return None, errors
        try:
            request = EvaluateRequest.model_validate(
                {"verified_handle": verified_handle, "claim": claim}
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
                            if field == "claim"
                            else codes.INVALID_ARGUMENT
                        ),
                        metadata={"field": field},
                    )
                )
            return None, details
        return request, []
