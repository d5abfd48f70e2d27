"""Concrete Conversation Phase Service implementation."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ValidationError

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
    exception_to_error,
    lookup_failure,
    not_found_error,
    validation_error,
)
from packages.labeler_shared.logging import get_logger, public_api_instrumented
from resources.substrates.postgres.errors import normalize_postgres_error
from services.state.conversation_phase.component import SERVICE_COMPONENT_ID
from services.state.conversation_phase.config import ConversationPhaseSettings
from services.state.conversation_phase.domain import (
    HealthStatus,
    Phase,
    VerificationState,
)
from services.state.conversation_phase.interfaces import (
    HistoryLoader,
    VerificationStateRepository,
)
from services.state.conversation_phase.resolver import resolve_verified_handle
from services.state.conversation_phase.service import ConversationPhaseService
from services.state.conversation_phase.validation import (
    RecordVerificationRequest,
    ResolveRequest,
)

_LOGGER = get_logger(__name__)


class DefaultConversationPhaseService(ConversationPhaseService):
    """Explicit state first, bounded history scan as a fallback."""

    def __init__(
        self,
        *,
        settings: ConversationPhaseSettings,
        repository: VerificationStateRepository,
        health_probe: Callable[[], bool] | None = None,
    ) -> None:
        self._settings = settings
        self._repository = repository
        self._health_probe = health_probe

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=("subject", "verified_handle"),
    )
    def record_verification(
        self,
        *,
        meta: EnvelopeMeta,
        subject: str,
        verified_handle: str,
    ) -> Envelope[VerificationState]:
        """Transition one subject to ``verified`` with the proven handle."""
        request, errors = self._validate_request(
            meta=meta,
            model=RecordVerificationRequest,
            payload={"subject": subject, "verified_handle": verified_handle},
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, RecordVerificationRequest)

        try:
            state = self._repository.upsert_state(
                subject=request.subject,
                phase=Phase.VERIFIED,
                verified_handle=request.verified_handle,
                verified_at=datetime.now(UTC),
            )
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(
                meta=meta, operation="record_verification", exc=exc
            )
        return success(meta=meta, payload=state)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=("subject",),
    )
    def resolve_verified_handle(
        self,
        *,
        meta: EnvelopeMeta,
        subject: str,
        history_loader: HistoryLoader | None = None,
        bot_did: str = "",
    ) -> Envelope[VerificationState]:
        """Return the verified state for one subject, or ``PHASE_NOT_FOUND``.

        When no state row exists and a ``history_loader`` is supplied, one page
        of conversation history is scanned for a success marker sent by
        ``bot_did`` right after a claim sent by the subject. A handle recovered
        that way is written back so later calls read the row.
        """
        request, errors = self._validate_request(
            meta=meta,
            model=ResolveRequest,
            payload={"subject": subject, "bot_did": bot_did},
        )
        if history_loader is not None and not errors:
            assert isinstance(request, ResolveRequest)
            if request.bot_did == "":
                errors = [
                    validation_error(
                        "bot_did is required to scan history",
                        code=codes.INVALID_ARGUMENT,
                        metadata={"field": "bot_did"},
                    )
                ]
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, ResolveRequest)

        try:
            state = self._repository.get_state(subject=request.subject)
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(
                meta=meta, operation="resolve_verified_handle", exc=exc
            )
        if state is not None and state.phase is Phase.VERIFIED:
            return success(meta=meta, payload=state)

        if history_loader is None or not self._settings.history_fallback_enabled:
            return self._phase_not_found(meta=meta, subject=request.subject)

        try:
            history = history_loader(self._settings.history_page_size)
        except Exception as exc:  # noqa: BLE001
            _LOGGER.warning(
                "history lookup failed: exception_type=%s",
                type(exc).__name__,
                exc_info=exc,
            )
            return failure(
                meta=meta,
                errors=[
                    lookup_failure(
                        "conversation history unavailable",
                        metadata={"exception_type": type(exc).__name__},
                    )
                ],
            )

        handle = resolve_verified_handle(
            history, bot_did=request.bot_did, subject=request.subject
        )
        if handle is None:
            return self._phase_not_found(meta=meta, subject=request.subject)

        recorded = self.record_verification(
            meta=meta, subject=request.subject, verified_handle=handle
        )
        if codes.INVALID_ARGUMENT in recorded.error_codes:
            return self._phase_not_found(meta=meta, subject=request.subject)
        if recorded.ok:
            _LOGGER.info(
                "Recovered verified handle for %s from history", request.subject
            )
        return recorded

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return readiness based on database reachability."""
        errors = validate_meta(meta)
        if errors:
            return failure(meta=meta, errors=errors)
        ready = True if self._health_probe is None else self._health_probe()
        return success(
            meta=meta,
            payload=HealthStatus(
                service_ready=True,
                substrate_ready=ready,
                detail="ok" if ready else "database unreachable",
            ),
        )

    def _phase_not_found(self, *, meta: EnvelopeMeta, subject: str) -> Envelope[Any]:
        return failure(
            meta=meta,
            errors=[
                not_found_error(
                    "no verified GitHub account for subject",
                    code=codes.PHASE_NOT_FOUND,
                    metadata={"subject": subject},
                )
            ],
        )

    def _validate_request(
        self,
        *,
        meta: EnvelopeMeta,
        model: type[BaseModel],
        payload: dict[str, Any],
    ) -> tuple[BaseModel | None, list[ErrorDetail]]:
        """Validate envelope metadata and request payload model."""
        errors = validate_meta(meta)
        if errors:
            return None, errors
        try:
            return model.model_validate(payload), []
        except ValidationError as exc:
            return None, [
                validation_error(
                    f"request validation failed: {err['msg']}",
                    code=codes.INVALID_ARGUMENT,
                    metadata={"field": ".".join(str(p) for p in err["loc"])},
                )
                for err in exc.errors()
            ]

    def _storage_failure(
        self,
        *,
        meta: EnvelopeMeta,
        operation: str,
        exc: Exception,
    ) -> Envelope[Any]:
        """Map repository exceptions into structured envelope errors."""
        _LOGGER.warning(
            "%s failed due to dependency error: exception_type=%s",
            operation,
            type(exc).__name__,
            exc_info=exc,
        )
        module = type(exc).__module__
        if module.startswith("sqlalchemy") or module.startswith("psycopg"):
            return failure(meta=meta, errors=[normalize_postgres_error(exc)])
        return failure(meta=meta, errors=[exception_to_error(exc)])
