"""Concrete Label Ledger Service implementation."""

from __future__ import annotations

from collections.abc import Callable
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
    conflict_error,
    dependency_error,
    exception_to_error,
    policy_error,
    validation_error,
)
from packages.labeler_shared.logging import get_logger, public_api_instrumented
from resources.substrates.postgres.errors import normalize_postgres_error
from services.state.label_ledger.component import SERVICE_COMPONENT_ID
from services.state.label_ledger.config import LabelLedgerSettings
from services.state.label_ledger.data.repository import fold_active_labels
from services.state.label_ledger.domain import (
    ActiveLabelSet,
    AppendStatus,
    GrantResult,
    HealthStatus,
    LabelDefinition,
    LabelEvent,
    ResetResult,
)
from services.state.label_ledger.interfaces import LabelCatalog, LabelEventRepository
from services.state.label_ledger.service import LabelLedgerService
from services.state.label_ledger.validation import GrantRequest, SubjectRequest

_LOGGER = get_logger(__name__)


class DefaultLabelLedgerService(LabelLedgerService):
    """Default ledger over an append-only event repository and label catalog."""

    def __init__(
        self,
        *,
        settings: LabelLedgerSettings,
        repository: LabelEventRepository,
        catalog: LabelCatalog,
        source_did: str,
        health_probe: Callable[[], bool] | None = None,
    ) -> None:
        self._settings = settings
        self._repository = repository
        self._catalog = catalog
        self._source_did = source_did
        self._health_probe = health_probe

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=("subject", "identifier"),
    )
    def grant(
        self,
        *,
        meta: EnvelopeMeta,
        subject: str,
        identifier: str,
        name: str,
        description: str,
    ) -> Envelope[GrantResult]:
        """Grant one label when the subject is below the cap.

        The catalog definition is ensured first. An identifier already defined
        for a differently named repository is rejected as a collision. The
        fold, cap check, and append then run as one conditional append.
        """
        request, errors = self._validate_request(
            meta=meta,
            model=GrantRequest,
            payload={
                "subject": subject,
                "identifier": identifier,
                "name": name,
                "description": description,
            },
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, GrantRequest)

        try:
            stored = self._catalog.ensure_definition(
                LabelDefinition(
                    identifier=request.identifier,
                    name=request.name,
                    description=request.description,
                )
            )
        except Exception as exc:  # noqa: BLE001
            return self._dependency_failure(meta=meta, operation="grant", exc=exc)

        if stored.name.casefold() != request.name.casefold():
            _LOGGER.warning(
                "Label identifier %s already belongs to %s; rejecting %s",
                request.identifier,
                stored.name,
                request.name,
            )
            return failure(
                meta=meta,
                errors=[
                    conflict_error(
                        "label identifier already used by another repository",
                        code=codes.IDENTIFIER_COLLISION,
                        metadata={
                            "identifier": request.identifier,
                            "existing_name": stored.name,
                        },
                    )
                ],
            )

        try:
            outcome = self._repository.append_if_below_cap(
                subject=request.subject,
                value=request.identifier,
                source=self._source_did,
                max_labels=self._settings.max_labels,
            )
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(meta=meta, operation="grant", exc=exc)

        max_labels = self._settings.max_labels
        if outcome.status is AppendStatus.CAP_REACHED:
            _LOGGER.info(
                "Label cap reached for %s (%d/%d)",
                request.subject,
                len(outcome.active),
                max_labels,
            )
            return failure(
                meta=meta,
                errors=[
                    policy_error(
                        "label cap reached",
                        code=codes.CAP_REACHED,
                        metadata={"max_labels": str(max_labels)},
                    )
                ],
            )

        appended = outcome.status is AppendStatus.APPENDED
        if appended:
            _LOGGER.info(
                "Labeled %s -> %s (%d/%d)",
                request.subject,
                request.identifier,
                len(outcome.active),
                max_labels,
            )
        else:
            _LOGGER.info(
                "Label %s already active for %s", request.identifier, request.subject
            )
        return success(
            meta=meta,
            payload=GrantResult(
                subject=request.subject,
                identifier=request.identifier,
                appended=appended,
                active=ActiveLabelSet(
                    subject=request.subject,
                    values=outcome.active,
                    max_labels=max_labels,
                ),
            ),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=("subject",),
    )
    def reset_all(self, *, meta: EnvelopeMeta, subject: str) -> Envelope[ResetResult]:
        """Revoke every active label for one subject."""
        request, errors = self._validate_request(
            meta=meta, model=SubjectRequest, payload={"subject": subject}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, SubjectRequest)

        try:
            revoked = self._repository.append_revocations(
                subject=request.subject, source=self._source_did
            )
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(meta=meta, operation="reset_all", exc=exc)

        _LOGGER.info("Cleared %d labels for %s", len(revoked), request.subject)
        return success(
            meta=meta,
            payload=ResetResult(subject=request.subject, revoked=revoked),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=("subject",),
    )
    def active_labels(
        self, *, meta: EnvelopeMeta, subject: str
    ) -> Envelope[ActiveLabelSet]:
        """Return the active label set folded from the event log."""
        request, errors = self._validate_request(
            meta=meta, model=SubjectRequest, payload={"subject": subject}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, SubjectRequest)

        try:
            events = self._repository.list_events(subject=request.subject)
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(meta=meta, operation="active_labels", exc=exc)
        return success(
            meta=meta,
            payload=ActiveLabelSet(
                subject=request.subject,
                values=fold_active_labels(events),
                max_labels=self._settings.max_labels,
            ),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=("subject",),
    )
    def list_events(
        self, *, meta: EnvelopeMeta, subject: str
    ) -> Envelope[list[LabelEvent]]:
        """Return the full event history for one subject."""
        request, errors = self._validate_request(
            meta=meta, model=SubjectRequest, payload={"subject": subject}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, SubjectRequest)

        try:
            events = self._repository.list_events(subject=request.subject)
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(meta=meta, operation="list_events", exc=exc)
        return success(meta=meta, payload=events)

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return ledger readiness based on database reachability."""
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
        """Map repository exceptions, preferring Postgres normalization."""
        if _is_postgres_error(exc):
            _LOGGER.warning(
                "%s failed due to database error: exception_type=%s",
                operation,
                type(exc).__name__,
                exc_info=exc,
            )
            return failure(meta=meta, errors=[normalize_postgres_error(exc)])
        _LOGGER.warning(
            "%s failed due to unexpected error: exception_type=%s",
            operation,
            type(exc).__name__,
            exc_info=exc,
        )
        return failure(meta=meta, errors=[exception_to_error(exc)])

    def _dependency_failure(
        self,
        *,
        meta: EnvelopeMeta,
        operation: str,
        exc: Exception,
    ) -> Envelope[Any]:
        """Map one dependency/runtime exception into structured envelope errors."""
        _LOGGER.warning(
            "%s failed due to dependency error: exception_type=%s",
            operation,
            type(exc).__name__,
            exc_info=exc,
        )
        return failure(
            meta=meta,
            errors=[
                dependency_error(
                    f"{operation} failed",
                    code=codes.DEPENDENCY_FAILURE,
                    metadata={"exception_type": type(exc).__name__},
                )
            ],
        )


def _is_postgres_error(exc: Exception) -> bool:
    """Return whether one exception appears to originate from the SQL stack."""
    module = type(exc).__module__
    return module.startswith("sqlalchemy") or module.startswith("psycopg")
