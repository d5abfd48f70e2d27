"""Authoritative in-process Python API for Label Ledger Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from packages.labeler_shared.config import LabelerSettings
from packages.labeler_shared.envelope import Envelope, EnvelopeMeta
from resources.adapters.bluesky import BlueskyAdapter
from services.state.label_ledger.domain import (
    ActiveLabelSet,
    GrantResult,
    HealthStatus,
    LabelEvent,
    ResetResult,
)


class LabelLedgerService(ABC):
    """Public API for per-subject label grants, revocations, and reads."""

    @abstractmethod
    def grant(
        self,
        *,
        meta: EnvelopeMeta,
        subject: str,
        identifier: str,
        name: str,
        description: str,
    ) -> Envelope[GrantResult]:
        """Grant one label when the subject is below the cap."""

    @abstractmethod
    def reset_all(self, *, meta: EnvelopeMeta, subject: str) -> Envelope[ResetResult]:
        """Revoke every active label for one subject."""

    @abstractmethod
    def active_labels(
        self, *, meta: EnvelopeMeta, subject: str
    ) -> Envelope[ActiveLabelSet]:
        """Return the active label set folded from the event log."""

    @abstractmethod
    def list_events(
        self, *, meta: EnvelopeMeta, subject: str
    ) -> Envelope[list[LabelEvent]]:
        """Return the full event history for one subject."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return ledger and owned dependency readiness status."""


def build_label_ledger_service(
    *,
    settings: LabelerSettings,
    bluesky: BlueskyAdapter,
) -> LabelLedgerService:
    """Build default Label Ledger implementation from typed settings."""
    from services.state.label_ledger.catalog import BlueskyLabelCatalog
    from services.state.label_ledger.config import resolve_label_ledger_settings
    from services.state.label_ledger.data import (
        LedgerPostgresRuntime,
        SqlLabelEventRepository,
    )
    from services.state.label_ledger.implementation import DefaultLabelLedgerService

    ledger_settings = resolve_label_ledger_settings(settings)
    runtime = LedgerPostgresRuntime.from_settings(settings)
    return DefaultLabelLedgerService(
        settings=ledger_settings,
        repository=SqlLabelEventRepository(runtime.sessions),
        catalog=BlueskyLabelCatalog(adapter=bluesky, settings=ledger_settings),
        source_did=ledger_settings.source_did or bluesky.account_did(),
        health_probe=runtime.is_healthy,
    )
