"""Authoritative in-process Python API for Conversation Phase Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from packages.labeler_shared.config import LabelerSettings
from packages.labeler_shared.envelope import Envelope, EnvelopeMeta
from services.state.conversation_phase.domain import HealthStatus, VerificationState
from services.state.conversation_phase.interfaces import HistoryLoader


class ConversationPhaseService(ABC):
    """Public API for per-subject verification state."""

    @abstractmethod
    def record_verification(
        self,
        *,
        meta: EnvelopeMeta,
        subject: str,
        verified_handle: str,
    ) -> Envelope[VerificationState]:
        """Transition one subject to ``verified`` with the proven handle."""

    @abstractmethod
    def resolve_verified_handle(
        self,
        *,
        meta: EnvelopeMeta,
        subject: str,
        history_loader: HistoryLoader | None = None,
        bot_did: str = "",
    ) -> Envelope[VerificationState]:
        """Return the verified state for one subject, or ``PHASE_NOT_FOUND``.

        ``bot_did`` is required with ``history_loader``: only success markers
        sent by that account are trusted during the history scan.
        """

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return service and owned dependency readiness status."""


def build_conversation_phase_service(
    *, settings: LabelerSettings
) -> ConversationPhaseService:
    """Build default Conversation Phase implementation from typed settings."""
    from services.state.conversation_phase.config import (
        resolve_conversation_phase_settings,
    )
    from services.state.conversation_phase.data import (
        PhasePostgresRuntime,
        SqlVerificationStateRepository,
    )
    from services.state.conversation_phase.implementation import (
        DefaultConversationPhaseService,
    )

    runtime = PhasePostgresRuntime.from_settings(settings)
    return DefaultConversationPhaseService(
        settings=resolve_conversation_phase_settings(settings),
        repository=SqlVerificationStateRepository(runtime.sessions),
        health_probe=runtime.is_healthy,
    )
