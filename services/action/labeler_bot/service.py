"""Authoritative in-process Python API for Labeler Bot Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from packages.labeler_shared.config import LabelerSettings
from packages.labeler_shared.envelope import Envelope, EnvelopeMeta
from resources.adapters.bluesky import BlueskyAdapter, ChatMessage
from services.action.entitlement.service import EntitlementService
from services.action.identity_verification.service import (
    IdentityVerificationService,
)
from services.action.labeler_bot.domain import BotReply
from services.state.conversation_phase.service import ConversationPhaseService
from services.state.label_ledger.service import LabelLedgerService


class LabelerBotService(ABC):
    """Public API turning chat messages into verification and label actions."""

    @abstractmethod
    def handle_message(
        self, *, meta: EnvelopeMeta, message: ChatMessage
    ) -> Envelope[BotReply]:
        """Dispatch one inbound chat message and send the reply."""

    @abstractmethod
    def greet(self, *, meta: EnvelopeMeta, member_did: str) -> Envelope[BotReply]:
        """Send the onboarding greeting to one member."""


def build_labeler_bot_service(
    *,
    settings: LabelerSettings,
    bluesky: BlueskyAdapter,
    identity: IdentityVerificationService,
    phase: ConversationPhaseService,
    entitlement: EntitlementService,
    ledger: LabelLedgerService,
) -> LabelerBotService:
    """Build default Labeler Bot implementation from typed settings."""
    from services.action.labeler_bot.config import resolve_labeler_bot_settings
    from services.action.labeler_bot.implementation import DefaultLabelerBotService
    from services.state.label_ledger.config import resolve_label_ledger_settings

    return DefaultLabelerBotService(
        settings=resolve_labeler_bot_settings(settings),
        max_labels=resolve_label_ledger_settings(settings).max_labels,
        bluesky=bluesky,
        identity=identity,
        phase=phase,
        entitlement=entitlement,
        ledger=ledger,
    )
