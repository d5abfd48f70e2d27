"""Pydantic settings for Conversation Phase Service behavior."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from packages.labeler_shared.config import LabelerSettings, resolve_component_settings
from services.state.conversation_phase.component import SERVICE_COMPONENT_ID


class ConversationPhaseSettings(BaseModel):
    """History lookback used when no explicit verification state exists."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    history_page_size: int = Field(default=100, ge=1, le=100)
    history_fallback_enabled: bool = True


def resolve_conversation_phase_settings(
    settings: LabelerSettings,
) -> ConversationPhaseSettings:
    """Resolve settings from ``components.service.conversation_phase``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=ConversationPhaseSettings,
    )
