"""Pydantic settings for Labeler Bot Service and its polling runner."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from packages.labeler_shared.config import LabelerSettings, resolve_component_settings
from services.action.labeler_bot.component import SERVICE_COMPONENT_ID


class LabelerBotSettings(BaseModel):
    """Chat polling cadence, onboarding, and reply settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    labeler_did: str = ""
    source_url: str = "https://github.com/bsky/github-labeler-bot"
    poll_interval_seconds: float = Field(default=1.0, gt=0)
    greet_on_like: bool = True
    like_poll_limit: int = Field(default=50, ge=1, le=100)
    failure_backoff_initial_seconds: float = Field(default=1.0, gt=0)
    failure_backoff_max_seconds: float = Field(default=30.0, gt=0)
    failure_backoff_multiplier: float = Field(default=2.0, gt=1.0)
    failure_backoff_jitter_ratio: float = Field(default=0.2, ge=0, lt=1.0)

    @field_validator("labeler_did")
    @classmethod
    def _validate_labeler_did(cls, value: str) -> str:
        normalized = value.strip()
        if normalized and not normalized.startswith("did:"):
            raise ValueError("labeler_did must be a DID")
        return normalized


def resolve_labeler_bot_settings(settings: LabelerSettings) -> LabelerBotSettings:
    """Resolve bot settings from ``components.service.labeler_bot``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=LabelerBotSettings,
    )
