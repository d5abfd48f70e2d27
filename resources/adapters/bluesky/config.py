"""Pydantic settings for the Bluesky adapter resource."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from packages.labeler_shared.config import LabelerSettings, resolve_component_settings
from packages.labeler_shared.http import RetryPolicy
from resources.adapters.bluesky.component import RESOURCE_COMPONENT_ID


class BlueskyAdapterSettings(BaseModel):
    """Runtime settings for the bot account and its PDS/chat calls."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_url: str = "https://bsky.social"
    chat_service_did: str = "did:web:api.bsky.chat#bsky_chat"
    identifier: str = ""
    password: str = ""
    timeout_seconds: float = Field(default=10.0, gt=0)
    max_retries: int = Field(default=2, ge=0)
    retry_backoff_initial_seconds: float = Field(default=0.5, gt=0)
    retry_backoff_max_seconds: float = Field(default=8.0, gt=0)
    retry_backoff_multiplier: float = Field(default=2.0, ge=1.0)
    retry_backoff_jitter_ratio: float = Field(default=0.2, ge=0, lt=1.0)

    @field_validator("service_url")
    @classmethod
    def _validate_service_url(cls, value: str) -> str:
        normalized = value.strip().rstrip("/")
        if normalized == "":
            raise ValueError("service_url must be non-empty")
        return normalized

    @field_validator("identifier", "password", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    def retry_policy(self) -> RetryPolicy:
        """Build the bounded retry schedule for outbound calls."""
        return RetryPolicy(
            max_retries=self.max_retries,
            initial_backoff_seconds=self.retry_backoff_initial_seconds,
            backoff_multiplier=self.retry_backoff_multiplier,
            max_backoff_seconds=self.retry_backoff_max_seconds,
            jitter_ratio=self.retry_backoff_jitter_ratio,
        )


def resolve_bluesky_adapter_settings(
    settings: LabelerSettings,
) -> BlueskyAdapterSettings:
    """Resolve adapter settings from ``components.adapter.bluesky``."""
    return resolve_component_settings(
        settings=settings,
        component_id=RESOURCE_COMPONENT_ID,
        model=BlueskyAdapterSettings,
    )
