"""Pydantic settings for Identity Verification Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from packages.labeler_shared.config import LabelerSettings, resolve_component_settings
from services.action.identity_verification.component import SERVICE_COMPONENT_ID


class IdentityVerificationSettings(BaseModel):
    """How Bluesky entries are recognized on a GitHub profile."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    social_provider: str = "bluesky"
    profile_url_prefix: str = "https://bsky.app/profile/"

    @field_validator("social_provider")
    @classmethod
    def _validate_provider(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized == "":
            raise ValueError("social_provider is required")
        return normalized


def resolve_identity_verification_settings(
    settings: LabelerSettings,
) -> IdentityVerificationSettings:
    """Resolve settings from ``components.service.identity_verification``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=IdentityVerificationSettings,
    )
