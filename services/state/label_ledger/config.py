"""Pydantic settings for Label Ledger Service behavior."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from packages.labeler_shared.config import LabelerSettings, resolve_component_settings
from services.state.label_ledger.component import SERVICE_COMPONENT_ID

_SEVERITIES = frozenset({"inform", "alert", "none"})
_BLURS = frozenset({"content", "media", "none"})
_DEFAULT_SETTINGS = frozenset({"ignore", "warn", "hide"})


class LabelLedgerSettings(BaseModel):
    """Label cap and defaults applied to newly created label definitions."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_labels: int = Field(default=4, ge=1)
    source_did: str = ""
    definition_severity: str = "inform"
    definition_blurs: str = "none"
    definition_default_setting: str = "warn"
    definition_adult_only: bool = False
    definition_locale: str = "en"

    @field_validator("definition_severity")
    @classmethod
    def _validate_severity(cls, value: str) -> str:
        if value not in _SEVERITIES:
            raise ValueError(f"definition_severity must be one of {sorted(_SEVERITIES)}")
        return value

    @field_validator("definition_blurs")
    @classmethod
    def _validate_blurs(cls, value: str) -> str:
        if value not in _BLURS:
            raise ValueError(f"definition_blurs must be one of {sorted(_BLURS)}")
        return value

    @field_validator("definition_default_setting")
    @classmethod
    def _validate_default_setting(cls, value: str) -> str:
        if value not in _DEFAULT_SETTINGS:
            raise ValueError(
                f"definition_default_setting must be one of {sorted(_DEFAULT_SETTINGS)}"
            )
        return value


def resolve_label_ledger_settings(settings: LabelerSettings) -> LabelLedgerSettings:
    """Resolve ledger settings from ``components.service.label_ledger``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=LabelLedgerSettings,
    )
