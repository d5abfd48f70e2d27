"""Domain contracts for Entitlement Service payloads."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

# Failure metadata ``reason`` for claims whose label identifier is too long.
LABEL_IDENTIFIER_TOO_LONG = "label_identifier_too_long"


class GrantReason(str, Enum):
    """Why a repository label was granted."""

    OWNERSHIP = "ownership"
    CONTRIBUTION = "contribution"


class EntitlementDecision(BaseModel):
    """Granted entitlement plus the label it maps to.

    ``label_name`` is the canonical repository ``full_name`` and
    ``identifier`` is its normalized label value.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    granted: bool
    reason: GrantReason
    repository: str
    identifier: str
    label_name: str
    label_description: str
    html_url: str
    merged_pull_requests: int = 0
