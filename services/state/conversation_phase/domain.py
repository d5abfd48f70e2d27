"""Domain contracts for Conversation Phase Service payloads."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Phase(str, Enum):
    """Steps of the per-subject linking protocol."""

    UNVERIFIED = "unverified"
    VERIFIED = "verified"


class VerificationState(BaseModel):
    """Explicit per-subject protocol state."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    subject: str
    phase: Phase
    verified_handle: str | None = None
    verified_at: datetime | None = None
    updated_at: datetime


class HealthStatus(BaseModel):
    """Service and owned dependency readiness status payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    substrate_ready: bool
    detail: str
