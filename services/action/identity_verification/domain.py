"""Domain contracts for Identity Verification Service payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class VerificationClaim(BaseModel):
    """Proof that ``subject`` controls the GitHub account ``claimed_handle``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    claimed_handle: str
    subject: str
    bluesky_handle: str
    verified_at: datetime
