"""Domain contracts for Label Ledger Service payloads."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class LabelEvent(BaseModel):
    """One immutable grant (``negate=False``) or revoke event."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: int
    source: str
    subject: str
    value: str
    negate: bool
    created_at: datetime


class ActiveLabelSet(BaseModel):
    """Labels currently active for one subject, in grant order."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    subject: str
    values: tuple[str, ...]
    max_labels: int

    @property
    def count(self) -> int:
        return len(self.values)


class LabelDefinition(BaseModel):
    """Catalog entry describing one label value."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    identifier: str
    name: str
    description: str


class AppendStatus(str, Enum):
    """Outcome of one conditional grant append."""

    APPENDED = "appended"
    ALREADY_ACTIVE = "already_active"
    CAP_REACHED = "cap_reached"


class ConditionalAppendResult(BaseModel):
    """Repository result for one fold-check-append transaction."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: AppendStatus
    active: tuple[str, ...]


class GrantResult(BaseModel):
    """Successful grant outcome returned to callers."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    subject: str
    identifier: str
    appended: bool
    active: ActiveLabelSet


class ResetResult(BaseModel):
    """Labels revoked by one reset."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    subject: str
    revoked: tuple[str, ...]


class HealthStatus(BaseModel):
    """Ledger and owned dependency readiness status payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    substrate_ready: bool
    detail: str
