"""Pydantic request-validation models for Conversation Phase Service API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from packages.labeler_shared.github_names import is_github_login


class SubjectRequest(BaseModel):
    """Validated request shape for operations keyed by subject."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    subject: str

    @field_validator("subject")
    @classmethod
    def _validate_subject(cls, value: str) -> str:
        normalized = value.strip()
        if normalized == "":
            raise ValueError("subject is required")
        return normalized


class RecordVerificationRequest(SubjectRequest):
    """Validated request shape for recording a successful verification."""

    verified_handle: str

    @field_validator("verified_handle")
    @classmethod
    def _validate_handle(cls, value: str) -> str:
        normalized = value.strip()
        if not is_github_login(normalized):
            raise ValueError("verified_handle must be a GitHub login")
        return normalized


class ResolveRequest(SubjectRequest):
    """Validated request shape for resolving a subject's verified handle."""

    bot_did: str = ""

    @field_validator("bot_did")
    @classmethod
    def _validate_bot_did(cls, value: str) -> str:
        normalized = value.strip()
        if normalized and not normalized.startswith("did:"):
            raise ValueError("bot_did must be a DID")
        return normalized
