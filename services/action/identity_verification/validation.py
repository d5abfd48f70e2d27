"""Pydantic request-validation models for Identity Verification Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from packages.labeler_shared.github_names import is_github_login


class VerifyRequest(BaseModel):
    """Validated request shape for one ``github: <username>`` claim."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    claimed_handle: str
    sender_did: str

    @field_validator("claimed_handle")
    @classmethod
    def _validate_handle(cls, value: str) -> str:
        normalized = value.strip()
        if normalized == "":
            raise ValueError("a GitHub username is required")
        if not is_github_login(normalized):
            raise ValueError("claimed_handle must be a GitHub login")
        return normalized

    @field_validator("sender_did")
    @classmethod
    def _validate_sender(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized.startswith("did:"):
            raise ValueError("sender_did must be a DID")
        return normalized
