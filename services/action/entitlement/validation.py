"""Pydantic request-validation models for Entitlement Service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from packages.labeler_shared.github_names import is_github_login, split_repository


class EvaluateRequest(BaseModel):
    """Validated request shape for one ``repo: <org>/<repo>`` claim."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    verified_handle: str
    claim: str

    @field_validator("verified_handle")
    @classmethod
    def _validate_handle(cls, value: str) -> str:
        normalized = value.strip()
        if not is_github_login(normalized):
            raise ValueError("verified_handle must be a GitHub login")
        return normalized

    @field_validator("claim")
    @classmethod
    def _validate_claim(cls, value: str) -> str:
        normalized = value.strip()
        if split_repository(normalized) is None:
            raise ValueError("claim must look like owner/repository")
        return normalized

    @property
    def owner(self) -> str:
        return self.claim.partition("/")[0]
