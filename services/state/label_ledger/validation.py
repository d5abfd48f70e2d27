"""Pydantic request-validation models for Label Ledger Service API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from packages.labeler_shared.label_identifiers import (
    MAX_LABEL_IDENTIFIER_LENGTH,
    is_label_identifier,
)


class _ValidationModel(BaseModel):
    """Base request model with strict shape semantics."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class SubjectRequest(_ValidationModel):
    """Validated request shape for operations keyed by subject."""

    subject: str

    @field_validator("subject")
    @classmethod
    def _validate_subject(cls, value: str, info: ValidationInfo) -> str:
        normalized = value.strip()
        if normalized == "":
            raise ValueError(f"{info.field_name} is required")
        return normalized


class GrantRequest(SubjectRequest):
    """Validated grant request shape."""

    identifier: str
    name: str
    description: str = ""

    @field_validator("identifier")
    @classmethod
    def _validate_identifier(cls, value: str) -> str:
        """Require a normalized lowercase letters-and-hyphens identifier."""
        if len(value) > MAX_LABEL_IDENTIFIER_LENGTH:
            raise ValueError(
                f"identifier must be at most {MAX_LABEL_IDENTIFIER_LENGTH} characters"
            )
        if not is_label_identifier(value):
            raise ValueError("identifier must match ^[a-z-]+$")
        return value

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if normalized == "":
            raise ValueError("name is required")
        return normalized
