"""Typed envelope response model for in-process service calls."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from packages.labeler_shared.errors import ErrorDetail

from .meta import EnvelopeMeta

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Result of one service operation: metadata, optional payload, errors."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    metadata: EnvelopeMeta
    payload: T | None = None
    errors: list[ErrorDetail] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return ``True`` when no errors are present."""
        return len(self.errors) == 0

    @property
    def has_payload(self) -> bool:
        """Return ``True`` when payload is present."""
        return self.payload is not None

    @property
    def error_codes(self) -> list[str]:
        """Return error codes in emission order."""
        return [error.code for error in self.errors]
