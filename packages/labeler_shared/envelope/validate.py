"""Validation helpers for envelope metadata."""

from __future__ import annotations

from packages.labeler_shared.errors import ErrorDetail, codes, validation_error

from .meta import EnvelopeKind, EnvelopeMeta

_REQUIRED_TEXT_FIELDS = ("envelope_id", "trace_id", "source", "principal")


def validate_meta(meta: EnvelopeMeta) -> list[ErrorDetail]:
    """Return validation errors for missing or unspecified metadata fields."""
    errors: list[ErrorDetail] = []
    for name in _REQUIRED_TEXT_FIELDS:
        value = getattr(meta, name, "")
        if not isinstance(value, str) or value.strip() == "":
            errors.append(
                validation_error(
                    f"metadata.{name} is required",
                    code=codes.INVALID_ARGUMENT,
                    metadata={"field": f"metadata.{name}"},
                )
            )
    if meta.kind == EnvelopeKind.UNSPECIFIED:
        errors.append(
            validation_error(
                "metadata.kind must be specified",
                code=codes.INVALID_ARGUMENT,
                metadata={"field": "metadata.kind"},
            )
        )
    return errors
