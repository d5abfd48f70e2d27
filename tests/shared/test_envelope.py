"""Tests for envelope model and builder behavior."""

from __future__ import annotations

from datetime import UTC, datetime

from packages.labeler_shared.envelope import (
    EnvelopeKind,
    EnvelopeMeta,
    failure,
    new_meta,
    success,
)
from packages.labeler_shared.errors import ErrorCategory, ErrorDetail, codes


def _meta() -> EnvelopeMeta:
    """Return deterministic metadata for envelope tests."""
    return new_meta(
        kind=EnvelopeKind.RESULT,
        source="service_label_ledger",
        principal="did:plc:alice",
        timestamp=datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC),
        trace_id="trace-1",
    )


def _error(code: str = codes.VALIDATION_ERROR) -> ErrorDetail:
    """Return a deterministic error detail for envelope tests."""
    return ErrorDetail(
        code=code,
        message="Invalid input",
        category=ErrorCategory.VALIDATION,
        retryable=False,
    )


def test_success_builder_returns_ok_envelope_with_payload() -> None:
    """success should build an ok envelope with payload and no errors."""
    envelope = success(meta=_meta(), payload={"identifier": "org-repo"})

    assert envelope.ok is True
    assert envelope.has_payload is True
    assert envelope.payload == {"identifier": "org-repo"}
    assert envelope.errors == []
    assert envelope.error_codes == []


def test_failure_builder_returns_non_ok_envelope_with_errors() -> None:
    """failure should build a non-ok envelope with codes in emission order."""
    envelope = failure(
        meta=_meta(),
        errors=[_error(codes.CAP_REACHED), _error(codes.LOOKUP_FAILURE)],
    )

    assert envelope.ok is False
    assert envelope.has_payload is False
    assert envelope.error_codes == [codes.CAP_REACHED, codes.LOOKUP_FAILURE]


def test_failure_builder_can_carry_partial_payload() -> None:
    """failure may still return a payload alongside its errors."""
    envelope = failure(
        meta=_meta(),
        errors=[_error()],
        payload={"identifier": "org-repo"},
    )

    assert envelope.ok is False
    assert envelope.payload == {"identifier": "org-repo"}
    assert envelope.metadata.trace_id == "trace-1"
