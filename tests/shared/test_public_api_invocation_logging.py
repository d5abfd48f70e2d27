"""Tests for public API instrumentation and structured log context."""

from __future__ import annotations

import json
import logging

import pytest

from packages.labeler_shared.envelope import EnvelopeKind, failure, new_meta, success
from packages.labeler_shared.errors import codes, policy_error
from packages.labeler_shared.logging import (
    CompletionContext,
    InvocationContext,
    get_context,
    log_context,
    public_api_instrumented,
)
from packages.labeler_shared.logging.config import ContextFilter, JsonFormatter


class _RecordingConcern:
    """Concern double collecting every hook event."""

    def __init__(self) -> None:
        self.invocations: list[InvocationContext] = []
        self.completions: list[CompletionContext] = []

    def on_invocation(self, context: InvocationContext) -> None:
        self.invocations.append(context)

    def on_completion(self, context: CompletionContext) -> None:
        self.completions.append(context)


class _BrokenConcern:
    def on_invocation(self, context: InvocationContext) -> None:
        raise RuntimeError("concern down")

    def on_completion(self, context: CompletionContext) -> None:
        raise RuntimeError("concern down")


def _meta():
    return new_meta(
        kind=EnvelopeKind.COMMAND,
        source="test",
        principal="did:plc:alice",
        trace_id="trace-1",
    )


def test_instrumentation_records_references_and_success() -> None:
    """Invocation should carry trace, principal and named id fields."""
    concern = _RecordingConcern()

    @public_api_instrumented(
        component_id="service_label_ledger",
        id_fields=("subject",),
        concerns=[concern],
    )
    def grant(*, meta, subject: str):
        return success(meta=meta, payload=subject)

    result = grant(meta=_meta(), subject="did:plc:alice")

    assert result.ok
    invocation = concern.invocations[0]
    assert invocation.api_name == "grant"
    assert invocation.trace_id == "trace-1"
    assert invocation.principal == "did:plc:alice"
    assert invocation.references == {"subject": "did:plc:alice"}
    assert concern.completions[0].success is True


def test_instrumentation_summarizes_failure_envelopes() -> None:
    """Failed envelopes should complete unsuccessfully with code summaries."""
    concern = _RecordingConcern()

    @public_api_instrumented(component_id="service_label_ledger", concerns=[concern])
    def grant(*, meta):
        return failure(
            meta=meta,
            errors=[policy_error("cap reached", code=codes.CAP_REACHED)],
        )

    grant(meta=_meta())

    completion = concern.completions[0]
    assert completion.success is False
    assert completion.errors == ["CAP_REACHED: cap reached"]


def test_instrumentation_reraises_and_records_exceptions() -> None:
    """Exceptions propagate after a failed completion is recorded."""
    concern = _RecordingConcern()

    @public_api_instrumented(component_id="adapter_github", concerns=[concern])
    def lookup() -> None:
        raise ValueError("bad")

    with pytest.raises(ValueError):
        lookup()

    assert concern.completions[0].errors == ["ValueError: bad"]


def test_broken_concern_does_not_break_wrapped_call(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A failing concern is logged and the call still returns."""
    logger = logging.getLogger("tests.instrumentation")

    @public_api_instrumented(
        component_id="adapter_github",
        concerns=[_BrokenConcern()],
        logger=logger,
    )
    def lookup() -> int:
        return 7

    with caplog.at_level(logging.WARNING, logger="tests.instrumentation"):
        assert lookup() == 7

    assert "Public API instrumentation concern failed" in caplog.text


def test_decorator_requires_a_concern() -> None:
    """At least a logger or one explicit concern is required."""
    with pytest.raises(ValueError):
        public_api_instrumented(component_id="adapter_github")


def test_log_context_is_scoped_and_rendered_as_json() -> None:
    """Bound context appears in JSON output only inside the block."""
    record = logging.LogRecord(
        name="labeler",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="granted %s",
        args=("org-repo",),
        exc_info=None,
    )

    with log_context({"subject": "did:plc:alice", "command": "claim_repo"}):
        ContextFilter().filter(record)
        inside = get_context()
    outside = get_context()

    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "granted org-repo"
    assert payload["subject"] == "did:plc:alice"
    assert inside["command"] == "claim_repo"
    assert "command" not in outside
