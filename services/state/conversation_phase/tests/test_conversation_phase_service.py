"""Behavior tests for Conversation Phase Service state resolution."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from packages.labeler_shared.envelope import EnvelopeKind, new_meta
from packages.labeler_shared.errors import codes
from services.state.conversation_phase.config import ConversationPhaseSettings
from services.state.conversation_phase.domain import Phase, VerificationState
from services.state.conversation_phase.implementation import (
    DefaultConversationPhaseService,
)
from services.state.conversation_phase.resolver import SUCCESS_MARKER

_BOT = "did:plc:labeler"
_ALICE = "did:plc:alice"


@dataclass(frozen=True)
class _Message:
    sender_did: str
    text: str


class _FakeStateRepository:
    """In-memory verification state store."""

    def __init__(self) -> None:
        self.rows: dict[str, VerificationState] = {}
        self.upserts = 0
        self.error: Exception | None = None

    def get_state(self, *, subject: str) -> VerificationState | None:
        return self.rows.get(subject)

    def upsert_state(
        self,
        *,
        subject: str,
        phase: Phase,
        verified_handle: str | None,
        verified_at: datetime | None,
    ) -> VerificationState:
        if self.error is not None:
            raise self.error
        self.upserts += 1
        state = VerificationState(
            subject=subject,
            phase=phase,
            verified_handle=verified_handle,
            verified_at=verified_at,
            updated_at=datetime.now(UTC),
        )
        self.rows[subject] = state
        return state


class _FakeHistory:
    """History loader double recording requested page sizes."""

    def __init__(self, *messages: _Message, error: Exception | None = None) -> None:
        self.messages = list(messages)
        self.error = error
        self.limits: list[int] = []

    def __call__(self, limit: int) -> list[_Message]:
        self.limits.append(limit)
        if self.error is not None:
            raise self.error
        return self.messages[:limit]


def _bot(text: str) -> _Message:
    return _Message(sender_did=_BOT, text=text)


def _alice(text: str) -> _Message:
    return _Message(sender_did=_ALICE, text=text)


def _meta():
    return new_meta(kind=EnvelopeKind.COMMAND, source="test", principal=_ALICE)


def _service(
    **settings: object,
) -> tuple[DefaultConversationPhaseService, _FakeStateRepository]:
    repository = _FakeStateRepository()
    service = DefaultConversationPhaseService(
        settings=ConversationPhaseSettings(**settings),
        repository=repository,
    )
    return service, repository


def test_record_then_resolve_reads_explicit_state() -> None:
    """A recorded verification should resolve without touching history."""
    service, _ = _service()
    history = _FakeHistory()

    recorded = service.record_verification(
        meta=_meta(), subject=_ALICE, verified_handle="alice"
    )
    resolved = service.resolve_verified_handle(
        meta=_meta(), subject=_ALICE, history_loader=history, bot_did=_BOT
    )

    assert recorded.ok
    assert resolved.ok
    assert resolved.payload is not None
    assert resolved.payload.verified_handle == "alice"
    assert resolved.payload.phase is Phase.VERIFIED
    assert history.limits == []


def test_missing_state_falls_back_to_history_and_backfills() -> None:
    """History-only verification should be recovered and persisted."""
    service, repository = _service(history_page_size=50)
    history = _FakeHistory(_bot(SUCCESS_MARKER), _alice("github: alice"))

    resolved = service.resolve_verified_handle(
        meta=_meta(), subject=_ALICE, history_loader=history, bot_did=_BOT
    )

    assert resolved.ok
    assert resolved.payload is not None
    assert resolved.payload.verified_handle == "alice"
    assert history.limits == [50]
    assert repository.rows[_ALICE].verified_handle == "alice"


def test_unverified_subject_returns_phase_not_found() -> None:
    """No state and no marker should fail with PHASE_NOT_FOUND."""
    service, _ = _service()

    resolved = service.resolve_verified_handle(
        meta=_meta(),
        subject=_ALICE,
        history_loader=_FakeHistory(_alice("hi")),
        bot_did=_BOT,
    )

    assert resolved.error_codes == [codes.PHASE_NOT_FOUND]


def test_fallback_disabled_skips_history() -> None:
    """Disabling the fallback should rely on explicit state only."""
    service, _ = _service(history_fallback_enabled=False)
    history = _FakeHistory(_bot(SUCCESS_MARKER), _alice("github: alice"))

    resolved = service.resolve_verified_handle(
        meta=_meta(), subject=_ALICE, history_loader=history, bot_did=_BOT
    )

    assert resolved.error_codes == [codes.PHASE_NOT_FOUND]
    assert history.limits == []


def test_history_failure_maps_to_lookup_failure() -> None:
    """A history fetch error should be reported as LOOKUP_FAILURE."""
    service, _ = _service()

    resolved = service.resolve_verified_handle(
        meta=_meta(),
        subject=_ALICE,
        history_loader=_FakeHistory(error=RuntimeError("chat down")),
        bot_did=_BOT,
    )

    assert resolved.error_codes == [codes.LOOKUP_FAILURE]


def test_history_claim_that_is_not_a_login_is_not_found() -> None:
    """A recovered handle must still be a valid GitHub login."""
    service, repository = _service()

    resolved = service.resolve_verified_handle(
        meta=_meta(),
        subject=_ALICE,
        history_loader=_FakeHistory(
            _bot(SUCCESS_MARKER), _alice("github: not_a/login")
        ),
        bot_did=_BOT,
    )

    assert resolved.error_codes == [codes.PHASE_NOT_FOUND]
    assert repository.upserts == 0


def test_record_verification_rejects_invalid_login() -> None:
    """Only GitHub-shaped logins are recorded."""
    service, repository = _service()

    result = service.record_verification(
        meta=_meta(), subject=_ALICE, verified_handle="-alice"
    )

    assert result.error_codes == [codes.INVALID_ARGUMENT]
    assert repository.rows == {}


def test_reverification_replaces_handle() -> None:
    """Recording again should overwrite the previous handle."""
    service, _ = _service()
    service.record_verification(meta=_meta(), subject=_ALICE, verified_handle="alice")
    service.record_verification(meta=_meta(), subject=_ALICE, verified_handle="alice2")

    resolved = service.resolve_verified_handle(meta=_meta(), subject=_ALICE)

    assert resolved.payload is not None
    assert resolved.payload.verified_handle == "alice2"


def test_marker_pasted_by_subject_is_not_trusted() -> None:
    """A success marker typed by the subject must not verify anything."""
    service, repository = _service()
    history = _FakeHistory(_alice(SUCCESS_MARKER), _alice("github: torvalds"))

    resolved = service.resolve_verified_handle(
        meta=_meta(), subject=_ALICE, history_loader=history, bot_did=_BOT
    )

    assert resolved.error_codes == [codes.PHASE_NOT_FOUND]
    assert repository.rows == {}


def test_history_scan_requires_bot_did() -> None:
    """Scanning history without knowing the bot account is rejected."""
    service, _ = _service()
    history = _FakeHistory(_bot(SUCCESS_MARKER), _alice("github: alice"))

    resolved = service.resolve_verified_handle(
        meta=_meta(), subject=_ALICE, history_loader=history
    )

    assert resolved.error_codes == [codes.INVALID_ARGUMENT]
    assert history.limits == []


def test_unexpected_storage_error_is_normalized() -> None:
    """Non-database repository failures map through generic normalization."""
    service, repository = _service()
    repository.error = TimeoutError("state store slow")

    result = service.record_verification(
        meta=_meta(), subject=_ALICE, verified_handle="alice"
    )

    assert result.error_codes == [codes.DEPENDENCY_TIMEOUT]
    assert result.errors[0].metadata["exception_type"] == "TimeoutError"
    assert repository.rows == {}
