"""Tests for recovering a verified handle from chat history."""

from __future__ import annotations

from dataclasses import dataclass

from services.state.conversation_phase.resolver import (
    SUCCESS_MARKER,
    parse_claim,
    resolve_verified_handle,
)

_BOT = "did:plc:labeler"
_ALICE = "did:plc:alice"


@dataclass(frozen=True)
class _Message:
    sender_did: str
    text: str


def _bot(text: str) -> _Message:
    return _Message(sender_did=_BOT, text=text)


def _alice(text: str) -> _Message:
    return _Message(sender_did=_ALICE, text=text)


def _resolve(*history: _Message) -> str | None:
    return resolve_verified_handle(list(history), bot_did=_BOT, subject=_ALICE)


def test_handle_is_read_from_message_before_marker() -> None:
    """The claim right before the marker (next element, newest first) wins."""
    assert (
        _resolve(
            _alice("repo: alice/cool-repo"),
            _bot(f"{SUCCESS_MARKER}\n\nTo link github repo send a message like"),
            _alice("github: alice"),
            _alice("hello"),
        )
        == "alice"
    )


def test_most_recent_marker_is_used() -> None:
    """A later re-verification should replace the earlier handle."""
    assert (
        _resolve(
            _bot(SUCCESS_MARKER),
            _alice("github: alice-new"),
            _bot(SUCCESS_MARKER),
            _alice("github: alice-old"),
        )
        == "alice-new"
    )


def test_no_marker_returns_none() -> None:
    """Without a marker nothing has been verified."""
    assert _resolve(_alice("github: alice"), _alice("hi")) is None


def test_marker_sent_by_subject_is_ignored() -> None:
    """Pasting the marker text yourself is not a verification."""
    assert _resolve(_alice(SUCCESS_MARKER), _alice("github: torvalds")) is None


def test_forged_marker_does_not_hide_older_bot_marker() -> None:
    """Only bot-sent markers are considered, whatever sits above them."""
    assert (
        _resolve(
            _alice(SUCCESS_MARKER),
            _alice("github: torvalds"),
            _bot(SUCCESS_MARKER),
            _alice("github: alice"),
        )
        == "alice"
    )


def test_claim_must_come_from_subject() -> None:
    """A bot marker following someone else's message proves nothing."""
    assert _resolve(_bot(SUCCESS_MARKER), _bot("github: torvalds")) is None
    assert (
        _resolve(
            _bot(SUCCESS_MARKER),
            _Message(sender_did="did:plc:mallory", text="github: mallory"),
        )
        is None
    )


def test_marker_at_end_of_page_returns_none() -> None:
    """A marker whose claim fell off the fetched page cannot be resolved."""
    assert _resolve(_alice("hi"), _bot(SUCCESS_MARKER)) is None


def test_malformed_claim_returns_none() -> None:
    """A claim without ``<prefix>: <handle>`` shape is not trusted."""
    assert _resolve(_bot(SUCCESS_MARKER), _alice("alice")) is None
    assert _resolve(_bot(SUCCESS_MARKER), _alice("github:   ")) is None


def test_marker_must_start_the_message() -> None:
    """The bot quoting the marker mid-message should not count."""
    assert _resolve(_bot(f"you said {SUCCESS_MARKER}"), _alice("github: alice")) is None


def test_parse_claim_rejects_whitespace_in_handle() -> None:
    """Handles are single tokens."""
    assert parse_claim("github: alice bob") is None
    assert parse_claim("github:alice") == "alice"
