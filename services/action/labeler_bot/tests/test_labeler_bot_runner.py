"""Tests for the chat polling runner cursor, like, and backoff handling."""

from __future__ import annotations

from packages.labeler_shared.envelope import EnvelopeMeta
from resources.adapters.bluesky import (
    BlueskyAdapterDependencyError,
    ChatLogPage,
    ChatMessage,
    LikeNotification,
)
from services.action.labeler_bot.config import LabelerBotSettings
from services.action.labeler_bot.runner import LabelerBotRunner

_BOT = "did:plc:labeler"
_LABELER_URI = f"at://{_BOT}/app.bsky.labeler.service/self"


def _message(id: str, sender: str, text: str = "hi") -> ChatMessage:
    return ChatMessage(id=id, convo_id=f"convo-{sender}", sender_did=sender, text=text)


class _FakeBlueskyAdapter:
    """Chat log and notification double driven by queued pages."""

    def __init__(self) -> None:
        self.pages: list[ChatLogPage] = []
        self.cursors: list[str | None] = []
        self.likes: list[LikeNotification] = []
        self.error: Exception | None = None

    def account_did(self) -> str:
        return _BOT

    def get_chat_log(self, *, cursor: str | None) -> ChatLogPage:
        self.cursors.append(cursor)
        if self.error is not None:
            raise self.error
        if self.pages:
            return self.pages.pop(0)
        return ChatLogPage(cursor=cursor, messages=())

    def list_like_notifications(self, *, limit: int) -> list[LikeNotification]:
        return list(self.likes)


class _FakeBot:
    """Bot service double recording dispatched work."""

    def __init__(self) -> None:
        self.handled: list[tuple[EnvelopeMeta, ChatMessage]] = []
        self.greeted: list[str] = []
        self.raise_on: str | None = None

    def handle_message(self, *, meta: EnvelopeMeta, message: ChatMessage):
        if message.id == self.raise_on:
            raise RuntimeError("boom")
        self.handled.append((meta, message))

    def greet(self, *, meta: EnvelopeMeta, member_did: str):
        self.greeted.append(member_did)


def _runner(**settings: object) -> tuple[LabelerBotRunner, _FakeBlueskyAdapter, _FakeBot]:
    bluesky = _FakeBlueskyAdapter()
    bot = _FakeBot()
    runner = LabelerBotRunner(
        settings=LabelerBotSettings(**settings),
        bluesky=bluesky,
        bot=bot,
    )
    return runner, bluesky, bot


def test_first_cycle_primes_cursor_without_handling() -> None:
    """Messages already in the log at startup are not answered."""
    runner, bluesky, bot = _runner()
    bluesky.pages = [
        ChatLogPage(cursor="c1", messages=(_message("old", "did:plc:alice"),)),
        ChatLogPage(cursor="c2", messages=(_message("new", "did:plc:alice"),)),
    ]

    runner.run_once()
    runner.run_once()

    assert bluesky.cursors == [None, "c1"]
    assert [message.id for _, message in bot.handled] == ["new"]


def test_own_messages_are_skipped() -> None:
    """The bot's replies come back through the log and must be ignored."""
    runner, bluesky, bot = _runner()
    runner.run_once()
    bluesky.pages = [
        ChatLogPage(
            cursor="c2",
            messages=(_message("1", _BOT), _message("2", "did:plc:alice")),
        )
    ]

    runner.run_once()

    assert [message.id for _, message in bot.handled] == ["2"]
    meta = bot.handled[0][0]
    assert meta.principal == "did:plc:alice"


def test_handler_exception_does_not_stall_the_cursor() -> None:
    """One failing message is logged and the rest of the page continues."""
    runner, bluesky, bot = _runner()
    runner.run_once()
    bot.raise_on = "1"
    bluesky.pages = [
        ChatLogPage(
            cursor="c2",
            messages=(_message("1", "did:plc:a"), _message("2", "did:plc:b")),
        )
    ]

    runner.run_once()
    runner.run_once()

    assert [message.id for _, message in bot.handled] == ["2"]
    assert bluesky.cursors[-1] == "c2"


def test_new_labeler_likes_are_greeted_once() -> None:
    """Likes of the labeler after startup trigger exactly one greeting."""
    runner, bluesky, bot = _runner()
    bluesky.likes = [
        LikeNotification(
            author_did="did:plc:old", subject_uri=_LABELER_URI, indexed_at="2026-10-19T10:00:00Z"
        )
    ]
    runner.run_once()
    bluesky.likes = [
        LikeNotification(
            author_did="did:plc:post",
            subject_uri=f"at://{_BOT}/app.bsky.feed.post/abc",
            indexed_at="2026-10-19T10:02:00Z",
        ),
        LikeNotification(
            author_did="did:plc:new", subject_uri=_LABELER_URI, indexed_at="2026-10-19T10:01:00Z"
        ),
        *bluesky.likes,
    ]

    runner.run_once()
    runner.run_once()

    assert bot.greeted == ["did:plc:new"]


def test_greeting_can_be_disabled() -> None:
    """With ``greet_on_like`` off, likes are never read."""
    runner, bluesky, bot = _runner(greet_on_like=False)
    runner.run_once()
    bluesky.likes = [
        LikeNotification(
            author_did="did:plc:new", subject_uri=_LABELER_URI, indexed_at="2026-10-19T10:01:00Z"
        )
    ]

    runner.run_once()

    assert bot.greeted == []


def test_dependency_failure_backs_off_and_recovers() -> None:
    """Failures grow the delay up to the cap; success resets it."""
    runner, bluesky, _ = _runner(
        poll_interval_seconds=0.5,
        failure_backoff_initial_seconds=1.0,
        failure_backoff_max_seconds=3.0,
        failure_backoff_jitter_ratio=0.0,
    )
    bluesky.error = BlueskyAdapterDependencyError("down")

    delays = [runner.run_once() for _ in range(4)]
    bluesky.error = None
    recovered = runner.run_once()

    assert delays == [1.0, 2.0, 3.0, 3.0]
    assert recovered == 0.5


def test_stop_ends_run_loop() -> None:
    """``run`` returns once ``stop`` has been called."""
    runner, _, _ = _runner()
    runner.stop()

    runner.run()

    assert runner.stopped
