"""Polling loop feeding chat messages and likes into the bot service."""

from __future__ import annotations

from random import random
from threading import Event

from packages.labeler_shared.envelope import EnvelopeKind, EnvelopeMeta, new_meta
from packages.labeler_shared.logging import fields, get_logger, log_context
from resources.adapters.bluesky import (
    BlueskyAdapter,
    BlueskyAdapterDependencyError,
    BlueskyAdapterInternalError,
    ChatMessage,
    LikeNotification,
)
from resources.adapters.bluesky.adapter import (
    LABELER_SERVICE_COLLECTION,
    LABELER_SERVICE_RKEY,
)
from services.action.labeler_bot.component import SERVICE_COMPONENT_ID
from services.action.labeler_bot.config import LabelerBotSettings
from services.action.labeler_bot.service import LabelerBotService

_LOGGER = get_logger(__name__)


class LabelerBotRunner:
    """Poll ``getLog`` and like notifications until stopped.

    The first successful cycle only records the chat cursor and the newest
    like, so a restart never answers messages it has already seen. Failed
    cycles back off with capped jittered delays.
    """

    def __init__(
        self,
        *,
        settings: LabelerBotSettings,
        bluesky: BlueskyAdapter,
        bot: LabelerBotService,
    ) -> None:
        self._settings = settings
        self._bluesky = bluesky
        self._bot = bot
        self._stop_event = Event()
        self._backoff_seconds = settings.failure_backoff_initial_seconds
        self._primed = False
        self._cursor: str | None = None
        self._like_watermark = ""
        self._account_did = ""

    def run(self) -> None:
        """Block, polling until ``stop`` is called."""
        _LOGGER.info("Labeler bot polling started")
        while not self._stop_event.is_set():
            delay = self.run_once()
            if delay > 0:
                self._stop_event.wait(delay)
        _LOGGER.info("Labeler bot polling stopped")

    def stop(self) -> None:
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run_once(self) -> float:
        """Run one polling cycle and return the delay before the next one."""
        try:
            if not self._primed:
                self._prime()
            else:
                self._poll_messages()
                if self._settings.greet_on_like:
                    self._poll_likes()
            self._backoff_seconds = self._settings.failure_backoff_initial_seconds
            return self._settings.poll_interval_seconds
        except BlueskyAdapterDependencyError as exc:
            _LOGGER.warning("labeler bot poll dependency failure: %s", str(exc))
            return self._next_backoff_delay()
        except BlueskyAdapterInternalError as exc:
            _LOGGER.error("labeler bot poll internal failure: %s", str(exc))
            return self._next_backoff_delay()

    def _prime(self) -> None:
        self._account_did = self._settings.labeler_did or self._bluesky.account_did()
        page = self._bluesky.get_chat_log(cursor=None)
        self._cursor = page.cursor
        if self._settings.greet_on_like:
            likes = self._bluesky.list_like_notifications(
                limit=self._settings.like_poll_limit
            )
            self._like_watermark = max(
                (like.indexed_at for like in likes), default=""
            )
        self._primed = True
        _LOGGER.info("Labeler bot primed as %s", self._account_did)

    def _poll_messages(self) -> None:
        page = self._bluesky.get_chat_log(cursor=self._cursor)
        for message in page.messages:
            if message.sender_did == self._account_did:
                continue
            self._handle(message)
        self._cursor = page.cursor

    def _poll_likes(self) -> None:
        likes = self._bluesky.list_like_notifications(
            limit=self._settings.like_poll_limit
        )
        fresh = sorted(
            (like for like in likes if like.indexed_at > self._like_watermark),
            key=lambda like: like.indexed_at,
        )
        for like in fresh:
            if like.subject_uri == self._labeler_uri():
                self._greet(like)
            self._like_watermark = like.indexed_at

    def _handle(self, message: ChatMessage) -> None:
        meta = new_meta(
            kind=EnvelopeKind.EVENT,
            source=SERVICE_COMPONENT_ID,
            principal=message.sender_did,
        )
        with log_context(_context(meta)):
            try:
                self._bot.handle_message(meta=meta, message=message)
            except Exception as exc:  # noqa: BLE001
                _LOGGER.error(
                    "message %s could not be handled: exception_type=%s",
                    message.id,
                    type(exc).__name__,
                    exc_info=exc,
                )

    def _greet(self, like: LikeNotification) -> None:
        meta = new_meta(
            kind=EnvelopeKind.EVENT,
            source=SERVICE_COMPONENT_ID,
            principal=like.author_did,
        )
        with log_context(_context(meta)):
            try:
                self._bot.greet(meta=meta, member_did=like.author_did)
            except Exception as exc:  # noqa: BLE001
                _LOGGER.error(
                    "greeting for %s failed: exception_type=%s",
                    like.author_did,
                    type(exc).__name__,
                    exc_info=exc,
                )

    def _labeler_uri(self) -> str:
        return (
            f"at://{self._account_did}/{LABELER_SERVICE_COLLECTION}/"
            f"{LABELER_SERVICE_RKEY}"
        )

    def _next_backoff_delay(self) -> float:
        """Return capped jittered backoff delay and advance backoff state."""
        base = min(
            self._backoff_seconds,
            self._settings.failure_backoff_max_seconds,
        )
        jitter = base * self._settings.failure_backoff_jitter_ratio * (random() * 2 - 1)
        delay = max(0.0, base + jitter)
        self._backoff_seconds = min(
            base * self._settings.failure_backoff_multiplier,
            self._settings.failure_backoff_max_seconds,
        )
        return delay


def _context(meta: EnvelopeMeta) -> dict[str, str]:
    return {fields.TRACE_ID: meta.trace_id, fields.PRINCIPAL: meta.principal}
