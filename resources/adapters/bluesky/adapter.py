"""Transport-agnostic Bluesky adapter protocol and DTOs."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

LABELER_SERVICE_COLLECTION = "app.bsky.labeler.service"
LABELER_SERVICE_RKEY = "self"


class BlueskyAdapterError(Exception):
    """Base exception for Bluesky adapter failures."""


class BlueskyAdapterDependencyError(BlueskyAdapterError):
    """Dependency-level adapter failure (network/upstream unavailable)."""


class BlueskyAdapterInternalError(BlueskyAdapterError):
    """Internal adapter failure (mapping or contract mismatch)."""


class BlueskyProfile(BaseModel):
    """Resolved Bluesky actor profile."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    did: str
    handle: str
    display_name: str = ""


class LabelLocale(BaseModel):
    """Localized name and description for one label value."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    lang: str = "en"
    name: str
    description: str


class LabelValueDefinition(BaseModel):
    """One custom label value declared by the labeler service record."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    identifier: str
    severity: str = "inform"
    blurs: str = "none"
    default_setting: str = "warn"
    adult_only: bool = False
    locales: tuple[LabelLocale, ...] = ()

    @property
    def name(self) -> str:
        """Return the first locale name, or the identifier when none exists."""
        return self.locales[0].name if self.locales else self.identifier


class LabelerServiceRecord(BaseModel):
    """Snapshot of the ``app.bsky.labeler.service/self`` record."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    cid: str | None
    label_values: tuple[str, ...] = ()
    definitions: tuple[LabelValueDefinition, ...] = ()
    raw: dict[str, Any] = Field(default_factory=dict)

    def definition(self, identifier: str) -> LabelValueDefinition | None:
        """Return the definition for ``identifier`` when present."""
        for item in self.definitions:
            if item.identifier == identifier:
                return item
        return None


class ChatMessage(BaseModel):
    """One chat message view."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    convo_id: str = ""
    sender_did: str
    text: str
    sent_at: str = ""


class ChatLogPage(BaseModel):
    """New chat messages since one log cursor."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    cursor: str | None
    messages: tuple[ChatMessage, ...] = ()


class LikeNotification(BaseModel):
    """One ``like`` notification received by the bot account."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    author_did: str
    subject_uri: str
    indexed_at: str


class BlueskyAdapterHealthResult(BaseModel):
    """Readiness payload for Bluesky adapter dependencies."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    adapter_ready: bool
    detail: str


@runtime_checkable
class BlueskyAdapter(Protocol):
    """Protocol for the Bluesky and chat calls used by the labeler bot."""

    def health(self) -> BlueskyAdapterHealthResult:
        """Return adapter health state."""

    def account_did(self) -> str:
        """Return the DID of the authenticated bot account."""

    def get_profile(self, *, actor: str) -> BlueskyProfile:
        """Resolve one handle or DID to a profile."""

    def get_labeler_service(self) -> LabelerServiceRecord:
        """Read the labeler service record holding label definitions."""

    def put_labeler_service(
        self,
        *,
        record: LabelerServiceRecord,
        definitions: tuple[LabelValueDefinition, ...],
    ) -> LabelerServiceRecord:
        """Write ``definitions`` into the labeler service record."""

    def get_conversation_id(self, *, member_did: str) -> str:
        """Return the direct conversation id shared with ``member_did``."""

    def list_messages(self, *, convo_id: str, limit: int) -> list[ChatMessage]:
        """Return up to ``limit`` messages of one conversation, newest first."""

    def send_message(self, *, convo_id: str, text: str) -> ChatMessage:
        """Send one text message to a conversation."""

    def get_chat_log(self, *, cursor: str | None) -> ChatLogPage:
        """Return messages created since ``cursor``."""

    def list_like_notifications(self, *, limit: int) -> list[LikeNotification]:
        """Return recent ``like`` notifications, newest first."""
