"""Transport-neutral protocol interfaces used by Conversation Phase Service."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Protocol

from services.state.conversation_phase.domain import Phase, VerificationState


class HistoryMessage(Protocol):
    """Any chat message view exposing its sender and text."""

    @property
    def sender_did(self) -> str: ...

    @property
    def text(self) -> str: ...


HistoryLoader = Callable[[int], Sequence[HistoryMessage]]
"""Load up to ``n`` conversation messages, newest first."""


class VerificationStateRepository(Protocol):
    """Protocol for durable per-subject verification state."""

    def get_state(self, *, subject: str) -> VerificationState | None:
        """Read the state record for one subject."""

    def upsert_state(
        self,
        *,
        subject: str,
        phase: Phase,
        verified_handle: str | None,
        verified_at: datetime | None,
    ) -> VerificationState:
        """Create or replace the state record for one subject."""
