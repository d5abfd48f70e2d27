"""Transport-neutral protocol interfaces used by Label Ledger Service."""

from __future__ import annotations

from typing import Protocol

from services.state.label_ledger.domain import (
    ConditionalAppendResult,
    LabelDefinition,
    LabelEvent,
)


class LabelEventRepository(Protocol):
    """Append-only store of label events partitioned by subject."""

    def list_events(self, *, subject: str) -> list[LabelEvent]:
        """Return every event for ``subject`` in insertion order."""

    def append_if_below_cap(
        self,
        *,
        subject: str,
        value: str,
        source: str,
        max_labels: int,
    ) -> ConditionalAppendResult:
        """Fold, check the cap, and append one grant as a single transaction."""

    def append_revocations(self, *, subject: str, source: str) -> tuple[str, ...]:
        """Append one revoke per active value and return the revoked values."""


class LabelCatalog(Protocol):
    """Shared catalog of label definitions keyed by identifier."""

    def ensure_definition(self, definition: LabelDefinition) -> LabelDefinition:
        """Create ``definition`` when absent; return the stored definition."""
