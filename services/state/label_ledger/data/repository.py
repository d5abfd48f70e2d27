"""Authoritative SQL repository for the append-only label event log."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from threading import Lock
from typing import Any

from sqlalchemy import insert, select, text
from sqlalchemy.orm import Session

from resources.substrates.postgres import SessionProvider
from services.state.label_ledger.domain import (
    AppendStatus,
    ConditionalAppendResult,
    LabelEvent,
)
from services.state.label_ledger.interfaces import LabelEventRepository

from .schema import label_events


def fold_active_labels(events: Iterable[LabelEvent]) -> tuple[str, ...]:
    """Fold events in insertion order into the active value set.

    A grant adds its value, a revoke removes it. A value granted again after a
    revoke moves to the end, so the result is ordered by latest activation.
    """
    active: dict[str, None] = {}
    for event in events:
        if event.negate:
            active.pop(event.value, None)
        else:
            active.setdefault(event.value, None)
    return tuple(active)


class _SubjectLocks:
    """Process-local mutexes keyed by subject."""

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: dict[str, Lock] = {}

    @contextmanager
    def hold(self, subject: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(subject, Lock())
        with lock:
            yield


class SqlLabelEventRepository(LabelEventRepository):
    """SQL repository over the ``label_events`` table.

    Writers for one subject are serialized by a process-local lock and, on
    PostgreSQL, by a transaction-scoped advisory lock so fold-then-append is
    atomic across processes too.
    """

    def __init__(self, sessions: SessionProvider) -> None:
        self._sessions = sessions
        self._subject_locks = _SubjectLocks()

    def list_events(self, *, subject: str) -> list[LabelEvent]:
        """Return every event for ``subject`` in insertion order."""
        with self._sessions.session() as session:
            return self._load_events(session, subject)

    def append_if_below_cap(
        self,
        *,
        subject: str,
        value: str,
        source: str,
        max_labels: int,
    ) -> ConditionalAppendResult:
        """Fold, check the cap, and append one grant as a single transaction."""
        with self._subject_locks.hold(subject), self._sessions.session() as session:
            self._lock_subject(session, subject)
            active = fold_active_labels(self._load_events(session, subject))
            if value in active:
                return ConditionalAppendResult(
                    status=AppendStatus.ALREADY_ACTIVE, active=active
                )
            if len(active) >= max_labels:
                return ConditionalAppendResult(
                    status=AppendStatus.CAP_REACHED, active=active
                )
            session.execute(
                insert(label_events).values(
                    src=source,
                    uri=subject,
                    val=value,
                    neg=False,
                    cts=datetime.now(UTC),
                )
            )
            return ConditionalAppendResult(
                status=AppendStatus.APPENDED, active=(*active, value)
            )

    def append_revocations(self, *, subject: str, source: str) -> tuple[str, ...]:
        """Append one revoke per active value and return the revoked values."""
        with self._subject_locks.hold(subject), self._sessions.session() as session:
            self._lock_subject(session, subject)
            active = fold_active_labels(self._load_events(session, subject))
            if not active:
                return ()
            now = datetime.now(UTC)
            session.execute(
                insert(label_events),
                [
                    {"src": source, "uri": subject, "val": value, "neg": True, "cts": now}
                    for value in active
                ],
            )
            return active

    def _lock_subject(self, session: Session, subject: str) -> None:
        """Take the cross-process per-subject lock where the dialect has one."""
        if session.get_bind().dialect.name != "postgresql":
            return
        session.execute(
            text("SELECT pg_advisory_xact_lock(hashtextextended(:subject, 0))"),
            {"subject": subject},
        )

    def _load_events(self, session: Session, subject: str) -> list[LabelEvent]:
        rows = (
            session.execute(
                select(label_events)
                .where(label_events.c.uri == subject)
                .order_by(label_events.c.id)
            )
            .mappings()
            .all()
        )
        return [_to_event(row) for row in rows]


def _to_event(row: Any) -> LabelEvent:
    """Map one SQL row to a strict domain label event."""
    return LabelEvent(
        id=int(row["id"]),
        source=str(row["src"]),
        subject=str(row["uri"]),
        value=str(row["val"]),
        negate=bool(row["neg"]),
        created_at=_row_dt(row, "cts"),
    )


def _row_dt(row: Any, column: str) -> datetime:
    """Read and normalize one timezone-aware datetime field from SQL row."""
    value = row.get(column)
    if not isinstance(value, datetime):
        raise ValueError(f"expected datetime column for {column}")
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
