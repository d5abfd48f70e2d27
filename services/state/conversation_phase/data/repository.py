"""Authoritative SQL repository for per-subject verification state."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as postgres_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from resources.substrates.postgres import SessionProvider
from services.state.conversation_phase.domain import Phase, VerificationState
from services.state.conversation_phase.interfaces import VerificationStateRepository

from .schema import verification_states


class SqlVerificationStateRepository(VerificationStateRepository):
    """SQL repository over the ``verification_states`` table."""

    def __init__(self, sessions: SessionProvider) -> None:
        self._sessions = sessions

    def get_state(self, *, subject: str) -> VerificationState | None:
        """Read the state record for one subject."""
        with self._sessions.session() as session:
            row = (
                session.execute(
                    select(verification_states).where(
                        verification_states.c.subject == subject
                    )
                )
                .mappings()
                .one_or_none()
            )
            return None if row is None else _to_state(row)

    def upsert_state(
        self,
        *,
        subject: str,
        phase: Phase,
        verified_handle: str | None,
        verified_at: datetime | None,
    ) -> VerificationState:
        """Create or replace the state record for one subject."""
        values = {
            "phase": phase.value,
            "verified_handle": verified_handle,
            "verified_at": verified_at,
            "updated_at": datetime.now(UTC),
        }
        with self._sessions.session() as session:
            dialect = session.get_bind().dialect.name
            insert = sqlite_insert if dialect == "sqlite" else postgres_insert
            stmt = insert(verification_states).values(subject=subject, **values)
            stmt = stmt.on_conflict_do_update(
                index_elements=[verification_states.c.subject],
                set_=values,
            )
            session.execute(stmt)
            row = (
                session.execute(
                    select(verification_states).where(
                        verification_states.c.subject == subject
                    )
                )
                .mappings()
                .one()
            )
            return _to_state(row)


def _to_state(row: Any) -> VerificationState:
    """Map one SQL row to a strict domain state record."""
    handle = row.get("verified_handle")
    return VerificationState(
        subject=str(row["subject"]),
        phase=Phase(str(row["phase"])),
        verified_handle=None if handle is None else str(handle),
        verified_at=_optional_dt(row.get("verified_at")),
        updated_at=_required_dt(row, "updated_at"),
    )


def _required_dt(row: Any, column: str) -> datetime:
    value = _optional_dt(row.get(column))
    if value is None:
        raise ValueError(f"expected datetime column for {column}")
    return value


def _optional_dt(value: object) -> datetime | None:
    if value is None:
        return None
    if not isinstance(value, datetime):
        raise ValueError("expected datetime value")
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
